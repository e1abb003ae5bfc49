"""Property value parsing and formatting."""

import pytest
from hypothesis import given, strategies as st

from vml_designer.controls import format_value, parse_value
from vml_designer.controls.types import (
    CornerRadius,
    Dock,
    GridDefinitions,
    HorizontalAlignment,
    Thickness,
    format_number,
)
from vml_designer.core import PropertyConversionError


@pytest.mark.unit
@pytest.mark.parametrize("text,expected", [
    ("5", "5"),
    ("5,10", "5,10"),
    ("1 2 3 4", "1,2,3,4"),
    ("2.5,2.5,2.5,2.5", "2.5"),
])
def test_thickness_compact_form(text, expected):
    assert str(Thickness.parse(text)) == expected


@pytest.mark.unit
def test_thickness_two_values_are_horizontal_vertical():
    t = Thickness.parse("5,10")
    assert (t.left, t.top, t.right, t.bottom) == (5, 10, 5, 10)


@pytest.mark.unit
def test_thickness_rejects_three_values():
    with pytest.raises(ValueError):
        Thickness.parse("1,2,3")


@pytest.mark.unit
def test_corner_radius():
    assert str(CornerRadius.parse("4")) == "4"
    assert CornerRadius.parse("1,2,3,4").bottom_left == 4


@pytest.mark.unit
def test_grid_definitions():
    defs = GridDefinitions.parse("auto, *, 2*, 100")
    assert defs.items == ("Auto", "*", "2*", "100")
    assert len(defs) == 4
    with pytest.raises(ValueError):
        GridDefinitions.parse("Auto,wide")


@pytest.mark.unit
def test_format_number():
    assert format_number(10.0) == "10"
    assert format_number(2.5) == "2.5"


@pytest.mark.unit
@pytest.mark.parametrize("raw,expected", [
    ("true", True),
    ("True", True),
    ("1", True),
    ("off", False),
    ("FALSE", False),
])
def test_parse_bool(raw, expected):
    assert parse_value(bool, raw) is expected


@pytest.mark.unit
def test_parse_numbers():
    assert parse_value(int, "3") == 3
    assert parse_value(int, "3.0") == 3
    assert parse_value(float | None, " 2.5 ") == 2.5
    with pytest.raises(PropertyConversionError):
        parse_value(int, "3.5")
    with pytest.raises(PropertyConversionError) as exc:
        parse_value(float, "wide", "Width")
    assert exc.value.prop == "Width"


@pytest.mark.unit
def test_parse_enum_case_insensitive():
    assert parse_value(HorizontalAlignment, "center") is HorizontalAlignment.CENTER
    assert parse_value(Dock | None, "LEFT") is Dock.LEFT
    with pytest.raises(PropertyConversionError):
        parse_value(Dock, "Middle")


@pytest.mark.unit
def test_parse_composite_and_list():
    assert parse_value(Thickness | None, "4") == Thickness(left=4, top=4, right=4, bottom=4)
    assert parse_value(list[str], "a, b,,c") == ["a", "b", "c"]


@pytest.mark.unit
def test_format_value():
    assert format_value(True) == "True"
    assert format_value(100.0) == "100"
    assert format_value(Dock.TOP) == "Top"
    assert format_value(["a", "b"]) == "a,b"
    assert format_value(Thickness.parse("1,2")) == "1,2"


@given(st.floats(allow_nan=False, allow_infinity=False, min_value=-1e9, max_value=1e9))
def test_float_text_is_stable(value):
    """Property test: formatting a parsed float reproduces the same text."""
    text = format_value(value)
    assert format_value(parse_value(float, text)) == text


@given(st.booleans())
def test_bool_text_is_stable(value):
    assert parse_value(bool, format_value(value)) is value
