"""Reflection used by the control channel."""

import pytest

from vml_designer.controls import Button, describe, fire_event, invoke_method, list_controls
from vml_designer.controls.library import ListBox, Slider, StackPanel, TextBox
from vml_designer.core import DesignerError, PropertyConversionError


@pytest.fixture
def form():
    body = StackPanel(name="Body")
    body.attach(Button(name="Save", content="Save"))
    body.attach(TextBox(name="Notes", text="hi"))
    body.attach(StackPanel())
    return body


@pytest.mark.unit
def test_list_controls_skips_unnamed(form):
    listed = list_controls([form])

    assert [item["name"] for item in listed] == ["Body", "Save", "Notes"]
    assert listed[1]["type"] == "Button"
    assert listed[1]["path"] == "Body/Save"
    assert set(listed[1]["bounds"]) == {"x", "y", "width", "height"}


@pytest.mark.unit
def test_describe(form):
    info = describe(form.find("Save"))

    props = {prop["name"]: prop for prop in info["properties"]}
    assert props["Content"]["value"] == "Save"
    assert props["Content"]["writable"] is True
    assert info["events"] == ["Click", "PointerPressed", "PointerReleased"]
    assert info["methods"] == [{"name": "click", "parameters": []}]
    assert info["children"] == []


@pytest.mark.unit
def test_describe_method_parameters():
    info = describe(Slider(name="Volume"))
    assert info["methods"] == [{"name": "set_value", "parameters": [{"name": "value", "type": "float"}]}]


@pytest.mark.unit
def test_invoke_method_converts_strings():
    slider = Slider(name="Volume")
    assert invoke_method(slider, "set_value", ["250"]) == 100
    assert invoke_method(slider, "SetValue", [12.5]) == 12.5

    box = TextBox(name="Notes", text="a")
    assert invoke_method(box, "AppendText", ["b"]) == "ab"


@pytest.mark.unit
def test_invoke_method_errors():
    items = ListBox(name="Items")

    with pytest.raises(DesignerError, match="no method"):
        invoke_method(items, "explode")
    with pytest.raises(DesignerError, match="expects 1"):
        invoke_method(items, "add_item")
    with pytest.raises(PropertyConversionError):
        invoke_method(items, "select", ["first"])


@pytest.mark.unit
def test_fire_event_counts_handlers(form):
    save = form.find("Save")
    seen = []
    save.add_handler("Click", lambda control, event: seen.append((control.name, event)))

    assert fire_event(save, "Click") == 1
    assert fire_event(save, "PointerPressed") == 0
    assert seen == [("Save", "Click")]
