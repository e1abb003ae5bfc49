"""String <-> typed value conversion for persisted properties."""

import types
import typing
from enum import Enum
from typing import Any, Union

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from vml_designer.core import PropertyConversionError
from .types import format_number

TRUE_STRINGS = {"true", "1", "yes", "on"}
FALSE_STRINGS = {"false", "0", "no", "off"}


def unwrap_optional(annotation: Any) -> Any:
    """int | None -> int."""
    origin = typing.get_origin(annotation)
    if origin in (Union, types.UnionType):
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def type_label(annotation: Any) -> str:
    """Short type name for introspection output."""
    inner = unwrap_optional(annotation)
    if typing.get_origin(inner) is list:
        return "list"
    return getattr(inner, "__name__", str(inner))


def _parse_bool(raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in TRUE_STRINGS:
        return True
    if lowered in FALSE_STRINGS:
        return False
    raise ValueError("not a boolean")


def _parse_int(raw: str) -> int:
    number = float(raw.strip())
    if not number.is_integer():
        raise ValueError("not an integer")
    return int(number)


def _parse_enum(enum_type: type[Enum], raw: str) -> Enum:
    wanted = raw.strip().lower()
    for member in enum_type:
        if member.value.lower() == wanted or member.name.lower() == wanted.replace("-", "_"):
            return member
    raise ValueError(f"expected one of {[m.value for m in enum_type]}")


def parse_value(annotation: Any, raw: str, prop: str = "?") -> Any:
    """
    Convert a stored string to the value type a property expects.

    Raises:
        PropertyConversionError: If the string is malformed for the type
    """
    target = unwrap_optional(annotation)
    try:
        if target is bool:
            return _parse_bool(raw)
        if target is int:
            return _parse_int(raw)
        if target is float:
            return float(raw.strip())
        if target is str:
            return raw
        if isinstance(target, type) and issubclass(target, Enum):
            return _parse_enum(target, raw)
        if isinstance(target, type) and hasattr(target, "parse"):
            return target.parse(raw)
        if typing.get_origin(target) is list:
            return [item.strip() for item in raw.split(",") if item.strip()]
        return TypeAdapter(target).validate_python(raw)
    except (ValueError, TypeError, PydanticValidationError) as e:
        raise PropertyConversionError(prop, raw, str(e)) from e


def format_value(value: Any) -> str:
    """Render a property value in the persisted string form."""
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value)
    return str(value)
