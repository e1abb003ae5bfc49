"""Live control model, value conversion and type registry."""

from .base import Bounds, Control, Role, exposed
from .library import BUILTIN_CONTROLS, Button, Canvas, Window
from .accessors import (
    ATTACHED_PROPERTIES,
    PropertyAccessor,
    accessors_for,
    apply_property,
    read_property,
    resolve,
)
from .convert import format_value, parse_value
from .registry import ControlDescriptor, ControlRegistry, parse_default_props
from .graph import LiveGraph
from .introspect import describe, fire_event, invoke_method, list_controls

__all__ = [
    # Model
    "Bounds",
    "Control",
    "Role",
    "exposed",
    "BUILTIN_CONTROLS",
    "Button",
    "Canvas",
    "Window",
    # Accessors
    "ATTACHED_PROPERTIES",
    "PropertyAccessor",
    "accessors_for",
    "apply_property",
    "read_property",
    "resolve",
    # Conversion
    "format_value",
    "parse_value",
    # Registry
    "ControlDescriptor",
    "ControlRegistry",
    "parse_default_props",
    # Graph
    "LiveGraph",
    # Introspection
    "describe",
    "fire_event",
    "invoke_method",
    "list_controls",
]
