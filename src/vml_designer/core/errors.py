"""Error taxonomy shared across the runtime."""

from dataclasses import dataclass
from typing import Any


class DesignerError(Exception):
    """Base class for runtime errors."""

    pass


class ValidationError(DesignerError):
    """Document or request failed validation."""

    pass


class UnknownControlType(DesignerError):
    """No factory is registered for a control type tag."""

    def __init__(self, type_name: str) -> None:
        super().__init__(f"Unknown control type: {type_name}")
        self.type_name = type_name


class NodeNotFound(DesignerError):
    """A node id or control name does not resolve."""

    pass


class PropertyConversionError(DesignerError):
    """A stored string could not be converted to the property's type."""

    def __init__(self, prop: str, value: str, reason: str) -> None:
        super().__init__(f"Cannot convert {value!r} for {prop}: {reason}")
        self.prop = prop
        self.value = value
        self.reason = reason


@dataclass(frozen=True)
class Unsupported:
    """Property capability lookup miss (for Result pattern)."""

    control_type: str
    prop: str
    reason: str = "not a settable property"
    value: Any | None = None
