"""Per-type property accessor tables.

``accessors_for(cls)`` is built once per control class from its pydantic
fields. Resolution returns a ``returns`` Result so callers decide how to
treat an unsupported property.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from pydantic.alias_generators import to_pascal
from returns.result import Failure, Result, Success

from vml_designer.core import PropertyConversionError, Unsupported
from .base import Control
from .convert import format_value, parse_value, type_label
from .types import Dock

# Owner.Property placement values stored on the child.
ATTACHED_PROPERTIES: dict[str, type] = {
    "Grid.Row": int,
    "Grid.Column": int,
    "Grid.RowSpan": int,
    "Grid.ColumnSpan": int,
    "DockPanel.Dock": Dock,
    "Canvas.Left": float,
    "Canvas.Top": float,
}


@dataclass(frozen=True)
class PropertyAccessor:
    """Typed getter/setter for one property of one control class."""

    name: str
    field: str
    annotation: Any
    writable: bool = True

    @property
    def type_label(self) -> str:
        return type_label(self.annotation)

    def read(self, control: Control) -> Any:
        return getattr(control, self.field)

    def read_text(self, control: Control) -> str | None:
        value = self.read(control)
        return None if value is None else format_value(value)

    def write(self, control: Control, raw: str) -> Any:
        """
        Convert and assign a stored string.

        Raises:
            PropertyConversionError: If the string is malformed for the type
        """
        if not self.writable:
            raise PropertyConversionError(self.name, raw, "read-only")
        value = parse_value(self.annotation, raw, self.name)
        setattr(control, self.field, value)
        return value


@lru_cache(maxsize=None)
def accessors_for(cls: type[Control]) -> dict[str, PropertyAccessor]:
    """Accessor table keyed by PascalCase property name."""
    table: dict[str, PropertyAccessor] = {}
    for field_name, info in cls.model_fields.items():
        alias = info.alias or to_pascal(field_name)
        table[alias] = PropertyAccessor(alias, field_name, info.annotation)
    return table


@lru_cache(maxsize=None)
def _folded(cls: type[Control]) -> dict[str, PropertyAccessor]:
    return {name.lower(): accessor for name, accessor in accessors_for(cls).items()}


def resolve(cls: type[Control], prop: str) -> Result[PropertyAccessor, Unsupported]:
    """Find the accessor for a property name (case-insensitive)."""
    accessor = accessors_for(cls).get(prop) or _folded(cls).get(prop.lower())
    if accessor is None:
        return Failure(Unsupported(cls.__name__, prop))
    return Success(accessor)


def apply_property(control: Control, prop: str, raw: str) -> Result[Any, Unsupported]:
    """
    Apply one persisted property to a live control.

    Dotted names (Grid.Row) are stored as attached placement values.
    Returns Failure for unknown names and malformed values; the control
    is left unchanged in both cases.
    """
    if "." in prop:
        return _apply_attached(control, prop, raw)

    def _write(accessor: PropertyAccessor) -> Result[Any, Unsupported]:
        try:
            return Success(accessor.write(control, raw))
        except PropertyConversionError as e:
            return Failure(Unsupported(control.type_name, prop, e.reason, raw))

    return resolve(type(control), prop).bind(_write)


def _apply_attached(control: Control, prop: str, raw: str) -> Result[Any, Unsupported]:
    kind = ATTACHED_PROPERTIES.get(prop)
    if kind is None:
        return Failure(Unsupported(control.type_name, prop, "unknown attached property"))
    try:
        value = parse_value(kind, raw, prop)
    except PropertyConversionError as e:
        return Failure(Unsupported(control.type_name, prop, e.reason, raw))
    control.set_attached(prop, value)
    return Success(value)


def read_property(control: Control, prop: str) -> str | None:
    """Current value of a property (or attached value) as a string."""
    if "." in prop:
        value = control.get_attached(prop)
        return None if value is None else format_value(value)
    result = resolve(type(control), prop)
    if isinstance(result, Success):
        return result.unwrap().read_text(control)
    return None
