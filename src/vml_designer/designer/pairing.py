"""Shadow/real control pairs.

The shadow is the design-time stand-in the user drags around; the real
control is the inert object whose properties are persisted. The shadow
holds a back-pointer to its real control and shares its name and
geometry.
"""

from dataclasses import dataclass
from typing import NamedTuple

from vml_designer.controls import Bounds, Control, ControlRegistry, read_property

INERT_PROPERTIES = ("IsVisible", "IsEnabled", "IsHitTestVisible")
_FLAG_FIELDS = {"IsVisible": "visible", "IsEnabled": "enabled", "IsHitTestVisible": "hit_test_visible"}


@dataclass(eq=False)
class Shadow:
    """Design-time representation of a control."""

    type_name: str
    name: str
    real: Control
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    caption: str = ""
    visible: bool = True
    enabled: bool = True
    hit_test_visible: bool = True

    def bounds(self) -> Bounds:
        return Bounds(self.x, self.y, self.width, self.height)

    def flag(self, prop: str) -> bool:
        """Design-time value of an inert property; the real control always stays inert."""
        return getattr(self, _FLAG_FIELDS[prop])

    def set_flag(self, prop: str, value: bool) -> None:
        setattr(self, _FLAG_FIELDS[prop], value)

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.x + self.width and self.y <= y <= self.y + self.height

    def move_to(self, x: float, y: float) -> None:
        self.x, self.y = float(x), float(y)

    def resize(self, width: float, height: float) -> None:
        self.width, self.height = float(width), float(height)


class LivePair(NamedTuple):
    shadow: Shadow
    real: Control


def make_inert(control: Control) -> None:
    control.is_visible = False
    control.is_enabled = False
    control.is_hit_test_visible = False


def caption_of(control: Control) -> str:
    return read_property(control, "Content") or read_property(control, "Text") or ""


def adopt(real: Control) -> LivePair:
    """Pair an existing control with a new shadow at its current bounds."""
    if not real.name:
        raise ValueError("designer controls need a name")
    visible, enabled, hit_test_visible = real.is_visible, real.is_enabled, real.is_hit_test_visible
    make_inert(real)
    x, y, width, height = real.bounds()
    shadow = Shadow(
        type_name=real.type_name,
        name=real.name,
        real=real,
        x=x,
        y=y,
        width=width,
        height=height,
        caption=caption_of(real),
        visible=visible,
        enabled=enabled,
        hit_test_visible=hit_test_visible,
    )
    return LivePair(shadow, real)


def create_pair(registry: ControlRegistry, type_name: str, name: str) -> LivePair:
    """
    Create a shadow and an inert real control of the same type and name.

    Raises:
        UnknownControlType: If the type has no factory
    """
    real = registry.create(type_name, name, apply_defaults=True)
    return adopt(real)
