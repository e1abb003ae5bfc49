"""Value types used by control properties."""

import re
from enum import Enum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict


def format_number(value: float) -> str:
    """Render 10.0 as '10' and 2.5 as '2.5'."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _numbers(text: str, allowed: tuple[int, ...], kind: str) -> list[float]:
    parts = [p for p in re.split(r"[,\s]+", text.strip()) if p]
    if len(parts) not in allowed:
        raise ValueError(f"{kind} expects {' or '.join(map(str, allowed))} values, got {len(parts)}")
    return [float(p) for p in parts]


class HorizontalAlignment(str, Enum):
    STRETCH = "Stretch"
    LEFT = "Left"
    CENTER = "Center"
    RIGHT = "Right"


class VerticalAlignment(str, Enum):
    STRETCH = "Stretch"
    TOP = "Top"
    CENTER = "Center"
    BOTTOM = "Bottom"


class Orientation(str, Enum):
    VERTICAL = "Vertical"
    HORIZONTAL = "Horizontal"


class Dock(str, Enum):
    LEFT = "Left"
    TOP = "Top"
    RIGHT = "Right"
    BOTTOM = "Bottom"


class ScrollBarVisibility(str, Enum):
    AUTO = "Auto"
    VISIBLE = "Visible"
    HIDDEN = "Hidden"
    DISABLED = "Disabled"


class FontWeight(str, Enum):
    THIN = "Thin"
    LIGHT = "Light"
    NORMAL = "Normal"
    MEDIUM = "Medium"
    SEMI_BOLD = "SemiBold"
    BOLD = "Bold"
    BLACK = "Black"


class TextWrapping(str, Enum):
    NO_WRAP = "NoWrap"
    WRAP = "Wrap"


class Stretch(str, Enum):
    NONE = "None"
    FILL = "Fill"
    UNIFORM = "Uniform"
    UNIFORM_TO_FILL = "UniformToFill"


class Thickness(BaseModel):
    """Edge sizes: '5', '5,10' (horizontal, vertical) or '1,2,3,4'."""

    model_config = ConfigDict(frozen=True)

    left: float = 0
    top: float = 0
    right: float = 0
    bottom: float = 0

    @classmethod
    def parse(cls, text: str) -> "Thickness":
        values = _numbers(text, (1, 2, 4), "Thickness")
        if len(values) == 1:
            return cls(left=values[0], top=values[0], right=values[0], bottom=values[0])
        if len(values) == 2:
            return cls(left=values[0], top=values[1], right=values[0], bottom=values[1])
        return cls(left=values[0], top=values[1], right=values[2], bottom=values[3])

    def __str__(self) -> str:
        if self.left == self.top == self.right == self.bottom:
            return format_number(self.left)
        if self.left == self.right and self.top == self.bottom:
            return f"{format_number(self.left)},{format_number(self.top)}"
        return ",".join(format_number(v) for v in (self.left, self.top, self.right, self.bottom))


class CornerRadius(BaseModel):
    """Corner radii: '4' or 'topLeft,topRight,bottomRight,bottomLeft'."""

    model_config = ConfigDict(frozen=True)

    top_left: float = 0
    top_right: float = 0
    bottom_right: float = 0
    bottom_left: float = 0

    @classmethod
    def parse(cls, text: str) -> "CornerRadius":
        values = _numbers(text, (1, 4), "CornerRadius")
        if len(values) == 1:
            values = values * 4
        return cls(
            top_left=values[0], top_right=values[1], bottom_right=values[2], bottom_left=values[3]
        )

    def __str__(self) -> str:
        values = (self.top_left, self.top_right, self.bottom_right, self.bottom_left)
        if len(set(values)) == 1:
            return format_number(values[0])
        return ",".join(format_number(v) for v in values)


class GridDefinitions(BaseModel):
    """Row or column definitions: 'Auto,*,2*,100'."""

    model_config = ConfigDict(frozen=True)

    PATTERN: ClassVar[re.Pattern] = re.compile(r"^(auto|\d*\.?\d*\*|\d+(\.\d+)?)$", re.IGNORECASE)

    items: tuple[str, ...] = ()

    @classmethod
    def parse(cls, text: str) -> "GridDefinitions":
        items = []
        for part in text.split(","):
            token = part.strip()
            if not token:
                continue
            if not cls.PATTERN.match(token):
                raise ValueError(f"Invalid grid length: {token}")
            items.append("Auto" if token.lower() == "auto" else token)
        return cls(items=tuple(items))

    def __len__(self) -> int:
        return len(self.items)

    def __str__(self) -> str:
        return ",".join(self.items)
