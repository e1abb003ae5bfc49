"""Built-in control classes."""

from typing import ClassVar

from pydantic import Field

from .base import Control, Role, exposed
from .types import (
    CornerRadius,
    GridDefinitions,
    Orientation,
    ScrollBarVisibility,
    Stretch,
    TextWrapping,
    Thickness,
)


# ==================== Content holders ====================

class ContentControl(Control):
    role: ClassVar[Role] = Role.CONTENT

    content: str | None = None
    padding: Thickness | None = None


class Window(ContentControl):
    events: ClassVar[tuple[str, ...]] = ("Opened", "Closing", "Closed")

    title: str = ""
    is_modal: bool = False
    can_resize: bool = True

    @exposed
    def close(self) -> None:
        self.raise_event("Closing")
        self.raise_event("Closed")


class Button(ContentControl):
    events: ClassVar[tuple[str, ...]] = ("Click", "PointerPressed", "PointerReleased")

    is_default: bool = False
    is_cancel: bool = False

    @exposed
    def click(self) -> int:
        """Simulate a click; returns the number of handlers run."""
        return self.raise_event("Click")


class Label(ContentControl):
    target: str | None = None


class ToggleControl(ContentControl):
    events: ClassVar[tuple[str, ...]] = ("Checked", "Unchecked")

    is_checked: bool = False

    @exposed
    def toggle(self) -> bool:
        self.is_checked = not self.is_checked
        self.raise_event("Checked" if self.is_checked else "Unchecked")
        return self.is_checked


class CheckBox(ToggleControl):
    is_three_state: bool = False


class RadioButton(ToggleControl):
    group_name: str | None = None


class ToggleSwitch(ToggleControl):
    on_content: str | None = None
    off_content: str | None = None


class ScrollViewer(ContentControl):
    horizontal_scroll_bar_visibility: ScrollBarVisibility | None = None
    vertical_scroll_bar_visibility: ScrollBarVisibility | None = None


# ==================== Text ====================

class TextBlock(Control):
    text: str = ""
    text_wrapping: TextWrapping | None = None
    padding: Thickness | None = None


class TextBox(Control):
    events: ClassVar[tuple[str, ...]] = ("TextChanged", "GotFocus", "LostFocus", "KeyDown")

    text: str = ""
    watermark: str | None = None
    is_read_only: bool = False
    accepts_return: bool = False
    max_length: int = 0
    text_wrapping: TextWrapping | None = None

    @exposed
    def clear(self) -> None:
        self.text = ""
        self.raise_event("TextChanged")

    @exposed
    def append_text(self, value: str) -> str:
        self.text = self.text + value
        self.raise_event("TextChanged")
        return self.text


# ==================== Item lists ====================

class ItemsControl(Control):
    events: ClassVar[tuple[str, ...]] = ("SelectionChanged",)

    items: list[str] = Field(default_factory=list)
    selected_index: int = -1

    @exposed
    def add_item(self, item: str) -> int:
        self.items = [*self.items, item]
        return len(self.items)

    @exposed
    def clear_items(self) -> None:
        self.items = []
        self.selected_index = -1

    @exposed
    def select(self, index: int) -> str | None:
        if not -1 <= index < len(self.items):
            raise IndexError(f"index {index} out of range")
        self.selected_index = index
        self.raise_event("SelectionChanged")
        return self.items[index] if index >= 0 else None


class ComboBox(ItemsControl):
    placeholder_text: str | None = None
    is_drop_down_open: bool = False


class ListBox(ItemsControl):
    events: ClassVar[tuple[str, ...]] = ("SelectionChanged", "DoubleTapped")


# ==================== Panels ====================

class Panel(Control):
    role: ClassVar[Role] = Role.PANEL


class StackPanel(Panel):
    orientation: Orientation = Orientation.VERTICAL
    spacing: float = 0


class Grid(Panel):
    row_definitions: GridDefinitions | None = None
    column_definitions: GridDefinitions | None = None
    show_grid_lines: bool = False


class Canvas(Panel):
    pass


class DockPanel(Panel):
    last_child_fill: bool = True


class Border(Control):
    role: ClassVar[Role] = Role.DECORATOR

    border_brush: str | None = None
    border_thickness: Thickness | None = None
    corner_radius: CornerRadius | None = None
    padding: Thickness | None = None


# ==================== Range / display ====================

class RangeControl(Control):
    minimum: float = 0
    maximum: float = 100
    value: float = 0


class Slider(RangeControl):
    events: ClassVar[tuple[str, ...]] = ("ValueChanged",)

    tick_frequency: float | None = None
    is_snap_to_tick_enabled: bool = False

    @exposed
    def set_value(self, value: float) -> float:
        self.value = min(max(value, self.minimum), self.maximum)
        self.raise_event("ValueChanged")
        return self.value


class ProgressBar(RangeControl):
    is_indeterminate: bool = False
    show_progress_text: bool = False


class Image(Control):
    source: str | None = None
    stretch: Stretch | None = None


class Rectangle(Control):
    fill: str | None = None
    stroke: str | None = None
    stroke_thickness: float | None = None


BUILTIN_CONTROLS: dict[str, type[Control]] = {
    cls.__name__: cls
    for cls in (
        Window,
        Button,
        Label,
        CheckBox,
        RadioButton,
        ToggleSwitch,
        ScrollViewer,
        TextBlock,
        TextBox,
        ComboBox,
        ListBox,
        StackPanel,
        Grid,
        Canvas,
        DockPanel,
        Border,
        Slider,
        ProgressBar,
        Image,
        Rectangle,
    )
}
