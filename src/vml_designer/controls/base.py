"""Live control model.

Controls are pydantic models whose fields are the settable properties,
exposed under PascalCase aliases (``is_visible`` -> ``IsVisible``).
Tree links, attached placement values and event handlers live in
private attributes.
"""

from enum import Enum
from typing import Any, Callable, ClassVar, Iterator, NamedTuple

from pydantic import BaseModel, ConfigDict, PrivateAttr
from pydantic.alias_generators import to_pascal

from vml_designer.core import DesignerError
from .types import FontWeight, HorizontalAlignment, Thickness, VerticalAlignment


class Role(str, Enum):
    """How a control hosts children."""

    PANEL = "panel"  # ordered children
    CONTENT = "content"  # single content child
    DECORATOR = "decorator"  # single wrapped child
    LEAF = "leaf"


class Bounds(NamedTuple):
    x: float
    y: float
    width: float
    height: float


def exposed(func: Callable) -> Callable:
    """Mark a control method as invokable from scripts and the control channel."""
    func.__vml_method__ = True
    return func


EventHandler = Callable[["Control", str], Any]


class Control(BaseModel):
    """Base for every live control."""

    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        validate_assignment=True,
        extra="forbid",
    )

    role: ClassVar[Role] = Role.LEAF
    events: ClassVar[tuple[str, ...]] = ()

    name: str | None = None
    width: float | None = None
    height: float | None = None
    margin: Thickness | None = None
    horizontal_alignment: HorizontalAlignment | None = None
    vertical_alignment: VerticalAlignment | None = None
    is_visible: bool = True
    is_enabled: bool = True
    is_hit_test_visible: bool = True
    opacity: float = 1.0
    background: str | None = None
    foreground: str | None = None
    font_size: float | None = None
    font_weight: FontWeight | None = None
    font_family: str | None = None
    tool_tip: str | None = None
    z_index: int = 0

    _parent: "Control | None" = PrivateAttr(default=None)
    _children: list["Control"] = PrivateAttr(default_factory=list)
    _child: "Control | None" = PrivateAttr(default=None)
    _attached: dict[str, Any] = PrivateAttr(default_factory=dict)
    _handlers: dict[str, list[EventHandler]] = PrivateAttr(default_factory=dict)

    # Identity semantics: two live controls are never "equal" by value.
    def __eq__(self, other: object) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    def __repr__(self) -> str:
        return f"<{self.type_name} name={self.name!r}>"

    @property
    def type_name(self) -> str:
        return type(self).__name__

    # ==================== Tree ====================

    @property
    def parent(self) -> "Control | None":
        return self._parent

    @property
    def children(self) -> list["Control"]:
        if self.role is Role.PANEL:
            return list(self._children)
        if self.role in (Role.CONTENT, Role.DECORATOR) and self._child is not None:
            return [self._child]
        return []

    def attach(self, child: "Control") -> None:
        """Attach a child according to this control's role."""
        if child._parent is not None:
            child._parent.detach(child)
        if self.role is Role.PANEL:
            self._children.append(child)
        elif self.role in (Role.CONTENT, Role.DECORATOR):
            if self._child is not None:
                self._child._parent = None
            self._child = child
        else:
            raise DesignerError(f"{self.type_name} cannot host children")
        child._parent = self

    def detach(self, child: "Control") -> bool:
        if self.role is Role.PANEL:
            for index, existing in enumerate(self._children):
                if existing is child:
                    del self._children[index]
                    child._parent = None
                    return True
            return False
        if self._child is child:
            self._child = None
            child._parent = None
            return True
        return False

    def clear_children(self) -> int:
        removed = self.children
        for child in removed:
            self.detach(child)
        return len(removed)

    def walk(self) -> Iterator["Control"]:
        """Depth-first, self first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, name: str) -> "Control | None":
        for control in self.walk():
            if control.name == name:
                return control
        return None

    @property
    def root(self) -> "Control":
        node = self
        while node._parent is not None:
            node = node._parent
        return node

    def path(self) -> str:
        parts = []
        node: Control | None = self
        while node is not None:
            parts.append(node.name or node.type_name)
            node = node._parent
        return "/".join(reversed(parts))

    # ==================== Attached placement ====================

    def set_attached(self, prop: str, value: Any) -> None:
        self._attached[prop] = value

    def get_attached(self, prop: str, default: Any = None) -> Any:
        return self._attached.get(prop, default)

    @property
    def attached(self) -> dict[str, Any]:
        return dict(self._attached)

    def bounds(self) -> Bounds:
        return Bounds(
            float(self._attached.get("Canvas.Left", 0.0)),
            float(self._attached.get("Canvas.Top", 0.0)),
            float(self.width or 0.0),
            float(self.height or 0.0),
        )

    def move_to(self, x: float, y: float) -> None:
        self._attached["Canvas.Left"] = float(x)
        self._attached["Canvas.Top"] = float(y)

    def resize(self, width: float, height: float) -> None:
        self.width = float(width)
        self.height = float(height)

    # ==================== Events ====================

    def add_handler(self, event: str, handler: EventHandler) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def handlers(self, event: str) -> list[EventHandler]:
        return list(self._handlers.get(event, ()))

    def raise_event(self, event: str) -> int:
        """Invoke handlers for an event; returns how many ran."""
        handlers = self.handlers(event)
        for handler in handlers:
            handler(self, event)
        return len(handlers)
