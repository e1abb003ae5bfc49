"""The design surface: shadows, their real controls, selection and placement."""

from typing import Iterable

from returns.result import Failure

from vml_designer.controls import Control, ControlRegistry
from vml_designer.controls.library import Canvas
from vml_designer.core import get_logger
from vml_designer.store import SettingsStore
from .drag import DragSession, ResizeZone, resize_zone
from .pairing import LivePair, Shadow, adopt, create_pair
from .sync import SyncEngine

logger = get_logger(__name__)

CANVAS_NAME = "DesignCanvas"
STACK_ORIGIN = 200.0
STACK_STEP = 20.0
STACK_TRIES = 20
CREATE_POSITION = 10.0


class DesignCanvas:
    """
    Holds the live pairs of the current design session.

    Real controls are children of ``surface`` (a Canvas registered in the
    live graph); shadows are kept in z-order, topmost last.
    """

    def __init__(
        self,
        registry: ControlRegistry,
        sync: SyncEngine,
        settings_store: SettingsStore,
        grid_snap: bool = True,
        grid_size: int = 10,
    ) -> None:
        self.registry = registry
        self.sync = sync
        self.settings_store = settings_store
        self.grid_snap = grid_snap
        self.grid_size = grid_size
        self.surface = Canvas(name=CANVAS_NAME)
        self.shadows: list[Shadow] = []
        self._pairs: dict[str, LivePair] = {}
        self._counters: dict[str, int] = {}
        self.selected: Shadow | None = None

    # ==================== Lookup ====================

    def pair(self, name: str) -> LivePair | None:
        return self._pairs.get(name)

    def pair_for(self, control: Control) -> LivePair | None:
        pair = self._pairs.get(control.name) if control.name else None
        return pair if pair is not None and pair.real is control else None

    def names(self) -> list[str]:
        return [shadow.name for shadow in self.shadows]

    def __len__(self) -> int:
        return len(self.shadows)

    def next_name(self, type_name: str) -> str:
        """Type_N using a per-type counter, skipping names in use."""
        while True:
            count = self._counters.get(type_name, 0) + 1
            self._counters[type_name] = count
            candidate = f"{type_name}_{count}"
            if candidate not in self._pairs:
                return candidate

    # ==================== Creation ====================

    def _place(self, type_name: str, name: str, x: float, y: float) -> LivePair:
        pair = create_pair(self.registry, type_name, name)
        pair.shadow.move_to(x, y)
        self.sync.sync_geometry(pair.shadow)
        self._register(pair)
        return pair

    def _register(self, pair: LivePair) -> None:
        self.surface.attach(pair.real)
        self.shadows.append(pair.shadow)
        self._pairs[pair.shadow.name] = pair

    def _stack_position(self) -> float:
        taken = {(shadow.x, shadow.y) for shadow in self.shadows}
        position = STACK_ORIGIN
        for offset in range(STACK_TRIES):
            position = STACK_ORIGIN + STACK_STEP * offset
            if (position, position) not in taken:
                break
        return position

    def add_control(self, type_name: str) -> LivePair | None:
        """Toolbox drop: auto-named control at the next stacked position."""
        if not self.registry.is_known(type_name):
            logger.warning("unknown_control_type", type=type_name)
            return None
        canonical = self.registry.canonical(type_name)
        position = self._stack_position()
        pair = self._place(canonical, self.next_name(canonical), position, position)
        self.select(pair.shadow.name)
        self.sync.flush(pair.real)
        logger.info("control_added", control=pair.shadow.name, x=position, y=position)
        return pair

    def create_control(self, type_name: str, name: str | None = None) -> LivePair | None:
        """Scripted creation at (10, 10); always a new instance."""
        if not self.registry.is_known(type_name):
            logger.warning("unknown_control_type", type=type_name)
            return None
        canonical = self.registry.canonical(type_name)
        if name and name in self._pairs:
            logger.warning("control_name_in_use", control=name)
            return None
        pair = self._place(canonical, name or self.next_name(canonical), CREATE_POSITION, CREATE_POSITION)
        self.sync.flush(pair.real)
        return pair

    # ==================== Removal ====================

    def delete(self, name: str, drop_record: bool = True) -> bool:
        pair = self._pairs.pop(name, None)
        if pair is None:
            return False
        self.surface.detach(pair.real)
        self.shadows = [s for s in self.shadows if s is not pair.shadow]
        if self.selected is pair.shadow:
            self.selected = None
        if drop_record:
            self.sync.store.delete(name)
        logger.info("control_deleted", control=name)
        return True

    def rename(self, old: str, new: str) -> bool:
        """Rename a pair: shadow, real control, lookup key and flat-record rows move together."""
        new = new.strip()
        pair = self._pairs.get(old)
        if pair is None or not new:
            return False
        if new == old:
            return True
        if new in self._pairs:
            logger.warning("control_name_in_use", control=new)
            return False
        if not self.sync.store.rename(old, new):
            return False
        pair.real.name = new
        pair.shadow.name = new
        self._pairs[new] = self._pairs.pop(old)
        if self.selected is pair.shadow:
            self.settings_store.set("selected_control", new)
        logger.info("control_renamed", old=old, new=new)
        return True

    def clear(self) -> int:
        """Remove every pair from the surface; the flat record is untouched."""
        removed = len(self.shadows)
        self.surface.clear_children()
        self.shadows.clear()
        self._pairs.clear()
        self.selected = None
        return removed

    # ==================== Selection / hit testing ====================

    def select(self, name: str | None) -> bool:
        if name is None:
            self.selected = None
            self.settings_store.set("selected_control", "")
            return True
        pair = self._pairs.get(name)
        if pair is None:
            return False
        self.selected = pair.shadow
        self.settings_store.set("selected_control", name)
        return True

    @property
    def selected_name(self) -> str | None:
        return self.selected.name if self.selected else None

    def hit_test(self, x: float, y: float) -> Shadow | None:
        """Topmost visible shadow under a point."""
        for shadow in reversed(self.shadows):
            if shadow.visible and shadow.contains(x, y):
                return shadow
        return None

    def resize_zone(self, name: str, x: float, y: float) -> ResizeZone:
        pair = self._pairs.get(name)
        if pair is None:
            return ResizeZone.NONE
        return resize_zone(pair.shadow.bounds(), x, y)

    def begin_drag(self, x: float, y: float) -> DragSession | None:
        """Press at a point: select the shadow under it and start a move or resize."""
        shadow = self.hit_test(x, y)
        if shadow is None:
            return None
        self.select(shadow.name)
        return DragSession(
            shadow=shadow,
            sync=self.sync,
            start_x=x,
            start_y=y,
            zone=resize_zone(shadow.bounds(), x, y),
            grid=self.grid_size if self.grid_snap else None,
        )

    # ==================== Session ====================

    def begin_session(self) -> int:
        """Fresh design session: clear the canvas and non-reserved flat-record rows."""
        self.clear()
        return self.sync.begin_session()

    def restore(self) -> int:
        """Rebuild pairs from the flat record."""
        restored = 0
        for type_name, name, props in self.sync.saved_controls():
            if name in self._pairs:
                continue
            pair = self._place(self.registry.canonical(type_name), name, 0.0, 0.0)
            for prop, value in props.items():
                result = self.sync.sync_to_real(pair.shadow, prop, value)
                if isinstance(result, Failure):
                    logger.warning("restore_property_skipped", control=name, prop=prop)
            restored += 1
        logger.info("canvas_restored", controls=restored)
        return restored

    def adopt_all(self, controls: Iterable[Control]) -> int:
        """Place materialized controls on the surface as pairs."""
        adopted = 0
        for control in controls:
            if not control.name:
                control.name = self.next_name(control.type_name)
            if control.name in self._pairs:
                logger.warning("control_name_in_use", control=control.name)
                continue
            self._register(adopt(control))
            adopted += 1
        return adopted

