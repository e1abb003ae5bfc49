"""Pointer drag: move and edge/corner resize of a shadow."""

from dataclasses import dataclass, field
from enum import Enum

from vml_designer.controls import Bounds
from .pairing import Shadow
from .sync import SyncEngine

EDGE = 8.0
MIN_SIZE = 20.0


class ResizeZone(str, Enum):
    NONE = "None"
    N = "N"
    S = "S"
    E = "E"
    W = "W"
    NE = "NE"
    NW = "NW"
    SE = "SE"
    SW = "SW"


def resize_zone(bounds: Bounds, x: float, y: float, edge: float = EDGE) -> ResizeZone:
    """Zone under a point; NONE inside the body or outside the bounds."""
    bx, by, width, height = bounds
    if not (bx <= x <= bx + width and by <= y <= by + height):
        return ResizeZone.NONE
    vertical = "N" if y - by < edge else "S" if by + height - y < edge else ""
    horizontal = "W" if x - bx < edge else "E" if bx + width - x < edge else ""
    return ResizeZone(vertical + horizontal) if vertical or horizontal else ResizeZone.NONE


def snap(value: float, grid: int | None) -> float:
    if not grid:
        return value
    return round(value / grid) * grid


@dataclass
class DragSession:
    """
    One press-move-release gesture on a shadow.

    Geometry is synced to the real control on every move and persisted
    once on release.
    """

    shadow: Shadow
    sync: SyncEngine
    start_x: float
    start_y: float
    zone: ResizeZone = ResizeZone.NONE
    grid: int | None = None
    origin: Bounds = field(init=False)
    released: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self.origin = self.shadow.bounds()

    def move(self, x: float, y: float) -> Bounds:
        if self.released:
            raise RuntimeError("drag already released")
        dx, dy = x - self.start_x, y - self.start_y
        ox, oy, ow, oh = self.origin

        if self.zone is ResizeZone.NONE:
            self.shadow.move_to(snap(ox + dx, self.grid), snap(oy + dy, self.grid))
        else:
            new_x, new_y, new_w, new_h = ox, oy, ow, oh
            zone = self.zone.value
            if "E" in zone:
                new_w = max(MIN_SIZE, snap(ow + dx, self.grid))
            if "S" in zone:
                new_h = max(MIN_SIZE, snap(oh + dy, self.grid))
            if "W" in zone:
                new_w = max(MIN_SIZE, snap(ow - dx, self.grid))
                new_x = ox + ow - new_w
            if "N" in zone:
                new_h = max(MIN_SIZE, snap(oh - dy, self.grid))
                new_y = oy + oh - new_h
            self.shadow.move_to(new_x, new_y)
            self.shadow.resize(new_w, new_h)

        self.sync.sync_geometry(self.shadow)
        return self.shadow.bounds()

    def release(self) -> Bounds:
        """Finish the gesture and write X/Y/Width/Height to the flat record."""
        self.sync.sync_geometry(self.shadow)
        self.sync.capture_geometry(self.shadow)
        self.released = True
        return self.shadow.real.bounds()
