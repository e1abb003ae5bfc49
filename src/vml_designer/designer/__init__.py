"""Design-time surface: shadow/real pairs, sync engine, drag gestures."""

from .pairing import INERT_PROPERTIES, LivePair, Shadow, adopt, create_pair, make_inert
from .sync import GEOMETRY, SyncEngine
from .drag import EDGE, MIN_SIZE, DragSession, ResizeZone, resize_zone, snap
from .canvas import CANVAS_NAME, DesignCanvas

__all__ = [
    # Pairs
    "INERT_PROPERTIES",
    "LivePair",
    "Shadow",
    "adopt",
    "create_pair",
    "make_inert",
    # Sync
    "GEOMETRY",
    "SyncEngine",
    # Drag
    "EDGE",
    "MIN_SIZE",
    "DragSession",
    "ResizeZone",
    "resize_zone",
    "snap",
    # Canvas
    "CANVAS_NAME",
    "DesignCanvas",
]
