"""Sync Engine: shadow -> real propagation and flat-record persistence."""

from returns.result import Failure, Result, Success

from vml_designer.controls import Control, ControlRegistry, accessors_for, apply_property, format_value
from vml_designer.controls.convert import parse_value
from vml_designer.core import PropertyConversionError, Unsupported, get_logger
from vml_designer.monitoring import metrics_collector
from vml_designer.store import PropertyStore
from .pairing import INERT_PROPERTIES, Shadow, caption_of

logger = get_logger(__name__)

GEOMETRY = ("X", "Y", "Width", "Height")
TYPE_KEY = "Type"
# Properties flush never writes: identity, geometry (written from bounds) and design-time inertness
FLUSH_SKIP = frozenset(("Name", "Width", "Height", *INERT_PROPERTIES))
POSITION_ATTACHED = ("Canvas.Left", "Canvas.Top")


class SyncEngine:
    """Owns the only shadow -> real copy path and writes to the flat record."""

    def __init__(self, store: PropertyStore, registry: ControlRegistry, reserved_prefix: str = "_") -> None:
        self.store = store
        self.registry = registry
        self.reserved_prefix = reserved_prefix

    # ==================== Shadow -> real ====================

    def sync_geometry(self, shadow: Shadow) -> None:
        """Copy shadow geometry onto the real control."""
        shadow.real.move_to(shadow.x, shadow.y)
        shadow.real.resize(shadow.width, shadow.height)

    def sync_to_real(self, shadow: Shadow, prop: str, value: str) -> Result[object, Unsupported]:
        """Apply one edit made on the shadow to the real control."""
        if prop == "Name":
            return Failure(Unsupported(shadow.type_name, prop, "renames go through DesignCanvas.rename", value))
        if prop in GEOMETRY:
            try:
                number = float(value)
            except ValueError:
                return Failure(Unsupported(shadow.type_name, prop, "not a number", value))
            if prop == "X":
                shadow.x = number
            elif prop == "Y":
                shadow.y = number
            elif prop == "Width":
                shadow.width = number
            else:
                shadow.height = number
            self.sync_geometry(shadow)
            return Success(number)

        if prop in INERT_PROPERTIES:
            try:
                flag = parse_value(bool, value, prop)
            except PropertyConversionError:
                return Failure(Unsupported(shadow.type_name, prop, "not a boolean", value))
            shadow.set_flag(prop, flag)
            return Success(flag)

        result = apply_property(shadow.real, prop, value)
        if isinstance(result, Success):
            shadow.caption = caption_of(shadow.real)
        return result

    def commit_edit(self, shadow: Shadow, prop: str, value: str) -> bool:
        """Sync a non-geometry edit once, then flush the real control."""
        result = self.sync_to_real(shadow, prop, value)
        if isinstance(result, Failure):
            failure = result.failure()
            logger.warning("edit_rejected", control=shadow.name, prop=prop, reason=failure.reason)
            return False
        if prop in INERT_PROPERTIES:
            self.store.set(shadow.name, prop, format_value(shadow.flag(prop)))
        self.flush(shadow.real)
        return True

    # ==================== Persistence ====================

    def capture_geometry(self, shadow: Shadow) -> bool:
        """Write the real control's layout bounds (drag release)."""
        x, y, width, height = shadow.real.bounds()
        written = self.store.set_many(
            shadow.name,
            {
                "X": format_value(x),
                "Y": format_value(y),
                "Width": format_value(width),
                "Height": format_value(height),
            },
        )
        return written == len(GEOMETRY)

    def flush(self, real: Control) -> int:
        """Write every readable property of the real control to the flat record."""
        if not real.name:
            logger.warning("flush_skipped_unnamed", type=real.type_name)
            return 0

        values: dict[str, str] = {TYPE_KEY: real.type_name}
        for name, accessor in accessors_for(type(real)).items():
            if name in FLUSH_SKIP:
                continue
            text = accessor.read_text(real)
            if text is not None:
                values[name] = text
        for prop, value in real.attached.items():
            if prop not in POSITION_ATTACHED:
                values[prop] = format_value(value)

        x, y, width, height = real.bounds()
        values.update(X=format_value(x), Y=format_value(y), Width=format_value(width), Height=format_value(height))

        written = self.store.set_many(real.name, values)
        metrics_collector.record_flush(written)
        logger.debug("flushed", control=real.name, properties=written)
        return written

    def begin_session(self) -> int:
        """Clear non-reserved rows from the flat record."""
        return self.store.clear_session(self.reserved_prefix)

    def saved_controls(self) -> list[tuple[str, str, dict[str, str]]]:
        """(type, name, properties) for every restorable control in the flat record."""
        saved = []
        for name in self.store.control_names():
            if name.startswith(self.reserved_prefix):
                continue
            props = self.store.get_all(name)
            type_name = props.pop(TYPE_KEY, None) or name.split("_", 1)[0]
            if not self.registry.is_known(type_name):
                logger.warning("restore_skipped_unknown_type", control=name, type=type_name)
                continue
            saved.append((type_name, name, props))
        return saved
