"""Control type registry: type tag -> factory + descriptor."""

from dataclasses import dataclass, field

from returns.result import Failure
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from vml_designer.core import UnknownControlType, get_logger
from vml_designer.store import ControlTypeRow, Database
from .accessors import apply_property
from .base import Control
from .library import BUILTIN_CONTROLS

logger = get_logger(__name__)


def parse_default_props(text: str | None) -> dict[str, str]:
    """'Content=Button;Text=Hi' -> {'Content': 'Button', 'Text': 'Hi'}."""
    result: dict[str, str] = {}
    if not text:
        return result
    for pair in text.split(";"):
        key, sep, value = pair.partition("=")
        if sep and key.strip():
            result[key.strip()] = value.strip()
    return result


@dataclass(frozen=True)
class ControlDescriptor:
    """Static metadata for a control type."""

    name: str
    python_type: str
    category: str = "Common"
    icon: str | None = None
    default_width: float | None = None
    default_height: float | None = None
    default_props: dict[str, str] = field(default_factory=dict)
    is_container: bool = False
    is_user_defined: bool = False


class ControlRegistry:
    """Creates live controls by type tag."""

    def __init__(self, factories: dict[str, type[Control]] | None = None) -> None:
        self._factories: dict[str, type[Control]] = dict(factories or BUILTIN_CONTROLS)
        self._descriptors: dict[str, ControlDescriptor] = {}

    def load_descriptors(self, database: Database) -> int:
        """Read descriptors from the control_types table."""
        try:
            with database.session() as session:
                rows = session.scalars(select(ControlTypeRow)).all()
                for row in rows:
                    self._descriptors[row.name] = ControlDescriptor(
                        name=row.name,
                        python_type=row.python_type,
                        category=row.category,
                        icon=row.icon,
                        default_width=row.default_width,
                        default_height=row.default_height,
                        default_props=parse_default_props(row.default_props),
                        is_container=bool(row.is_container),
                        is_user_defined=bool(row.is_user_defined),
                    )
        except SQLAlchemyError as e:
            logger.error("descriptor_load_failed", error=str(e))
            return 0
        logger.debug("descriptors_loaded", count=len(self._descriptors))
        return len(self._descriptors)

    def register(self, cls: type[Control], descriptor: ControlDescriptor | None = None) -> None:
        self._factories[cls.__name__] = cls
        if descriptor is not None:
            self._descriptors[cls.__name__] = descriptor

    def canonical(self, type_name: str) -> str | None:
        """Registered spelling of a type tag (case-insensitive)."""
        if type_name in self._factories:
            return type_name
        lowered = type_name.lower()
        for known in self._factories:
            if known.lower() == lowered:
                return known
        return None

    def is_known(self, type_name: str) -> bool:
        return self.canonical(type_name) is not None

    def factory(self, type_name: str) -> type[Control]:
        canonical = self.canonical(type_name)
        if canonical is None:
            raise UnknownControlType(type_name)
        return self._factories[canonical]

    def descriptor(self, type_name: str) -> ControlDescriptor | None:
        canonical = self.canonical(type_name)
        return self._descriptors.get(canonical) if canonical else None

    def create(self, type_name: str, name: str | None = None, apply_defaults: bool = False) -> Control:
        """
        Instantiate a control.

        Args:
            type_name: Type tag (Button, StackPanel, ...)
            name: Control name
            apply_defaults: Fill default size and default properties from the descriptor

        Raises:
            UnknownControlType: If no factory is registered for the tag
        """
        control = self.factory(type_name)(name=name)
        if apply_defaults:
            self.apply_defaults(control)
        return control

    def apply_defaults(self, control: Control) -> None:
        descriptor = self.descriptor(control.type_name)
        if descriptor is None:
            return
        if control.width is None and descriptor.default_width is not None:
            control.width = descriptor.default_width
        if control.height is None and descriptor.default_height is not None:
            control.height = descriptor.default_height
        for prop, raw in descriptor.default_props.items():
            result = apply_property(control, prop, raw)
            if isinstance(result, Failure):
                logger.warning("default_property_skipped", type=control.type_name, prop=prop)

    def types(self) -> list[str]:
        return sorted(self._factories)

    def by_category(self) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {}
        for type_name in self.types():
            descriptor = self._descriptors.get(type_name)
            category = descriptor.category if descriptor else "Other"
            grouped.setdefault(category, []).append(type_name)
        return grouped
