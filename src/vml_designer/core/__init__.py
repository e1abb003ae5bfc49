"""Core utilities and infrastructure."""

from .config import Settings, get_settings, resolve_db_path
from .errors import (
    DesignerError,
    ValidationError,
    UnknownControlType,
    NodeNotFound,
    PropertyConversionError,
    Unsupported,
)
from .logging_config import configure_logging, get_logger, LogContext
from .json import extract_json, safe_json_dumps, JSONParseError


def create_container(settings: Settings | None = None, dialogs=None):
    """Create dependency injection container (lazy import to avoid circular deps)."""
    from .container import create_container as _create_container

    return _create_container(settings, dialogs)


def build_runtime(settings: Settings | None = None, dialogs=None):
    """Create a wired Runtime (lazy import to avoid circular deps)."""
    from .container import build_runtime as _build_runtime

    return _build_runtime(settings, dialogs)


__all__ = [
    # Config
    "Settings",
    "get_settings",
    "resolve_db_path",
    # Errors
    "DesignerError",
    "ValidationError",
    "UnknownControlType",
    "NodeNotFound",
    "PropertyConversionError",
    "Unsupported",
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    # JSON
    "extract_json",
    "safe_json_dumps",
    "JSONParseError",
    # DI
    "create_container",
    "build_runtime",
]
