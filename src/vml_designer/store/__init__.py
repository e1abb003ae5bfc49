"""Relational store (SQLite via SQLAlchemy)."""

from .database import Database, now
from .models import (
    Base,
    UiNode,
    UiProperty,
    ScriptRow,
    FlatProperty,
    Setting,
    DialogResult,
    ControlEvent,
    ControlTypeRow,
)
from .property_store import PropertyStore
from .settings_store import SettingsStore

__all__ = [
    # Engine
    "Database",
    "now",
    # Models
    "Base",
    "UiNode",
    "UiProperty",
    "ScriptRow",
    "FlatProperty",
    "Setting",
    "DialogResult",
    "ControlEvent",
    "ControlTypeRow",
    # Stores
    "PropertyStore",
    "SettingsStore",
]
