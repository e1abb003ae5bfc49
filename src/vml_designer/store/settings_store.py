"""Typed access to the settings table."""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from vml_designer.core import get_logger
from .database import Database
from .models import Setting

logger = get_logger(__name__)

TRUE_VALUES = {"true", "1", "yes", "on"}


class SettingsStore:
    """Key/value runtime settings (GetSetting / SetSetting)."""

    def __init__(self, database: Database) -> None:
        self.database = database

    def get(self, key: str, default: str | None = None) -> str | None:
        try:
            with self.database.session() as session:
                row = session.get(Setting, key)
                if row is None or row.value is None:
                    return default
                return row.value
        except SQLAlchemyError as e:
            logger.error("setting_read_failed", key=key, error=str(e))
            return default

    def set(self, key: str, value: str, description: str | None = None) -> bool:
        try:
            with self.database.session() as session:
                row = session.get(Setting, key)
                if row is None:
                    session.add(Setting(key=key, value=value, description=description))
                else:
                    row.value = value
                    if description is not None:
                        row.description = description
            return True
        except SQLAlchemyError as e:
            logger.error("setting_write_failed", key=key, error=str(e))
            return False

    def get_int(self, key: str, default: int = 0) -> int:
        value = self.get(key)
        try:
            return int(value) if value is not None else default
        except ValueError:
            return default

    def get_float(self, key: str, default: float = 0.0) -> float:
        value = self.get(key)
        try:
            return float(value) if value is not None else default
        except ValueError:
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        if value is None or value == "":
            return default
        return value.strip().lower() in TRUE_VALUES

    def all(self) -> dict[str, str | None]:
        try:
            with self.database.session() as session:
                return {row.key: row.value for row in session.scalars(select(Setting))}
        except SQLAlchemyError as e:
            logger.error("settings_read_failed", error=str(e))
            return {}
