"""Flat property record and raw SQL access.

Every failure is contained here: callers get None, {}, [], False or -1
and the error is logged.
"""

from typing import Any

from sqlalchemy import delete, distinct, select, text
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.exc import SQLAlchemyError

from vml_designer.core import get_logger
from vml_designer.monitoring import metrics_collector
from .database import Database, now
from .models import DialogResult, FlatProperty

logger = get_logger(__name__)


def _upsert(name: str, prop: str, value: str | None):
    stmt = insert(FlatProperty).values(
        control_name=name, property_name=prop, property_value=value
    )
    return stmt.on_conflict_do_update(
        index_elements=[FlatProperty.control_name, FlatProperty.property_name],
        set_={"property_value": stmt.excluded.property_value},
    )


class PropertyStore:
    """Reads and writes the flat (control_name, property_name) -> value record."""

    def __init__(self, database: Database) -> None:
        self.database = database

    def _failed(self, op: str, error: Exception, **context: Any) -> None:
        logger.error("store_operation_failed", op=op, error=str(error), **context)
        metrics_collector.record_error(type(error).__name__, "store")

    def set(self, name: str, prop: str, value: str | None) -> bool:
        """Write one value; last write wins."""
        try:
            with self.database.session() as session:
                session.execute(_upsert(name, prop, value))
            return True
        except SQLAlchemyError as e:
            self._failed("set", e, control=name, prop=prop)
            return False

    def set_many(self, name: str, values: dict[str, str | None]) -> int:
        """Write several values for one control in a single transaction."""
        if not values:
            return 0
        try:
            with self.database.session() as session:
                for prop, value in values.items():
                    session.execute(_upsert(name, prop, value))
            return len(values)
        except SQLAlchemyError as e:
            self._failed("set_many", e, control=name)
            return 0

    def get(self, name: str, prop: str) -> str | None:
        try:
            with self.database.session() as session:
                return session.scalar(
                    select(FlatProperty.property_value).where(
                        FlatProperty.control_name == name,
                        FlatProperty.property_name == prop,
                    )
                )
        except SQLAlchemyError as e:
            self._failed("get", e, control=name, prop=prop)
            return None

    def get_all(self, name: str) -> dict[str, str]:
        try:
            with self.database.session() as session:
                rows = session.execute(
                    select(FlatProperty.property_name, FlatProperty.property_value).where(
                        FlatProperty.control_name == name
                    )
                )
                return {prop: value for prop, value in rows if value is not None}
        except SQLAlchemyError as e:
            self._failed("get_all", e, control=name)
            return {}

    def control_names(self) -> list[str]:
        """Distinct control names, sorted."""
        try:
            with self.database.session() as session:
                return list(
                    session.scalars(
                        select(distinct(FlatProperty.control_name)).order_by(
                            FlatProperty.control_name
                        )
                    )
                )
        except SQLAlchemyError as e:
            self._failed("control_names", e)
            return []

    def delete(self, name: str) -> bool:
        """Drop every row for a control."""
        try:
            with self.database.session() as session:
                session.execute(delete(FlatProperty).where(FlatProperty.control_name == name))
            return True
        except SQLAlchemyError as e:
            self._failed("delete", e, control=name)
            return False

    def rename(self, old: str, new: str) -> bool:
        if old == new:
            return True
        try:
            with self.database.session() as session:
                rows = session.scalars(
                    select(FlatProperty).where(FlatProperty.control_name == old)
                ).all()
                for row in rows:
                    session.execute(_upsert(new, row.property_name, row.property_value))
                    session.delete(row)
            return True
        except SQLAlchemyError as e:
            self._failed("rename", e, old=old, new=new)
            return False

    def clear_session(self, reserved_prefix: str = "_") -> int:
        """Delete rows whose control name does not start with the reserved prefix."""
        try:
            with self.database.session() as session:
                result = session.execute(
                    delete(FlatProperty).where(
                        ~FlatProperty.control_name.startswith(reserved_prefix, autoescape=True)
                    )
                )
                cleared = result.rowcount
            logger.info("session_cleared", rows=cleared, reserved_prefix=reserved_prefix)
            return cleared
        except SQLAlchemyError as e:
            self._failed("clear_session", e)
            return -1

    # ==================== Dialog results ====================

    def record_dialog_result(self, value: Any, key: str = "last_result") -> bool:
        stored = "" if value is None else str(value)
        try:
            with self.database.session() as session:
                session.merge(DialogResult(key=key, value=stored, timestamp=now()))
            return True
        except SQLAlchemyError as e:
            self._failed("record_dialog_result", e, key=key)
            return False

    def dialog_result(self, key: str = "last_result") -> str | None:
        try:
            with self.database.session() as session:
                row = session.get(DialogResult, key)
                return row.value if row else None
        except SQLAlchemyError as e:
            self._failed("dialog_result", e, key=key)
            return None

    # ==================== Raw SQL ====================

    def query(self, sql: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Run a SELECT and return rows as dicts."""
        try:
            with self.database.session() as session:
                result = session.execute(text(sql), params or {})
                return [dict(row) for row in result.mappings()]
        except SQLAlchemyError as e:
            self._failed("query", e, sql=sql)
            return []

    def execute(self, sql: str, params: dict[str, Any] | None = None) -> int:
        """Run a statement and return the affected row count."""
        try:
            with self.database.session() as session:
                result = session.execute(text(sql), params or {})
                return result.rowcount
        except SQLAlchemyError as e:
            self._failed("execute", e, sql=sql)
            return -1
