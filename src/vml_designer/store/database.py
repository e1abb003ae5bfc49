"""Engine, schema creation and short-lived sessions."""

import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine, event, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool, StaticPool

from vml_designer.core import get_logger
from .models import Base, ControlEvent, ControlTypeRow, Setting
from .seeds import DEFAULT_CONTROL_EVENTS, DEFAULT_CONTROL_TYPES, DEFAULT_SETTINGS

logger = get_logger(__name__)

MEMORY = ":memory:"


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    SQLite database holding the relational model.

    Every unit of work opens its own connection (NullPool), so the store
    can be used from the UI thread and script threads alike.
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self.engine = self._create_engine(db_path)
        event.listen(self.engine, "connect", _enable_foreign_keys)

    @staticmethod
    def _create_engine(db_path: str) -> Engine:
        if db_path == MEMORY:
            # A single shared connection keeps the in-memory schema alive
            return create_engine(
                "sqlite://",
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(
            f"sqlite:///{db_path}",
            poolclass=NullPool,
            connect_args={"check_same_thread": False, "timeout": 30},
        )

    def initialize(self) -> None:
        """Create missing tables and insert default rows."""
        Base.metadata.create_all(self.engine)
        with self.session() as session:
            self._seed(session)
        logger.info("store_initialized", db_path=self.db_path)

    @staticmethod
    def _seed(session: Session) -> None:
        existing = set(session.scalars(select(Setting.key)))
        for key, value, description in DEFAULT_SETTINGS:
            if key not in existing:
                session.add(Setting(key=key, value=value, description=description))

        known_events = {
            (row.control_type, row.event_name) for row in session.scalars(select(ControlEvent))
        }
        for control_type, event_name, target, order in DEFAULT_CONTROL_EVENTS:
            if (control_type, event_name) not in known_events:
                session.add(
                    ControlEvent(
                        control_type=control_type,
                        event_name=event_name,
                        target_event=target,
                        display_order=order,
                    )
                )

        known_types = set(session.scalars(select(ControlTypeRow.name)))
        for name, python_type, category, icon, width, height, props, container in DEFAULT_CONTROL_TYPES:
            if name not in known_types:
                session.add(
                    ControlTypeRow(
                        name=name,
                        python_type=python_type,
                        category=category,
                        icon=icon,
                        default_width=width,
                        default_height=height,
                        default_props=props,
                        is_container=container,
                        is_user_defined=False,
                    )
                )

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Transactional session: commit on success, roll back on error."""
        with Session(self.engine, expire_on_commit=False) as session:
            with session.begin():
                yield session

    def dispose(self) -> None:
        self.engine.dispose()


def now() -> float:
    """Timestamp stored in imported_at / created_at columns."""
    return time.time()
