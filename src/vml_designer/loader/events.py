"""Event wiring: On* properties -> handler expressions -> dispatcher."""

import re
from typing import Any, Callable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from vml_designer.controls import Control
from vml_designer.core import get_logger
from vml_designer.store import ControlEvent, Database

logger = get_logger(__name__)

HANDLER_PATTERN = re.compile(r"^\s*([A-Za-z_][\w.]*)\s*(?:\((.*)\))?\s*$", re.DOTALL)
CLOSE_COMMANDS = {"FormClose", "Close"}

Dispatch = Callable[[str, list[Any]], Any]


def parse_handler(expression: str) -> tuple[str, list[str]]:
    """
    Split 'Name(arg1, "arg 2")' into ('Name', ['arg1', 'arg 2']).

    Raises:
        ValueError: If the expression is not a handler call
    """
    match = HANDLER_PATTERN.match(expression)
    if not match:
        raise ValueError(f"Invalid handler expression: {expression!r}")
    name, raw_args = match.group(1), match.group(2)
    if not raw_args or not raw_args.strip():
        return name, []
    args = []
    for part in raw_args.split(","):
        arg = part.strip()
        if len(arg) >= 2 and arg[0] == arg[-1] and arg[0] in "\"'":
            arg = arg[1:-1]
        args.append(arg)
    return name, args


class EventBinder:
    """Binds handler expressions to control events during materialization."""

    def __init__(self, database: Database, dispatch: Dispatch | None = None) -> None:
        self.database = database
        self.dispatch = dispatch
        self._event_map: dict[tuple[str, str], str] | None = None

    def event_map(self) -> dict[tuple[str, str], str]:
        if self._event_map is None:
            try:
                with self.database.session() as session:
                    rows = session.scalars(select(ControlEvent)).all()
                    self._event_map = {(r.control_type, r.event_name): r.target_event for r in rows}
            except SQLAlchemyError as e:
                logger.error("event_map_load_failed", error=str(e))
                return {}
        return self._event_map

    def resolve_event(self, control: Control, prop: str) -> str | None:
        """Control event an On* property refers to, or None."""
        if not prop.startswith("On") or len(prop) <= 2:
            return None
        for cls in type(control).__mro__:
            target = self.event_map().get((cls.__name__, prop))
            if target:
                return target
        suffix = prop[2:]
        return suffix if suffix in type(control).events else None

    def bind(self, control: Control, event: str, expression: str) -> None:
        def handler(sender: Control, fired: str) -> Any:
            return self.fire(sender, expression)

        control.add_handler(event, handler)
        logger.debug("event_bound", control=control.name, control_event=event, handler=expression)

    def fire(self, control: Control, expression: str) -> Any:
        """Route a handler expression through the dispatcher."""
        if self.dispatch is None:
            logger.warning("event_without_dispatcher", control=control.name, handler=expression)
            return None
        try:
            name, args = parse_handler(expression)
        except ValueError as e:
            logger.warning("bad_handler_expression", control=control.name, error=str(e))
            return None
        if name in CLOSE_COMMANDS and not args:
            args = [control.root.name] if control.root.name else []
            name = "FormClose"
        return self.dispatch(name, args)
