"""The ``vml`` backend: one dispatcher command per line.

    # comments and blank lines are skipped
    SetProperty Save Content "Saved!"
    name = GetProperty Save Content
    InfoDialog Title $name

Variables are lower-case names bound with ``name = Command ...``;
``$var`` expands one and ``$1``.. expand positional args.
"""

import shlex
import threading
from typing import Any, Mapping

from vml_designer.core import get_logger
from .base import HostDispatch, ScriptArgs, ScriptError

logger = get_logger(__name__)


def _positional(args: ScriptArgs) -> dict[str, Any]:
    if args is None:
        return {}
    if isinstance(args, Mapping):
        return {str(k): v for k, v in args.items()}
    return {str(i): v for i, v in enumerate(args, start=1)}


class CommandInterpreter:
    """Executes command macros line by line against the dispatcher."""

    name = "vml"
    aliases = ("vml",)
    supports_sessions = True

    def __init__(self, host: HostDispatch) -> None:
        self.host = host
        self._sessions: dict[str, dict[str, Any]] = {}
        self._session_locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def _expand(self, token: str, variables: dict[str, Any]) -> Any:
        if token.startswith("$") and len(token) > 1:
            key = token[1:]
            if key not in variables:
                raise ScriptError(self.name, f"undefined variable {token}")
            return variables[key]
        return token

    def execute_line(self, line: str, variables: dict[str, Any]) -> Any:
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            return None

        target = None
        head, sep, rest = stripped.partition("=")
        if sep and head.strip().isidentifier() and not head.strip()[0].isupper():
            target, stripped = head.strip(), rest.strip()

        try:
            tokens = shlex.split(stripped)
        except ValueError as e:
            raise ScriptError(self.name, f"cannot parse line {line!r}: {e}") from e
        if not tokens:
            return None

        command = tokens[0]
        args = [self._expand(token, variables) for token in tokens[1:]]
        value = self.host(command, args)
        if target:
            variables[target] = value
        return value

    def _run(self, variables: dict[str, Any], source: str, args: ScriptArgs) -> Any:
        variables.update(_positional(args))
        last = None
        for line in source.splitlines():
            last = self.execute_line(line, variables)
        return last

    def run_stateless(self, source: str, args: ScriptArgs = None) -> Any:
        return self._run({}, source, args)

    def run_in_session(self, instance: str, source: str, args: ScriptArgs = None) -> Any:
        with self._lock:
            variables = self._sessions.setdefault(instance, {})
            lock = self._session_locks.setdefault(instance, threading.Lock())
        with lock:
            return self._run(variables, source, args)

    def session_count(self) -> int:
        return len(self._sessions)

    def close(self) -> None:
        with self._lock:
            self._sessions.clear()
            self._session_locks.clear()
