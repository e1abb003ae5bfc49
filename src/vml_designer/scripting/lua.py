"""Embedded Lua backend (lupa) with one LuaRuntime per instance tag."""

import threading
from typing import Any, Mapping

import lupa
from lupa import LuaError, LuaRuntime

from vml_designer.core import get_logger
from .base import HostDispatch, ScriptArgs, ScriptError

logger = get_logger(__name__)

RESULT_NAME = "result"


def from_lua(value: Any) -> Any:
    """Lua tables become lists (keys 1..n) or dicts; everything else passes through."""
    if lupa.lua_type(value) != "table":
        return value
    items = {key: from_lua(item) for key, item in value.items()}
    count = len(items)
    if all(isinstance(key, int) for key in items) and sorted(items) == list(range(1, count + 1)):
        return [items[index] for index in range(1, count + 1)]
    return items


class _Session:
    def __init__(self, runtime: LuaRuntime) -> None:
        self.runtime = runtime
        self.lock = threading.Lock()


class LuaInterpreter:
    """
    Runs Lua chunks.

    Scripts see ``Vml(command, ...)`` (the dispatcher) and an ``args``
    table; the chunk's return value, or else the global ``result``, is
    returned. Globals set before a failing statement survive in a session.
    """

    name = "lua"
    aliases = ("lua",)
    supports_sessions = True

    def __init__(self, host: HostDispatch) -> None:
        self.host = host
        self._sessions: dict[str, _Session] = {}
        self._lock = threading.Lock()

    def _to_lua(self, runtime: LuaRuntime, value: Any) -> Any:
        if isinstance(value, (list, tuple, dict)):
            return runtime.table_from(value, recursive=True)
        return value

    def _new_runtime(self) -> LuaRuntime:
        runtime = LuaRuntime(unpack_returned_tuples=True)

        def vml(command: Any, *args: Any) -> Any:
            result = self.host(str(command), [from_lua(arg) for arg in args])
            return self._to_lua(runtime, result)

        runtime.globals()["Vml"] = vml
        return runtime

    def _session(self, instance: str) -> _Session:
        with self._lock:
            session = self._sessions.get(instance)
            if session is None:
                session = _Session(self._new_runtime())
                self._sessions[instance] = session
                logger.debug("session_created", interpreter=self.name, instance=instance)
            return session

    def _run(self, runtime: LuaRuntime, source: str, args: ScriptArgs) -> Any:
        lua_globals = runtime.globals()
        if isinstance(args, Mapping):
            lua_globals["args"] = runtime.table_from(dict(args))
        else:
            lua_globals["args"] = runtime.table_from(list(args or []))
        lua_globals[RESULT_NAME] = None
        try:
            returned = runtime.execute(source)
        except LuaError as e:
            raise ScriptError(self.name, str(e)) from e
        if returned is None:
            returned = lua_globals[RESULT_NAME]
        return from_lua(returned)

    def run_stateless(self, source: str, args: ScriptArgs = None) -> Any:
        return self._run(self._new_runtime(), source, args)

    def run_in_session(self, instance: str, source: str, args: ScriptArgs = None) -> Any:
        session = self._session(instance)
        with session.lock:
            return self._run(session.runtime, source, args)

    def session_count(self) -> int:
        return len(self._sessions)

    def close(self) -> None:
        with self._lock:
            self._sessions.clear()
