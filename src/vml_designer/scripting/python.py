"""In-process Python backend with named namespace sessions."""

import threading
from typing import Any

from vml_designer.core import get_logger
from .base import HostDispatch, ScriptArgs

logger = get_logger(__name__)

RESULT_NAME = "result"


class _Session:
    def __init__(self, namespace: dict[str, Any]) -> None:
        self.namespace = namespace
        self.lock = threading.Lock()


class PythonInterpreter:
    """
    Runs script text with ``exec``.

    Scripts see ``Vml(command, *args)`` (the dispatcher) and ``args``;
    a value bound to ``result`` is returned. A session keeps its
    namespace between calls, including everything bound before a failing
    statement.
    """

    name = "python"
    aliases = ("python", "py")
    supports_sessions = True

    def __init__(self, host: HostDispatch) -> None:
        self.host = host
        self._sessions: dict[str, _Session] = {}
        self._lock = threading.Lock()

    def _vml(self, command: str, *args: Any) -> Any:
        return self.host(command, list(args))

    def _fresh_namespace(self) -> dict[str, Any]:
        return {"__name__": "__vml_script__", "Vml": self._vml}

    def _session(self, instance: str) -> _Session:
        with self._lock:
            session = self._sessions.get(instance)
            if session is None:
                session = _Session(self._fresh_namespace())
                self._sessions[instance] = session
                logger.debug("session_created", interpreter=self.name, instance=instance)
            return session

    @staticmethod
    def _run(namespace: dict[str, Any], source: str, args: ScriptArgs, filename: str) -> Any:
        namespace["args"] = args if args is not None else []
        namespace.pop(RESULT_NAME, None)
        exec(compile(source, filename, "exec"), namespace)
        return namespace.get(RESULT_NAME)

    def run_stateless(self, source: str, args: ScriptArgs = None) -> Any:
        return self._run(self._fresh_namespace(), source, args, "<script>")

    def run_in_session(self, instance: str, source: str, args: ScriptArgs = None) -> Any:
        session = self._session(instance)
        with session.lock:
            return self._run(session.namespace, source, args, f"<{instance}>")

    def session_count(self) -> int:
        return len(self._sessions)

    def close(self) -> None:
        with self._lock:
            self._sessions.clear()
