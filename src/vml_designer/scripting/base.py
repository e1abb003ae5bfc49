"""Interpreter backend contract."""

from typing import Any, Callable, Mapping, Protocol, Sequence, Union

from vml_designer.core import DesignerError

# The single host bridge every backend receives: dispatch(command, args)
HostDispatch = Callable[[str, list[Any]], Any]

ScriptArgs = Union[Sequence[Any], Mapping[str, Any], None]


class ScriptError(DesignerError):
    """A script failed inside its interpreter."""

    def __init__(self, interpreter: str, message: str) -> None:
        super().__init__(f"[{interpreter}] {message}")
        self.interpreter = interpreter


class Interpreter(Protocol):
    """
    A script backend.

    ``run_stateless`` gets a fresh environment per call;
    ``run_in_session`` reuses the environment named by the instance tag.
    """

    name: str
    aliases: tuple[str, ...]
    supports_sessions: bool

    def run_stateless(self, source: str, args: ScriptArgs = None) -> Any: ...

    def run_in_session(self, instance: str, source: str, args: ScriptArgs = None) -> Any: ...

    def session_count(self) -> int: ...

    def close(self) -> None: ...
