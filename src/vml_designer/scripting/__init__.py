"""Script registry, interpreter backends and the execution bridge."""

from .registry import Script, ScriptRegistry
from .base import HostDispatch, Interpreter, ScriptArgs, ScriptError
from .python import PythonInterpreter
from .lua import LuaInterpreter
from .command import CommandInterpreter
from .process import PROCESS_BACKENDS, ProcessInterpreter, ProcessResult
from .bridge import ScriptBridge, split_tag

__all__ = [
    # Registry
    "Script",
    "ScriptRegistry",
    # Backends
    "HostDispatch",
    "Interpreter",
    "ScriptArgs",
    "ScriptError",
    "PythonInterpreter",
    "LuaInterpreter",
    "CommandInterpreter",
    "PROCESS_BACKENDS",
    "ProcessInterpreter",
    "ProcessResult",
    # Bridge
    "ScriptBridge",
    "split_tag",
]
