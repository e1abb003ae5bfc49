"""Command dispatch, UI-thread marshalling and host-side services."""

from .ui_thread import UIThread
from .dialogs import DialogProvider, HeadlessDialogs
from .shell import run_shell
from .dispatcher import CommandSpec, Dispatcher, command

__all__ = [
    "UIThread",
    "DialogProvider",
    "HeadlessDialogs",
    "run_shell",
    "CommandSpec",
    "Dispatcher",
    "command",
]
