"""
Script Registry
Named scripts available to the dispatcher fallback and event handlers
"""

import logging
import threading
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class Script(BaseModel):
    """A registered script."""

    name: str = Field(min_length=1)
    interpreter: str
    instance: Optional[str] = None
    content: str = ""
    source_file: Optional[str] = None

    @property
    def tag(self) -> str:
        """Interpreter tag with the instance appended ('python counter')."""
        if self.instance:
            return f"{self.interpreter} {self.instance}"
        return self.interpreter


class ScriptRegistry:
    """
    Per-runtime script table.
    Re-registering a name overwrites the previous script.
    """

    def __init__(self):
        self.scripts: Dict[str, Script] = {}
        self._lock = threading.Lock()

    def register(self, script: Script) -> None:
        """
        Register (or replace) a script.

        Args:
            script: Script definition
        """
        with self._lock:
            replaced = script.name in self.scripts
            self.scripts[script.name] = script
        if replaced:
            logger.debug(f"Replaced script: {script.name}")
        else:
            logger.debug(f"Registered script: {script.name} ({script.tag})")

    def unregister(self, name: str) -> bool:
        with self._lock:
            return self.scripts.pop(name, None) is not None

    def unregister_source(self, source_file: str) -> int:
        """Drop every script loaded from one source file"""
        with self._lock:
            names = [name for name, s in self.scripts.items() if s.source_file == source_file]
            for name in names:
                del self.scripts[name]
        if names:
            logger.debug(f"Unregistered {len(names)} scripts from {source_file}")
        return len(names)

    def get(self, name: str) -> Optional[Script]:
        """Exact-name lookup"""
        return self.scripts.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self.scripts

    def list_all(self, source_file: Optional[str] = None) -> List[Script]:
        """List scripts, optionally only those from one source file"""
        scripts = list(self.scripts.values())
        if source_file:
            scripts = [s for s in scripts if s.source_file == source_file]
        return scripts

    def clear(self) -> None:
        with self._lock:
            self.scripts.clear()
