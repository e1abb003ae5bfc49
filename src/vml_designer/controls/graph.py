"""The live object graph: materialized roots addressed by name."""

from typing import Iterator

from .base import Control


class LiveGraph:
    """
    Top-level live controls (open windows and the design canvas).

    Owned by the UI thread; other threads reach it through UIThread.invoke.
    """

    def __init__(self) -> None:
        self._roots: list[Control] = []

    @property
    def roots(self) -> list[Control]:
        return list(self._roots)

    def add_root(self, control: Control) -> None:
        if all(existing is not control for existing in self._roots):
            self._roots.append(control)

    def remove_root(self, control: Control) -> bool:
        for index, existing in enumerate(self._roots):
            if existing is control:
                del self._roots[index]
                return True
        return False

    def find(self, name: str) -> Control | None:
        """First control with this name, searching roots in insertion order."""
        for root in self._roots:
            found = root.find(name)
            if found is not None:
                return found
        return None

    def find_root(self, name: str) -> Control | None:
        return next((root for root in self._roots if root.name == name), None)

    def walk(self) -> Iterator[Control]:
        for root in self._roots:
            yield from root.walk()

    def clear(self) -> None:
        self._roots.clear()

    def __len__(self) -> int:
        return len(self._roots)
