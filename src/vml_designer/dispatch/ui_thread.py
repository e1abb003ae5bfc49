"""UI-affinity thread: the only thread that touches the live graph."""

import queue
import threading
from concurrent.futures import Future
from typing import Any, Callable

from vml_designer.core import get_logger

logger = get_logger(__name__)

_STOP = object()


class UIThread:
    """
    Single worker that owns the live graph.

    ``invoke`` marshals a call onto the thread and blocks until it
    finishes; calls made on the UI thread itself run inline.
    """

    def __init__(self, name: str = "vml-ui") -> None:
        self.name = name
        self._queue: queue.Queue = queue.Queue()
        self._thread: threading.Thread | None = None
        self._ident: int | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        ready = threading.Event()
        self._thread = threading.Thread(target=self._loop, args=(ready,), name=self.name, daemon=True)
        self._thread.start()
        ready.wait()
        logger.debug("ui_thread_started", thread=self.name)

    def _loop(self, ready: threading.Event) -> None:
        self._ident = threading.get_ident()
        ready.set()
        while True:
            item = self._queue.get()
            if item is _STOP:
                break
            func, future = item
            if not future.set_running_or_notify_cancel():
                continue
            try:
                future.set_result(func())
            except Exception as e:
                future.set_exception(e)
        self._ident = None

    def is_ui_thread(self) -> bool:
        return self._ident is not None and threading.get_ident() == self._ident

    def post(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        """Queue a call without waiting for it."""
        if not self.running:
            raise RuntimeError("UI thread is not running")
        future: Future = Future()
        self._queue.put((lambda: func(*args, **kwargs), future))
        return future

    def invoke(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run on the UI thread and return the result (re-raising its exception)."""
        if self.is_ui_thread():
            return func(*args, **kwargs)
        return self.post(func, *args, **kwargs).result()

    def stop(self, timeout: float | None = 5.0) -> None:
        if not self.running:
            return
        self._queue.put(_STOP)
        self._thread.join(timeout)
        logger.debug("ui_thread_stopped", thread=self.name)
