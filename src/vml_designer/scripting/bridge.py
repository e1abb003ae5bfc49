"""Script Execution Bridge: routes (source, interpreter tag) to a backend.

Every invocation runs as its own task on a thread pool. Invocations of
one named session run in submission order; stateless runs and
different sessions run concurrently. Failures are logged and contained
per invocation.
"""

import threading
import time
from concurrent.futures import Future, InvalidStateError, ThreadPoolExecutor
from functools import partial
from typing import Any, Callable, Iterable

from vml_designer.core import LogContext, get_logger
from vml_designer.monitoring import metrics_collector
from .base import Interpreter, ScriptArgs
from .registry import Script

logger = get_logger(__name__)


def split_tag(tag: str, instance: str | None = None) -> tuple[str, str | None]:
    """'python counter' -> ('python', 'counter'); an explicit instance wins."""
    name, _, tagged = tag.strip().partition(" ")
    return name.lower(), (instance or tagged.strip() or None)


def _completed(value: Any = None) -> Future:
    future: Future = Future()
    future.set_result(value)
    return future


class ScriptBridge:
    """Single entry point for running scripts in any registered interpreter."""

    def __init__(self, interpreters: Iterable[Interpreter] = (), workers: int = 4) -> None:
        self._backends: dict[str, Interpreter] = {}
        for interpreter in interpreters:
            self.register(interpreter)
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="vml-script")
        self._tails: dict[tuple[str, str], Future] = {}
        self._lock = threading.Lock()
        self._closed = False

    def register(self, interpreter: Interpreter) -> None:
        for alias in interpreter.aliases or (interpreter.name,):
            self._backends[alias.lower()] = interpreter

    def backend(self, name: str) -> Interpreter | None:
        return self._backends.get(name.lower())

    @property
    def interpreters(self) -> list[str]:
        return sorted(self._backends)

    # ==================== Submission ====================

    def execute(
        self,
        source: str,
        interpreter_tag: str,
        args: ScriptArgs = None,
        instance: str | None = None,
    ) -> Future:
        """
        Schedule a script run.

        Args:
            source: Script text
            interpreter_tag: 'python', 'vml', 'bash', ... optionally followed by an instance name
            args: Positional list or named mapping handed to the script
            instance: Session name; overrides one embedded in the tag

        Returns:
            Future resolving to the script's result (None on failure)
        """
        name, session = split_tag(interpreter_tag, instance)
        if self._closed:
            logger.warning("bridge_closed", interpreter=name)
            return _completed(None)

        task = partial(self.run, source, name, session, args)
        backend = self.backend(name)
        if session and backend is not None and backend.supports_sessions:
            return self._submit_ordered((name, session), task)
        return self._executor.submit(task)

    def run_script(self, script: Script, args: ScriptArgs = None) -> Future:
        return self.execute(script.content, script.interpreter, args, instance=script.instance)

    def _submit_ordered(self, key: tuple[str, str], task: Callable[[], Any]) -> Future:
        outer: Future = Future()
        with self._lock:
            previous = self._tails.get(key)
            self._tails[key] = outer

        def start(_: Future | None = None) -> None:
            if outer.done():
                return
            try:
                inner = self._executor.submit(task)
            except RuntimeError:
                # executor shut down while waiting for the previous run
                if not outer.done():
                    outer.set_result(None)
                return
            inner.add_done_callback(lambda done: _settle(outer, done))

        def forget(_: Future) -> None:
            with self._lock:
                if self._tails.get(key) is outer:
                    del self._tails[key]

        outer.add_done_callback(forget)
        if previous is None:
            start()
        else:
            previous.add_done_callback(start)
        return outer

    # ==================== Execution ====================

    def run(self, source: str, name: str, instance: str | None, args: ScriptArgs = None) -> Any:
        """Run synchronously on the calling thread; never raises."""
        backend = self.backend(name)
        if backend is None:
            logger.warning("unknown_interpreter", interpreter=name)
            metrics_collector.record_error("UnknownInterpreter", "scripting")
            return None

        start = time.perf_counter()
        with LogContext(interpreter=name, session=instance or "-"):
            try:
                if instance:
                    result = backend.run_in_session(instance, source, args)
                else:
                    result = backend.run_stateless(source, args)
            except Exception as e:
                logger.error("script_failed", error=str(e), error_type=type(e).__name__, exc_info=True)
                metrics_collector.record_script_run(name, "error", time.perf_counter() - start)
                return None
            logger.debug("script_completed")

        metrics_collector.record_script_run(name, "ok", time.perf_counter() - start)
        if backend.supports_sessions:
            metrics_collector.set_sessions(name, backend.session_count())
        return result

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work, cancel queued runs and close every backend."""
        self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=True)
        for backend in set(self._backends.values()):
            backend.close()
        logger.info("script_bridge_stopped")


def _settle(outer: Future, inner: Future) -> None:
    if outer.done():
        return
    try:
        if inner.cancelled():
            outer.cancel()
        elif inner.exception() is not None:
            outer.set_exception(inner.exception())
        else:
            outer.set_result(inner.result())
    except InvalidStateError:
        # cancelled by the caller while settling
        logger.debug("session_result_dropped")
