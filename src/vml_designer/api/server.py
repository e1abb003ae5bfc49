"""Background uvicorn server for the control channel."""

import threading
from typing import Any

import uvicorn

from vml_designer.core import get_logger
from .app import create_app

logger = get_logger(__name__)


class ApiServer:
    """Serves create_app(runtime) from a daemon thread."""

    def __init__(self, runtime: Any, host: str = "127.0.0.1", port: int = 8889) -> None:
        self.host = host
        self.port = port
        self.app = create_app(runtime)
        config = uvicorn.Config(self.app, host=host, port=port, log_config=None, access_log=False)
        self.server = uvicorn.Server(config)
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._thread = threading.Thread(target=self.server.run, name="vml-api", daemon=True)
        self._thread.start()
        logger.info("api_listening", host=self.host, port=self.port)

    def stop(self, timeout: float = 5.0) -> None:
        if not self.running:
            return
        self.server.should_exit = True
        self._thread.join(timeout)
        logger.info("api_stopped")
