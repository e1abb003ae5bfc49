"""
Runtime
One designer session: store, live graph, canvas, scripting and control channel.
"""

import threading
from typing import Any

from vml_designer.controls import ControlRegistry, LiveGraph
from vml_designer.core import Settings, get_logger
from vml_designer.designer import DesignCanvas, SyncEngine
from vml_designer.dispatch import Dispatcher, UIThread
from vml_designer.loader import EventBinder, FormManager, Importer, Materializer
from vml_designer.scripting import ScriptBridge, ScriptRegistry
from vml_designer.store import Database, PropertyStore, SettingsStore

logger = get_logger(__name__)


class Runtime:
    """Owns every component and their start/stop order."""

    def __init__(
        self,
        settings: Settings,
        database: Database,
        store: PropertyStore,
        settings_store: SettingsStore,
        registry: ControlRegistry,
        graph: LiveGraph,
        scripts: ScriptRegistry,
        importer: Importer,
        binder: EventBinder,
        materializer: Materializer,
        forms: FormManager,
        sync: SyncEngine,
        canvas: DesignCanvas,
        ui: UIThread,
        dispatcher: Dispatcher,
        bridge: ScriptBridge,
    ) -> None:
        self.settings = settings
        self.database = database
        self.store = store
        self.settings_store = settings_store
        self.registry = registry
        self.graph = graph
        self.scripts = scripts
        self.importer = importer
        self.binder = binder
        self.materializer = materializer
        self.forms = forms
        self.sync = sync
        self.canvas = canvas
        self.ui = ui
        self.dispatcher = dispatcher
        self.bridge = bridge
        self.api_server = None

        self.binder.dispatch = dispatcher.dispatch
        self.dispatcher.bridge = bridge
        self.dispatcher.on_exit = self.request_exit

        self.started = False
        self.exited = threading.Event()
        self._shutdown_lock = threading.Lock()

    @classmethod
    def create(cls, settings: Settings | None = None, dialogs: Any = None) -> "Runtime":
        from vml_designer.core import build_runtime

        return build_runtime(settings, dialogs)

    def start(self) -> "Runtime":
        """Initialize storage, start the UI thread and the optional control channel."""
        if self.started:
            return self
        self.database.initialize()
        self.registry.load_descriptors(self.database)
        self.ui.start()
        self.graph.add_root(self.canvas.surface)
        self.started = True
        self.exited.clear()

        if self.settings.api_enabled:
            from vml_designer.api import ApiServer

            self.api_server = ApiServer(self, self.settings.api_host, self.settings.api_port)
            self.api_server.start()

        logger.info(
            "runtime_started",
            db_path=self.settings.db_path,
            interpreters=self.bridge.interpreters,
            control_types=len(self.registry.types()),
        )
        return self

    def dispatch(self, command: str, args: list[Any] | None = None) -> Any:
        return self.dispatcher.dispatch(command, args)

    def open_form(self, path: str, modal: bool = False) -> Any:
        return self.dispatch("FormOpenModal" if modal else "FormOpen", [path])

    def begin_design_session(self, fresh: bool = True) -> int:
        """
        Start designing.

        A fresh session clears unreserved flat records; otherwise the canvas
        is rebuilt from them.
        """
        action = self.canvas.begin_session if fresh else self.canvas.restore
        count = self.ui.invoke(action)
        logger.info("design_session_started", fresh=fresh, count=count)
        return count

    def request_exit(self) -> None:
        """Shut down from any thread, including a script worker."""
        threading.Thread(target=self.shutdown, name="vml-exit", daemon=True).start()

    def wait(self, timeout: float | None = None) -> bool:
        return self.exited.wait(timeout)

    def shutdown(self) -> None:
        """Control channel, scripts, UI thread, graph, storage; in that order."""
        with self._shutdown_lock:
            if not self.started:
                return
            self.started = False
            if self.api_server is not None:
                self.api_server.stop()
                self.api_server = None
            self.bridge.shutdown(wait=True)
            self.ui.stop()
            self.graph.clear()
            self.database.dispose()
            logger.info("runtime_stopped")
            self.exited.set()

    def __enter__(self) -> "Runtime":
        return self.start()

    def __exit__(self, *args: Any) -> None:
        self.shutdown()
