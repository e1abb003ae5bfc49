"""Dependency Injection Container."""

from injector import Injector, Module, provider, singleton

from vml_designer.controls import ControlRegistry, LiveGraph
from vml_designer.core.config import Settings, get_settings
from vml_designer.designer import DesignCanvas, SyncEngine
from vml_designer.dispatch import DialogProvider, Dispatcher, HeadlessDialogs, UIThread
from vml_designer.loader import EventBinder, FormManager, Importer, Materializer
from vml_designer.runtime import Runtime
from vml_designer.scripting import (
    PROCESS_BACKENDS,
    CommandInterpreter,
    LuaInterpreter,
    ProcessInterpreter,
    PythonInterpreter,
    ScriptBridge,
    ScriptRegistry,
)
from vml_designer.store import Database, PropertyStore, SettingsStore


class RuntimeModule(Module):
    """Every component of one runtime, one instance each."""

    def __init__(self, settings: Settings | None = None, dialogs: DialogProvider | None = None) -> None:
        self.settings = settings
        self.dialogs = dialogs

    @singleton
    @provider
    def provide_settings(self) -> Settings:
        return self.settings or get_settings()

    @singleton
    @provider
    def provide_database(self, settings: Settings) -> Database:
        return Database(settings.db_path)

    @singleton
    @provider
    def provide_property_store(self, database: Database) -> PropertyStore:
        return PropertyStore(database)

    @singleton
    @provider
    def provide_settings_store(self, database: Database) -> SettingsStore:
        return SettingsStore(database)

    @singleton
    @provider
    def provide_control_registry(self) -> ControlRegistry:
        return ControlRegistry()

    @singleton
    @provider
    def provide_live_graph(self) -> LiveGraph:
        return LiveGraph()

    @singleton
    @provider
    def provide_script_registry(self) -> ScriptRegistry:
        return ScriptRegistry()

    @singleton
    @provider
    def provide_importer(self, database: Database) -> Importer:
        return Importer(database)

    @singleton
    @provider
    def provide_event_binder(self, database: Database) -> EventBinder:
        return EventBinder(database)

    @singleton
    @provider
    def provide_materializer(
        self, database: Database, registry: ControlRegistry, binder: EventBinder
    ) -> Materializer:
        return Materializer(database, registry, binder)

    @singleton
    @provider
    def provide_form_manager(
        self,
        settings: Settings,
        database: Database,
        settings_store: SettingsStore,
        importer: Importer,
        materializer: Materializer,
        scripts: ScriptRegistry,
        graph: LiveGraph,
    ) -> FormManager:
        return FormManager(settings, database, settings_store, importer, materializer, scripts, graph)

    @singleton
    @provider
    def provide_sync_engine(
        self, settings: Settings, store: PropertyStore, registry: ControlRegistry
    ) -> SyncEngine:
        return SyncEngine(store, registry, reserved_prefix=settings.reserved_prefix)

    @singleton
    @provider
    def provide_design_canvas(
        self,
        settings: Settings,
        registry: ControlRegistry,
        sync: SyncEngine,
        settings_store: SettingsStore,
    ) -> DesignCanvas:
        return DesignCanvas(
            registry,
            sync,
            settings_store,
            grid_snap=settings.grid_snap,
            grid_size=settings.grid_size,
        )

    @singleton
    @provider
    def provide_ui_thread(self) -> UIThread:
        return UIThread()

    @singleton
    @provider
    def provide_dialogs(self) -> DialogProvider:
        return self.dialogs or HeadlessDialogs()

    @singleton
    @provider
    def provide_dispatcher(
        self,
        settings: Settings,
        ui: UIThread,
        graph: LiveGraph,
        registry: ControlRegistry,
        canvas: DesignCanvas,
        sync: SyncEngine,
        store: PropertyStore,
        settings_store: SettingsStore,
        scripts: ScriptRegistry,
        importer: Importer,
        materializer: Materializer,
        forms: FormManager,
        dialogs: DialogProvider,
    ) -> Dispatcher:
        return Dispatcher(
            settings=settings,
            ui=ui,
            graph=graph,
            registry=registry,
            canvas=canvas,
            sync=sync,
            store=store,
            settings_store=settings_store,
            scripts=scripts,
            importer=importer,
            materializer=materializer,
            forms=forms,
            dialogs=dialogs,
        )

    @singleton
    @provider
    def provide_script_bridge(
        self, settings: Settings, settings_store: SettingsStore, dispatcher: Dispatcher
    ) -> ScriptBridge:
        """All backends share the dispatcher as their host bridge."""
        host = dispatcher.dispatch
        interpreters = [PythonInterpreter(host), LuaInterpreter(host), CommandInterpreter(host)]
        interpreters += [
            ProcessInterpreter(name, settings, settings_store.get, host, timeout=settings.shell_timeout)
            for name in PROCESS_BACKENDS
        ]
        return ScriptBridge(interpreters, workers=settings.script_workers)


def create_container(settings: Settings | None = None, dialogs: DialogProvider | None = None) -> Injector:
    """Create configured injector."""
    return Injector([RuntimeModule(settings, dialogs)])


def build_runtime(settings: Settings | None = None, dialogs: DialogProvider | None = None) -> Runtime:
    """Resolve a fully wired Runtime."""
    injector = create_container(settings, dialogs)
    return Runtime(
        settings=injector.get(Settings),
        database=injector.get(Database),
        store=injector.get(PropertyStore),
        settings_store=injector.get(SettingsStore),
        registry=injector.get(ControlRegistry),
        graph=injector.get(LiveGraph),
        scripts=injector.get(ScriptRegistry),
        importer=injector.get(Importer),
        binder=injector.get(EventBinder),
        materializer=injector.get(Materializer),
        forms=injector.get(FormManager),
        sync=injector.get(SyncEngine),
        canvas=injector.get(DesignCanvas),
        ui=injector.get(UIThread),
        dispatcher=injector.get(Dispatcher),
        bridge=injector.get(ScriptBridge),
    )
