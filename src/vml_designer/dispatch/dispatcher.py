"""Command Dispatcher: one entry point for scripts, events and the control channel.

``dispatch(command, args)`` looks the command up in the built-in table;
anything else is tried as a registered script name. Commands that touch
the live graph run on the UI thread while the caller waits. A failing
command is logged and yields None.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable

from returns.result import Failure

from vml_designer.controls import (
    Control,
    ControlRegistry,
    LiveGraph,
    apply_property,
    format_value,
    read_property,
)
from vml_designer.controls.library import Canvas
from vml_designer.controls.convert import parse_value
from vml_designer.core import Settings, get_logger
from vml_designer.designer import CANVAS_NAME, INERT_PROPERTIES, DesignCanvas, SyncEngine
from vml_designer.designer.canvas import CREATE_POSITION
from vml_designer.loader import FormManager, Importer, Materializer
from vml_designer.monitoring import metrics_collector
from vml_designer.scripting import ScriptBridge, ScriptRegistry
from vml_designer.store import PropertyStore, SettingsStore
from .dialogs import DialogProvider, HeadlessDialogs
from .shell import run_shell
from .ui_thread import UIThread

logger = get_logger(__name__)


@dataclass(frozen=True)
class CommandSpec:
    name: str
    attr: str
    ui: bool


_COMMANDS: dict[str, CommandSpec] = {}


def command(name: str, ui: bool = False) -> Callable:
    """Register a Dispatcher method as a built-in command."""

    def decorator(func: Callable) -> Callable:
        _COMMANDS[name] = CommandSpec(name=name, attr=func.__name__, ui=ui)
        return func

    return decorator


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return parse_value(bool, str(value), "bool")


class Dispatcher:
    """Routes named commands to built-ins, the live graph, or scripts."""

    def __init__(
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
        dialogs: DialogProvider | None = None,
        bridge: ScriptBridge | None = None,
        on_exit: Callable[[], None] | None = None,
    ) -> None:
        self.settings = settings
        self.ui = ui
        self.graph = graph
        self.registry = registry
        self.canvas = canvas
        self.sync = sync
        self.store = store
        self.settings_store = settings_store
        self.scripts = scripts
        self.importer = importer
        self.materializer = materializer
        self.forms = forms
        self.dialogs = dialogs or HeadlessDialogs()
        self.bridge = bridge
        self.on_exit = on_exit

    @staticmethod
    def commands() -> list[str]:
        return sorted(_COMMANDS)

    def dispatch(self, command: str, args: list[Any] | None = None) -> Any:
        """
        Execute a command.

        Returns:
            The command's result; None for unknown commands and failures.
            Script fallbacks return a Future for the scheduled run.
        """
        args = list(args or [])
        start = time.perf_counter()
        spec = _COMMANDS.get(command)
        kind = "builtin" if spec else "script"
        try:
            if spec is None:
                result = self._run_named_script(command, args)
                status = "ok" if result is not None else "unknown"
            else:
                handler = getattr(self, spec.attr)
                result = self.ui.invoke(handler, *args) if spec.ui else handler(*args)
                status = "ok"
        except Exception as e:
            logger.error("command_failed", command=command, error=str(e), exc_info=True)
            metrics_collector.record_command(command, "error", time.perf_counter() - start, kind)
            return None
        metrics_collector.record_command(command, status, time.perf_counter() - start, kind)
        return result

    __call__ = dispatch

    def _run_named_script(self, name: str, args: list[Any]) -> Any:
        script = self.scripts.get(name)
        if script is None:
            logger.warning("unknown_command", command=name)
            return None
        if self.bridge is None:
            logger.warning("no_script_bridge", command=name)
            return None
        return self.bridge.run_script(script, args)

    # ==================== Lookup helpers ====================

    def find(self, name: str) -> Control | None:
        if name == CANVAS_NAME:
            return self.canvas.surface
        pair = self.canvas.pair(name)
        if pair is not None:
            return pair.real
        return self.graph.find(name)

    def _require(self, name: str) -> Control:
        control = self.find(name)
        if control is None:
            raise LookupError(f"No control named {name}")
        return control

    def _dialog_result(self, value: Any) -> Any:
        self.store.record_dialog_result(format_value(value) if isinstance(value, bool) else value)
        return value

    # ==================== Dialogs ====================

    @command("FileOpenDialog", ui=True)
    def file_open_dialog(self, title: str = "Open File", file_filter: str = "") -> str:
        return self._dialog_result(self.dialogs.open_file(title, file_filter))

    @command("FileSaveDialog", ui=True)
    def file_save_dialog(self, title: str = "Save File", default_name: str = "") -> str:
        return self._dialog_result(self.dialogs.save_file(title, default_name))

    @command("FolderSelectDialog", ui=True)
    def folder_select_dialog(self, title: str = "Select Folder") -> str:
        return self._dialog_result(self.dialogs.select_folder(title))

    @command("InfoDialog", ui=True)
    def info_dialog(self, title: str, message: str = "") -> None:
        self.dialogs.info(title, message)

    @command("ErrorDialog", ui=True)
    def error_dialog(self, title: str, message: str = "") -> None:
        self.dialogs.error(title, message)

    @command("ConfirmDialog", ui=True)
    def confirm_dialog(self, title: str, message: str = "") -> bool:
        return self._dialog_result(bool(self.dialogs.confirm(title, message)))

    @command("InputDialog", ui=True)
    def input_dialog(self, title: str, prompt: str = "", default: str = "") -> str:
        return self._dialog_result(self.dialogs.input(title, prompt, default))

    # ==================== Store ====================

    @command("SqlQuery")
    def sql_query(self, sql: str) -> list[dict[str, Any]]:
        return self.store.query(sql)

    @command("SqlExecute")
    def sql_execute(self, sql: str) -> int:
        return self.store.execute(sql)

    @command("GetSetting")
    def get_setting(self, key: str, default: str | None = None) -> str | None:
        return self.settings_store.get(key, default)

    @command("SetSetting")
    def set_setting(self, key: str, value: Any) -> bool:
        return self.settings_store.set(key, format_value(value))

    # ==================== Structure ====================

    @command("CreateControl", ui=True)
    def create_control(self, type_name: str, name: str | None = None, parent: str | None = None) -> str | None:
        """Create a new control; returns its name."""
        if not parent or parent == CANVAS_NAME:
            pair = self.canvas.create_control(type_name, name or None)
            return pair.shadow.name if pair else None

        host = self._require(parent)
        name = name or self.canvas.next_name(self.registry.canonical(type_name) or type_name)
        if self.find(name) is not None:
            logger.warning("control_name_in_use", control=name)
            return None
        control = self.registry.create(type_name, name, apply_defaults=True)
        if isinstance(host, Canvas):
            control.move_to(CREATE_POSITION, CREATE_POSITION)
        host.attach(control)
        logger.info("control_created", control=name, type=control.type_name, parent=parent)
        return name

    @command("DeleteControl", ui=True)
    def delete_control(self, name: str) -> bool:
        if name == CANVAS_NAME:
            return False
        if self.canvas.pair(name) is not None:
            return self.canvas.delete(name)
        control = self.find(name)
        if control is None:
            return False
        if control.parent is not None:
            control.parent.detach(control)
        else:
            self.graph.remove_root(control)
        self.store.delete(name)
        return True

    @command("SetControlPosition", ui=True)
    def set_control_position(self, name: str, x: Any, y: Any) -> bool:
        pair = self.canvas.pair(name)
        if pair is not None:
            self.sync.sync_to_real(pair.shadow, "X", str(x))
            self.sync.sync_to_real(pair.shadow, "Y", str(y))
            return self.sync.capture_geometry(pair.shadow)
        control = self._require(name)
        control.move_to(float(x), float(y))
        return self.store.set_many(name, {"X": format_value(float(x)), "Y": format_value(float(y))}) == 2

    @command("SetControlSize", ui=True)
    def set_control_size(self, name: str, width: Any, height: Any) -> bool:
        pair = self.canvas.pair(name)
        if pair is not None:
            self.sync.sync_to_real(pair.shadow, "Width", str(width))
            self.sync.sync_to_real(pair.shadow, "Height", str(height))
            return self.sync.capture_geometry(pair.shadow)
        control = self._require(name)
        control.resize(float(width), float(height))
        return (
            self.store.set_many(
                name, {"Width": format_value(float(width)), "Height": format_value(float(height))}
            )
            == 2
        )

    @command("GetControlChildren", ui=True)
    def get_control_children(self, name: str) -> list[str]:
        if name == CANVAS_NAME:
            return self.canvas.names()
        return [child.name for child in self._require(name).children if child.name]

    @command("GetControlParent", ui=True)
    def get_control_parent(self, name: str) -> str | None:
        parent = self._require(name).parent
        return parent.name if parent else None

    @command("GetControlType", ui=True)
    def get_control_type(self, name: str) -> str:
        return self._require(name).type_name

    def _geometry(self, name: str) -> tuple[float, float, float, float]:
        pair = self.canvas.pair(name)
        if pair is not None:
            return tuple(pair.shadow.bounds())
        return tuple(self._require(name).bounds())

    @command("GetControlX", ui=True)
    def get_control_x(self, name: str) -> float:
        return self._geometry(name)[0]

    @command("GetControlY", ui=True)
    def get_control_y(self, name: str) -> float:
        return self._geometry(name)[1]

    @command("GetControlWidth", ui=True)
    def get_control_width(self, name: str) -> float:
        return self._geometry(name)[2]

    @command("GetControlHeight", ui=True)
    def get_control_height(self, name: str) -> float:
        return self._geometry(name)[3]

    @command("SetControlVisible", ui=True)
    def set_control_visible(self, name: str, visible: Any) -> bool:
        flag = _as_bool(visible)
        pair = self.canvas.pair(name)
        if pair is not None:
            return self.sync.commit_edit(pair.shadow, "IsVisible", format_value(flag))
        self._require(name).is_visible = flag
        return self.store.set(name, "IsVisible", format_value(flag))

    @command("ClearChildren", ui=True)
    def clear_children(self, name: str) -> int:
        if name == CANVAS_NAME:
            return self.canvas.clear()
        return self._require(name).clear_children()

    @command("GetControlAt", ui=True)
    def get_control_at(self, x: Any, y: Any) -> str | None:
        shadow = self.canvas.hit_test(float(x), float(y))
        return shadow.name if shadow else None

    @command("GetResizeZone", ui=True)
    def get_resize_zone(self, name: str, x: Any, y: Any) -> str:
        return self.canvas.resize_zone(name, float(x), float(y)).value

    @command("SelectControl", ui=True)
    def select_control(self, name: str | None) -> bool:
        return self.canvas.select(name or None)

    @command("GetSelectedControlName", ui=True)
    def get_selected_control_name(self) -> str | None:
        return self.canvas.selected_name

    # ==================== Properties ====================

    @command("GetProperty", ui=True)
    def get_property(self, name: str, prop: str) -> str | None:
        """Runtime value first, then the flat record."""
        pair = self.canvas.pair(name)
        if pair is not None and prop in INERT_PROPERTIES:
            return format_value(pair.shadow.flag(prop))
        control = self.find(name)
        if control is not None:
            value = read_property(control, prop)
            if value is not None:
                return value
        return self.store.get(name, prop)

    @command("SetProperty", ui=True)
    def set_property(self, name: str, prop: str, value: Any) -> bool:
        text = format_value(value)
        pair = self.canvas.pair(name)
        if pair is not None:
            if prop == "Name":
                return self.canvas.rename(name, text)
            return self.sync.commit_edit(pair.shadow, prop, text)

        control = self.find(name)
        if control is None:
            logger.warning("control_not_found", control=name, prop=prop)
            return False
        if prop == "Name":
            return self._rename_live(control, text)
        result = apply_property(control, prop, text)
        if isinstance(result, Failure):
            logger.warning("property_rejected", control=name, prop=prop, reason=result.failure().reason)
            return False
        return self.store.set(name, prop, text)

    def _rename_live(self, control: Control, new: str) -> bool:
        new = new.strip()
        if not new or control is self.canvas.surface:
            return False
        if self.find(new) is not None:
            logger.warning("control_name_in_use", control=new)
            return False
        old = control.name
        if old and not self.store.rename(old, new):
            return False
        control.name = new
        return True

    # ==================== Forms / scripts / system ====================

    @command("FormOpen", ui=True)
    def form_open(self, path: str) -> str | None:
        return self.forms.open(path).name

    @command("FormOpenModal", ui=True)
    def form_open_modal(self, path: str) -> str | None:
        return self.forms.open(path, modal=True).name

    @command("FormClose", ui=True)
    def form_close(self, name: str) -> bool:
        return self.forms.close(name)

    @command("ReloadCanvas", ui=True)
    def reload_canvas(self) -> int:
        """Replace the canvas contents with every imported document except the designer's own."""
        self.canvas.clear()
        controls = []
        for root_id in self.importer.document_roots(exclude_suffix=self.settings.designer_source):
            try:
                controls.append(self.materializer.materialize(root_id))
            except Exception as e:
                logger.warning("reload_skipped", node_id=root_id, error=str(e))
        return self.canvas.adopt_all(controls)

    @command("RunScript")
    def run_script(self, name: str, *args: Any) -> Any:
        script = self.scripts.get(name)
        if script is None:
            logger.warning("unknown_script", script=name)
            return None
        return self.bridge.run_script(script, list(args))

    @command("ExecuteScript")
    def execute_script(self, interpreter: str, source: str, *args: Any) -> Any:
        return self.bridge.execute(source, interpreter, list(args))

    @command("Shell")
    def shell(self, command_line: str) -> dict[str, Any]:
        result = run_shell(command_line, timeout=self.settings.shell_timeout)
        return {
            "stdout": result.stdout,
            "stderr": result.stderr,
            "exit_code": result.exit_code,
            "timed_out": result.timed_out,
        }

    @command("AppExit")
    def app_exit(self) -> None:
        logger.info("app_exit_requested")
        if self.on_exit is not None:
            self.on_exit()
