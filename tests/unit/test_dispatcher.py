"""Command dispatcher tests against a wired runtime."""

from concurrent.futures import Future

import pytest

from vml_designer.designer import CANVAS_NAME
from vml_designer.dispatch import Dispatcher
from vml_designer.scripting import Script


@pytest.mark.unit
def test_builtin_table():
    commands = Dispatcher.commands()
    for name in ("SetProperty", "GetProperty", "CreateControl", "FormOpen", "Shell", "AppExit"):
        assert name in commands


@pytest.mark.unit
def test_unknown_command_returns_none(runtime):
    assert runtime.dispatch("NoSuchThing", ["x"]) is None


@pytest.mark.unit
def test_failing_command_returns_none(runtime):
    """Errors inside a command are contained."""
    assert runtime.dispatch("GetControlType", ["Missing"]) is None
    assert runtime.dispatch("SetControlPosition", ["Missing", "a", "b"]) is None


@pytest.mark.unit
def test_script_fallback_runs_once(runtime):
    runtime.scripts.register(Script(
        name="Bump",
        interpreter="python",
        content='Vml("SetSetting", "runs", str(int(Vml("GetSetting", "runs", "0")) + 1))',
    ))

    future = runtime.dispatch("Bump")
    assert isinstance(future, Future)
    future.result(timeout=5)
    assert runtime.dispatch("GetSetting", ["runs"]) == "1"


@pytest.mark.unit
def test_execute_and_run_script(runtime):
    assert runtime.dispatch("ExecuteScript", ["python", "result = args[0] * 2", 21]).result(timeout=5) == 42
    assert runtime.dispatch("RunScript", ["Missing"]) is None


# ============================================================================
# Structure
# ============================================================================

@pytest.mark.unit
def test_create_on_canvas_and_edit(runtime):
    name = runtime.dispatch("CreateControl", ["Button", "Save"])
    assert name == "Save"

    assert runtime.dispatch("SetProperty", ["Save", "Content", "Saved!"]) is True
    assert runtime.dispatch("GetProperty", ["Save", "Content"]) == "Saved!"
    assert runtime.store.get("Save", "Content") == "Saved!"
    assert runtime.dispatch("SetProperty", ["Save", "Colour", "red"]) is False

    assert runtime.dispatch("GetControlType", ["Save"]) == "Button"
    assert runtime.dispatch("GetControlParent", ["Save"]) == CANVAS_NAME
    assert runtime.dispatch("GetControlChildren", [CANVAS_NAME]) == ["Save"]


@pytest.mark.unit
def test_auto_names(runtime):
    assert runtime.dispatch("CreateControl", ["TextBox"]) == "TextBox_1"
    assert runtime.dispatch("CreateControl", ["TextBox", ""]) == "TextBox_2"
    assert runtime.dispatch("CreateControl", ["Hologram"]) is None


@pytest.mark.unit
def test_create_inside_container(runtime):
    runtime.dispatch("CreateControl", ["StackPanel", "Panel"])
    assert runtime.dispatch("CreateControl", ["Button", "Inner", "Panel"]) == "Inner"

    assert runtime.dispatch("GetControlParent", ["Inner"]) == "Panel"
    assert runtime.dispatch("GetControlChildren", ["Panel"]) == ["Inner"]
    assert runtime.dispatch("CreateControl", ["Button", "Inner", "Panel"]) is None

    assert runtime.dispatch("SetProperty", ["Inner", "Content", "Nested"]) is True
    assert runtime.store.get("Inner", "Content") == "Nested"
    assert runtime.dispatch("DeleteControl", ["Inner"]) is True
    assert runtime.dispatch("GetControlChildren", ["Panel"]) == []


@pytest.mark.unit
def test_geometry_commands(runtime):
    runtime.dispatch("CreateControl", ["Button", "Go"])

    assert runtime.dispatch("SetControlPosition", ["Go", 50, "60"]) is True
    assert runtime.dispatch("SetControlSize", ["Go", 120, 40]) is True
    assert runtime.dispatch("GetControlX", ["Go"]) == 50
    assert runtime.dispatch("GetControlY", ["Go"]) == 60
    assert runtime.dispatch("GetControlWidth", ["Go"]) == 120
    assert runtime.dispatch("GetControlHeight", ["Go"]) == 40
    assert runtime.store.get_all("Go")["X"] == "50"

    assert runtime.dispatch("GetControlAt", [55, 65]) == "Go"
    assert runtime.dispatch("GetResizeZone", ["Go", 169, 99]) == "SE"
    assert runtime.dispatch("GetControlAt", [5, 5]) is None


@pytest.mark.unit
def test_visibility_and_selection(runtime):
    runtime.dispatch("CreateControl", ["Button", "Go"])

    assert runtime.dispatch("SelectControl", ["Go"]) is True
    assert runtime.dispatch("GetSelectedControlName") == "Go"
    assert runtime.dispatch("GetSetting", ["selected_control"]) == "Go"

    assert runtime.dispatch("SetControlVisible", ["Go", "false"]) is True
    assert runtime.store.get("Go", "IsVisible") == "False"
    assert runtime.dispatch("GetControlAt", [15, 15]) is None


@pytest.mark.unit
def test_rename_on_canvas(runtime):
    runtime.dispatch("CreateControl", ["Button", "Go"])
    runtime.dispatch("SetProperty", ["Go", "Content", "Start"])

    assert runtime.dispatch("SetProperty", ["Go", "Name", "Run"]) is True
    assert runtime.store.control_names() == ["Run"]
    assert runtime.dispatch("GetControlChildren", [CANVAS_NAME]) == ["Run"]
    assert runtime.dispatch("GetProperty", ["Run", "Content"]) == "Start"
    assert runtime.dispatch("GetControlType", ["Go"]) is None

    runtime.dispatch("CreateControl", ["Button", "Stop"])
    assert runtime.dispatch("SetProperty", ["Stop", "Name", "Run"]) is False


@pytest.mark.unit
def test_rename_form_control(runtime, write_doc, save_form):
    write_doc("main.vml", save_form)
    runtime.dispatch("FormOpen", ["main"])

    assert runtime.dispatch("SetProperty", ["Notes", "Name", "Memo"]) is True
    assert runtime.dispatch("GetProperty", ["Memo", "Text"]) == "hello"
    assert runtime.dispatch("SetProperty", ["Memo", "Name", "Save"]) is False
    assert runtime.dispatch("SetProperty", [CANVAS_NAME, "Name", "Surface"]) is False


@pytest.mark.unit
def test_design_time_flags_read_back(runtime):
    runtime.dispatch("CreateControl", ["Button", "Go"])
    pair = runtime.canvas.pair("Go")

    assert runtime.dispatch("GetProperty", ["Go", "IsVisible"]) == "True"
    assert runtime.dispatch("GetProperty", ["Go", "IsEnabled"]) == "True"

    runtime.dispatch("SetControlVisible", ["Go", "false"])
    assert runtime.dispatch("GetProperty", ["Go", "IsVisible"]) == "False"

    assert runtime.dispatch("SetProperty", ["Go", "IsEnabled", "False"]) is True
    assert runtime.dispatch("GetProperty", ["Go", "IsEnabled"]) == "False"
    assert runtime.store.get("Go", "IsEnabled") == "False"

    assert runtime.dispatch("SetProperty", ["Go", "IsEnabled", "True"]) is True
    assert runtime.dispatch("GetProperty", ["Go", "IsEnabled"]) == "True"
    assert not pair.real.is_enabled
    assert not pair.real.is_visible


@pytest.mark.unit
def test_delete_and_clear(runtime):
    runtime.dispatch("CreateControl", ["Button", "A"])
    runtime.dispatch("CreateControl", ["Button", "B"])

    assert runtime.dispatch("DeleteControl", [CANVAS_NAME]) is False
    assert runtime.dispatch("DeleteControl", ["A"]) is True
    assert runtime.store.get_all("A") == {}
    assert runtime.dispatch("ClearChildren", [CANVAS_NAME]) == 1
    assert runtime.dispatch("GetControlChildren", [CANVAS_NAME]) == []


@pytest.mark.unit
def test_reload_canvas_skips_designer_document(runtime, write_doc):
    runtime.importer.import_if_stale(write_doc("layout.vml", "@Button Alpha\n    Content=A\n"))
    runtime.importer.import_if_stale(write_doc("designer.vml", "@Window Designer\n"))

    assert runtime.dispatch("ReloadCanvas") == 1
    assert runtime.dispatch("GetControlChildren", [CANVAS_NAME]) == ["Alpha"]
    assert runtime.dispatch("GetProperty", ["Alpha", "Content"]) == "A"


# ============================================================================
# Store, dialogs and system
# ============================================================================

@pytest.mark.unit
def test_settings_and_sql(runtime):
    assert runtime.dispatch("SetSetting", ["theme", "dark"]) is True
    assert runtime.dispatch("GetSetting", ["theme"]) == "dark"

    runtime.dispatch("CreateControl", ["Button", "Go"])
    rows = runtime.dispatch("SqlQuery", ["SELECT property_value FROM properties WHERE control_name = 'Go' AND property_name = 'Type'"])
    assert rows == [{"property_value": "Button"}]
    assert runtime.dispatch("SqlExecute", ["DELETE FROM properties WHERE control_name = 'Go'"]) > 0


@pytest.mark.unit
def test_headless_dialogs_record_results(runtime):
    assert runtime.dispatch("FileOpenDialog", ["Pick"]) == ""
    assert runtime.dispatch("ConfirmDialog", ["Sure?"]) is False
    assert runtime.store.dialog_result() == "False"
    assert runtime.dispatch("InfoDialog", ["Hi", "there"]) is None


@pytest.mark.unit
def test_shell(runtime):
    result = runtime.dispatch("Shell", ["echo designer"])
    assert result["exit_code"] == 0
    assert result["stdout"].strip() == "designer"
    assert result["timed_out"] is False


@pytest.mark.unit
def test_forms(runtime, write_doc, save_form):
    write_doc("main.vml", save_form)

    assert runtime.dispatch("FormOpen", ["main"]) == "Main"
    assert runtime.dispatch("GetProperty", ["Notes", "Text"]) == "hello"
    assert runtime.dispatch("FormClose", ["Main"]) is True
    assert runtime.dispatch("FormOpen", ["missing"]) is None


@pytest.mark.unit
def test_app_exit_shuts_down(runtime):
    runtime.dispatch("AppExit")
    assert runtime.wait(5)
    assert not runtime.started
