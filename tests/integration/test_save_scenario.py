"""
End-to-end: open a form, click a scripted button, observe the edit.
"""

import time

import pytest


def wait_for(predicate, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


@pytest.mark.integration
def test_click_runs_script_and_persists(runtime, write_doc, save_form):
    write_doc("main.vml", save_form)

    assert runtime.open_form("main") == "Main"
    save = runtime.ui.invoke(runtime.dispatcher.find, "Save")
    assert save.content == "Save"

    assert runtime.ui.invoke(save.click) == 1
    assert wait_for(lambda: runtime.store.get("Save", "Content") == "Saved!")
    assert runtime.ui.invoke(lambda: save.content) == "Saved!"
    assert runtime.dispatch("GetProperty", ["Save", "Content"]) == "Saved!"


@pytest.mark.integration
def test_design_session_survives_restart(settings, write_doc):
    from vml_designer.runtime import Runtime

    with Runtime.create(settings) as first:
        first.begin_design_session(fresh=True)
        first.dispatch("CreateControl", ["Button", "Go"])
        first.dispatch("SetProperty", ["Go", "Content", "Launch"])
        first.dispatch("SetControlPosition", ["Go", 40, 80])

    with Runtime.create(settings) as second:
        assert second.begin_design_session(fresh=False) == 1
        assert second.dispatch("GetProperty", ["Go", "Content"]) == "Launch"
        assert second.dispatch("GetControlX", ["Go"]) == 40
        assert second.dispatch("GetControlY", ["Go"]) == 80


@pytest.mark.integration
def test_session_scripts_keep_state(runtime):
    first = runtime.dispatch("ExecuteScript", ["python counter", "count = globals().get('count', 0) + 1\nresult = count"])
    second = runtime.dispatch("ExecuteScript", ["python counter", "count += 1\nresult = count"])

    assert first.result(timeout=5) == 1
    assert second.result(timeout=5) == 2
