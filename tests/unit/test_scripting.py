"""Interpreter backends and the execution bridge."""

import json
import shutil
import threading

import pytest

from vml_designer.core import Settings
from vml_designer.scripting import (
    CommandInterpreter,
    LuaInterpreter,
    ProcessInterpreter,
    PythonInterpreter,
    Script,
    ScriptBridge,
    ScriptError,
    ScriptRegistry,
    split_tag,
)
from vml_designer.scripting.process import script_environment


@pytest.fixture
def python_backend(recorder):
    return PythonInterpreter(recorder)


@pytest.fixture
def bridge(recorder):
    b = ScriptBridge([PythonInterpreter(recorder), CommandInterpreter(recorder)], workers=4)
    yield b
    b.shutdown()


# ============================================================================
# Registry
# ============================================================================

@pytest.mark.unit
def test_registry_overwrites_and_filters():
    registry = ScriptRegistry()
    registry.register(Script(name="A", interpreter="python", content="x", source_file="one.vml"))
    registry.register(Script(name="A", interpreter="vml", content="y", source_file="one.vml"))
    registry.register(Script(name="B", interpreter="python", instance="s", source_file="two.vml"))

    assert registry.get("A").interpreter == "vml"
    assert [s.name for s in registry.list_all("two.vml")] == ["B"]
    assert registry.get("B").tag == "python s"
    assert registry.unregister("A")
    assert "A" not in registry


@pytest.mark.unit
def test_split_tag():
    assert split_tag("Python counter") == ("python", "counter")
    assert split_tag("python counter", instance="other") == ("python", "other")
    assert split_tag("bash") == ("bash", None)


# ============================================================================
# Python backend
# ============================================================================

@pytest.mark.unit
def test_python_stateless_runs_are_isolated(python_backend):
    assert python_backend.run_stateless("x = 41\nresult = x + 1") == 42
    with pytest.raises(NameError):
        python_backend.run_stateless("result = x")


@pytest.mark.unit
def test_python_session_continuity(python_backend):
    python_backend.run_in_session("counter", "n = 0")
    python_backend.run_in_session("counter", "n += 1")
    assert python_backend.run_in_session("counter", "n += 1\nresult = n") == 2
    assert python_backend.session_count() == 1


@pytest.mark.unit
def test_python_sessions_do_not_share_state(python_backend):
    python_backend.run_in_session("a", "value = 'a'")
    python_backend.run_in_session("b", "value = 'b'")
    assert python_backend.run_in_session("a", "result = value") == "a"


@pytest.mark.unit
def test_python_session_survives_error(python_backend):
    """Names bound before the failing statement stay in the session."""
    with pytest.raises(ZeroDivisionError):
        python_backend.run_in_session("s", "kept = 1\n1 / 0\nlost = 2")
    assert python_backend.run_in_session("s", "result = (kept, 'lost' in dir())") == (1, False)


@pytest.mark.unit
def test_python_host_bridge(python_backend, recorder):
    python_backend.run_stateless('Vml("SetProperty", "Save", "Content", args[0])', ["Saved!"])
    assert recorder.calls == [("SetProperty", ["Save", "Content", "Saved!"])]


# ============================================================================
# Lua backend
# ============================================================================

@pytest.fixture
def lua_backend(recorder):
    return LuaInterpreter(recorder)


@pytest.mark.unit
def test_lua_stateless_runs_are_isolated(lua_backend):
    assert lua_backend.run_stateless("x = 41\nreturn x + 1") == 42
    assert lua_backend.run_stateless("result = 'from global'") == "from global"
    assert lua_backend.run_stateless("return x") is None


@pytest.mark.unit
def test_lua_session_continuity(lua_backend):
    source = "count = (count or 0) + 1\nreturn count"
    assert lua_backend.run_in_session("counter", source) == 1
    assert lua_backend.run_in_session("counter", source) == 2
    assert lua_backend.run_in_session("other", source) == 1
    assert lua_backend.session_count() == 2


@pytest.mark.unit
def test_lua_session_survives_error(lua_backend):
    with pytest.raises(ScriptError):
        lua_backend.run_in_session("s", "kept = 1\nerror('boom')\nlost = 2")
    assert lua_backend.run_in_session("s", "return kept, lost") == (1, None)


@pytest.mark.unit
def test_lua_tables_convert(lua_backend):
    assert lua_backend.run_stateless("return {args.a, args.b}", {"a": 1, "b": 2}) == [1, 2]
    assert lua_backend.run_stateless("return {name = args[1]}", ["Save"]) == {"name": "Save"}
    assert lua_backend.run_stateless("return {}") == []


@pytest.mark.unit
def test_lua_host_bridge(recorder):
    recorder.results["GetControlChildren"] = ["A", "B"]
    backend = LuaInterpreter(recorder)

    assert backend.run_stateless('Vml("SetProperty", "Save", "Content", args[1])', ["Saved!"]) is None
    assert backend.run_stateless('local kids = Vml("GetControlChildren", "DesignCanvas")\nreturn #kids') == 2
    assert recorder.calls[0] == ("SetProperty", ["Save", "Content", "Saved!"])


@pytest.mark.unit
def test_lua_through_bridge(recorder):
    bridge = ScriptBridge([LuaInterpreter(recorder)], workers=2)
    try:
        bridge.execute("n = 10", "lua keep").result(timeout=5)
        assert bridge.execute("return n * 2", "lua keep").result(timeout=5) == 20
        assert bridge.execute("error('bad')", "lua").result(timeout=5) is None
    finally:
        bridge.shutdown()


# ============================================================================
# Command backend
# ============================================================================

@pytest.mark.unit
def test_command_lines_dispatch(recorder):
    recorder.results["GetProperty"] = "Save"
    backend = CommandInterpreter(recorder)
    source = """
# copy a caption
caption = GetProperty Save Content
SetProperty Label "Text" $caption
InfoDialog Done $1
"""
    backend.run_stateless(source, ["first"])
    assert recorder.calls == [
        ("GetProperty", ["Save", "Content"]),
        ("SetProperty", ["Label", "Text", "Save"]),
        ("InfoDialog", ["Done", "first"]),
    ]


@pytest.mark.unit
def test_command_session_variables(recorder):
    recorder.results["GetSetting"] = "10"
    backend = CommandInterpreter(recorder)
    backend.run_in_session("s", "size = GetSetting grid_size")
    backend.run_in_session("s", "SetSetting copy $size")

    assert recorder.calls[-1] == ("SetSetting", ["copy", "10"])
    with pytest.raises(ScriptError):
        backend.run_in_session("other", "SetSetting copy $size")


@pytest.mark.unit
def test_command_bad_quoting(recorder):
    with pytest.raises(ScriptError):
        CommandInterpreter(recorder).run_stateless('SetProperty Save Content "open')


# ============================================================================
# Process backend
# ============================================================================

@pytest.mark.unit
def test_script_environment(tmp_path):
    settings = Settings(db_path=str(tmp_path / "vml.db"), vml_dir=str(tmp_path))
    lookup = {"vml_parser": "builtin"}.get

    positional = script_environment(settings, lambda k, d: lookup(k, d), ["a", 2])
    assert positional["VML_DB_PATH"] == str(tmp_path / "vml.db")
    assert positional["VML_DIR"] == str(tmp_path)
    assert (positional["VML_ARG1"], positional["VML_ARG2"], positional["VML_ARGC"]) == ("a", "2", "2")

    named = script_environment(settings, lambda k, d: lookup(k, d), {"mode": "fast"})
    assert named["VML_MODE"] == "fast"
    assert json.loads(named["VML_ARGS_JSON"]) == {"mode": "fast"}
    assert json.loads(positional["VML_ARGS_JSON"]) == ["a", 2]
    assert "VML_ARGS_JSON" not in script_environment(settings, lambda k, d: lookup(k, d), None)


@pytest.mark.unit
@pytest.mark.skipif(shutil.which("sh") is None, reason="requires sh")
def test_process_backend_forwards_commands(tmp_path, recorder):
    settings = Settings(db_path=str(tmp_path / "vml.db"), vml_dir=str(tmp_path))
    backend = ProcessInterpreter("sh", settings, lambda key, default: default, host=recorder, timeout=10)
    source = 'echo "plain output"\necho "VML> SetProperty Save Content \'Saved by $1\'"\n'

    result = backend.run_in_session("ignored", source, ["sh"])
    assert result.ok
    assert "plain output" in result.stdout
    assert recorder.calls == [("SetProperty", ["Save", "Content", "Saved by sh"])]
    assert backend.session_count() == 0


@pytest.mark.unit
@pytest.mark.skipif(shutil.which("sh") is None, reason="requires sh")
def test_process_backend_timeout(tmp_path):
    settings = Settings(db_path=str(tmp_path / "vml.db"), vml_dir=str(tmp_path))
    backend = ProcessInterpreter("sh", settings, lambda key, default: default, timeout=0.5)

    result = backend.run_stateless("exec sleep 5")
    assert result.timed_out
    assert not result.ok


@pytest.mark.unit
def test_process_backend_unknown_name(tmp_path):
    with pytest.raises(ValueError):
        ProcessInterpreter("cobol", Settings(db_path=str(tmp_path / "x.db")), lambda k, d: d)


# ============================================================================
# Bridge
# ============================================================================

@pytest.mark.unit
def test_bridge_returns_result(bridge):
    assert bridge.execute("result = 6 * 7", "python").result(timeout=5) == 42


@pytest.mark.unit
def test_bridge_contains_failures(bridge):
    """A failing script yields None and later runs still work."""
    assert bridge.execute("raise RuntimeError('boom')", "python").result(timeout=5) is None
    assert bridge.execute("oops(", "python").result(timeout=5) is None
    assert bridge.execute("result = 1", "python").result(timeout=5) == 1


@pytest.mark.unit
def test_bridge_unknown_interpreter(bridge):
    assert bridge.execute("puts 1", "tcl").result(timeout=5) is None


@pytest.mark.unit
def test_bridge_session_runs_in_order(bridge):
    """Invocations of one session complete in submission order."""
    bridge.execute("order = []", "python seq").result(timeout=5)
    futures = [
        bridge.execute(f"import time\ntime.sleep({0.05 if i % 2 == 0 else 0})\norder.append({i})", "python seq")
        for i in range(6)
    ]
    for future in futures:
        future.result(timeout=5)
    assert bridge.execute("result = order", "python seq").result(timeout=5) == list(range(6))


@pytest.mark.unit
def test_bridge_sessions_run_concurrently():
    """A blocked session does not hold up another one."""
    gate = threading.Event()

    def host(command, args):
        return gate.wait(5) if command == "Block" else None

    bridge = ScriptBridge([PythonInterpreter(host)], workers=2)
    try:
        blocked = bridge.execute('result = Vml("Block")', "python blocked")
        assert bridge.execute("result = 'free'", "python other").result(timeout=2) == "free"
        assert not blocked.done()
        gate.set()
        assert blocked.result(timeout=5) is True
    finally:
        gate.set()
        bridge.shutdown()


@pytest.mark.unit
def test_bridge_session_cancel_while_running(caplog):
    """Cancelling a running or queued session run leaves the session usable."""
    gate = threading.Event()

    def host(command, args):
        return gate.wait(5) if command == "Block" else None

    bridge = ScriptBridge([PythonInterpreter(host)], workers=1)
    try:
        running = bridge.execute('result = Vml("Block")', "python s")
        queued = bridge.execute("result = 'late'", "python s")
        assert queued.cancel()
        assert running.cancel()
        gate.set()

        assert bridge.execute("result = 'after'", "python s").result(timeout=5) == "after"
        assert running.cancelled() and queued.cancelled()
        assert not [r for r in caplog.records if r.name == "concurrent.futures"]
    finally:
        gate.set()
        bridge.shutdown()


@pytest.mark.unit
def test_bridge_run_script(bridge):
    script = Script(name="Count", interpreter="python", instance="c", content="n = globals().get('n', 0) + 1\nresult = n")
    bridge.run_script(script).result(timeout=5)
    assert bridge.run_script(script).result(timeout=5) == 2


@pytest.mark.unit
def test_bridge_after_shutdown(recorder):
    bridge = ScriptBridge([PythonInterpreter(recorder)], workers=1)
    bridge.shutdown()
    assert bridge.execute("result = 1", "python").result(timeout=5) is None
