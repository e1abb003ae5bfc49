"""Pytest configuration and fixtures."""

import os
from typing import Any

import pytest

from vml_designer.controls import ControlRegistry, LiveGraph
from vml_designer.core import Settings
from vml_designer.designer import DesignCanvas, SyncEngine
from vml_designer.loader import EventBinder, Importer, Materializer
from vml_designer.store import Database, PropertyStore, SettingsStore


# ============================================================================
# Pytest Hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with environment variables."""
    os.environ['VML_LOG_LEVEL'] = 'DEBUG'
    os.environ['VML_API_ENABLED'] = 'false'  # Never bind a port from tests
    os.environ['VML_API_KEY'] = 'test-key'
    os.environ['VML_SCRIPT_WORKERS'] = '2'


# ============================================================================
# Core Fixtures
# ============================================================================

@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a per-test database and vml directory."""
    vml_dir = tmp_path / "vml"
    vml_dir.mkdir()
    return Settings(db_path=str(tmp_path / "vml.db"), vml_dir=str(vml_dir))


@pytest.fixture
def database(settings):
    """Initialized database with default rows."""
    db = Database(settings.db_path)
    db.initialize()
    yield db
    db.dispose()


@pytest.fixture
def store(database):
    return PropertyStore(database)


@pytest.fixture
def settings_store(database):
    return SettingsStore(database)


@pytest.fixture
def registry(database):
    """Control registry with descriptors loaded."""
    reg = ControlRegistry()
    reg.load_descriptors(database)
    return reg


# ============================================================================
# Loader Fixtures
# ============================================================================

class RecordingDispatch:
    """Stands in for the dispatcher; remembers every call."""

    def __init__(self, results: dict[str, Any] | None = None):
        self.calls: list[tuple[str, list[Any]]] = []
        self.results = results or {}

    def __call__(self, command: str, args: list[Any]) -> Any:
        self.calls.append((command, list(args)))
        return self.results.get(command)


@pytest.fixture
def recorder():
    return RecordingDispatch()


@pytest.fixture
def importer(database):
    return Importer(database)


@pytest.fixture
def binder(database, recorder):
    return EventBinder(database, dispatch=recorder)


@pytest.fixture
def materializer(database, registry, binder):
    return Materializer(database, registry, binder)


# ============================================================================
# Designer Fixtures
# ============================================================================

@pytest.fixture
def sync(store, registry):
    return SyncEngine(store, registry)


@pytest.fixture
def canvas(registry, sync, settings_store):
    """Design canvas without grid snapping."""
    return DesignCanvas(registry, sync, settings_store, grid_snap=False)


@pytest.fixture
def graph():
    return LiveGraph()


# ============================================================================
# Runtime Fixtures
# ============================================================================

@pytest.fixture
def runtime(settings):
    """Fully wired, started runtime."""
    from vml_designer.runtime import Runtime

    rt = Runtime.create(settings).start()
    yield rt
    rt.shutdown()


@pytest.fixture
def write_doc(settings):
    """Write a document into the vml directory and return its path."""
    def _write(name: str, content: str) -> str:
        path = os.path.join(settings.vml_dir, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    return _write


# ============================================================================
# Data Fixtures
# ============================================================================

@pytest.fixture
def save_form():
    """Window with a Save button wired to a python script."""
    return """# Save form
@Window Main
    Title=Editor
    Width=400
    Height=300
    @StackPanel Body
        Orientation=Vertical
        @Button Save
            Content=Save
            OnClick=SaveHandler()
        @TextBox Notes
            Text=hello
@Script SaveHandler
    Interpreter=python
    Content=<<EOF
    Vml("SetProperty", "Save", "Content", "Saved!")
    EOF
"""


@pytest.fixture
def sample_blueprint():
    """Sample Blueprint JSON."""
    return """{
  "form": {"name": "Main", "title": "Editor", "width": 400},
  "scripts": {
    "SaveHandler": {"interpreter": "python", "content": "result = 1"},
    "Greet": "result = 'hi'"
  },
  "ui": [
    {"Button#Save": {"content": "Save", "@click": "SaveHandler()"}},
    {"type": "row", "props": {"spacing": 4}, "children": ["Hello"]}
  ]
}"""
