"""Form lifecycle: resolve, import, materialize, wrap, register."""

import os
from pathlib import Path

from sqlalchemy import select

from vml_designer.controls import Control, LiveGraph
from vml_designer.controls.library import Window
from vml_designer.core import NodeNotFound, Settings, get_logger
from vml_designer.scripting.registry import Script, ScriptRegistry
from vml_designer.store import Database, ScriptRow, SettingsStore
from .importer import Importer
from .materializer import Materializer

logger = get_logger(__name__)

WRAP_WIDTH = 600
WRAP_HEIGHT = 400


class FormManager:
    """Opens and closes forms in the live graph."""

    def __init__(
        self,
        settings: Settings,
        database: Database,
        settings_store: SettingsStore,
        importer: Importer,
        materializer: Materializer,
        scripts: ScriptRegistry,
        graph: LiveGraph,
    ) -> None:
        self.settings = settings
        self.database = database
        self.settings_store = settings_store
        self.importer = importer
        self.materializer = materializer
        self.scripts = scripts
        self.graph = graph

    def resolve_path(self, path: str) -> Path:
        """Bare names resolve against the configured VML directory."""
        if os.sep in path or "/" in path:
            resolved = Path(path).expanduser()
        else:
            vml_dir = self.settings_store.get("vml_dir") or self.settings.vml_dir
            resolved = Path(vml_dir).expanduser() / path
        if not resolved.suffix:
            resolved = resolved.with_suffix(".vml")
        return resolved

    def load_scripts(self, source: str) -> int:
        """Register every script imported from a source, replacing the ones it used to declare."""
        self.scripts.unregister_source(source)
        with self.database.session() as session:
            rows = session.scalars(select(ScriptRow).where(ScriptRow.source_file == source)).all()
            for row in rows:
                self.scripts.register(
                    Script(
                        name=row.name,
                        interpreter=row.interpreter,
                        instance=row.instance,
                        content=row.content,
                        source_file=row.source_file,
                    )
                )
        return len(rows)

    def open(self, path: str, modal: bool = False) -> Window:
        """
        Import (if stale) and materialize a form, wrapping non-window roots.

        Raises:
            FileNotFoundError: If the document does not exist
            NodeNotFound: If the document declares no controls
            UnknownControlType: If the document uses an unknown type
        """
        resolved = self.resolve_path(path)
        result = self.importer.import_if_stale(resolved)
        self.load_scripts(result.source)
        if not result.root_ids:
            raise NodeNotFound(f"No controls in {resolved}")

        root = self.materializer.materialize(result.root_ids[0])
        window = root if isinstance(root, Window) else self.wrap(root, resolved.stem)
        window.is_modal = modal

        self.graph.add_root(window)
        window.raise_event("Opened")
        logger.info("form_opened", form=window.name, source=result.source, modal=modal)
        return window

    @staticmethod
    def wrap(control: Control, title: str) -> Window:
        window = Window(name=title, title=title, width=WRAP_WIDTH, height=WRAP_HEIGHT)
        window.attach(control)
        return window

    def close(self, name: str) -> bool:
        window = self.graph.find_root(name)
        if window is None:
            logger.warning("form_not_open", form=name)
            return False
        if isinstance(window, Window):
            window.close()
        self.graph.remove_root(window)
        logger.info("form_closed", form=name)
        return True
