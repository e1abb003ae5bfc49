"""Importer: parse a source document into the relational model.

A document is re-imported only when the file is newer than the most
recent import recorded for it. Delete and re-insert run in one
transaction, so a failed import leaves the previous rows in place.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from sqlalchemy import delete, func, or_, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.orm import Session

from vml_designer.core import get_logger
from vml_designer.markup import DocumentParser, ParsedDocument, ParsedNode, get_parser
from vml_designer.monitoring import metrics_collector
from vml_designer.store import Database, ScriptRow, UiNode, UiProperty, now

logger = get_logger(__name__)


@dataclass(frozen=True)
class ImportResult:
    source: str
    imported: bool  # False on a cache hit
    root_ids: list[int] = field(default_factory=list)
    node_count: int = 0
    script_count: int = 0


def source_key(path: str | Path) -> str:
    """Canonical source_file value for a path."""
    return str(Path(path).expanduser().resolve())


class Importer:
    """Writes parsed documents into ui_tree / ui_properties / scripts."""

    def __init__(
        self,
        database: Database,
        parser_factory: Callable[[str | Path], DocumentParser] = get_parser,
    ) -> None:
        self.database = database
        self.parser_factory = parser_factory

    def last_import(self, session: Session, source: str) -> float | None:
        node_stamp = session.scalar(
            select(func.max(UiNode.imported_at)).where(UiNode.source_file == source)
        )
        script_stamp = session.scalar(
            select(func.max(ScriptRow.created_at)).where(ScriptRow.source_file == source)
        )
        stamps = [s for s in (node_stamp, script_stamp) if s is not None]
        return max(stamps) if stamps else None

    def import_if_stale(self, path: str | Path) -> ImportResult:
        """
        Import a document unless the stored copy is at least as new as the file.

        Raises:
            FileNotFoundError: If the file does not exist
            ValidationError: If the document cannot be parsed
        """
        source = source_key(path)
        mtime = os.path.getmtime(source)

        with self.database.session() as session:
            last = self.last_import(session, source)
            if last is not None and last >= mtime:
                roots = self.root_ids(session, source)
                logger.debug("import_cache_hit", source=source)
                metrics_collector.record_import("hit")
                return ImportResult(source=source, imported=False, root_ids=roots)

        try:
            parser = self.parser_factory(source)
            document = parser.parse(Path(source).read_text(encoding="utf-8"), source)
            result = self.write_document(source, document, stamp=max(now(), mtime))
        except Exception:
            metrics_collector.record_import("error")
            raise
        metrics_collector.record_import("miss")
        logger.info(
            "document_imported",
            source=source,
            nodes=result.node_count,
            scripts=result.script_count,
        )
        return result

    def write_document(self, source: str, document: ParsedDocument, stamp: float) -> ImportResult:
        """Replace every row tagged with source by the document's rows."""
        with self.database.session() as session:
            session.execute(delete(UiNode).where(UiNode.source_file == source))
            session.execute(delete(ScriptRow).where(ScriptRow.source_file == source))

            root_rows = []
            for order, root in enumerate(document.roots):
                row = self._build_row(root, source, stamp, order, is_root=True)
                session.add(row)
                root_rows.append(row)

            for script in document.scripts:
                stmt = insert(ScriptRow).values(
                    name=script.name,
                    interpreter=script.interpreter,
                    instance=script.instance,
                    content=script.content,
                    source_file=source,
                    created_at=stamp,
                )
                session.execute(
                    stmt.on_conflict_do_update(
                        index_elements=[ScriptRow.name],
                        set_={
                            "interpreter": stmt.excluded.interpreter,
                            "instance": stmt.excluded.instance,
                            "content": stmt.excluded.content,
                            "source_file": stmt.excluded.source_file,
                            "created_at": stmt.excluded.created_at,
                        },
                    )
                )
            session.flush()
            root_ids = [row.id for row in root_rows]

        return ImportResult(
            source=source,
            imported=True,
            root_ids=root_ids,
            node_count=document.node_count(),
            script_count=len(document.scripts),
        )

    def _build_row(
        self, node: ParsedNode, source: str, stamp: float, order: int, is_root: bool = False
    ) -> UiNode:
        row = UiNode(
            control_type=node.type,
            name=node.name,
            source_file=source,
            is_root=is_root,
            display_order=order,
            imported_at=stamp,
        )
        row.properties = [
            UiProperty(property_name=name, property_value=value)
            for name, value in node.properties.items()
        ]
        row.children = [
            self._build_row(child, source, stamp, index) for index, child in enumerate(node.children)
        ]
        return row

    @staticmethod
    def root_ids(session: Session, source: str) -> list[int]:
        """Root node ids of a source, first root first."""
        return list(
            session.scalars(
                select(UiNode.id)
                .where(
                    UiNode.source_file == source,
                    or_(UiNode.is_root.is_(True), UiNode.parent_id.is_(None)),
                )
                .order_by(UiNode.display_order, UiNode.id)
            )
        )

    def document_roots(self, exclude_suffix: str | None = None) -> list[int]:
        """Top-level node ids of every imported document, optionally skipping one source."""
        with self.database.session() as session:
            stmt = select(UiNode.id).where(UiNode.parent_id.is_(None))
            if exclude_suffix:
                stmt = stmt.where(~UiNode.source_file.endswith(exclude_suffix, autoescape=True))
            return list(session.scalars(stmt.order_by(UiNode.display_order, UiNode.id)))
