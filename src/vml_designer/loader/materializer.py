"""Tree Materializer: relational rows -> live control graph."""

from returns.result import Failure
from sqlalchemy.orm import Session

from vml_designer.controls import Control, ControlRegistry, Role, apply_property
from vml_designer.core import NodeNotFound, get_logger
from vml_designer.monitoring import metrics_collector
from vml_designer.store import Database, UiNode
from .events import EventBinder

logger = get_logger(__name__)


class Materializer:
    """Builds live controls from ui_tree rows."""

    def __init__(
        self,
        database: Database,
        registry: ControlRegistry,
        binder: EventBinder | None = None,
    ) -> None:
        self.database = database
        self.registry = registry
        self.binder = binder

    def materialize(self, root_id: int) -> Control:
        """
        Build the subtree rooted at a node.

        Raises:
            NodeNotFound: If no node has this id
            UnknownControlType: If any node's type has no factory
        """
        try:
            with self.database.session() as session:
                node = session.get(UiNode, root_id)
                if node is None:
                    raise NodeNotFound(f"No ui_tree node with id {root_id}")
                control = self._build(session, node)
        except Exception:
            metrics_collector.record_materialization("error")
            raise
        metrics_collector.record_materialization("ok")
        return control

    def _build(self, session: Session, node: UiNode) -> Control:
        control = self.registry.create(node.control_type, node.name, apply_defaults=True)

        for prop in sorted(node.properties, key=lambda p: p.id):
            self._apply(control, prop.property_name, prop.property_value or "")

        if node.children and control.role is Role.LEAF:
            logger.warning("children_ignored", control=node.name, type=node.control_type)
            return control

        if len(node.children) > 1 and control.role is not Role.PANEL:
            logger.warning("extra_children_replaced", control=node.name, count=len(node.children))
        for child_node in node.children:
            control.attach(self._build(session, child_node))
        return control

    def _apply(self, control: Control, name: str, value: str) -> None:
        if self.binder is not None:
            event = self.binder.resolve_event(control, name)
            if event is not None:
                self.binder.bind(control, event, value)
                return

        result = apply_property(control, name, value)
        if isinstance(result, Failure):
            failure = result.failure()
            logger.warning(
                "property_skipped",
                control=control.name,
                type=failure.control_type,
                prop=name,
                reason=failure.reason,
            )
            metrics_collector.record_property_error(
                "unknown" if failure.value is None else "malformed"
            )
