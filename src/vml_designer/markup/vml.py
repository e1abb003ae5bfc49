"""Parser for the line-oriented .vml format.

    # comment
    @Window Main
        Title=Hello
        @Button Save
            Content=Save
            OnClick=SaveHandler()
    @Script SaveHandler
        Interpreter=python
        Content=<<EOF
    Vml("SetProperty", "Save", "Content", "Saved!")
    EOF

``@Type Name`` opens a node. Nesting follows the indentation of ``@``
lines; an explicit ``Parent=Name`` property re-parents a node. Indented
``Key=Value`` lines belong to the most recent node.
"""

import textwrap

from vml_designer.core import ValidationError, get_logger
from .types import ParsedDocument, ParsedNode, ParsedScript

logger = get_logger(__name__)

SCRIPT_TYPE = "Script"
HEREDOC = "<<"


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip())


class VmlParser:
    """Parses .vml text into a ParsedDocument."""

    extensions = (".vml",)

    def parse(self, text: str, source: str = "<string>") -> ParsedDocument:
        roots: list[ParsedNode] = []
        scripts: list[ParsedNode] = []
        stack: list[tuple[int, ParsedNode]] = []
        current: ParsedNode | None = None

        heredoc_marker: str | None = None
        heredoc_prop: str | None = None
        heredoc_lines: list[str] = []

        for lineno, line in enumerate(text.splitlines(), start=1):
            stripped = line.strip()

            if heredoc_marker is not None:
                if stripped == heredoc_marker:
                    current.properties[heredoc_prop] = textwrap.dedent("\n".join(heredoc_lines))
                    heredoc_marker = heredoc_prop = None
                    heredoc_lines = []
                else:
                    heredoc_lines.append(line)
                continue

            if not stripped or stripped.startswith("#"):
                continue

            if stripped.startswith("@"):
                type_name, _, name = stripped[1:].partition(" ")
                if not type_name:
                    raise ValidationError(f"{source}:{lineno}: missing type after @")
                node = ParsedNode(type=type_name, name=name.strip() or None)
                current = node
                if type_name == SCRIPT_TYPE:
                    scripts.append(node)
                    continue
                indent = _indent(line)
                while stack and stack[-1][0] >= indent:
                    stack.pop()
                if stack:
                    stack[-1][1].children.append(node)
                else:
                    roots.append(node)
                stack.append((indent, node))
                continue

            if current is None or _indent(line) == 0:
                logger.warning("orphan_line", source=source, line=lineno)
                continue

            key, sep, value = stripped.partition("=")
            if not sep or not key.strip():
                logger.warning("malformed_property_line", source=source, line=lineno)
                continue
            value = value.strip()
            if value.startswith(HEREDOC):
                heredoc_marker = value[len(HEREDOC):].strip() or "EOF"
                heredoc_prop = key.strip()
                continue
            current.properties[key.strip()] = value

        if heredoc_marker is not None:
            raise ValidationError(f"{source}: unterminated heredoc (expected {heredoc_marker})")

        roots = self._apply_parent_links(roots)
        return ParsedDocument(roots=roots, scripts=[self._to_script(n) for n in scripts])

    @staticmethod
    def _apply_parent_links(roots: list[ParsedNode]) -> list[ParsedNode]:
        """Move nodes carrying Parent=Name under the named node."""
        by_name = {node.name: node for root in roots for node in root.walk() if node.name}
        for root in roots:
            for nested in list(root.walk())[1:]:
                nested.properties.pop("Parent", None)
        remaining = []
        for node in roots:
            parent_name = node.properties.pop("Parent", None)
            parent = by_name.get(parent_name) if parent_name else None
            if parent is not None and parent is not node:
                parent.children.append(node)
            else:
                if parent_name:
                    logger.warning("unknown_parent", node=node.name, parent=parent_name)
                remaining.append(node)
        return remaining

    @staticmethod
    def _to_script(node: ParsedNode) -> ParsedScript:
        if not node.name:
            raise ValidationError("@Script requires a name")
        props = node.properties
        return ParsedScript(
            name=node.name,
            interpreter=props.get("Interpreter", "python"),
            instance=props.get("Instance") or None,
            content=props.get("Content", ""),
        )
