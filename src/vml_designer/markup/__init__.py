"""Document parsers: source text -> ParsedDocument."""

from pathlib import Path
from typing import Protocol

from vml_designer.core import ValidationError
from .types import ParsedDocument, ParsedNode, ParsedScript
from .vml import VmlParser
from .blueprint import BlueprintParser, parse_blueprint


class DocumentParser(Protocol):
    extensions: tuple[str, ...]

    def parse(self, text: str, source: str = "<string>") -> ParsedDocument: ...


PARSERS: tuple[type, ...] = (VmlParser, BlueprintParser)


def get_parser(path: str | Path) -> DocumentParser:
    """Pick a parser by file extension."""
    suffix = Path(path).suffix.lower()
    for parser_cls in PARSERS:
        if suffix in parser_cls.extensions:
            return parser_cls()
    raise ValidationError(f"No parser for {suffix or 'extensionless'} files: {path}")


__all__ = [
    "DocumentParser",
    "ParsedDocument",
    "ParsedNode",
    "ParsedScript",
    "VmlParser",
    "BlueprintParser",
    "parse_blueprint",
    "get_parser",
]
