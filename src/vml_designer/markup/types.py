"""Parsed document model shared by all parsers."""

from typing import Iterator

from pydantic import BaseModel, Field


class ParsedNode(BaseModel):
    """One control declaration."""

    type: str
    name: str | None = None
    properties: dict[str, str] = Field(default_factory=dict)
    children: list["ParsedNode"] = Field(default_factory=list)

    def walk(self) -> Iterator["ParsedNode"]:
        yield self
        for child in self.children:
            yield from child.walk()


class ParsedScript(BaseModel):
    """Named script declaration."""

    name: str = Field(min_length=1)
    interpreter: str = "python"
    instance: str | None = None
    content: str = ""


class ParsedDocument(BaseModel):
    """Result of parsing one source file."""

    roots: list[ParsedNode] = Field(default_factory=list)
    scripts: list[ParsedScript] = Field(default_factory=list)

    def node_count(self) -> int:
        return sum(1 for root in self.roots for _ in root.walk())
