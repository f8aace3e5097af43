"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class TokenKind(str, Enum):
    """Lexical classes produced by the markup lexer."""

    OPEN = "open"
    CLOSE = "close"
    COMMENT = "comment"
    DOCTYPE = "doctype"
    TEXT = "text"
    SCRIPT = "script"
    STYLE = "style"


class MalformedConstructError(ValueError):
    """Raised when a markup construct never reaches its terminator."""

    def __init__(self, construct: str, line: int, detail: str = "") -> None:
        message = f"Malformed {construct} at line {line}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.construct = construct
        self.line = line


@dataclass(slots=True)
class Token:
    """One lexical unit of the source document.

    `line` is the lexer's line counter at emission time, i.e. the line on
    which the token ends.
    """

    kind: TokenKind
    line: int
    raw: bytes
    name: str | None = None


@dataclass(slots=True)
class Revision:
    """A commit seen in the porcelain report."""

    sha: str
    summary: str | None = None
    author: str | None = None
    author_time: int | None = None
    author_tz: str | None = None
    previous: str | None = None
    line_map: dict[int, int] = field(default_factory=dict)
    extra: dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class ProvenanceIndex:
    """Normalized result of parsing a porcelain report.

    `lines[n]` is the index into `order` of the revision that last touched
    line `n`. Index 0 is reserved and always `None`.
    """

    revisions: dict[str, Revision] = field(default_factory=dict)
    order: list[str] = field(default_factory=list)
    lines: list[int | None] = field(default_factory=lambda: [None])
    skipped_lines: int = 0

    @property
    def line_count(self) -> int:
        return len(self.lines) - 1

    def revision_for_line(self, line: int) -> Revision | None:
        if line <= 0 or line >= len(self.lines):
            return None
        index = self.lines[line]
        if index is None:
            return None
        return self.revisions[self.order[index]]


@dataclass(slots=True)
class InjectionStats:
    tokens: int = 0
    anchors: int = 0
    assets_injected: bool = False


@dataclass(slots=True)
class AnnotationResult:
    """Outcome of one pipeline run."""

    source_path: str
    blame_output: str
    annotated_output: str
    index: ProvenanceIndex
    stats: InjectionStats
