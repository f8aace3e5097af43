"""Serialized attribution artifact consumed by the blame gutter script."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from spec_blame.types import ProvenanceIndex, Revision


class RevisionRecord(BaseModel):
    """Per-commit metadata keyed the way the porcelain report names it."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    line_map: dict[int, int] = Field(default_factory=dict, alias="lineMap")
    summary: str | None = None
    author: str | None = None
    author_time: int | None = Field(default=None, alias="author-time")
    author_tz: str | None = Field(default=None, alias="author-tz")
    previous: str | None = None

    @classmethod
    def from_revision(cls, revision: Revision) -> "RevisionRecord":
        return cls.model_validate(
            {
                **revision.extra,
                "lineMap": revision.line_map,
                "summary": revision.summary,
                "author": revision.author,
                "author-time": revision.author_time,
                "author-tz": revision.author_tz,
                "previous": revision.previous,
            }
        )


class BlameArtifact(BaseModel):
    """Top-level `blame.json` document.

    `sha` lists commits in first-seen order and `lines[n]` is the position in
    `sha` of the commit for document line `n`; `lines[0]` is always null.
    """

    commits: dict[str, RevisionRecord] = Field(default_factory=dict)
    sha: list[str] = Field(default_factory=list)
    lines: list[int | None] = Field(default_factory=lambda: [None])

    @classmethod
    def from_index(cls, index: ProvenanceIndex) -> "BlameArtifact":
        return cls(
            commits={
                sha: RevisionRecord.from_revision(index.revisions[sha]) for sha in index.order
            },
            sha=list(index.order),
            lines=list(index.lines),
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def load(cls, path: str | Path) -> "BlameArtifact":
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))

    def commit_for_line(self, line: int) -> tuple[str, RevisionRecord] | None:
        if line <= 0 or line >= len(self.lines):
            return None
        position = self.lines[line]
        if position is None:
            return None
        sha = self.sha[position]
        return sha, self.commits[sha]
