"""Configuration models for the annotation pipeline."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class BlameConfig(BaseModel):
    """Configures how the porcelain blame report is acquired."""

    command: list[str] = Field(default_factory=lambda: ["git", "blame", "-p"], min_length=1)
    cwd: Path | None = None
    strict: bool = False
    timeout_seconds: float | None = Field(default=None, gt=0.0)


class InjectConfig(BaseModel):
    """Configures the anchor markup and the one-time asset fragment."""

    anchor_class: str = Field(default="blame", min_length=1)
    anchor_id_prefix: str = "blame-"
    scripts_href: str = "../scripts"
    asset_anchor_tag: str = Field(default="style", min_length=1)

    def anchor(self, line: int) -> bytes:
        return (
            f'<a id="{self.anchor_id_prefix}{line}" class="{self.anchor_class}" '
            f'line="{line}"></a>'
        ).encode("utf-8")

    def asset_fragment(self) -> bytes:
        return (
            f'\n<link href="{self.scripts_href}/blame.css" rel="stylesheet">\n'
            f'<script src="{self.scripts_href}/blame.js"></script>\n'
        ).encode("utf-8")


class AnnotateConfig(BaseModel):
    """Input and output locations for one annotation run."""

    source_path: Path = Path("spec.html")
    blame_output: Path = Path("out/blame.json")
    annotated_output: Path = Path("spec-blame.html")
    blame: BlameConfig = Field(default_factory=BlameConfig)
    inject: InjectConfig = Field(default_factory=InjectConfig)
