"""End-to-end annotation pipeline: blame -> parse -> serialize -> inject."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO

from spec_blame.config import AnnotateConfig
from spec_blame.ingest.artifact import BlameArtifact
from spec_blame.ingest.blame_source import BlameSource, GitBlameSource
from spec_blame.ingest.injector import AnchorInjector
from spec_blame.ingest.lexer import MarkupLexer
from spec_blame.ingest.porcelain import PorcelainParser
from spec_blame.types import AnnotationResult

logger = logging.getLogger(__name__)


@contextmanager
def _atomic_output(path: Path) -> Iterator[BinaryIO]:
    """Open a temporary sibling of `path` and move it into place on success."""

    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        with tmp_path.open("wb") as handle:
            yield handle
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


class AnnotationPipeline:
    """Coordinates blame acquisition, report parsing and anchor injection.

    Each call to `run` is independent: the lexer, parse state and injector
    bookkeeping are created fresh and discarded when the run ends. Each
    output is written atomically. The artifact is written before the
    document is lexed, so a malformed document still replaces `blame.json`
    but never leaves a partial annotated document.
    """

    def __init__(
        self,
        config: AnnotateConfig | None = None,
        *,
        blame_source: BlameSource | None = None,
        parser: PorcelainParser | None = None,
        injector: AnchorInjector | None = None,
    ) -> None:
        self.config = config or AnnotateConfig()
        self._blame_source = blame_source or GitBlameSource(self.config.blame)
        self._parser = parser or PorcelainParser()
        self._injector = injector or AnchorInjector(self.config.inject)

    def run(
        self,
        source_path: str | Path | None = None,
        *,
        blame_output: str | Path | None = None,
        annotated_output: str | Path | None = None,
    ) -> AnnotationResult:
        """Annotate one document and write both artifacts."""

        source = Path(source_path) if source_path is not None else self.config.source_path
        blame_path = Path(blame_output) if blame_output is not None else self.config.blame_output
        annotated_path = (
            Path(annotated_output)
            if annotated_output is not None
            else self.config.annotated_output
        )

        raw_report = self._blame_source.fetch(source)
        index = self._parser.parse(raw_report)

        artifact = BlameArtifact.from_index(index)
        with _atomic_output(blame_path) as handle:
            handle.write(artifact.to_json().encode("utf-8"))
        logger.info(
            "Wrote %s (%d revisions, %d lines)", blame_path, len(index.order), index.line_count
        )

        with source.open("rb") as in_file, _atomic_output(annotated_path) as out_file:
            stats = self._injector.inject(MarkupLexer(in_file), out_file)
        logger.info("Wrote %s (%d anchors)", annotated_path, stats.anchors)

        return AnnotationResult(
            source_path=str(source),
            blame_output=str(blame_path),
            annotated_output=str(annotated_path),
            index=index,
            stats=stats,
        )
