"""Command line entrypoint: `spec-blame annotate` and `spec-blame inspect`."""

from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Optional

import typer

from spec_blame.config import AnnotateConfig, BlameConfig, InjectConfig
from spec_blame.ingest.blame_source import BlameCommandError, StaticBlameSource
from spec_blame.ingest.pipeline import AnnotationPipeline
from spec_blame.ingest.porcelain import PorcelainParser
from spec_blame.obs.tracing import Timer
from spec_blame.types import MalformedConstructError

app = typer.Typer(add_completion=False)

_DEFAULTS = AnnotateConfig()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def annotate(
    source: Path = typer.Argument(_DEFAULTS.source_path, help="Document to annotate."),
    blame_out: Path = typer.Option(_DEFAULTS.blame_output, "--blame-out"),
    html_out: Path = typer.Option(_DEFAULTS.annotated_output, "--html-out"),
    report: Optional[Path] = typer.Option(
        None, "--report", help="Use a captured porcelain report instead of running git."
    ),
    scripts_href: str = typer.Option(_DEFAULTS.inject.scripts_href, "--scripts-href"),
    blame_command: Optional[str] = typer.Option(
        None, "--blame-command", help="Blame command to run instead of `git blame -p`."
    ),
    strict: bool = typer.Option(False, "--strict", help="Fail when git blame fails."),
    timeout: Optional[float] = typer.Option(None, "--timeout", min=0.001),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Write the blame artifact and the anchored copy of SOURCE."""

    _configure_logging(verbose)
    config = AnnotateConfig(
        source_path=source,
        blame_output=blame_out,
        annotated_output=html_out,
        blame=BlameConfig(
            command=shlex.split(blame_command) if blame_command else _DEFAULTS.blame.command,
            strict=strict,
            timeout_seconds=timeout,
        ),
        inject=InjectConfig(scripts_href=scripts_href),
    )

    try:
        blame_source = StaticBlameSource.from_file(report) if report is not None else None
        pipeline = AnnotationPipeline(config, blame_source=blame_source)
        with Timer() as timer:
            result = pipeline.run()
    except (MalformedConstructError, BlameCommandError, OSError) as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(
        f"Annotated {result.source_path}: {result.stats.anchors} anchors, "
        f"{len(result.index.order)} revisions, {result.index.line_count} lines "
        f"({timer.elapsed_ms:.0f} ms)"
    )
    if result.index.skipped_lines:
        typer.echo(f"Skipped {result.index.skipped_lines} unrecognized report line(s)")


@app.command()
def inspect(
    report: Path = typer.Argument(..., help="Captured porcelain report."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Summarize a porcelain blame report without touching any document."""

    _configure_logging(verbose)
    try:
        text = report.read_text(encoding="utf-8")
    except OSError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    index = PorcelainParser().parse(text)
    typer.echo(f"revisions: {len(index.order)}")
    typer.echo(f"lines: {index.line_count}")
    typer.echo(f"skipped: {index.skipped_lines}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
