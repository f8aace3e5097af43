"""FastAPI entrypoint for annotation runs and the blame artifact."""

from __future__ import annotations

import os
from dataclasses import asdict
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from spec_blame.config import AnnotateConfig, BlameConfig
from spec_blame.ingest.artifact import BlameArtifact
from spec_blame.ingest.blame_source import BlameCommandError, StaticBlameSource
from spec_blame.ingest.pipeline import AnnotationPipeline
from spec_blame.obs.tracing import RunStore, Timer
from spec_blame.types import MalformedConstructError


def _create_config() -> AnnotateConfig:
    repo_root = os.getenv("SPEC_BLAME_REPO")
    timeout = os.getenv("SPEC_BLAME_TIMEOUT")
    return AnnotateConfig(
        blame=BlameConfig(
            cwd=Path(repo_root) if repo_root else None,
            strict=os.getenv("SPEC_BLAME_STRICT", "0") == "1",
            timeout_seconds=float(timeout) if timeout else None,
        )
    )


def _resolve_output(value: str | None, default: Path) -> Path:
    """Resolve an output path and keep it inside the configured output root."""
    root = _output_root.resolve()
    path = (root / (value or default)).resolve()
    if not path.is_relative_to(root):
        raise HTTPException(
            status_code=400, detail=f"Output path escapes output root: {value}"
        )
    return path


class AnnotateRequest(BaseModel):
    source_path: str = Field(min_length=1)
    blame_output: str | None = None
    annotated_output: str | None = None
    report: str | None = None


app = FastAPI(title="Spec Blame", version="0.1.0")

_config = _create_config()
_output_root = Path(os.getenv("SPEC_BLAME_OUTPUT_ROOT", "."))
_pipeline = AnnotationPipeline(_config)
_run_store = RunStore()


@app.get("/health")
def health() -> dict[str, Any]:
    return {
        "status": "ok",
        "blame_command": _config.blame.command,
        "strict": _config.blame.strict,
        "run_count": len(_run_store.list_recent(limit=1000)),
    }


@app.post("/annotate")
def annotate(request: AnnotateRequest) -> dict[str, Any]:
    blame_output = _resolve_output(request.blame_output, _config.blame_output)
    annotated_output = _resolve_output(request.annotated_output, _config.annotated_output)

    pipeline = _pipeline
    if request.report is not None:
        pipeline = AnnotationPipeline(_config, blame_source=StaticBlameSource(request.report))

    try:
        with Timer() as timer:
            result = pipeline.run(
                request.source_path,
                blame_output=blame_output,
                annotated_output=annotated_output,
            )
    except (MalformedConstructError, BlameCommandError, OSError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    record = _run_store.create_record(result, latency_ms=timer.elapsed_ms)
    return asdict(record)


@app.get("/blame.json")
def blame_json() -> dict[str, Any]:
    record = _run_store.latest()
    if record is None:
        raise HTTPException(status_code=404, detail="No annotation run yet")
    try:
        artifact = BlameArtifact.load(record.blame_output)
    except OSError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return artifact.model_dump(by_alias=True, exclude_none=True)


@app.get("/runs")
def runs(limit: int = Query(default=20, ge=1)) -> dict[str, Any]:
    records = [asdict(record) for record in _run_store.list_recent(limit=limit)]
    return {"items": records}


@app.get("/runs/{run_id}")
def run_detail(run_id: str) -> dict[str, Any]:
    try:
        record = _run_store.get(run_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return asdict(record)


@app.get("/metrics")
def metrics() -> dict[str, Any]:
    return _run_store.summary()
