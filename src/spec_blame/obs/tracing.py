"""Run records, timing, and aggregate metrics for annotation runs."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from spec_blame.types import AnnotationResult


@dataclass(slots=True)
class RunRecord:
    run_id: str
    timestamp_utc: str
    source_path: str
    blame_output: str
    annotated_output: str
    token_count: int
    anchor_count: int
    revision_count: int
    line_count: int
    skipped_report_lines: int
    assets_injected: bool
    latency_ms: float


class RunStore:
    """In-memory run storage for API-level observability."""

    def __init__(self) -> None:
        self._records: dict[str, RunRecord] = {}

    def create_record(self, result: AnnotationResult, *, latency_ms: float) -> RunRecord:
        run_id = str(uuid.uuid4())
        record = RunRecord(
            run_id=run_id,
            timestamp_utc=datetime.now(timezone.utc).isoformat(),
            source_path=result.source_path,
            blame_output=result.blame_output,
            annotated_output=result.annotated_output,
            token_count=result.stats.tokens,
            anchor_count=result.stats.anchors,
            revision_count=len(result.index.order),
            line_count=result.index.line_count,
            skipped_report_lines=result.index.skipped_lines,
            assets_injected=result.stats.assets_injected,
            latency_ms=latency_ms,
        )
        self._records[run_id] = record
        return record

    def get(self, run_id: str) -> RunRecord:
        record = self._records.get(run_id)
        if record is None:
            raise KeyError(f"Run not found: {run_id}")
        return record

    def latest(self) -> RunRecord | None:
        if not self._records:
            return None
        return next(reversed(self._records.values()))

    def list_recent(self, limit: int = 20) -> list[RunRecord]:
        if limit < 1:
            return []
        return list(self._records.values())[-limit:]

    def summary(self) -> dict[str, float | int]:
        """Aggregate run metrics for dashboard display."""
        records = list(self._records.values())
        total = len(records)
        if total == 0:
            return {
                "total_runs": 0,
                "avg_latency_ms": 0.0,
                "p95_latency_ms": 0.0,
                "total_anchors": 0,
                "total_skipped_report_lines": 0,
            }

        latencies = sorted(record.latency_ms for record in records)
        p95_index = max(0, int((len(latencies) * 0.95) - 1))

        return {
            "total_runs": total,
            "avg_latency_ms": sum(latencies) / total,
            "p95_latency_ms": latencies[p95_index],
            "total_anchors": sum(record.anchor_count for record in records),
            "total_skipped_report_lines": sum(
                record.skipped_report_lines for record in records
            ),
        }


class Timer:
    """Simple context timer used around pipeline runs."""

    def __init__(self) -> None:
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0
