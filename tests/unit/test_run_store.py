import pytest

from spec_blame.ingest.porcelain import PorcelainParser
from spec_blame.obs.tracing import RunStore, Timer
from spec_blame.types import AnnotationResult, InjectionStats


def _result(porcelain_report: str, anchors: int) -> AnnotationResult:
    return AnnotationResult(
        source_path="spec.html",
        blame_output="out/blame.json",
        annotated_output="spec-blame.html",
        index=PorcelainParser().parse(porcelain_report),
        stats=InjectionStats(tokens=10, anchors=anchors, assets_injected=True),
    )


def test_run_store_records_and_summarizes(porcelain_report) -> None:
    store = RunStore()

    assert store.latest() is None
    assert store.summary()["total_runs"] == 0

    first = store.create_record(_result(porcelain_report, 2), latency_ms=5.0)
    second = store.create_record(_result(porcelain_report, 3), latency_ms=15.0)

    assert store.get(first.run_id) is first
    assert store.latest() is second
    assert first.revision_count == 2
    assert first.line_count == 4
    assert first.skipped_report_lines == 1

    summary = store.summary()
    assert summary["total_runs"] == 2
    assert summary["avg_latency_ms"] == 10.0
    assert summary["total_anchors"] == 5
    assert summary["total_skipped_report_lines"] == 2


def test_unknown_run_raises_key_error() -> None:
    with pytest.raises(KeyError):
        RunStore().get("missing")


def test_timer_measures_elapsed_time() -> None:
    with Timer() as timer:
        sum(range(1000))

    assert timer.elapsed_ms >= 0.0


def test_list_recent_with_non_positive_limit_is_empty(porcelain_report) -> None:
    store = RunStore()
    for anchors in (1, 2, 3):
        store.create_record(_result(porcelain_report, anchors), latency_ms=1.0)

    assert store.list_recent(limit=0) == []
    assert store.list_recent(limit=-1) == []
    assert [record.anchor_count for record in store.list_recent(limit=2)] == [2, 3]
