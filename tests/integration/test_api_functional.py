import sys

import pytest
from fastapi.testclient import TestClient

from spec_blame.api import main
from spec_blame.config import AnnotateConfig, BlameConfig
from spec_blame.ingest.pipeline import AnnotationPipeline


@pytest.fixture
def client(tmp_path, monkeypatch) -> TestClient:
    monkeypatch.setattr(main, "_output_root", tmp_path)
    return TestClient(main.app)


def test_api_annotate_blame_runs_metrics(
    client, tmp_path, spec_file, porcelain_report, shas
) -> None:
    health_resp = client.get("/health")
    assert health_resp.status_code == 200
    assert health_resp.json()["blame_command"] == ["git", "blame", "-p"]

    annotate_resp = client.post(
        "/annotate",
        json={
            "source_path": str(spec_file),
            "blame_output": "out/blame.json",
            "annotated_output": "spec-blame.html",
            "report": porcelain_report,
        },
    )
    assert annotate_resp.status_code == 200
    run = annotate_resp.json()
    assert run["anchor_count"] == 2
    assert run["revision_count"] == 2
    assert run["assets_injected"] is True
    assert (tmp_path / "out" / "blame.json").exists()
    assert (tmp_path / "spec-blame.html").exists()

    blame_resp = client.get("/blame.json")
    assert blame_resp.status_code == 200
    assert blame_resp.json()["sha"] == list(shas)
    assert blame_resp.json()["commits"][shas[0]]["lineMap"] == {"1": 1, "2": 2}

    detail_resp = client.get(f"/runs/{run['run_id']}")
    assert detail_resp.status_code == 200
    assert detail_resp.json()["source_path"] == str(spec_file)

    assert client.get("/runs").json()["items"]
    assert client.get("/runs/unknown").status_code == 404

    metrics_resp = client.get("/metrics")
    assert metrics_resp.status_code == 200
    assert metrics_resp.json()["total_runs"] >= 1


def test_api_rejects_malformed_document(client, tmp_path, porcelain_report) -> None:
    source = tmp_path / "broken.html"
    source.write_bytes(b'<a href="unterminated')

    resp = client.post(
        "/annotate",
        json={
            "source_path": str(source),
            "blame_output": "blame.json",
            "annotated_output": "out.html",
            "report": porcelain_report,
        },
    )

    assert resp.status_code == 400
    assert "attribute-value" in resp.json()["detail"]


def test_api_rejects_outputs_outside_output_root(
    client, tmp_path, spec_file, porcelain_report
) -> None:
    outside = tmp_path.parent / "elsewhere.html"

    for field, value in (("annotated_output", str(outside)), ("blame_output", "../blame.json")):
        resp = client.post(
            "/annotate",
            json={"source_path": str(spec_file), field: value, "report": porcelain_report},
        )

        assert resp.status_code == 400
        assert "escapes output root" in resp.json()["detail"]

    assert not outside.exists()
    assert not (tmp_path.parent / "blame.json").exists()


def test_api_maps_blame_timeout_to_bad_request(client, spec_file, monkeypatch) -> None:
    config = AnnotateConfig(
        blame=BlameConfig(
            command=[sys.executable, "-c", "import time; time.sleep(5)"],
            timeout_seconds=0.2,
        )
    )
    monkeypatch.setattr(main, "_pipeline", AnnotationPipeline(config))

    resp = client.post("/annotate", json={"source_path": str(spec_file)})

    assert resp.status_code == 400
    assert "timed out" in resp.json()["detail"]


def test_api_runs_limit_must_be_positive(client) -> None:
    assert client.get("/runs", params={"limit": 0}).status_code == 422
