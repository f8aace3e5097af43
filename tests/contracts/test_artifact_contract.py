import json

from spec_blame.ingest.artifact import BlameArtifact
from spec_blame.ingest.porcelain import PorcelainParser


def test_artifact_json_uses_gutter_script_field_names(porcelain_report, shas) -> None:
    sha_a, sha_b = shas
    artifact = BlameArtifact.from_index(PorcelainParser().parse(porcelain_report))

    payload = json.loads(artifact.to_json())

    assert set(payload) == {"commits", "sha", "lines"}
    assert payload["sha"] == [sha_a, sha_b]
    assert payload["lines"] == [None, 0, 0, 1, 1]

    commit = payload["commits"][sha_b]
    assert commit["lineMap"] == {"3": 5, "4": 6}
    assert commit["summary"] == "Fix greeting"
    assert commit["author"] == "Carol Example"
    assert commit["author-time"] == 1580515200
    assert commit["author-tz"] == "-0500"
    assert commit["author-mail"] == "<carol@example.com>"
    assert commit["previous"] == sha_a
    assert "previous" not in payload["commits"][sha_a]


def test_artifact_reload_resolves_line_to_commit(tmp_path, porcelain_report, shas) -> None:
    _, sha_b = shas
    path = tmp_path / "blame.json"
    path.write_text(
        BlameArtifact.from_index(PorcelainParser().parse(porcelain_report)).to_json(),
        encoding="utf-8",
    )

    artifact = BlameArtifact.load(path)
    found = artifact.commit_for_line(3)

    assert found is not None
    sha, record = found
    assert sha == sha_b
    assert record.line_map[3] == 5
    assert artifact.commit_for_line(0) is None
    assert artifact.commit_for_line(99) is None
