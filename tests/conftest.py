import pytest

SHA_A = "a1b2" * 10
SHA_B = "c3d4" * 10

SPEC_HTML = (
    b"<!DOCTYPE html>\n"
    b"<style>body { color: red; }</style>\n"
    b"<p>Hello</p>\n"
    b"<p>world</p>\n"
)

PORCELAIN_REPORT = f"""{SHA_A} 1 1 2
author Alice Example
author-mail <alice@example.com>
author-time 1577836800
author-tz +0100
committer Bob Committer
committer-mail <bob@example.com>
committer-time 1577836900
committer-tz +0000
summary Initial draft
boundary
filename spec.html
\t<!DOCTYPE html>
{SHA_A} 2 2
\t<style>body {{ color: red; }}</style>
{SHA_B} 5 3 2
author Carol Example
author-mail <carol@example.com>
author-time 1580515200
author-tz -0500
committer Carol Example
committer-mail <carol@example.com>
committer-time 1580515200
committer-tz -0500
summary Fix greeting
previous {SHA_A} spec.html
filename spec.html
\t<p>Hello</p>
{SHA_B} 6 4
\t<p>world</p>
"""


@pytest.fixture
def shas() -> tuple[str, str]:
    return SHA_A, SHA_B


@pytest.fixture
def spec_html() -> bytes:
    return SPEC_HTML


@pytest.fixture
def porcelain_report() -> str:
    return PORCELAIN_REPORT


@pytest.fixture
def spec_file(tmp_path, spec_html):
    path = tmp_path / "spec.html"
    path.write_bytes(spec_html)
    return path
