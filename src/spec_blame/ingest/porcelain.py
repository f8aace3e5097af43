"""Parser for `git blame --porcelain` style reports."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from spec_blame.types import ProvenanceIndex, Revision

logger = logging.getLogger(__name__)

_SHA_LENGTH = 40
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def is_sha(value: str) -> bool:
    return len(value) == _SHA_LENGTH and all(ch in _HEX_DIGITS for ch in value)


def _parse_int(value: str) -> int | None:
    if not value.isascii() or not value.isdigit():
        return None
    return int(value)


def _is_field_name(value: str) -> bool:
    return bool(value) and value.isascii() and value.replace("-", "").isalnum()


@dataclass(slots=True)
class _HeaderLine:
    sha: str
    orig_line: int
    line: int


@dataclass(slots=True)
class _ParseState:
    index: ProvenanceIndex
    positions: dict[str, int]
    current: Revision | None = None


class PorcelainParser:
    """Builds a `ProvenanceIndex` from a porcelain blame report.

    The report alternates header lines (`<sha> <orig> <final> [<count>]`)
    with property lines (`<name> <value>`) that describe the commit named by
    the most recent header. Lines starting with a tab echo the file content
    and are ignored. Anything else is counted in `skipped_lines`.
    """

    def parse(self, text: str) -> ProvenanceIndex:
        state = _ParseState(index=ProvenanceIndex(), positions={})
        for number, line in enumerate(text.split("\n"), start=1):
            if line.startswith("\t"):
                continue
            if not self._consume(state, line):
                state.index.skipped_lines += 1
                if line:
                    logger.debug("Skipping unrecognized report line %d: %r", number, line)

        index = state.index
        gaps = sum(1 for value in index.lines[1:] if value is None)
        if gaps:
            logger.warning("Blame report left %d line(s) without a revision", gaps)
        if index.skipped_lines:
            logger.info("Skipped %d unrecognized report line(s)", index.skipped_lines)
        return index

    def _consume(self, state: _ParseState, line: str) -> bool:
        if not line:
            # Trailing newline of the report.
            return True

        header = self._parse_header(line)
        if header is not None:
            self._apply_header(state, header)
            return True

        name, _, value = _split_field(line)
        if is_sha(name) or not _is_field_name(name) or not value or state.current is None:
            # A commit id in front marks a malformed header, not a property.
            return False
        return self._apply_property(state.current, name, value)

    @staticmethod
    def _parse_header(line: str) -> _HeaderLine | None:
        parts = line.split()
        if len(parts) not in (3, 4) or not is_sha(parts[0]):
            return None
        numbers = [_parse_int(part) for part in parts[1:]]
        if any(number is None or number < 1 for number in numbers):
            # Line numbers are 1-based; line 0 is reserved in the index.
            return None
        return _HeaderLine(sha=parts[0], orig_line=numbers[0], line=numbers[1])

    @staticmethod
    def _apply_header(state: _ParseState, header: _HeaderLine) -> None:
        index = state.index
        revision = index.revisions.get(header.sha)
        if revision is None:
            revision = Revision(sha=header.sha)
            index.revisions[header.sha] = revision
            state.positions[header.sha] = len(index.order)
            index.order.append(header.sha)

        revision.line_map[header.line] = header.orig_line

        if header.line >= len(index.lines):
            index.lines.extend([None] * (header.line + 1 - len(index.lines)))
        index.lines[header.line] = state.positions[header.sha]
        state.current = revision

    @staticmethod
    def _apply_property(revision: Revision, name: str, value: str) -> bool:
        if name.startswith("committer") or name == "filename":
            return True

        if name == "author-time":
            timestamp = _parse_int(value.strip())
            if timestamp is None:
                return False
            revision.author_time = timestamp
        elif name == "previous":
            sha, _, rest = _split_field(value)
            revision.previous = sha if is_sha(sha) and rest else value
        elif name == "summary":
            revision.summary = value
        elif name == "author":
            revision.author = value
        elif name == "author-tz":
            revision.author_tz = value
        else:
            revision.extra[name] = value
        return True


def _split_field(line: str) -> tuple[str, str, str]:
    """Split at the first whitespace character, like `(\\S+)\\s(.*)`."""
    for position, ch in enumerate(line):
        if ch.isspace():
            return line[:position], ch, line[position + 1 :]
    return line, "", ""
