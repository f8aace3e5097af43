"""Acquisition of porcelain blame reports."""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from spec_blame.config import BlameConfig

logger = logging.getLogger(__name__)


class BlameCommandError(RuntimeError):
    """Raised when the blame command fails and strict mode is enabled."""


class BlameSource(ABC):
    """Produces the raw porcelain report for a document."""

    @abstractmethod
    def fetch(self, path: Path) -> str:
        """Return the full report text for `path`."""


class GitBlameSource(BlameSource):
    """Runs `git blame -p` (or a configured equivalent) and captures stdout.

    By default the exit status is only logged, so a failing command yields
    whatever it printed, usually nothing. With `strict=True` a non-zero exit
    or an empty report raises `BlameCommandError`. A configured timeout is
    always fatal and also surfaces as `BlameCommandError`.
    """

    def __init__(self, config: BlameConfig | None = None) -> None:
        self.config = config or BlameConfig()

    def fetch(self, path: Path) -> str:
        cmd = [*self.config.command, str(path)]
        logger.debug("Running blame command: %s", " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                cwd=self.config.cwd,
                check=False,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.config.timeout_seconds,
            )
        except subprocess.TimeoutExpired as exc:
            raise BlameCommandError(
                f"{cmd[0]} timed out after {exc.timeout:g}s for {path}"
            ) from exc
        if proc.returncode != 0:
            message = proc.stderr.strip() or f"exit status {proc.returncode}"
            if self.config.strict:
                raise BlameCommandError(f"{cmd[0]} failed for {path}: {message}")
            logger.warning("Blame command failed for %s: %s", path, message)
        elif not proc.stdout and self.config.strict:
            raise BlameCommandError(f"{cmd[0]} produced no output for {path}")
        return proc.stdout


class StaticBlameSource(BlameSource):
    """Serves a report captured earlier, e.g. in CI or tests."""

    def __init__(self, text: str) -> None:
        self.text = text

    @classmethod
    def from_file(cls, path: str | Path) -> "StaticBlameSource":
        return cls(Path(path).read_text(encoding="utf-8"))

    def fetch(self, path: Path) -> str:
        del path  # the report was captured for a known document.
        return self.text
