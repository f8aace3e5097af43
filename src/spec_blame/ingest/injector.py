"""Anchor injection over a token stream."""

from __future__ import annotations

from collections.abc import Iterable
from typing import BinaryIO

from spec_blame.config import InjectConfig
from spec_blame.ingest.lexer import is_ascii_whitespace
from spec_blame.types import InjectionStats, Token, TokenKind


class AnchorInjector:
    """Copies tokens to `sink`, inserting line anchors and the asset fragment.

    An anchor is written before the first non-whitespace text token of each
    distinct line. Script and style content never receives anchors. The asset
    fragment is written once, right after the first close tag named by
    `InjectConfig.asset_anchor_tag`.
    """

    def __init__(self, config: InjectConfig | None = None) -> None:
        self.config = config or InjectConfig()
        self._asset_fragment = self.config.asset_fragment()

    def inject(self, tokens: Iterable[Token], sink: BinaryIO) -> InjectionStats:
        stats = InjectionStats()
        last_line = 0

        for token in tokens:
            stats.tokens += 1
            if (
                token.kind is TokenKind.TEXT
                and token.line != last_line
                and not is_ascii_whitespace(token.raw)
            ):
                sink.write(self.config.anchor(token.line))
                stats.anchors += 1
                last_line = token.line

            sink.write(token.raw)

            if (
                not stats.assets_injected
                and token.kind is TokenKind.CLOSE
                and token.name == self.config.asset_anchor_tag
            ):
                sink.write(self._asset_fragment)
                stats.assets_injected = True

        return stats
