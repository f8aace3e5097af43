"""Streaming tokenizer for the HTML-like source document."""

from __future__ import annotations

from typing import BinaryIO

from spec_blame.types import MalformedConstructError, Token, TokenKind

ASCII_WHITESPACE = frozenset(b"\t\n\x0c\r ")

_LT = ord("<")
_GT = ord(">")
_BANG = ord("!")
_DASH = ord("-")
_SLASH = ord("/")
_QUOTE = ord('"')
_BACKSLASH = ord("\\")
_NEWLINE = ord("\n")
_DOCTYPE_LEAD = ord("D")

_RAW_CONTENT_TAGS = {"script": TokenKind.SCRIPT, "style": TokenKind.STYLE}


def is_ascii_whitespace(data: bytes) -> bool:
    """Return True when `data` is empty or made only of ASCII whitespace."""
    return all(byte in ASCII_WHITESPACE for byte in data)


class MarkupLexer:
    """Single-pass tokenizer with one byte of pushback.

    The lexer pulls bytes from `source` one at a time and hands out `Token`
    objects on demand, so it can be consumed lazily by the injector. The raw
    bytes of all emitted tokens concatenate back to the original input.

    Content is scanned in one of three modes (text, script, style). An open
    `script` or `style` tag switches the mode for the content that follows
    it and the matching close tag switches back to text.

    The lexer is not restartable: once `next_token` returns `None` the
    underlying source has been consumed.
    """

    def __init__(self, source: BinaryIO) -> None:
        self._source = source
        self._line = 1
        self._mode = TokenKind.TEXT
        self._pushback: int | None = None
        self._value = bytearray()
        self._exhausted = False

    def __iter__(self) -> "MarkupLexer":
        return self

    def __next__(self) -> Token:
        token = self.next_token()
        if token is None:
            raise StopIteration
        return token

    def next_token(self) -> Token | None:
        """Scan and return the next token, or `None` at end of input."""

        if self._exhausted:
            return None

        self._value.clear()
        c = self._get()
        if c is None:
            self._exhausted = True
            return None
        if c == _LT:
            return self._scan_markup()
        return self._scan_content()

    def _get(self) -> int | None:
        if self._pushback is not None:
            c = self._pushback
            self._pushback = None
            self._value.append(c)
            return c

        chunk = self._source.read(1)
        if not chunk:
            return None
        c = chunk[0]
        self._value.append(c)
        if c == _NEWLINE:
            self._line += 1
        return c

    def _require(self, construct: str) -> int:
        c = self._get()
        if c is None:
            raise MalformedConstructError(construct, self._line, "unexpected end of input")
        return c

    def _unget(self, c: int) -> None:
        if self._pushback is not None:
            raise RuntimeError("pushback slot is already occupied")
        self._pushback = c
        self._value.pop()

    def _emit(self, kind: TokenKind, name: str | None = None) -> Token:
        return Token(kind=kind, line=self._line, raw=bytes(self._value), name=name)

    def _scan_markup(self) -> Token:
        c = self._require("tag")
        if c == _BANG:
            return self._scan_declaration()

        if c == _SLASH:
            kind = TokenKind.CLOSE
            c = self._require("tag")
        else:
            kind = TokenKind.OPEN

        name = bytearray()
        while True:
            if c in ASCII_WHITESPACE:
                self._scan_attributes()
                break
            if c == _GT:
                break
            name.append(c)
            c = self._require("tag")

        tag_name = name.decode("utf-8", errors="replace")
        raw_mode = _RAW_CONTENT_TAGS.get(tag_name)
        if raw_mode is not None:
            self._mode = raw_mode if kind is TokenKind.OPEN else TokenKind.TEXT
        return self._emit(kind, tag_name)

    def _scan_attributes(self) -> None:
        while True:
            c = self._require("tag")
            if c == _QUOTE:
                while True:
                    c = self._require("attribute-value")
                    if c == _QUOTE:
                        break
                    if c == _BACKSLASH:
                        self._require("attribute-value")
            elif c == _GT:
                return

    def _scan_declaration(self) -> Token:
        c = self._require("markup-declaration")
        if c == _DOCTYPE_LEAD:
            while self._require("doctype") != _GT:
                pass
            return self._emit(TokenKind.DOCTYPE)

        if c != _DASH or self._require("comment") != _DASH:
            raise MalformedConstructError(
                "markup-declaration", self._line, "expected '--' or 'DOCTYPE' after '<!'"
            )

        # Track the last two body bytes so that the opening "--" never
        # participates in the closing "-->".
        prev2 = prev1 = -1
        while True:
            c = self._require("comment")
            if c == _GT and prev1 == _DASH and prev2 == _DASH:
                return self._emit(TokenKind.COMMENT)
            prev2, prev1 = prev1, c

    def _scan_content(self) -> Token:
        kind = self._mode
        while True:
            c = self._get()
            if c is None:
                self._exhausted = True
                break
            if c == _LT:
                self._unget(c)
                break
        return self._emit(kind)
