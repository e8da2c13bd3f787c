"""Tokenization of rpn-jax source text."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

from .errors import LexError


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    pos: int
    end: int


_SINGLE_TOKENS = {
    "{": "LBRACE",
    "}": "RBRACE",
}

# Characters that always end a word run.
_DELIMITERS = frozenset("{}()")

_INTEGER_RE = re.compile(r"[+-]?[0-9]+\Z")
_FLOAT_RE = re.compile(
    r"""
    [+-]?
    (?:
        [0-9]+\.[0-9]*(?:[eE][+-]?[0-9]+)?     # 1.  1.5  1.5e3
      | \.[0-9]+(?:[eE][+-]?[0-9]+)?           # .5  .5e-2
      | [0-9]+[eE][+-]?[0-9]+                  # 1e9
    )
    \Z
    """,
    re.VERBOSE,
)

_SIMPLE_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "0": "\0",
    "\\": "\\",
    '"': '"',
    "'": "'",
}
_HEX_ESCAPE_WIDTHS = {"x": 2, "u": 4, "U": 8}
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def _parse_escaped_codepoint(source: str, start: int) -> tuple[str, int]:
    """Decode the escape whose letter sits at ``start`` (just after the backslash)."""
    if start >= len(source):
        raise LexError("Incomplete escape sequence", start - 1, start, incomplete=True)

    esc = source[start]
    if esc in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[esc], start + 1

    width = _HEX_ESCAPE_WIDTHS.get(esc)
    if width is None:
        raise LexError(f"Unknown escape sequence \\{esc}", start - 1, start + 1)

    hex_end = start + 1 + width
    if hex_end > len(source):
        raise LexError(f"Incomplete \\{esc} escape", start - 1, len(source), incomplete=True)
    digits = source[start + 1 : hex_end]
    if not all(ch in _HEX_DIGITS for ch in digits):
        raise LexError(f"Invalid \\{esc} escape", start - 1, hex_end)
    try:
        return chr(int(digits, 16)), hex_end
    except (ValueError, OverflowError) as exc:
        raise LexError(f"Invalid \\{esc} escape", start - 1, hex_end) from exc


def _scan_string(source: str, start: int) -> tuple[str, int]:
    assert source[start] == '"'
    i = start + 1
    out: list[str] = []
    while i < len(source):
        ch = source[i]
        if ch == '"':
            return "".join(out), i + 1
        if ch == "\\":
            escaped, i = _parse_escaped_codepoint(source, i + 1)
            out.append(escaped)
            continue
        out.append(ch)
        i += 1
    raise LexError("Unterminated string literal", start, len(source), incomplete=True)


def _scan_comment(source: str, start: int) -> int:
    # Comments do not nest: the first ')' closes, whatever '(' came before it.
    close = source.find(")", start + 1)
    if close < 0:
        raise LexError("Unterminated comment", start, len(source), incomplete=True)
    return close + 1


def _scan_run(source: str, start: int) -> int:
    i = start
    while i < len(source) and not source[i].isspace() and source[i] not in _DELIMITERS:
        i += 1
    return i


def _classify_run(text: str, start: int, end: int) -> Token:
    if text.startswith(":"):
        if len(text) == 1:
            raise LexError("Empty symbol name", start, end)
        return Token("SYMBOL", text[1:], start, end)
    if _INTEGER_RE.match(text):
        return Token("INTEGER", text, start, end)
    if _FLOAT_RE.match(text):
        return Token("FLOAT", text, start, end)
    return Token("WORD", text, start, end)


def iter_tokens(source: str) -> Iterator[Token]:
    """Lazily yield tokens for ``source``, ending with a single EOF token."""
    i = 0
    while i < len(source):
        ch = source[i]

        if ch.isspace():
            i += 1
            continue

        if ch == "(":
            i = _scan_comment(source, i)
            continue

        if ch == ")":
            raise LexError("Unexpected ')'", i, i + 1, found="')'")

        if ch in _SINGLE_TOKENS:
            yield Token(_SINGLE_TOKENS[ch], ch, i, i + 1)
            i += 1
            continue

        if ch == '"':
            value, end = _scan_string(source, i)
            yield Token("STRING", value, i, end)
            i = end
            continue

        end = _scan_run(source, i)
        yield _classify_run(source[i:end], i, end)
        i = end

    yield Token("EOF", "", len(source), len(source))


class Lexer:
    """Restartable token sequence: every iteration rescans from the start."""

    def __init__(self, source: str) -> None:
        self.source = source

    def __iter__(self) -> Iterator[Token]:
        return iter_tokens(self.source)

    def __repr__(self) -> str:
        return f"Lexer({self.source!r})"


def tokenize(source: str) -> list[Token]:
    return list(iter_tokens(source))
