"""Parser turning the token stream into nested form sequences."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from .ast import Call, Form, Literal, Program
from .errors import ParseError
from .lexer import Token, iter_tokens
from .values import Block, IntegerPrecision, Symbol

__all__ = ["ParseError", "parse", "parse_block"]


@dataclass
class _Parser:
    tokens: Iterator[Token]
    precision: IntegerPrecision = IntegerPrecision.ARBITRARY

    def parse_program(self) -> Program:
        return Program(forms=self._parse_forms(opener=None))

    def _error(
        self,
        tok: Token,
        *,
        message: str,
        expected: tuple[str, ...] = (),
        incomplete: bool = False,
    ) -> None:
        if tok.kind == "EOF":
            found = "EOF"
        elif tok.text:
            found = f"{tok.kind}({tok.text})"
        else:
            found = tok.kind
        raise ParseError(message, tok.pos, tok.end, expected=expected, found=found, incomplete=incomplete)

    def _parse_forms(self, opener: Token | None) -> tuple[Form, ...]:
        forms: list[Form] = []
        # The token iterator is shared with nested calls, so a nested block
        # resumes this loop right after its closing brace.
        for tok in self.tokens:
            if tok.kind == "LBRACE":
                try:
                    inner = self._parse_forms(opener=tok)
                except RecursionError:
                    self._error(tok, message="Blocks nested too deeply")
                forms.append(Literal(Block(inner)))
            elif tok.kind == "RBRACE":
                if opener is None:
                    self._error(tok, message="Unmatched '}'", expected=("EOF",))
                return tuple(forms)
            elif tok.kind == "EOF":
                if opener is not None:
                    self._error(opener, message="Unclosed block", expected=("RBRACE",), incomplete=True)
                return tuple(forms)
            else:
                forms.append(self._parse_atom(tok))
        raise AssertionError("token stream ended without EOF")

    def _parse_atom(self, tok: Token) -> Form:
        if tok.kind == "WORD":
            return Call(tok.text, pos=tok.pos)
        if tok.kind == "STRING":
            return Literal(tok.text)
        if tok.kind == "SYMBOL":
            return Literal(Symbol(tok.text))
        if tok.kind == "FLOAT":
            return Literal(float(tok.text))
        if tok.kind == "INTEGER":
            try:
                value = int(tok.text)
            except ValueError:
                # Host limit on decimal digits for str -> int conversion.
                self._error(tok, message=f"Malformed literal: integer has too many digits ({len(tok.text)})")
            if not self.precision.contains(value):
                self._error(tok, message=f"Malformed literal: integer out of {self.precision.value} range")
            return Literal(value)
        self._error(tok, message="Unexpected token")
        raise AssertionError("unreachable")


def parse(source: str, *, precision: IntegerPrecision = IntegerPrecision.ARBITRARY) -> Program:
    """Parse a whole program (the implicit top-level block)."""
    return _Parser(iter_tokens(source), precision=precision).parse_program()


def parse_block(source: str, *, precision: IntegerPrecision = IntegerPrecision.ARBITRARY) -> Block:
    """Parse ``source`` as the body of a Block value."""
    return Block(parse(source, precision=precision).forms)
