"""Structured error types for source/runtime separation."""

from __future__ import annotations


class RPNError(Exception):
    """Base class for structured rpn-jax errors."""


class SourceError(RPNError, SyntaxError):
    """Failure while turning source text into forms, located by offset span."""

    def __init__(
        self,
        message: str,
        start: int,
        end: int,
        expected: tuple[str, ...] = (),
        found: str | None = None,
        *,
        incomplete: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.start = start
        self.end = end
        self.expected = expected
        self.found = found
        self.incomplete = incomplete

    def __str__(self) -> str:
        expected_text = ""
        if self.expected:
            expected_text = f"; expected {', '.join(self.expected)}"
        found_text = ""
        if self.found is not None:
            found_text = f"; found {self.found}"
        return f"{self.message} at span [{self.start}, {self.end}){expected_text}{found_text}"


class LexError(SourceError):
    """Bad token, unterminated string or unterminated comment."""


class ParseError(SourceError):
    """Unmatched block delimiter or malformed literal."""


class RPNRuntimeError(RPNError):
    """Generic runtime failure after a successful parse."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation}: {message}")
        self.operation = operation
        self.message = message


class UndefinedWordError(RPNRuntimeError):
    def __init__(self, name: str, pos: int | None = None) -> None:
        where = "" if pos is None or pos < 0 else f" at index {pos}"
        super().__init__(name, f"undefined word{where}")
        self.name = name
        self.pos = pos


class StackUnderflowError(RPNRuntimeError):
    def __init__(self, operation: str, required: int, available: int) -> None:
        super().__init__(operation, f"needs {required} item(s) but the stack holds {available}")
        self.required = required
        self.available = available


class TypeMismatchError(RPNRuntimeError):
    def __init__(self, operation: str, expected: str, found: str) -> None:
        super().__init__(operation, f"expected {expected}, found {found}")
        self.expected = expected
        self.found = found


class DivisionByZeroError(RPNRuntimeError):
    def __init__(self, operation: str) -> None:
        super().__init__(operation, "integer division by zero")


class InvalidArgumentError(RPNRuntimeError):
    """Operand has the right type but an unusable value (e.g. a negative count)."""


class NumericConversionError(RPNRuntimeError):
    """Value cannot be represented in the requested numeric type."""


class OutOfBoundsError(RPNRuntimeError):
    """Stack index outside the current depth."""


class ResourceExhaustedError(RPNRuntimeError):
    """Nested block invocation exceeded the configured or host recursion budget."""
