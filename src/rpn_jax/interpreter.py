"""Interpreter owning the shared stack and the word dictionary."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from functools import lru_cache
from typing import Final

from .ast import Call, Form, Literal, Program
from .builtins import install_all
from .dictionary import Dictionary, Native, NativeFunction, UserBlock
from .errors import RPNError, ResourceExhaustedError, TypeMismatchError
from .parser import parse
from .stack import Stack
from .values import Block, IntegerPrecision, Item, format_item, kind_of, validate_item

logger = logging.getLogger(__name__)

_DEFAULT_PRECISION: Final[IntegerPrecision] = IntegerPrecision.from_name(
    os.environ.get("RPN_JAX_INTEGER_PRECISION", "arbitrary")
)
_MAX_CALL_DEPTH: Final[int] = max(1, int(os.environ.get("RPN_JAX_MAX_CALL_DEPTH", "10000")))
_PROGRAM_CACHE_MAX: Final[int] = max(1, int(os.environ.get("RPN_JAX_PROGRAM_CACHE_MAX", "256")))

_END: Final = object()


@lru_cache(maxsize=_PROGRAM_CACHE_MAX)
def _parse_program_cached(source: str, precision: IntegerPrecision) -> Program:
    return parse(source, precision=precision)


def _forms_of(forms: Program | Block | Iterable[Form]) -> Iterable[Form]:
    if isinstance(forms, (Program, Block)):
        return forms.forms
    return forms


@dataclass(frozen=True)
class RunOutcome:
    """Result of ``Interpreter.run_with_errors``."""

    status: str
    stack: tuple[Item, ...]
    error: RPNError | None = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    def format_stack(self) -> str:
        return " ".join(format_item(item) for item in self.stack)

    def format_error(self) -> str:
        if self.error is None:
            return ""
        return f"{type(self.error).__name__}: {self.error}"


class Interpreter:
    """One stack, one dictionary, and the machinery that runs forms against them.

    Execution is synchronous and single-threaded. Separate instances share no
    state, so hosts running scripts concurrently should give each its own
    interpreter.
    """

    def __init__(
        self,
        precision: IntegerPrecision | str | None = None,
        *,
        builtins: bool = True,
        max_depth: int | None = None,
    ) -> None:
        self.precision = _DEFAULT_PRECISION if precision is None else IntegerPrecision.from_name(precision)
        self.max_depth = _MAX_CALL_DEPTH if max_depth is None else max_depth
        if self.max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self.stack = Stack()
        self.dictionary = Dictionary()
        self._active_frames = 0
        if builtins:
            install_all(self)

    def __repr__(self) -> str:
        return (
            f"Interpreter(precision={self.precision.value!r}, depth={len(self.stack)}, "
            f"words={len(self.dictionary)})"
        )

    # Embedding API -----------------------------------------------------

    def register(self, name: str, function: NativeFunction) -> None:
        """Bind ``name`` to host code; an existing word of that name is replaced."""
        if not callable(function):
            raise TypeError(f"native {name!r} must be callable")
        previous = self.dictionary.define(name, Native(name=name, function=function))
        if previous is not None:
            logger.debug("Overwriting %s word %r with a native", previous.kind, name)

    def bind(self, name: str, block: Block) -> None:
        """Bind ``name`` to a user-defined block; an existing word is replaced."""
        previous = self.dictionary.define(name, UserBlock(name=name, block=block))
        if previous is not None:
            logger.debug("Rebinding %s word %r", previous.kind, name)

    def push(self, item: object) -> None:
        self.stack.append(validate_item(item, precision=self.precision, where="pushed item"))

    def pop(self) -> Item:
        return self.stack.pop_item(where="pop")

    def peek(self, depth: int = 0) -> Item:
        return self.stack.peek(depth, where="peek")

    @property
    def depth(self) -> int:
        return len(self.stack)

    def items(self) -> tuple[Item, ...]:
        """Stack contents, bottom first."""
        return self.stack.snapshot()

    # Running -----------------------------------------------------------

    def parse(self, source: str) -> Program:
        return _parse_program_cached(source, self.precision)

    def run(self, source: str) -> None:
        """Parse and execute ``source``; raises the first error encountered."""
        try:
            self.execute(self.parse(source))
        except RPNError as exc:
            logger.debug("Run aborted by %s: %s", type(exc).__name__, exc)
            raise

    def run_with_errors(self, source: str) -> RunOutcome:
        """Like ``run`` but reports failure in the returned outcome."""
        try:
            self.run(source)
        except RPNError as exc:
            return RunOutcome(status="error", stack=self.stack.snapshot(), error=exc)
        return RunOutcome(status="ok", stack=self.stack.snapshot())

    def call(self, name: str) -> None:
        """Invoke word ``name`` as if it appeared in source."""
        self.execute((Call(name),))

    def run_block(self, block: Item, *, where: str = "call") -> None:
        if not isinstance(block, Block):
            raise TypeMismatchError(where, "block", kind_of(block).value)
        self.execute(block.forms)

    def execute(self, forms: Program | Block | Iterable[Form]) -> None:
        """Run forms left to right against the shared stack and dictionary.

        User-defined words are entered on an explicit frame list instead of
        recursing, so call depth is limited by ``max_depth`` rather than the
        host stack. Natives that run blocks re-enter ``execute``.
        """
        frames: list[Iterator[Form]] = [iter(_forms_of(forms))]
        self._active_frames += 1
        current = "execute"
        try:
            while frames:
                form = next(frames[-1], _END)
                if form is _END:
                    frames.pop()
                    self._active_frames -= 1
                    continue

                if isinstance(form, Literal):
                    self.stack.append(form.value)
                    continue

                if not isinstance(form, Call):
                    raise TypeError(f"Unsupported form: {type(form)!r}")
                current = form.name
                definition = self.dictionary.lookup(form.name, pos=form.pos)
                if isinstance(definition, UserBlock):
                    if self._active_frames >= self.max_depth:
                        raise ResourceExhaustedError(
                            form.name, f"call depth exceeded the limit of {self.max_depth}"
                        )
                    frames.append(iter(definition.block.forms))
                    self._active_frames += 1
                else:
                    definition.function(self)
        except RecursionError as exc:
            raise ResourceExhaustedError(current, "host recursion limit reached") from exc
        finally:
            self._active_frames -= len(frames)
