"""Word dictionary mapping names to native or user-defined definitions."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Union

from .errors import UndefinedWordError
from .values import Block

if TYPE_CHECKING:
    from .interpreter import Interpreter

NativeFunction = Callable[["Interpreter"], None]


@dataclass(frozen=True)
class Native:
    """Host-supplied code; receives the interpreter and works on its stack."""

    name: str
    function: NativeFunction

    @property
    def kind(self) -> str:
        return "native"


@dataclass(frozen=True)
class UserBlock:
    """Block bound with ``fn``; calling it runs the forms on the shared stack."""

    name: str
    block: Block

    @property
    def kind(self) -> str:
        return "block"


Definition = Union[Native, UserBlock]


class Dictionary(Mapping[str, Definition]):
    """Per-interpreter word table.

    Read-only as a mapping; ``define`` is the only mutator and entries are
    never removed, only overwritten.
    """

    def __init__(self, data: Mapping[str, Definition] | None = None) -> None:
        self._data: dict[str, Definition] = {}
        if data is not None:
            for name, definition in data.items():
                self.define(name, definition)

    def __getitem__(self, key: str) -> Definition:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Dictionary({sorted(self._data)!r})"

    def define(self, name: str, definition: Definition) -> Definition | None:
        """Insert or overwrite ``name``; returns the definition it replaced."""
        if not isinstance(name, str) or not name:
            raise ValueError("word names must be non-empty strings")
        if not isinstance(definition, (Native, UserBlock)):
            raise TypeError(f"unsupported definition type {type(definition).__name__}")
        previous = self._data.get(name)
        self._data[name] = definition
        return previous

    def lookup(self, name: str, *, pos: int | None = None) -> Definition:
        try:
            return self._data[name]
        except KeyError:
            raise UndefinedWordError(name, pos) from None

    def user_words(self) -> dict[str, Block]:
        return {name: d.block for name, d in self._data.items() if isinstance(d, UserBlock)}

    def native_words(self) -> list[str]:
        return sorted(name for name, d in self._data.items() if isinstance(d, Native))

    def copy(self) -> "Dictionary":
        return Dictionary(self._data)
