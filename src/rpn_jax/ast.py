"""Parsed forms: the units a program or block is made of."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from .values import Item


@dataclass(frozen=True)
class Literal:
    value: "Item"


@dataclass(frozen=True)
class Call:
    name: str
    pos: int = field(default=-1, compare=False)


@dataclass(frozen=True)
class Program:
    forms: tuple["Form", ...]


Form = Union[Literal, Call]
