"""The shared data stack."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional, Union

from .errors import StackUnderflowError, TypeMismatchError
from .values import Item, ItemKind, kind_of

KindSpec = Optional[Union[ItemKind, Iterable[ItemKind]]]


def _describe(spec: KindSpec) -> str:
    if spec is None:
        return "any item"
    if isinstance(spec, ItemKind):
        return spec.value
    return " or ".join(sorted(kind.value for kind in spec))


def _accepts(spec: KindSpec, kind: ItemKind) -> bool:
    if spec is None:
        return True
    if isinstance(spec, ItemKind):
        return kind is spec
    return kind in spec


class Stack(list):
    """LIFO item stack; the end of the list is the top.

    All checked pops validate depth (and kinds) before removing anything,
    so a failing native leaves the stack exactly as it found it.
    """

    def require(self, count: int, *, where: str) -> None:
        if len(self) < count:
            raise StackUnderflowError(where, count, len(self))

    def peek(self, depth: int = 0, *, where: str = "peek") -> Item:
        self.require(depth + 1, where=where)
        return self[-1 - depth]

    def pop_item(self, *, where: str) -> Item:
        self.require(1, where=where)
        return self.pop()

    def pop_many(self, count: int, *, where: str) -> list[Item]:
        """Remove the top ``count`` items and return them bottom-to-top."""
        self.require(count, where=where)
        if count == 0:
            return []
        items = self[-count:]
        del self[-count:]
        return items

    def check_kinds(self, *kinds: KindSpec, where: str) -> None:
        self.require(len(kinds), where=where)
        top = self[len(self) - len(kinds) :]
        for spec, item in zip(kinds, top, strict=True):
            found = kind_of(item)
            if not _accepts(spec, found):
                raise TypeMismatchError(where, _describe(spec), found.value)

    def peek_typed(self, *kinds: KindSpec, where: str) -> list[Item]:
        """Return the top items (bottom-to-top) after checking them, without popping."""
        self.check_kinds(*kinds, where=where)
        if not kinds:
            return []
        return self[-len(kinds) :]

    def pop_typed(self, *kinds: KindSpec, where: str) -> list[Item]:
        """Pop one item per kind spec (listed bottom-to-top) after checking them all."""
        self.check_kinds(*kinds, where=where)
        return self.pop_many(len(kinds), where=where)

    def snapshot(self) -> tuple[Item, ...]:
        return tuple(self)

    def restore(self, snapshot: Iterable[Item]) -> None:
        self[:] = list(snapshot)
