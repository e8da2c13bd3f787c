"""Runtime item model and validators for the rpn-jax stack."""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Union

from .ast import Call, Literal

if TYPE_CHECKING:
    from .ast import Form


@dataclass(frozen=True)
class Symbol:
    """Name used as data; written ``:name`` in source."""

    name: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Symbol name must be non-empty")

    def __str__(self) -> str:
        return f":{self.name}"


@dataclass(frozen=True)
class Block:
    """Parsed, not-yet-executed form sequence."""

    forms: tuple["Form", ...] = ()

    def __len__(self) -> int:
        return len(self.forms)

    def __iter__(self):
        return iter(self.forms)


Item = Union[int, float, str, bool, Symbol, Block]


class ItemKind(str, Enum):
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    BOOL = "bool"
    SYMBOL = "symbol"
    BLOCK = "block"


NUMERIC_KINDS = frozenset({ItemKind.INTEGER, ItemKind.FLOAT})


class IntegerPrecision(str, Enum):
    """Integer representation chosen once per interpreter."""

    ARBITRARY = "arbitrary"
    INT64 = "int64"
    INT32 = "int32"

    @classmethod
    def from_name(cls, name: "str | IntegerPrecision") -> "IntegerPrecision":
        if isinstance(name, IntegerPrecision):
            return name
        try:
            return cls(name.strip().lower())
        except ValueError as exc:
            choices = ", ".join(p.value for p in cls)
            raise ValueError(f"Unknown integer precision {name!r}; expected one of {choices}") from exc

    @property
    def bits(self) -> int | None:
        if self is IntegerPrecision.INT64:
            return 64
        if self is IntegerPrecision.INT32:
            return 32
        return None

    @property
    def is_fixed(self) -> bool:
        return self.bits is not None

    @property
    def min_value(self) -> int | None:
        bits = self.bits
        return None if bits is None else -(1 << (bits - 1))

    @property
    def max_value(self) -> int | None:
        bits = self.bits
        return None if bits is None else (1 << (bits - 1)) - 1

    def contains(self, value: int) -> bool:
        if self.bits is None:
            return True
        return self.min_value <= value <= self.max_value

    def wrap(self, value: int) -> int:
        """Reduce ``value`` to this width with two's-complement wrap-around."""
        bits = self.bits
        if bits is None:
            return value
        mask = (1 << bits) - 1
        value &= mask
        if value >> (bits - 1):
            value -= 1 << bits
        return value


def kind_of(value: object) -> ItemKind:
    # bool before int: bool is an int subclass.
    if isinstance(value, bool):
        return ItemKind.BOOL
    if isinstance(value, int):
        return ItemKind.INTEGER
    if isinstance(value, float):
        return ItemKind.FLOAT
    if isinstance(value, str):
        return ItemKind.STRING
    if isinstance(value, Symbol):
        return ItemKind.SYMBOL
    if isinstance(value, Block):
        return ItemKind.BLOCK
    raise TypeError(f"unsupported runtime type {type(value).__name__}")


def validate_item(
    value: object,
    *,
    precision: IntegerPrecision = IntegerPrecision.ARBITRARY,
    where: str = "value",
) -> Item:
    """Normalise a host value into an Item, or raise TypeError/ValueError."""
    if isinstance(value, (bool, str, Symbol, Block)):
        return value
    if isinstance(value, numbers.Integral):
        as_int = int(value)
        if not precision.contains(as_int):
            raise ValueError(f"{where} {format_integer(as_int)} does not fit {precision.value} integers")
        return as_int
    if isinstance(value, numbers.Real):
        return float(value)
    raise TypeError(f"{where} has unsupported runtime type {type(value).__name__}")


def items_equal(left: Item, right: Item) -> bool:
    """Kind-and-value equality; ``1``, ``1.0`` and ``true`` are pairwise distinct."""
    kind = kind_of(left)
    if kind is not kind_of(right):
        return False
    if kind is ItemKind.BLOCK:
        # Dataclass == would compare nested literals with plain Python ==.
        if len(left.forms) != len(right.forms):
            return False
        return all(_forms_equal(a, b) for a, b in zip(left.forms, right.forms))
    return left == right


def _forms_equal(left: "Form", right: "Form") -> bool:
    if isinstance(left, Literal) and isinstance(right, Literal):
        return items_equal(left.value, right.value)
    if isinstance(left, Call) and isinstance(right, Call):
        return left.name == right.name
    return False


_STRING_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\0": "\\0",
}


def _format_string(text: str) -> str:
    return '"' + "".join(_STRING_ESCAPES.get(ch, ch) for ch in text) + '"'


def format_form(form: "Form") -> str:
    if isinstance(form, Literal):
        return format_item(form.value)
    if isinstance(form, Call):
        return form.name
    raise TypeError(f"Unsupported form: {type(form)!r}")


def format_item(item: Item) -> str:
    """Render an item in source-like syntax for front ends."""
    kind = kind_of(item)
    if kind is ItemKind.BOOL:
        return "true" if item else "false"
    if kind is ItemKind.STRING:
        return _format_string(item)
    if kind is ItemKind.SYMBOL:
        return str(item)
    if kind is ItemKind.BLOCK:
        if not item.forms:
            return "{ }"
        return "{ " + " ".join(format_form(form) for form in item.forms) + " }"
    if kind is ItemKind.INTEGER:
        return format_integer(item)
    return repr(item)


def format_integer(value: int) -> str:
    """Decimal text, or hex once the value passes the host's decimal digit limit."""
    try:
        return str(value)
    except ValueError:
        return hex(value)
