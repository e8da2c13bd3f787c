"""Standard native words installed into new interpreters.

Every native follows the same discipline: check depth and operand kinds,
compute, and only then touch the stack, so a native that fails on its own
operands leaves the stack as it found it. Combinators pop their operands
before running blocks, so errors raised inside a block leave whatever that
block produced.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Final

from .errors import InvalidArgumentError, NumericConversionError, OutOfBoundsError
from .numeric import ARITHMETIC_OPS, binary_arithmetic, compare, float_to_integer, integer_to_float
from .values import NUMERIC_KINDS, ItemKind, format_integer, items_equal, kind_of

if TYPE_CHECKING:
    from .interpreter import Interpreter

_ANY: Final = None


def _replace_top(vm: "Interpreter", count: int, *results) -> None:
    if count:
        del vm.stack[-count:]
    vm.stack.extend(results)


# Stack shuffling ------------------------------------------------------


def _swap(vm: "Interpreter") -> None:
    a, b = vm.stack.pop_many(2, where="swap")
    vm.stack.extend((b, a))


def _dup(vm: "Interpreter") -> None:
    vm.stack.append(vm.stack.peek(where="dup"))


def _pop(vm: "Interpreter") -> None:
    vm.stack.pop_item(where="pop")


def _over(vm: "Interpreter") -> None:
    vm.stack.require(2, where="over")
    vm.stack.append(vm.stack[-2])


def _rot(vm: "Interpreter") -> None:
    a, b, c = vm.stack.pop_many(3, where="rot")
    vm.stack.extend((b, c, a))


def _clear(vm: "Interpreter") -> None:
    vm.stack.clear()


def _len(vm: "Interpreter") -> None:
    vm.stack.append(len(vm.stack))


def _clone_nth(vm: "Interpreter") -> None:
    (n,) = vm.stack.peek_typed(ItemKind.INTEGER, where="clone-nth")
    available = len(vm.stack) - 1
    if not 1 <= n <= available:
        raise OutOfBoundsError("clone-nth", f"index {format_integer(n)} outside 1..{available}")
    item = vm.stack[-1 - n]
    _replace_top(vm, 1, item)


_STACK_WORDS: Final[dict[str, Callable[["Interpreter"], None]]] = {
    "swap": _swap,
    "dup": _dup,
    "clone": _dup,
    "pop": _pop,
    "drop": _pop,
    "over": _over,
    "rot": _rot,
    "clear": _clear,
    "len": _len,
    "clone-nth": _clone_nth,
}


# Arithmetic and comparison --------------------------------------------


def _arithmetic_native(op: str) -> Callable[["Interpreter"], None]:
    def native(vm: "Interpreter") -> None:
        left, right = vm.stack.peek_typed(NUMERIC_KINDS, NUMERIC_KINDS, where=op)
        result = binary_arithmetic(op, left, right, precision=vm.precision, where=op)
        _replace_top(vm, 2, result)

    native.__name__ = f"arithmetic_{op}"
    return native


def _comparison_native(op: str) -> Callable[["Interpreter"], None]:
    def native(vm: "Interpreter") -> None:
        left, right = vm.stack.peek_typed(NUMERIC_KINDS, NUMERIC_KINDS, where=op)
        _replace_top(vm, 2, compare(op, left, right))

    native.__name__ = f"compare_{op}"
    return native


# Booleans -------------------------------------------------------------


def _true(vm: "Interpreter") -> None:
    vm.stack.append(True)


def _false(vm: "Interpreter") -> None:
    vm.stack.append(False)


def _eq(vm: "Interpreter") -> None:
    a, b = vm.stack.peek_typed(_ANY, _ANY, where="eq")
    _replace_top(vm, 2, items_equal(a, b))


def _not(vm: "Interpreter") -> None:
    (a,) = vm.stack.peek_typed(ItemKind.BOOL, where="not")
    _replace_top(vm, 1, not a)


def _and(vm: "Interpreter") -> None:
    a, b = vm.stack.peek_typed(ItemKind.BOOL, ItemKind.BOOL, where="and")
    _replace_top(vm, 2, a and b)


def _or(vm: "Interpreter") -> None:
    a, b = vm.stack.peek_typed(ItemKind.BOOL, ItemKind.BOOL, where="or")
    _replace_top(vm, 2, a or b)


_BOOLEAN_WORDS: Final[dict[str, Callable[["Interpreter"], None]]] = {
    "true": _true,
    "false": _false,
    "eq": _eq,
    "not": _not,
    "and": _and,
    "or": _or,
}


# Conversions and strings ----------------------------------------------


def _as_integer(vm: "Interpreter") -> None:
    (value,) = vm.stack.peek_typed(NUMERIC_KINDS, where="as-integer")
    if isinstance(value, float):
        value = float_to_integer(value, precision=vm.precision, where="as-integer")
    _replace_top(vm, 1, value)


def _as_float(vm: "Interpreter") -> None:
    (value,) = vm.stack.peek_typed(NUMERIC_KINDS, where="as-float")
    if isinstance(value, int):
        value = integer_to_float(value, where="as-float")
    _replace_top(vm, 1, value)


def _to_string(vm: "Interpreter") -> None:
    kinds = {ItemKind.INTEGER, ItemKind.FLOAT, ItemKind.STRING, ItemKind.BOOL, ItemKind.SYMBOL}
    (value,) = vm.stack.peek_typed(kinds, where="to-string")
    kind = kind_of(value)
    if kind is ItemKind.BOOL:
        text = "true" if value else "false"
    elif kind is ItemKind.SYMBOL:
        text = value.name
    elif kind is ItemKind.FLOAT:
        text = repr(value)
    elif kind is ItemKind.INTEGER:
        try:
            text = str(value)
        except ValueError as exc:
            raise NumericConversionError(
                "to-string", f"integer of {value.bit_length()} bits exceeds the decimal digit limit"
            ) from exc
    else:
        text = value
    _replace_top(vm, 1, text)


def _cat(vm: "Interpreter") -> None:
    a, b = vm.stack.peek_typed(ItemKind.STRING, ItemKind.STRING, where="cat")
    _replace_top(vm, 2, a + b)


_CONVERSION_WORDS: Final[dict[str, Callable[["Interpreter"], None]]] = {
    "as-integer": _as_integer,
    "as-float": _as_float,
    "to-string": _to_string,
    "cat": _cat,
}


# Binding and control flow ---------------------------------------------


def _fn(vm: "Interpreter") -> None:
    symbol, block = vm.stack.pop_typed(ItemKind.SYMBOL, ItemKind.BLOCK, where="fn")
    vm.bind(symbol.name, block)


def _call(vm: "Interpreter") -> None:
    (block,) = vm.stack.pop_typed(ItemKind.BLOCK, where="call")
    vm.run_block(block)


def _if(vm: "Interpreter") -> None:
    condition, block = vm.stack.pop_typed(ItemKind.BOOL, ItemKind.BLOCK, where="if")
    if condition:
        vm.run_block(block, where="if")


def _ifelse(vm: "Interpreter") -> None:
    condition, then_block, else_block = vm.stack.pop_typed(
        ItemKind.BOOL, ItemKind.BLOCK, ItemKind.BLOCK, where="ifelse"
    )
    vm.run_block(then_block if condition else else_block, where="ifelse")


def _while(vm: "Interpreter") -> None:
    condition_block, body = vm.stack.pop_typed(ItemKind.BLOCK, ItemKind.BLOCK, where="while")
    while True:
        vm.run_block(condition_block, where="while")
        (condition,) = vm.stack.pop_typed(ItemKind.BOOL, where="while")
        if not condition:
            break
        vm.run_block(body, where="while")


def _times(vm: "Interpreter") -> None:
    count, block = vm.stack.peek_typed(ItemKind.INTEGER, ItemKind.BLOCK, where="times")
    if count < 0:
        raise InvalidArgumentError("times", f"repeat count must be non-negative, got {format_integer(count)}")
    del vm.stack[-2:]
    for _ in range(count):
        vm.run_block(block, where="times")


_CONTROL_WORDS: Final[dict[str, Callable[["Interpreter"], None]]] = {
    "fn": _fn,
    "call": _call,
    "if": _if,
    "ifelse": _ifelse,
    "while": _while,
    "times": _times,
}


# Installers -----------------------------------------------------------


def _install(vm: "Interpreter", words: dict[str, Callable[["Interpreter"], None]]) -> None:
    for name, function in words.items():
        vm.register(name, function)


def install_stack_ops(vm: "Interpreter") -> None:
    _install(vm, _STACK_WORDS)


def install_arithmetic(vm: "Interpreter") -> None:
    for op in ARITHMETIC_OPS:
        vm.register(op, _arithmetic_native(op))
    for op in ("lt", "gt"):
        vm.register(op, _comparison_native(op))


def install_boolean_ops(vm: "Interpreter") -> None:
    _install(vm, _BOOLEAN_WORDS)


def install_conversions(vm: "Interpreter") -> None:
    _install(vm, _CONVERSION_WORDS)


def install_control_flow(vm: "Interpreter") -> None:
    _install(vm, _CONTROL_WORDS)


def install_all(vm: "Interpreter") -> None:
    install_stack_ops(vm)
    install_arithmetic(vm)
    install_boolean_ops(vm)
    install_conversions(vm)
    install_control_flow(vm)


def builtin_names() -> list[str]:
    names = [*_STACK_WORDS, *ARITHMETIC_OPS, "lt", "gt", *_BOOLEAN_WORDS, *_CONVERSION_WORDS, *_CONTROL_WORDS]
    return sorted(names)
