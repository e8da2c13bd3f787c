from __future__ import annotations

import math
import sys
import unittest
from fractions import Fraction

from rpn_jax.ast import Call, Literal
from rpn_jax.dictionary import Dictionary, Native, UserBlock
from rpn_jax.errors import StackUnderflowError, TypeMismatchError, UndefinedWordError
from rpn_jax.stack import Stack
from rpn_jax.values import (
    NUMERIC_KINDS,
    Block,
    IntegerPrecision,
    ItemKind,
    Symbol,
    format_integer,
    format_item,
    items_equal,
    kind_of,
    validate_item,
)

_INT_DIGIT_LIMIT = sys.get_int_max_str_digits() if hasattr(sys, "get_int_max_str_digits") else 0


class ItemModelTests(unittest.TestCase):
    def test_kind_of(self) -> None:
        cases = [
            (1, ItemKind.INTEGER),
            (2**80, ItemKind.INTEGER),
            (1.0, ItemKind.FLOAT),
            ("s", ItemKind.STRING),
            (True, ItemKind.BOOL),
            (False, ItemKind.BOOL),
            (Symbol("x"), ItemKind.SYMBOL),
            (Block(), ItemKind.BLOCK),
        ]
        for value, kind in cases:
            with self.subTest(value=value):
                self.assertIs(kind_of(value), kind)
        with self.assertRaises(TypeError):
            kind_of(None)

    def test_symbol_requires_name(self) -> None:
        with self.assertRaises(ValueError):
            Symbol("")
        self.assertEqual(str(Symbol("fib")), ":fib")

    def test_items_equal_is_kind_strict(self) -> None:
        self.assertTrue(items_equal(1, 1))
        self.assertTrue(items_equal("a", "a"))
        self.assertTrue(items_equal(Symbol("a"), Symbol("a")))
        self.assertTrue(items_equal(Block((Call("dup"),)), Block((Call("dup"),))))
        self.assertFalse(items_equal(1, 1.0))
        self.assertFalse(items_equal(1, True))
        self.assertFalse(items_equal(0, False))
        self.assertFalse(items_equal("a", Symbol("a")))
        self.assertFalse(items_equal(math.nan, math.nan))

    def test_validate_item(self) -> None:
        self.assertEqual(validate_item(3), 3)
        self.assertIs(validate_item(True), True)
        self.assertEqual(validate_item(Fraction(1, 2)), 0.5)
        self.assertIsInstance(validate_item(Fraction(1, 2)), float)
        with self.assertRaises(TypeError):
            validate_item(None)
        with self.assertRaises(TypeError):
            validate_item([1, 2])
        with self.assertRaises(ValueError):
            validate_item(2**31, precision=IntegerPrecision.INT32)
        self.assertEqual(validate_item(-(2**31), precision=IntegerPrecision.INT32), -(2**31))

    def test_format_item(self) -> None:
        self.assertEqual(format_item(3), "3")
        self.assertEqual(format_item(2.5), "2.5")
        self.assertEqual(format_item(math.inf), "inf")
        self.assertEqual(format_item(True), "true")
        self.assertEqual(format_item(False), "false")
        self.assertEqual(format_item('a"b\n'), '"a\\"b\\n"')
        self.assertEqual(format_item(Symbol("k")), ":k")
        self.assertEqual(format_item(Block()), "{ }")
        block = Block((Literal(1), Literal(Block((Call("dup"),))), Call("call")))
        self.assertEqual(format_item(block), "{ 1 { dup } call }")

    def test_block_equality_is_kind_strict_per_literal(self) -> None:
        def block(*forms):
            return Block(tuple(forms))

        self.assertTrue(items_equal(block(Literal(1), Call("dup")), block(Literal(1), Call("dup"))))
        self.assertFalse(items_equal(block(Literal(1)), block(Literal(1.0))))
        self.assertFalse(items_equal(block(Literal(1)), block(Literal(True))))
        self.assertFalse(items_equal(block(Literal(0)), block(Literal(False))))
        self.assertFalse(items_equal(block(Literal(1)), block(Literal(1), Literal(1))))
        self.assertFalse(items_equal(block(Call("dup")), block(Literal("dup"))))
        self.assertFalse(items_equal(block(Call("dup")), block(Call("swap"))))

        inner_int = block(Literal(block(Literal(2))))
        inner_float = block(Literal(block(Literal(2.0))))
        self.assertTrue(items_equal(inner_int, block(Literal(block(Literal(2))))))
        self.assertFalse(items_equal(inner_int, inner_float))

    @unittest.skipUnless(_INT_DIGIT_LIMIT, "host has no integer digit limit")
    def test_format_integer_past_digit_limit(self) -> None:
        huge = 10 ** (_INT_DIGIT_LIMIT + 10)
        self.assertEqual(format_integer(huge), hex(huge))
        self.assertEqual(format_integer(-huge), hex(-huge))
        self.assertEqual(format_item(huge), hex(huge))
        self.assertEqual(format_item(Block((Literal(huge),))), "{ " + hex(huge) + " }")
        self.assertEqual(format_integer(12345), "12345")

    def test_numeric_kinds(self) -> None:
        self.assertEqual(NUMERIC_KINDS, {ItemKind.INTEGER, ItemKind.FLOAT})


class IntegerPrecisionTests(unittest.TestCase):
    def test_from_name(self) -> None:
        self.assertIs(IntegerPrecision.from_name("INT32"), IntegerPrecision.INT32)
        self.assertIs(IntegerPrecision.from_name(" arbitrary "), IntegerPrecision.ARBITRARY)
        self.assertIs(IntegerPrecision.from_name(IntegerPrecision.INT64), IntegerPrecision.INT64)
        with self.assertRaises(ValueError):
            IntegerPrecision.from_name("int16")

    def test_bounds(self) -> None:
        self.assertIsNone(IntegerPrecision.ARBITRARY.bits)
        self.assertFalse(IntegerPrecision.ARBITRARY.is_fixed)
        self.assertEqual(IntegerPrecision.INT32.min_value, -(2**31))
        self.assertEqual(IntegerPrecision.INT32.max_value, 2**31 - 1)
        self.assertEqual(IntegerPrecision.INT64.max_value, 2**63 - 1)
        self.assertTrue(IntegerPrecision.ARBITRARY.contains(2**200))
        self.assertFalse(IntegerPrecision.INT64.contains(2**63))
        for precision in (IntegerPrecision.INT32, IntegerPrecision.INT64):
            with self.subTest(precision=precision):
                self.assertTrue(precision.contains(precision.min_value))
                self.assertTrue(precision.contains(precision.max_value))
                self.assertFalse(precision.contains(precision.min_value - 1))
                self.assertFalse(precision.contains(precision.max_value + 1))

    def test_wrap(self) -> None:
        self.assertEqual(IntegerPrecision.INT32.wrap(2**31), -(2**31))
        self.assertEqual(IntegerPrecision.INT32.wrap(-(2**31) - 1), 2**31 - 1)
        self.assertEqual(IntegerPrecision.INT64.wrap(2**64 + 5), 5)
        self.assertEqual(IntegerPrecision.ARBITRARY.wrap(2**64 + 5), 2**64 + 5)


class StackTests(unittest.TestCase):
    def test_peek_and_pop(self) -> None:
        stack = Stack([1, 2, 3])
        self.assertEqual(stack.peek(), 3)
        self.assertEqual(stack.peek(2), 1)
        self.assertEqual(stack.pop_item(where="t"), 3)
        self.assertEqual(stack.pop_many(2, where="t"), [1, 2])
        self.assertEqual(stack.pop_many(0, where="t"), [])
        self.assertEqual(len(stack), 0)

    def test_underflow_leaves_stack_untouched(self) -> None:
        stack = Stack([1])
        with self.assertRaises(StackUnderflowError) as cm:
            stack.pop_many(2, where="swap")
        self.assertEqual(cm.exception.operation, "swap")
        self.assertEqual((cm.exception.required, cm.exception.available), (2, 1))
        self.assertEqual(list(stack), [1])

    def test_typed_pop_checks_all_before_popping(self) -> None:
        stack = Stack([Symbol("x"), 5])
        with self.assertRaises(TypeMismatchError) as cm:
            stack.pop_typed(ItemKind.SYMBOL, ItemKind.BLOCK, where="fn")
        self.assertEqual(cm.exception.expected, "block")
        self.assertEqual(cm.exception.found, "integer")
        self.assertEqual(list(stack), [Symbol("x"), 5])

        stack = Stack([1, 2.0])
        self.assertEqual(stack.peek_typed(NUMERIC_KINDS, NUMERIC_KINDS, where="+"), [1, 2.0])
        self.assertEqual(len(stack), 2)
        self.assertEqual(stack.pop_typed(None, ItemKind.FLOAT, where="t"), [1, 2.0])
        self.assertEqual(len(stack), 0)

    def test_snapshot_restore(self) -> None:
        stack = Stack([1, "a"])
        snap = stack.snapshot()
        stack.append(3)
        stack.restore(snap)
        self.assertEqual(stack.snapshot(), (1, "a"))


def _noop(vm) -> None:
    return None


class DictionaryTests(unittest.TestCase):
    def test_define_and_lookup(self) -> None:
        words = Dictionary()
        self.assertIsNone(words.define("x", Native("x", _noop)))
        previous = words.define("x", UserBlock("x", Block()))
        self.assertIsInstance(previous, Native)
        self.assertEqual(words.lookup("x").kind, "block")
        self.assertEqual(len(words), 1)
        self.assertEqual(words.user_words(), {"x": Block()})
        self.assertEqual(words.native_words(), [])

    def test_undefined_lookup(self) -> None:
        with self.assertRaises(UndefinedWordError) as cm:
            Dictionary().lookup("nope", pos=7)
        self.assertEqual(cm.exception.name, "nope")
        self.assertEqual(cm.exception.pos, 7)

    def test_define_validates(self) -> None:
        words = Dictionary()
        with self.assertRaises(ValueError):
            words.define("", Native("", _noop))
        with self.assertRaises(TypeError):
            words.define("x", Block())  # type: ignore[arg-type]
        self.assertEqual(len(words), 0)

    def test_copy_is_independent(self) -> None:
        words = Dictionary({"a": Native("a", _noop)})
        clone = words.copy()
        clone.define("b", Native("b", _noop))
        self.assertNotIn("b", words)
        self.assertEqual(sorted(clone), ["a", "b"])


if __name__ == "__main__":
    unittest.main()
