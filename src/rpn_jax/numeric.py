"""Numeric kernels for stack arithmetic on top of JAX.

Integer items in a fixed-width interpreter and every float operation are
computed by ``jax.lax`` scalar kernels on the matching dtype, which gives
two's-complement wrap-around for fixed-width integers and IEEE-754 results
(``inf``/``nan`` instead of exceptions) for floats. Arbitrary-precision
integers stay in Python ints since XLA has no bignum dtype.
"""

from __future__ import annotations

import math
import os
from typing import Callable, Final

import jax
from jax import lax
import jax.numpy as jnp

from .errors import DivisionByZeroError, NumericConversionError
from .values import IntegerPrecision, format_integer

# float64/int64 kernels need 64-bit mode; without it jnp silently narrows.
jax.config.update("jax_enable_x64", True)

_USE_JITTED_KERNELS: Final[bool] = os.environ.get("RPN_JAX_DISABLE_JITTED_KERNELS", "0") != "1"

ARITHMETIC_OPS: Final[tuple[str, ...]] = ("+", "-", "*", "/", "mod")

# lax.div truncates toward zero and lax.rem takes the dividend's sign,
# matching the arbitrary-precision helpers below.
_BASE_BINARY_OPS: Final[dict[str, Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]]] = {
    "+": lax.add,
    "-": lax.sub,
    "*": lax.mul,
    "/": lax.div,
    "mod": lax.rem,
}

_PRECISION_DTYPES: Final = {
    IntegerPrecision.INT64: jnp.int64,
    IntegerPrecision.INT32: jnp.int32,
}

_JITTED_BINARY_OPS: dict[str, Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]] = {}


def _jitted_binary_kernel(op: str) -> Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]:
    fn = _JITTED_BINARY_OPS.get(op)
    if fn is None:
        fn = jax.jit(_BASE_BINARY_OPS[op])
        _JITTED_BINARY_OPS[op] = fn
    return fn


def _binary_kernel(op: str) -> Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]:
    if _USE_JITTED_KERNELS:
        return _jitted_binary_kernel(op)
    return _BASE_BINARY_OPS[op]


def kernel_cache_stats() -> dict[str, int]:
    return {"jitted_binary_ops": len(_JITTED_BINARY_OPS)}


def _truncating_div(left: int, right: int) -> int:
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


def _arbitrary_integer_binary(op: str, left: int, right: int) -> int:
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if op == "/":
        return _truncating_div(left, right)
    if op == "mod":
        return left - right * _truncating_div(left, right)
    raise ValueError(f"Unsupported arithmetic operation {op!r}")


def _fixed_integer_binary(op: str, left: int, right: int, precision: IntegerPrecision) -> int:
    dtype = _PRECISION_DTYPES[precision]
    kernel = _binary_kernel(op)
    return int(kernel(jnp.asarray(left, dtype=dtype), jnp.asarray(right, dtype=dtype)))


def _float_binary(op: str, left: float, right: float) -> float:
    kernel = _binary_kernel(op)
    return float(kernel(jnp.asarray(left, dtype=jnp.float64), jnp.asarray(right, dtype=jnp.float64)))


def integer_to_float(value: int, *, where: str) -> float:
    try:
        return float(value)
    except OverflowError as exc:
        raise NumericConversionError(where, f"integer {format_integer(value)} is too large for a float") from exc


def float_to_integer(value: float, *, precision: IntegerPrecision, where: str) -> int:
    if not math.isfinite(value):
        raise NumericConversionError(where, f"cannot convert {value!r} to an integer")
    result = int(value)
    if not precision.contains(result):
        raise NumericConversionError(where, f"{value!r} does not fit {precision.value} integers")
    return result


def binary_arithmetic(
    op: str,
    left: int | float,
    right: int | float,
    *,
    precision: IntegerPrecision,
    where: str | None = None,
) -> int | float:
    """Apply ``op`` with Integer∘Integer → Integer and any Float → Float promotion.

    Callers are responsible for rejecting non-numeric (including Bool) operands.
    """
    where = op if where is None else where
    if op not in _BASE_BINARY_OPS:
        raise ValueError(f"Unsupported arithmetic operation {op!r}")

    if isinstance(left, int) and isinstance(right, int):
        if op in {"/", "mod"} and right == 0:
            raise DivisionByZeroError(where)
        if precision.is_fixed:
            return _fixed_integer_binary(op, left, right, precision)
        return _arbitrary_integer_binary(op, left, right)

    if isinstance(left, int):
        left = integer_to_float(left, where=where)
    if isinstance(right, int):
        right = integer_to_float(right, where=where)
    return _float_binary(op, left, right)


def compare(op: str, left: int | float, right: int | float) -> bool:
    # Python compares int/float exactly and follows IEEE for NaN.
    if op == "lt":
        return left < right
    if op == "gt":
        return left > right
    raise ValueError(f"Unsupported comparison {op!r}")
