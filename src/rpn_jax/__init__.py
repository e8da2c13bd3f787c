"""rpn-jax public API."""

import logging

from .ast import Call, Literal, Program
from .dictionary import Definition, Dictionary, Native, NativeFunction, UserBlock
from .errors import (
    DivisionByZeroError,
    InvalidArgumentError,
    LexError,
    NumericConversionError,
    OutOfBoundsError,
    ParseError,
    ResourceExhaustedError,
    RPNError,
    RPNRuntimeError,
    SourceError,
    StackUnderflowError,
    TypeMismatchError,
    UndefinedWordError,
)
from .interpreter import Interpreter, RunOutcome
from .lexer import Lexer, Token, tokenize
from .parser import parse, parse_block
from .stack import Stack
from .values import (
    Block,
    IntegerPrecision,
    Item,
    ItemKind,
    Symbol,
    format_integer,
    format_item,
    items_equal,
    kind_of,
    validate_item,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Interpreter",
    "RunOutcome",
    "IntegerPrecision",
    "parse",
    "parse_block",
    "tokenize",
    "Lexer",
    "Token",
    "Program",
    "Literal",
    "Call",
    "Block",
    "Symbol",
    "Item",
    "ItemKind",
    "kind_of",
    "items_equal",
    "format_item",
    "format_integer",
    "validate_item",
    "Stack",
    "Dictionary",
    "Definition",
    "Native",
    "NativeFunction",
    "UserBlock",
    "RPNError",
    "SourceError",
    "LexError",
    "ParseError",
    "RPNRuntimeError",
    "UndefinedWordError",
    "StackUnderflowError",
    "TypeMismatchError",
    "DivisionByZeroError",
    "InvalidArgumentError",
    "NumericConversionError",
    "OutOfBoundsError",
    "ResourceExhaustedError",
]
