"""Style AST nodes and the values that live on the operand stack."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


# ---- Stack values ----


class Missing:
    """Marker for an absent field value, distinct from empty text."""

    _instance: Missing | None = None

    def __new__(cls) -> Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = Missing()


@dataclass(frozen=True)
class FunctionRef:
    """A quoted name, pushed by 'name and consumed by control functions."""
    name: str


# ---- Stack items (function bodies) ----


@dataclass(frozen=True)
class IntegerItem:
    """#N"""
    value: int


@dataclass(frozen=True)
class TextItem:
    """"text" """
    value: str


@dataclass(frozen=True)
class QuoteItem:
    """'name"""
    name: str
    lineno: int = 0


@dataclass(frozen=True)
class IdentifierItem:
    """A bare name, resolved when executed."""
    name: str
    lineno: int = 0


@dataclass(frozen=True)
class Block:
    """{ ... }: a deferred token sequence.

    Blocks are pushed unevaluated and run only by if$, while$ or as a
    function body.
    """
    items: tuple[StackItem, ...] = ()


StackItem = Union[IntegerItem, TextItem, QuoteItem, IdentifierItem, Block]

StackValue = Union[int, str, FunctionRef, Block, Missing]


def kind_of(value: object) -> str:
    """Name the kind of a stack value for diagnostics."""
    if isinstance(value, Missing):
        return "missing"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, str):
        return "string"
    if isinstance(value, FunctionRef):
        return "function reference"
    if isinstance(value, Block):
        return "block"
    return type(value).__name__


# ---- Commands ----


@dataclass
class EntryCommand:
    """ENTRY {fields} {integers} {strings}"""
    fields: list[str]
    integers: list[str]
    strings: list[str]
    lineno: int = 0


@dataclass
class IntegersCommand:
    """INTEGERS {names}"""
    names: list[str]
    lineno: int = 0


@dataclass
class StringsCommand:
    """STRINGS {names}"""
    names: list[str]
    lineno: int = 0


@dataclass
class MacroCommand:
    """MACRO {name} {"replacement"}"""
    name: str
    value: str
    lineno: int = 0


@dataclass
class FunctionCommand:
    """FUNCTION {name} {body}"""
    name: str
    body: Block = field(default_factory=Block)
    lineno: int = 0


@dataclass
class ReadCommand:
    """READ"""
    lineno: int = 0


@dataclass
class SortCommand:
    """SORT"""
    lineno: int = 0


@dataclass
class IterateCommand:
    """ITERATE {function}"""
    function: str
    lineno: int = 0


@dataclass
class ReverseCommand:
    """REVERSE {function}"""
    function: str
    lineno: int = 0


@dataclass
class ExecuteCommand:
    """EXECUTE {function}"""
    function: str
    lineno: int = 0


Command = Union[
    EntryCommand, IntegersCommand, StringsCommand, MacroCommand, FunctionCommand,
    ReadCommand, SortCommand, IterateCommand, ReverseCommand, ExecuteCommand,
]
