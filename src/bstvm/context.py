"""Per-render state of the style machine."""

from __future__ import annotations

from dataclasses import dataclass, field

from bstvm.entries import BibEntry
from bstvm.errors import NoEntryError, StackUnderflowError, TypeMismatchError
from bstvm.types import MISSING, Block, FunctionRef, Missing, StackValue, kind_of

GLOBAL_MAX = 2**31 - 1
ENTRY_MAX = 250

SORT_KEY = "sort.key$"


@dataclass
class EntryState:
    """An entry together with the variables a style keeps for it."""

    entry: BibEntry
    fields: dict[str, str | Missing] = field(default_factory=dict)
    strings: dict[str, str | Missing] = field(default_factory=dict)
    integers: dict[str, int] = field(default_factory=dict)

    @property
    def sort_key(self) -> str:
        value = self.strings.get(SORT_KEY, MISSING)
        return "" if isinstance(value, Missing) else value


class BstContext:
    """Everything one render mutates.

    A context is built for a single render and thrown away afterwards;
    nothing in it is shared between renders.
    """

    def __init__(self, entries: list[BibEntry], preamble: str | None = None) -> None:
        self.stack: list[StackValue] = []
        self.functions: dict[str, Block] = {}
        self.strings: dict[str, str | Missing] = {}
        self.integers: dict[str, int] = {}
        self.macros: dict[str, str] = {}

        # Declared by ENTRY
        self.entry_fields: list[str] = []
        self.entry_strings: list[str] = [SORT_KEY]
        self.entry_integers: list[str] = []

        self.entries: list[EntryState] = [
            EntryState(entry=e, strings={SORT_KEY: MISSING}) for e in entries
        ]
        self.current: EntryState | None = None
        self.preamble = preamble
        self.warnings = 0
        self._output: list[str] = []

    # ---- Output buffer ----

    def write(self, text: str) -> None:
        self._output.append(text)

    @property
    def output(self) -> str:
        return "".join(self._output)

    # ---- Stack ----

    def push(self, value: StackValue) -> None:
        self.stack.append(value)

    def pop(self, function: str) -> StackValue:
        if not self.stack:
            raise StackUnderflowError("pop from empty stack", function)
        return self.stack.pop()

    def pop_integer(self, function: str) -> int:
        value = self.pop(function)
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeMismatchError(f"expected integer, got {kind_of(value)} {value!r}", function)
        return value

    def pop_text(self, function: str) -> str:
        value = self.pop(function)
        if not isinstance(value, str):
            raise TypeMismatchError(f"expected string, got {kind_of(value)} {value!r}", function)
        return value

    def pop_text_or_missing(self, function: str) -> str | Missing:
        value = self.pop(function)
        if not isinstance(value, (str, Missing)):
            raise TypeMismatchError(f"expected string, got {kind_of(value)} {value!r}", function)
        return value

    def pop_reference(self, function: str) -> FunctionRef:
        value = self.pop(function)
        if not isinstance(value, FunctionRef):
            raise TypeMismatchError(
                f"expected function reference, got {kind_of(value)} {value!r}", function
            )
        return value

    # ---- Entries ----

    def require_entry(self, function: str) -> EntryState:
        if self.current is None:
            raise NoEntryError("no current entry (only valid inside ITERATE or REVERSE)", function)
        return self.current
