"""The style machine: identifier resolution and the command interpreter."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable

from bstvm.builtins import BUILTINS, FALSE, TRUE
from bstvm.context import BstContext
from bstvm.entries import BibDatabase, BibEntry
from bstvm.errors import BstVMError, TypeMismatchError, UnboundNameError
from bstvm.parsing import BstParser
from bstvm.types import (
    MISSING,
    Block,
    Command,
    EntryCommand,
    ExecuteCommand,
    FunctionCommand,
    FunctionRef,
    IdentifierItem,
    IntegerItem,
    IntegersCommand,
    IterateCommand,
    MacroCommand,
    Missing,
    QuoteItem,
    ReadCommand,
    ReverseCommand,
    SortCommand,
    StackItem,
    StackValue,
    StringsCommand,
    TextItem,
    kind_of,
)

logger = logging.getLogger(__name__)


# ---- Identifier resolution ----


class BindingKind(Enum):
    BUILTIN = "built-in function"
    FUNCTION = "function"
    STRING = "string variable"
    ENTRY_STRING = "entry string variable"
    INTEGER = "integer variable"
    ENTRY_INTEGER = "entry integer variable"
    FIELD = "field"


@dataclass(frozen=True)
class Binding:
    """What a bare name denotes at the moment it is used."""
    kind: BindingKind
    name: str


def resolve(ctx: BstContext, name: str) -> Binding:
    """Resolve *name*: built-ins, then functions, then variables, then fields."""
    if name in BUILTINS:
        kind = BindingKind.BUILTIN
    elif name in ctx.functions:
        kind = BindingKind.FUNCTION
    elif name in ctx.strings:
        kind = BindingKind.STRING
    elif name in ctx.entry_strings:
        kind = BindingKind.ENTRY_STRING
    elif name in ctx.integers:
        kind = BindingKind.INTEGER
    elif name in ctx.entry_integers:
        kind = BindingKind.ENTRY_INTEGER
    elif name in ctx.entry_fields:
        kind = BindingKind.FIELD
    else:
        raise UnboundNameError(f"unknown identifier '{name}'")
    return Binding(kind=kind, name=name)


# ---- Execution ----


class Interpreter:
    """Runs commands and function bodies against one context."""

    def __init__(self, ctx: BstContext) -> None:
        self.ctx = ctx

    def run(self, commands: list[Command]) -> None:
        for command in commands:
            try:
                self._execute_command(command)
            except RecursionError as e:
                function = getattr(command, "function", None)
                raise BstVMError(
                    f"recursion too deep (line {command.lineno})", function
                ) from e

    # ---- Command dispatch ----

    def _execute_command(self, command: Command) -> None:
        logger.debug("line %d: %s", command.lineno, type(command).__name__)
        if isinstance(command, EntryCommand):
            self._execute_entry(command)
        elif isinstance(command, StringsCommand):
            for name in command.names:
                self.ctx.strings[name] = MISSING
        elif isinstance(command, IntegersCommand):
            for name in command.names:
                self.ctx.integers[name] = 0
        elif isinstance(command, MacroCommand):
            self.ctx.macros[command.name.lower()] = command.value
        elif isinstance(command, FunctionCommand):
            self.ctx.functions[command.name] = command.body
        elif isinstance(command, ReadCommand):
            self._execute_read()
        elif isinstance(command, SortCommand):
            self.ctx.entries.sort(key=lambda state: state.sort_key)
        elif isinstance(command, IterateCommand):
            self._for_each_entry(command.function, reverse=False)
        elif isinstance(command, ReverseCommand):
            self._for_each_entry(command.function, reverse=True)
        elif isinstance(command, ExecuteCommand):
            self.ctx.current = None
            self.invoke(command.function)
        else:
            raise ValueError(f"Unknown command type: {type(command).__name__}")

    def _execute_entry(self, command: EntryCommand) -> None:
        self.ctx.entry_fields.extend(command.fields)
        self.ctx.entry_integers.extend(command.integers)
        self.ctx.entry_strings.extend(command.strings)
        for state in self.ctx.entries:
            for name in command.integers:
                state.integers[name] = 0
            for name in command.strings:
                state.strings[name] = MISSING

    def _execute_read(self) -> None:
        for state in self.ctx.entries:
            for name in self.ctx.entry_fields:
                value = state.entry.get(name)
                if value is None:
                    state.fields[name] = MISSING
                    continue
                state.fields[name] = self.ctx.macros.get(value.strip().lower(), value)

    def _for_each_entry(self, function: str, reverse: bool) -> None:
        entries = list(self.ctx.entries)
        if reverse:
            entries.reverse()
        for state in entries:
            self.ctx.current = state
            self.invoke(function)
        self.ctx.current = None

    # ---- Functions ----

    def invoke(self, name: str) -> None:
        """Resolve a bare name and run it: call a function or push a value."""
        binding = resolve(self.ctx, name)
        kind = binding.kind
        if kind is BindingKind.BUILTIN:
            BUILTINS[name](self)
        elif kind is BindingKind.FUNCTION:
            self.execute_block(self.ctx.functions[name])
        elif kind is BindingKind.STRING:
            self.ctx.push(self.ctx.strings[name])
        elif kind is BindingKind.INTEGER:
            self.ctx.push(self.ctx.integers[name])
        elif kind is BindingKind.ENTRY_STRING:
            self.ctx.push(self.ctx.require_entry(name).strings.get(name, MISSING))
        elif kind is BindingKind.ENTRY_INTEGER:
            self.ctx.push(self.ctx.require_entry(name).integers.get(name, 0))
        else:
            self.ctx.push(self.ctx.require_entry(name).fields.get(name, MISSING))

    def execute_block(self, block: Block) -> None:
        for item in block.items:
            self.execute_item(item)

    def execute_item(self, item: StackItem) -> None:
        if isinstance(item, IdentifierItem):
            self.invoke(item.name)
        elif isinstance(item, IntegerItem):
            self.ctx.push(item.value)
        elif isinstance(item, TextItem):
            self.ctx.push(item.value)
        elif isinstance(item, QuoteItem):
            self.ctx.push(FunctionRef(item.name))
        elif isinstance(item, Block):
            self.ctx.push(item)
        else:
            raise ValueError(f"Unknown stack item: {type(item).__name__}")

    def execute_value(self, value: StackValue) -> None:
        """Run an operand of if$ or while$.

        References are invoked and blocks executed; any other value is
        pushed back unchanged.
        """
        if isinstance(value, FunctionRef):
            self.invoke(value.name)
        elif isinstance(value, Block):
            self.execute_block(value)
        else:
            self.ctx.push(value)

    def assign(self, name: str, value: StackValue) -> None:
        """Store *value* in the variable *name*, checking its kind."""
        kind = resolve(self.ctx, name).kind
        if kind in (BindingKind.STRING, BindingKind.ENTRY_STRING):
            if not isinstance(value, (str, Missing)):
                raise TypeMismatchError(
                    f"cannot assign {kind_of(value)} {value!r} to string variable '{name}'", ":="
                )
            if kind is BindingKind.STRING:
                self.ctx.strings[name] = value
            else:
                self.ctx.require_entry(name).strings[name] = value
        elif kind in (BindingKind.INTEGER, BindingKind.ENTRY_INTEGER):
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeMismatchError(
                    f"cannot assign {kind_of(value)} {value!r} to integer variable '{name}'", ":="
                )
            if kind is BindingKind.INTEGER:
                self.ctx.integers[name] = value
            else:
                self.ctx.require_entry(name).integers[name] = value
        else:
            raise TypeMismatchError(f"cannot assign to {kind.value} '{name}'", ":=")


class BstVM:
    """A compiled style, ready to render any number of bibliographies.

    The source is parsed once. Each render builds a fresh context, runs
    every command against it and returns the output text. ``while$`` has
    no iteration limit; callers that need one must guard the render
    call themselves.
    """

    TRUE = TRUE
    FALSE = FALSE

    def __init__(self, source: str) -> None:
        self.source = source
        self.commands = BstParser().parse(source)
        self.latest_context: BstContext | None = None

    @classmethod
    def from_file(cls, path: Path | str) -> BstVM:
        return cls(Path(path).read_text(encoding="utf-8"))

    def render(
        self, entries: Iterable[BibEntry] | BibDatabase = (), preamble: str | None = None
    ) -> str:
        """Run the style over *entries* and return the output."""
        if isinstance(entries, BibDatabase):
            if preamble is None:
                preamble = entries.preamble
            entries = entries.entries
        ctx = BstContext(list(entries), preamble)
        self.latest_context = ctx
        Interpreter(ctx).run(self.commands)
        if ctx.warnings:
            logger.info("(There were %d warnings)", ctx.warnings)
        return ctx.output

    @property
    def stack(self) -> list[StackValue]:
        """The operand stack left by the latest render."""
        if self.latest_context is None:
            raise RuntimeError("render() has not been called")
        return self.latest_context.stack
