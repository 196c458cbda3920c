"""Parser for BibTeX style (.bst) sources."""

from __future__ import annotations

from typing import Any

import ply.yacc as yacc

from bstvm.errors import ParseError
from bstvm.parsing.bst_lexer import BstLexer
from bstvm.types import (
    Block,
    Command,
    EntryCommand,
    ExecuteCommand,
    FunctionCommand,
    IdentifierItem,
    IntegerItem,
    IntegersCommand,
    IterateCommand,
    MacroCommand,
    QuoteItem,
    ReadCommand,
    ReverseCommand,
    SortCommand,
    StringsCommand,
    TextItem,
)


class BstParser:
    """Parser for .bst style files.

    The result is the ordered list of top-level commands. Function bodies
    are kept as nested Blocks; nothing is resolved until execution.
    """

    tokens = BstLexer.tokens

    def __init__(self) -> None:
        self.lexer = BstLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore
        self._source = ""

    def p_style(self, p: yacc.YaccProduction) -> None:
        """style : commands"""
        p[0] = p[1]

    def p_commands_empty(self, p: yacc.YaccProduction) -> None:
        """commands : """
        p[0] = []

    def p_commands_multiple(self, p: yacc.YaccProduction) -> None:
        """commands : commands command"""
        p[0] = p[1]
        p[0].append(p[2])

    # ---- Commands ----

    def p_command_entry(self, p: yacc.YaccProduction) -> None:
        """command : ENTRY name_group name_group name_group"""
        p[0] = EntryCommand(fields=p[2], integers=p[3], strings=p[4], lineno=p.lineno(1))

    def p_command_integers(self, p: yacc.YaccProduction) -> None:
        """command : INTEGERS name_group"""
        p[0] = IntegersCommand(names=p[2], lineno=p.lineno(1))

    def p_command_strings(self, p: yacc.YaccProduction) -> None:
        """command : STRINGS name_group"""
        p[0] = StringsCommand(names=p[2], lineno=p.lineno(1))

    def p_command_macro(self, p: yacc.YaccProduction) -> None:
        """command : MACRO LBRACE name RBRACE LBRACE STRING RBRACE"""
        p[0] = MacroCommand(name=p[3], value=p[6], lineno=p.lineno(1))

    def p_command_function(self, p: yacc.YaccProduction) -> None:
        """command : FUNCTION LBRACE name RBRACE block"""
        p[0] = FunctionCommand(name=p[3], body=p[5], lineno=p.lineno(1))

    def p_command_read(self, p: yacc.YaccProduction) -> None:
        """command : READ"""
        p[0] = ReadCommand(lineno=p.lineno(1))

    def p_command_sort(self, p: yacc.YaccProduction) -> None:
        """command : SORT"""
        p[0] = SortCommand(lineno=p.lineno(1))

    def p_command_iterate(self, p: yacc.YaccProduction) -> None:
        """command : ITERATE LBRACE name RBRACE"""
        p[0] = IterateCommand(function=p[3], lineno=p.lineno(1))

    def p_command_reverse(self, p: yacc.YaccProduction) -> None:
        """command : REVERSE LBRACE name RBRACE"""
        p[0] = ReverseCommand(function=p[3], lineno=p.lineno(1))

    def p_command_execute(self, p: yacc.YaccProduction) -> None:
        """command : EXECUTE LBRACE name RBRACE"""
        p[0] = ExecuteCommand(function=p[3], lineno=p.lineno(1))

    # ---- Names ----

    def p_name_group(self, p: yacc.YaccProduction) -> None:
        """name_group : LBRACE names RBRACE"""
        p[0] = p[2]

    def p_names_empty(self, p: yacc.YaccProduction) -> None:
        """names : """
        p[0] = []

    def p_names_multiple(self, p: yacc.YaccProduction) -> None:
        """names : names name"""
        p[0] = p[1] + [p[2]]

    def p_name(self, p: yacc.YaccProduction) -> None:
        """name : IDENTIFIER
                | ENTRY
                | EXECUTE
                | FUNCTION
                | INTEGERS
                | ITERATE
                | MACRO
                | READ
                | REVERSE
                | SORT
                | STRINGS"""
        p[0] = p[1]
        p.set_lineno(0, p.lineno(1))

    # ---- Function bodies ----

    def p_block(self, p: yacc.YaccProduction) -> None:
        """block : LBRACE items RBRACE"""
        p[0] = Block(items=tuple(p[2]))

    def p_items_empty(self, p: yacc.YaccProduction) -> None:
        """items : """
        p[0] = []

    def p_items_multiple(self, p: yacc.YaccProduction) -> None:
        """items : items item"""
        p[0] = p[1]
        p[0].append(p[2])

    def p_item_integer(self, p: yacc.YaccProduction) -> None:
        """item : INTEGER"""
        p[0] = IntegerItem(value=p[1])

    def p_item_string(self, p: yacc.YaccProduction) -> None:
        """item : STRING"""
        p[0] = TextItem(value=p[1])

    def p_item_quoted(self, p: yacc.YaccProduction) -> None:
        """item : QUOTED"""
        p[0] = QuoteItem(name=p[1], lineno=p.lineno(1))

    def p_item_identifier(self, p: yacc.YaccProduction) -> None:
        """item : name"""
        p[0] = IdentifierItem(name=p[1], lineno=p.lineno(1))

    def p_item_block(self, p: yacc.YaccProduction) -> None:
        """item : block"""
        p[0] = p[1]

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            if p.type == "RBRACE":
                what = "unbalanced '}'"
            else:
                what = f"'{p.value}'"
            raise ParseError(
                f"Syntax error at {what} (line {p.lineno}, position {p.lexpos})",
                lineno=p.lineno,
                lexpos=p.lexpos,
            )
        lineno = self._source.count("\n") + 1
        raise ParseError(
            f"Syntax error at end of input, missing '}}'? (line {lineno}, position {len(self._source)})",
            lineno=lineno,
            lexpos=len(self._source),
        )

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        kwargs.setdefault("errorlog", yacc.NullLogger())
        self.parser = yacc.yacc(module=self, start="style", **kwargs)

    def parse(self, data: str) -> list[Command]:
        """Parse a style source into its ordered list of commands."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        self._source = data
        self.lexer.input(data)
        commands = self.parser.parse(data, lexer=self.lexer.lexer)
        if commands is None:
            commands = []
        return commands
