"""Lexer for BibTeX style (.bst) sources."""

import ply.lex as lex

from bstvm.errors import ParseError


class BstLexer:
    """Lexer for tokenizing .bst style files."""

    # Command keywords, matched case-insensitively
    reserved = {
        "entry": "ENTRY",
        "execute": "EXECUTE",
        "function": "FUNCTION",
        "integers": "INTEGERS",
        "iterate": "ITERATE",
        "macro": "MACRO",
        "read": "READ",
        "reverse": "REVERSE",
        "sort": "SORT",
        "strings": "STRINGS",
    }

    tokens = [
        "IDENTIFIER",
        "INTEGER",
        "STRING",
        "QUOTED",
        "LBRACE",
        "RBRACE",
    ] + list(reserved.values())

    t_LBRACE = r"\{"
    t_RBRACE = r"\}"

    t_ignore = " \t\r\f"

    t_ignore_COMMENT = r"%[^\n]*"

    def __init__(self) -> None:
        self.lexer: lex.LexToken = None  # type: ignore

    def t_INTEGER(self, t: lex.LexToken) -> lex.LexToken:
        r"\#[+-]?\d+"
        value = int(t.value[1:])
        if not -2**31 <= value <= 2**31 - 1:
            raise ParseError(
                f"Integer literal {t.value} out of range (line {t.lineno}, position {t.lexpos})",
                lineno=t.lineno,
                lexpos=t.lexpos,
            )
        t.value = value
        return t

    def t_STRING(self, t: lex.LexToken) -> lex.LexToken:
        r'"[^"]*"'
        t.lexer.lineno += t.value.count("\n")
        t.value = t.value[1:-1]
        return t

    def t_QUOTED(self, t: lex.LexToken) -> lex.LexToken:
        r"'[^\s{}\"\#%']+"
        t.value = t.value[1:]
        return t

    def t_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"[^\s{}\"\#%'0-9][^\s{}\"\#%']*"
        t.type = self.reserved.get(t.value.lower(), "IDENTIFIER")
        return t

    def t_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_error(self, t: lex.LexToken) -> None:
        ch = t.value[0]
        if ch == '"':
            message = f"Unterminated string literal (line {t.lineno}, position {t.lexpos})"
        else:
            message = f"Illegal character '{ch}' (line {t.lineno}, position {t.lexpos})"
        raise ParseError(message, lineno=t.lineno, lexpos=t.lexpos)

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Set the input string to tokenize."""
        self.lexer.lineno = 1
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens
