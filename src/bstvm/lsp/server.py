"""BST Language Server: diagnostics, completion, hover via pygls."""

from __future__ import annotations

import re

from lsprotocol import types
from pygls.lsp.server import LanguageServer

from bstvm.builtins import BUILTINS
from bstvm.errors import ParseError
from bstvm.parsing import BstParser

# ---------------------------------------------------------------------------
# Static data
# ---------------------------------------------------------------------------

KEYWORDS: dict[str, str] = {
    "ENTRY": "Declare entry fields, entry integers and entry strings",
    "EXECUTE": "Call a function once, with no current entry",
    "FUNCTION": "Define a function",
    "INTEGERS": "Declare global integer variables",
    "ITERATE": "Call a function once per entry, in list order",
    "MACRO": "Define a macro expanded when fields are read",
    "READ": "Read the declared fields of every entry",
    "REVERSE": "Call a function once per entry, in reverse order",
    "SORT": "Sort the entries by sort.key$",
    "STRINGS": "Declare global string variables",
}

VARIABLES: dict[str, str] = {
    "sort.key$": "Entry string holding the key SORT orders by",
}


def builtin_doc(name: str) -> str | None:
    """Return the stack effect documented for a built-in, or None."""
    if name in VARIABLES:
        return VARIABLES[name]
    func = BUILTINS.get(name)
    if func is None or not func.__doc__:
        return None
    return func.__doc__.strip()


_FUNCTION_RE = re.compile(r"\bFUNCTION\s*\{\s*([^\s{}]+)\s*\}", re.IGNORECASE)

# Characters that cannot appear in a .bst name
_NAME_BREAK = set(' \t\r\n{}"#%\'')

# ---------------------------------------------------------------------------
# Helpers (module-level so they are easy to unit-test)
# ---------------------------------------------------------------------------


def lexpos_to_position(source: str, lexpos: int) -> types.Position:
    """Convert a byte offset into an LSP ``Position(line, character)``."""
    line = source.count("\n", 0, lexpos)
    last_nl = source.rfind("\n", 0, lexpos)
    character = lexpos if last_nl == -1 else lexpos - last_nl - 1
    return types.Position(line=line, character=character)


def _find_user_functions(source: str) -> list[str]:
    """Return the names of functions defined in *source*."""
    return [m.group(1) for m in _FUNCTION_RE.finditer(source)]


def _word_at_position(line_text: str, character: int) -> str:
    """Return the style name (e.g. ``format.name$``) surrounding *character*."""
    if character < 0 or character >= len(line_text):
        return ""
    if line_text[character] in _NAME_BREAK:
        return ""
    # Scan left
    left = character
    while left > 0 and line_text[left - 1] not in _NAME_BREAK:
        left -= 1
    # Scan right
    right = character
    while right < len(line_text) and line_text[right] not in _NAME_BREAK:
        right += 1
    return line_text[left:right]


def _diagnostics(source: str) -> list[types.Diagnostic]:
    """Parse *source* and turn a parse error into a diagnostic."""
    try:
        BstParser().parse(source)
    except ParseError as exc:
        if exc.lexpos is not None:
            start = lexpos_to_position(source, exc.lexpos)
        else:
            # Fallback: end of document
            lines = source.split("\n")
            start = types.Position(line=max(len(lines) - 1, 0), character=0)
        end = types.Position(line=start.line, character=start.character + 1)
        return [
            types.Diagnostic(
                range=types.Range(start=start, end=end),
                severity=types.DiagnosticSeverity.Error,
                source="bst",
                message=str(exc),
            )
        ]
    return []


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------

server = LanguageServer("bst-language-server", "0.1.0")


@server.feature(types.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: types.DidOpenTextDocumentParams) -> None:
    _validate_document(params.text_document.uri)


@server.feature(types.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: types.DidChangeTextDocumentParams) -> None:
    _validate_document(params.text_document.uri)


def _validate_document(uri: str) -> None:
    doc = server.workspace.get_text_document(uri)
    server.text_document_publish_diagnostics(
        types.PublishDiagnosticsParams(uri=uri, diagnostics=_diagnostics(doc.source))
    )


@server.feature(
    types.TEXT_DOCUMENT_COMPLETION,
    types.CompletionOptions(trigger_characters=["{", " ", "'"]),
)
def completions(params: types.CompletionParams) -> types.CompletionList:
    doc = server.workspace.get_text_document(params.text_document.uri)
    items: list[types.CompletionItem] = []

    for name in sorted(BUILTINS):
        items.append(
            types.CompletionItem(
                label=name,
                kind=types.CompletionItemKind.Function,
                detail=builtin_doc(name),
            )
        )
    for name, desc in VARIABLES.items():
        items.append(
            types.CompletionItem(label=name, kind=types.CompletionItemKind.Variable, detail=desc)
        )
    for name, desc in KEYWORDS.items():
        items.append(
            types.CompletionItem(label=name, kind=types.CompletionItemKind.Keyword, detail=desc)
        )
    for name in _find_user_functions(doc.source):
        items.append(
            types.CompletionItem(
                label=name,
                kind=types.CompletionItemKind.Function,
                detail="User-defined function",
            )
        )

    return types.CompletionList(is_incomplete=False, items=items)


@server.feature(types.TEXT_DOCUMENT_HOVER)
def hover(params: types.HoverParams) -> types.Hover | None:
    doc = server.workspace.get_text_document(params.text_document.uri)
    if params.position.line >= len(doc.lines):
        return None
    line_text = doc.lines[params.position.line]
    word = _word_at_position(line_text, params.position.character)
    if not word:
        return None

    content: str | None = None
    doc_text = builtin_doc(word)
    if doc_text is not None:
        content = f"**{word}** — `{doc_text}`"
    elif word.upper() in KEYWORDS:
        content = f"**{word.upper()}** — {KEYWORDS[word.upper()]}"

    if content is None:
        return None
    return types.Hover(
        contents=types.MarkupContent(
            kind=types.MarkupKind.Markdown,
            value=content,
        )
    )


def main() -> None:
    server.start_io()


if __name__ == "__main__":
    main()
