"""Parsing module for BibTeX style sources."""

from bstvm.parsing.bst_lexer import BstLexer
from bstvm.parsing.bst_parser import BstParser

__all__ = [
    "BstLexer",
    "BstParser",
]
