"""bstvm - an interpreter for BibTeX bibliography styles (.bst)."""

from bstvm.context import BstContext, EntryState
from bstvm.entries import BibDatabase, BibEntry, load_database
from bstvm.errors import (
    BstError,
    BstVMError,
    DispatchError,
    NoEntryError,
    ParseError,
    StackUnderflowError,
    TypeMismatchError,
    UnboundNameError,
)
from bstvm.parsing import BstParser
from bstvm.types import MISSING, Block, FunctionRef, Missing
from bstvm.vm import BstVM

__all__ = [
    # Main API
    "BstVM",
    "BstParser",
    "BstContext",
    "EntryState",
    # Input
    "BibEntry",
    "BibDatabase",
    "load_database",
    # Values
    "MISSING",
    "Missing",
    "FunctionRef",
    "Block",
    # Errors
    "BstError",
    "ParseError",
    "BstVMError",
    "TypeMismatchError",
    "UnboundNameError",
    "NoEntryError",
    "StackUnderflowError",
    "DispatchError",
]

__version__ = "0.1.0"
