"""Exceptions raised while parsing and running BibTeX styles."""

from __future__ import annotations


class BstError(Exception):
    """Base class for every error raised by bstvm."""


class ParseError(BstError):
    """The style source is not well formed."""

    def __init__(self, message: str, lineno: int | None = None, lexpos: int | None = None) -> None:
        super().__init__(message)
        self.lineno = lineno
        self.lexpos = lexpos


class BstVMError(BstError):
    """A fatal error during style execution."""

    def __init__(self, message: str, function: str | None = None) -> None:
        if function is not None:
            message = f"{function}: {message}"
        super().__init__(message)
        self.function = function


class TypeMismatchError(BstVMError):
    """An operand on the stack has the wrong kind."""


class UnboundNameError(BstVMError):
    """An identifier resolves to nothing."""


class NoEntryError(UnboundNameError):
    """An entry-only name was used while no entry is current."""


class StackUnderflowError(BstVMError):
    """A value was popped from an empty stack."""


class DispatchError(BstVMError):
    """call.type$ found neither a type function nor default.type."""
