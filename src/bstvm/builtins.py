"""Built-in functions of the style language.

Every built-in takes its operands from the shared stack and pushes its
results back; the docstring of each states its stack effect. Built-ins
are registered by name in BUILTINS and resolved before any user-defined
function.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from bstvm.context import ENTRY_MAX, GLOBAL_MAX
from bstvm.errors import BstVMError, DispatchError, TypeMismatchError
from bstvm.text import (
    add_period,
    change_case,
    format_name,
    num_names,
    purify,
    split_names,
    substring,
    text_length,
    text_prefix,
    width,
)
from bstvm.types import MISSING, Missing, kind_of

if TYPE_CHECKING:
    from bstvm.vm import Interpreter

logger = logging.getLogger(__name__)

TRUE = 1
FALSE = 0

Builtin = Callable[["Interpreter"], None]

BUILTINS: dict[str, Builtin] = {}


def builtin(name: str) -> Callable[[Builtin], Builtin]:
    """Register a function as the built-in *name*."""
    def register(func: Builtin) -> Builtin:
        BUILTINS[name] = func
        return func
    return register


def _int32(value: int) -> int:
    """Wrap to a signed 32-bit integer."""
    return (value + 2**31) % 2**32 - 2**31


def _bool(value: bool) -> int:
    return TRUE if value else FALSE


# ---- Comparison and arithmetic ----


@builtin(">")
def _greater(vm: Interpreter) -> None:
    """int1 int2 → (int1 > int2)"""
    b = vm.ctx.pop_integer(">")
    a = vm.ctx.pop_integer(">")
    vm.ctx.push(_bool(a > b))


@builtin("<")
def _less(vm: Interpreter) -> None:
    """int1 int2 → (int1 < int2)"""
    b = vm.ctx.pop_integer("<")
    a = vm.ctx.pop_integer("<")
    vm.ctx.push(_bool(a < b))


@builtin("=")
def _equals(vm: Interpreter) -> None:
    """x1 x2 → (x1 = x2), for two integers or two strings"""
    b = vm.ctx.pop("=")
    a = vm.ctx.pop("=")
    a_int = isinstance(a, int) and not isinstance(a, bool)
    b_int = isinstance(b, int) and not isinstance(b, bool)
    if not ((a_int and b_int) or (isinstance(a, str) and isinstance(b, str))):
        raise TypeMismatchError(f"cannot compare {kind_of(a)} with {kind_of(b)}", "=")
    vm.ctx.push(_bool(a == b))


@builtin("+")
def _plus(vm: Interpreter) -> None:
    """int1 int2 → int1 + int2"""
    b = vm.ctx.pop_integer("+")
    a = vm.ctx.pop_integer("+")
    vm.ctx.push(_int32(a + b))


@builtin("-")
def _minus(vm: Interpreter) -> None:
    """int1 int2 → int1 - int2"""
    b = vm.ctx.pop_integer("-")
    a = vm.ctx.pop_integer("-")
    vm.ctx.push(_int32(a - b))


@builtin("*")
def _concat(vm: Interpreter) -> None:
    """str1 str2 → str1 concatenated with str2"""
    b = vm.ctx.pop_text("*")
    a = vm.ctx.pop_text("*")
    vm.ctx.push(a + b)


@builtin(":=")
def _assign(vm: Interpreter) -> None:
    """value 'name → (stores value in the variable name)"""
    target = vm.ctx.pop_reference(":=")
    value = vm.ctx.pop(":=")
    vm.assign(target.name, value)


# ---- Control ----


@builtin("if$")
def _if(vm: Interpreter) -> None:
    """int then else → (runs then if int is nonzero, else otherwise)"""
    else_branch = vm.ctx.pop("if$")
    then_branch = vm.ctx.pop("if$")
    condition = vm.ctx.pop_integer("if$")
    vm.execute_value(then_branch if condition != FALSE else else_branch)


@builtin("while$")
def _while(vm: Interpreter) -> None:
    """cond body → (runs body while cond leaves a nonzero integer)"""
    body = vm.ctx.pop("while$")
    condition = vm.ctx.pop("while$")
    while True:
        vm.execute_value(condition)
        if vm.ctx.pop_integer("while$") == FALSE:
            break
        vm.execute_value(body)


@builtin("skip$")
def _skip(vm: Interpreter) -> None:
    """→ (does nothing)"""


@builtin("call.type$")
def _call_type(vm: Interpreter) -> None:
    """→ (calls the function named after the entry type, or default.type)"""
    entry = vm.ctx.require_entry("call.type$")
    entry_type = entry.entry.entry_type.lower()
    if entry_type in vm.ctx.functions:
        vm.invoke(entry_type)
    elif "default.type" in vm.ctx.functions:
        vm.invoke("default.type")
    else:
        raise DispatchError(
            f"no function for entry type '{entry_type}' and no default.type", "call.type$"
        )


# ---- Stack manipulation ----


@builtin("duplicate$")
def _duplicate(vm: Interpreter) -> None:
    """x → x x"""
    value = vm.ctx.pop("duplicate$")
    vm.ctx.push(value)
    vm.ctx.push(value)


@builtin("pop$")
def _pop(vm: Interpreter) -> None:
    """x →"""
    vm.ctx.pop("pop$")


@builtin("swap$")
def _swap(vm: Interpreter) -> None:
    """x1 x2 → x2 x1"""
    b = vm.ctx.pop("swap$")
    a = vm.ctx.pop("swap$")
    vm.ctx.push(b)
    vm.ctx.push(a)


@builtin("top$")
def _top(vm: Interpreter) -> None:
    """x → (logs x)"""
    logger.info("top$: %r", vm.ctx.pop("top$"))


@builtin("stack$")
def _stack(vm: Interpreter) -> None:
    """x1 ... xn → (logs and clears the whole stack)"""
    while vm.ctx.stack:
        logger.info("stack$: %r", vm.ctx.stack.pop())


# ---- Tests ----


@builtin("empty$")
def _empty(vm: Interpreter) -> None:
    """x → (x is missing or only whitespace)"""
    value = vm.ctx.pop("empty$")
    if isinstance(value, Missing):
        vm.ctx.push(TRUE)
    elif isinstance(value, str):
        vm.ctx.push(_bool(not value.strip()))
    else:
        raise TypeMismatchError(f"expected string, got {kind_of(value)} {value!r}", "empty$")


@builtin("missing$")
def _missing(vm: Interpreter) -> None:
    """x → (x is a missing field)"""
    vm.ctx.push(_bool(isinstance(vm.ctx.pop("missing$"), Missing)))


# ---- Conversions ----


@builtin("chr.to.int$")
def _chr_to_int(vm: Interpreter) -> None:
    """str → the code point of the single character str"""
    text = vm.ctx.pop_text("chr.to.int$")
    if len(text) != 1:
        raise BstVMError(f"expected a single character, got {text!r}", "chr.to.int$")
    vm.ctx.push(ord(text))


@builtin("int.to.chr$")
def _int_to_chr(vm: Interpreter) -> None:
    """int → the character with code point int"""
    value = vm.ctx.pop_integer("int.to.chr$")
    try:
        vm.ctx.push(chr(value))
    except (ValueError, OverflowError) as e:
        raise BstVMError(f"{value} is not a character code", "int.to.chr$") from e


@builtin("int.to.str$")
def _int_to_str(vm: Interpreter) -> None:
    """int → its decimal representation"""
    vm.ctx.push(str(vm.ctx.pop_integer("int.to.str$")))


# ---- Strings ----


@builtin("add.period$")
def _add_period(vm: Interpreter) -> None:
    """str → str with a period added unless it ends in . ! or ?"""
    vm.ctx.push(add_period(vm.ctx.pop_text("add.period$")))


@builtin("change.case$")
def _change_case(vm: Interpreter) -> None:
    """str mode → str in title (t), upper (u) or lower (l) case"""
    mode = vm.ctx.pop_text("change.case$")
    text = vm.ctx.pop_text("change.case$")
    try:
        vm.ctx.push(change_case(text, mode))
    except ValueError:
        logger.warning("change.case$: %r is an illegal case-conversion string", mode)
        vm.ctx.push(text)


@builtin("format.name$")
def _format_name(vm: Interpreter) -> None:
    """names int pattern → the int-th name of names formatted by pattern"""
    pattern = vm.ctx.pop_text("format.name$")
    index = vm.ctx.pop_integer("format.name$")
    names = vm.ctx.pop_text("format.name$")
    parts = split_names(names)
    if not 1 <= index <= len(parts):
        raise BstVMError(f"there is no name {index} in {names!r}", "format.name$")
    vm.ctx.push(format_name(parts[index - 1], pattern))


@builtin("num.names$")
def _num_names(vm: Interpreter) -> None:
    """names → the number of and-separated names"""
    vm.ctx.push(num_names(vm.ctx.pop_text("num.names$")))


@builtin("purify$")
def _purify(vm: Interpreter) -> None:
    """str → str without non-alphanumeric characters"""
    vm.ctx.push(purify(vm.ctx.pop_text("purify$")))


@builtin("quote$")
def _quote(vm: Interpreter) -> None:
    """→ a double-quote character"""
    vm.ctx.push('"')


@builtin("substring$")
def _substring(vm: Interpreter) -> None:
    """str start len → len characters of str from 1-based start"""
    length = vm.ctx.pop_integer("substring$")
    start = vm.ctx.pop_integer("substring$")
    text = vm.ctx.pop_text("substring$")
    vm.ctx.push(substring(text, start, length))


@builtin("text.length$")
def _text_length(vm: Interpreter) -> None:
    """str → the number of text characters in str"""
    vm.ctx.push(text_length(vm.ctx.pop_text("text.length$")))


@builtin("text.prefix$")
def _text_prefix(vm: Interpreter) -> None:
    """str int → the first int text characters of str"""
    n = vm.ctx.pop_integer("text.prefix$")
    text = vm.ctx.pop_text("text.prefix$")
    vm.ctx.push(text_prefix(text, n))


@builtin("width$")
def _width(vm: Interpreter) -> None:
    """str → the pseudo-width of str"""
    vm.ctx.push(width(vm.ctx.pop_text("width$")))


# ---- Entries and the database ----


@builtin("cite$")
def _cite(vm: Interpreter) -> None:
    """→ the citation key of the current entry"""
    vm.ctx.push(vm.ctx.require_entry("cite$").entry.citation_key)


@builtin("type$")
def _type(vm: Interpreter) -> None:
    """→ the lowercased type of the current entry"""
    vm.ctx.push(vm.ctx.require_entry("type$").entry.entry_type.lower())


@builtin("preamble$")
def _preamble(vm: Interpreter) -> None:
    """→ the preamble of the database"""
    vm.ctx.push(vm.ctx.preamble or "")


@builtin("global.max$")
def _global_max(vm: Interpreter) -> None:
    """→ the largest integer"""
    vm.ctx.push(GLOBAL_MAX)


@builtin("entry.max$")
def _entry_max(vm: Interpreter) -> None:
    """→ the maximum length of an entry string"""
    vm.ctx.push(ENTRY_MAX)


# ---- Output ----


@builtin("write$")
def _write(vm: Interpreter) -> None:
    """str → (appends str to the output)"""
    vm.ctx.write(vm.ctx.pop_text("write$"))


@builtin("newline$")
def _newline(vm: Interpreter) -> None:
    """→ (appends a line break to the output)"""
    vm.ctx.write("\n")


@builtin("warning$")
def _warning(vm: Interpreter) -> None:
    """str → (reports str as a warning)"""
    message = vm.ctx.pop_text_or_missing("warning$")
    vm.ctx.warnings += 1
    logger.warning("Warning--%s", "" if message is MISSING else message)
