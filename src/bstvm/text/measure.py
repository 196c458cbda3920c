"""Length, prefix, period and substring operations on style text."""

from __future__ import annotations

import re

from bstvm.text.braces import group_end, is_special

# The last character that is not a brace or whitespace, then the tail
_ADD_PERIOD_RE = re.compile(r"([^.?!}\s])([}\s])*$")


def text_length(text: str) -> int:
    """Count text characters.

    Braces are not characters, and a special character such as
    ``{\\'e}`` counts once however long it is.
    """
    count = 0
    depth = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "{":
            if depth == 0 and is_special(text, i):
                count += 1
                i = group_end(text, i)
                continue
            depth += 1
        elif ch == "}":
            if depth > 0:
                depth -= 1
        else:
            count += 1
        i += 1
    return count


def text_prefix(text: str, n: int) -> str:
    """Return the first *n* text characters, closing any open groups."""
    out: list[str] = []
    count = 0
    depth = 0
    i = 0
    while i < len(text) and count < n:
        ch = text[i]
        if ch == "{":
            if depth == 0 and is_special(text, i):
                end = group_end(text, i)
                out.append(text[i:end])
                count += 1
                i = end
                continue
            depth += 1
        elif ch == "}":
            if depth > 0:
                depth -= 1
        else:
            count += 1
        out.append(ch)
        i += 1
    return "".join(out) + "}" * depth


def add_period(text: str) -> str:
    """Append a period unless the text ends in '.', '!' or '?'.

    Trailing closing braces and whitespace are looked through; the period
    goes before the final closing brace.
    """
    m = _ADD_PERIOD_RE.search(text)
    if m is None:
        return text
    return text[:m.start()] + m.group(1) + "." + (m.group(2) or "")


def substring(text: str, start: int, length: int) -> str:
    """Return *length* characters starting at 1-based *start*.

    A negative start counts from the end (-1 is the last character) and
    the substring then extends leftwards. An invalid start or a
    non-positive length gives the empty string.
    """
    size = len(text)
    if start == 0 or length <= 0 or abs(start) > size:
        return ""
    if start > 0:
        begin = start - 1
        return text[begin:begin + length]
    end = size + start + 1
    return text[max(0, end - length):end]
