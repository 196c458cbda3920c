"""purify$: reduce text to letters, digits and spaces."""

from __future__ import annotations

from bstvm.text.braces import control_sequence, group_end, is_special

# Control sequences that stand for letters and keep them when purified
FOREIGN_LETTERS = frozenset({"i", "j", "oe", "OE", "ae", "AE", "aa", "AA", "o", "O", "l", "L", "ss"})


def _purify_special(group: str) -> str:
    out: list[str] = []
    i = 1
    while i < len(group):
        ch = group[i]
        if ch == "\\":
            name, i = control_sequence(group, i)
            if name in FOREIGN_LETTERS:
                out.append(name)
            continue
        if ch.isalnum():
            out.append(ch)
        i += 1
    return "".join(out)


def purify(text: str) -> str:
    """Remove everything but alphanumerics and spaces.

    Hyphens and ties become spaces, special characters collapse to their
    base letters (``{\\'e}`` becomes ``e``, ``{\\ss}`` becomes ``ss``).
    """
    out: list[str] = []
    depth = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "{":
            if depth == 0 and is_special(text, i):
                end = group_end(text, i)
                out.append(_purify_special(text[i:end]))
                i = end
                continue
            depth += 1
        elif ch == "}":
            if depth > 0:
                depth -= 1
        elif ch.isspace() or ch in "-~":
            out.append(" ")
        elif ch.isalnum():
            out.append(ch)
        i += 1
    return "".join(out)
