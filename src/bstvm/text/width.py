"""Pseudo-width of text, as measured by width$.

Widths are those of the cmr10 font in hundredths of a point, the table
BibTeX uses to guess the widest label.
"""

from __future__ import annotations

from bstvm.text.braces import control_sequence, group_end, is_special

CHAR_WIDTHS: dict[str, int] = {
    " ": 278, "!": 278, '"': 500, "#": 833, "$": 500, "%": 833, "&": 778,
    "'": 278, "(": 389, ")": 389, "*": 500, "+": 778, ",": 278, "-": 333,
    ".": 278, "/": 500,
    "0": 500, "1": 500, "2": 500, "3": 500, "4": 500,
    "5": 500, "6": 500, "7": 500, "8": 500, "9": 500,
    ":": 278, ";": 278, "<": 278, "=": 778, ">": 472, "?": 472, "@": 778,
    "A": 750, "B": 708, "C": 722, "D": 764, "E": 681, "F": 653, "G": 785,
    "H": 750, "I": 361, "J": 514, "K": 778, "L": 625, "M": 917, "N": 750,
    "O": 778, "P": 681, "Q": 778, "R": 736, "S": 556, "T": 722, "U": 750,
    "V": 750, "W": 1028, "X": 750, "Y": 750, "Z": 611,
    "[": 278, "\\": 500, "]": 278, "^": 500, "_": 278, "`": 278,
    "a": 500, "b": 556, "c": 444, "d": 556, "e": 444, "f": 306, "g": 500,
    "h": 556, "i": 278, "j": 306, "k": 528, "l": 278, "m": 833, "n": 556,
    "o": 500, "p": 556, "q": 528, "r": 392, "s": 394, "t": 389, "u": 556,
    "v": 528, "w": 722, "x": 528, "y": 528, "z": 444,
    "{": 500, "|": 1000, "}": 500, "~": 500,
}

# Special characters whose glyph is named by the control sequence
SPECIAL_WIDTHS: dict[str, int] = {
    "ss": 500,
    "ae": 722,
    "oe": 778,
    "AE": 903,
    "OE": 1014,
}


def char_width(ch: str) -> int:
    return CHAR_WIDTHS.get(ch, 0)


def _special_width(group: str) -> int:
    """Width of a ``{\\...}`` group: its letters, not its command names."""
    total = 0
    i = 1
    while i < len(group):
        ch = group[i]
        if ch == "\\":
            name, i = control_sequence(group, i)
            total += SPECIAL_WIDTHS.get(name, 0)
            continue
        if ch not in "{}":
            total += char_width(ch)
        i += 1
    return total


def width(text: str) -> int:
    """Sum the pseudo-widths of the characters of *text*."""
    total = 0
    depth = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "{" and depth == 0 and is_special(text, i):
            end = group_end(text, i)
            total += _special_width(text[i:end])
            i = end
            continue
        if ch == "{":
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
        total += char_width(ch)
        i += 1
    return total
