"""change.case$: title, upper and lower casing that respects braces."""

from __future__ import annotations

from bstvm.text.braces import group_end

TITLE = "t"
UPPER = "u"
LOWER = "l"


def _convert(ch: str, mode: str) -> str:
    return ch.upper() if mode == UPPER else ch.lower()


def change_case(text: str, mode: str) -> str:
    """Change the case of *text*.

    ``t`` lowercases everything except the first character and the first
    character after a colon and whitespace. ``u`` and ``l`` convert every
    letter. Brace groups at depth 0 are protected and copied unchanged in
    every mode, special characters such as ``{\\'e}`` included.
    """
    mode = mode.lower()
    if mode not in (TITLE, UPPER, LOWER):
        raise ValueError(f"Illegal case conversion: {mode!r}")

    out: list[str] = []
    prev_colon = False
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "{":
            end = group_end(text, i)
            out.append(text[i:end])
            prev_colon = False
            i = end
            continue
        keep = mode == TITLE and (i == 0 or (prev_colon and text[i - 1].isspace()))
        if ch == "}" or keep:
            out.append(ch)
        else:
            out.append(_convert(ch, mode if mode == UPPER else LOWER))
        if ch == ":":
            prev_colon = True
        elif not ch.isspace():
            prev_colon = False
        i += 1
    return "".join(out)
