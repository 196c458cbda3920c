"""Brace-group scanning shared by the text functions."""


def group_end(text: str, start: int) -> int:
    """Return the index just past the brace group opening at *start*.

    An unclosed group runs to the end of the text.
    """
    depth = 0
    for i in range(start, len(text)):
        ch = text[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
    return len(text)


def is_special(text: str, i: int) -> bool:
    """True if a special character ``{\\...}`` opens at *i*.

    Only meaningful for a brace at depth 0.
    """
    return text[i] == "{" and i + 1 < len(text) and text[i + 1] == "\\"


def control_sequence(text: str, i: int) -> tuple[str, int]:
    """Read the control sequence whose backslash is at *i*.

    Returns the name (letters, or a single non-letter) and the index
    after it.
    """
    j = i + 1
    if j < len(text) and text[j].isalpha():
        while j < len(text) and text[j].isalpha():
            j += 1
        return text[i + 1:j], j
    if j < len(text):
        return text[j], j + 1
    return "", j
