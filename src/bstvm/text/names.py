"""Personal names: splitting name lists and format.name$.

A name is split into First, von, Last and Jr parts following the BibTeX
conventions:

    First von Last
    von Last, First
    von Last, Jr, First

The von part is the run of words that start with a lowercase letter.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from bstvm.text.braces import control_sequence, group_end, is_special
from bstvm.text.measure import text_length

logger = logging.getLogger(__name__)

# Parts at least this many characters long do not need a tie
LONG_TOKEN = 3

_LOWER_LETTER_COMMANDS = frozenset({"i", "j", "oe", "ae", "aa", "o", "l", "ss"})
_UPPER_LETTER_COMMANDS = frozenset({"OE", "AE", "AA", "O", "L"})

_PART_LETTERS = {"f": "first", "v": "von", "l": "last", "j": "jr"}


@dataclass
class NameToken:
    """A word of a name and the separator that preceded it."""
    text: str
    sep: str = " "


@dataclass
class ParsedName:
    first: list[NameToken] = field(default_factory=list)
    von: list[NameToken] = field(default_factory=list)
    last: list[NameToken] = field(default_factory=list)
    jr: list[NameToken] = field(default_factory=list)


# ---- Name lists ----


def _words(text: str) -> list[str]:
    """Split on whitespace outside braces."""
    words: list[str] = []
    current: list[str] = []
    depth = 0
    for ch in text:
        if ch.isspace() and depth == 0:
            if current:
                words.append("".join(current))
                current = []
            continue
        if ch == "{":
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
        current.append(ch)
    if current:
        words.append("".join(current))
    return words


def split_names(text: str) -> list[str]:
    """Split an ``and``-separated name list.

    ``and`` separates names only as a whole word outside braces.
    """
    words = _words(text)
    if not words:
        return []
    names: list[list[str]] = [[]]
    for word in words:
        if word.lower() == "and":
            names.append([])
        else:
            names[-1].append(word)
    return [" ".join(name) for name in names]


def num_names(text: str) -> int:
    return len(split_names(text))


# ---- Parsing a single name ----


def _tokenize(name: str) -> list[list[NameToken]]:
    """Split a name into comma-separated parts of tokens."""
    parts: list[list[NameToken]] = [[]]
    current: list[str] = []
    sep = " "
    pending: str | None = None
    depth = 0

    def flush() -> None:
        nonlocal current
        if current:
            parts[-1].append(NameToken(text="".join(current), sep=sep))
            current = []

    for ch in name:
        if depth == 0 and ch == ",":
            flush()
            parts.append([])
            pending = None
            continue
        if depth == 0 and (ch.isspace() or ch in "-~"):
            flush()
            if ch in "-~":
                pending = ch
            elif pending is None:
                pending = " "
            continue
        if not current:
            sep = pending or " "
            pending = None
        if ch == "{":
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
        current.append(ch)
    flush()
    return parts


def _special_is_lower(group: str) -> bool:
    i = 1
    if i < len(group) and group[i] == "\\":
        name, i = control_sequence(group, i)
        if name in _LOWER_LETTER_COMMANDS:
            return True
        if name in _UPPER_LETTER_COMMANDS:
            return False
    while i < len(group):
        ch = group[i]
        if ch == "\\":
            _, i = control_sequence(group, i)
            continue
        if ch.isalpha():
            return ch.islower()
        i += 1
    return False


def is_von(word: str) -> bool:
    """True if the first letter of *word* outside plain braces is lowercase."""
    i = 0
    while i < len(word):
        ch = word[i]
        if ch == "{":
            end = group_end(word, i)
            if is_special(word, i):
                return _special_is_lower(word[i:end])
            i = end
            continue
        if ch.isalpha():
            return ch.islower()
        i += 1
    return False


def _split_von_last(tokens: list[NameToken]) -> tuple[list[NameToken], list[NameToken]]:
    """Split "von Last"; the last token always belongs to Last."""
    von_end = 0
    for i in range(len(tokens) - 1):
        if is_von(tokens[i].text):
            von_end = i + 1
    return tokens[:von_end], tokens[von_end:]


def parse_name(name: str) -> ParsedName:
    """Split a single name into its First, von, Last and Jr parts."""
    parts = _tokenize(name.strip())
    if len(parts) > 3:
        logger.warning("Too many commas in name %r", name)
        extra = [token for part in parts[2:] for token in part]
        parts = [parts[0], parts[1], extra]

    if len(parts) == 1:
        tokens = parts[0]
        n = len(tokens)
        if n == 0:
            return ParsedName()
        von_start = next((i for i in range(n - 1) if is_von(tokens[i].text)), None)
        if von_start is None:
            # Hyphenated last names stay together
            last_start = n - 1
            while last_start > 0 and tokens[last_start].sep == "-":
                last_start -= 1
            return ParsedName(first=tokens[:last_start], last=tokens[last_start:])
        von, last = _split_von_last(tokens[von_start:])
        return ParsedName(first=tokens[:von_start], von=von, last=last)

    von, last = _split_von_last(parts[0])
    if len(parts) == 2:
        return ParsedName(first=parts[1], von=von, last=last)
    return ParsedName(first=parts[2], von=von, last=last, jr=parts[1])


# ---- Formatting ----


def _abbreviate(word: str) -> str:
    """The first letter of a word; a special character is kept whole."""
    i = 0
    while i < len(word):
        ch = word[i]
        if ch == "{":
            end = group_end(word, i)
            if is_special(word, i):
                return word[i:end]
            inner = word[i + 1:end - 1] if word[end - 1] == "}" else word[i + 1:end]
            letter = _abbreviate(inner)
            return "{" + letter + "}" if letter else ""
        if ch.isalpha():
            return ch
        i += 1
    return ""


def _join_tokens(tokens: list[NameToken], full: bool, between: str | None) -> str:
    out: list[str] = []
    last = len(tokens) - 1
    for idx, token in enumerate(tokens):
        if idx > 0:
            if between is not None:
                out.append(between)
            else:
                if not full:
                    out.append(".")
                if token.sep in "-~":
                    out.append(token.sep)
                elif idx == last or text_length("".join(out)) < LONG_TOKEN:
                    out.append("~")
                else:
                    out.append(" ")
        out.append(token.text if full else _abbreviate(token.text))
    return "".join(out)


def _format_part(group: str, name: ParsedName) -> str:
    """Format one ``{...}`` group of a name pattern, e.g. ``{, jj}``."""
    i = 0
    depth = 0
    while i < len(group):
        ch = group[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        elif depth == 0 and ch.isalpha():
            break
        i += 1
    else:
        return group

    letter = group[i].lower()
    if letter not in _PART_LETTERS:
        return group
    pre = group[:i]
    i += 1
    full = False
    if i < len(group) and group[i].lower() == letter:
        full = True
        i += 1
    between = None
    if i < len(group) and group[i] == "{":
        end = group_end(group, i)
        between = group[i + 1:end - 1]
        i = end
    post = group[i:]

    tokens = getattr(name, _PART_LETTERS[letter])
    if not tokens:
        return ""
    body = _join_tokens(tokens, full, between)
    # A trailing tie is discretionary: a space after a long part
    if post.endswith("~~"):
        post = post[:-1]
    elif post.endswith("~") and text_length(body) >= LONG_TOKEN:
        post = post[:-1] + " "
    return pre + body + post


def format_name(name: str, pattern: str) -> str:
    """Format one name according to a format.name$ pattern.

    Text outside braces is copied. Each brace group holds one part letter
    (``f``, ``v``, ``l`` or ``j``; doubled for the full words, single for
    initials) with optional text around it, and vanishes entirely when
    that part of the name is empty.
    """
    parsed = parse_name(name)
    out: list[str] = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "{":
            end = group_end(pattern, i)
            closed = pattern[end - 1] == "}"
            out.append(_format_part(pattern[i + 1:end - 1 if closed else end], parsed))
            i = end
            continue
        if ch != "}":
            out.append(ch)
        i += 1
    return "".join(out)
