"""Bibliography input: the entries and preamble a style renders.

Entries come from the surrounding bibliography application. For the
command line they can be loaded from JSON:

    {"preamble": "...", "entries": [
        {"type": "article", "key": "knuth84", "fields": {"author": "...", "year": "1984"}}
    ]}

A bare list of entries is accepted as well.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass
class BibEntry:
    """One bibliography record."""

    entry_type: str
    citation_key: str
    fields: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Field names are case-insensitive
        self.fields = {name.lower(): value for name, value in self.fields.items()}

    def get(self, name: str) -> str | None:
        """Return a field value, or None if the entry lacks the field."""
        return self.fields.get(name.lower())

    def with_field(self, name: str, value: str) -> BibEntry:
        """Set a field and return self, for building entries inline."""
        self.fields[name.lower()] = value
        return self


@dataclass
class BibDatabase:
    """The ordered entry list plus the document preamble."""

    entries: list[BibEntry] = field(default_factory=list)
    preamble: str | None = None


def _entry_from_json(data: Any, index: int) -> BibEntry:
    if not isinstance(data, dict):
        raise ValueError(f"Entry {index}: expected an object, got {type(data).__name__}")
    entry_type = data.get("type")
    key = data.get("key")
    if not isinstance(entry_type, str) or not entry_type:
        raise ValueError(f"Entry {index}: missing 'type'")
    if not isinstance(key, str):
        raise ValueError(f"Entry {index}: missing 'key'")
    fields = data.get("fields", {})
    if not isinstance(fields, dict):
        raise ValueError(f"Entry {index}: 'fields' must be an object")
    for name, value in fields.items():
        if not isinstance(value, str):
            raise ValueError(f"Entry {index}: field '{name}' must be a string")
    return BibEntry(entry_type=entry_type, citation_key=key, fields=dict(fields))


def database_from_json(data: Any) -> BibDatabase:
    """Build a BibDatabase from parsed JSON."""
    preamble = None
    if isinstance(data, dict):
        preamble = data.get("preamble")
        if preamble is not None and not isinstance(preamble, str):
            raise ValueError("'preamble' must be a string")
        data = data.get("entries", [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of entries, got {type(data).__name__}")
    entries = [_entry_from_json(item, i) for i, item in enumerate(data)]
    return BibDatabase(entries=entries, preamble=preamble)


def load_database(path: Path) -> BibDatabase:
    """Load entries from a JSON file."""
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e
    return database_from_json(data)
