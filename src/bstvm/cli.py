"""Command line renderer: run a .bst style over entries from JSON."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from bstvm.entries import BibDatabase, load_database
from bstvm.errors import BstError
from bstvm.vm import BstVM


def render_file(
    style_path: Path, entries_path: Path | None = None, preamble: str | None = None
) -> str:
    """Render the entries in *entries_path* (none if omitted) with a style file."""
    database = load_database(entries_path) if entries_path else BibDatabase()
    vm = BstVM.from_file(style_path)
    return vm.render(database, preamble=preamble)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    arg_parser = argparse.ArgumentParser(
        description="Render a bibliography with a BibTeX style (.bst)"
    )
    arg_parser.add_argument(
        "style",
        type=Path,
        help="Path to the .bst style file",
    )
    arg_parser.add_argument(
        "entries",
        type=Path,
        nargs="?",
        default=None,
        help="JSON file with the entries to render (optional)",
    )
    arg_parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Write the rendered bibliography to a file instead of stdout",
    )
    arg_parser.add_argument(
        "--preamble",
        type=str,
        default=None,
        help="Preamble text, overriding the one in the entries file",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log each command as it runs",
    )

    args = arg_parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.style.exists():
        print(f"Error: Style file not found: {args.style}", file=sys.stderr)
        return 1
    if args.entries and not args.entries.exists():
        print(f"Error: Entries file not found: {args.entries}", file=sys.stderr)
        return 1

    try:
        output = render_file(args.style, args.entries, args.preamble)
    except (BstError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.output:
        args.output.write_text(output, encoding="utf-8")
        print(f"Wrote {args.output}", file=sys.stderr)
    else:
        sys.stdout.write(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
