#!/usr/bin/env python3
"""Generate the focusbell man page from the Typer app definition.

Usage:
    python scripts/generate_man.py [--output-dir DIR]

Writes man/man1/focusbell.1 by default. Needs the ``dev`` extra.
"""

import argparse
import sys
from pathlib import Path

import typer
from click_man.core import write_man_pages

from focusbell import __version__
from focusbell.main import app

repo_root = Path(__file__).parent.parent


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate the focusbell man page.")
    parser.add_argument(
        "--output-dir",
        default=str(repo_root / "man" / "man1"),
        help="Directory for the generated page (default: man/man1/)",
    )
    args = parser.parse_args()

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    write_man_pages(
        name="focusbell",
        cli=typer.main.get_command(app),
        version=__version__,
        target_dir=str(output_dir),
    )

    generated = output_dir / "focusbell.1"
    if not generated.exists():
        print("Warning: expected output file not found.", file=sys.stderr)
        sys.exit(1)
    print(f"Man page written to: {generated}")


if __name__ == "__main__":
    main()
