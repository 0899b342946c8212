#!/usr/bin/env python3
"""KrossLite command-line entry point: print or unlock a .puz puzzle."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from models.errors import PuzzleError
from models.puzzle import Puzzle
from services.file_loader import FileLoaderService


def _parse_command_line(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="krosslite",
        description="Print the solution of an Across Lite puzzle, unlocking it if scrambled.",
    )
    parser.add_argument("puz_file", help="Path to a .puz puzzle")
    parser.add_argument("key", nargs="?", type=int,
                        help="4-digit unlock key; searched for when omitted")
    parser.add_argument("--workers", type=int, default=None,
                        help="Processes to use for the key search")
    parser.add_argument("--info", action="store_true",
                        help="Print metadata and clues instead of the solution")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    return parser.parse_args(argv[1:])


def describe(puzzle: Puzzle) -> str:
    """Metadata and clue lists as text"""
    lines = [
        puzzle.title,
        puzzle.author,
        puzzle.copyright,
        f"{puzzle.width}×{puzzle.height}, {puzzle.num_clues} clues, version {puzzle.version}"
        + (", scrambled" if puzzle.scrambled else ""),
    ]
    for direction in puzzle.directions:
        lines.append("")
        lines.append(str(direction))
        for n in direction.numbers:
            answer = direction.answers.get(n)
            suffix = f" ({answer})" if answer else ""
            lines.append(f"{n:>3}. {direction.clues[n]}{suffix}")
    if puzzle.notepad:
        lines.append("")
        lines.append(puzzle.notepad.rstrip())
    return "\n".join(lines) + "\n"


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    args = _parse_command_line(sys.argv if argv is None else argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    prog = "krosslite"

    if args.key == 0:
        print(f"{prog}: 0000 is not a valid key", file=sys.stderr)
        return 1

    try:
        puzzle = FileLoaderService().load_puz_file(args.puz_file)
        if args.info:
            sys.stdout.write(describe(puzzle))
            return 0
        if args.key is not None:
            puzzle.unlock_with_key(args.key)
        elif puzzle.scrambled:
            key = puzzle.unlock(workers=args.workers)
            print(f"[key = {key:04d}]")
    except (OSError, ValueError, PuzzleError) as e:
        print(f"{prog}: {e}", file=sys.stderr)
        return 1

    sys.stdout.write(puzzle.solution())
    return 0


if __name__ == "__main__":
    sys.exit(main())
