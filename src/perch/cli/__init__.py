"""Perch CLI: validate an SSR project before serving it.

Entry point registered as ``perch`` in ``pyproject.toml``::

    [project.scripts]
    perch = "perch.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``perch`` command."""
    parser = argparse.ArgumentParser(
        prog="perch",
        description="Perch, server-side rendering for single-page applications.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- perch check ------------------------------------------------------
    check_parser = subparsers.add_parser(
        "check",
        help="Validate the index template and the build layout",
    )
    check_parser.add_argument("--root", default=".", help="Project root (development)")
    check_parser.add_argument("--index", default="index.html", help="Index template path")
    check_parser.add_argument("--dist", default="dist", help="Production build directory")
    check_parser.add_argument(
        "--production",
        action="store_true",
        help="Check the production build instead of the development setup",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "check":
        from perch.cli._check import run_check

        run_check(args)
