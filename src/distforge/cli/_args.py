"""Argument registration helpers shared by CLI commands."""
from __future__ import annotations

import argparse


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    """Add --json flag for JSON output mode."""
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )


def add_global_flags(parser: argparse.ArgumentParser) -> None:
    """Add the flags that apply to the whole invocation.

    They are only honored before the first command token; anything after it
    belongs to the command (and, for asset tasks, is forwarded verbatim).
    """
    parser.add_argument(
        "--assets",
        action="append",
        metavar="PATH[,PATH...]",
        help="Asset executables to load (repeatable; overrides assets.paths)",
    )
    parser.add_argument(
        "--project-dir",
        metavar="DIR",
        help="Project directory (default: current directory)",
    )
    parser.add_argument(
        "--config",
        metavar="FILE",
        help="Project configuration file, relative to the project directory (default: dist.yml)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log to stderr and forward debug mode to assets that ask for it",
    )
    parser.add_argument(
        "--log-file",
        metavar="FILE",
        help="Write logs to FILE",
    )


def add_apply_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Apply changes when possible instead of only verifying",
    )


__all__ = [
    "add_json_flag",
    "add_global_flags",
    "add_apply_flag",
]
