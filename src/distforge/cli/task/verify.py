"""
distforge task verify command.

SUMMARY: Run the asset-provided tasks that registered as verify tasks

Every verify task runs, even after one fails; the command fails if any did.
Without --apply tasks only check state; with it they fix what they can.
"""

from __future__ import annotations

import argparse

from distforge.cli import add_apply_flag, get_app
from distforge.core.tasks import run_verify_tasks

SUMMARY = "Run the asset-provided tasks that registered as verify tasks"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_apply_flag(parser)


def main(args: argparse.Namespace) -> int:
    app = get_app(args)
    run_verify_tasks(
        app.verify_tasks,
        apply_mode=bool(getattr(args, "apply", False)),
        resolve_project=app.resolve_project,
        options=app.invocation_options(),
    )
    return 0
