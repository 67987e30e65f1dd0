"""
distforge asset tasks command.

SUMMARY: List asset-provided tasks and how to invoke them

Every task is listed by its fully-qualified path. The alias column shows the
bare name under which the task can also be run, if it claimed one.
"""

from __future__ import annotations

import argparse

from distforge.cli import OutputFormatter, add_json_flag, get_app

SUMMARY = "List asset-provided tasks and how to invoke them"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    app = get_app(args)
    tree = app.task_tree

    rows = []
    for command in tree.commands():
        info = command.asset_task_info
        rows.append(
            {
                "path": [info.asset_type.value, info.asset_name, info.task_info.name],
                "alias": tree.alias_for(command),
                "verify": info.task_info.verify_options is not None,
                "asset_path": info.asset_path,
                "description": info.task_info.description,
            }
        )

    if formatter.json_mode:
        formatter.json_output({"tasks": rows})
        return 0

    if not rows:
        formatter.text("No asset-provided tasks.")
        return 0
    formatter.table(
        ("TASK", "ALIAS", "VERIFY", "DESCRIPTION"),
        (
            (" ".join(r["path"]), r["alias"] or "-", "yes" if r["verify"] else "no", r["description"])
            for r in rows
        ),
    )
    return 0
