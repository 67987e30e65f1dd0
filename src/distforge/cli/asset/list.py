"""
distforge asset list command.

SUMMARY: List loaded assets
"""

from __future__ import annotations

import argparse

from distforge.cli import OutputFormatter, add_json_flag, get_app

SUMMARY = "List loaded assets"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    app = get_app(args)

    rows = []
    for asset in app.assets.all_assets():
        task_infos = asset.task_infos
        rows.append(
            {
                "path": asset.path,
                "type": asset.asset_type.value,
                "name": task_infos.asset_name if task_infos is not None else None,
                "tasks": task_infos.sorted_task_names() if task_infos is not None else [],
            }
        )

    if formatter.json_mode:
        formatter.json_output({"assets": rows})
        return 0

    if not rows:
        formatter.text("No assets loaded.")
        return 0
    formatter.table(
        ("TYPE", "NAME", "TASKS", "PATH"),
        ((r["type"], r["name"] or "-", len(r["tasks"]), r["path"]) for r in rows),
    )
    return 0
