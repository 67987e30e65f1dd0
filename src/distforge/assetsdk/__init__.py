"""Helpers for writing assets in Python.

An asset is any executable that answers the ``asset-type`` and
``task-infos`` queries and runs its tasks when invoked with their command.
This module builds that command-line surface from a list of tasks::

    from distforge.assetsdk import AssetTask, run_asset
    from distforge.core.assets import AssetType, TaskInfo

    class Lint:
        def run_task(self, config_yaml, output_infos, args, stdout, stderr):
            ...
            return 0

    if __name__ == "__main__":
        lint = TaskInfo(name="lint", command=("lint",), register_as_top_level=True)
        sys.exit(run_asset(AssetType.DISTER, "my-dister", [AssetTask(lint, Lint())]))
"""
from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from typing import IO, Any, Dict, List, Mapping, Optional, Protocol, Sequence

from distforge.core.assets.probe import ASSET_TYPE_COMMAND, TASK_INFOS_COMMAND
from distforge.core.assets.types import AssetType, TaskInfo, TaskInfos
from distforge.core.exceptions import CommandRegistrationError
from distforge.core.tasks.channel import ALL_PRODUCT_TASK_OUTPUT_INFO_FLAG
from distforge.core.tasks.configyaml import read_output_infos, read_products_config
from distforge.core.tasks.providers import provider_for

ProductsConfigBytes = Dict[str, Dict[str, bytes]]


class TaskRunner(Protocol):
    def run_task(
        self,
        config_yaml: ProductsConfigBytes,
        output_infos: Mapping[str, Any],
        args: Sequence[str],
        stdout: IO[str],
        stderr: IO[str],
    ) -> Optional[int]:
        """Run the task; return a non-zero exit code (or raise) on failure."""
        ...


@dataclass(frozen=True)
class AssetTask:
    task_info: TaskInfo
    runner: TaskRunner


def task_infos_for(asset_name: str, tasks: Sequence[AssetTask]) -> TaskInfos:
    return TaskInfos(asset_name=asset_name, task_infos={t.task_info.name: t.task_info for t in tasks})


def build_asset_parser(
    asset_type: AssetType,
    asset_name: str,
    tasks: Sequence[AssetTask] = (),
    *,
    prog: Optional[str] = None,
) -> argparse.ArgumentParser:
    """Return the parser for an asset that provides ``tasks``.

    Raises:
        CommandRegistrationError: A task's command is not exactly one argument.
    """
    parser = argparse.ArgumentParser(prog=prog or asset_name, allow_abbrev=False)
    subparsers = parser.add_subparsers(dest="asset_command", metavar="<command>")

    type_parser = subparsers.add_parser(ASSET_TYPE_COMMAND, help="Print the asset type")
    type_parser.set_defaults(_asset_query=ASSET_TYPE_COMMAND)
    infos_parser = subparsers.add_parser(TASK_INFOS_COMMAND, help="Print the tasks this asset provides")
    infos_parser.set_defaults(_asset_query=TASK_INFOS_COMMAND)

    config_flag = provider_for(asset_type).config_flag_name
    for task in tasks:
        command = task.task_info.command
        if len(command) != 1:
            raise CommandRegistrationError(
                f"only tasks with a single command value are supported, but task {task.task_info.name} has {list(command)}",
                asset_type=asset_type.value,
                asset_name=asset_name,
                task_name=task.task_info.name,
            )
        task_parser = subparsers.add_parser(
            command[0],
            help=task.task_info.description or None,
            allow_abbrev=False,
        )
        task_parser.add_argument(f"--{config_flag}", dest="config_yml_file", metavar="FILE")
        task_parser.add_argument(
            f"--{ALL_PRODUCT_TASK_OUTPUT_INFO_FLAG}",
            dest="output_info_file",
            metavar="FILE",
        )
        task_parser.set_defaults(_asset_task=task)

    return parser


def _load_task_inputs(ns: argparse.Namespace) -> tuple[ProductsConfigBytes, Dict[str, Any]]:
    config_yaml: ProductsConfigBytes = {}
    if ns.config_yml_file:
        products = read_products_config(ns.config_yml_file)
        config_yaml = {pid: {eid: cfg.config_yaml for eid, cfg in entries.items()} for pid, entries in products.items()}
    output_infos: Dict[str, Any] = {}
    if ns.output_info_file:
        output_infos = read_output_infos(ns.output_info_file)
    return config_yaml, output_infos


def run_asset(
    asset_type: AssetType,
    asset_name: str,
    tasks: Sequence[AssetTask] = (),
    argv: Optional[List[str]] = None,
    *,
    stdout: Optional[IO[str]] = None,
    stderr: Optional[IO[str]] = None,
) -> int:
    """Parse ``argv`` and run the asset query or task it names. Returns the exit code."""
    out = stdout or sys.stdout
    err = stderr or sys.stderr
    parser = build_asset_parser(asset_type, asset_name, tasks)
    ns, extra = parser.parse_known_args(sys.argv[1:] if argv is None else argv)

    query = getattr(ns, "_asset_query", None)
    if query == ASSET_TYPE_COMMAND:
        print(json.dumps(asset_type.value), file=out)
        return 0
    if query == TASK_INFOS_COMMAND:
        print(json.dumps(task_infos_for(asset_name, tasks).to_json()), file=out)
        return 0

    task: Optional[AssetTask] = getattr(ns, "_asset_task", None)
    if task is None:
        parser.print_help(file=err)
        return 1

    try:
        config_yaml, output_infos = _load_task_inputs(ns)
        rc = task.runner.run_task(config_yaml, output_infos, list(extra), out, err)
    except Exception as e:
        print(f"Error: {e}", file=err)
        return 1
    return int(rc or 0)


__all__ = [
    "ProductsConfigBytes",
    "TaskRunner",
    "AssetTask",
    "task_infos_for",
    "build_asset_parser",
    "run_asset",
]
