"""Assemble asset-provided tasks into a command tree.

Every task is reachable as ``<asset-type> <asset-name> <task-name>``. Tasks
that ask for it are also reachable by bare name, as long as the name is not
reserved and no earlier task claimed it.

The tree is built as plain data first and only then attached to argparse, so
a task that cannot be registered leaves nothing behind.
"""
from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from distforge.core.assets.types import RESERVED_TASK_NAMES, Asset, AssetTaskInfo, AssetType
from distforge.core.exceptions import CommandRegistrationError

from .providers import TaskCommand, provider_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssetGroup:
    asset_name: str
    asset_path: str
    commands: Mapping[str, TaskCommand] = field(default_factory=dict)


@dataclass(frozen=True)
class TypeGroup:
    asset_type: AssetType
    assets: Mapping[str, AssetGroup] = field(default_factory=dict)


@dataclass(frozen=True)
class TaskTree:
    types: Mapping[AssetType, TypeGroup] = field(default_factory=dict)
    aliases: Mapping[str, TaskCommand] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return bool(self.types)

    def commands(self) -> Iterator[TaskCommand]:
        """Yield every fully-qualified command in tree order."""
        for type_group in self.types.values():
            for asset_group in type_group.assets.values():
                yield from asset_group.commands.values()

    def alias_for(self, command: TaskCommand) -> Optional[str]:
        for name, claimed in self.aliases.items():
            if claimed is command:
                return name
        return None

    def resolve(self, argv: Sequence[str]) -> Optional[Tuple[TaskCommand, List[str]]]:
        """Return the command named by the head of ``argv`` and the remaining args.

        Returns None when ``argv`` does not name a command, so the caller can
        fall back to regular parsing (help output, usage errors).
        """
        if not argv:
            return None
        head = argv[0]
        if head in self.aliases:
            return self.aliases[head], list(argv[1:])
        asset_type = AssetType.parse(head)
        if asset_type is None or asset_type not in self.types or len(argv) < 3:
            return None
        asset_group = self.types[asset_type].assets.get(argv[1])
        if asset_group is None:
            return None
        command = asset_group.commands.get(argv[2])
        if command is None:
            return None
        return command, list(argv[3:])


def build_task_tree(
    assets_with_task_infos: Iterable[Asset],
    *,
    reserved_names: Iterable[str] = RESERVED_TASK_NAMES,
) -> TaskTree:
    """Build the command tree for ``assets_with_task_infos``, taken in the given order.

    Raises:
        CommandRegistrationError: A task's command is not exactly one argument,
            or two assets of one type share an asset name.
    """
    claimed = set(reserved_names)
    types: Dict[AssetType, Dict[str, AssetGroup]] = {}
    aliases: Dict[str, TaskCommand] = {}

    for asset in assets_with_task_infos:
        task_infos = asset.task_infos
        if task_infos is None or not task_infos.task_infos:
            continue

        provider = provider_for(asset.asset_type)
        type_assets = types.setdefault(asset.asset_type, {})
        if task_infos.asset_name in type_assets:
            raise CommandRegistrationError(
                f"asset {task_infos.asset_name} of type {asset.asset_type} at {asset.path} has the same name "
                f"as the asset at {type_assets[task_infos.asset_name].asset_path}",
                asset_path=asset.path,
                asset_type=asset.asset_type.value,
                asset_name=task_infos.asset_name,
            )

        commands: Dict[str, TaskCommand] = {}
        for task_info in task_infos.sorted_task_infos():
            command = provider.build_command(
                AssetTaskInfo(
                    asset_path=asset.path,
                    asset_type=asset.asset_type,
                    asset_name=task_infos.asset_name,
                    task_info=task_info,
                )
            )
            commands[task_info.name] = command

            if not task_info.register_as_top_level:
                continue
            if task_info.name in claimed:
                logger.debug("task %s is only available as %s", task_info.name, command.asset_task_info.qualified_name)
                continue
            claimed.add(task_info.name)
            aliases[task_info.name] = command

        type_assets[task_infos.asset_name] = AssetGroup(
            asset_name=task_infos.asset_name,
            asset_path=asset.path,
            commands=commands,
        )

    return TaskTree(
        types={t: TypeGroup(asset_type=t, assets=types[t]) for t in sorted(types)},
        aliases=aliases,
    )


def _add_task_parser(subparsers: Any, name: str, command: TaskCommand) -> None:
    parser = subparsers.add_parser(name, help=command.description or None, description=command.description or None)
    parser.add_argument("task_args", nargs=argparse.REMAINDER, help="Arguments passed to the task")
    parser.set_defaults(task_command=command)


def attach_task_tree(tree: TaskTree, subparsers: Any) -> None:
    """Register the commands of ``tree`` under an argparse subparsers action."""
    for type_group in tree.types.values():
        type_parser = subparsers.add_parser(
            type_group.asset_type.value,
            help=f"Tasks provided by {type_group.asset_type} assets",
        )
        asset_subparsers = type_parser.add_subparsers(dest="task_asset", metavar="<asset-name>")
        for asset_group in type_group.assets.values():
            asset_parser = asset_subparsers.add_parser(asset_group.asset_name, help=asset_group.asset_path)
            task_subparsers = asset_parser.add_subparsers(dest="task_name", metavar="<task-name>")
            for task_name, command in asset_group.commands.items():
                _add_task_parser(task_subparsers, task_name, command)

    for alias, command in tree.aliases.items():
        _add_task_parser(subparsers, alias, command)


__all__ = [
    "AssetGroup",
    "TypeGroup",
    "TaskTree",
    "build_task_tree",
    "attach_task_tree",
]
