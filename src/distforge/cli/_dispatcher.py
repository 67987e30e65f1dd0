"""
Auto-discovery CLI dispatcher for distforge.

Built-in commands are modules under domain subfolders (``asset/list.py`` is
``distforge asset list``). Each module exposes ``SUMMARY``,
``register_args(parser)`` and ``main(args) -> int``.

Asset-provided tasks are registered under ``distforge task`` after assets
are loaded. Their arguments are forwarded verbatim, so a task invocation is
resolved from argv directly instead of through argparse.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from distforge.cli._args import add_global_flags
from distforge.cli._utils import APP_ATTR
from distforge.core.app import AppContext, GlobalFlags
from distforge.core.config import Settings, load_settings
from distforge.core.exceptions import DistforgeError, is_silent
from distforge.core.logsetup import configure_logging
from distforge.core.tasks import TaskCommand, attach_task_tree

logger = logging.getLogger(__name__)

TASK_DOMAIN = "task"

# Global flags that consume the following token as their value.
_VALUE_FLAGS = frozenset({"--assets", "--project-dir", "--config", "--log-file"})


@lru_cache(maxsize=1)
def discover_domains() -> dict[str, Path]:
    """
    Discover all CLI domain subfolders (asset, task).

    Returns:
        Dict mapping domain name to directory path
    """
    cli_dir = Path(__file__).parent
    domains = {}
    for item in cli_dir.iterdir():
        if item.is_dir() and not item.name.startswith("_"):
            # A domain may have no static commands (task, before assets load).
            domains[item.name] = item
    return domains


@lru_cache(maxsize=32)
def discover_commands(domain: str) -> dict[str, dict[str, Any]]:
    """
    Discover all commands in a domain subfolder.

    Returns:
        Dict mapping command name to command info dict
    """
    domain_dir = Path(__file__).parent / domain
    commands: dict[str, dict[str, Any]] = {}

    for item in domain_dir.glob("*.py"):
        if item.name.startswith("_"):
            continue

        cmd_name = item.stem
        module = importlib.import_module(f"distforge.cli.{domain}.{cmd_name}")
        commands[cmd_name] = {
            "module": module,
            "summary": getattr(module, "SUMMARY", f"{domain} {cmd_name}"),
            "register_args": getattr(module, "register_args", None),
            "main": getattr(module, "main", None),
        }

    return commands


def _domain_summary(domain: str) -> str:
    pkg = importlib.import_module(f"distforge.cli.{domain}")
    doc = (getattr(pkg, "__doc__", "") or "").strip()
    return doc.splitlines()[0] if doc else f"{domain} commands"


def build_parser(app: AppContext | None = None) -> argparse.ArgumentParser:
    """
    Build the argument parser with auto-discovered domains and commands.

    When ``app`` is given, its asset-provided tasks are registered under the
    task domain.
    """
    parser = argparse.ArgumentParser(
        prog="distforge",
        description="distforge - build, package and publish with pluggable assets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )
    add_global_flags(parser)

    subparsers = parser.add_subparsers(
        dest="domain",
        title="domains",
        description="Available command domains",
        metavar="<domain>",
    )

    for domain_name in sorted(discover_domains().keys()):
        domain_commands = discover_commands(domain_name)
        domain_parser = subparsers.add_parser(domain_name, help=_domain_summary(domain_name))
        cmd_subparsers = domain_parser.add_subparsers(
            dest="command",
            title="commands",
            description=f"Available {domain_name} commands",
            metavar="<command>",
        )

        for cmd_name, cmd_info in sorted(domain_commands.items()):
            primary_name = cmd_name.replace("_", "-")
            cmd_parser = cmd_subparsers.add_parser(primary_name, help=cmd_info["summary"])
            if cmd_info["register_args"]:
                cmd_info["register_args"](cmd_parser)
            if cmd_info["main"]:
                cmd_parser.set_defaults(_func=cmd_info["main"])

        if domain_name == TASK_DOMAIN and app is not None:
            attach_task_tree(app.task_tree, cmd_subparsers)

    return parser


def _get_version() -> str:
    from distforge import __version__

    return __version__


def _split_global_flags(argv: list[str]) -> tuple[list[str], list[str]]:
    """Split argv into the global flags before the first command token, and the rest.

    Subcommands and asset tasks may define flags with the same names as the
    global ones, so a flag is only global when it appears before the domain.
    """
    i = 0
    while i < len(argv):
        a = argv[i]
        if not a.startswith("-"):
            break
        if a in _VALUE_FLAGS:
            i += 1
        i += 1
    return argv[:i], argv[i:]


def _parse_global_flags(head: list[str]) -> GlobalFlags:
    parser = argparse.ArgumentParser(prog="distforge", add_help=False)
    add_global_flags(parser)
    ns, _ = parser.parse_known_args(head)

    assets: tuple[str, ...] | None = None
    if ns.assets:
        assets = tuple(p for value in ns.assets for p in value.split(",") if p)
    return GlobalFlags(
        assets=assets,
        project_dir=Path(ns.project_dir) if ns.project_dir else None,
        config_file=ns.config,
        debug=bool(ns.debug),
        log_file=ns.log_file,
    )


def _is_help_requested(argv: list[str]) -> bool:
    return any(a in ("-h", "--help") for a in argv)


def _run_guarded(func: Callable[[], int]) -> int:
    """Run a command and turn errors into an exit code.

    Any exception is reported as ``Error: <message>`` on stderr. Errors that
    carry no message (an asset that exited non-zero, a failed
    verify run) are not printed: the asset already reported the problem.
    """
    try:
        return func()
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130
    except DistforgeError as e:
        logger.debug("command failed: %r", e)
        if not is_silent(e):
            print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logger.debug("command failed unexpectedly", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _run_task_command(app: AppContext, command: TaskCommand, task_args: list[str]) -> int:
    command.run(task_args, resolve_project=app.resolve_project, options=app.invocation_options())
    return 0


def _load_settings(flags: GlobalFlags) -> Settings:
    try:
        settings = load_settings(flags.project_dir)
        settings.validate()
        return settings
    except (OSError, TypeError, ValueError, yaml.YAMLError) as e:
        raise DistforgeError(f"failed to load configuration: {e}") from e


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for distforge CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    if argv is None:
        argv = sys.argv[1:]
    argv = list(argv)

    head, rest = _split_global_flags(argv)
    if "--version" in head:
        print(f"distforge {_get_version()}")
        return 0
    flags = _parse_global_flags(head)

    app: AppContext | None = None

    def _startup() -> int:
        nonlocal app
        settings = _load_settings(flags)
        log_file = flags.log_file or settings.logging.file
        try:
            configure_logging(
                level=settings.logging.level,
                log_path=Path(log_file) if log_file else None,
                debug=flags.debug,
            )
        except OSError as e:
            raise DistforgeError(f"failed to open log file {log_file}: {e}") from e
        app = AppContext.create(settings, flags)
        return 0

    result = _run_guarded(_startup)
    if result != 0 or app is None:
        return result

    # Fast path: `task <alias> ...` and `task <type> <asset> <task> ...` keep
    # every following argument, flags included, for the asset.
    if rest and rest[0] == TASK_DOMAIN and not _is_help_requested(head):
        resolved = app.task_tree.resolve(rest[1:])
        if resolved is not None:
            command, task_args = resolved
            return _run_guarded(lambda: _run_task_command(app, command, task_args))

    parser = build_parser(app)
    args = parser.parse_args(argv)

    if not args.domain:
        parser.print_help()
        return 0

    task_command: TaskCommand | None = getattr(args, "task_command", None)
    if task_command is not None:
        return _run_guarded(lambda: _run_task_command(app, task_command, list(args.task_args)))

    func: Callable[[argparse.Namespace], int] | None = getattr(args, "_func", None)
    if func is None:
        # Domain or group without a command: show the most specific help.
        domain_parser = parser._subparsers._group_actions[0].choices.get(args.domain)
        if domain_parser:
            domain_parser.print_help()
        return 0

    setattr(args, APP_ATTR, app)
    return _run_guarded(lambda: func(args))


if __name__ == "__main__":
    sys.exit(main())
