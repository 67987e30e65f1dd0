"""Process-wide state, built once at startup.

Initialization runs in a fixed order: asset discovery, then command tree
assembly, then command execution. Nothing in this module is global; the CLI
creates one ``AppContext`` and hands it to the command it runs.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any, List, Optional, Tuple

from distforge.core.assets import Assets, AssetTaskInfo, load_assets
from distforge.core.config import Settings
from distforge.core.project import ProjectContext, load_project
from distforge.core.tasks import InvocationOptions, TaskTree, build_task_tree

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GlobalFlags:
    """Values of the global CLI flags; None means "use the configured value"."""

    assets: Optional[Tuple[str, ...]] = None
    project_dir: Optional[Path] = None
    config_file: Optional[str] = None
    debug: bool = False
    log_file: Optional[str] = None


@dataclass
class AppContext:
    settings: Settings
    flags: GlobalFlags
    assets: Assets
    task_tree: TaskTree
    verify_tasks: Tuple[AssetTaskInfo, ...]
    _project: Optional[ProjectContext] = field(default=None, init=False, repr=False)

    @classmethod
    def create(cls, settings: Settings, flags: Optional[GlobalFlags] = None) -> "AppContext":
        """Discover assets and assemble the task tree.

        Raises:
            AssetLoadError: An asset could not be loaded.
            CommandRegistrationError: An asset-provided task could not be registered.
        """
        flags = flags or GlobalFlags()
        asset_paths: List[str] = list(flags.assets) if flags.assets is not None else settings.assets.paths
        assets = load_assets(asset_paths, timeout=settings.timeouts.probe_seconds)
        task_tree = build_task_tree(assets.assets_with_task_infos())
        verify_tasks = tuple(assets.verify_task_infos())
        logger.debug(
            "loaded %s: %d alias(es), %d verify task(s)", assets, len(task_tree.aliases), len(verify_tasks)
        )
        return cls(settings=settings, flags=flags, assets=assets, task_tree=task_tree, verify_tasks=verify_tasks)

    @property
    def project_dir(self) -> Path:
        return (self.flags.project_dir or Path.cwd()).resolve()

    def resolve_project(self) -> ProjectContext:
        """Load the project context on first use.

        Raises:
            ProjectConfigError: The project file could not be read.
        """
        if self._project is None:
            self._project = load_project(
                self.project_dir,
                self.flags.config_file or self.settings.project.config_file,
                version=self.settings.project.version,
            )
        return self._project

    def invocation_options(self, *, stdout: Optional[IO[Any]] = None, stderr: Optional[IO[Any]] = None) -> InvocationOptions:
        return InvocationOptions(
            stdout=stdout,
            stderr=stderr,
            timeout=self.settings.timeouts.task_seconds,
            keep_temp_files=self.settings.tempfiles.keep,
            debug=self.flags.debug,
            project_dir=self.flags.project_dir.resolve() if self.flags.project_dir else None,
        )


__all__ = ["GlobalFlags", "AppContext"]
