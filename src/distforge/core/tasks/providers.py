"""Asset-provided task behaviour per asset type.

Each asset type is one variant of ``AssetProvidedTask``. A variant knows which
section of the project configuration its assets own and under which flag that
configuration is handed to them; everything else is shared. The variant for
an asset is resolved once with ``provider_for`` and reused.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any, Callable, ClassVar, Dict, List, Mapping, Optional, Sequence

from distforge.core.assets.types import AssetTaskInfo, AssetType, TaskInfo
from distforge.core.exceptions import CommandRegistrationError, ProjectConfigError

from .channel import run_asset_task
from .configyaml import ProductsDisterConfig, filter_dister_config_yaml

if TYPE_CHECKING:
    from distforge.core.project import ProjectContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvocationOptions:
    """Host-level settings applied to every asset task invocation."""

    stdout: Optional[IO[Any]] = None
    stderr: Optional[IO[Any]] = None
    timeout: Optional[float] = None
    keep_temp_files: bool = False
    debug: bool = False
    project_dir: Optional[Path] = None


@dataclass(frozen=True)
class TaskInput:
    """Everything an asset task receives besides its forwarded arguments.

    ``all_config_yaml`` covers every asset of the variant; it is narrowed to a
    single asset's entries right before that asset is invoked.
    """

    all_config_yaml: ProductsDisterConfig = field(default_factory=dict)
    product_task_output_infos: Mapping[str, Any] = field(default_factory=dict)


# Verify runs build the input once per asset type and share it across tasks.
VerifyTaskInput = TaskInput


def global_flag_args(task_info: TaskInfo, *, debug: bool, project_dir: Optional[Path]) -> List[str]:
    """Return the flags for host values the task asked to receive."""
    opts = task_info.global_flag_options
    if opts is None:
        return []
    out: List[str] = []
    if opts.debug_flag:
        out.append(f"--{opts.debug_flag}={'true' if debug else 'false'}")
    if opts.project_dir_flag and project_dir:
        out.append(f"--{opts.project_dir_flag}={project_dir}")
    return out


class AssetProvidedTask:
    """Base of the asset-type variants."""

    asset_type: ClassVar[AssetType]
    config_flag_name: ClassVar[str]
    project_section: ClassVar[str]

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def build_command(self, asset_task_info: AssetTaskInfo) -> "TaskCommand":
        """Return the runnable command for one task of one asset.

        Raises:
            CommandRegistrationError: If the task's command is not exactly one argument.
        """
        task_info = asset_task_info.task_info
        if len(task_info.command) != 1:
            raise CommandRegistrationError(
                f"failed to create asset-provided task {task_info.name} for asset {asset_task_info.asset_name} "
                f"of type {asset_task_info.asset_type} at {asset_task_info.asset_path}: "
                f"command must have exactly one element, was {list(task_info.command)}",
                asset_path=asset_task_info.asset_path,
                asset_type=asset_task_info.asset_type.value,
                asset_name=asset_task_info.asset_name,
                task_name=task_info.name,
            )
        return TaskCommand(asset_task_info=asset_task_info, provider=self)

    def create_task_input(self, project: ProjectContext) -> TaskInput:
        all_config_yaml = project.products_config_yaml(self.project_section)
        output_infos = {pid: info.to_json() for pid, info in project.product_task_output_infos().items()}
        return TaskInput(all_config_yaml=all_config_yaml, product_task_output_infos=output_infos)

    def create_verify_input(self, project: ProjectContext) -> VerifyTaskInput:
        return self.create_task_input(project)

    def run_task(
        self,
        asset_task_info: AssetTaskInfo,
        task_input: TaskInput,
        args: Sequence[str],
        options: InvocationOptions,
    ) -> None:
        """Invoke the task on its asset with the asset's own configuration entries.

        Raises:
            AssetTaskFailedError, InvocationHostError
        """
        task_info = asset_task_info.task_info
        forwarded = global_flag_args(task_info, debug=options.debug, project_dir=options.project_dir) + list(args)
        self._invoke(asset_task_info, task_input, forwarded, options)

    def run_verify_task(
        self,
        asset_task_info: AssetTaskInfo,
        task_input: VerifyTaskInput,
        apply_mode: bool,
        options: InvocationOptions,
    ) -> None:
        """Invoke a verify task with only its apply-mode args; global flags are not added."""
        verify_options = asset_task_info.task_info.verify_options
        if verify_options is None:
            args: Sequence[str] = ()
        elif apply_mode:
            args = verify_options.apply_true_args
        else:
            args = verify_options.apply_false_args
        self._invoke(asset_task_info, task_input, list(args), options)

    def _invoke(
        self,
        asset_task_info: AssetTaskInfo,
        task_input: TaskInput,
        args: List[str],
        options: InvocationOptions,
    ) -> None:
        config_yaml = filter_dister_config_yaml(task_input.all_config_yaml, asset_task_info.asset_name)
        run_asset_task(
            asset_task_info.asset_path,
            asset_task_info.task_info.command,
            self.config_flag_name,
            config_yaml,
            task_input.product_task_output_infos,
            args,
            stdout=options.stdout,
            stderr=options.stderr,
            timeout=options.timeout,
            keep_temp_files=options.keep_temp_files,
        )


class DisterTaskProvider(AssetProvidedTask):
    asset_type = AssetType.DISTER
    config_flag_name = "dister-config-yml"
    project_section = "dist"


class PublisherTaskProvider(AssetProvidedTask):
    asset_type = AssetType.PUBLISHER
    config_flag_name = "publisher-config-yml"
    project_section = "publish"


class DockerBuilderTaskProvider(AssetProvidedTask):
    asset_type = AssetType.DOCKER_BUILDER
    config_flag_name = "docker-builder-config-yml"
    project_section = "docker"


_PROVIDERS: Dict[AssetType, AssetProvidedTask] = {
    p.asset_type: p for p in (DisterTaskProvider(), PublisherTaskProvider(), DockerBuilderTaskProvider())
}


def provider_for(asset_type: AssetType) -> AssetProvidedTask:
    return _PROVIDERS[asset_type]


@dataclass(frozen=True)
class TaskCommand:
    """A registered asset-provided task, ready to run."""

    asset_task_info: AssetTaskInfo
    provider: AssetProvidedTask

    @property
    def name(self) -> str:
        return self.asset_task_info.task_info.name

    @property
    def description(self) -> str:
        return self.asset_task_info.task_info.description

    def run(
        self,
        args: Sequence[str],
        *,
        resolve_project: Callable[[], ProjectContext],
        options: Optional[InvocationOptions] = None,
    ) -> None:
        """Resolve the project context and invoke the task.

        Raises:
            ProjectConfigError: The project context could not be resolved.
            AssetTaskFailedError, InvocationHostError
        """
        options = options or InvocationOptions()
        info = self.asset_task_info
        try:
            task_input = self.provider.create_task_input(resolve_project())
        except ProjectConfigError as exc:
            raise ProjectConfigError(
                f"failed to create inputs for task {info.task_info.name} of asset {info.asset_name}: {exc}",
                context={**exc.context, "asset_name": info.asset_name, "asset_type": info.asset_type.value},
            ) from exc
        logger.info("running task %s", info.qualified_name)
        self.provider.run_task(info, task_input, args, options)


__all__ = [
    "InvocationOptions",
    "TaskInput",
    "VerifyTaskInput",
    "global_flag_args",
    "AssetProvidedTask",
    "DisterTaskProvider",
    "PublisherTaskProvider",
    "DockerBuilderTaskProvider",
    "provider_for",
    "TaskCommand",
]
