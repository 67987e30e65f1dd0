"""Run every asset-provided verify task and report one outcome."""
from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Callable, Dict, Optional, Sequence

from distforge.core.assets.types import AssetTaskInfo, AssetType
from distforge.core.exceptions import DistforgeError, VerifyFailedError

from .providers import InvocationOptions, VerifyTaskInput, provider_for

if TYPE_CHECKING:
    from distforge.core.project import ProjectContext

logger = logging.getLogger(__name__)


def run_verify_tasks(
    verify_task_infos: Sequence[AssetTaskInfo],
    *,
    apply_mode: bool,
    resolve_project: Callable[[], ProjectContext],
    options: Optional[InvocationOptions] = None,
) -> None:
    """Run all verify tasks in order, continuing past failures.

    With no tasks, returns without resolving the project. Otherwise the
    project is resolved once and the input of each asset type is built once.
    Failing to build an input stops the run. A failing task has its error
    printed to stderr (nothing, for an asset that exited non-zero: it has
    reported the problem itself) and the run moves on to the next task.

    Raises:
        VerifyFailedError: At least one task failed. Carries no message.
        DistforgeError: The project or a verify input could not be created.
    """
    if not verify_task_infos:
        return

    options = options or InvocationOptions()
    project = resolve_project()
    task_inputs: Dict[AssetType, VerifyTaskInput] = {}
    failed = 0

    for info in verify_task_infos:
        provider = provider_for(info.asset_type)
        task_input = task_inputs.get(info.asset_type)
        if task_input is None:
            try:
                task_input = provider.create_verify_input(project)
            except DistforgeError as exc:
                raise DistforgeError(
                    f"failed to create verify task for asset {info.asset_name} of type {info.asset_type}: {exc}",
                    context={**exc.context, "asset_name": info.asset_name, "asset_type": info.asset_type.value},
                ) from exc
            task_inputs[info.asset_type] = task_input

        logger.info("running verify task %s (apply=%s)", info.qualified_name, apply_mode)
        try:
            provider.run_verify_task(info, task_input, apply_mode, options)
        except DistforgeError as exc:
            failed += 1
            logger.info("verify task %s failed", info.qualified_name)
            message = str(exc)
            if message:
                print(message, file=options.stderr or sys.stderr)

    if failed:
        raise VerifyFailedError(failed)


__all__ = ["run_verify_tasks"]
