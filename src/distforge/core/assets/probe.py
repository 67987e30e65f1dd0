"""Discovery queries: ask an asset executable what it is and what it provides.

Two fixed arguments form the discovery protocol:

``<asset> asset-type``
    Must exit 0 and print a JSON string naming one of the asset types.
    Combined stdout/stderr is read.

``<asset> task-infos``
    Optional. Exit 0 with the task catalog JSON on stdout, or exit non-zero to
    say "no extra tasks". Only stdout is read so diagnostics on stderr cannot
    corrupt the payload.
"""
from __future__ import annotations

import json
import logging
import subprocess
from typing import Optional

from distforge.core.exceptions import (
    AssetTypeInvalidError,
    AssetUnavailableError,
    CatalogMalformedError,
)
from distforge.core.schemas import validation_errors
from distforge.utils.subprocess import format_command_line, run_capture

from .types import AssetType, TaskInfos

logger = logging.getLogger(__name__)

ASSET_TYPE_COMMAND = "asset-type"
TASK_INFOS_COMMAND = "task-infos"


def _decode(output: bytes | None) -> str:
    return (output or b"").decode("utf-8", errors="replace")


def get_asset_type(asset_path: str, *, timeout: Optional[float] = None) -> AssetType:
    """Return the type reported by the asset at ``asset_path``.

    Raises:
        AssetUnavailableError: If the asset cannot be started or times out.
        AssetTypeInvalidError: If it exits non-zero or reports an unusable type.
    """
    argv = [asset_path, ASSET_TYPE_COMMAND]
    try:
        result = run_capture(argv, timeout=timeout, merge_stderr=True)
    except OSError as exc:
        raise AssetUnavailableError(
            f"failed to run command {format_command_line(argv)}: {exc}",
            asset_path=asset_path,
        ) from exc
    except subprocess.TimeoutExpired as exc:
        raise AssetUnavailableError(
            f"command {format_command_line(argv)} timed out after {exc.timeout}s",
            asset_path=asset_path,
        ) from exc

    output = _decode(result.stdout)
    if result.returncode != 0:
        raise AssetTypeInvalidError(
            f"failed to run command {format_command_line(argv)}: exit code {result.returncode}, output: {output}",
            asset_path=asset_path,
            context={"exit_code": result.returncode},
        )

    try:
        raw = json.loads(output)
    except json.JSONDecodeError as exc:
        raise AssetTypeInvalidError(
            f"failed to unmarshal JSON {output!r}: {exc}",
            asset_path=asset_path,
        ) from exc

    asset_type = AssetType.parse(raw)
    if asset_type is None:
        raise AssetTypeInvalidError(f"unrecognized asset type: {raw}", asset_path=asset_path)

    logger.debug("asset %s reports type %s", asset_path, asset_type.value)
    return asset_type


def get_task_infos(asset_path: str, *, timeout: Optional[float] = None) -> Optional[TaskInfos]:
    """Return the task catalog of the asset, or None if it provides none.

    Providing tasks is optional: an asset that cannot be run for this query,
    or that exits non-zero, is treated as not providing tasks. That inference
    rests on the exit code alone.

    Raises:
        CatalogMalformedError: If the query exits 0 but stdout is not a valid
            task catalog.
    """
    argv = [asset_path, TASK_INFOS_COMMAND]
    try:
        result = run_capture(argv, timeout=timeout)
    except OSError as exc:
        logger.debug("asset %s: %s failed to start (%s); no asset-provided tasks", asset_path, TASK_INFOS_COMMAND, exc)
        return None
    except subprocess.TimeoutExpired:
        logger.warning("asset %s: %s timed out; treating as no asset-provided tasks", asset_path, TASK_INFOS_COMMAND)
        return None

    if result.returncode != 0:
        logger.debug(
            "asset %s: %s exited %d; no asset-provided tasks",
            asset_path,
            TASK_INFOS_COMMAND,
            result.returncode,
        )
        return None

    output = _decode(result.stdout)
    try:
        payload = json.loads(output)
    except json.JSONDecodeError as exc:
        raise CatalogMalformedError(
            f"failed to unmarshal output {output!r} as JSON task infos: {exc}",
            asset_path=asset_path,
        ) from exc

    errors = validation_errors(payload, "task-infos")
    if errors:
        raise CatalogMalformedError(
            f"task infos output {output!r} is invalid: " + "; ".join(errors),
            asset_path=asset_path,
        )

    task_infos = TaskInfos.from_json(payload)
    logger.debug(
        "asset %s provides %d task(s) as %r",
        asset_path,
        len(task_infos.task_infos),
        task_infos.asset_name,
    )
    return task_infos


__all__ = [
    "ASSET_TYPE_COMMAND",
    "TASK_INFOS_COMMAND",
    "get_asset_type",
    "get_task_infos",
]
