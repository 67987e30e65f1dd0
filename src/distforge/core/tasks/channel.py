"""Run one asset-provided task as a subprocess.

The structured inputs of a task are never passed on the command line or
through a pipe: each is written as YAML to its own temporary file, and the
file path is passed as a flag value. Any executable that can read a YAML file
can therefore be an asset.

    <asset> <command...> --<config-flag>=<file> --all-product-task-output-info=<file> [args...]
"""
from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import IO, Any, List, Mapping, Optional, Sequence

import yaml

from distforge.core.exceptions import AssetTaskFailedError, AssetTimeoutError, InvocationHostError
from distforge.utils.io import write_yaml_tempfile
from distforge.utils.subprocess import format_command_line, run_passthrough

from .configyaml import AssetConfigYAML, products_config_to_wire

logger = logging.getLogger(__name__)

ALL_PRODUCT_TASK_OUTPUT_INFO_FLAG = "all-product-task-output-info"


def _write_value(value: Any, flag_name: str, argv: List[str]) -> Path:
    try:
        return write_yaml_tempfile(value, prefix=f"{flag_name}-")
    except yaml.YAMLError as exc:
        raise InvocationHostError(
            f"failed to marshal value for --{flag_name} as YAML for command {format_command_line(argv)}: {exc}",
            argv=argv,
        ) from exc
    except OSError as exc:
        raise InvocationHostError(
            f"failed to write temp file for --{flag_name} for command {format_command_line(argv)}: {exc}",
            argv=argv,
        ) from exc


def _remove_temp_files(paths: Sequence[Path]) -> None:
    for path in paths:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("could not remove temp file %s: %s", path, exc)


def run_asset_task(
    asset_path: str,
    command: Sequence[str],
    config_flag_name: str,
    config_yaml: Mapping[str, Mapping[str, AssetConfigYAML]],
    product_task_output_infos: Mapping[str, Any],
    provided_args: Sequence[str] = (),
    *,
    stdout: Optional[IO[Any]] = None,
    stderr: Optional[IO[Any]] = None,
    timeout: Optional[float] = None,
    keep_temp_files: bool = False,
) -> None:
    """Invoke ``command`` on the asset with the given structured inputs.

    stdout/stderr of the asset go straight to the given streams (this
    process's own when None).

    Raises:
        AssetTaskFailedError: The asset ran and exited non-zero. The error has
            no message: the asset is expected to have reported the problem.
        InvocationHostError: The inputs could not be written or the process
            could not be started (AssetTimeoutError if it timed out).
    """
    argv: List[str] = [asset_path, *command]
    temp_files: List[Path] = []
    try:
        config_file = _write_value(products_config_to_wire(config_yaml), config_flag_name, argv)
        temp_files.append(config_file)
        output_info_file = _write_value(dict(product_task_output_infos), ALL_PRODUCT_TASK_OUTPUT_INFO_FLAG, argv)
        temp_files.append(output_info_file)

        argv.append(f"--{config_flag_name}={config_file}")
        argv.append(f"--{ALL_PRODUCT_TASK_OUTPUT_INFO_FLAG}={output_info_file}")
        argv.extend(provided_args)

        logger.debug("running asset task: %s", format_command_line(argv))
        try:
            exit_code = run_passthrough(argv, stdout=stdout, stderr=stderr, timeout=timeout)
        except subprocess.TimeoutExpired as exc:
            raise AssetTimeoutError(
                f"command {format_command_line(argv)} timed out after {exc.timeout}s",
                argv=argv,
                context={"asset_path": asset_path},
            ) from exc
        except OSError as exc:
            raise InvocationHostError(
                f"failed to run command {format_command_line(argv)}: {exc}",
                argv=argv,
                context={"asset_path": asset_path},
            ) from exc

        if exit_code != 0:
            logger.debug("asset task exited %d: %s", exit_code, format_command_line(argv))
            raise AssetTaskFailedError(exit_code, context={"asset_path": asset_path, "argv": argv})
    finally:
        if keep_temp_files:
            for path in temp_files:
                logger.info("kept temp file %s", path)
        else:
            _remove_temp_files(temp_files)


__all__ = ["ALL_PRODUCT_TASK_OUTPUT_INFO_FLAG", "run_asset_task"]
