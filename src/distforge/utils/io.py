"""YAML I/O utilities used for configuration and for the asset task wire format."""
from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any

import yaml


def read_yaml(path: Path, default: Any = None, raise_on_error: bool = False) -> Any:
    """Read YAML with error handling.

    Returns default if file is missing or invalid, unless raise_on_error is True.

    Args:
        path: YAML file path to read
        default: Value to return if file missing or invalid (default: None)
        raise_on_error: If True, propagate exceptions instead of returning default.

    Returns:
        Any: Parsed YAML data, or default if error
    """
    path = Path(path)
    if not path.exists():
        if raise_on_error:
            raise FileNotFoundError(f"File not found: {path}")
        return default

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if data is not None else default
    except (OSError, yaml.YAMLError):
        if raise_on_error:
            raise
        return default


def dump_yaml_string(data: Any, sort_keys: bool = True) -> str:
    """Dump data to a YAML string.

    Keys are sorted by default so the same value always produces the same
    text.
    """
    return yaml.safe_dump(
        data,
        default_flow_style=False,
        sort_keys=sort_keys,
        allow_unicode=True,
    )


def iter_yaml_files(dir_path: Path) -> list[Path]:
    """Return YAML files in ``dir_path`` in deterministic order.

    Includes both ``*.yml`` and ``*.yaml``. When both ``<name>.yaml`` and
    ``<name>.yml`` exist, only the ``.yaml`` path is returned.
    """
    d = Path(dir_path)
    if not d.exists():
        return []
    yml_files = {p.stem: p for p in d.glob("*.yml")}
    yaml_files = {p.stem: p for p in d.glob("*.yaml")}

    out: list[Path] = []
    for stem in sorted(set(yml_files.keys()) | set(yaml_files.keys())):
        preferred = yaml_files.get(stem) or yml_files.get(stem)
        if preferred is not None:
            out.append(preferred)
    return out


def write_yaml_tempfile(data: Any, *, prefix: str = "distforge-", directory: str | None = None) -> Path:
    """Serialize ``data`` as YAML into a fresh temporary file and return its path.

    The YAML text is produced before the file is created so that a value that
    cannot be serialized never leaves an empty file behind. The caller owns
    the returned file and is responsible for removing it.

    Raises:
        yaml.YAMLError: If ``data`` cannot be represented as YAML.
        OSError: If the temporary file cannot be created or written.
    """
    content = dump_yaml_string(data)
    fd, name = tempfile.mkstemp(prefix=prefix, suffix=".yml", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
    except OSError:
        Path(name).unlink(missing_ok=True)
        raise
    return Path(name)


__all__ = [
    "read_yaml",
    "dump_yaml_string",
    "iter_yaml_files",
    "write_yaml_tempfile",
]
