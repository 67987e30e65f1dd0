"""
distforge configuration management (layered YAML + environment overrides).
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from distforge.data import read_yaml as read_bundled_yaml
from distforge.utils.io import iter_yaml_files, read_yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "DISTFORGE_"
PROJECT_CONFIG_DIR = ".distforge"


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge dictionaries without mutating inputs.

    Example:
        >>> deep_merge({"a": 1, "b": {"c": 2}}, {"b": {"d": 3}})
        {'a': 1, 'b': {'c': 2, 'd': 3}}
    """
    result: Dict[str, Any] = dict(base)
    for key, value in (override or {}).items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class ConfigManager:
    """Load and merge distforge configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: DISTFORGE_<section>__<key>
    2. Project config: <project-dir>/.distforge/config/*.yaml (alphabetical order)
    3. Bundled defaults: distforge.data/config/defaults.yaml
    """

    def __init__(self, project_dir: Optional[Path] = None) -> None:
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self.project_config_dir = self.project_dir / PROJECT_CONFIG_DIR / "config"

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        if value.strip().lower() in {"null", "none"}:
            return None
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        return value.strip()

    def _parse_env_key(self, raw: str) -> List[str]:
        segs = raw.split("__")
        if any(seg == "" for seg in segs):
            raise ValueError(f"Malformed {ENV_PREFIX}* key: empty segment in '{raw}'.")
        return [seg.lower() for seg in segs]

    def _iter_env_overrides(self):
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX):
                continue
            raw = key[len(ENV_PREFIX):]
            if not raw:
                continue
            yield self._parse_env_key(raw), self._coerce_type(os.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[Union[str, int]], value: Any) -> None:
        cur: Dict[str, Any] = root
        for part in path[:-1]:
            nxt = cur.get(part)
            if not isinstance(nxt, dict):
                nxt = {}
                cur[part] = nxt
            cur = nxt
        cur[path[-1]] = value

    def apply_env_overrides(self, cfg: Dict[str, Any]) -> None:
        for path, typed_value in self._iter_env_overrides():
            logger.debug("config override from environment: %s", ".".join(str(p) for p in path))
            self._set_nested(cfg, path, typed_value)

    def load_config(self) -> Dict[str, Any]:
        """Return the merged configuration dictionary.

        Raises:
            ValueError: If a project config file is not a YAML mapping, or an
                environment override key is malformed.
        """
        cfg: Dict[str, Any] = deep_merge({}, read_bundled_yaml("config", "defaults.yaml"))

        for path in iter_yaml_files(self.project_config_dir):
            data = read_yaml(path, default={}, raise_on_error=True)
            if not isinstance(data, dict):
                raise ValueError(f"Configuration file must contain a YAML mapping: {path}")
            logger.debug("loaded project config %s", path)
            cfg = deep_merge(cfg, data)

        self.apply_env_overrides(cfg)
        return cfg


__all__ = ["ConfigManager", "deep_merge", "ENV_PREFIX", "PROJECT_CONFIG_DIR"]
