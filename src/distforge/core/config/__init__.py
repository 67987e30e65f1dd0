"""Configuration loading and typed settings."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .domains import AssetsConfig, LoggingConfig, ProjectConfig, TempFilesConfig, TimeoutsConfig
from .manager import ConfigManager, deep_merge


@dataclass(frozen=True)
class Settings:
    """All configuration sections for one process, loaded once at startup."""

    raw: Dict[str, Any]
    assets: AssetsConfig
    timeouts: TimeoutsConfig
    tempfiles: TempFilesConfig
    logging: LoggingConfig
    project: ProjectConfig

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Settings":
        return cls(
            raw=raw,
            assets=AssetsConfig(raw),
            timeouts=TimeoutsConfig(raw),
            tempfiles=TempFilesConfig(raw),
            logging=LoggingConfig(raw),
            project=ProjectConfig(raw),
        )

    def validate(self) -> None:
        """Read every typed value once so malformed configuration fails at startup.

        Raises:
            ValueError: A section or value has the wrong shape.
        """
        _ = (
            self.assets.paths,
            self.timeouts.probe_seconds,
            self.timeouts.task_seconds,
            self.tempfiles.keep,
            self.logging.level,
            self.logging.file,
            self.project.config_file,
            self.project.version,
        )


def load_settings(project_dir: Optional[Path] = None) -> Settings:
    return Settings.from_dict(ConfigManager(project_dir).load_config())


__all__ = [
    "ConfigManager",
    "Settings",
    "deep_merge",
    "load_settings",
]
