"""Section accessors for the merged distforge configuration."""
from __future__ import annotations

from functools import cached_property
from typing import List, Optional

from .base import BaseDomainConfig


def _optional_seconds(value: object, key: str) -> Optional[float]:
    if value is None:
        return None
    seconds = float(value)  # type: ignore[arg-type]
    if seconds <= 0:
        raise ValueError(f"timeouts.{key} must be positive or null, got {value!r}")
    return seconds


class AssetsConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "assets"

    @cached_property
    def paths(self) -> List[str]:
        raw = self.section.get("paths") or []
        if isinstance(raw, str):
            raw = [p for p in raw.split(",") if p]
        return [str(p) for p in raw]


class TimeoutsConfig(BaseDomainConfig):
    """Timeouts for asset subprocesses. ``None`` means wait indefinitely."""

    def _config_section(self) -> str:
        return "timeouts"

    @cached_property
    def probe_seconds(self) -> Optional[float]:
        return _optional_seconds(self.section.get("probe_seconds"), "probe_seconds")

    @cached_property
    def task_seconds(self) -> Optional[float]:
        return _optional_seconds(self.section.get("task_seconds"), "task_seconds")


class TempFilesConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "tempfiles"

    @cached_property
    def keep(self) -> bool:
        return bool(self.section.get("keep", False))


class LoggingConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "logging"

    @cached_property
    def level(self) -> str:
        return str(self.section.get("level") or "INFO").upper()

    @cached_property
    def file(self) -> Optional[str]:
        raw = self.section.get("file")
        return str(raw) if raw else None


class ProjectConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "project"

    @cached_property
    def config_file(self) -> str:
        return str(self.section.get("config_file") or "dist.yml")

    @cached_property
    def version(self) -> Optional[str]:
        raw = self.section.get("version")
        return str(raw) if raw is not None else None


__all__ = [
    "AssetsConfig",
    "TimeoutsConfig",
    "TempFilesConfig",
    "LoggingConfig",
    "ProjectConfig",
]
