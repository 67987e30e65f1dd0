"""Base class for section-specific configuration accessors."""
from __future__ import annotations

from abc import ABC, abstractmethod
from functools import cached_property
from typing import Any, Dict


class BaseDomainConfig(ABC):
    """Typed, cached access to one top-level section of the merged config.

    Usage:
        class MyConfig(BaseDomainConfig):
            def _config_section(self) -> str:
                return "mySection"

            @cached_property
            def my_setting(self) -> str:
                return self.section.get("mySetting", "default")
    """

    def __init__(self, config: Dict[str, Any]) -> None:
        self._config = config

    @abstractmethod
    def _config_section(self) -> str:
        """Return the top-level config key for this domain."""
        ...

    @cached_property
    def section(self) -> Dict[str, Any]:
        """The config section dict, or an empty dict if it is missing."""
        section = self._config.get(self._config_section(), {}) or {}
        if not isinstance(section, dict):
            raise ValueError(f"configuration section '{self._config_section()}' must be a mapping")
        return section


__all__ = ["BaseDomainConfig"]
