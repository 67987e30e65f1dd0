"""Asset roles and the data exchanged during asset discovery."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


class AssetType(str, Enum):
    """The closed set of roles an asset can implement.

    Members order by their wire value, which fixes the order in which asset
    types appear in the command tree and in verify runs.
    """

    DISTER = "dister"
    PUBLISHER = "publisher"
    DOCKER_BUILDER = "docker-builder"

    def __str__(self) -> str:
        return self.value

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, AssetType):
            return NotImplemented
        return self.value < other.value

    @classmethod
    def parse(cls, raw: Any) -> Optional["AssetType"]:
        """Return the member for ``raw`` or None if it is not a known type name."""
        if not isinstance(raw, str):
            return None
        for member in cls:
            if member.value == raw:
                return member
        return None

    @classmethod
    def ordered(cls) -> Tuple["AssetType", ...]:
        return tuple(sorted(cls))


RESERVED_TASK_NAMES = frozenset({t.value for t in AssetType} | {"verify"})


@dataclass(frozen=True)
class VerifyOptions:
    apply_true_args: Tuple[str, ...] = ()
    apply_false_args: Tuple[str, ...] = ()

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "VerifyOptions":
        return cls(
            apply_true_args=tuple(data.get("applyTrueArgs") or ()),
            apply_false_args=tuple(data.get("applyFalseArgs") or ()),
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "applyTrueArgs": list(self.apply_true_args),
            "applyFalseArgs": list(self.apply_false_args),
        }


@dataclass(frozen=True)
class GlobalFlagOptions:
    """Names of flags through which an asset wants host-level values forwarded."""

    debug_flag: str = ""
    project_dir_flag: str = ""

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "GlobalFlagOptions":
        return cls(
            debug_flag=str(data.get("debugFlag") or ""),
            project_dir_flag=str(data.get("projectDirFlag") or ""),
        )

    def to_json(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.debug_flag:
            out["debugFlag"] = self.debug_flag
        if self.project_dir_flag:
            out["projectDirFlag"] = self.project_dir_flag
        return out


@dataclass(frozen=True)
class TaskInfo:
    """A task an asset provides in addition to its core role.

    ``command`` is the argv used to invoke the task on the asset. It is often
    just ``(name,)`` but may differ from the task name.
    """

    name: str
    description: str = ""
    command: Tuple[str, ...] = ()
    register_as_top_level: bool = False
    verify_options: Optional[VerifyOptions] = None
    global_flag_options: Optional[GlobalFlagOptions] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "TaskInfo":
        verify = data.get("verifyOptions")
        flags = data.get("globalFlagOptions")
        return cls(
            name=str(data["name"]),
            description=str(data.get("description") or ""),
            command=tuple(data.get("command") or ()),
            register_as_top_level=bool(data.get("registerAsTopLevelDistgoTaskCommand", False)),
            verify_options=VerifyOptions.from_json(verify) if verify is not None else None,
            global_flag_options=GlobalFlagOptions.from_json(flags) if flags is not None else None,
        )

    def to_json(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "command": list(self.command),
            "registerAsTopLevelDistgoTaskCommand": self.register_as_top_level,
        }
        if self.verify_options is not None:
            out["verifyOptions"] = self.verify_options.to_json()
        if self.global_flag_options is not None:
            out["globalFlagOptions"] = self.global_flag_options.to_json()
        return out


@dataclass(frozen=True)
class TaskInfos:
    """The catalog of tasks an asset provides.

    ``asset_name`` must be unique among assets of the same type: it is part of
    the fully-qualified command path.
    """

    asset_name: str
    task_infos: Mapping[str, TaskInfo] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "TaskInfos":
        raw_tasks = data.get("task-infos") or {}
        return cls(
            asset_name=str(data["asset-name"]),
            task_infos={str(k): TaskInfo.from_json(v) for k, v in raw_tasks.items()},
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "asset-name": self.asset_name,
            "task-infos": {k: v.to_json() for k, v in self.task_infos.items()},
        }

    def sorted_task_infos(self) -> list[TaskInfo]:
        """Tasks ordered by their declared name, which is also their command name."""
        return sorted(self.task_infos.values(), key=lambda t: t.name)

    def sorted_task_names(self) -> list[str]:
        return [t.name for t in self.sorted_task_infos()]


@dataclass(frozen=True)
class Asset:
    path: str
    asset_type: AssetType
    task_infos: Optional[TaskInfos] = None


@dataclass(frozen=True)
class AssetTaskInfo:
    """A single task of an asset, together with the asset it belongs to."""

    asset_path: str
    asset_type: AssetType
    asset_name: str
    task_info: TaskInfo

    @property
    def qualified_name(self) -> str:
        return f"{self.asset_type.value}.{self.asset_name}.{self.task_info.name}"


__all__ = [
    "AssetType",
    "RESERVED_TASK_NAMES",
    "VerifyOptions",
    "GlobalFlagOptions",
    "TaskInfo",
    "TaskInfos",
    "Asset",
    "AssetTaskInfo",
]
