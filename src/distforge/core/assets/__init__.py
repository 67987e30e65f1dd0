"""Asset discovery: types, probing and the loaded asset catalog."""
from .types import (
    RESERVED_TASK_NAMES,
    Asset,
    AssetTaskInfo,
    AssetType,
    GlobalFlagOptions,
    TaskInfo,
    TaskInfos,
    VerifyOptions,
)
from .probe import ASSET_TYPE_COMMAND, TASK_INFOS_COMMAND, get_asset_type, get_task_infos
from .registry import Assets, load_assets

__all__ = [
    "RESERVED_TASK_NAMES",
    "Asset",
    "AssetTaskInfo",
    "AssetType",
    "GlobalFlagOptions",
    "TaskInfo",
    "TaskInfos",
    "VerifyOptions",
    "ASSET_TYPE_COMMAND",
    "TASK_INFOS_COMMAND",
    "get_asset_type",
    "get_task_infos",
    "Assets",
    "load_assets",
]
