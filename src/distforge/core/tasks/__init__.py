"""Asset-provided tasks: command tree, invocation and verify runs."""
from __future__ import annotations

from .channel import ALL_PRODUCT_TASK_OUTPUT_INFO_FLAG, run_asset_task
from .configyaml import AssetConfigYAML, ProductsDisterConfig, filter_dister_config_yaml
from .providers import (
    AssetProvidedTask,
    DisterTaskProvider,
    DockerBuilderTaskProvider,
    InvocationOptions,
    PublisherTaskProvider,
    TaskCommand,
    TaskInput,
    provider_for,
)
from .tree import TaskTree, attach_task_tree, build_task_tree
from .verify import run_verify_tasks

__all__ = [
    "ALL_PRODUCT_TASK_OUTPUT_INFO_FLAG",
    "run_asset_task",
    "AssetConfigYAML",
    "ProductsDisterConfig",
    "filter_dister_config_yaml",
    "AssetProvidedTask",
    "DisterTaskProvider",
    "PublisherTaskProvider",
    "DockerBuilderTaskProvider",
    "InvocationOptions",
    "TaskCommand",
    "TaskInput",
    "provider_for",
    "TaskTree",
    "build_task_tree",
    "attach_task_tree",
    "run_verify_tasks",
]
