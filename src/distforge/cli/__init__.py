"""
distforge CLI package.

Built-in commands are discovered from subfolders (asset/, task/); commands
provided by assets are added under ``task`` once assets are loaded.

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _utils: Shared CLI utilities
"""
from ._output import OutputFormatter
from ._args import add_apply_flag, add_global_flags, add_json_flag
from ._utils import get_app

__all__ = [
    # Output formatting
    "OutputFormatter",
    # Argument helpers
    "add_json_flag",
    "add_global_flags",
    "add_apply_flag",
    # Utilities
    "get_app",
]
