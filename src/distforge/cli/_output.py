"""CLI output formatting for text and JSON modes."""
from __future__ import annotations

import json
from typing import Any, Iterable, Sequence


class OutputFormatter:
    """Output formatter shared by the built-in commands."""

    def __init__(self, json_mode: bool = False, indent: int = 2):
        self.json_mode = json_mode
        self.indent = indent

    def json_output(self, data: Any) -> None:
        print(json.dumps(data, indent=self.indent, default=str))

    def text(self, message: str) -> None:
        print(message)

    def table(self, headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> None:
        """Print rows as left-aligned columns under ``headers``."""
        materialized = [[str(c) for c in row] for row in rows]
        widths = [len(h) for h in headers]
        for row in materialized:
            for i, cell in enumerate(row):
                widths[i] = max(widths[i], len(cell))
        for row in [list(headers), *materialized]:
            print("  ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)).rstrip())


__all__ = [
    "OutputFormatter",
]
