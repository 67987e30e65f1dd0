"""Shared CLI utilities."""
from __future__ import annotations

import argparse

from distforge.core.app import AppContext

APP_ATTR = "_app"


def get_app(args: argparse.Namespace) -> AppContext:
    """Return the AppContext the dispatcher attached to ``args``."""
    app = getattr(args, APP_ATTR, None)
    if app is None:
        raise RuntimeError("command invoked without an application context")
    return app


__all__ = ["APP_ATTR", "get_app"]
