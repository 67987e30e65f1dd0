from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

_INSTALLED_HANDLERS: list[logging.Handler] = []

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(*, level: str = "INFO", log_path: Optional[Path] = None, debug: bool = False) -> None:
    """Configure the ``distforge`` logger hierarchy.

    Assets share stderr with the host, so host logging never goes to stderr
    unless ``debug`` is set. A log file receives records at ``level``; debug
    mode adds a stderr handler at DEBUG. With neither, a NullHandler keeps
    the stdlib lastResort handler from printing warnings.

    Calling this again replaces the handlers installed by a previous call.
    """
    logger = logging.getLogger("distforge")
    _remove_installed(logger)

    file_level = _level_from_name(level)
    logger.setLevel(logging.DEBUG if debug else file_level)
    logger.propagate = False

    if log_path is not None:
        path = Path(log_path).expanduser().resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(path, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FORMAT))
        _install(logger, fh)

    if debug:
        sh = logging.StreamHandler(sys.stderr)
        sh.setLevel(logging.DEBUG)
        sh.setFormatter(logging.Formatter("[distforge] %(levelname)s %(name)s: %(message)s"))
        _install(logger, sh)

    if not _INSTALLED_HANDLERS:
        _install(logger, logging.NullHandler())


def _install(logger: logging.Logger, handler: logging.Handler) -> None:
    logger.addHandler(handler)
    _INSTALLED_HANDLERS.append(handler)


def _remove_installed(logger: logging.Logger) -> None:
    while _INSTALLED_HANDLERS:
        h = _INSTALLED_HANDLERS.pop()
        logger.removeHandler(h)
        h.close()


def reset_logging_for_tests() -> None:
    """Test-only: remove handlers installed by configure_logging."""
    logger = logging.getLogger("distforge")
    _remove_installed(logger)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


__all__ = ["configure_logging", "reset_logging_for_tests"]
