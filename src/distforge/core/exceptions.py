from __future__ import annotations

from typing import Any, Dict, Mapping


class DistforgeError(Exception):
    """Base exception for distforge."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            self.context = dict(context)
        else:
            self.context = {}


class AssetLoadError(DistforgeError):
    """Raised when the asset set cannot be loaded. Aborts the whole load."""

    def __init__(
        self,
        message: str,
        *,
        asset_path: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if asset_path:
            ctx["asset_path"] = asset_path
        super().__init__(message, context=ctx)


class AssetUnavailableError(AssetLoadError):
    """Raised when an asset executable cannot be started."""


class AssetTypeInvalidError(AssetLoadError):
    """Raised when an asset reports a missing, malformed or unknown asset type."""


class CatalogMalformedError(AssetLoadError):
    """Raised when an asset answers the task-infos query with an unusable body."""


class ProjectConfigError(DistforgeError):
    """Raised when the project configuration cannot be turned into task inputs."""


class CommandRegistrationError(DistforgeError):
    """Raised when an asset-provided task cannot be turned into a command."""

    def __init__(
        self,
        message: str,
        *,
        asset_path: str | None = None,
        asset_type: str | None = None,
        asset_name: str | None = None,
        task_name: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        for key, val in (
            ("asset_path", asset_path),
            ("asset_type", asset_type),
            ("asset_name", asset_name),
            ("task_name", task_name),
        ):
            if val:
                ctx[key] = val
        super().__init__(message, context=ctx)


class InvocationHostError(DistforgeError):
    """Raised when the host could not run an asset task (not the asset's fault)."""

    def __init__(
        self,
        message: str,
        *,
        argv: list[str] | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if argv is not None:
            ctx["argv"] = list(argv)
        super().__init__(message, context=ctx)


class AssetTimeoutError(InvocationHostError):
    """Raised when an asset process exceeds its configured timeout."""


class AssetTaskFailedError(DistforgeError):
    """Sentinel for an asset that ran and exited non-zero.

    Carries no message: the asset is expected to have explained the failure on
    the shared stderr stream already, so callers must not print anything.
    """

    def __init__(self, exit_code: int, *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__("", context=context)
        self.exit_code = exit_code


class VerifyFailedError(DistforgeError):
    """Sentinel for a verify run in which at least one task failed."""

    def __init__(self, failed: int = 0) -> None:
        super().__init__("", context={"failed": failed})
        self.failed = failed


def is_silent(error: BaseException) -> bool:
    """Return True when ``error`` must not be echoed to the user."""
    return isinstance(error, (AssetTaskFailedError, VerifyFailedError)) or not str(error)


__all__ = [
    "DistforgeError",
    "AssetLoadError",
    "AssetUnavailableError",
    "AssetTypeInvalidError",
    "CatalogMalformedError",
    "ProjectConfigError",
    "CommandRegistrationError",
    "InvocationHostError",
    "AssetTimeoutError",
    "AssetTaskFailedError",
    "VerifyFailedError",
    "is_silent",
]
