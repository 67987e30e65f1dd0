"""The catalog of loaded assets.

``load_assets`` probes every asset once, in the order given, and returns an
immutable ``Assets`` value. Nothing re-probes an asset afterwards.
"""
from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .probe import get_asset_type, get_task_infos
from .types import Asset, AssetTaskInfo, AssetType

logger = logging.getLogger(__name__)


class Assets:
    """Loaded assets grouped by type, in discovery order within each type."""

    def __init__(self, by_type: Optional[Mapping[AssetType, Iterable[Asset]]] = None) -> None:
        frozen: Dict[AssetType, Tuple[Asset, ...]] = {}
        for asset_type, assets in (by_type or {}).items():
            items = tuple(assets)
            if items:
                frozen[asset_type] = items
        self._assets: Mapping[AssetType, Tuple[Asset, ...]] = MappingProxyType(frozen)

    def __len__(self) -> int:
        return sum(len(v) for v in self._assets.values())

    def __repr__(self) -> str:
        counts = ", ".join(f"{t.value}={len(self._assets[t])}" for t in sorted(self._assets))
        return f"Assets({counts})"

    def assets_for_type(self, asset_type: AssetType) -> Tuple[Asset, ...]:
        return self._assets.get(asset_type, ())

    def paths_for_type(self, asset_type: AssetType) -> List[str]:
        """Return the paths of assets of ``asset_type`` in discovery order."""
        return [a.path for a in self.assets_for_type(asset_type)]

    def all_assets(self) -> List[Asset]:
        """Return every asset ordered by asset type, then discovery order."""
        out: List[Asset] = []
        for asset_type in sorted(self._assets):
            out.extend(self._assets[asset_type])
        return out

    def assets_with_task_infos(self) -> List[Asset]:
        """Return the assets that provide a task catalog.

        Ordered by the natural ordering of AssetType and, within a type, by
        discovery order, so the command tree built from it is reproducible.
        """
        return [a for a in self.all_assets() if a.task_infos is not None]

    def verify_task_infos(self) -> List[AssetTaskInfo]:
        """Return every task that declares verify options.

        Follows ``assets_with_task_infos`` order; within one asset tasks are
        sorted by name.
        """
        out: List[AssetTaskInfo] = []
        for asset in self.assets_with_task_infos():
            task_infos = asset.task_infos
            if task_infos is None:
                continue
            for task_info in task_infos.sorted_task_infos():
                if task_info.verify_options is None:
                    continue
                out.append(
                    AssetTaskInfo(
                        asset_path=asset.path,
                        asset_type=asset.asset_type,
                        asset_name=task_infos.asset_name,
                        task_info=task_info,
                    )
                )
        return out


def load_assets(asset_paths: Iterable[str], *, timeout: Optional[float] = None) -> Assets:
    """Probe each asset in order and return the loaded catalog.

    Any asset whose type cannot be determined, or whose task catalog is
    malformed, aborts the load: no partial catalog is returned. Assets that
    do not provide a task catalog are kept with ``task_infos=None``.

    Raises:
        AssetUnavailableError, AssetTypeInvalidError, CatalogMalformedError
    """
    by_type: Dict[AssetType, List[Asset]] = {}
    for asset_path in asset_paths:
        asset_type = get_asset_type(asset_path, timeout=timeout)
        task_infos = get_task_infos(asset_path, timeout=timeout)
        by_type.setdefault(asset_type, []).append(
            Asset(path=asset_path, asset_type=asset_type, task_infos=task_infos)
        )
        logger.info(
            "loaded %s asset %s%s",
            asset_type.value,
            asset_path,
            f" ({task_infos.asset_name})" if task_infos is not None else "",
        )
    return Assets(by_type)


__all__ = ["Assets", "load_assets"]
