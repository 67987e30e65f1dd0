"""Per-product asset configuration as exchanged with assets.

``ProductsDisterConfig`` maps product ID -> entry ID (a dist ID, publish ID or
docker image ID) -> ``AssetConfigYAML``. The host builds the full mapping for a
project and hands each asset only the entries it owns.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping

from distforge.utils.io import read_yaml


@dataclass(frozen=True)
class AssetConfigYAML:
    """Raw configuration of one entry together with the name of the asset that owns it."""

    owner_name: str
    config_yaml: bytes = b""

    def to_wire(self) -> Dict[str, Any]:
        # "dister-name" is the owner key for every asset type.
        # Text configs stay readable in the file; anything else is emitted as !!binary.
        try:
            config: Any = self.config_yaml.decode("utf-8")
        except UnicodeDecodeError:
            config = bytes(self.config_yaml)
        return {"dister-name": self.owner_name, "config-yaml": config}

    @classmethod
    def from_wire(cls, data: Mapping[str, Any]) -> "AssetConfigYAML":
        raw = data.get("config-yaml")
        if raw is None:
            config = b""
        elif isinstance(raw, (bytes, bytearray)):
            config = bytes(raw)
        else:
            config = str(raw).encode("utf-8")
        return cls(owner_name=str(data.get("dister-name") or ""), config_yaml=config)


ProductsDisterConfig = Dict[str, Dict[str, AssetConfigYAML]]


def filter_dister_config_yaml(all_config_yaml: Mapping[str, Mapping[str, AssetConfigYAML]], owner_name: str) -> ProductsDisterConfig:
    """Return only the entries whose owner is ``owner_name``.

    Products left with no entries are omitted. The returned mapping has its
    own inner dicts; the config records themselves are shared.
    """
    out: ProductsDisterConfig = {}
    for product_id, entries in all_config_yaml.items():
        kept = {entry_id: cfg for entry_id, cfg in entries.items() if cfg.owner_name == owner_name}
        if not kept:
            continue
        out[product_id] = kept
    return out


def products_config_to_wire(config: Mapping[str, Mapping[str, AssetConfigYAML]]) -> Dict[str, Dict[str, Dict[str, Any]]]:
    return {
        str(product_id): {str(entry_id): cfg.to_wire() for entry_id, cfg in entries.items()}
        for product_id, entries in config.items()
    }


def products_config_from_wire(data: Any) -> ProductsDisterConfig:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"products config must be a mapping, got {type(data).__name__}")
    out: ProductsDisterConfig = {}
    for product_id, entries in data.items():
        if entries is None:
            out[str(product_id)] = {}
            continue
        if not isinstance(entries, Mapping):
            raise ValueError(f"entries for product {product_id} must be a mapping")
        out[str(product_id)] = {str(k): AssetConfigYAML.from_wire(v or {}) for k, v in entries.items()}
    return out


def read_products_config(path: Path | str) -> ProductsDisterConfig:
    """Read a products config file written for a task invocation."""
    return products_config_from_wire(read_yaml(Path(path), default={}, raise_on_error=True))


def read_output_infos(path: Path | str) -> Dict[str, Any]:
    """Read a product task output info file written for a task invocation."""
    data = read_yaml(Path(path), default={}, raise_on_error=True)
    if not isinstance(data, dict):
        raise ValueError(f"product task output infos must be a mapping, got {type(data).__name__}")
    return data


__all__ = [
    "AssetConfigYAML",
    "ProductsDisterConfig",
    "filter_dister_config_yaml",
    "products_config_to_wire",
    "products_config_from_wire",
    "read_products_config",
    "read_output_infos",
]
