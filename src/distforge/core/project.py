"""Project context shared by asset-provided tasks.

The project file (``dist.yml`` by default) lists products and, per product,
the entries handled by each asset type::

    version: 1.2.0
    products:
      server:
        dependencies: [client]
        dist:
          os-arch-bin:
            type: os-arch-bin
            config:
              os-archs: [{os: linux, arch: amd64}]
        publish:
          artifactory:
            type: artifactory
        docker:
          server-image:
            type: default
            config: {}

Each entry's ``type`` names the asset that owns it; its ``config`` is passed to
that asset as raw YAML without interpretation.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from distforge.core.exceptions import ProjectConfigError
from distforge.utils.io import dump_yaml_string, read_yaml

from .tasks.configyaml import AssetConfigYAML, ProductsDisterConfig

logger = logging.getLogger(__name__)

SECTIONS = ("dist", "publish", "docker")
UNSPECIFIED_VERSION = "unspecified"


@dataclass(frozen=True)
class ProductEntry:
    entry_id: str
    owner_name: str
    config_yaml: bytes = b""


@dataclass(frozen=True)
class ProductParam:
    product_id: str
    name: str
    dependencies: Tuple[str, ...] = ()
    entries: Mapping[str, Tuple[ProductEntry, ...]] = field(default_factory=dict)

    def entries_for(self, section: str) -> Tuple[ProductEntry, ...]:
        return tuple(self.entries.get(section, ()))


@dataclass(frozen=True)
class ProductTaskOutputInfo:
    """Where a product's build and dist outputs live, for one task invocation.

    Assets receive this as an opaque YAML mapping; the host never reads it back.
    """

    project: Mapping[str, Any]
    product: Mapping[str, Any]
    deps: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)

    def to_json(self) -> Dict[str, Any]:
        return {
            "project": dict(self.project),
            "product": dict(self.product),
            "deps": {k: dict(v) for k, v in self.deps.items()},
        }


@dataclass(frozen=True)
class ProjectContext:
    project_dir: Path
    version: str = UNSPECIFIED_VERSION
    products: Mapping[str, ProductParam] = field(default_factory=dict)

    def products_config_yaml(self, section: str) -> ProductsDisterConfig:
        """Return product ID -> entry ID -> config for every entry in ``section``.

        Products without entries in the section are omitted.
        """
        out: ProductsDisterConfig = {}
        for product_id in sorted(self.products):
            entries = self.products[product_id].entries_for(section)
            if not entries:
                continue
            out[product_id] = {
                e.entry_id: AssetConfigYAML(owner_name=e.owner_name, config_yaml=e.config_yaml) for e in entries
            }
        return out

    def _product_output_info(self, product: ProductParam) -> Dict[str, Any]:
        out_dir = self.project_dir / "out"
        return {
            "id": product.product_id,
            "name": product.name,
            "version": self.version,
            "build-output-dir": str(out_dir / "build" / product.product_id / self.version),
            "dist-output-dir": str(out_dir / "dist" / product.product_id / self.version),
            "dist-ids": sorted(e.entry_id for e in product.entries_for("dist")),
            "docker-ids": sorted(e.entry_id for e in product.entries_for("docker")),
            "publish-ids": sorted(e.entry_id for e in product.entries_for("publish")),
        }

    def _all_dependencies(self, product_id: str) -> List[str]:
        seen: Dict[str, None] = {}
        stack: List[Tuple[str, Tuple[str, ...]]] = [(product_id, (product_id,))]
        while stack:
            current, chain = stack.pop()
            for dep in self.products[current].dependencies:
                if dep in chain:
                    raise ProjectConfigError(
                        f"dependency cycle for product {product_id}: {' -> '.join(chain + (dep,))}",
                        context={"product_id": product_id},
                    )
                if dep not in self.products:
                    raise ProjectConfigError(
                        f"product {current} depends on unknown product {dep}",
                        context={"product_id": current, "dependency": dep},
                    )
                if dep not in seen:
                    seen[dep] = None
                stack.append((dep, chain + (dep,)))
        return sorted(seen)

    def product_task_output_infos(self) -> Dict[str, ProductTaskOutputInfo]:
        """Return the ProductTaskOutputInfo of every product.

        Raises:
            ProjectConfigError: On unknown or cyclic dependencies.
        """
        project_info = {"project-dir": str(self.project_dir), "version": self.version}
        out: Dict[str, ProductTaskOutputInfo] = {}
        for product_id in sorted(self.products):
            product = self.products[product_id]
            deps = {dep: self._product_output_info(self.products[dep]) for dep in self._all_dependencies(product_id)}
            out[product_id] = ProductTaskOutputInfo(
                project=project_info,
                product=self._product_output_info(product),
                deps=deps,
            )
        return out


def _entry_config_bytes(raw: Any, where: str) -> bytes:
    if raw is None:
        return b""
    if isinstance(raw, str):
        return raw.encode("utf-8")
    try:
        return dump_yaml_string(raw).encode("utf-8")
    except yaml.YAMLError as exc:
        raise ProjectConfigError(f"failed to marshal config for {where}: {exc}") from exc


def _parse_product(product_id: str, raw: Any) -> ProductParam:
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ProjectConfigError(f"product {product_id} must be a mapping", context={"product_id": product_id})

    entries: Dict[str, Tuple[ProductEntry, ...]] = {}
    for section in SECTIONS:
        section_raw = raw.get(section) or {}
        if not isinstance(section_raw, dict):
            raise ProjectConfigError(f"products.{product_id}.{section} must be a mapping")
        parsed: List[ProductEntry] = []
        for entry_id in sorted(section_raw):
            entry = section_raw[entry_id] or {}
            where = f"products.{product_id}.{section}.{entry_id}"
            if not isinstance(entry, dict) or not entry.get("type"):
                raise ProjectConfigError(f"{where} must be a mapping with a 'type'")
            parsed.append(
                ProductEntry(
                    entry_id=str(entry_id),
                    owner_name=str(entry["type"]),
                    config_yaml=_entry_config_bytes(entry.get("config"), where),
                )
            )
        if parsed:
            entries[section] = tuple(parsed)

    deps = raw.get("dependencies") or []
    if not isinstance(deps, list):
        raise ProjectConfigError(f"products.{product_id}.dependencies must be a list")

    return ProductParam(
        product_id=product_id,
        name=str(raw.get("name") or product_id),
        dependencies=tuple(str(d) for d in deps),
        entries=entries,
    )


def load_project(project_dir: Path, config_file: Optional[Path | str] = None, *, version: Optional[str] = None) -> ProjectContext:
    """Load the project context from ``config_file`` (relative to ``project_dir``).

    A missing file yields a project without products. ``version`` overrides
    any version given in the file.

    Raises:
        ProjectConfigError: If the file cannot be parsed or is malformed.
    """
    project_dir = Path(project_dir).resolve()
    path = Path(config_file) if config_file else Path("dist.yml")
    if not path.is_absolute():
        path = project_dir / path

    try:
        data = read_yaml(path, default={}, raise_on_error=path.exists())
    except (OSError, yaml.YAMLError) as exc:
        raise ProjectConfigError(f"failed to read project configuration {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ProjectConfigError(f"project configuration {path} must be a YAML mapping")
    if not path.exists():
        logger.debug("no project configuration at %s", path)

    products_raw = data.get("products") or {}
    if not isinstance(products_raw, dict):
        raise ProjectConfigError(f"'products' in {path} must be a mapping")

    products = {str(pid): _parse_product(str(pid), praw) for pid, praw in products_raw.items()}
    resolved_version = version or (str(data["version"]) if data.get("version") is not None else UNSPECIFIED_VERSION)
    return ProjectContext(project_dir=project_dir, version=resolved_version, products=products)


__all__ = [
    "SECTIONS",
    "ProductEntry",
    "ProductParam",
    "ProductTaskOutputInfo",
    "ProjectContext",
    "load_project",
]
