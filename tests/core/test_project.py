from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from distforge.core.exceptions import ProjectConfigError
from distforge.core.project import load_project
from distforge.core.tasks import AssetConfigYAML

from helpers.assets import write_project

PROJECT = {
    "version": "1.2.0",
    "products": {
        "server": {
            "dependencies": ["client"],
            "dist": {
                "os-arch-bin": {"type": "os-arch-bin", "config": {"os-archs": [{"os": "linux", "arch": "amd64"}]}},
                "bin": {"type": "bin"},
            },
            "publish": {"maven": {"type": "maven", "config": "group-id: com.example\n"}},
        },
        "client": {"name": "Client", "dist": {"bin": {"type": "bin"}}},
    },
}


def test_missing_project_file_is_empty(tmp_path: Path) -> None:
    project = load_project(tmp_path)
    assert project.products == {}
    assert project.products_config_yaml("dist") == {}
    assert project.product_task_output_infos() == {}


def test_products_config_yaml_per_section(tmp_path: Path) -> None:
    write_project(tmp_path, PROJECT)
    project = load_project(tmp_path)

    dist = project.products_config_yaml("dist")
    assert set(dist) == {"client", "server"}
    assert dist["server"]["bin"] == AssetConfigYAML("bin", b"")
    assert yaml.safe_load(dist["server"]["os-arch-bin"].config_yaml) == {"os-archs": [{"os": "linux", "arch": "amd64"}]}

    publish = project.products_config_yaml("publish")
    assert publish == {"server": {"maven": AssetConfigYAML("maven", b"group-id: com.example\n")}}
    assert project.products_config_yaml("docker") == {}


def test_product_task_output_infos(tmp_path: Path) -> None:
    write_project(tmp_path, PROJECT)
    project = load_project(tmp_path)

    infos = project.product_task_output_infos()

    server = infos["server"].to_json()
    assert server["project"] == {"project-dir": str(tmp_path.resolve()), "version": "1.2.0"}
    assert server["product"]["id"] == "server"
    assert server["product"]["dist-ids"] == ["bin", "os-arch-bin"]
    assert server["product"]["dist-output-dir"].endswith("out/dist/server/1.2.0")
    assert list(server["deps"]) == ["client"]
    assert server["deps"]["client"]["name"] == "Client"
    assert infos["client"].to_json()["deps"] == {}


def test_version_override(tmp_path: Path) -> None:
    write_project(tmp_path, PROJECT)
    assert load_project(tmp_path, version="9.9.9").version == "9.9.9"


def test_custom_config_file(tmp_path: Path) -> None:
    write_project(tmp_path, {"products": {"only": {}}}, filename="other.yml")
    assert list(load_project(tmp_path, "other.yml").products) == ["only"]


@pytest.mark.parametrize(
    "data",
    [
        {"products": {"a": {"dependencies": ["b"]}, "b": {"dependencies": ["a"]}}},
        {"products": {"a": {"dependencies": ["missing"]}}},
    ],
    ids=["cycle", "unknown"],
)
def test_bad_dependencies(tmp_path: Path, data) -> None:
    write_project(tmp_path, data)
    project = load_project(tmp_path)
    with pytest.raises(ProjectConfigError):
        project.product_task_output_infos()


@pytest.mark.parametrize(
    "text",
    ["products: [a, b]\n", "- 1\n", "products:\n  a:\n    dist:\n      x: {config: {}}\n", "products: {a: {b: [\n"],
    ids=["products-list", "not-mapping", "entry-without-type", "invalid-yaml"],
)
def test_malformed_project_file(tmp_path: Path, text: str) -> None:
    (tmp_path / "dist.yml").write_text(text, encoding="utf-8")
    with pytest.raises(ProjectConfigError):
        load_project(tmp_path)
