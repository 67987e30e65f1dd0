from __future__ import annotations

import io
from pathlib import Path

import pytest

from distforge.core.assets import AssetTaskInfo, AssetType, TaskInfo
from distforge.core.assets.types import GlobalFlagOptions, VerifyOptions
from distforge.core.project import load_project
from distforge.core.tasks import (
    DisterTaskProvider,
    DockerBuilderTaskProvider,
    InvocationOptions,
    PublisherTaskProvider,
    provider_for,
)
from distforge.core.tasks.providers import global_flag_args

from helpers.assets import write_fake_asset, write_project


@pytest.mark.parametrize(
    ("asset_type", "cls", "flag", "section"),
    [
        (AssetType.DISTER, DisterTaskProvider, "dister-config-yml", "dist"),
        (AssetType.PUBLISHER, PublisherTaskProvider, "publisher-config-yml", "publish"),
        (AssetType.DOCKER_BUILDER, DockerBuilderTaskProvider, "docker-builder-config-yml", "docker"),
    ],
)
def test_provider_variants(asset_type, cls, flag, section) -> None:
    provider = provider_for(asset_type)
    assert isinstance(provider, cls)
    assert provider is provider_for(asset_type)
    assert provider.config_flag_name == flag
    assert provider.project_section == section


def test_global_flag_args() -> None:
    info = TaskInfo(
        name="t",
        command=("t",),
        global_flag_options=GlobalFlagOptions(debug_flag="debug", project_dir_flag="project-dir"),
    )
    assert global_flag_args(info, debug=True, project_dir=Path("/proj")) == ["--debug=true", "--project-dir=/proj"]
    assert global_flag_args(info, debug=False, project_dir=None) == ["--debug=false"]
    assert global_flag_args(TaskInfo(name="t", command=("t",)), debug=True, project_dir=Path("/p")) == []


def test_publisher_task_gets_publish_section(tmp_path: Path) -> None:
    write_project(
        tmp_path,
        {
            "products": {
                "server": {
                    "dist": {"bin": {"type": "bin"}},
                    "publish": {"maven": {"type": "maven-pub", "config": {"group-id": "com.example"}}},
                }
            }
        },
    )
    asset = write_fake_asset(tmp_path / "assets", "pub", asset_type="publisher")
    info = AssetTaskInfo(
        asset_path=str(asset),
        asset_type=AssetType.PUBLISHER,
        asset_name="maven-pub",
        task_info=TaskInfo(
            name="check",
            command=("check",),
            global_flag_options=GlobalFlagOptions(project_dir_flag="project-dir"),
        ),
    )
    command = provider_for(AssetType.PUBLISHER).build_command(info)

    command.run(
        ["--extra"],
        resolve_project=lambda: load_project(tmp_path),
        options=InvocationOptions(stdout=io.StringIO(), stderr=io.StringIO(), project_dir=tmp_path),
    )

    argv = asset.invocations()[0]["argv"]
    assert argv[1].startswith("--publisher-config-yml=")
    assert argv[3:] == [f"--project-dir={tmp_path}", "--extra"]
    config = asset.decoded_files()["publisher-config-yml"]
    assert config == {"server": {"maven": {"dister-name": "maven-pub", "config-yaml": "group-id: com.example\n"}}}


def test_verify_task_gets_only_apply_args(tmp_path: Path) -> None:
    write_project(tmp_path, {"products": {"server": {"dist": {"bin": {"type": "bin"}}}}})
    asset = write_fake_asset(tmp_path / "assets", "d")
    info = AssetTaskInfo(
        asset_path=str(asset),
        asset_type=AssetType.DISTER,
        asset_name="bin",
        task_info=TaskInfo(
            name="verify",
            command=("verify",),
            verify_options=VerifyOptions(apply_true_args=("--fix",), apply_false_args=("--check",)),
            global_flag_options=GlobalFlagOptions(debug_flag="debug", project_dir_flag="project-dir"),
        ),
    )
    provider = provider_for(AssetType.DISTER)
    task_input = provider.create_verify_input(load_project(tmp_path))
    options = InvocationOptions(stdout=io.StringIO(), stderr=io.StringIO(), debug=True, project_dir=tmp_path)

    provider.run_verify_task(info, task_input, True, options)
    provider.run_verify_task(info, task_input, False, options)

    assert [inv["argv"][3:] for inv in asset.invocations()] == [["--fix"], ["--check"]]
