from __future__ import annotations

import io
import re
from pathlib import Path

import pytest

from distforge.core.exceptions import AssetTaskFailedError, AssetTimeoutError, InvocationHostError, is_silent
from distforge.core.tasks import AssetConfigYAML, run_asset_task

from helpers.assets import write_fake_asset

OUTPUT_INFOS = {"server": {"project": {"project-dir": "/p", "version": "1.0.0"}, "product": {"id": "server"}, "deps": {}}}


def _run(asset, **kwargs):
    stdout = kwargs.pop("stdout", io.StringIO())
    stderr = kwargs.pop("stderr", io.StringIO())
    run_asset_task(
        str(asset),
        kwargs.pop("command", ["lint"]),
        "dister-config-yml",
        kwargs.pop("config_yaml", {"server": {"bin": AssetConfigYAML("bin", b"k: v\n")}}),
        kwargs.pop("output_infos", OUTPUT_INFOS),
        kwargs.pop("provided_args", ["--strict", "x"]),
        stdout=stdout,
        stderr=stderr,
        **kwargs,
    )
    return stdout, stderr


def test_invocation_argv_and_files(tmp_path: Path) -> None:
    asset = write_fake_asset(tmp_path, "asset", tasks={"lint": {"stdout": "linted\n"}})

    stdout, _ = _run(asset)

    argv = asset.invocations()[0]["argv"]
    assert argv[0] == "lint"
    assert re.fullmatch(r"--dister-config-yml=.+", argv[1])
    assert re.fullmatch(r"--all-product-task-output-info=.+", argv[2])
    assert argv[3:] == ["--strict", "x"]

    files = asset.decoded_files()
    assert files["dister-config-yml"] == {"server": {"bin": {"dister-name": "bin", "config-yaml": "k: v\n"}}}
    assert files["all-product-task-output-info"] == OUTPUT_INFOS
    assert stdout.getvalue() == "linted\n"


def test_temp_files_removed_after_invocation(tmp_path: Path) -> None:
    asset = write_fake_asset(tmp_path, "asset")
    _run(asset)
    argv = asset.invocations()[0]["argv"]
    for arg in argv[1:3]:
        assert not Path(arg.split("=", 1)[1]).exists()


def test_temp_files_kept_on_request(tmp_path: Path) -> None:
    asset = write_fake_asset(tmp_path, "asset")
    _run(asset, keep_temp_files=True)
    paths = [Path(a.split("=", 1)[1]) for a in asset.invocations()[0]["argv"][1:3]]
    try:
        assert all(p.exists() for p in paths)
    finally:
        for p in paths:
            p.unlink()


def test_non_zero_exit_is_silent_sentinel(tmp_path: Path) -> None:
    asset = write_fake_asset(tmp_path, "asset", tasks={"lint": {"exit": 4, "stderr": "lint: 2 problems\n"}})
    stderr = io.StringIO()

    with pytest.raises(AssetTaskFailedError) as excinfo:
        _run(asset, stderr=stderr)

    assert excinfo.value.exit_code == 4
    assert str(excinfo.value) == ""
    assert is_silent(excinfo.value)
    assert stderr.getvalue() == "lint: 2 problems\n"
    argv = asset.invocations()[0]["argv"]
    assert not Path(argv[1].split("=", 1)[1]).exists()


def test_missing_executable_is_host_error(tmp_path: Path) -> None:
    missing = tmp_path / "gone"
    with pytest.raises(InvocationHostError) as excinfo:
        _run(missing)
    err = excinfo.value
    assert not isinstance(err, AssetTaskFailedError)
    assert str(missing) in str(err)
    assert "--dister-config-yml=" in str(err)
    assert err.context["argv"][0] == str(missing)


def test_timeout_is_host_error(tmp_path: Path) -> None:
    script = tmp_path / "slow"
    script.write_text("#!/bin/sh\nsleep 5\n", encoding="utf-8")
    script.chmod(0o755)

    with pytest.raises(AssetTimeoutError) as excinfo:
        _run(script, timeout=0.2)
    assert "timed out" in str(excinfo.value)


def test_unserializable_value_is_host_error(tmp_path: Path) -> None:
    asset = write_fake_asset(tmp_path, "asset")
    with pytest.raises(InvocationHostError) as excinfo:
        _run(asset, output_infos={"p": object()})
    assert "all-product-task-output-info" in str(excinfo.value)
    assert asset.invocations() == []
