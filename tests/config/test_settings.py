from __future__ import annotations

from pathlib import Path

import pytest

from distforge.core.config import ConfigManager, Settings, deep_merge, load_settings


def _write_project_config(project_dir: Path, name: str, text: str) -> None:
    cfg_dir = project_dir / ".distforge" / "config"
    cfg_dir.mkdir(parents=True, exist_ok=True)
    (cfg_dir / name).write_text(text, encoding="utf-8")


def test_defaults(tmp_path: Path) -> None:
    settings = load_settings(tmp_path)
    assert settings.assets.paths == []
    assert settings.timeouts.probe_seconds == 30
    assert settings.timeouts.task_seconds is None
    assert settings.tempfiles.keep is False
    assert settings.logging.level == "INFO"
    assert settings.logging.file is None
    assert settings.project.config_file == "dist.yml"
    assert settings.project.version is None


def test_deep_merge_does_not_mutate_inputs() -> None:
    base = {"a": {"x": 1}, "b": 1}
    merged = deep_merge(base, {"a": {"y": 2}, "c": 3})
    assert merged == {"a": {"x": 1, "y": 2}, "b": 1, "c": 3}
    assert base == {"a": {"x": 1}, "b": 1}


def test_project_config_files_merge_in_order(tmp_path: Path) -> None:
    _write_project_config(tmp_path, "10-assets.yaml", "assets:\n  paths: [/opt/a]\ntimeouts:\n  probe_seconds: 5\n")
    _write_project_config(tmp_path, "20-override.yml", "assets:\n  paths: [/opt/b]\n")

    settings = load_settings(tmp_path)

    assert settings.assets.paths == ["/opt/b"]
    assert settings.timeouts.probe_seconds == 5.0


def test_env_overrides_win(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write_project_config(tmp_path, "timeouts.yaml", "timeouts:\n  task_seconds: 60\n")
    monkeypatch.setenv("DISTFORGE_timeouts__task_seconds", "2.5")
    monkeypatch.setenv("DISTFORGE_tempfiles__keep", "true")
    monkeypatch.setenv("DISTFORGE_assets__paths", "/a,/b")
    monkeypatch.setenv("DISTFORGE_timeouts__probe_seconds", "null")

    settings = load_settings(tmp_path)

    assert settings.timeouts.task_seconds == 2.5
    assert settings.timeouts.probe_seconds is None
    assert settings.tempfiles.keep is True
    assert settings.assets.paths == ["/a", "/b"]


def test_env_json_list(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DISTFORGE_ASSETS__PATHS", '["/x", "/y"]')
    assert load_settings(tmp_path).assets.paths == ["/x", "/y"]


def test_malformed_env_key(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DISTFORGE_timeouts____task_seconds", "1")
    with pytest.raises(ValueError):
        ConfigManager(tmp_path).load_config()


def test_project_config_must_be_mapping(tmp_path: Path) -> None:
    _write_project_config(tmp_path, "bad.yaml", "- a\n- b\n")
    with pytest.raises(ValueError):
        load_settings(tmp_path)


@pytest.mark.parametrize("value", [0, -1])
def test_non_positive_timeout_rejected(value: int) -> None:
    settings = Settings.from_dict({"timeouts": {"task_seconds": value}})
    with pytest.raises(ValueError):
        settings.validate()


def test_section_must_be_mapping() -> None:
    settings = Settings.from_dict({"logging": "debug"})
    with pytest.raises(ValueError):
        settings.validate()
