"""Fake asset executables for tests.

A fake asset is a small Python script with a ``sys.executable`` shebang. Its
behaviour is fixed at creation time; every task invocation is appended to a
JSON-lines record file together with the raw text of the files passed through
``--*-yml`` / ``--*-info`` flags, so tests can inspect exactly what the host
sent.
"""
from __future__ import annotations

import json
import stat
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

_TEMPLATE = '''#!{python}
import json
import sys

BEHAVIOUR = json.loads({behaviour!r})


def _flag_files(args):
    files = {{}}
    for arg in args:
        if arg.startswith("--") and "=" in arg:
            name, _, value = arg[2:].partition("=")
            if name in BEHAVIOUR["file_flags"]:
                with open(value, encoding="utf-8") as fh:
                    files[name] = fh.read()
    return files


def main(argv):
    if not argv:
        sys.stderr.write("usage: asset <command>\\n")
        return 2
    cmd = argv[0]
    if cmd == "asset-type":
        stream = sys.stderr if BEHAVIOUR["type_to_stderr"] else sys.stdout
        stream.write(BEHAVIOUR["type_output"])
        return BEHAVIOUR["type_exit"]
    if cmd == "task-infos":
        if BEHAVIOUR["infos_output"] is None:
            sys.stderr.write("unknown command \\"task-infos\\"\\n")
            return 1
        sys.stdout.write(BEHAVIOUR["infos_output"])
        return BEHAVIOUR["infos_exit"]
    with open(BEHAVIOUR["record"], "a", encoding="utf-8") as fh:
        fh.write(json.dumps({{"argv": argv, "files": _flag_files(argv[1:])}}) + "\\n")
    behaviour = BEHAVIOUR["tasks"].get(cmd, {{}})
    if behaviour.get("stdout"):
        sys.stdout.write(behaviour["stdout"])
    if behaviour.get("stderr"):
        sys.stderr.write(behaviour["stderr"])
    return behaviour.get("exit", 0)


sys.exit(main(sys.argv[1:]))
'''

FILE_FLAGS = (
    "dister-config-yml",
    "publisher-config-yml",
    "docker-builder-config-yml",
    "all-product-task-output-info",
)


def task_info(
    name: str,
    *,
    command: Optional[Sequence[str]] = None,
    description: str = "",
    top_level: bool = False,
    verify: Optional[Mapping[str, Sequence[str]]] = None,
    global_flags: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """Return a task info in wire form."""
    out: Dict[str, Any] = {
        "name": name,
        "description": description,
        "command": list(command if command is not None else [name]),
        "registerAsTopLevelDistgoTaskCommand": top_level,
    }
    if verify is not None:
        out["verifyOptions"] = {
            "applyTrueArgs": list(verify.get("apply", ())),
            "applyFalseArgs": list(verify.get("check", ())),
        }
    if global_flags is not None:
        out["globalFlagOptions"] = dict(global_flags)
    return out


def catalog(asset_name: str, *tasks: Dict[str, Any]) -> Dict[str, Any]:
    return {"asset-name": asset_name, "task-infos": {t["name"]: t for t in tasks}}


class FakeAsset:
    def __init__(self, path: Path, record: Path) -> None:
        self.path = path
        self.record = record

    def __str__(self) -> str:
        return str(self.path)

    def invocations(self) -> List[Dict[str, Any]]:
        if not self.record.exists():
            return []
        return [json.loads(line) for line in self.record.read_text(encoding="utf-8").splitlines() if line]

    def decoded_files(self, index: int = -1) -> Dict[str, Any]:
        """Return the YAML-decoded flag files of one recorded invocation."""
        files = self.invocations()[index]["files"]
        return {name: yaml.safe_load(text) for name, text in files.items()}


def write_fake_asset(
    directory: Path,
    name: str,
    *,
    asset_type: str = "dister",
    type_output: Optional[str] = None,
    type_exit: int = 0,
    type_to_stderr: bool = False,
    task_infos: Optional[Mapping[str, Any]] = None,
    infos_output: Optional[str] = None,
    infos_exit: int = 0,
    tasks: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> FakeAsset:
    """Write an executable fake asset to ``directory/name``.

    ``task_infos=None`` (and no ``infos_output``) makes the asset exit 1 on the
    task-infos query, like an asset that provides no tasks. ``tasks`` maps a
    command to ``{"exit": int, "stdout": str, "stderr": str}``.
    """
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    record = directory / f"{name}.record.jsonl"

    if infos_output is None and task_infos is not None:
        infos_output = json.dumps(task_infos)
    behaviour = {
        "type_output": type_output if type_output is not None else json.dumps(asset_type),
        "type_exit": type_exit,
        "type_to_stderr": type_to_stderr,
        "infos_output": infos_output,
        "infos_exit": infos_exit,
        "tasks": dict(tasks or {}),
        "record": str(record),
        "file_flags": list(FILE_FLAGS),
    }
    path.write_text(_TEMPLATE.format(python=sys.executable, behaviour=json.dumps(behaviour)), encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return FakeAsset(path, record)


def write_project(project_dir: Path, data: Mapping[str, Any], filename: str = "dist.yml") -> Path:
    project_dir.mkdir(parents=True, exist_ok=True)
    path = project_dir / filename
    path.write_text(yaml.safe_dump(dict(data), sort_keys=True), encoding="utf-8")
    return path
