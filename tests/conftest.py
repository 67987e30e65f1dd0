import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'distforge'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from distforge.core.logsetup import reset_logging_for_tests
from distforge.data import clear_caches


@pytest.fixture(autouse=True)
def _isolate_distforge_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Run every test from an empty directory with no DISTFORGE_* overrides."""
    for key in list(os.environ):
        if key.startswith("DISTFORGE_"):
            monkeypatch.delenv(key, raising=False)
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    yield
    reset_logging_for_tests()
    clear_caches()
