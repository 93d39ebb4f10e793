from __future__ import annotations

import sys
import zipfile
from pathlib import Path

import pytest
from typer.testing import CliRunner


# Ensure the repository-local ``src`` directory is importable when the project is
# not installed as a package. Pytest executes from the repository root where the
# ``src`` layout is not on ``sys.path`` by default, so the zipedit package would
# otherwise be missing.
SRC_PATH = Path(__file__).resolve().parents[1] / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path_factory):
    """Point the settings store at a throwaway directory for every test."""

    import zipedit.config as config_module

    home = tmp_path_factory.mktemp("zipedit-home")
    monkeypatch.setenv("ZIPEDIT_HOME", str(home))
    monkeypatch.setattr(config_module, "ZIPEDIT_DIR", str(home), raising=False)
    monkeypatch.setattr(config_module, "CONFIG_PATH", str(home / "config.json"), raising=False)
    monkeypatch.delenv("ZIPEDIT_STRICT", raising=False)
    monkeypatch.delenv("ZIPEDIT_MATCH_MODE", raising=False)
    return home / "config.json"


@pytest.fixture
def make_archive(tmp_path):
    """Build an archive from ``{entry_name: content}`` in insertion order."""

    def _make(entries: dict[str, str | bytes] | None = None, name: str = "app.zip") -> Path:
        path = tmp_path / name
        with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as z:
            for entry, content in (entries or {}).items():
                z.writestr(entry, content)
        return path

    return _make


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture
def read_archive():
    """Return ``{entry_name: bytes}`` for an archive, in stored order."""

    def _read(path: Path) -> dict[str, bytes]:
        with zipfile.ZipFile(path, "r") as z:
            return {info.filename: z.read(info) for info in z.infolist()}

    return _read
