"""Shared fixtures: an isolated store rooted in a temp directory."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from ccprofiles.config import ProfileStore, StorePaths
from ccprofiles.utils.logging_config import LoggingConfig


def write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    for var in ("CCP_CONFIG_DIR", "CLAUDE_CONFIG_DIR", "CCP_LOCKING", "CCP_AUTO_BACKUP", "CCP_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    # keep dotenv from picking up a .env in the developer's checkout
    monkeypatch.chdir(tmp_path)
    yield
    LoggingConfig.shutdown()


@pytest.fixture
def paths(tmp_path: Path) -> StorePaths:
    return StorePaths(root=tmp_path / ".claude")


@pytest.fixture
def store(paths: StorePaths) -> ProfileStore:
    return ProfileStore(paths)


@pytest.fixture
def seeded(store: ProfileStore) -> ProfileStore:
    """Store with settings.json, a current 'default' profile and a 'work' profile."""
    write_json(store.paths.settings_file, {"model": "sonnet-4"})
    store.init()
    write_json(store.paths.profile_path("work"), {"model": "opus", "env": {"ANTHROPIC_BASE_URL": "https://work.example"}})
    return store
