"""Tests for ccprofiles.config.settings_manager: switch/apply engine and file watching."""

from __future__ import annotations

from types import SimpleNamespace
from typing import List
from unittest.mock import patch

import pytest

from ccprofiles.config import (
    ABSENT,
    DiffEntry,
    Document,
    NoCurrentProfile,
    ProfileManager,
    ProfileNotFound,
    SettingsManager,
    StorageError,
    StorePaths,
)
from ccprofiles.config.settings_manager import SettingsFileHandler
from tests.conftest import read_json, write_json


@pytest.fixture
def engine(paths: StorePaths) -> SettingsManager:
    manager = ProfileManager(paths)
    manager.init(Document({"model": "sonnet"}))
    manager.create("work", Document({"model": "opus", "env": {"ANTHROPIC_BASE_URL": "https://work.example"}}))
    return SettingsManager(manager)


class TestUse:
    def test_projects_profile_and_sets_pointer(self, engine: SettingsManager, paths: StorePaths) -> None:
        engine.use("work")
        assert Document(read_json(paths.settings_file)) == engine.profile_manager.load("work")
        assert engine.profile_manager.get_current_name() == "work"

    def test_missing_profile_writes_nothing(self, engine: SettingsManager, paths: StorePaths) -> None:
        with pytest.raises(ProfileNotFound):
            engine.use("ghost")
        assert not paths.settings_file.exists()
        assert engine.profile_manager.get_current_name() == "default"

    def test_failed_live_write_keeps_pointer(self, engine: SettingsManager, paths: StorePaths) -> None:
        with patch("ccprofiles.config.profile_manager.write_atomic", side_effect=OSError(28, "No space left on device")):
            with pytest.raises(StorageError) as exc_info:
                engine.use("work")
        assert exc_info.value.path == paths.settings_file
        assert engine.profile_manager.get_current_name() == "default"

    def test_live_file_is_written_before_pointer(self, engine: SettingsManager, paths: StorePaths) -> None:
        order: List[str] = []
        original_write = engine.write_live
        original_set = engine.profile_manager.set_current_name

        def write_live(document: Document) -> None:
            order.append("live")
            original_write(document)

        def set_current(name: str) -> None:
            order.append("pointer")
            original_set(name)

        with patch.object(engine, "write_live", side_effect=write_live), \
                patch.object(engine.profile_manager, "set_current_name", side_effect=set_current):
            engine.use("work")
        assert order == ["live", "pointer"]


class TestApply:
    def test_apply_current(self, engine: SettingsManager, paths: StorePaths) -> None:
        write_json(paths.settings_file, {"model": "stale"})
        assert engine.apply_current() == "default"
        assert read_json(paths.settings_file) == {"model": "sonnet"}

    def test_apply_without_current(self, engine: SettingsManager) -> None:
        engine.profile_manager.clear_current()
        with pytest.raises(NoCurrentProfile):
            engine.apply_current()

    def test_apply_if_current_skips_other_profiles(self, engine: SettingsManager, paths: StorePaths) -> None:
        assert engine.apply_if_current("work") is False
        assert not paths.settings_file.exists()
        assert engine.apply_if_current("default") is True
        assert paths.settings_file.exists()

    def test_resolve_target(self, engine: SettingsManager) -> None:
        assert engine.resolve_target("work") == "work"
        assert engine.resolve_target(None) == "default"
        engine.profile_manager.clear_current()
        with pytest.raises(NoCurrentProfile):
            engine.resolve_target(None)


class TestLive:
    def test_load_live_absent(self, engine: SettingsManager) -> None:
        assert engine.load_live() is None

    def test_load_live(self, engine: SettingsManager, paths: StorePaths) -> None:
        write_json(paths.settings_file, {"model": "opus"})
        assert engine.load_live() == Document({"model": "opus"})


class TestDrift:
    def test_in_sync(self, engine: SettingsManager) -> None:
        engine.use("default")
        assert engine.drift() == []

    def test_external_edit(self, engine: SettingsManager, paths: StorePaths) -> None:
        engine.use("default")
        write_json(paths.settings_file, {"model": "sonnet", "theme": "dark"})
        assert engine.drift() == [DiffEntry("theme", ABSENT, "dark")]


class TestFileHandler:
    def _event(self, path, is_directory=False, dest_path=None):
        return SimpleNamespace(src_path=str(path), dest_path=str(dest_path or path), is_directory=is_directory)

    def test_reports_drift_on_modification(self, engine: SettingsManager, paths: StorePaths) -> None:
        engine.use("default")
        write_json(paths.settings_file, {"model": "haiku"})
        seen: List[List[DiffEntry]] = []
        handler = SettingsFileHandler(engine, seen.append)

        handler.on_modified(self._event(paths.settings_file))
        assert seen == [[DiffEntry("model", "sonnet", "haiku")]]

    def test_reports_atomic_replace(self, engine: SettingsManager, paths: StorePaths) -> None:
        engine.use("default")
        seen: List[List[DiffEntry]] = []
        handler = SettingsFileHandler(engine, seen.append)

        handler.on_moved(self._event(paths.root / ".settings.json.x.tmp", dest_path=paths.settings_file))
        assert seen == [[]]

    def test_ignores_other_files(self, engine: SettingsManager, paths: StorePaths) -> None:
        seen: List[List[DiffEntry]] = []
        handler = SettingsFileHandler(engine, seen.append)

        handler.on_modified(self._event(paths.root / "other.json"))
        handler.on_modified(self._event(paths.root, is_directory=True))
        assert seen == []

    def test_no_current_profile_is_logged_not_raised(self, engine: SettingsManager, paths: StorePaths) -> None:
        engine.profile_manager.clear_current()
        seen: List[List[DiffEntry]] = []
        handler = SettingsFileHandler(engine, seen.append)

        handler.on_modified(self._event(paths.settings_file))
        assert seen == []

    def test_watch_starts_and_stops_observer(self, engine: SettingsManager) -> None:
        with patch("ccprofiles.config.settings_manager.Observer") as observer_cls:
            with engine:
                engine.watch(lambda entries: None)
                engine.watch(lambda entries: None)
            observer = observer_cls.return_value
        observer_cls.assert_called_once()
        observer.start.assert_called_once()
        observer.stop.assert_called_once()
        observer.join.assert_called_once()

    def test_relative_root_matches_absolute_event_paths(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        manager = ProfileManager(StorePaths(root="rel"))
        manager.init(Document({"model": "sonnet"}))
        engine = SettingsManager(manager)
        engine.use("default")
        write_json(tmp_path / "rel" / "settings.json", {"model": "haiku"})
        seen: List[List[DiffEntry]] = []
        handler = SettingsFileHandler(engine, seen.append)

        handler.on_modified(self._event(tmp_path / "rel" / "settings.json"))
        assert seen == [[DiffEntry("model", "sonnet", "haiku")]]
