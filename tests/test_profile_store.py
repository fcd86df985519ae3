"""Scenario tests for ccprofiles.config.profile_store: one call per ccp command."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from ccprofiles.config import (
    ABSENT,
    AlreadyExists,
    AlreadyInitialized,
    DiffEntry,
    Document,
    NoCurrentProfile,
    ParseError,
    PathNotFound,
    ProfileStore,
    StorePaths,
    TypeConflict,
)
from tests.conftest import read_json, write_json


class TestInit:
    def test_empty_repository(self, store: ProfileStore, paths: StorePaths) -> None:
        assert store.init() == "default"
        assert store.list() == ["default"]
        assert store.load("default") == Document()
        assert store.current() == "default"
        assert read_json(paths.settings_file) == {}

    def test_from_existing_settings(self, store: ProfileStore, paths: StorePaths) -> None:
        write_json(paths.settings_file, {"model": "opus", "env": {"A": "1"}})
        store.init()
        assert store.load("default").to_dict() == {"model": "opus", "env": {"A": "1"}}
        assert read_json(paths.settings_file) == {"model": "opus", "env": {"A": "1"}}

    def test_twice(self, seeded: ProfileStore) -> None:
        with pytest.raises(AlreadyInitialized):
            seeded.init()


class TestSwitching:
    def test_use(self, seeded: ProfileStore, paths: StorePaths) -> None:
        seeded.use("work")
        assert Document(read_json(paths.settings_file)) == seeded.load("work")
        assert seeded.current() == "work"

    def test_delete_current_clears_pointer(self, seeded: ProfileStore) -> None:
        seeded.use("work")
        seeded.delete("work")
        assert seeded.current() is None

    def test_rename_current(self, seeded: ProfileStore) -> None:
        seeded.rename("default", "main")
        assert seeded.current() == "main"
        assert seeded.list() == ["main", "work"]


class TestCreate:
    def test_from_live_settings(self, seeded: ProfileStore) -> None:
        seeded.create("copy-of-live")
        assert seeded.load("copy-of-live").get("model") == "sonnet-4"

    def test_from_profile(self, seeded: ProfileStore) -> None:
        seeded.create("w2", from_profile="work")
        assert seeded.load("w2") == seeded.load("work")

    def test_empty_without_live_settings(self, store: ProfileStore) -> None:
        store.create("z-ai")
        assert store.load("z-ai") == Document()

    def test_existing(self, seeded: ProfileStore) -> None:
        with pytest.raises(AlreadyExists):
            seeded.create("work")


class TestKeys:
    def test_set_in_named_profile(self, store: ProfileStore) -> None:
        store.create("z-ai")
        store.set_value("env.ANTHROPIC_BASE_URL", "https://api.z.ai/api/anthropic", profile="z-ai")
        document = store.profiles.load("z-ai")
        assert document.get("env.ANTHROPIC_BASE_URL") == "https://api.z.ai/api/anthropic"
        assert isinstance(document.get("env"), dict)

    def test_set_current_applies_live(self, seeded: ProfileStore, paths: StorePaths) -> None:
        assert seeded.set_value("model", "opus") == "default"
        assert read_json(paths.settings_file)["model"] == "opus"

    def test_set_other_profile_leaves_live(self, seeded: ProfileStore, paths: StorePaths) -> None:
        before = paths.settings_file.read_bytes()
        seeded.set_value("model", "haiku", profile="work")
        assert paths.settings_file.read_bytes() == before

    def test_set_without_current(self, store: ProfileStore) -> None:
        store.create("p")
        with pytest.raises(NoCurrentProfile):
            store.set_value("model", "opus")

    def test_set_type_conflict_leaves_profile(self, seeded: ProfileStore) -> None:
        before = seeded.load("work")
        with pytest.raises(TypeConflict):
            seeded.set_value("model.name", "x", profile="work")
        assert seeded.load("work") == before

    def test_get(self, seeded: ProfileStore) -> None:
        assert seeded.get_value("env.ANTHROPIC_BASE_URL", profile="work") == "https://work.example"
        assert seeded.get_value("model") == "sonnet-4"
        with pytest.raises(PathNotFound):
            seeded.get_value("env.MISSING", profile="work")

    def test_unset(self, seeded: ProfileStore, paths: StorePaths) -> None:
        seeded.set_value("env.A", "1")
        assert seeded.unset_value("env.A") is True
        assert read_json(paths.settings_file) == {"model": "sonnet-4", "env": {}}

    def test_unset_absent_writes_nothing(self, seeded: ProfileStore) -> None:
        with patch.object(seeded.profiles, "save") as save:
            assert seeded.unset_value("env.NOPE") is False
        save.assert_not_called()

    def test_configure(self, seeded: ProfileStore, paths: StorePaths) -> None:
        seeded.configure({
            "model": "glm-4.6",
            "env.ANTHROPIC_BASE_URL": "https://api.z.ai/api/anthropic",
            "alwaysThinkingEnabled": True,
        })
        assert read_json(paths.settings_file) == {
            "model": "glm-4.6",
            "env": {"ANTHROPIC_BASE_URL": "https://api.z.ai/api/anthropic"},
            "alwaysThinkingEnabled": True,
        }

    def test_configure_wrong_type(self, seeded: ProfileStore) -> None:
        with pytest.raises(TypeConflict):
            seeded.configure({"alwaysThinkingEnabled": "yes"})


class TestSharing:
    def test_export(self, seeded: ProfileStore) -> None:
        data = seeded.export("work")
        assert Document.parse(data) == seeded.load("work")
        assert data.endswith(b"\n")

    def test_export_current(self, seeded: ProfileStore) -> None:
        assert Document.parse(seeded.export()).get("model") == "sonnet-4"

    def test_import(self, seeded: ProfileStore) -> None:
        seeded.import_profile("shared", b'{"model": "opus", "env": {"X": "1"}}')
        assert seeded.load("shared").get("env.X") == "1"

    def test_import_malformed(self, seeded: ProfileStore) -> None:
        with pytest.raises(ParseError):
            seeded.import_profile("shared", b"{oops")
        assert "shared" not in seeded.list()

    def test_import_existing(self, seeded: ProfileStore) -> None:
        with pytest.raises(AlreadyExists):
            seeded.import_profile("work", b"{}")

    def test_import_overwrite_current_applies(self, seeded: ProfileStore, paths: StorePaths) -> None:
        seeded.import_profile("default", b'{"model": "haiku"}', overwrite=True)
        assert read_json(paths.settings_file) == {"model": "haiku"}

    def test_diff(self, store: ProfileStore) -> None:
        store.profiles.create("a", Document({"model": "opus"}))
        store.profiles.create("b", Document({"model": "opus", "env": {"x": 1}}))
        assert store.diff("a", "b") == [DiffEntry("env.x", ABSENT, 1)]


class TestBackups:
    def test_restore_keeps_pointer(self, seeded: ProfileStore, paths: StorePaths) -> None:
        name = seeded.backup()
        seeded.use("work")
        seeded.restore(name)
        assert seeded.current() == "work"
        assert read_json(paths.settings_file) == {"model": "sonnet-4"}

    def test_restore_takes_auto_backup(self, seeded: ProfileStore) -> None:
        name = seeded.backup("snap")
        auto_name = seeded.restore(name)
        assert auto_name is not None and auto_name.startswith("pre-restore-")
        assert auto_name in seeded.list_backups()

    def test_auto_backup_disabled(self, tmp_path) -> None:
        store = ProfileStore(StorePaths(root=tmp_path / "root", auto_backup=False))
        write_json(store.paths.settings_file, {"model": "opus"})
        store.backup("snap")
        assert store.restore("snap") is None
        assert store.list_backups() == ["snap"]


class TestStatus:
    def test_in_sync(self, seeded: ProfileStore) -> None:
        status = seeded.status()
        assert status["current"] == "default"
        assert status["drift"] == []

    def test_drift(self, seeded: ProfileStore, paths: StorePaths) -> None:
        write_json(paths.settings_file, {"model": "opus"})
        assert seeded.status()["drift"] == [DiffEntry("model", "sonnet-4", "opus")]

    def test_no_current(self, store: ProfileStore) -> None:
        assert store.status()["current"] is None


class TestLocking:
    def test_lock_taken_for_mutations(self, tmp_path) -> None:
        store = ProfileStore(StorePaths(root=tmp_path / "root", use_locking=True))
        store.init()
        store.set_value("model", "opus")
        assert store.paths.lock_file.exists()
        assert store.current() == "default"

    def test_no_lock_file_by_default(self, seeded: ProfileStore) -> None:
        seeded.use("work")
        assert not seeded.paths.lock_file.exists()
