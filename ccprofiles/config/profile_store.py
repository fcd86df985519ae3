"""
Command-level facade over the profile, settings and backup managers.

Each public method corresponds to one ``ccp`` command and returns plain values
(names, documents, diff entries) or raises a ProfileStoreError. Nothing here
prints or prompts.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from .backup_manager import BackupManager
from .config_schema import ConfigSchema
from .document import Document, DiffEntry, diff
from .paths import StorePaths
from .profile_manager import ProfileManager
from .settings_manager import SettingsManager
from ..utils.file_utils import advisory_lock
from ..utils.logging_config import LoggingConfig


class ProfileStore:
    """
    Entry point used by the CLI and by anything embedding ccprofiles.

    Mutations of the current profile are re-applied to the live settings file
    immediately. When ``paths.use_locking`` is set, every operation that writes
    the pointer or more than one file runs under an advisory lock.
    """

    def __init__(self, paths: StorePaths, schema: Optional[ConfigSchema] = None):
        self.paths = paths
        self.schema = schema if schema else ConfigSchema()
        self.profiles = ProfileManager(paths)
        self.settings = SettingsManager(self.profiles)
        self.backups = BackupManager(self.settings, auto_backup=paths.auto_backup)
        self.logger = LoggingConfig.get_logger('profile_store')

    @classmethod
    def from_env(cls, config_dir: Optional[str] = None) -> 'ProfileStore':
        return cls(StorePaths.from_env(config_dir))

    @contextmanager
    def _locked(self) -> Iterator[None]:
        with advisory_lock(self.paths.lock_file, enabled=self.paths.use_locking):
            yield

    # ----- profiles -----

    def init(self, force: bool = False) -> str:
        """
        Seed ``default`` from the live settings (or an empty document) and make it current.

        When no live settings file exists yet, the new default profile is also
        written as the live file.
        """
        with self._locked():
            live = self.settings.load_live()
            self.profiles.init(live, force=force)
            if live is None:
                self.settings.write_live(self.profiles.load("default"))
        return "default"

    def is_initialized(self) -> bool:
        return self.profiles.is_initialized()

    def list(self) -> List[str]:
        return self.profiles.list_profiles()

    def current(self) -> Optional[str]:
        return self.profiles.get_current_name()

    def use(self, name: str) -> Document:
        with self._locked():
            return self.settings.use(name)

    def create(self, name: str, from_profile: Optional[str] = None, overwrite: bool = False) -> Document:
        """
        Create a profile from another profile, else from the live settings, else empty.
        """
        with self._locked():
            if from_profile:
                document = self.profiles.load(from_profile)
            else:
                document = self.settings.load_live() or Document()
            self.profiles.ensure_dirs()
            self.profiles.create(name, document, overwrite=overwrite)
        return document

    def delete(self, name: str) -> None:
        with self._locked():
            self.profiles.delete(name)

    def copy(self, source: str, destination: str) -> None:
        with self._locked():
            self.profiles.copy(source, destination)

    def rename(self, old: str, new: str) -> None:
        with self._locked():
            self.profiles.rename(old, new)

    def load(self, name: Optional[str] = None) -> Document:
        return self.profiles.load(self.settings.resolve_target(name))

    # ----- keys -----

    def get_value(self, path: str, profile: Optional[str] = None) -> Any:
        return self.load(profile).get(path)

    def set_value(self, path: str, value: Any, profile: Optional[str] = None) -> str:
        """
        Set a dotted key in a profile (current by default) and re-apply it if current.

        Returns:
            Name of the modified profile
        """
        with self._locked():
            name = self.settings.resolve_target(profile)
            document = self.profiles.load(name)
            document.set(path, value)
            self.profiles.save(name, document)
            self.settings.apply_if_current(name)
        self.logger.info(f"Set '{path}' in profile '{name}'")
        return name

    def unset_value(self, path: str, profile: Optional[str] = None) -> bool:
        """
        Remove a dotted key. Returns False, without writing anything, when it was not set.
        """
        with self._locked():
            name = self.settings.resolve_target(profile)
            document = self.profiles.load(name)
            if not document.unset(path):
                self.logger.debug(f"Key '{path}' not present in profile '{name}'")
                return False
            self.profiles.save(name, document)
            self.settings.apply_if_current(name)
        self.logger.info(f"Removed '{path}' from profile '{name}'")
        return True

    def configure(self, values: Dict[str, Any], profile: Optional[str] = None) -> str:
        """
        Apply a batch of field values from an interactive configure session.

        A value of None removes the field. All changes are saved in one write.
        """
        validated = self.schema.validate_values(values)
        with self._locked():
            name = self.settings.resolve_target(profile)
            document = self.profiles.load(name)
            for path, value in validated.items():
                if value is None:
                    document.unset(path)
                else:
                    document.set(path, value)
            self.profiles.save(name, document)
            self.settings.apply_if_current(name)
        self.logger.info(f"Configured profile '{name}' ({', '.join(validated) or 'no changes'})")
        return name

    # ----- sharing -----

    def export(self, name: Optional[str] = None) -> bytes:
        return self.load(name).serialize()

    def import_profile(self, name: str, data: bytes, overwrite: bool = False) -> Document:
        document = Document.parse(data, source="stdin")
        with self._locked():
            self.profiles.ensure_dirs()
            self.profiles.create(name, document, overwrite=overwrite)
            if overwrite:
                self.settings.apply_if_current(name)
        return document

    def diff(self, left: str, right: str) -> List[DiffEntry]:
        return diff(self.profiles.load(left), self.profiles.load(right))

    def status(self) -> Dict[str, Any]:
        """Current profile name plus the drift between it and the live settings."""
        current = self.profiles.get_current_name()
        drift = self.settings.drift() if current else []
        return {
            "current": current,
            "settings_file": self.paths.settings_file,
            "live_exists": self.settings.live_exists(),
            "drift": drift,
        }

    # ----- backups -----

    def backup(self, name: Optional[str] = None) -> str:
        with self._locked():
            self.profiles.ensure_dirs()
            return self.backups.backup(name)

    def restore(self, name: str) -> Optional[str]:
        with self._locked():
            return self.backups.restore(name)

    def list_backups(self) -> List[str]:
        return self.backups.list_backups()
