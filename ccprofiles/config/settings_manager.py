"""
Live settings manager: projects profiles onto the settings file the application reads.

This module provides:
- Atomic reads and writes of the live ``settings.json``
- The switch protocol (write live file, then commit the current pointer)
- Re-applying the current profile after it has been edited
- Drift detection and file watching for edits made outside of ccp
"""

import threading
from pathlib import Path
from typing import Any, Callable, List, Optional
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler

from .document import Document, DiffEntry, diff
from .errors import NoCurrentProfile, ProfileStoreError
from .profile_manager import ProfileManager, read_document, write_document
from ..utils.logging_config import LoggingConfig


DriftCallback = Callable[[List[DiffEntry]], None]


class SettingsFileHandler(FileSystemEventHandler):
    """File system event handler for live settings file changes."""

    def __init__(self, settings_manager: 'SettingsManager', callback: DriftCallback):
        self.settings_manager = settings_manager
        self.callback = callback
        self.logger = LoggingConfig.get_logger('settings.file_handler')

    def _is_settings_file(self, path: Any) -> bool:
        if isinstance(path, bytes):
            path = path.decode('utf-8', errors='replace')
        return Path(path) == self.settings_manager.settings_file

    def on_modified(self, event):
        if not event.is_directory and self._is_settings_file(event.src_path):
            self._report(event.src_path)

    def on_created(self, event):
        if not event.is_directory and self._is_settings_file(event.src_path):
            self._report(event.src_path)

    def on_moved(self, event):
        # atomic writers (ours included) land the file with a rename
        if not event.is_directory and self._is_settings_file(event.dest_path):
            self._report(event.dest_path)

    def _report(self, path: Any) -> None:
        self.logger.info(f"Settings file changed: {path}")
        try:
            entries = self.settings_manager.drift()
        except ProfileStoreError as e:
            self.logger.error(f"Failed to compare settings with current profile: {e}")
            return
        self.callback(entries)


class SettingsManager:
    """
    Switch/apply engine for the live settings file.

    The live file is only ever replaced as a whole through an atomic rename, and
    ``use`` writes it before the current pointer is updated: if the process dies
    in between, the pointer is stale (re-running ``use`` fixes it) rather than
    pointing at a profile the application is not actually using.
    """

    def __init__(self, profile_manager: ProfileManager):
        """
        Initialize the settings manager.

        Args:
            profile_manager: Repository providing profiles and the current pointer
        """
        self.profile_manager = profile_manager
        self.settings_file = profile_manager.paths.settings_file
        self.logger = LoggingConfig.get_logger('settings_manager')

        self._observer: Optional[Any] = None
        self._file_handler: Optional[SettingsFileHandler] = None
        self._watch_lock = threading.Lock()

    def live_exists(self) -> bool:
        return self.settings_file.is_file()

    def load_live(self) -> Optional[Document]:
        """Read the live settings document, or None if the file does not exist."""
        if not self.live_exists():
            return None
        return read_document(self.settings_file)

    def write_live(self, document: Document) -> None:
        write_document(self.settings_file, document)
        self.logger.info(f"Wrote live settings to {self.settings_file}")

    def use(self, name: str) -> Document:
        """
        Switch to a profile.

        Args:
            name: Profile to activate

        Returns:
            The document now in the live settings file

        Raises:
            ProfileNotFound: If the profile does not exist; nothing is written
        """
        document = self.profile_manager.load(name)
        self.write_live(document)
        self.profile_manager.set_current_name(name)
        self.logger.info(f"Switched to profile '{name}'")
        return document

    def resolve_target(self, profile: Optional[str] = None) -> str:
        """
        Pick the profile a command operates on.

        Raises:
            NoCurrentProfile: If no profile is given and none is current
        """
        if profile:
            return profile
        current = self.profile_manager.get_current_name()
        if current is None:
            raise NoCurrentProfile()
        return current

    def apply_current(self) -> str:
        """
        Re-project the current profile onto the live settings file.

        Returns:
            Name of the applied profile
        """
        name = self.resolve_target(None)
        self.write_live(self.profile_manager.load(name))
        self.logger.info(f"Applied current profile '{name}'")
        return name

    def apply_if_current(self, name: str) -> bool:
        """Re-apply ``name`` if it is the current profile. Returns True if applied."""
        if self.profile_manager.get_current_name() != name:
            return False
        self.apply_current()
        return True

    def drift(self) -> List[DiffEntry]:
        """
        Compare the current profile with the live settings file.

        Returns:
            Diff entries (profile on the left, live file on the right); empty when in sync
        """
        name = self.resolve_target(None)
        profile_doc = self.profile_manager.load(name)
        live_doc = self.load_live() or Document()
        return diff(profile_doc, live_doc)

    def watch(self, callback: DriftCallback) -> None:
        """
        Start watching the live settings file; ``callback`` receives the drift
        after every change.
        """
        with self._watch_lock:
            if self._observer is not None:
                return
            directory = self.settings_file.parent
            directory.mkdir(parents=True, exist_ok=True)

            self._file_handler = SettingsFileHandler(self, callback)
            self._observer = Observer()
            self._observer.schedule(self._file_handler, str(directory), recursive=False)
            self._observer.start()
            self.logger.info(f"Started file watching for: {self.settings_file}")

    def stop_watching(self) -> None:
        with self._watch_lock:
            if self._observer is None:
                return
            self._observer.stop()
            self._observer.join(timeout=5.0)
            self._observer = None
            self._file_handler = None
            self.logger.info("Stopped file watching")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop_watching()
