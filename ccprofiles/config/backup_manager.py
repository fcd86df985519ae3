"""
Backup and restore of the live settings file.

Backups are snapshots of ``settings.json`` stored as ``backups/<name>.json``. They
are written once and never modified. Restoring a backup replaces the live file
but leaves the current-profile pointer alone: it is a point-in-time recovery of
what the application reads, not a profile switch.
"""

from datetime import datetime
from typing import Callable, List, Optional
from pathlib import Path

from .document import Document
from .config_schema import validate_name
from .errors import AlreadyExists, BackupNotFound, SettingsNotFound
from .profile_manager import list_documents, read_document, write_document
from .settings_manager import SettingsManager
from ..utils.logging_config import LoggingConfig


BACKUP_PREFIX = "backup"
PRE_RESTORE_PREFIX = "pre-restore"
TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"


class BackupManager:
    """
    Creates, lists and restores backups of the live settings file.

    Generated names follow ``<prefix>-YYYYMMDD-HHMMSS`` so that they sort
    chronologically. A second generated backup within the same second gets a
    ``-2``, ``-3``... suffix, which still sorts after the first and before the
    next second. Explicit names never get a suffix; a collision is an error.
    """

    def __init__(
        self,
        settings_manager: SettingsManager,
        auto_backup: bool = True,
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        Initialize the BackupManager.

        Args:
            settings_manager: Engine used to read and atomically replace the live file
            auto_backup: Snapshot the live file before every restore
            clock: Source of the current time for generated names
        """
        self.settings_manager = settings_manager
        self.paths = settings_manager.profile_manager.paths
        self.backups_directory = self.paths.backups_dir
        self.auto_backup = auto_backup
        self.clock = clock
        self.logger = LoggingConfig.get_logger('backup_manager')

    def list_backups(self) -> List[str]:
        return list_documents(self.backups_directory)

    def exists(self, name: str) -> bool:
        validate_name(name, kind="backup")
        return self.paths.backup_path(name).is_file()

    def load(self, name: str) -> Document:
        if not self.exists(name):
            raise BackupNotFound(name, self.list_backups())
        return read_document(self.paths.backup_path(name))

    def generate_name(self, prefix: str = BACKUP_PREFIX) -> str:
        base = f"{prefix}-{self.clock().strftime(TIMESTAMP_FORMAT)}"
        name = base
        counter = 2
        while self.paths.backup_path(name).exists():
            name = f"{base}-{counter}"
            counter += 1
        return name

    def _write_backup(self, name: str, document: Document) -> Path:
        path = self.paths.backup_path(name)
        write_document(path, document)
        self.logger.info(f"Created backup '{name}' at {path}")
        return path

    def backup(self, name: Optional[str] = None) -> str:
        """
        Snapshot the live settings file.

        Args:
            name: Backup name; generated from the current time if omitted

        Returns:
            Name of the created backup

        Raises:
            SettingsNotFound: If there is no live settings file
            AlreadyExists: If an explicitly named backup already exists
        """
        document = self.settings_manager.load_live()
        if document is None:
            raise SettingsNotFound(self.settings_manager.settings_file)

        if name is None:
            name = self.generate_name()
        elif self.exists(name):
            raise AlreadyExists("backup", name)

        self._write_backup(name, document)
        return name

    def restore(self, name: str) -> Optional[str]:
        """
        Make a backup the live settings file.

        When no backup has that name but a profile does, the profile is
        restored instead. The current pointer is not touched either way. With
        auto_backup enabled the live file is first saved as a
        ``pre-restore-...`` backup.

        Returns:
            Name of the automatic pre-restore backup, or None if none was taken

        Raises:
            BackupNotFound: If neither a backup nor a profile has that name;
                nothing is written
        """
        profile_manager = self.settings_manager.profile_manager
        if not self.exists(name) and profile_manager.exists(name):
            self.logger.info(f"No backup named '{name}', restoring profile of that name")
            document = profile_manager.load(name)
        else:
            document = self.load(name)

        auto_name = None
        if self.auto_backup:
            live = self.settings_manager.load_live()
            if live is not None:
                auto_name = self.generate_name(PRE_RESTORE_PREFIX)
                self._write_backup(auto_name, live)

        self.settings_manager.write_live(document)
        self.logger.info(f"Restored live settings from backup '{name}'")
        return auto_name
