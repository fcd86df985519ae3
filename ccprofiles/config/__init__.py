"""
Profile store for switchable settings files.

This module provides the storage core behind ``ccp``:
- A JSON document model with dotted-path access and structural diff
- One JSON file per named profile plus a current-profile pointer
- Atomic projection of a profile onto the live settings file
- Timestamped backups and point-in-time restore of the live file
"""

from .document import Document, DiffEntry, ABSENT, diff
from .errors import (
    ProfileStoreError,
    ProfileNotFound,
    BackupNotFound,
    AlreadyExists,
    AlreadyInitialized,
    NoCurrentProfile,
    PathNotFound,
    TypeConflict,
    InvalidPath,
    InvalidName,
    ParseError,
    SettingsNotFound,
    StorageError,
)
from .config_schema import ConfigSchema, FieldSchema
from .paths import StorePaths
from .profile_manager import ProfileManager
from .settings_manager import SettingsManager
from .backup_manager import BackupManager
from .profile_store import ProfileStore

__all__ = [
    'Document',
    'DiffEntry',
    'ABSENT',
    'diff',
    'ProfileStoreError',
    'ProfileNotFound',
    'BackupNotFound',
    'AlreadyExists',
    'AlreadyInitialized',
    'NoCurrentProfile',
    'PathNotFound',
    'TypeConflict',
    'InvalidPath',
    'InvalidName',
    'ParseError',
    'SettingsNotFound',
    'StorageError',
    'ConfigSchema',
    'FieldSchema',
    'StorePaths',
    'ProfileManager',
    'SettingsManager',
    'BackupManager',
    'ProfileStore',
]
