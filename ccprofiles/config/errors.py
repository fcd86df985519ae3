"""
Exception hierarchy for the profile store.

Every failure the core reports upward is a subclass of ProfileStoreError and
carries enough context (profile name, dotted path, underlying OS error) for the
CLI layer to render a message without inspecting the filesystem again.
"""

from pathlib import Path
from typing import Optional, Union


class ProfileStoreError(Exception):
    """Base class for all profile store failures."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ProfileNotFound(ProfileStoreError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Profile '{name}' does not exist. Use 'ccp list' to see available profiles.")


class BackupNotFound(ProfileStoreError):
    def __init__(self, name: str, available: Optional[list] = None):
        self.name = name
        self.available = list(available or [])
        if self.available:
            message = f"Backup '{name}' not found. Available backups: {', '.join(self.available)}"
        else:
            message = f"Backup '{name}' not found and no backups available"
        super().__init__(message)


class AlreadyExists(ProfileStoreError):
    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"{kind.capitalize()} '{name}' already exists")


class AlreadyInitialized(ProfileStoreError):
    def __init__(self, profiles_dir: Union[str, Path]):
        self.profiles_dir = Path(profiles_dir)
        super().__init__(f"Profiles directory already initialized: {self.profiles_dir}")


class NoCurrentProfile(ProfileStoreError):
    def __init__(self):
        super().__init__(
            "No profile selected. Pass --profile explicitly or run 'ccp use <profile>' / 'ccp init' first."
        )


class PathNotFound(ProfileStoreError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Key '{path}' is not set")


class TypeConflict(ProfileStoreError):
    """Raised when a dotted path crosses a value that is not a mapping."""

    def __init__(self, path: str, segment: str, detail: str = ""):
        self.path = path
        self.segment = segment
        self.detail = detail or f"'{segment}' is not an object"
        super().__init__(f"Cannot set '{path}': {self.detail}")


class InvalidPath(ProfileStoreError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Invalid key path '{path}': segments must be non-empty")


class InvalidName(ProfileStoreError):
    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid name '{name}': {reason}")


class ParseError(ProfileStoreError):
    def __init__(self, source: str, detail: str):
        self.source = source
        self.detail = detail
        super().__init__(f"Failed to parse JSON from {source}: {detail}")


class SettingsNotFound(ProfileStoreError):
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(f"No settings file found at {self.path}")


class StorageError(ProfileStoreError):
    """Wraps an OSError raised while touching the store on disk."""

    def __init__(self, action: str, path: Union[str, Path], os_error: OSError):
        self.action = action
        self.path = Path(path)
        self.os_error = os_error
        reason = os_error.strerror or str(os_error)
        super().__init__(f"Failed to {action} {self.path}: {reason}")
