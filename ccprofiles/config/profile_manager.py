"""
Profile repository: one JSON document per profile plus the current-profile pointer.

This module provides the ProfileManager class which owns ``profiles/`` on disk.
All writes go through an atomic temp-file-and-rename so a crash never leaves a
half-written profile or pointer behind.
"""

from typing import List, Optional
from pathlib import Path

from .document import Document
from .config_schema import validate_name
from .errors import (
    ProfileNotFound,
    AlreadyExists,
    AlreadyInitialized,
    InvalidName,
    StorageError,
)
from .paths import StorePaths, PROFILE_SUFFIX
from ..utils.file_utils import write_atomic
from ..utils.logging_config import LoggingConfig


DEFAULT_PROFILE = "default"


def list_documents(directory: Path) -> List[str]:
    """Sorted stems of the visible ``*.json`` files in a directory."""
    if not directory.is_dir():
        return []
    try:
        names = [
            entry.stem
            for entry in directory.iterdir()
            if entry.suffix == PROFILE_SUFFIX and not entry.name.startswith(".") and entry.is_file()
        ]
    except OSError as e:
        raise StorageError("list", directory, e)
    return sorted(names)


def read_document(path: Path) -> Document:
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise StorageError("read", path, e)
    return Document.parse(raw, source=str(path))


def write_document(path: Path, document: Document) -> None:
    try:
        write_atomic(path, document.serialize())
    except OSError as e:
        raise StorageError("write", path, e)


class ProfileManager:
    """
    Profile repository.

    This class handles all aspects of profile storage including:
    - Listing, loading and saving profile documents
    - Creating, copying, renaming and deleting profiles
    - Reading and writing the current-profile pointer
    - Seeding the initial ``default`` profile
    """

    def __init__(self, paths: StorePaths):
        """
        Initialize the ProfileManager.

        Args:
            paths: Store layout; only ``profiles/`` is touched by this class
        """
        self.paths = paths
        self.profiles_directory = paths.profiles_dir
        self.logger = LoggingConfig.get_logger('profile_manager')

    def ensure_dirs(self) -> None:
        for directory in (self.paths.profiles_dir, self.paths.backups_dir):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageError("create directory", directory, e)

    def list_profiles(self) -> List[str]:
        """
        Get all profile names.

        Returns:
            Lexicographically sorted list of profile names
        """
        return list_documents(self.profiles_directory)

    def exists(self, name: str) -> bool:
        validate_name(name)
        return self.paths.profile_path(name).is_file()

    def is_initialized(self) -> bool:
        return bool(self.list_profiles())

    def load(self, name: str) -> Document:
        """
        Load a profile document.

        Raises:
            ProfileNotFound: If no profile with that name exists
            ParseError: If the profile file is not a JSON object
        """
        if not self.exists(name):
            raise ProfileNotFound(name)
        self.logger.debug(f"Loading profile '{name}'")
        return read_document(self.paths.profile_path(name))

    def save(self, name: str, document: Document) -> Path:
        """Atomically write a profile document, creating the directory if needed."""
        validate_name(name)
        path = self.paths.profile_path(name)
        write_document(path, document)
        self.logger.info(f"Saved profile '{name}' to {path}")
        return path

    def create(self, name: str, document: Optional[Document] = None, overwrite: bool = False) -> Path:
        """
        Create a new profile.

        Args:
            name: Name for the new profile
            document: Initial content (empty document if None)
            overwrite: Replace an existing profile instead of failing

        Raises:
            AlreadyExists: If the profile exists and overwrite is False
        """
        if self.exists(name) and not overwrite:
            raise AlreadyExists("profile", name)
        path = self.save(name, document if document is not None else Document())
        self.logger.info(f"Created profile '{name}'")
        return path

    def delete(self, name: str) -> None:
        """
        Delete a profile. If it was the current profile the pointer is cleared;
        no other profile is picked automatically.
        """
        if not self.exists(name):
            raise ProfileNotFound(name)

        was_current = self._read_pointer() == name
        path = self.paths.profile_path(name)
        try:
            path.unlink()
        except OSError as e:
            raise StorageError("delete", path, e)

        if was_current:
            self.clear_current()
        self.logger.info(f"Deleted profile: {name}")

    def copy(self, source: str, destination: str) -> Path:
        document = self.load(source)
        path = self.create(destination, document)
        self.logger.info(f"Copied profile '{source}' to '{destination}'")
        return path

    def rename(self, old: str, new: str) -> Path:
        """
        Rename a profile, keeping the current pointer attached to it.

        The new file is written and read back before anything else changes;
        the old file is removed last, so an interruption leaves either both
        profiles or only the renamed one.
        """
        validate_name(new)
        document = self.load(old)
        if self.exists(new):
            raise AlreadyExists("profile", new)

        path = self.save(new, document)
        if self.load(new) != document:
            raise StorageError("verify", path, OSError(f"content of '{new}' does not match '{old}'"))

        if self._read_pointer() == old:
            self.set_current_name(new)

        old_path = self.paths.profile_path(old)
        try:
            old_path.unlink()
        except OSError as e:
            raise StorageError("delete", old_path, e)

        self.logger.info(f"Renamed profile '{old}' to '{new}'")
        return path

    def _read_pointer(self) -> Optional[str]:
        pointer = self.paths.current_profile_file
        try:
            content = pointer.read_text(encoding='utf-8')
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError("read", pointer, e)
        name = content.strip()
        return name or None

    def get_current_name(self) -> Optional[str]:
        """
        Get the current profile name.

        A pointer naming a profile that no longer exists is cleared and reported
        as no current profile.

        Returns:
            Profile name, or None if no profile is current
        """
        name = self._read_pointer()
        if name is None:
            return None

        try:
            present = self.exists(name)
        except InvalidName:
            present = False

        if not present:
            self.logger.warning(f"Current pointer names missing profile '{name}', clearing it")
            self.clear_current()
            return None
        return name

    def set_current_name(self, name: str) -> None:
        """
        Point the current-profile pointer at ``name``.

        Raises:
            ProfileNotFound: If the profile does not exist; the pointer is unchanged
        """
        if not self.exists(name):
            raise ProfileNotFound(name)
        pointer = self.paths.current_profile_file
        try:
            write_atomic(pointer, f"{name}\n".encode('utf-8'))
        except OSError as e:
            raise StorageError("write", pointer, e)
        self.logger.info(f"Current profile set to '{name}'")

    def clear_current(self) -> None:
        pointer = self.paths.current_profile_file
        try:
            pointer.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageError("delete", pointer, e)
        self.logger.info("Current profile cleared")

    def init(self, seed: Optional[Document] = None, force: bool = False) -> Path:
        """
        Seed the ``default`` profile and make it current.

        Args:
            seed: Document to seed from (usually the live settings); empty if None
            force: Re-seed even when profiles already exist

        Returns:
            Path of the default profile

        Raises:
            AlreadyInitialized: If profiles exist and force is False
        """
        self.ensure_dirs()
        if self.is_initialized() and not force:
            raise AlreadyInitialized(self.profiles_directory)

        path = self.create(DEFAULT_PROFILE, seed if seed is not None else Document(), overwrite=True)
        self.set_current_name(DEFAULT_PROFILE)
        self.logger.info(f"Initialized profiles directory {self.profiles_directory}")
        return path
