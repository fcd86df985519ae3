"""
Store layout and runtime configuration.

All locations are derived from a single root directory (``~/.claude`` by default):

    settings.json            live settings read by the application
    profiles/.current        name of the current profile
    profiles/<name>.json     one document per profile
    backups/<name>.json      one document per backup
    logs/ccp.log             operation log
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union
import os

import dotenv


CURRENT_POINTER_NAME = ".current"
LOCK_FILE_NAME = ".lock"
PROFILE_SUFFIX = ".json"

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass
class StorePaths:
    """Resolved filesystem locations plus the behaviour switches read from the environment."""

    root: Path
    use_locking: bool = False
    auto_backup: bool = True
    log_level: str = "INFO"

    def __post_init__(self):
        self.root = Path(self.root).expanduser().resolve()

    @property
    def settings_file(self) -> Path:
        return self.root / "settings.json"

    @property
    def profiles_dir(self) -> Path:
        return self.root / "profiles"

    @property
    def backups_dir(self) -> Path:
        return self.root / "backups"

    @property
    def logs_dir(self) -> Path:
        return self.root / "logs"

    @property
    def current_profile_file(self) -> Path:
        return self.profiles_dir / CURRENT_POINTER_NAME

    @property
    def lock_file(self) -> Path:
        return self.profiles_dir / LOCK_FILE_NAME

    def profile_path(self, name: str) -> Path:
        return self.profiles_dir / f"{name}{PROFILE_SUFFIX}"

    def backup_path(self, name: str) -> Path:
        return self.backups_dir / f"{name}{PROFILE_SUFFIX}"

    @classmethod
    def from_env(
        cls,
        config_dir: Optional[Union[str, Path]] = None,
        env_file: Optional[Union[str, Path]] = None
    ) -> 'StorePaths':
        """
        Build the store layout from environment variables.

        A ``.env`` file in the working directory (or ``env_file``) is loaded first
        without overriding variables that are already set.

        Args:
            config_dir: Explicit root directory; wins over the environment
            env_file: Optional path to a dotenv file

        Returns:
            StorePaths instance
        """
        dotenv.load_dotenv(env_file or dotenv.find_dotenv(usecwd=True), override=False)

        if config_dir is None:
            config_dir = os.getenv("CCP_CONFIG_DIR") or os.getenv("CLAUDE_CONFIG_DIR")
        if not config_dir:
            config_dir = Path.home() / ".claude"

        return cls(
            root=Path(config_dir),
            use_locking=_env_flag("CCP_LOCKING", False),
            auto_backup=_env_flag("CCP_AUTO_BACKUP", True),
            log_level=(os.getenv("CCP_LOG_LEVEL") or "INFO").upper(),
        )
