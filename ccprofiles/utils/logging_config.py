import logging
from pathlib import Path
from typing import Dict, Optional, Union

ROOT_LOGGER_NAME = "ccprofiles"
LOG_FILE_NAME = "ccp.log"


class LoggingConfig:
    """
    Centralized logging configuration for the profile store.

    All module loggers live under the ``ccprofiles`` namespace and share a single
    file handler writing to ``<root>/logs/ccp.log``. Nothing is written to the
    console; the CLI prints its own user-facing messages.
    """

    _loggers: Dict[str, logging.Logger] = {}
    _log_dir: Optional[Path] = None
    _file_handler: Optional[logging.FileHandler] = None

    @classmethod
    def _root(cls) -> logging.Logger:
        root = logging.getLogger(ROOT_LOGGER_NAME)
        if not root.handlers:
            root.addHandler(logging.NullHandler())
        root.propagate = False
        return root

    @classmethod
    def setup_logging(cls, log_dir: Union[str, Path], level: Union[str, int] = "INFO") -> Path:
        """
        Attach the file handler. Calling again with the same directory only updates the level.

        Args:
            log_dir: Directory that will hold ccp.log
            level: Logging level name or number

        Returns:
            Path: The log file path
        """
        log_dir = Path(log_dir)
        root = cls._root()
        if isinstance(level, str):
            level = logging.getLevelName(level.upper())
            if not isinstance(level, int):
                level = logging.INFO
        root.setLevel(level)

        if cls._log_dir == log_dir and cls._file_handler is not None:
            cls._file_handler.setLevel(level)
            return log_dir / LOG_FILE_NAME

        cls.shutdown()
        log_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_dir / LOG_FILE_NAME, encoding='utf-8')
        file_handler.setLevel(level)
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

        cls._file_handler = file_handler
        cls._log_dir = log_dir
        return log_dir / LOG_FILE_NAME

    @classmethod
    def get_logger(cls, module_name: str) -> logging.Logger:
        """
        Get or create a logger for a specific module.

        Args:
            module_name: Short module name (e.g., 'profile_manager')

        Returns:
            logging.Logger: Child of the ``ccprofiles`` logger
        """
        if module_name in cls._loggers:
            return cls._loggers[module_name]

        cls._root()
        logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{module_name}")
        cls._loggers[module_name] = logger
        return logger

    @classmethod
    def get_current_log_file(cls) -> Optional[Path]:
        if cls._log_dir is None:
            return None
        return cls._log_dir / LOG_FILE_NAME

    @classmethod
    def shutdown(cls) -> None:
        """Detach and close the file handler, if any."""
        if cls._file_handler is not None:
            root = logging.getLogger(ROOT_LOGGER_NAME)
            root.removeHandler(cls._file_handler)
            cls._file_handler.close()
        cls._file_handler = None
        cls._log_dir = None
