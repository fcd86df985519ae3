"""
Utilities package for ccprofiles.
"""

from .logging_config import LoggingConfig
from .file_utils import write_atomic, advisory_lock

__all__ = [
    'LoggingConfig',
    'write_atomic',
    'advisory_lock'
]
