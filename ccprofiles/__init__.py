"""
ccprofiles package
Named, switchable profiles for a single JSON settings file
"""

__version__ = "0.2.0"
__author__ = "ccprofiles contributors"

from .config import ProfileStore, StorePaths

__all__ = ["ProfileStore", "StorePaths", "__version__"]
