"""
Storage Layer.

This package handles all data persistence: the configuration file, the media
library index and saving videos into the media directory.
"""

from .config_manager import ConfigManager
from .media_library import MediaLibrary
from .media_store import PersistenceSink

__all__ = ["ConfigManager", "MediaLibrary", "PersistenceSink"]
