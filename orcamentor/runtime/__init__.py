"""Runtime infrastructure for orcamentor.

This package provides process/runtime services including:
- Logging setup via get_logger()
- Path resolution via get_paths(), ProjectPaths
- Settings via load_settings()
- Persistence via AppStore, JsonDirectoryStorage, open_store()

Usage:
    from orcamentor.runtime import get_logger, get_paths, open_store

    logger = get_logger(__name__)
    store = open_store()
    print(len(store.quotes))
"""

from orcamentor.runtime.logging import (
    DEFAULT_LOG_LEVEL,
    LOG_FORMAT,
    LOG_FORMAT_DEBUG,
    configure_logging,
    get_logger,
    set_log_level,
)
from orcamentor.runtime.paths import ProjectPaths, get_paths, set_home
from orcamentor.runtime.settings import Settings, load_settings
from orcamentor.runtime.storage import JsonDirectoryStorage, KeyValueStorage, MemoryStorage, StorageError
from orcamentor.runtime.store import AppStore, RecordNotFound, open_store

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "set_log_level",
    "DEFAULT_LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FORMAT_DEBUG",
    # Paths and settings
    "get_paths",
    "set_home",
    "ProjectPaths",
    "Settings",
    "load_settings",
    # Storage
    "AppStore",
    "RecordNotFound",
    "open_store",
    "KeyValueStorage",
    "JsonDirectoryStorage",
    "MemoryStorage",
    "StorageError",
]
