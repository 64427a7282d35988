"""Key-value persistence for entity collections.

Each collection lives under one key as a JSON document:

    data/
    ├── sp_services.json
    ├── sp_products.json
    ├── sp_clients.json
    ├── sp_quotes.json
    ├── sp_receipts.json
    ├── sp_commitments.json
    ├── sp_appointments.json
    ├── sp_categories.json
    ├── sp_prod_categories.json
    └── sp_profile.json
"""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol, TypeVar

from orcamentor.runtime.logging import get_logger

logger = get_logger(__name__)

SERVICES_KEY = "sp_services"
PRODUCTS_KEY = "sp_products"
CLIENTS_KEY = "sp_clients"
QUOTES_KEY = "sp_quotes"
RECEIPTS_KEY = "sp_receipts"
COMMITMENTS_KEY = "sp_commitments"
APPOINTMENTS_KEY = "sp_appointments"
CATEGORIES_KEY = "sp_categories"
PRODUCT_CATEGORIES_KEY = "sp_prod_categories"
PROFILE_KEY = "sp_profile"

ALL_KEYS = (
    SERVICES_KEY,
    PRODUCTS_KEY,
    CLIENTS_KEY,
    QUOTES_KEY,
    RECEIPTS_KEY,
    COMMITMENTS_KEY,
    APPOINTMENTS_KEY,
    CATEGORIES_KEY,
    PRODUCT_CATEGORIES_KEY,
    PROFILE_KEY,
)

T = TypeVar("T")


class StorageError(OSError):
    """A value could not be written to the backing store."""


class KeyValueStorage(Protocol):
    """Flat namespace of named JSON documents."""

    def read(self, key: str) -> str | None: ...

    def write(self, key: str, text: str) -> None: ...


class MemoryStorage:
    """In-process storage, used by tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self.values.get(key)

    def write(self, key: str, text: str) -> None:
        self.values[key] = text


class JsonDirectoryStorage:
    """One ``<key>.json`` file per key inside ``directory``."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, key: str, text: str) -> None:
        """Write through a temp file so a crash never leaves half a document."""
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self.directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(text)
                os.replace(tmp_name, self._path(key))
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {key}: {e}") from e
        logger.debug("Wrote %s (%d bytes)", self._path(key), len(text))


def load_json(storage: KeyValueStorage, key: str, fallback: Any) -> Any:
    """
    Read and parse one key.

    Any failure (unreadable file, corrupt JSON) is logged and yields
    ``fallback`` so that one bad key never blocks loading the others.
    """
    try:
        text = storage.read(key)
    except OSError as e:
        logger.error("Failed to read %s: %s", key, e)
        return fallback
    if text is None:
        return fallback
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        logger.error("Corrupt JSON in %s: %s", key, e)
        return fallback


def load_records(storage: KeyValueStorage, key: str, parse: Callable[[dict[str, Any]], T]) -> list[T]:
    """Load a collection key, skipping individual records that fail to parse."""
    raw = load_json(storage, key, [])
    if not isinstance(raw, list):
        logger.error("Expected a list in %s, got %s; using empty collection", key, type(raw).__name__)
        return []

    records: list[T] = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, dict):
            logger.warning("Skipping non-object entry %d in %s", index, key)
            continue
        try:
            records.append(parse(entry))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping unreadable entry %d in %s: %s", index, key, e)
    return records


def dump_json(storage: KeyValueStorage, key: str, value: Any) -> None:
    storage.write(key, json.dumps(value, ensure_ascii=False))
