# MIT License
# Copyright (c) 2025 Hashborn

"""
Application store opening.

Drivers are registered per backend. The built-in registry maps every
accepted backend to KVStore, a SQLite-backed key/value file, so a node home
can be exported without native bindings; host applications replace entries
with their own drivers.
"""

import logging
import os
import sqlite3
import threading
from typing import Callable, Dict, Iterator, Optional, Protocol, Tuple

from ...protocol.config.params import APP_DB_NAME, DATA_DIR
from ...protocol.types.common import BackendType, StoreOpenError

logger = logging.getLogger(__name__)


class StoreHandle(Protocol):
    def close(self) -> None: ...


# Open(name, directory) -> handle
DriverFn = Callable[[str, str], StoreHandle]


class KVStore:
    def __init__(self, db_path: str):
        self.db_path = db_path
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self.cursor = self.conn.cursor()
        self._lock = threading.Lock()
        self._init_db()

    @classmethod
    def open(cls, name: str, directory: str) -> "KVStore":
        # <name>.db belongs to the native engines
        os.makedirs(directory, exist_ok=True)
        native_dir = os.path.join(directory, f"{name}.db")
        if os.path.isdir(native_dir):
            logger.warning(
                f"Found native {name} DB at {native_dir}; the built-in store does not read it. "
                f"Register a driver for its backend to export its state."
            )
        return cls(os.path.join(directory, f"{name}.sqlite"))

    def _init_db(self):
        with self._lock:
            self.cursor.execute('''
                CREATE TABLE IF NOT EXISTS kv (
                    key BLOB PRIMARY KEY,
                    value BLOB
                )
            ''')
            self.conn.commit()

    def get(self, key: bytes) -> Optional[bytes]:
        with self._lock:
            self.cursor.execute('SELECT value FROM kv WHERE key = ?', (key,))
            row = self.cursor.fetchone()
            return row[0] if row else None

    def has(self, key: bytes) -> bool:
        return self.get(key) is not None

    def set(self, key: bytes, value: bytes):
        with self._lock:
            self.cursor.execute('INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)', (key, value))
            self.conn.commit()

    def delete(self, key: bytes):
        with self._lock:
            self.cursor.execute('DELETE FROM kv WHERE key = ?', (key,))
            self.conn.commit()

    def iterate_prefix(self, prefix: bytes) -> Iterator[Tuple[bytes, bytes]]:
        """Yields (key, value) pairs whose key starts with prefix, in key order."""
        with self._lock:
            rows = self.conn.execute(
                'SELECT key, value FROM kv WHERE substr(key, 1, ?) = ? ORDER BY key',
                (len(prefix), prefix),
            ).fetchall()
        for key, value in rows:
            yield bytes(key), bytes(value)

    def close(self):
        with self._lock:
            self.conn.close()


class DriverRegistry:
    def __init__(self, drivers: Optional[Dict[BackendType, DriverFn]] = None):
        self._drivers: Dict[BackendType, DriverFn] = dict(drivers or {})

    @classmethod
    def with_defaults(cls) -> "DriverRegistry":
        return cls({backend: KVStore.open for backend in BackendType})

    def register(self, backend: BackendType, driver: DriverFn):
        self._drivers[backend] = driver

    def get(self, backend: BackendType) -> Optional[DriverFn]:
        return self._drivers.get(backend)


def open_db(root_dir: str, backend: BackendType, drivers: Optional[DriverRegistry] = None) -> StoreHandle:
    """
    Open the application DB under <root_dir>/data.

    Raises:
        StoreOpenError: If no driver is registered for the backend or it fails
    """
    registry = drivers if drivers is not None else DriverRegistry.with_defaults()
    driver = registry.get(backend)
    if driver is None:
        raise StoreOpenError(f"no storage driver registered for backend {backend.value!r}")

    data_dir = os.path.join(root_dir, DATA_DIR)
    logger.debug(f"Opening {APP_DB_NAME} DB ({backend.value}) in {data_dir}")
    try:
        return driver(APP_DB_NAME, data_dir)
    except (OSError, sqlite3.Error) as e:
        raise StoreOpenError(f"failed to open {APP_DB_NAME} DB in {data_dir}: {e}") from e
