# MIT License
# Copyright (c) 2025 Hashborn

from .backends import resolve_backend
from .db import DriverRegistry, KVStore, open_db

__all__ = ["DriverRegistry", "KVStore", "open_db", "resolve_backend"]
