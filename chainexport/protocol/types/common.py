# MIT License
# Copyright (c) 2025 Hashborn

from enum import Enum


class BackendType(str, Enum):
    GOLEVELDB = "goleveldb"
    PEBBLEDB = "pebbledb"
    ROCKSDB = "rocksdb"


class ExportPath(str, Enum):
    VERBATIM_COPY = "verbatim_copy"        # No exporter wired in: stream genesis file as-is
    DELEGATED_EXPORT = "delegated_export"  # Exporter computes state, merged into new genesis


class ExportError(Exception):
    pass


class GenesisNotFoundError(ExportError, FileNotFoundError):
    pass


class GenesisReadError(ExportError):
    pass


class GenesisDecodeError(ExportError):
    pass


class UnsupportedBackendError(ExportError, ValueError):
    pass


class StoreOpenError(ExportError):
    pass


class ExportFailedError(ExportError):
    pass


class SerializationError(ExportError):
    pass


class WriteError(ExportError):
    pass
