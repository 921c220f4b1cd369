# MIT License
# Copyright (c) 2025 Hashborn

"""
Application DB backend selection.
"""

from typing import Optional

from ...protocol.config.params import DEFAULT_BACKEND, RETIRED_BACKENDS
from ...protocol.types.common import BackendType, UnsupportedBackendError


def accepted_backends() -> str:
    return ", ".join(f'"{b.value}"' for b in BackendType)


def resolve_backend(app_db_backend: Optional[str], db_backend: Optional[str]) -> BackendType:
    """
    Pick the backend for the application DB.

    The app-specific setting wins over the node-wide one; with neither set
    the default backend is used.

    Raises:
        UnsupportedBackendError: If the chosen name is retired or unknown
    """
    name = app_db_backend or ""
    if len(name) == 0:
        name = db_backend or ""

    if len(name) == 0:
        return DEFAULT_BACKEND

    if name in RETIRED_BACKENDS:
        raise UnsupportedBackendError(
            f"invalid app-db-backend {name!r}, use {accepted_backends()} instead"
        )

    try:
        return BackendType(name)
    except ValueError:
        raise UnsupportedBackendError(
            f"unknown app-db-backend {name!r}, use {accepted_backends()} instead"
        ) from None

