# MIT License
# Copyright (c) 2025 Hashborn

import hashlib


def new_sha256():
    """Returns an incremental SHA256 hasher for streamed payloads."""
    return hashlib.sha256()
