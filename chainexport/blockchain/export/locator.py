# MIT License
# Copyright (c) 2025 Hashborn

from pathlib import Path

from ...protocol.config.params import CONFIG_DIR, GENESIS_FILENAME
from ...protocol.types.common import GenesisNotFoundError


def genesis_path(root_dir: str) -> Path:
    return Path(root_dir) / CONFIG_DIR / GENESIS_FILENAME


def locate_genesis(root_dir: str) -> Path:
    """
    Returns the node's genesis file path.

    Raises:
        GenesisNotFoundError: If the file does not exist
    """
    path = genesis_path(root_dir)
    if not path.is_file():
        raise GenesisNotFoundError(
            f"genesis file not found at {path}"
        )
    return path
