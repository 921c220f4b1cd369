# MIT License
# Copyright (c) 2025 Hashborn

from dataclasses import dataclass
from ... import __version__
from ..types.common import BackendType

# Build identity stamped into every exported genesis
APP_NAME = "chainexportd"
APP_VERSION = __version__

# Node home layout
CONFIG_DIR = "config"
DATA_DIR = "data"
GENESIS_FILENAME = "genesis.json"
APP_CONFIG_FILENAME = "app.yaml"
NODE_CONFIG_FILENAME = "config.yaml"
APP_DB_NAME = "application"
HOME_ENV_VAR = "CHAINEXPORT_HOME"
DEFAULT_HOME = "~/.chainexport"

# Option keys (app.yaml / config.yaml)
OPT_APP_DB_BACKEND = "app-db-backend"
OPT_DB_BACKEND = "db_backend"

# Storage backends
DEFAULT_BACKEND = BackendType.GOLEVELDB
# Dropped when the node moved off the legacy db wrapper; must never resolve
RETIRED_BACKENDS = frozenset({"cleveldb", "badgerdb", "boltdb"})

# Export
LATEST_HEIGHT = -1
COPY_BUFFER_SIZE = 32 * 1024  # 32 KiB
GENESIS_FILE_MODE = 0o644


@dataclass(frozen=True)
class BuildInfo:
    name: str
    version: str


CURRENT_BUILD = BuildInfo(name=APP_NAME, version=APP_VERSION)
