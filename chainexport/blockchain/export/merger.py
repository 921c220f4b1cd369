# MIT License
# Copyright (c) 2025 Hashborn

"""
Genesis merging and encoding.

The merged document keeps the source chain's identity (chain_id,
genesis_time, app_hash) and takes everything else from the export and the
running build. The exported app state is never decoded: it is checked,
compacted and written out as the exporter produced it.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from ...protocol.config.params import CURRENT_BUILD, BuildInfo
from ...protocol.types.common import GenesisDecodeError, GenesisReadError, SerializationError
from ...protocol.types.genesis import ConsensusGenesis, ExportedState, GenesisDocument, compact_json

logger = logging.getLogger(__name__)


def load_genesis(path: Union[str, Path]) -> GenesisDocument:
    """
    Read and validate a genesis file.

    Raises:
        GenesisReadError: If the file cannot be read
        GenesisDecodeError: If the file is not a valid genesis document
    """
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise GenesisReadError(f"failed to read genesis from {path}: {e}") from e
    try:
        return GenesisDocument.model_validate_json(data)
    except ValidationError as e:
        raise GenesisDecodeError(f"failed to decode genesis from {path}: {e}") from e


def merge_genesis(
    source: GenesisDocument,
    exported: ExportedState,
    build: Optional[BuildInfo] = None,
) -> GenesisDocument:
    """
    Build a new genesis from the source document and exported state.

    Raises:
        SerializationError: If the exported app state is not valid JSON
    """
    build = build or CURRENT_BUILD

    app_state = None
    if exported.app_state:
        try:
            app_state = compact_json(exported.app_state)
        except ValueError as e:
            raise SerializationError(f"exported app state is not valid JSON: {e}") from e

    return GenesisDocument(
        app_name=build.name,
        app_version=build.version,
        genesis_time=source.genesis_time,
        chain_id=source.chain_id,
        initial_height=exported.height,
        app_hash=source.app_hash,
        app_state=app_state,
        consensus=ConsensusGenesis(
            params=exported.consensus_params,
            validators=list(exported.validators),
        ),
    )


def _encode_value(value) -> bytes:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode("utf-8")


def encode_genesis(doc: GenesisDocument) -> bytes:
    """
    Serialize a genesis document to compact JSON.

    Top-level keys follow field declaration order, app_state is spliced in
    as raw bytes and nested records keep their own order, so equal documents
    always encode to equal bytes.

    Raises:
        SerializationError: If the document holds values JSON cannot express
    """
    data = doc.model_dump(exclude={"app_state"})
    parts = []
    try:
        for name in GenesisDocument.model_fields:
            if name == "app_state":
                raw = doc.app_state if doc.app_state is not None else b"null"
            else:
                raw = _encode_value(data[name])
            parts.append(_encode_value(name) + b":" + raw)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"failed to encode genesis: {e}") from e
    return b"{" + b",".join(parts) + b"}"
