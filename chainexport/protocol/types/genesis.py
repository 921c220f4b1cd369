# MIT License
# Copyright (c) 2025 Hashborn

"""
Genesis Document Types

Wire layout of the exported genesis (field order is the serialization order):
    app_name, app_version, genesis_time, chain_id, initial_height,
    app_hash, app_state, consensus {params, validators}
"""

import json
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# RFC 3339 with optional fractional seconds of any precision
_RFC3339_RE = re.compile(
    r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(\.\d+)?(Z|[+-]\d{2}:\d{2})$"
)


def format_genesis_time(value: datetime) -> str:
    """Formats a datetime as RFC 3339 in UTC with a 'Z' suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.astimezone(timezone.utc).isoformat()
    return text.replace("+00:00", "Z")


def parse_genesis_time(text: str) -> datetime:
    """
    Parses an RFC 3339 timestamp. Sub-microsecond digits are dropped since
    datetime cannot hold them.
    """
    match = _RFC3339_RE.match(text)
    if not match:
        raise ValueError(f"Invalid genesis_time {text!r}: expected RFC 3339")
    base, fraction, zone = match.groups()
    if fraction:
        base += "." + fraction[1:7].ljust(6, "0")
    if zone == "Z":
        zone = "+00:00"
    return datetime.fromisoformat(base + zone)


_JSON_WHITESPACE = b" \t\n\r"


def _reject_constant(name: str):
    raise ValueError(f"invalid JSON constant {name}")


def compact_json(raw: bytes) -> bytes:
    """
    Checks that raw is valid JSON and strips insignificant whitespace.

    Only whitespace outside strings is dropped; numbers, key order and
    duplicate keys stay exactly as written.

    Raises:
        ValueError: If raw is not valid JSON
    """
    json.loads(raw, parse_constant=_reject_constant)

    out = bytearray()
    in_string = False
    escaped = False
    for byte in raw:
        if in_string:
            out.append(byte)
            if escaped:
                escaped = False
            elif byte == 0x5C:  # backslash
                escaped = True
            elif byte == 0x22:  # quote
                in_string = False
        elif byte == 0x22:
            in_string = True
            out.append(byte)
        elif byte not in _JSON_WHITESPACE:
            out.append(byte)
    return bytes(out)


class GenesisValidator(BaseModel):
    address: str                                            # Hex consensus address
    pub_key: Dict[str, Any] = Field(default_factory=dict)   # {"type": ..., "value": ...}
    power: int                                              # Voting power
    name: str = ""


class ConsensusGenesis(BaseModel):
    params: Optional[Dict[str, Any]] = None
    validators: List[GenesisValidator] = Field(default_factory=list)


class GenesisDocument(BaseModel):
    """
    Chain genesis document.

    genesis_time is kept as the exact RFC 3339 text it was read with, so a
    re-export never changes its precision or spelling. app_state holds the
    compact raw JSON payload and is written out byte for byte.
    """
    model_config = ConfigDict(frozen=True)

    app_name: str = ""
    app_version: str = ""
    genesis_time: str
    chain_id: str
    initial_height: int = 1
    app_hash: str = ""
    app_state: Optional[bytes] = None
    consensus: ConsensusGenesis = Field(default_factory=ConsensusGenesis)

    @model_validator(mode="before")
    @classmethod
    def _upgrade_legacy_layout(cls, data: Any) -> Any:
        # Older consensus-engine genesis files keep params/validators at top level
        if isinstance(data, dict) and "consensus" not in data:
            if "consensus_params" in data or "validators" in data:
                data = dict(data)
                data["consensus"] = {
                    "params": data.pop("consensus_params", None),
                    "validators": data.pop("validators", None) or [],
                }
        return data

    @field_validator("genesis_time", mode="before")
    @classmethod
    def _check_genesis_time(cls, value: Union[str, datetime]) -> str:
        if isinstance(value, datetime):
            return format_genesis_time(value)
        if not isinstance(value, str):
            raise ValueError("genesis_time must be an RFC 3339 string")
        parse_genesis_time(value)
        return value

    @field_validator("app_state", mode="before")
    @classmethod
    def _raw_app_state(cls, value: Any) -> Optional[bytes]:
        if value is None:
            return None
        if isinstance(value, (bytes, bytearray)):
            return compact_json(bytes(value)) if value else None
        # Already decoded (e.g. read from a genesis file): re-encode compactly
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode("utf-8")

    @field_validator("chain_id")
    @classmethod
    def _check_chain_id(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("chain_id must not be empty")
        return value

    @property
    def genesis_datetime(self) -> datetime:
        return parse_genesis_time(self.genesis_time)


class ExportedState(BaseModel):
    """Point-in-time application state produced by an exporter."""
    app_state: bytes                                  # Raw JSON payload
    height: int
    consensus_params: Optional[Dict[str, Any]] = None
    validators: List[GenesisValidator] = Field(default_factory=list)
