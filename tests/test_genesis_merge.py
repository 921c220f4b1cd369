# MIT License
# Copyright (c) 2025 Hashborn

"""
Genesis Merge Tests

Covers identity carry-over, build stamping, legacy layout upgrade and
deterministic encoding.
"""

import json
import pytest

from chainexport.blockchain.export.merger import encode_genesis, load_genesis, merge_genesis
from chainexport.protocol.config.params import CURRENT_BUILD, BuildInfo
from chainexport.protocol.types.common import GenesisDecodeError, GenesisReadError, SerializationError
from chainexport.protocol.types.genesis import ExportedState, GenesisDocument, compact_json

SOURCE = {
    "app_name": "legacyd",
    "app_version": "0.9.0",
    "genesis_time": "2024-03-01T12:00:00.123456789Z",
    "chain_id": "testchain-1",
    "initial_height": 1,
    "app_hash": "",
    "app_state": {"bank": {"balances": []}},
    "consensus": {"params": {"block": {"max_bytes": "1048576"}}, "validators": []},
}

VALIDATOR = {
    "address": "5A2E3C0B9F1D4E6A7B8C9D0E1F2A3B4C5D6E7F80",
    "pub_key": {"type": "tendermint/PubKeyEd25519", "value": "cOQZvh/h9ZioSeUMZB/1Vy1Xo5x2sjrVjlE/qHnYifM="},
    "power": "100",
    "name": "val-0",
}


@pytest.fixture
def source():
    return GenesisDocument.model_validate(SOURCE)


@pytest.fixture
def exported():
    return ExportedState(
        app_state=json.dumps({"bank": {"balances": [{"address": "a", "coins": []}]}, "staking": {}}).encode(),
        height=4521,
        consensus_params={"block": {"max_bytes": "2097152", "max_gas": "-1"}},
        validators=[VALIDATOR],
    )


def test_merge_stamps_current_build(source, exported):
    merged = merge_genesis(source, exported)

    assert merged.app_name == CURRENT_BUILD.name
    assert merged.app_version == CURRENT_BUILD.version
    assert merged.app_name != "legacyd"


def test_merge_uses_given_build(source, exported):
    merged = merge_genesis(source, exported, BuildInfo(name="simd", version="2.1.0"))

    assert merged.app_name == "simd"
    assert merged.app_version == "2.1.0"


def test_merge_carries_chain_identity(source, exported):
    merged = merge_genesis(source, exported)

    assert merged.chain_id == "testchain-1"
    assert merged.genesis_time == "2024-03-01T12:00:00.123456789Z"
    assert merged.app_hash == source.app_hash


def test_merge_takes_state_from_export(source, exported):
    merged = merge_genesis(source, exported)

    assert merged.initial_height == 4521
    assert json.loads(merged.app_state)["staking"] == {}
    assert merged.consensus.params == {"block": {"max_bytes": "2097152", "max_gas": "-1"}}
    assert [v.name for v in merged.consensus.validators] == ["val-0"]
    assert merged.consensus.validators[0].power == 100


def test_merge_does_not_touch_inputs(source, exported):
    before = source.model_dump()
    merge_genesis(source, exported)
    assert source.model_dump() == before


def test_encode_is_deterministic(source, exported):
    first = encode_genesis(merge_genesis(source, exported))
    second = encode_genesis(merge_genesis(source, exported))
    assert first == second


def test_encode_field_order(source, exported):
    data = json.loads(encode_genesis(merge_genesis(source, exported)))

    assert list(data.keys()) == [
        "app_name",
        "app_version",
        "genesis_time",
        "chain_id",
        "initial_height",
        "app_hash",
        "app_state",
        "consensus",
    ]
    assert list(data["consensus"].keys()) == ["params", "validators"]


def test_invalid_app_state_is_serialization_error(source):
    bad = ExportedState(app_state=b"{not json", height=1)
    with pytest.raises(SerializationError):
        merge_genesis(source, bad)


def test_empty_app_state_encodes_as_null(source):
    merged = merge_genesis(source, ExportedState(app_state=b"", height=0))
    assert json.loads(encode_genesis(merged))["app_state"] is None


def test_non_finite_consensus_param_is_serialization_error(source):
    merged = merge_genesis(
        source, ExportedState(app_state=b"{}", height=1, consensus_params={"ratio": float("inf")})
    )
    with pytest.raises(SerializationError):
        encode_genesis(merged)


def test_app_state_bytes_survive_unchanged(source):
    raw = b'{"mint":{"inflation":"0.13","rate":1.10,"big":1e400}}'
    out = encode_genesis(merge_genesis(source, ExportedState(app_state=raw, height=5)))

    assert b'"app_state":' + raw + b',"consensus":' in out


def test_app_state_trailing_zero_is_kept(source):
    out = encode_genesis(merge_genesis(source, ExportedState(app_state=b'{"x":1.10}', height=5)))
    assert b'"app_state":{"x":1.10}' in out


def test_app_state_whitespace_is_compacted(source):
    raw = b'{\n  "bank": {"denom": "u atom",\t"supply": [ 1, 2 ]}\n}\n'
    out = encode_genesis(merge_genesis(source, ExportedState(app_state=raw, height=5)))
    assert b'"app_state":{"bank":{"denom":"u atom","supply":[1,2]}}' in out


def test_app_state_duplicate_keys_are_kept(source):
    raw = b'{"a":1,"a":2}'
    out = encode_genesis(merge_genesis(source, ExportedState(app_state=raw, height=5)))
    assert b'"app_state":{"a":1,"a":2}' in out


def test_app_state_escaped_quotes_are_preserved():
    assert compact_json(b'{"k": "say \\"hi\\" "}') == b'{"k":"say \\"hi\\" "}'


def test_app_state_nan_is_rejected(source):
    with pytest.raises(SerializationError):
        merge_genesis(source, ExportedState(app_state=b'{"x": NaN}', height=5))


def test_load_genesis_on_directory_is_read_error(tmp_path):
    with pytest.raises(GenesisReadError):
        load_genesis(tmp_path)


def test_legacy_layout_is_upgraded():
    legacy = {
        "genesis_time": "2023-01-01T00:00:00Z",
        "chain_id": "old-1",
        "initial_height": "1",
        "consensus_params": {"block": {"max_bytes": "22020096"}},
        "validators": [VALIDATOR],
        "app_hash": "",
        "app_state": {},
    }
    doc = GenesisDocument.model_validate(legacy)

    assert doc.initial_height == 1
    assert doc.consensus.params == {"block": {"max_bytes": "22020096"}}
    assert doc.consensus.validators[0].address == VALIDATOR["address"]


def test_genesis_time_must_be_rfc3339():
    with pytest.raises(ValueError):
        GenesisDocument.model_validate({**SOURCE, "genesis_time": "yesterday"})


def test_genesis_datetime_parses_nanoseconds(source):
    when = source.genesis_datetime
    assert (when.year, when.month, when.day) == (2024, 3, 1)
    assert when.microsecond == 123456


def test_load_genesis_rejects_garbage(tmp_path):
    path = tmp_path / "genesis.json"
    path.write_text("this is not json")
    with pytest.raises(GenesisDecodeError):
        load_genesis(path)


def test_load_genesis_rejects_missing_chain_id(tmp_path):
    path = tmp_path / "genesis.json"
    path.write_text(json.dumps({**SOURCE, "chain_id": ""}))
    with pytest.raises(GenesisDecodeError):
        load_genesis(path)
