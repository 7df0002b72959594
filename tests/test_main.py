import json
import struct
from pathlib import Path

import base58
import polars as pl
import pytest
import yaml
from solders.pubkey import Pubkey
from solders.signature import Signature

from spl_token_decoder.constants import PROGRAM_ADDRESS
from spl_token_decoder.main import main, slot_from_path


def _block(block_time=1_700_000_000):
    return {
        "blockTime": block_time,
        "parentSlot": 41,
        "transactions": [
            {
                "transaction": {
                    "signatures": [str(Signature.new_unique())],
                    "message": {
                        "accountKeys": [PROGRAM_ADDRESS, str(Pubkey.new_unique()), str(Pubkey.new_unique())],
                        "instructions": [
                            {
                                "programIdIndex": 0,
                                "accounts": [1, 2],
                                "data": base58.b58encode(bytes([7]) + struct.pack("<Q", 5)).decode(),
                            }
                        ],
                    },
                },
                "meta": {"innerInstructions": []},
            }
        ],
    }


@pytest.fixture
def workspace(tmp_path):
    blocks = tmp_path / "blocks"
    blocks.mkdir()
    config = {
        "program": {"address": PROGRAM_ADDRESS},
        "indexer": {"input_path": str(blocks)},
        "output": {"base_path": str(tmp_path / "data")},
    }
    config_path = tmp_path / "config.yml"
    config_path.write_text(yaml.safe_dump(config))
    return tmp_path, blocks, str(config_path)


def test_slot_from_path():
    assert slot_from_path(Path("blocks/block_42.json")) == 42
    with pytest.raises(ValueError):
        slot_from_path(Path("blocks/block_latest.json"))


def test_main_writes_events_per_block(workspace):
    tmp_path, blocks, config_path = workspace
    (blocks / "block_42.json").write_text(json.dumps(_block()))
    (blocks / "block_43.json").write_text(json.dumps({"jsonrpc": "2.0", "id": 1, "result": _block()}))

    main(config_path)

    output = tmp_path / "data" / "spl_token_events" / "slot_0000000xxx"
    df = pl.read_parquet(output / "spl_token_events_slot_0000000042.parquet")
    assert df["instruction_type"].to_list() == ["MintTo"]
    assert df["block_slot"].to_list() == [41]
    assert (output / "spl_token_events_slot_0000000043.parquet").exists()


def test_main_skips_failed_block(workspace):
    tmp_path, blocks, config_path = workspace
    (blocks / "block_42.json").write_text(json.dumps(_block(block_time=None)))
    (blocks / "block_43.json").write_text(json.dumps(_block()))

    main(config_path)

    output = tmp_path / "data" / "spl_token_events" / "slot_0000000xxx"
    assert not (output / "spl_token_events_slot_0000000042.parquet").exists()
    assert (output / "spl_token_events_slot_0000000043.parquet").exists()


def test_main_exits_on_invalid_config(tmp_path):
    config_path = tmp_path / "config.yml"
    config_path.write_text(yaml.safe_dump({"program": {"address": PROGRAM_ADDRESS}}))

    with pytest.raises(SystemExit) as excinfo:
        main(str(config_path))

    assert excinfo.value.code == 1


@pytest.mark.parametrize("response", [
    {"jsonrpc": "2.0", "id": 1, "result": None},
    {"jsonrpc": "2.0", "id": 1, "error": {"code": -32007, "message": "Slot 42 was skipped, or missing due to ledger jump to recent snapshot"}},
])
def test_main_skips_unavailable_block(workspace, response):
    tmp_path, blocks, config_path = workspace
    (blocks / "block_42.json").write_text(json.dumps(response))
    (blocks / "block_43.json").write_text(json.dumps(_block()))

    main(config_path)

    output = tmp_path / "data" / "spl_token_events" / "slot_0000000xxx"
    assert not (output / "spl_token_events_slot_0000000042.parquet").exists()
    assert (output / "spl_token_events_slot_0000000043.parquet").exists()


def test_main_skips_unreadable_block_file(workspace):
    tmp_path, blocks, config_path = workspace
    (blocks / "block_42.json").write_text("{\"result\": ")
    (blocks / "block_43.json").write_text(json.dumps(_block()))

    main(config_path)

    output = tmp_path / "data" / "spl_token_events" / "slot_0000000xxx"
    assert (output / "spl_token_events_slot_0000000043.parquet").exists()


def test_main_resolves_paths_against_config_dir(tmp_path, monkeypatch):
    project = tmp_path / "project"
    (project / "blocks").mkdir(parents=True)
    (project / "blocks" / "block_43.json").write_text(json.dumps(_block()))
    config_path = project / "config.yml"
    config_path.write_text(yaml.safe_dump({
        "program": {"address": PROGRAM_ADDRESS},
        "indexer": {"input_path": "blocks"},
        "output": {"base_path": "data"},
    }))
    monkeypatch.chdir(tmp_path)

    main(str(config_path))

    assert (project / "data" / "spl_token_events" / "slot_0000000xxx" / "spl_token_events_slot_0000000043.parquet").exists()
    assert not (tmp_path / "data").exists()
