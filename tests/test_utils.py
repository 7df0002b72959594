import pytest
import yaml

from spl_token_decoder.constants import PROGRAM_ADDRESS
from spl_token_decoder.utils import convert_to_date, load_config


@pytest.fixture
def write_config(tmp_path):
    def _write(config):
        path = tmp_path / "config.yml"
        path.write_text(yaml.safe_dump(config))
        return str(path)
    return _write


def test_load_config_fills_defaults(tmp_path, write_config):
    path = write_config({
        "program": {"address": PROGRAM_ADDRESS},
        "indexer": {"input_path": "blocks"},
    })

    config = load_config(path)

    assert config["indexer"] == {"input_path": str(tmp_path / "blocks"), "legacy_event_indexing": True}
    assert config["lookup_tables"] == {"store_type": "memory"}
    assert config["output"] == {"base_path": str(tmp_path / "data")}


def test_load_config_keeps_explicit_values(tmp_path, write_config):
    path = write_config({
        "program": {"address": PROGRAM_ADDRESS},
        "indexer": {"input_path": "in", "legacy_event_indexing": False},
        "lookup_tables": {"store_type": "parquet", "path": "tables.parquet"},
    })

    config = load_config(path)

    assert config["indexer"]["legacy_event_indexing"] is False
    assert config["lookup_tables"] == {"store_type": "parquet", "path": str(tmp_path / "tables.parquet")}


def test_load_config_keeps_absolute_paths(tmp_path, write_config):
    blocks = tmp_path / "elsewhere" / "blocks"
    path = write_config({
        "program": {"address": PROGRAM_ADDRESS},
        "indexer": {"input_path": str(blocks)},
        "output": {"base_path": str(tmp_path / "out")},
    })

    config = load_config(path)

    assert config["indexer"]["input_path"] == str(blocks)
    assert config["output"]["base_path"] == str(tmp_path / "out")


@pytest.mark.parametrize("config", [
    {"indexer": {"input_path": "blocks"}},
    {"program": {"address": PROGRAM_ADDRESS}},
    {"program": {"address": "not-a-key"}, "indexer": {"input_path": "blocks"}},
    {"program": {"address": PROGRAM_ADDRESS}, "indexer": {"input_path": "b", "legacy_event_indexing": "yes"}},
])
def test_load_config_rejects_invalid(write_config, config):
    with pytest.raises(ValueError):
        load_config(write_config(config))


def test_invalid_program_address_keeps_cause(write_config):
    path = write_config({"program": {"address": "not-a-key"}, "indexer": {"input_path": "blocks"}})

    with pytest.raises(ValueError, match="not a public key") as excinfo:
        load_config(path)

    assert excinfo.value.__cause__ is not None


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yml"))


def test_convert_to_date_is_utc():
    assert convert_to_date(0) == "1970-01-01"
    assert convert_to_date(1_700_000_000) == "2023-11-14"
    assert convert_to_date(1_704_067_199) == "2023-12-31"
