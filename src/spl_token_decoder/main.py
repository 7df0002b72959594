import json
import sys
from pathlib import Path

from spl_token_decoder.address_resolver import get_lookup_repository
from spl_token_decoder.block_walker import BlockWalker
from spl_token_decoder.data_store import events_to_dataframe, write_df_to_parquet
from spl_token_decoder.exceptions import BlockError
from spl_token_decoder.rpc_block import block_from_rpc_json
from spl_token_decoder.utils import logger, load_config

EVENTS_DATA_TYPE = "spl_token_events"

def slot_from_path(path: Path) -> int:
    """Extract the slot from a block file named block_<slot>.json."""
    try:
        return int(path.stem.split("_")[-1])
    except ValueError:
        raise ValueError(f"Cannot determine slot from file name: {path.name}")

def process_block_file(walker: BlockWalker, path: Path, base_path: str) -> str:
    slot = slot_from_path(path)
    with open(path) as f:
        block = block_from_rpc_json(json.load(f), slot)

    events = walker.process_block(block)
    return write_df_to_parquet(events_to_dataframe(events), EVENTS_DATA_TYPE, slot, base_path=base_path)

def main(config_file="config.yml"):
    try:
        # Load configuration and set up the block walker
        config = load_config(config_file)
        input_path = Path(config["indexer"]["input_path"])
        base_path = config["output"]["base_path"]
        lookup_config = dict(config["lookup_tables"])
        store_type = lookup_config.pop("store_type")

        logger.info(f"Target program: {config['program']['address']}")
        logger.info(f"Input path: {input_path}")
        logger.info(f"Lookup table store: {store_type}")
        logger.info(f"Legacy event indexing: {config['indexer']['legacy_event_indexing']}")

        walker = BlockWalker(
            get_lookup_repository(store_type, **lookup_config),
            program_address=config["program"]["address"],
            legacy_event_indexing=config["indexer"]["legacy_event_indexing"],
        )

        block_files = []
        for path in input_path.glob("block_*.json"):
            try:
                block_files.append((slot_from_path(path), path))
            except ValueError as e:
                logger.warning(f"Skipping {path}: {e}")
        block_files = [path for _, path in sorted(block_files)]
        if not block_files:
            logger.warning(f"No block files found in {input_path}")

        failed = 0
        for path in block_files:
            try:
                process_block_file(walker, path, base_path)
            except (BlockError, ValueError, KeyError, TypeError, OSError) as e:
                # The whole block is rejected; the next one is independent.
                # ValueError covers unreadable JSON and bad base58 values.
                failed += 1
                logger.error(f"Failed to process block file {path.name}: {e}")

        logger.info(f"Processed {len(block_files) - failed} of {len(block_files)} block files")

    except KeyError as e:
        logger.error(f"Configuration error: Missing key {e}")
        sys.exit(1)
    except ValueError as e:
        logger.error(f"Invalid configuration value: {e}")
        sys.exit(1)
    except Exception as e:
        logger.exception(f"An unexpected error occurred: {e}")
        sys.exit(1)

if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        logger.info("Program interrupted by user. Exiting.")
