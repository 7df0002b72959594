from pathlib import Path
from typing import List
import polars as pl

from spl_token_decoder.models import EventRecord
from spl_token_decoder.schemas import EventSchemas
from spl_token_decoder.utils import logger

def events_to_dataframe(events: List[EventRecord]) -> pl.DataFrame:
    """
    Convert a block's events to a DataFrame, keeping emission order.

    :param events: List[EventRecord], events returned by the block walker
    :return: pl.DataFrame, one row per event
    """
    return pl.DataFrame([event.to_dict() for event in events], schema=EventSchemas.event_schema())

def write_df_to_parquet(df: pl.DataFrame, data_type: str, slot: int, base_path: str = "data"):
    """
    Write a Polars DataFrame to a Parquet file.

    Files are grouped by data type and by million-slot ranges so that a
    directory never holds more than a million block files.

    :param df: pl.DataFrame, the DataFrame to write
    :param data_type: str, the type of data (e.g., 'spl_token_events')
    :param slot: int, the slot number for this data
    :param base_path: str, the base directory to store the Parquet files
    :return: str, the path of the written Parquet file
    """
    try:
        # Validate input parameters
        if not isinstance(df, pl.DataFrame):
            raise ValueError("df must be a Polars DataFrame")
        if not isinstance(data_type, str) or not data_type:
            raise ValueError("data_type must be a non-empty string")
        if not isinstance(slot, int) or slot < 0:
            raise ValueError("slot must be a non-negative integer")

        directory = Path(base_path) / data_type / f"slot_{slot // 1_000_000:07d}xxx"
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IOError(f"Failed to create directory {directory}: {e}")

        file_path = directory / f"{data_type}_slot_{slot:010d}.parquet"

        df.write_parquet(file_path)
        logger.info(f"Successfully wrote {df.height} {data_type} rows for slot {slot} to {file_path}")

        return str(file_path)
    except Exception as e:
        logger.error(f"Error in write_df_to_parquet: {e}")
        raise
