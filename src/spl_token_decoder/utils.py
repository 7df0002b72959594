from colorlog import ColoredFormatter
from datetime import datetime, timezone
import logging
from logging.handlers import RotatingFileHandler
import os
from pathlib import Path
import yaml
from solders.pubkey import Pubkey

DEFAULT_CONFIG = {
    "indexer": {"legacy_event_indexing": True},
    "lookup_tables": {"store_type": "memory"},
    "output": {"base_path": "data"},
}

RELATIVE_PATH_KEYS = [
    ("indexer", "input_path"),
    ("lookup_tables", "path"),
    ("output", "base_path"),
]

# Function to set up a logger with both console and file handlers
def setup_logger(log_file_path="logs/spl_token_decoder.log", log_level=logging.INFO):
    """
    Set up a logger with both console and file handlers.

    :param log_file_path: str, path to the log file
    :param log_level: int, logging level
    :return: logging.Logger, configured logger instance
    """
    logger = logging.getLogger("spl_token_decoder")
    if not logger.handlers:
        logger.setLevel(log_level)

        # Console handler with color-coded output
        color_scheme = {
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "red,bg_white",
        }
        console_formatter = ColoredFormatter(
            "%(log_color)s%(asctime)s - %(levelname)s - %(module)s - %(message)s",
            datefmt=None,
            reset=True,
            log_colors=color_scheme,
            secondary_log_colors={},
            style="%",
        )
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

        # File handler for persistent logging
        log_dir = os.path.dirname(log_file_path)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_formatter = logging.Formatter(
            "%(asctime)s - %(levelname)s - %(module)s - %(message)s"
        )
        file_handler = RotatingFileHandler(
            log_file_path, maxBytes=10 * 1024 * 1024, backupCount=5
        )  # 10MB file size with 5 backup files
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    return logger

# Create a single instance of the logger to be used throughout the application
logger = setup_logger()

def load_config(filename="config.yml"):
    """
    Load and validate configuration from a YAML file.

    Relative file names are looked up in the project root. Relative data
    paths inside the file are resolved against the directory of the file.

    :param filename: str, name of (or path to) the configuration file
    :return: dict, validated configuration dictionary with defaults filled in
    """
    try:
        config_path = Path(filename)
        if not config_path.is_absolute():
            project_root = Path(__file__).resolve().parent.parent.parent
            config_path = project_root / filename

        if not config_path.is_file():
            raise FileNotFoundError(f"Config file \"{filename}\" not found")

        with open(config_path) as f:
            config = yaml.safe_load(f) or {}

        # Validate required configuration keys
        if "program" not in config or "address" not in config["program"]:
            raise ValueError("Invalid config: 'program.address' is required")

        if "indexer" not in config or "input_path" not in config["indexer"]:
            raise ValueError("Invalid config: 'indexer.input_path' is required")

        try:
            Pubkey.from_string(str(config["program"]["address"]))
        except Exception as e:
            raise ValueError(f"Invalid config: 'program.address' is not a public key: {config['program']['address']}") from e

        for section, defaults in DEFAULT_CONFIG.items():
            config[section] = {**defaults, **(config.get(section) or {})}

        if not isinstance(config["indexer"]["legacy_event_indexing"], bool):
            raise ValueError("Invalid config: 'indexer.legacy_event_indexing' must be true or false")

        # Relative data paths are taken from the directory holding the config file
        for section, key in RELATIVE_PATH_KEYS:
            value = config[section].get(key)
            if value is not None and not Path(value).is_absolute():
                config[section][key] = str(config_path.parent / value)

        return config

    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML config: {str(e)}")
        raise
    except Exception as e:
        logger.error(f"Unexpected error in load_config: {str(e)}")
        raise

def convert_to_date(timestamp: int) -> str:
    """Format a unix timestamp as a UTC calendar date (YYYY-MM-DD)."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d")
