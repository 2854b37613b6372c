# utils.py
"""
Utility functions for the galaxy viewer.

Logging setup and configuration access live here: they are used by every
part of the application but belong to neither generation nor rendering.
"""
import logging
import logging.handlers
import json
import os
from typing import Dict, Any, Optional

# --- Data Contracts ---
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Inputs:
#     - config: the full configuration. Its optional "logging" section
#       may hold "level", "format", "log_file", "max_bytes" and
#       "backup_count".
#   - Side Effects: Replaces the root logger's handlers with a console
#     handler and, unless log_file is null, a rotating file handler whose
#     directory is created on demand.
#
# config_section(config, name) -> Dict[str, Any]:
#   - Outputs: the named section, or an empty dict (with a warning) so
#     callers fall back to their defaults.
#
# resolve_seed(galaxy_config) -> Optional[int]:
#   - Outputs: the configured integer seed, or None for a fresh random
#     galaxy on every run.

DEFAULT_LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
DEFAULT_LOG_FILE = 'logs/galaxy.log'

# Third-party loggers that flood the output at DEBUG level.
NOISY_LOGGERS = ('numba',)


def setup_logging(config: Dict[str, Any]) -> None:
    """
    Configures the root logger from the "logging" config section.

    Console output is always on; the rotating file is optional.
    """
    log_config = config.get('logging', {})
    log_level = str(log_config.get('level', 'INFO')).upper()
    formatter = logging.Formatter(log_config.get('format', DEFAULT_LOG_FORMAT))
    log_file_path = log_config.get('log_file', DEFAULT_LOG_FILE)

    root = logging.getLogger()
    root.setLevel(log_level)
    # Drop handlers from any earlier setup so messages are not duplicated.
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if log_file_path:
        log_dir = os.path.dirname(log_file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file_path,
            maxBytes=log_config.get('max_bytes', 1024*1024),
            backupCount=log_config.get('backup_count', 5),
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(root.level, logging.WARNING))

    logging.info("Logging system initialized.")
    logging.debug(f"Log level {log_level}, log file {log_file_path or 'disabled'}.")


def load_config(path: str) -> Dict[str, Any]:
    """Loads the JSON configuration file at `path`."""
    logging.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            config = json.load(f)
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError:
        logging.error(f"Configuration file {path} is not valid JSON.")
        raise
    if not isinstance(config, dict):
        msg = f"Configuration error: {path} must hold a JSON object."
        logging.critical(msg)
        raise ValueError(msg)
    logging.info(f"Configuration loaded ({', '.join(sorted(config)) or 'no sections'}).")
    return config


def config_section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Returns a config section, falling back to an empty one with a warning."""
    section = config.get(name)
    if section is None:
        logging.warning(f"Config has no '{name}' section. Using defaults.")
        return {}
    if not isinstance(section, dict):
        msg = f"Configuration error: '{name}' must be a JSON object, got {type(section).__name__}."
        logging.critical(msg)
        raise ValueError(msg)
    return section


def resolve_seed(galaxy_config: Dict[str, Any]) -> Optional[int]:
    """Reads the optional galaxy seed, rejecting anything but an integer or null."""
    seed = galaxy_config.get('seed')
    if seed is None:
        return None
    if isinstance(seed, bool) or not isinstance(seed, int):
        msg = f"Configuration error: galaxy seed must be an integer or null, got {seed!r}."
        logging.critical(msg)
        raise ValueError(msg)
    return seed
