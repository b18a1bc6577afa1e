#!/usr/bin/env python3
"""
Centralized logging configuration.

Provides bootstrap_logging(), called from the task entry points and the pytest
plugin, which configures logging from an INI file using Python's native
fileConfig format.
"""

import logging
import logging.config
import os
import sys
from pathlib import Path
from typing import Optional

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
PACKAGE_CONFIG = Path(__file__).parent / 'logging.ini'


def _find_logging_config() -> Optional[Path]:
    """
    Find the logging configuration file.

    Looks for logging.ini in the current working directory, then falls back to
    the copy shipped with the package.

    Returns:
        Path to logging configuration file, or None if not found.
    """
    current_dir_config = Path('logging.ini')
    if current_dir_config.exists():
        return current_dir_config

    if PACKAGE_CONFIG.exists():
        return PACKAGE_CONFIG

    return None


def _setup_environment_variables():
    """
    Set up environment variables for logging configuration.

    Sets LOG_LEVEL to WARNING if not already set, ensuring the INI file has a valid value.
    """
    if 'LOG_LEVEL' not in os.environ:
        os.environ['LOG_LEVEL'] = 'WARNING'

    log_level = os.environ['LOG_LEVEL'].strip().upper()
    if log_level not in LOG_LEVELS:
        print(f"Warning: Invalid LOG_LEVEL '{log_level}', using WARNING", file=sys.stderr)
        os.environ['LOG_LEVEL'] = 'WARNING'


def bootstrap_logging(debug: bool = False) -> None:
    """
    Bootstrap logging configuration using Python's native INI format.

    This function:
    1. Sets up LOG_LEVEL for INI file substitution
    2. Loads logging configuration from logging.ini using logging.config.fileConfig()
    3. Applies the LOG_LEVEL override (or DEBUG when ``debug`` is set)

    Args:
        debug: Force DEBUG level for the autosettings loggers
    """
    _setup_environment_variables()

    config_path = _find_logging_config()

    if config_path is None:
        print("Warning: No logging.ini file found, using basic logging configuration", file=sys.stderr)
        logging.basicConfig(
            level=logging.WARNING,
            format='%(levelname)s: %(name)s: %(message)s',
            stream=sys.stderr
        )
    else:
        try:
            logging.config.fileConfig(
                str(config_path),
                defaults={'LOG_LEVEL': os.environ['LOG_LEVEL'].strip().upper()},
                disable_existing_loggers=False
            )
        except Exception as e:
            print(f"Warning: Failed to load logging config from {config_path}: {e}", file=sys.stderr)
            print("Using basic logging configuration", file=sys.stderr)
            logging.basicConfig(
                level=logging.WARNING,
                format='%(levelname)s: %(name)s: %(message)s',
                stream=sys.stderr
            )

    level = 'DEBUG' if debug else os.environ['LOG_LEVEL'].strip().upper()
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level))
    for handler in root_logger.handlers:
        if isinstance(handler, logging.StreamHandler):
            handler.setLevel(getattr(logging, level))
    logging.getLogger('autosettings').setLevel(getattr(logging, level))

    logging.getLogger(__name__).debug(f"Logging configured at {level} from {config_path}")

