import sys
import logging
from pathlib import Path
from typing import Optional

from runjob.config import effective_settings as config


class MainFormatter(logging.Formatter):
    """A formatter that prefixes supervisor messages with time, level and origin."""

    def __init__(self) -> None:
        super().__init__('%(asctime)s - %(levelname)-8s - [%(name)s] - %(message)s')


def setup_logging(console_level: int = logging.INFO, log_path: Optional[Path] = None) -> None:
    """
    Configures the root logger for the supervisor.
    This sets up a console handler and, when a path is configured, a file
    handler, clearing any previously configured handlers to prevent duplication.

    :param console_level: The logging level for the console output (e.g., logging.INFO).
    :param log_path: Optional supervisor log file. Defaults to SUPERVISOR_LOG_PATH.
    """
    root_logger = logging.getLogger()
    # Set root level to lowest to capture all messages for handler filtering
    root_logger.setLevel(logging.DEBUG)

    # Clear any existing handlers to prevent re-adding them on re-runs
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    #* --- Console Handler ---
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(MainFormatter())
    root_logger.addHandler(console_handler)

    #* --- File Handler (conditional) ---
    log_path = log_path or config.SUPERVISOR_LOG_PATH
    if log_path:
        try:
            Path(log_path).parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(MainFormatter())
            root_logger.addHandler(file_handler)
        except OSError as e:
            root_logger.error(f"Failed to initialize supervisor log file '{log_path}': {e}. Logging to file will be disabled.")
