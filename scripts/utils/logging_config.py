# ABOUTME: Logging configuration for the monitoring dashboard
# ABOUTME: Sets up the root logger with console and file handlers

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_main_logger(log_file, log_level=logging.INFO):
    """
    Setup the dashboard logger for both console and file output.

    Safe to call on every Streamlit rerun: handlers are replaced, not stacked.

    Args:
        log_file (str or Path): Path to the dashboard log file
        log_level (int, optional): Console logging level. Defaults to logging.INFO.

    Returns:
        logging.Logger: The configured root logger
    """
    log_file_path = Path(log_file)
    log_file_path.parent.mkdir(parents=True, exist_ok=True)

    # Silence noisy third-party loggers
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)
    logging.getLogger('watchdog').setLevel(logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(console_handler)

    # File handler (DEBUG level to capture stale-response and fallback details)
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(file_handler)

    logging.info(f"Dashboard logger initialized with log file: {log_file_path}")
    logging.debug(f"Console logging level: {logging.getLevelName(log_level)}")

    return root_logger
