"""
Logging configuration for the hlab provisioning tool
Console output mirrors the [INFO]/[WARN]/[ERROR] style operators expect,
the optional log file keeps full timestamps
"""
import logging
import sys
from pathlib import Path

CONSOLE_FORMAT = "[%(levelname)s] %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ConsoleFormatter(logging.Formatter):
    """Shorten level names to the four-letter tags used on the console."""
    LEVEL_TAGS = {
        "WARNING": "WARN",
        "CRITICAL": "ERROR",
    }

    def format(self, record):
        original = record.levelname
        record.levelname = self.LEVEL_TAGS.get(original, original)
        try:
            return super().format(record)
        finally:
            record.levelname = original


def setup_logging(level=logging.INFO, log_file=None):
    """
    Setup logging configuration

    Args:
        level: Logging level (default: INFO)
        log_file: Optional path to log file (default: None, console only)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(ConsoleFormatter(CONSOLE_FORMAT))
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        # the file always gets the full command trace
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)
        root_logger.setLevel(logging.DEBUG)

    # paramiko is chatty at INFO
    logging.getLogger("paramiko").setLevel(logging.WARNING)
    return root_logger


def get_logger(name=None):
    """Get a logger instance for a module (defaults to the tool logger)."""
    return logging.getLogger(name or "hlab")


def init_logger(level=logging.INFO, log_file=None):
    """
    Initialize logging once at startup

    Args:
        level: Logging level
        log_file: Optional log file path
    """
    setup_logging(level=level, log_file=log_file)
    return get_logger("hlab")
