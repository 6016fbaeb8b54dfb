import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from ..config.config import settings


def setup_logging(level: int = logging.INFO):
    """
    Installs the application-wide logging configuration.

    Logs go both to stdout (for development and container logs) and to a file
    that rotates once it reaches 5 MB, keeping the last five files.
    """
    # Time - module name - level - message
    log_format = "%(asctime)s - [%(name)s] - %(levelname)s - %(message)s"

    # Log directory is mounted as a volume in deployments.
    log_dir = Path(settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger()
    logger.setLevel(level)

    # Drop uvicorn's default handlers so every record uses our format.
    if logger.hasHandlers():
        logger.handlers.clear()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(logging.Formatter(log_format))
    logger.addHandler(stdout_handler)

    file_handler = RotatingFileHandler(
        log_dir / "rollcall.log",
        maxBytes=5*1024*1024,  # 5 MB
        backupCount=5
    )
    file_handler.setFormatter(logging.Formatter(log_format))
    logger.addHandler(file_handler)
