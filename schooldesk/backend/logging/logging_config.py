import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from ..config.config import settings


def setup_logging(log_dir: str = None):
    """
    Installs the application-wide logging configuration.

    Logs go both to stdout (for development and container logs) and to a
    size-rotated file under ``LOG_DIR`` for production.
    """
    log_format = "%(asctime)s - [%(name)s] - %(levelname)s - %(message)s"

    directory = Path(log_dir or settings.LOG_DIR)
    directory.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger()
    logger.setLevel(logging.INFO)

    # Drop handlers installed by uvicorn and friends so every line uses our format.
    if logger.hasHandlers():
        logger.handlers.clear()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(logging.Formatter(log_format))
    logger.addHandler(stdout_handler)

    # app.log rolls over to app.log.1 ... app.log.5 at 5 MB
    file_handler = RotatingFileHandler(
        directory / "app.log",
        maxBytes=5*1024*1024,
        backupCount=5
    )
    file_handler.setFormatter(logging.Formatter(log_format))
    logger.addHandler(file_handler)
