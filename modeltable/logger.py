import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def setup_logger() -> logging.Logger:
    """Configure and return the package logger."""
    log_level = os.getenv('MODELTABLE_LOG_LEVEL', 'WARNING').upper()

    logger = logging.getLogger('modeltable')
    logger.setLevel(getattr(logging, log_level, logging.WARNING))
    logger.handlers = []
    logger.propagate = False

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter('[%(levelname)s] %(name)s: %(message)s'))
    logger.addHandler(console_handler)

    # File logging is opt-in for a library
    log_dir = os.getenv('MODELTABLE_LOG_DIR')
    if not log_dir:
        return logger

    try:
        Path(log_dir).mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            Path(log_dir) / 'modeltable.log',
            maxBytes=10*1024*1024,  # 10MB
            backupCount=3,
            encoding='utf-8'
        )
        file_handler.setFormatter(
            logging.Formatter('%(asctime)s | %(levelname)s | %(message)s',
                            datefmt='%Y-%m-%d %H:%M:%S')
        )
        logger.addHandler(file_handler)

    except OSError as e:
        # If we can't create the file handler (permissions, etc), just use console
        logger.warning(f"Could not create file handler in {log_dir}: {e}")

    return logger


logger = setup_logger()
