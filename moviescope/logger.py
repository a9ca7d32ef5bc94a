import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler

LOG_DIR = Path.home() / ".moviescope"
LOG_FILE = LOG_DIR / "moviescope.log"

def setup_logging():
    LOG_DIR.mkdir(parents=True, exist_ok=True)

    # Root logger
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    # Drop handlers from an earlier call so repeated setup doesn't double every line
    for handler in list(logger.handlers):
        if getattr(handler, "_moviescope", False):
            logger.removeHandler(handler)
            handler.close()

    # Console Handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_formatter = logging.Formatter('%(levelname)s: %(message)s')
    console_handler.setFormatter(console_formatter)
    console_handler._moviescope = True
    logger.addHandler(console_handler)

    # File Handler
    file_handler = RotatingFileHandler(
        LOG_FILE, maxBytes=10*1024*1024, backupCount=5, encoding='utf-8'
    )
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    file_handler.setFormatter(file_formatter)
    file_handler._moviescope = True
    logger.addHandler(file_handler)

    # httpx logs every request at INFO, including the raw query string with the api key
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logging.info(f"Logging initialized. Log file: {LOG_FILE}")
