import logging
import logging.config
import os
from typing import Any, Dict, Optional


BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../../../"))
LOG_DIR = os.environ.get("AIA_LOG_DIR", os.path.join(BASE_DIR, "logs"))
CONSOLE_LEVEL = os.environ.get("AIA_CONSOLE_LOG_LEVEL", "INFO").upper()

# Every module logs below this name
ROOT_LOGGER = "aia"
BACKUP_DAYS = 30

def _rotating_handler(filename: str, level: str) -> Dict[str, Any]:
    return {
        "level": level,
        "class": "logging.handlers.TimedRotatingFileHandler",
        "filename": filename,
        "when": "midnight",
        "interval": 1,
        "backupCount": BACKUP_DAYS,
        "encoding": "utf-8",
        "formatter": "standard",
    }

def build_logging_config(log_dir: str = LOG_DIR, console_level: str = CONSOLE_LEVEL) -> Dict[str, Any]:
    """
    dictConfig for the engine: console plus two daily-rotated files
    (everything / errors only) under {log_dir}/engine.
    """
    engine_dir = os.path.join(log_dir, "engine")
    os.makedirs(engine_dir, exist_ok=True)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "[%(asctime)s] [%(levelname)s] [%(name)s] [%(filename)s:%(lineno)d] %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "level": console_level,
                "class": "logging.StreamHandler",
                "formatter": "standard",
            },
            "file_engine": _rotating_handler(os.path.join(engine_dir, "engine.log"), "DEBUG"),
            "file_error": _rotating_handler(os.path.join(engine_dir, "engine.error.log"), "ERROR"),
        },
        "loggers": {
            ROOT_LOGGER: {
                "handlers": ["console", "file_engine", "file_error"],
                "level": "DEBUG",
                "propagate": False,
            },
        },
    }

LOGGING_CONFIG = build_logging_config()
ENGINE_LOG_FILE = LOGGING_CONFIG["handlers"]["file_engine"]["filename"]
ENGINE_ERROR_LOG_FILE = LOGGING_CONFIG["handlers"]["file_error"]["filename"]

def setup_logging(config: Optional[Dict[str, Any]] = None):
    """Apply the given logging configuration, or the default one."""
    logging.config.dictConfig(config or LOGGING_CONFIG)

def get_logger(name: str) -> logging.Logger:
    """Get a logger instance under the 'aia' hierarchy."""
    if not logging.getLogger(ROOT_LOGGER).handlers:
        setup_logging()

    if name != ROOT_LOGGER and not name.startswith(f"{ROOT_LOGGER}."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)

setup_logging()
