from .config import LOGGING_CONFIG, build_logging_config, get_logger, setup_logging

__all__ = ["get_logger", "setup_logging", "build_logging_config", "LOGGING_CONFIG"]
