"""
Project logger: console + rotating JSON file.

Usage:
    from kisanai.core.logger import get_logger, configure, LoggerConfig

    # Configure once at startup (optional; from_env() if not called)
    configure(LoggerConfig(level="DEBUG", log_dir="/var/log/kisanai"))

    # Or from env: LOG_LEVEL, LOG_DIR, LOG_FILE_BASENAME, LOG_MAX_BYTES, LOG_BACKUP_COUNT, ...
    configure()

    logger = get_logger(__name__)
    logger.info("Pending action stored", extra={"user_id": user_id, "action_type": "add_lot"})
"""
from kisanai.core.logger.config import LoggerConfig
from kisanai.core.logger.formatters import CONTEXT_KEYS, JsonFormatter, PlainConsoleFormatter
from kisanai.core.logger.setup import (
    build_console_handler,
    build_rotating_file_handler,
    configure,
    get_logger,
)

__all__ = [
    "LoggerConfig",
    "CONTEXT_KEYS",
    "JsonFormatter",
    "PlainConsoleFormatter",
    "configure",
    "get_logger",
    "build_rotating_file_handler",
    "build_console_handler",
]
