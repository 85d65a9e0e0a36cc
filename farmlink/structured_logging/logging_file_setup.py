"""
File logging setup for the enhanced logging system.

Configures rotating file handlers per log category plus the errors.log
aggregator and a console handler.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from farmlink.structured_logging.logging_utilities import ensure_log_directory, resolve_log_base

# log file name -> logger name prefixes routed into it
LOG_CATEGORIES: dict[str, list[str]] = {
    "server": ["farmlink.app", "farmlink.main", "farmlink.container", "farmlink.config", "uvicorn"],
    "realtime": ["farmlink.realtime", "farmlink.api.signaling"],
    "directory": ["farmlink.directory", "farmlink.database", "sqlalchemy"],
    "api": ["farmlink.api", "farmlink.middleware"],
}

_SIZE_UNITS = {"KB": 1024, "MB": 1024 * 1024, "GB": 1024 * 1024 * 1024}


class LoggerNameFilter(logging.Filter):
    """Pass only records whose logger name starts with one of the prefixes."""

    def __init__(self, prefixes: list[str]) -> None:
        super().__init__()
        self.prefixes = tuple(prefixes)

    def filter(self, record: logging.LogRecord) -> bool:
        return record.name.startswith(self.prefixes)


def parse_size(value: str) -> int:
    """Convert a size like '100MB' into bytes."""
    text = value.strip().upper()
    for unit, factor in _SIZE_UNITS.items():
        if text.endswith(unit):
            return int(float(text[: -len(unit)]) * factor)
    return int(text)


def _make_handler(log_path: Path, max_bytes: int, backup_count: int, level: int) -> RotatingFileHandler:
    ensure_log_directory(log_path)
    handler = RotatingFileHandler(log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    return handler


def setup_enhanced_file_logging(environment: str, log_config: dict[str, Any], log_level: str) -> None:
    """
    Attach file and console handlers to the root logger.

    Args:
        environment: Environment name, used as the log sub-directory
        log_config: Logging configuration dictionary
        log_level: Minimum level for category handlers
    """
    env_log_dir = resolve_log_base(log_config.get("log_base", "logs")) / environment
    max_bytes = parse_size(str(log_config.get("rotation_max_size", "100MB")))
    backup_count = int(log_config.get("rotation_backup_count", 5))
    level = logging.getLevelName(log_level.upper())

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)
        existing.close()
    root_logger.setLevel(level)

    for log_file, prefixes in LOG_CATEGORIES.items():
        handler = _make_handler(env_log_dir / f"{log_file}.log", max_bytes, backup_count, level)
        handler.addFilter(LoggerNameFilter(prefixes))
        root_logger.addHandler(handler)

    root_logger.addHandler(_make_handler(env_log_dir / "errors.log", max_bytes, backup_count, logging.ERROR))

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)
