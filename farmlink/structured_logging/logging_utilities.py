"""
Logging utilities for directory management, path resolution, and environment detection.
"""

import os
import sys
import threading
from pathlib import Path

VALID_ENVIRONMENTS = ["e2e_test", "unit_test", "production", "local"]

# Cache of directories already created in this process
_created_dirs: set[str] = set()
_created_dirs_lock = threading.Lock()


def ensure_log_directory(log_path: Path) -> None:
    """
    Thread-safe creation of the parent directory of a log file.

    Args:
        log_path: Path to the log file (directory will be created for parent)
    """
    dir_path = log_path.parent
    dir_str = str(dir_path)

    with _created_dirs_lock:
        if dir_str in _created_dirs:
            return
        dir_path.mkdir(parents=True, exist_ok=True)
        _created_dirs.add(dir_str)


def resolve_log_base(log_base: str) -> Path:
    """
    Resolve log_base path to absolute path relative to project root.

    Args:
        log_base: Relative or absolute path to log directory

    Returns:
        Absolute path to log directory
    """
    log_path = Path(log_base)

    if log_path.is_absolute():
        return log_path

    # Find the project root (where pyproject.toml is located)
    current_dir = Path.cwd()
    for parent in [current_dir, *current_dir.parents]:
        if (parent / "pyproject.toml").exists():
            return parent / log_path

    return current_dir / log_path


def detect_environment() -> str:
    """
    Detect the current environment based on various indicators.

    Returns:
        Environment name: "e2e_test", "unit_test", "local", or "production"
    """
    if "pytest" in sys.modules or "pytest" in sys.argv[0]:
        return "unit_test"

    env = os.getenv("FARMLINK_ENV")
    if env and env in VALID_ENVIRONMENTS:
        return env

    logging_env = os.getenv("LOGGING_ENVIRONMENT", "")
    if logging_env in VALID_ENVIRONMENTS:
        return logging_env

    return "local"
