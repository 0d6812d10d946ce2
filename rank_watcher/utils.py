"""
Utility functions for the Rank Watcher.

This module provides:
- Central logging configuration (terminal + activity log file)
- Environment variable helpers
- Safe text read/write helpers for the single-value state file
"""

import logging
import os
import shutil
import sys
import tempfile
from pathlib import Path
from typing import List, Optional


# Shared log format for terminal and activity log
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

TRUTHY_VALUES = ("true", "1", "yes")


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure and return the root logger for the application.

    Every record goes to stdout. When log_file is given, records are also
    appended to it so the activity history survives between runs.

    Args:
        level: Logging level as string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to INFO.
        log_file: Optional path of the append-only activity log.

    Returns:
        Configured logger instance.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_file:
        try:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))
        except OSError as e:
            print(f"Warning: cannot open activity log {log_file}: {e}", file=sys.stderr)

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=handlers,
        force=True
    )

    logger = logging.getLogger("rank_watcher")
    logger.setLevel(log_level)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Name for the logger, typically the module name.

    Returns:
        Logger instance configured as a child of the main application logger.
    """
    return logging.getLogger(f"rank_watcher.{name}")


def get_env_var(
    name: str,
    required: bool = True,
    default: Optional[str] = None,
    environ: Optional[dict] = None
) -> Optional[str]:
    """
    Get an environment variable with optional requirement enforcement.

    Args:
        name: Name of the environment variable.
        required: If True, raises ValueError when variable is not set.
                  Defaults to True.
        default: Default value if variable is not set and not required.
        environ: Mapping to read from. Defaults to os.environ.

    Returns:
        Value of the environment variable or default.

    Raises:
        ValueError: If required=True and the variable is not set.
    """
    source = os.environ if environ is None else environ
    value = source.get(name)

    if value is None or value.strip() == "":
        if required:
            raise ValueError(f"Required environment variable '{name}' is not set")
        return default

    return value.strip()


def is_truthy(value: Optional[str]) -> bool:
    """Interpret a flag-style environment value."""
    return (value or "").strip().lower() in TRUTHY_VALUES


def safe_read_text(filepath: str) -> Optional[str]:
    """
    Safely read a small text file.

    Args:
        filepath: Path to the file.

    Returns:
        File contents with surrounding whitespace stripped, or None if the
        file doesn't exist, is empty, or cannot be read.
    """
    logger = get_logger("utils")

    path = Path(filepath)
    if not path.exists():
        logger.debug(f"File does not exist: {filepath}")
        return None

    try:
        content = path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Cannot read {filepath}: {e}")
        return None

    return content or None


def safe_write_text(filepath: str, content: str) -> bool:
    """
    Safely write text to a file using atomic write operation.

    Uses a temporary file in the target directory and a rename, so a crash
    mid-write never leaves a truncated file behind.

    Args:
        filepath: Path to the file.
        content: Text to write.

    Returns:
        True if write was successful, False otherwise.
    """
    logger = get_logger("utils")

    try:
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, temp_path = tempfile.mkstemp(
            suffix=".tmp",
            prefix=f".{path.name}.",
            dir=path.parent
        )

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)

            shutil.move(temp_path, filepath)
            logger.debug(f"Successfully wrote {filepath}")
            return True

        except Exception:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

    except PermissionError as e:
        logger.error(f"Permission denied writing {filepath}: {e}")
        return False
    except OSError as e:
        logger.error(f"Unexpected error writing {filepath}: {e}")
        return False
