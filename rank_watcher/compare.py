"""
Compare module for the Rank Watcher.

Holds the last notified rank in a single plain-text file and decides
whether the freshly fetched rank differs from it.
"""

from typing import Any, Optional

from rank_watcher.config import DEFAULT_STATE_PATH
from rank_watcher.parse import normalize_value
from rank_watcher.utils import get_logger, safe_read_text, safe_write_text


# Module logger
logger = get_logger("compare")


def load_last_rank(filepath: str = DEFAULT_STATE_PATH) -> Optional[str]:
    """
    Load the previously persisted rank.

    Args:
        filepath: Path to the state file.

    Returns:
        The stored rank, or None on the first run (missing or empty file).
    """
    last_rank = safe_read_text(filepath)

    if last_rank is None:
        logger.info(f"No previous rank stored in {filepath}")
    else:
        logger.debug(f"Loaded previous rank {last_rank} from {filepath}")

    return last_rank


def save_last_rank(rank: Any, filepath: str = DEFAULT_STATE_PATH) -> bool:
    """
    Persist the rank, replacing whatever was stored before.

    Args:
        rank: Rank value to store; written in normalized form.
        filepath: Path to the state file.

    Returns:
        True if the write succeeded, False otherwise.
    """
    success = safe_write_text(filepath, f"{normalize_rank(rank)}\n")

    if success:
        logger.info(f"Saved rank {normalize_rank(rank)} to {filepath}")
    else:
        logger.error(f"Failed to save rank to {filepath}")

    return success


def normalize_rank(rank: Any) -> str:
    """Normalize a rank to the string form used for comparisons."""
    return normalize_value(rank)


def has_rank_changed(current: Any, previous: Optional[Any]) -> bool:
    """
    Decide whether the current rank differs from the stored one.

    Comparison is on normalized strings, so the API returning 150 and the
    state file holding "150" count as equal. A missing previous value is
    always a change.

    Args:
        current: Rank from this run.
        previous: Stored rank, or None.

    Returns:
        True if the rank changed.
    """
    if previous is None:
        return True
    return normalize_rank(current) != normalize_rank(previous)
