"""
Parse module for the Rank Watcher.

Extracts the rank (peringkat) and quota (kuota) from the first entry of
the ranking payload's data list.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from rank_watcher.fetch import RankCheckError
from rank_watcher.utils import get_logger


# Module logger
logger = get_logger("parse")

RANK_FIELD = "peringkat"
QUOTA_FIELD = "kuota"


class ParseFailedError(RankCheckError):
    """The ranking payload did not have the expected shape."""


@dataclass(frozen=True)
class RankObservation:
    """
    Rank and quota observed in one run.

    Attributes:
        rank: Rank as returned by the API (int or string token).
        quota: Number of admission slots.
    """
    rank: Union[int, str]
    quota: Union[int, str]

    @property
    def rank_text(self) -> str:
        return normalize_value(self.rank)

    @property
    def quota_text(self) -> str:
        return normalize_value(self.quota)


def normalize_value(value: Any) -> str:
    """
    Render a JSON scalar as the string used for comparison and display.

    Integral floats are printed without the fractional part, so 150,
    150.0 and "150" all normalize to "150".
    """
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (int, float, str)) and not isinstance(value, bool)


def _is_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return value.is_integer()
    if isinstance(value, str):
        return value.strip().isdigit()
    return False


def parse_rank_response(
    payload: Dict[str, Any],
    raw_body: Optional[str] = None
) -> RankObservation:
    """
    Extract the rank observation from a validated ranking payload.

    An empty data list is also what an expired session returns on some API
    versions, so it is reported as a parse failure rather than "no rank".

    Args:
        payload: Decoded JSON object from check_fetch_result().
        raw_body: Response body exactly as received, for diagnostics.
            Falls back to re-serializing the payload.

    Returns:
        RankObservation for the first data entry.

    Raises:
        ParseFailedError: If data is missing or empty, rank/quota are
            missing, null or blank, rank is not a scalar, or quota is not
            an integer.
    """
    raw = raw_body if raw_body is not None else json.dumps(payload, ensure_ascii=False)

    data = payload.get("data")
    if not isinstance(data, list) or not data:
        raise ParseFailedError(
            "Could not extract rank or quota: data list is missing or empty. "
            "The API structure may have changed or the session is invalid.",
            response_body=raw
        )

    entry = data[0]
    if not isinstance(entry, dict):
        raise ParseFailedError(
            "Could not extract rank or quota: first data entry is not an object.",
            response_body=raw
        )

    rank = entry.get(RANK_FIELD)
    quota = entry.get(QUOTA_FIELD)

    if _is_blank(rank) or _is_blank(quota):
        raise ParseFailedError(
            f"Could not extract rank or quota from API response "
            f"({RANK_FIELD}={rank!r}, {QUOTA_FIELD}={quota!r}). "
            "The API structure may have changed.",
            response_body=raw
        )

    if not _is_scalar(rank):
        raise ParseFailedError(
            f"Unexpected {RANK_FIELD} value {rank!r}: expected a number or string.",
            response_body=raw
        )

    if not _is_integer(quota):
        raise ParseFailedError(
            f"Unexpected {QUOTA_FIELD} value {quota!r}: expected an integer.",
            response_body=raw
        )

    observation = RankObservation(rank=rank, quota=quota)
    logger.debug(f"Parsed observation: {observation}")
    return observation
