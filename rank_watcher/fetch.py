"""
Fetch module for the Rank Watcher.

This module handles the single POST to the PPDB ranking endpoint and
classifies the outcome. Failures are terminal for the run: retries are
explicitly disabled and left to the next scheduled invocation.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from rank_watcher.utils import get_logger


# Module logger
logger = get_logger("fetch")

DEFAULT_TIMEOUT = 30  # seconds
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux aarch64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/136.0.0.0 Safari/537.36"
)
PPDB_ORIGIN = "https://spmb.bogorkab.go.id"

# Payload keys the API has used for its embedded status
EMBEDDED_STATUS_KEYS = ("status_code", "statusCode")
EXPIRED_TOKEN_MARKERS = ("expired", "unauthorized", "unauthenticated", "invalid token")


class RankCheckError(Exception):
    """Base exception for a failed rank check."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body

    def describe(self) -> str:
        """Message plus the raw upstream body, when there is one."""
        if self.response_body:
            return f"{self} Response: {self.response_body}"
        return str(self)


class CredentialExpiredError(RankCheckError):
    """The ranking API rejected the bearer token."""


class FetchFailedError(RankCheckError):
    """Transport or HTTP-level failure talking to the ranking API."""


@dataclass
class FetchResult:
    """
    Raw outcome of the ranking request.

    Attributes:
        status_code: HTTP status code.
        body: Response body as text (may be empty).
    """
    status_code: int
    body: str


def create_session(auth_token: str) -> requests.Session:
    """
    Create a requests session for the ranking API.

    Connection retries are disabled; a failed run is simply retried by the
    scheduler at the next interval.

    Args:
        auth_token: Bearer token for the Authorization header.

    Returns:
        Configured requests.Session instance.
    """
    session = requests.Session()

    adapter = HTTPAdapter(max_retries=Retry(total=0, raise_on_status=False))
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    session.headers.update({
        "Accept": "application/json, text/plain, */*",
        "Accept-Language": "en-US,en;q=0.9",
        "Authorization": f"Bearer {auth_token}",
        "Content-Type": "application/json",
        "Origin": PPDB_ORIGIN,
        "Referer": f"{PPDB_ORIGIN}/",
        "User-Agent": DEFAULT_USER_AGENT,
    })

    return session


def request_rank(
    session: requests.Session,
    user_id: str,
    url: str,
    timeout: float = DEFAULT_TIMEOUT
) -> FetchResult:
    """
    POST the student's identifier to the ranking endpoint.

    Args:
        session: Session from create_session().
        user_id: The student's PENGGUNA_ID.
        url: Ranking endpoint URL.
        timeout: Request timeout in seconds.

    Returns:
        FetchResult with the HTTP status and raw body.

    Raises:
        FetchFailedError: On timeout, connection error or any other
            request exception.
    """
    logger.debug(f"POST {url} for pengguna_id={user_id}")

    try:
        response = session.post(url, json={"pengguna_id": user_id}, timeout=timeout)
    except requests.exceptions.Timeout:
        raise FetchFailedError(f"Ranking API request timed out after {timeout}s")
    except requests.exceptions.ConnectionError as e:
        raise FetchFailedError(f"Connection error: {e}")
    except requests.exceptions.RequestException as e:
        raise FetchFailedError(f"Request failed: {e}")

    return FetchResult(status_code=response.status_code, body=response.text or "")


def _embedded_status(payload: Dict[str, Any]) -> Optional[int]:
    for key in EMBEDDED_STATUS_KEYS:
        if key in payload and payload[key] is not None:
            try:
                return int(payload[key])
            except (TypeError, ValueError):
                return None
    return None


def _mentions_expired_token(payload: Dict[str, Any]) -> bool:
    message = str(payload.get("message", "")).lower()
    return any(marker in message for marker in EXPIRED_TOKEN_MARKERS)


def check_fetch_result(result: FetchResult) -> Dict[str, Any]:
    """
    Validate the ranking response at transport and payload level.

    Both signals are checked: the HTTP status, and a status code some API
    versions embed in the JSON body.

    Args:
        result: Raw fetch outcome.

    Returns:
        Decoded JSON payload.

    Raises:
        CredentialExpiredError: HTTP 401, or an embedded 401 / expired-token
            message.
        FetchFailedError: Any other non-success status, or an empty or
            non-JSON body.
    """
    body = result.body

    if result.status_code == 401:
        raise CredentialExpiredError(
            "AUTH token expired: ranking API returned HTTP 401. Update AUTH_TOKEN.",
            status_code=401,
            response_body=body
        )

    if result.status_code != 200:
        raise FetchFailedError(
            f"Ranking API request failed with HTTP status {result.status_code}.",
            status_code=result.status_code,
            response_body=body
        )

    if not body.strip():
        raise FetchFailedError("Ranking API returned an empty body.", status_code=200)

    try:
        payload = json.loads(body)
    except json.JSONDecodeError as e:
        raise FetchFailedError(
            f"Ranking API returned invalid JSON: {e}.",
            status_code=200,
            response_body=body
        )

    if not isinstance(payload, dict):
        raise FetchFailedError(
            "Ranking API returned an unexpected JSON document.",
            status_code=200,
            response_body=body
        )

    embedded = _embedded_status(payload)
    if embedded == 401 or (embedded not in (None, 200) and _mentions_expired_token(payload)):
        raise CredentialExpiredError(
            "AUTH token expired: ranking API rejected the session. Update AUTH_TOKEN.",
            status_code=embedded,
            response_body=body
        )

    if embedded is not None and embedded != 200:
        raise FetchFailedError(
            f"Ranking API reported status {embedded}.",
            status_code=embedded,
            response_body=body
        )

    logger.debug(f"Ranking API response OK ({len(body)} bytes)")
    return payload


def fetch_rank_result(
    auth_token: str,
    user_id: str,
    url: str,
    timeout: float = DEFAULT_TIMEOUT
) -> FetchResult:
    """
    Open a session, send the ranking request, and close the session.

    The result is returned unvalidated so callers keep the raw body for
    diagnostics; pass it to check_fetch_result() next.

    Args:
        auth_token: Bearer token.
        user_id: The student's PENGGUNA_ID.
        url: Ranking endpoint URL.
        timeout: Request timeout in seconds.

    Returns:
        Raw FetchResult.

    Raises:
        FetchFailedError: On transport failures.
    """
    session = create_session(auth_token)

    try:
        result = request_rank(session, user_id, url, timeout)
    finally:
        session.close()

    logger.info(f"Ranking API responded with HTTP {result.status_code}")
    return result
