"""
Notify module for the Rank Watcher.

Sends rank-change and failure notifications through the Telegram Bot API.
Delivery is best-effort: a missing or false acknowledgment is logged as a
warning and never raised, so it cannot change the outcome of a run.
"""

from typing import Optional

import requests

from rank_watcher.config import MonitorConfig
from rank_watcher.fetch import CredentialExpiredError, FetchFailedError, RankCheckError
from rank_watcher.parse import ParseFailedError, RankObservation
from rank_watcher.utils import get_logger


# Module logger
logger = get_logger("notify")

TELEGRAM_API_BASE = "https://api.telegram.org"
DEFAULT_TIMEOUT = 30  # seconds


def build_send_message_url(bot_token: str) -> str:
    """Telegram sendMessage endpoint for a bot."""
    return f"{TELEGRAM_API_BASE}/bot{bot_token}/sendMessage"


def redact_token(text: str, bot_token: str) -> str:
    """Mask the bot token, which is part of every request URL."""
    if not bot_token:
        return text
    return text.replace(bot_token, "<BOT_TOKEN>")


def send_telegram_message(
    bot_token: str,
    chat_id: str,
    text: str,
    timeout: float = DEFAULT_TIMEOUT
) -> bool:
    """
    Send a plain-text Telegram message.

    Args:
        bot_token: Telegram bot token.
        chat_id: Destination chat identifier.
        text: Message body.
        timeout: Request timeout in seconds.

    Returns:
        True if Telegram acknowledged the message (ok == true), False otherwise.
    """
    try:
        response = requests.post(
            build_send_message_url(bot_token),
            data={"chat_id": chat_id, "text": text},
            timeout=timeout
        )
    except requests.exceptions.RequestException as e:
        logger.warning(
            f"Failed to send Telegram notification: {redact_token(str(e), bot_token)}"
        )
        return False

    body = redact_token(response.text or "", bot_token)

    try:
        data = response.json()
    except ValueError:
        logger.warning(f"Failed to send Telegram notification. Response: {body}")
        return False

    if not isinstance(data, dict) or data.get("ok") is not True:
        logger.warning(f"Failed to send Telegram notification. Response: {body}")
        return False

    logger.info("Telegram notification sent successfully.")
    return True


def format_change_message(
    display_name: str,
    observation: RankObservation,
    previous_rank: Optional[str] = None
) -> str:
    """
    Format the rank-change notification.

    Args:
        display_name: Student label.
        observation: Current rank and quota.
        previous_rank: Last stored rank, if any.

    Returns:
        Message text.
    """
    message = (
        f"{display_name} - Rank changed to {observation.rank_text} "
        f"of {observation.quota_text}"
    )
    if previous_rank is not None:
        message += f" (previously {previous_rank})"
    return message


def format_failure_message(error: RankCheckError) -> str:
    """
    Format the operator-facing message for a failed check.

    Args:
        error: The classified failure.

    Returns:
        Message text.
    """
    if isinstance(error, CredentialExpiredError):
        return "Error: PPDB rank check failed. The AUTH_TOKEN has expired. Please update it."

    if isinstance(error, ParseFailedError):
        return "Error: Could not parse rank/quota from API response."

    if isinstance(error, FetchFailedError) and error.status_code is not None:
        return f"Error: PPDB rank check API request failed with status {error.status_code}."

    return f"Error: PPDB rank check failed: {error}"


def notify_rank_change(
    config: MonitorConfig,
    observation: RankObservation,
    previous_rank: Optional[str] = None
) -> bool:
    """
    Notify the operator about a changed rank.

    Args:
        config: Monitor configuration.
        observation: Current rank and quota.
        previous_rank: Last stored rank, if any.

    Returns:
        True if the message was delivered, False if it failed or dry_run.
    """
    message = format_change_message(config.display_name, observation, previous_rank)

    if config.dry_run:
        logger.info(f"[DRY RUN] Would send: {message}")
        return False

    return send_telegram_message(
        config.bot_token,
        config.chat_id,
        message,
        timeout=config.request_timeout
    )


def notify_failure(config: MonitorConfig, error: RankCheckError) -> bool:
    """
    Best-effort warning to the operator that the check failed.

    Args:
        config: Monitor configuration.
        error: The classified failure.

    Returns:
        True if the message was delivered, False if it failed or dry_run.
    """
    message = format_failure_message(error)

    if config.dry_run:
        logger.info(f"[DRY RUN] Would send: {message}")
        return False

    return send_telegram_message(
        config.bot_token,
        config.chat_id,
        message,
        timeout=config.request_timeout
    )
