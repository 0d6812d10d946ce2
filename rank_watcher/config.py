"""
Configuration module for the Rank Watcher.

Builds a single MonitorConfig from environment variables (optionally
loaded from a .env file) at process start. Every other module receives
this object explicitly instead of reading the environment itself.
"""

import os
from dataclasses import dataclass
from typing import List, Mapping, Optional

from dotenv import load_dotenv

from rank_watcher.utils import get_env_var, get_logger, is_truthy


# Module logger
logger = get_logger("config")

DEFAULT_RANK_API_URL = (
    "https://spmb.bogorkab.go.id/v2/ppdb-service/pendaftaran/"
    "pendaftaranDaftarPilihanSekolah"
)
DEFAULT_STATE_PATH = "last_peringkat.txt"
DEFAULT_ACTIVITY_LOG_PATH = "activity.log"
DEFAULT_ENV_FILE = ".env"
DEFAULT_DISPLAY_NAME = "Student"
DEFAULT_REQUEST_TIMEOUT = 30.0  # seconds

REQUIRED_VARS = ["AUTH_TOKEN", "PENGGUNA_ID", "BOT_TOKEN", "CHAT_ID"]


class ConfigMissingError(ValueError):
    """Raised when required configuration values are absent or invalid."""

    def __init__(self, message: str, missing: Optional[List[str]] = None):
        super().__init__(message)
        self.missing = missing or []


@dataclass(frozen=True)
class MonitorConfig:
    """
    Settings for one rank check.

    Attributes:
        auth_token: Bearer token for the ranking API (expires after ~24h).
        user_id: The student's PENGGUNA_ID in the ranking system.
        bot_token: Telegram bot token.
        chat_id: Telegram chat receiving notifications.
        display_name: Label used in notification text.
        api_url: Ranking endpoint.
        state_path: File holding the last notified rank.
        activity_log_path: Append-only activity log.
        request_timeout: Timeout in seconds for every outbound request.
        dry_run: If True, nothing is written or sent.
        log_level: Logging level name.
    """
    auth_token: str
    user_id: str
    bot_token: str
    chat_id: str
    display_name: str = DEFAULT_DISPLAY_NAME
    api_url: str = DEFAULT_RANK_API_URL
    state_path: str = DEFAULT_STATE_PATH
    activity_log_path: str = DEFAULT_ACTIVITY_LOG_PATH
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    dry_run: bool = False
    log_level: str = "INFO"

    def __repr__(self) -> str:
        return (
            f"MonitorConfig(user_id={self.user_id}, chat_id={self.chat_id}, "
            f"state_path={self.state_path}, dry_run={self.dry_run})"
        )


def load_env_file(env_file: Optional[str] = None) -> bool:
    """
    Load variables from a .env file into the process environment.

    Variables already set in the environment take precedence.

    Args:
        env_file: Path to the .env file. Defaults to ENV_FILE or ".env".

    Returns:
        True if a file was found and loaded.
    """
    path = env_file or os.environ.get("ENV_FILE", "").strip() or DEFAULT_ENV_FILE

    if not os.path.isfile(path):
        logger.debug(f"No .env file at {path}, using process environment only")
        return False

    return load_dotenv(path, override=False)


def _parse_timeout(raw: Optional[str]) -> float:
    if raw is None:
        return DEFAULT_REQUEST_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError:
        raise ConfigMissingError(f"REQUEST_TIMEOUT must be a number, got '{raw}'")
    if timeout <= 0:
        raise ConfigMissingError(f"REQUEST_TIMEOUT must be positive, got '{raw}'")
    return timeout


def load_config(environ: Optional[Mapping[str, str]] = None) -> MonitorConfig:
    """
    Build the monitor configuration from environment variables.

    Args:
        environ: Mapping to read from. Defaults to os.environ.

    Returns:
        Populated MonitorConfig.

    Raises:
        ConfigMissingError: If any required variable is missing or empty,
            or an optional value is malformed.
    """
    env = dict(os.environ if environ is None else environ)

    missing = [name for name in REQUIRED_VARS if not get_env_var(name, required=False, environ=env)]
    if missing:
        raise ConfigMissingError(
            f"Missing required environment variables: {', '.join(missing)}",
            missing=missing
        )

    def optional(name: str, default: str) -> str:
        return get_env_var(name, required=False, environ=env) or default

    return MonitorConfig(
        auth_token=env["AUTH_TOKEN"].strip(),
        user_id=env["PENGGUNA_ID"].strip(),
        bot_token=env["BOT_TOKEN"].strip(),
        chat_id=env["CHAT_ID"].strip(),
        display_name=optional("NAMA_ANAK", DEFAULT_DISPLAY_NAME),
        api_url=optional("RANK_API_URL", DEFAULT_RANK_API_URL),
        state_path=optional("STATE_PATH", DEFAULT_STATE_PATH),
        activity_log_path=optional("ACTIVITY_LOG_PATH", DEFAULT_ACTIVITY_LOG_PATH),
        request_timeout=_parse_timeout(get_env_var("REQUEST_TIMEOUT", required=False, environ=env)),
        dry_run=is_truthy(env.get("DRY_RUN")),
        log_level=optional("LOG_LEVEL", "INFO").upper()
    )
