#!/usr/bin/env python3
"""
Main orchestration module for the Rank Watcher.

One invocation performs one check:
fetch → validate → parse → compare → persist → notify

Scheduling is left to an external periodic runner (cron, systemd timer);
the process runs once and exits with a status code describing the outcome.
"""

import os
import sys
from typing import Optional

from rank_watcher.compare import has_rank_changed, load_last_rank, save_last_rank
from rank_watcher.config import (
    DEFAULT_ACTIVITY_LOG_PATH,
    ConfigMissingError,
    MonitorConfig,
    load_config,
    load_env_file,
)
from rank_watcher.fetch import (
    CredentialExpiredError,
    RankCheckError,
    check_fetch_result,
    fetch_rank_result,
)
from rank_watcher.notify import notify_failure, notify_rank_change
from rank_watcher.parse import parse_rank_response
from rank_watcher.utils import get_logger, setup_logging


# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_ENV_ERROR = 2
EXIT_AUTH_EXPIRED = 3


def handle_check_error(config: MonitorConfig, error: RankCheckError) -> int:
    """
    Log a failed check, warn the operator, and pick the exit code.

    Args:
        config: Monitor configuration.
        error: The classified failure.

    Returns:
        Exit code for the run.
    """
    logger = get_logger("main")

    logger.error(f"Error: {error.describe()}")

    if isinstance(error, CredentialExpiredError):
        logger.error("Log in to the PPDB site again and copy the new bearer token into AUTH_TOKEN.")
        exit_code = EXIT_AUTH_EXPIRED
    else:
        exit_code = EXIT_FAILURE

    if not notify_failure(config, error) and not config.dry_run:
        logger.warning("Failure notification could not be delivered")

    return exit_code


def run_check(config: MonitorConfig) -> int:
    """
    Execute one rank check.

    Args:
        config: Monitor configuration.

    Returns:
        Exit code (0 whether or not the rank changed, non-zero on failure).
    """
    logger = get_logger("main")

    logger.info("Fetching current rank...")

    try:
        result = fetch_rank_result(
            config.auth_token,
            config.user_id,
            config.api_url,
            timeout=config.request_timeout
        )
        payload = check_fetch_result(result)
        observation = parse_rank_response(payload, raw_body=result.body)
    except RankCheckError as e:
        return handle_check_error(config, e)

    logger.info(
        f"Successfully fetched rank: {observation.rank_text} of {observation.quota_text}"
    )

    last_rank = load_last_rank(config.state_path)

    if not has_rank_changed(observation.rank, last_rank):
        logger.info(
            f"Rank remains unchanged at {observation.rank_text} of "
            f"{observation.quota_text}. No notification sent."
        )
        return EXIT_SUCCESS

    logger.info(
        f"Rank changed from {last_rank or 'N/A'} to {observation.rank_text} "
        f"of {observation.quota_text}"
    )

    if config.dry_run:
        logger.info(f"[DRY RUN] Would save rank {observation.rank_text} to {config.state_path}")
    elif not save_last_rank(observation.rank, config.state_path):
        logger.error("Could not persist the new rank; skipping notification")
        return EXIT_FAILURE

    if not notify_rank_change(config, observation, last_rank) and not config.dry_run:
        logger.warning("Rank change recorded but the notification was not delivered")

    return EXIT_SUCCESS


def main(env_file: Optional[str] = None) -> int:
    """
    Main entry point for the Rank Watcher.

    Loads .env and configuration, sets up logging, and runs one check
    with proper error handling.

    Args:
        env_file: Optional path to a .env file.

    Returns:
        Exit code for the process.
    """
    try:
        load_env_file(env_file)
        config = load_config()
    except (ConfigMissingError, OSError, UnicodeDecodeError) as e:
        setup_logging(
            os.environ.get("LOG_LEVEL", "INFO"),
            os.environ.get("ACTIVITY_LOG_PATH", "").strip() or DEFAULT_ACTIVITY_LOG_PATH
        )
        logger = get_logger("main")
        if isinstance(e, ConfigMissingError):
            logger.error(f"Error: {e}")
            logger.error("Required: AUTH_TOKEN, PENGGUNA_ID, BOT_TOKEN, CHAT_ID")
        else:
            logger.error(f"Error: cannot read .env file: {e}")
        return EXIT_ENV_ERROR

    setup_logging(config.log_level, config.activity_log_path)
    logger = get_logger("main")

    if config.dry_run:
        logger.info("Running in DRY RUN mode - nothing will be saved or sent")

    try:
        return run_check(config)

    except KeyboardInterrupt:
        logger.warning("Rank check interrupted by user")
        return EXIT_FAILURE

    except Exception as e:
        logger.exception(f"Unexpected error during rank check: {e}")
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
