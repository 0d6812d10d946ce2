"""
Interactive setup for the Rank Watcher.

Prompts for the credentials the watcher needs and writes them to a .env
file. Scheduling the watcher (cron, systemd timer) is left to the user.
"""

import getpass
import os
import sys
from typing import Callable, Dict, List, Optional, Tuple

from rank_watcher.config import DEFAULT_ENV_FILE
from rank_watcher.utils import safe_write_text


# (variable, prompt, secret)
ENV_PROMPTS: List[Tuple[str, str, bool]] = [
    ("NAMA_ANAK", "Enter student name: ", False),
    ("BOT_TOKEN", "Enter Telegram Bot Token: ", False),
    ("CHAT_ID", "Enter Telegram Chat ID: ", False),
    ("AUTH_TOKEN", "Enter PPDB AUTH_TOKEN (sensitive - will be hidden): ", True),
    ("PENGGUNA_ID", "Enter PPDB PENGGUNA_ID: ", False),
]


def prompt_env_values(
    input_func: Callable[[str], str] = input,
    secret_func: Callable[[str], str] = getpass.getpass
) -> Dict[str, str]:
    """
    Ask the user for every .env value.

    Args:
        input_func: Reader for visible answers.
        secret_func: Reader for hidden answers.

    Returns:
        Mapping of variable name to stripped answer.
    """
    values: Dict[str, str] = {}
    for name, prompt, secret in ENV_PROMPTS:
        reader = secret_func if secret else input_func
        values[name] = reader(prompt).strip()
    return values


def format_env_file(values: Dict[str, str]) -> str:
    """Render KEY="value" lines, escaping embedded quotes and backslashes."""
    lines = []
    for name, value in values.items():
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        lines.append(f'{name}="{escaped}"')
    return "\n".join(lines) + "\n"


def write_env_file(path: str, values: Dict[str, str]) -> bool:
    """
    Write a new .env file.

    Args:
        path: Destination path.
        values: Variables to write.

    Returns:
        True if written, False if the file already exists or the write failed.
    """
    if os.path.exists(path):
        return False
    return safe_write_text(path, format_env_file(values))


def main(env_file: Optional[str] = None) -> int:
    """Entry point for rank-watcher-setup."""
    path = env_file or DEFAULT_ENV_FILE

    print("=== PPDB Rank Watcher Setup ===")

    if os.path.exists(path):
        print(f"{path} already exists. Skipping creation.")
        return 0

    values = prompt_env_values()
    missing = [name for name, value in values.items() if name != "NAMA_ANAK" and not value]
    if missing:
        print(f"Missing values: {', '.join(missing)}. Nothing written.", file=sys.stderr)
        return 1

    if not write_env_file(path, values):
        print(f"Could not write {path}.", file=sys.stderr)
        return 1

    print(f"{path} created successfully.")
    print("Run 'rank-watcher' to test, then schedule it (e.g. hourly via cron).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
