"""
Tests for the config module.

Tests cover:
- Required variable validation
- Optional defaults and overrides
- .env file loading
"""

import os
from unittest.mock import patch

import pytest

from rank_watcher.config import (
    DEFAULT_DISPLAY_NAME,
    DEFAULT_RANK_API_URL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_STATE_PATH,
    ConfigMissingError,
    load_config,
    load_env_file,
)


@pytest.fixture
def required_env():
    return {
        "AUTH_TOKEN": "a1",
        "PENGGUNA_ID": "u1",
        "BOT_TOKEN": "b1",
        "CHAT_ID": "c1",
    }


class TestLoadConfig:
    """Tests for building MonitorConfig."""

    def test_required_values(self, required_env):
        config = load_config(required_env)

        assert config.auth_token == "a1"
        assert config.user_id == "u1"
        assert config.bot_token == "b1"
        assert config.chat_id == "c1"

    def test_defaults(self, required_env):
        config = load_config(required_env)

        assert config.display_name == DEFAULT_DISPLAY_NAME
        assert config.api_url == DEFAULT_RANK_API_URL
        assert config.state_path == "last_peringkat.txt"
        assert config.activity_log_path == "activity.log"
        assert config.request_timeout == DEFAULT_REQUEST_TIMEOUT
        assert config.dry_run is False
        assert config.log_level == "INFO"

    def test_optional_overrides(self, required_env):
        env = dict(required_env, **{
            "NAMA_ANAK": "Budi",
            "RANK_API_URL": "https://example.com/rank",
            "STATE_PATH": "/var/lib/rank/last.txt",
            "ACTIVITY_LOG_PATH": "/var/log/rank.log",
            "REQUEST_TIMEOUT": "12.5",
            "DRY_RUN": "yes",
            "LOG_LEVEL": "debug",
        })

        config = load_config(env)

        assert config.display_name == "Budi"
        assert config.api_url == "https://example.com/rank"
        assert config.state_path == "/var/lib/rank/last.txt"
        assert config.activity_log_path == "/var/log/rank.log"
        assert config.request_timeout == 12.5
        assert config.dry_run is True
        assert config.log_level == "DEBUG"

    def test_values_are_stripped(self, required_env):
        required_env["AUTH_TOKEN"] = "  a1 \n"

        assert load_config(required_env).auth_token == "a1"

    def test_blank_optional_uses_default(self, required_env):
        """Test that a blank optional value falls back to its default."""
        required_env["NAMA_ANAK"] = "   "
        required_env["STATE_PATH"] = ""

        config = load_config(required_env)

        assert config.display_name == DEFAULT_DISPLAY_NAME
        assert config.state_path == DEFAULT_STATE_PATH

    @pytest.mark.parametrize("name", ["AUTH_TOKEN", "PENGGUNA_ID", "BOT_TOKEN", "CHAT_ID"])
    def test_missing_required(self, required_env, name):
        del required_env[name]

        with pytest.raises(ConfigMissingError, match=name) as exc_info:
            load_config(required_env)

        assert exc_info.value.missing == [name]

    def test_empty_required_counts_as_missing(self, required_env):
        required_env["CHAT_ID"] = "   "

        with pytest.raises(ConfigMissingError, match="CHAT_ID"):
            load_config(required_env)

    def test_all_missing_listed(self):
        with pytest.raises(ConfigMissingError) as exc_info:
            load_config({})

        assert exc_info.value.missing == ["AUTH_TOKEN", "PENGGUNA_ID", "BOT_TOKEN", "CHAT_ID"]

    def test_config_error_is_value_error(self):
        assert issubclass(ConfigMissingError, ValueError)

    @pytest.mark.parametrize("timeout", ["abc", "0", "-5"])
    def test_invalid_timeout(self, required_env, timeout):
        required_env["REQUEST_TIMEOUT"] = timeout

        with pytest.raises(ConfigMissingError, match="REQUEST_TIMEOUT"):
            load_config(required_env)

    def test_repr_hides_secrets(self, required_env):
        text = repr(load_config(required_env))

        assert "a1" not in text
        assert "b1" not in text

    def test_reads_process_environment_by_default(self, required_env):
        with patch.dict(os.environ, required_env, clear=True):
            assert load_config().user_id == "u1"


class TestLoadEnvFile:
    """Tests for .env loading."""

    def test_missing_file(self, tmp_path):
        assert load_env_file(str(tmp_path / ".env")) is False

    def test_loads_values(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text('PENGGUNA_ID="from-file"\nNAMA_ANAK="Budi"\n')

        with patch.dict(os.environ, {}, clear=True):
            assert load_env_file(str(env_file)) is True
            assert os.environ["PENGGUNA_ID"] == "from-file"
            assert os.environ["NAMA_ANAK"] == "Budi"

    def test_environment_wins_over_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text('PENGGUNA_ID="from-file"\n')

        with patch.dict(os.environ, {"PENGGUNA_ID": "from-env"}, clear=True):
            load_env_file(str(env_file))
            assert os.environ["PENGGUNA_ID"] == "from-env"

    def test_env_file_variable(self, tmp_path):
        env_file = tmp_path / "custom.env"
        env_file.write_text('CHAT_ID="c9"\n')

        with patch.dict(os.environ, {"ENV_FILE": str(env_file)}, clear=True):
            assert load_env_file() is True
            assert os.environ["CHAT_ID"] == "c9"
