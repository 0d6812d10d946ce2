"""
Tests for the interactive .env setup.
"""

from unittest.mock import Mock, patch

from dotenv import dotenv_values

from rank_watcher.setup_env import (
    ENV_PROMPTS,
    format_env_file,
    main,
    prompt_env_values,
    write_env_file,
)


ANSWERS = {
    "NAMA_ANAK": "Budi",
    "BOT_TOKEN": "b1",
    "CHAT_ID": "c1",
    "AUTH_TOKEN": "a1",
    "PENGGUNA_ID": "u1",
}


def answer_for(prompt):
    for name, text, _ in ENV_PROMPTS:
        if text == prompt:
            return f" {ANSWERS[name]} "
    raise AssertionError(f"unexpected prompt {prompt!r}")


class TestPromptEnvValues:
    """Tests for collecting answers."""

    def test_collects_and_strips(self):
        values = prompt_env_values(input_func=answer_for, secret_func=answer_for)

        assert values == ANSWERS

    def test_auth_token_is_hidden(self):
        visible = Mock(side_effect=answer_for)
        hidden = Mock(side_effect=answer_for)

        prompt_env_values(input_func=visible, secret_func=hidden)

        hidden.assert_called_once()
        assert "AUTH_TOKEN" in hidden.call_args.args[0]
        assert visible.call_count == len(ENV_PROMPTS) - 1


class TestWriteEnvFile:
    """Tests for writing the .env file."""

    def test_written_file_is_loadable(self, tmp_path):
        path = tmp_path / ".env"

        assert write_env_file(str(path), ANSWERS) is True
        assert dotenv_values(path) == ANSWERS

    def test_quotes_are_escaped(self, tmp_path):
        path = tmp_path / ".env"

        write_env_file(str(path), {"NAMA_ANAK": 'Budi "B" Santoso'})

        assert dotenv_values(path)["NAMA_ANAK"] == 'Budi "B" Santoso'

    def test_existing_file_not_overwritten(self, tmp_path):
        path = tmp_path / ".env"
        path.write_text('AUTH_TOKEN="keep"\n')

        assert write_env_file(str(path), ANSWERS) is False
        assert path.read_text() == 'AUTH_TOKEN="keep"\n'

    def test_format(self):
        assert format_env_file({"A": "1", "B": "2"}) == 'A="1"\nB="2"\n'


class TestSetupMain:
    """Tests for the setup entry point."""

    def test_creates_file(self, tmp_path):
        path = tmp_path / ".env"

        with patch("rank_watcher.setup_env.prompt_env_values", return_value=ANSWERS):
            assert main(str(path)) == 0

        assert dotenv_values(path)["PENGGUNA_ID"] == "u1"

    def test_skips_existing_file(self, tmp_path):
        path = tmp_path / ".env"
        path.write_text("X=1\n")

        with patch("rank_watcher.setup_env.prompt_env_values") as mock_prompt:
            assert main(str(path)) == 0

        mock_prompt.assert_not_called()

    def test_missing_answers(self, tmp_path):
        path = tmp_path / ".env"
        answers = dict(ANSWERS, AUTH_TOKEN="")

        with patch("rank_watcher.setup_env.prompt_env_values", return_value=answers):
            assert main(str(path)) == 1

        assert not path.exists()
