"""
Tests for main.py - Main Entry Point

Tests for the main entry point including:
- Logging configuration and its fallback
- External tool checks
- Token validation
- Bot creation and run error handling
"""

import json
import logging
from unittest.mock import MagicMock, patch

import pytest
from pydantic import SecretStr

from discord_music_assistant.main import check_external_tools, cli, main, setup_logging


@pytest.fixture(autouse=True)
def _restore_root_level():
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)


class TestLoggingSetup:
    """Tests for logging configuration."""

    def test_dictconfig_called_when_json_exists(self, tmp_path):
        config = {"version": 1, "disable_existing_loggers": False, "root": {"level": "INFO"}}
        path = tmp_path / "logging_config.json"
        path.write_text(json.dumps(config))

        with patch("logging.config.dictConfig") as mock_dc:
            setup_logging("DEBUG", path)

        mock_dc.assert_called_once_with(config)
        assert logging.getLogger().level == logging.DEBUG

    def test_fallback_when_json_missing(self, tmp_path):
        with patch("logging.basicConfig") as mock_bc:
            setup_logging("warning", tmp_path / "missing.json")

        mock_bc.assert_called_once()
        assert mock_bc.call_args.kwargs["level"] == logging.WARNING

    def test_fallback_when_json_invalid(self, tmp_path):
        path = tmp_path / "logging_config.json"
        path.write_text("{not json")

        with patch("logging.basicConfig") as mock_bc:
            setup_logging("INFO", path)

        mock_bc.assert_called_once()

    def test_unknown_level_defaults_to_info(self, tmp_path):
        with patch("logging.basicConfig") as mock_bc:
            setup_logging("CHATTY", tmp_path / "missing.json")

        assert mock_bc.call_args.kwargs["level"] == logging.INFO


class TestExternalTools:
    def test_missing_ffmpeg_is_reported(self):
        with patch("discord_music_assistant.main.shutil.which", return_value=None):
            assert check_external_tools() == ["ffmpeg"]

    def test_all_tools_present(self):
        with patch("discord_music_assistant.main.shutil.which", return_value="/usr/bin/ffmpeg"):
            assert check_external_tools() == []


# =============================================================================
# main()
# =============================================================================


@pytest.fixture
def mock_settings():
    settings = MagicMock()
    settings.discord.token = SecretStr("test-token")
    settings.log_level = "INFO"
    settings.environment = "testing"
    return settings


@pytest.fixture
def patched_main(mock_settings):
    """Patch everything main() touches and yield the bot it creates."""
    bot = MagicMock()
    with (
        patch(
            "discord_music_assistant.config.settings.get_settings", return_value=mock_settings
        ),
        patch("discord_music_assistant.main.setup_logging"),
        patch("discord_music_assistant.main.check_external_tools", return_value=[]),
        patch("discord_music_assistant.config.container.create_container") as mock_cc,
        patch(
            "discord_music_assistant.infrastructure.discord.bot.create_bot", return_value=bot
        ) as mock_cb,
    ):
        yield bot, mock_cc, mock_cb


class TestMain:
    """Tests for the main() entry point."""

    def test_missing_token_exits_with_error(self, patched_main, mock_settings):
        _, _, mock_cb = patched_main
        mock_settings.discord.token = SecretStr("")

        assert main() == 1
        mock_cb.assert_not_called()

    def test_runs_bot_with_token(self, patched_main, mock_settings):
        bot, mock_cc, mock_cb = patched_main

        assert main() == 0

        mock_cc.assert_called_once_with(mock_settings)
        mock_cb.assert_called_once_with(mock_cc.return_value, mock_settings)
        bot.run_with_graceful_shutdown.assert_called_once_with("test-token")

    def test_keyboard_interrupt_is_clean_exit(self, patched_main):
        bot, _, _ = patched_main
        bot.run_with_graceful_shutdown.side_effect = KeyboardInterrupt

        assert main() == 0

    def test_fatal_error_returns_one(self, patched_main):
        bot, _, _ = patched_main
        bot.run_with_graceful_shutdown.side_effect = RuntimeError("gateway exploded")

        assert main() == 1

    def test_cli_exits_with_main_code(self):
        with patch("discord_music_assistant.main.main", return_value=1):
            with pytest.raises(SystemExit) as exc_info:
                cli()

        assert exc_info.value.code == 1
