"""
Tests for main.py - Main Entry Point

Tests for the main entry point including:
- Logging configuration
- Token validation
- FFmpeg availability check
- Bot startup and error handling
"""

import json
import logging
from unittest.mock import MagicMock, mock_open, patch

from pydantic import SecretStr

from discord_queue_player.main import check_ffmpeg, main, setup_logging


class TestLoggingSetup:
    """Tests for logging configuration."""

    def _make_valid_config(self) -> dict:
        return {
            "version": 1,
            "disable_existing_loggers": False,
            "handlers": {},
            "loggers": {
                "discord": {"level": "WARNING"},
                "httpx": {"level": "WARNING"},
                "yt_dlp": {"level": "WARNING"},
            },
            "root": {"level": "INFO", "handlers": []},
        }

    def test_dictconfig_called_when_json_exists(self):
        """Should call dictConfig when logging_config.json exists."""
        config = self._make_valid_config()
        m = mock_open(read_data=json.dumps(config))
        with (
            patch("builtins.open", m),
            patch("logging.config.dictConfig") as mock_dc,
        ):
            setup_logging()

            mock_dc.assert_called_once_with(config)

    def test_fallback_to_basicconfig_when_json_missing(self):
        """Should fallback to basicConfig when logging_config.json is missing."""
        with (
            patch("builtins.open", side_effect=FileNotFoundError),
            patch("logging.basicConfig") as mock_bc,
        ):
            setup_logging()

            mock_bc.assert_called_once()
            assert mock_bc.call_args[1]["level"] == logging.INFO

    def test_fallback_to_basicconfig_when_json_malformed(self):
        """Should fallback to basicConfig when JSON is malformed."""
        m = mock_open(read_data="{invalid json")
        with (
            patch("builtins.open", m),
            patch("logging.basicConfig") as mock_bc,
        ):
            setup_logging("WARNING")

            assert mock_bc.call_args[1]["level"] == logging.WARNING

    def test_root_logger_level_overridden_by_settings(self):
        """Should override root logger level with the provided log_level."""
        m = mock_open(read_data=json.dumps(self._make_valid_config()))
        with (
            patch("builtins.open", m),
            patch("logging.config.dictConfig"),
            patch("logging.getLogger") as mock_get_logger,
        ):
            mock_root = MagicMock()
            mock_get_logger.return_value = mock_root

            setup_logging("DEBUG")

            mock_root.setLevel.assert_called_once_with(logging.DEBUG)

    def test_shipped_config_quiets_libraries(self):
        """The bundled logging_config.json should keep library loggers at WARNING."""
        from discord_queue_player.main import _LOGGING_CONFIG_PATH

        config = json.loads(_LOGGING_CONFIG_PATH.read_text())

        for name in ("discord", "httpx", "yt_dlp"):
            assert config["loggers"][name]["level"] == "WARNING"


def _settings(token: str, environment: str = "test", debug: bool = False) -> MagicMock:
    mock_settings = MagicMock()
    mock_settings.discord.token = SecretStr(token)
    mock_settings.log_level = "INFO"
    mock_settings.debug = debug
    mock_settings.environment = environment
    mock_settings.audio.ffmpeg_executable = "ffmpeg"
    return mock_settings


class TestMainFunction:
    """Tests for main entry point function."""

    def test_main_returns_error_without_token(self):
        """Should return error code when Discord token is missing."""
        with (
            patch("discord_queue_player.config.settings.get_settings", return_value=_settings("")),
            patch("discord_queue_player.main.setup_logging"),
        ):
            assert main() == 1

    def test_main_successful_run(self):
        """Should run the bot with the token and return 0."""
        mock_bot = MagicMock()

        with (
            patch("discord_queue_player.config.settings.get_settings", return_value=_settings("tok")),
            patch("discord_queue_player.main.setup_logging"),
            patch("discord_queue_player.config.container.create_container") as mock_cc,
            patch(
                "discord_queue_player.infrastructure.discord.bot.create_bot", return_value=mock_bot
            ) as mock_cb,
        ):
            assert main() == 0

        mock_cb.assert_called_once_with(mock_cc.return_value, mock_cc.call_args[0][0])
        mock_bot.run.assert_called_once_with("tok", log_handler=None)

    def test_main_fatal_error(self):
        """Should return 1 when the bot crashes."""
        mock_bot = MagicMock()
        mock_bot.run.side_effect = RuntimeError("crash")

        with (
            patch("discord_queue_player.config.settings.get_settings", return_value=_settings("tok")),
            patch("discord_queue_player.main.setup_logging"),
            patch("discord_queue_player.config.container.create_container"),
            patch(
                "discord_queue_player.infrastructure.discord.bot.create_bot", return_value=mock_bot
            ),
        ):
            assert main() == 1

    def test_main_keyboard_interrupt(self):
        """Should exit cleanly on Ctrl+C."""
        mock_bot = MagicMock()
        mock_bot.run.side_effect = KeyboardInterrupt

        with (
            patch("discord_queue_player.config.settings.get_settings", return_value=_settings("tok")),
            patch("discord_queue_player.main.setup_logging"),
            patch("discord_queue_player.config.container.create_container"),
            patch(
                "discord_queue_player.infrastructure.discord.bot.create_bot", return_value=mock_bot
            ),
        ):
            assert main() == 0

    def test_main_debug_forces_debug_logging(self):
        """The debug flag should win over the configured log level."""
        with (
            patch(
                "discord_queue_player.config.settings.get_settings",
                return_value=_settings("", debug=True),
            ),
            patch("discord_queue_player.main.setup_logging") as mock_setup,
        ):
            main()

        mock_setup.assert_called_once_with("DEBUG")

    def test_main_refuses_production_without_ffmpeg(self):
        """Production should not start when FFmpeg is missing."""
        with (
            patch(
                "discord_queue_player.config.settings.get_settings",
                return_value=_settings("tok", environment="production"),
            ),
            patch("discord_queue_player.main.setup_logging"),
            patch("discord_queue_player.main.shutil.which", return_value=None),
            patch("discord_queue_player.infrastructure.discord.bot.create_bot") as mock_cb,
        ):
            assert main() == 1

        mock_cb.assert_not_called()

    def test_main_starts_without_ffmpeg_outside_production(self):
        """Development runs should only warn about a missing FFmpeg."""
        mock_bot = MagicMock()

        with (
            patch("discord_queue_player.config.settings.get_settings", return_value=_settings("tok")),
            patch("discord_queue_player.main.setup_logging"),
            patch("discord_queue_player.main.shutil.which", return_value=None),
            patch("discord_queue_player.config.container.create_container"),
            patch(
                "discord_queue_player.infrastructure.discord.bot.create_bot", return_value=mock_bot
            ),
        ):
            assert main() == 0

        mock_bot.run.assert_called_once_with("tok", log_handler=None)


class TestCheckFfmpeg:
    """Tests for the FFmpeg availability check."""

    def test_found(self):
        with patch("discord_queue_player.main.shutil.which", return_value="/usr/bin/ffmpeg") as mock_which:
            assert check_ffmpeg(_settings("tok")) is True

        mock_which.assert_called_once_with("ffmpeg")

    def test_missing_logs_warning(self, caplog):
        with (
            caplog.at_level(logging.WARNING),
            patch("discord_queue_player.main.shutil.which", return_value=None),
        ):
            assert check_ffmpeg(_settings("tok")) is False

        assert "ffmpeg" in caplog.text
