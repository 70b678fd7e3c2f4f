"""Configuration management for slackbot.

Loads YAML settings (settings.yaml) and environment variables (.env)
into a Config object. Environment variables take precedence over the
YAML file for everything that identifies the bot or carries a secret.

Key classes:
    Config: Central configuration manager.

Key functions:
    get_config: Singleton accessor for the global Config instance.
"""

import os
from pathlib import Path
from typing import Optional

import structlog
import yaml
from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .session import DEFAULT_API_URL

logger = structlog.get_logger("slackbot.bot")


class Config:
    """Central configuration manager for slackbot.

    Args:
        config_dir: Directory holding settings.yaml and .env. Defaults
            to ``<repo_root>/config/``.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        if config_dir is None:
            config_dir = Path(__file__).parent.parent / "config"
        self.config_dir = Path(config_dir)

        env_file = self.config_dir / ".env"
        if env_file.exists():
            load_dotenv(env_file)

        self.settings = self._load_yaml("settings.yaml")

    def _load_yaml(self, filename: str) -> dict:
        """Load a YAML configuration file."""
        filepath = self.config_dir / filename
        if filepath.exists():
            with open(filepath, "r") as f:
                return yaml.safe_load(f) or {}
        return {}

    def validate(self):
        """Validate critical settings at startup.

        Raises:
            ConfigurationError: If the token is missing or the bot name
                cannot be used as a command prefix.
        """
        if not self.api_token:
            raise ConfigurationError(
                "No Slack token configured (set SLACK_API_TOKEN)",
                setting_name="api_token",
            )
        name = self.bot_name
        if not name or any(c.isspace() for c in name):
            raise ConfigurationError(
                f"Invalid bot name: {name!r}", setting_name="bot_name",
            )
        if not self.api_token.startswith(("xoxb-", "xoxp-")):
            logger.warning("unexpected_token_format", prefix=self.api_token[:5])
        if self.reconnect_max_attempts < 1:
            logger.error(
                "config_invalid_value",
                key="reconnect.max_attempts",
                value=self.reconnect_max_attempts,
                valid=">= 1",
            )

    @property
    def bot_name(self) -> str:
        """Name the bot answers to. Env var SLACKBOT_NAME takes precedence."""
        return os.environ.get("SLACKBOT_NAME") or self.settings.get("bot_name", "bot")

    @property
    def api_token(self) -> str:
        """Slack bot token. Env var SLACK_API_TOKEN takes precedence."""
        return os.environ.get("SLACK_API_TOKEN") or self.settings.get("api_token", "")

    @property
    def slack_api_url(self) -> str:
        """Slack Web API base URL. Env var SLACK_API_URL takes precedence."""
        return os.environ.get("SLACK_API_URL") or self.settings.get("slack_api_url", DEFAULT_API_URL)

    @property
    def reconnect_max_attempts(self) -> int:
        """Consecutive failed connections before giving up (default 5)."""
        return (self.settings.get("reconnect") or {}).get("max_attempts", 5)

    @property
    def reconnect_base_delay(self) -> float:
        """Seconds before the first reconnect, doubled each time (default 5)."""
        return (self.settings.get("reconnect") or {}).get("base_delay", 5)

    @property
    def log_dir(self) -> Path:
        """Get log directory path."""
        configured = self.settings.get("log_dir")
        if configured:
            return Path(configured).expanduser()
        return Path(__file__).parent.parent / "logs"

    @property
    def logging_level(self) -> str:
        """Global log level (default INFO). Controls console and combined file."""
        log_config = self.settings.get("logging") or {}
        return log_config.get("level", "INFO")

    @property
    def logging_subsystem_levels(self) -> dict:
        """Per-subsystem log level overrides. E.g. {"session": "DEBUG"}."""
        log_config = self.settings.get("logging") or {}
        return log_config.get("subsystem_levels") or {}

    @property
    def logging_max_file_size_mb(self) -> int:
        """Max size per log file in MB before rotation (default 10)."""
        log_config = self.settings.get("logging") or {}
        return log_config.get("max_file_size_mb", 10)

    @property
    def logging_backup_count(self) -> int:
        """Number of rotated log files to keep (default 5)."""
        log_config = self.settings.get("logging") or {}
        return log_config.get("backup_count", 5)


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config
