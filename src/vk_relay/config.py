"""Configuration management."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml
from dotenv import find_dotenv, load_dotenv

from vk_relay.errors import ConfigError


@dataclass
class VKConfig:
    """VK API settings."""
    api_version: str = "5.131"
    posts_per_poll: int = 20
    audio_search_count: int = 5


@dataclass
class TelegramConfig:
    """Telegram Bot API settings."""
    parse_mode: str = "HTML"
    album_limit: int = 10


@dataclass
class HttpConfig:
    """Shared HTTP client settings."""
    timeout: float = 30.0
    max_retries: int = 3
    initial_retry_delay: float = 1.0


@dataclass
class PollingConfig:
    """Polling settings."""
    interval_seconds: float = 300.0


@dataclass
class StorageConfig:
    """Path settings."""
    ledger_path: Path = Path("data/processed-posts.json")


@dataclass
class MatchingConfig:
    """Audio fuzzy matching settings."""
    threshold: float = 0.7


@dataclass
class DispatchConfig:
    """When an item counts as processed.

    on_attempt: after any completed dispatch attempt, even a failed one.
    on_success: only when every message was delivered.
    """
    mark_policy: str = "on_attempt"


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    log_dir: Optional[Path] = None


@dataclass
class Settings:
    """Application settings."""

    # Secrets and identifiers (from environment only)
    vk_access_token: str = ""
    vk_group_id: str = ""
    telegram_bot_token: str = ""
    telegram_channel_id: str = ""

    # Config sections
    vk: VKConfig = field(default_factory=VKConfig)
    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    polling: PollingConfig = field(default_factory=PollingConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    dispatch: DispatchConfig = field(default_factory=DispatchConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def ledger_path(self) -> Path:
        return self.storage.ledger_path

    @property
    def poll_interval(self) -> float:
        return self.polling.interval_seconds

    def missing(self) -> list[str]:
        """Names of required environment variables that are not set."""
        required = {
            "VK_ACCESS_TOKEN": self.vk_access_token,
            "VK_GROUP_ID": self.vk_group_id,
            "TELEGRAM_BOT_TOKEN": self.telegram_bot_token,
            "TELEGRAM_CHANNEL_ID": self.telegram_channel_id,
        }
        return [name for name, value in required.items() if not value]

    def validate(self) -> None:
        """Raise ConfigError if required settings are missing."""
        missing = self.missing()
        if missing:
            raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")
        if self.dispatch.mark_policy not in ("on_attempt", "on_success"):
            raise ConfigError(f"Unsupported mark_policy: {self.dispatch.mark_policy}")
        if self.polling.interval_seconds <= 0:
            raise ConfigError("Polling interval must be positive")


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid config file {config_path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping of sections")
    return config


def _apply_section(section: object, values: dict, path_keys: tuple[str, ...] = ()) -> None:
    for key, value in values.items():
        if not hasattr(section, key):
            raise ConfigError(f"Unknown config key: {key}")
        if key in path_keys and value is not None:
            value = Path(value)
        setattr(section, key, value)


def get_settings(config_path: Path = Path("config.yaml")) -> Settings:
    """Get application settings from YAML config and environment.

    Environment variables win over the YAML file.
    """
    load_dotenv(find_dotenv(usecwd=True))
    config = load_config(config_path)

    settings = Settings(
        vk_access_token=os.getenv("VK_ACCESS_TOKEN", ""),
        vk_group_id=os.getenv("VK_GROUP_ID", ""),
        telegram_bot_token=os.getenv("TELEGRAM_BOT_TOKEN", ""),
        telegram_channel_id=os.getenv("TELEGRAM_CHANNEL_ID", ""),
    )

    # Apply YAML config
    sections = {
        "vk": (settings.vk, ()),
        "telegram": (settings.telegram, ()),
        "http": (settings.http, ()),
        "polling": (settings.polling, ()),
        "storage": (settings.storage, ("ledger_path",)),
        "matching": (settings.matching, ()),
        "dispatch": (settings.dispatch, ()),
        "logging": (settings.logging, ("log_dir",)),
    }
    for name, values in config.items():
        if name not in sections:
            raise ConfigError(f"Unknown config section: {name}")
        if values is not None and not isinstance(values, dict):
            raise ConfigError(f"Config section {name} must be a mapping")
        section, path_keys = sections[name]
        _apply_section(section, values or {}, path_keys)

    # Environment overrides
    if os.getenv("VK_API_VERSION"):
        settings.vk.api_version = os.environ["VK_API_VERSION"]
    if os.getenv("STORAGE_FILE_PATH"):
        settings.storage.ledger_path = Path(os.environ["STORAGE_FILE_PATH"])
    if os.getenv("CHECK_INTERVAL_MS"):
        try:
            settings.polling.interval_seconds = int(os.environ["CHECK_INTERVAL_MS"]) / 1000
        except ValueError as e:
            raise ConfigError(f"CHECK_INTERVAL_MS must be an integer: {e}") from e
    if os.getenv("LOG_LEVEL"):
        settings.logging.level = os.environ["LOG_LEVEL"]

    return settings
