"""Configuration management for Belfast.

Uses pydantic for validation and type safety.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from belfast.constants import (
    CALLBACK_BUFFER_SIZE,
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_MAX_WARN_AMOUNT,
    DEFAULT_STATUS_MESSAGE,
    DEFAULT_WELCOME_MESSAGES,
)
from belfast.exceptions import ConfigurationError

logger = logging.getLogger('belfast_bot')

DEFAULT_TOKEN = "YOUR TOKEN"


class Settings(BaseSettings):
    """Application settings with validation.

    All settings are loaded from environment variables or .env file.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore'
    )

    # Required settings
    discord_token: str = Field(..., validation_alias='DISCORD_TOKEN')

    # Optional settings with defaults
    log_level: str = Field(default="INFO", validation_alias='LOG_LEVEL')
    bot_prefix: str = Field(default="b!", validation_alias='BOT_PREFIX')
    database_path: Path = Field(default=Path("data/database.json"), validation_alias='DATABASE_PATH')
    command_timeout: float = Field(default=DEFAULT_COMMAND_TIMEOUT, validation_alias='COMMAND_TIMEOUT')

    # Third-party APIs
    osu_api_token: Optional[str] = Field(default=None, validation_alias='OSU_API_TOKEN')

    # Moderation
    max_warn_amount: int = Field(default=DEFAULT_MAX_WARN_AMOUNT, validation_alias='MAX_WARN_AMOUNT')
    word_blacklist: Optional[str] = Field(default=None, validation_alias='WORD_BLACKLIST')

    # Presentation
    status_message: str = Field(default=DEFAULT_STATUS_MESSAGE, validation_alias='STATUS_MESSAGE')
    welcome_messages: list[str] = Field(
        default_factory=lambda: list(DEFAULT_WELCOME_MESSAGES),
        validation_alias='WELCOME_MESSAGES'
    )

    # Pagination
    pagination_buffer_size: int = Field(default=CALLBACK_BUFFER_SIZE, validation_alias='PAGINATION_BUFFER_SIZE')

    def get_blacklisted_words(self) -> set[str]:
        """Parse the word blacklist into a set of lowercase words.

        Returns:
            Set of words, or empty set if no blacklist is configured
        """
        if not self.word_blacklist:
            return set()
        return {word.strip().lower() for word in self.word_blacklist.split(',') if word.strip()}

    def format_status(self, server_count: int) -> str:
        """Substitute the :serverCount: and :prefix: placeholders in the status message."""
        return (
            self.status_message
            .replace(":serverCount:", str(server_count))
            .replace(":prefix:", self.bot_prefix)
        )

    @field_validator('discord_token')
    @classmethod
    def validate_token(cls, v):
        if not v or v == DEFAULT_TOKEN:
            raise ValueError("Default token detected, please put your token in the config file")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v_upper

    @field_validator('max_warn_amount', 'pagination_buffer_size')
    @classmethod
    def validate_positive(cls, v):
        if v < 1:
            raise ValueError("must be at least 1")
        return v


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the application settings instance.

    Returns:
        Settings object with validated configuration

    Raises:
        ConfigurationError: If required settings are missing or invalid
    """
    global _settings
    if _settings is None:
        try:
            _settings = Settings()
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
    return _settings
