"""Custom exception classes for Belfast bot.

Provides domain-specific exceptions for better error handling and debugging.
"""
from discord.ext import commands


class BelfastError(Exception):
    """Base exception for all Belfast-specific errors."""
    pass


class ConfigurationError(BelfastError):
    """Raised when bot configuration is missing or invalid."""
    pass


class DatabaseError(BelfastError):
    """Raised when the JSON datastore cannot be read or written."""
    pass


class ApiError(BelfastError):
    """Raised when a third-party API request fails."""

    def __init__(self, service: str, message: str, status: int | None = None):
        super().__init__(f"{service}: {message}")
        self.service = service
        self.status = status


class ValidationError(BelfastError):
    """Raised when user input validation fails."""
    pass


class RateLimitError(commands.CheckFailure):
    """Raised when a module exceeds its command rate limit."""
    pass
