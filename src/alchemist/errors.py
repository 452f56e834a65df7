# src/alchemist/errors.py
from __future__ import annotations

from datetime import datetime, timezone


class AlchemistError(Exception):
    """Base class for all structured Alchemist exceptions."""

    def __init__(
        self, message: str, source: str | None = None, suggested_action: str | None = None
    ):
        super().__init__(message)
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.error_type = self.__class__.__name__
        self.source = source or "unknown"
        self.suggested_action = suggested_action

    @property
    def message(self) -> str:
        return str(self.args[0])

    def to_dict(self) -> dict[str, str | None]:
        """Structured form for JSON error output (host scripts, services)."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "source": self.source,
            "suggested_action": self.suggested_action,
            "timestamp": self.timestamp,
        }

    def __str__(self) -> str:
        base = f"[{self.error_type}] {self.message}"
        if self.source:
            base += f" (source={self.source})"
        if self.suggested_action:
            base += f" | action: {self.suggested_action}"
        return base


class ConfigError(AlchemistError):
    """Invalid or missing engine configuration (config.yaml)"""


class DataError(AlchemistError):
    """Input contract broken: not a row collection, unknown dataset kind or row id"""


class ValidationError(AlchemistError):
    """Validation report could not be produced or persisted"""
