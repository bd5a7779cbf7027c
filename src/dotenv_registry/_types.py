"""Foundation types for the registry.

Provides the ``UNDEFINED`` sentinel and the exception hierarchy.
"""

from __future__ import annotations

from pathlib import Path


# ---------------------------------------------------------------------------
# Sentinel
# ---------------------------------------------------------------------------


class _Undefined:
    """Sentinel for missing config values (distinct from ``None``)."""

    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Base exception for registry errors."""


class DecodeError(ConfigError, ValueError):
    """Raised when a dotenv document is malformed.

    ``line`` is the 1-based line number the problem was detected on (for an
    unterminated quote, the line the quote was opened on).
    """

    def __init__(self, message: str, line: int) -> None:
        self.line = line
        super().__init__(f"line {line}: {message}")


class ConfigFileNotFoundError(ConfigError, FileNotFoundError):
    """Raised by ``load()`` when the configured file does not exist."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"Configuration file not found: {self.path}")


class ConfigWriteError(ConfigError):
    """Raised when the cache cannot be written back to disk."""


class BindError(ConfigError):
    """Raised when configuration values cannot be bound onto a model."""


class UnsupportedFieldTypeError(BindError):
    """Raised when a model field has a type no caster knows about."""

    def __init__(self, field_name: str, annotation: object) -> None:
        self.field_name = field_name
        self.annotation = annotation
        super().__init__(f"Unsupported type {annotation!r} for field '{field_name}'")


class UndefinedValueError(ConfigError):
    """Raised when a required configuration key is missing."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Configuration key '{key}' is required but not set.")
