"""Exceptions raised by csv2sql."""


class CSV2SQLError(Exception):
    """Base class for csv2sql errors."""


class ConfigError(CSV2SQLError, ValueError):
    """Invalid configuration value or unreadable configuration file."""


class UnsupportedEngine(ConfigError):
    """Engine name is not one of the supported SQL dialects."""

    def __init__(self, engine: str):
        self.engine = engine
        super().__init__(f"Unsupported engine: {engine!r} (expected 'postgresql' or 'mysql')")


class IngestError(CSV2SQLError, OSError):
    """Input could not be decoded or parsed as CSV."""
