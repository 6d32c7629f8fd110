"""Exceptions raised by typearch-guard."""


class TypeArchError(Exception):
    """Base exception for typearch-guard."""


class ConfigError(TypeArchError):
    """Project or tool configuration is invalid."""


class GlobPatternError(ConfigError):
    """A glob pattern could not be compiled."""

    def __init__(self, pattern: object, reason: str):
        super().__init__(f"Invalid glob pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason
