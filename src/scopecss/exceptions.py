"""Scoped CSS exceptions."""
from typing import Iterable


class ScopeCSSError(Exception):
    """Base class for scopecss errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class ClassNotFoundError(ScopeCSSError, KeyError):
    """Raised when a class name is not defined by a ruleset."""

    def __init__(self, class_name: str, available: Iterable[str] = ()):
        self.class_name = class_name
        self.available = sorted(available)
        super().__init__(f"no class found {class_name!r}")

    def __str__(self) -> str:
        if self.available:
            return f"{self.message} (defined: {', '.join(self.available)})"
        return self.message


class ConfigError(ScopeCSSError):
    """Raised when a configuration value is invalid."""
