"""Exception hierarchy.

The engine itself never raises for a malformed rule (see
``sanitizer.sanitize``); these are raised by the layers that author,
import and configure rules.
"""

from __future__ import annotations


class SanitizerError(Exception):
    """Base exception for prompt-sanitizer."""


class PatternError(SanitizerError):
    """A regex pattern or flag string that does not compile."""

    def __init__(self, message: str, pattern: str | None = None) -> None:
        super().__init__(message)
        self.pattern = pattern


class InvalidRuleError(SanitizerError):
    """Raised when a rule is refused at authoring time."""


class RuleImportError(SanitizerError):
    """Raised when an imported rule payload is malformed."""


class ConfigurationError(SanitizerError):
    """Raised when configuration is invalid."""
