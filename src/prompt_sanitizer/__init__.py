"""Prompt Sanitizer: ordered find/replace rules for scrubbing prompts."""

from .sanitizer import sanitize, preview_sanitization, test_pattern, validate_pattern
from .matchers import LiteralMatcher, RegexMatcher, build_matcher
from .patterns import COMMON_PATTERNS, default_rules, preset_rule
from .rulebook import RuleBook
from .session import ReplacementSession
from .middleware import SanitizeMiddleware
from .config import create_middleware, load_config, load_from_yaml, load_rules_file
from .errors import (
    SanitizerError, PatternError, InvalidRuleError, RuleImportError, ConfigurationError,
)
from .types import (
    Rule, AppliedRule, SkippedRule, SanitizationResult, PatternTest, PatternValidation,
)

__all__ = [
    "sanitize", "preview_sanitization", "test_pattern", "validate_pattern",
    "LiteralMatcher", "RegexMatcher", "build_matcher",
    "COMMON_PATTERNS", "default_rules", "preset_rule",
    "RuleBook",
    "ReplacementSession",
    "SanitizeMiddleware",
    "create_middleware", "load_config", "load_from_yaml", "load_rules_file",
    "SanitizerError", "PatternError", "InvalidRuleError", "RuleImportError",
    "ConfigurationError",
    "Rule", "AppliedRule", "SkippedRule", "SanitizationResult", "PatternTest",
    "PatternValidation",
]
__version__ = "0.1.0"
