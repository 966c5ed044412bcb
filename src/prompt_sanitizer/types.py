"""Core types."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

# distinct matched value → replacement token
ReplacementMap = dict[str, str]

# JSON interchange keys (camelCase, as written by the browser extension)
_JSON_KEYS = {
    "id": "id",
    "name": "name",
    "pattern": "pattern",
    "replacement": "replacement",
    "is_regex": "isRegex",
    "flags": "flags",
    "enabled": "enabled",
    "category": "category",
    "is_system": "isSystem",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}


@dataclass(frozen=True, slots=True)
class Rule:
    """A user-authored find/replace rule."""
    id: str
    name: str
    pattern: str
    replacement: str
    is_regex: bool = False
    flags: str | None = None        # regex only; None → "g"
    enabled: bool = True
    category: str | None = None
    is_system: bool = False
    created_at: int = 0             # epoch ms
    updated_at: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Rule":
        """Build a rule from a camelCase (export) or snake_case dict."""
        kwargs: dict[str, Any] = {}
        for attr, json_key in _JSON_KEYS.items():
            if json_key in data:
                kwargs[attr] = data[json_key]
            elif attr in data:
                kwargs[attr] = data[attr]
        for required in ("id", "pattern", "replacement"):
            if required not in kwargs:
                raise KeyError(required)
        kwargs.setdefault("name", kwargs["id"])
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Export form, camelCase keys; unset optionals are omitted."""
        out: dict[str, Any] = {}
        for attr, json_key in _JSON_KEYS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            out[json_key] = value
        return out


@dataclass(frozen=True, slots=True)
class AppliedRule:
    """One rule's contribution to a sanitize call."""
    rule: Rule
    matches: list[str] = field(default_factory=list)   # in order, with repeats
    replacement_map: ReplacementMap = field(default_factory=dict)

    @property
    def match_count(self) -> int:
        return len(self.matches)


@dataclass(frozen=True, slots=True)
class SkippedRule:
    """An enabled rule that could not be applied (bad regex or flags)."""
    rule: Rule
    error: str


@dataclass(frozen=True, slots=True)
class SanitizationResult:
    """Result of sanitizing one string."""
    original_text: str
    sanitized_text: str
    applied_rules: list[AppliedRule] = field(default_factory=list)
    skipped_rules: list[SkippedRule] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return self.sanitized_text != self.original_text

    def to_dict(self) -> dict[str, Any]:
        return {
            "originalText": self.original_text,
            "sanitizedText": self.sanitized_text,
            "hasChanges": self.has_changes,
            "appliedRules": [
                {
                    "rule": a.rule.to_dict(),
                    "matchCount": a.match_count,
                    "matches": list(a.matches),
                    "replacementMap": dict(a.replacement_map),
                }
                for a in self.applied_rules
            ],
            "skippedRules": [
                {"rule": s.rule.to_dict(), "error": s.error}
                for s in self.skipped_rules
            ],
        }


@dataclass(frozen=True, slots=True)
class PatternTest:
    """Dry-run outcome of ``test_pattern``."""
    matches: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.matches)


@dataclass(frozen=True, slots=True)
class PatternValidation:
    """Outcome of ``validate_pattern``."""
    valid: bool
    error: str | None = None
