"""Preset rules for common structured PII.

These are ordinary regex rules offered as starting points; nothing
here runs unless the caller turns a preset into a Rule and passes it
to ``sanitize``.
"""

from __future__ import annotations
import time

from .types import Rule

# Each preset: display name, pattern, replacement prefix, flags, category
COMMON_PATTERNS: dict[str, dict] = {
    "email": {
        "name": "Email Addresses",
        "pattern": r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}",
        "replacement": "[EMAIL]",
        "is_regex": True,
        "flags": "gi",
        "category": "PII",
    },
    "phone": {
        "name": "Phone Numbers (US)",
        "pattern": r"\b(?:\+1[-.]?)?\(?\d{3}\)?[-.]?\d{3}[-.]?\d{4}\b",
        "replacement": "[PHONE]",
        "is_regex": True,
        "flags": "g",
        "category": "PII",
    },
    "ssn": {
        "name": "Social Security Number",
        "pattern": r"\b\d{3}[-]?\d{2}[-]?\d{4}\b",
        "replacement": "[SSN]",
        "is_regex": True,
        "flags": "g",
        "category": "PII",
    },
    "credit_card": {
        "name": "Credit Card Number",
        "pattern": r"\b(?:\d{4}[-\s]?){3}\d{4}\b",
        "replacement": "[CREDIT_CARD]",
        "is_regex": True,
        "flags": "g",
        "category": "Financial",
    },
    "ip_address": {
        "name": "IP Address",
        "pattern": r"\b(?:\d{1,3}\.){3}\d{1,3}\b",
        "replacement": "[IP_ADDRESS]",
        "is_regex": True,
        "flags": "g",
        "category": "Technical",
    },
    "api_key": {
        "name": "API Key (Generic)",
        "pattern": r"""(?:api[_-]?key|apikey|api[_-]?token)\s*[:=]\s*["']?([a-zA-Z0-9_-]{20,})["']?""",
        "replacement": "[API_KEY]",
        "is_regex": True,
        "flags": "gi",
        "category": "Technical",
    },
}


def _now_ms() -> int:
    return int(time.time() * 1000)


def preset_rule(key: str, *, enabled: bool = True, now: int | None = None) -> Rule:
    """Build a system rule from a preset key (KeyError if unknown)."""
    preset = COMMON_PATTERNS[key]
    ts = _now_ms() if now is None else now
    return Rule(
        id=f"preset:{key}",
        enabled=enabled,
        is_system=True,
        created_at=ts,
        updated_at=ts,
        **preset,
    )


def default_rules(now: int | None = None) -> list[Rule]:
    """All presets, in catalog order."""
    ts = _now_ms() if now is None else now
    return [preset_rule(key, now=ts) for key in COMMON_PATTERNS]
