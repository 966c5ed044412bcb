"""Sanitizer: the main API.  Ordered find/replace rules over one string.

Usage:
    from prompt_sanitizer import Rule, sanitize

    rules = [Rule(id="email", name="Email", pattern=r"[a-z]+@[a-z]+\\.com",
                  replacement="[EMAIL]", is_regex=True)]

    result = sanitize("mail a@x.com or b@y.com", rules)
    print(result.sanitized_text)   # "mail [EMAIL]_1 or [EMAIL]_2"
    print(result.applied_rules[0].replacement_map)
    # {"a@x.com": "[EMAIL]_1", "b@y.com": "[EMAIL]_2"}

Everything here is pure: rules are never mutated, nothing is cached,
and a rule whose pattern cannot be applied is skipped rather than
aborting the whole call.
"""

from __future__ import annotations
import dataclasses
import logging
from collections.abc import Iterable, Sequence

from .errors import PatternError
from .matchers import build_matcher, compile_regex, matcher_for
from .types import (
    AppliedRule,
    PatternTest,
    PatternValidation,
    Rule,
    SanitizationResult,
    SkippedRule,
)

logger = logging.getLogger(__name__)


def sanitize(text: str, rules: Sequence[Rule]) -> SanitizationResult:
    """Apply every enabled rule, in order, to ``text``.

    Each rule sees the output of the rules before it.  Only rules that
    matched at least once appear in ``applied_rules``; rules that could
    not be compiled are reported in ``skipped_rules``.
    """
    enabled = [r for r in rules if r.enabled]
    logger.debug("sanitize: %d rules, %d enabled", len(rules), len(enabled))

    current = text
    applied: list[AppliedRule] = []
    skipped: list[SkippedRule] = []

    for rule in enabled:
        try:
            matcher = matcher_for(rule)
            matches = matcher.find_all(current)
            if not matches:
                logger.debug("rule %r: no matches", rule.name)
                continue
            current, replacement_map = matcher.substitute(current, matches, rule.replacement)
        except PatternError as e:
            logger.warning("rule %r skipped: %s", rule.name, e)
            skipped.append(SkippedRule(rule=rule, error=str(e)))
            continue

        logger.debug(
            "rule %r: %d matches, %d distinct",
            rule.name, len(matches), len(replacement_map),
        )
        applied.append(AppliedRule(rule=rule, matches=matches, replacement_map=replacement_map))

    return SanitizationResult(
        original_text=text,
        sanitized_text=current,
        applied_rules=applied,
        skipped_rules=skipped,
    )


def preview_sanitization(
    text: str,
    rules: Sequence[Rule],
    rule_ids: Iterable[str] | None = None,
) -> SanitizationResult:
    """Sanitize without committing anything, optionally for a subset.

    With ``rule_ids`` the listed rules apply and every other rule is
    left out, whatever its stored ``enabled`` flag says.  The subset is
    computed on copies; the caller's rules are untouched.
    """
    if rule_ids is None:
        return sanitize(text, rules)
    wanted = set(rule_ids)
    selected = [dataclasses.replace(r, enabled=r.id in wanted) for r in rules]
    return sanitize(text, selected)


def test_pattern(
    text: str,
    pattern: str,
    is_regex: bool,
    flags: str | None = None,
) -> PatternTest:
    """Dry-run a pattern: which substrings would it match?"""
    if not pattern or not text:
        return PatternTest()
    try:
        return PatternTest(matches=build_matcher(pattern, is_regex, flags).find_all(text))
    except PatternError:
        return PatternTest()


# keep pytest from collecting the dry-run helper as a test
test_pattern.__test__ = False  # type: ignore[attr-defined]


def validate_pattern(pattern: str, is_regex: bool) -> PatternValidation:
    """Check a pattern before a rule is stored.

    Regex patterns are compiled without flags; literal patterns are
    valid whenever they are non-empty.
    """
    if not pattern:
        return PatternValidation(valid=False, error="Pattern cannot be empty")
    if is_regex:
        try:
            compile_regex(pattern)
        except PatternError as e:
            return PatternValidation(valid=False, error=str(e))
    return PatternValidation(valid=True)
