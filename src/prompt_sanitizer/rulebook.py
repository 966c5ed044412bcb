"""RuleBook: an ordered, in-memory collection of rules.

Rule order is application order, so ``reorder`` is how priority is
changed.  Rules are immutable values: every edit swaps in a new Rule.
Storing the book anywhere is up to the caller; ``export_json`` and
``import_json`` speak the same JSON the browser extension exports.
"""

from __future__ import annotations
import dataclasses
import json
import time
import uuid
from collections.abc import Iterable, Sequence

from .errors import InvalidRuleError, PatternError, RuleImportError
from .matchers import compile_flags
from .sanitizer import preview_sanitization, validate_pattern
from .types import Rule, SanitizationResult

_IMMUTABLE = frozenset({"id", "created_at", "updated_at"})
_MATCHING_FIELDS = frozenset({"pattern", "is_regex", "flags"})


def _now_ms() -> int:
    return int(time.time() * 1000)


def check_rule(rule: Rule) -> None:
    """Raise InvalidRuleError unless the rule's pattern and flags are usable."""
    validation = validate_pattern(rule.pattern, rule.is_regex)
    if not validation.valid:
        raise InvalidRuleError(f"{rule.name}: {validation.error}")
    if rule.is_regex:
        try:
            compile_flags(rule.flags)
        except PatternError as e:
            raise InvalidRuleError(f"{rule.name}: {e}") from e


class RuleBook:
    """Ordered rule store with the usual authoring operations."""

    __slots__ = ("_rules",)

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: list[Rule] = list(rules)

    # ------------------------------------------------------------------
    # Core API
    # ------------------------------------------------------------------

    @property
    def rules(self) -> list[Rule]:
        return list(self._rules)

    def get(self, rule_id: str) -> Rule | None:
        for rule in self._rules:
            if rule.id == rule_id:
                return rule
        return None

    def add(
        self,
        name: str,
        pattern: str,
        replacement: str,
        *,
        is_regex: bool = False,
        flags: str | None = None,
        enabled: bool = True,
        category: str | None = None,
    ) -> Rule:
        """Validate and append a new rule."""
        now = _now_ms()
        rule = Rule(
            id=str(uuid.uuid4()),
            name=name,
            pattern=pattern,
            replacement=replacement,
            is_regex=is_regex,
            flags=flags if is_regex else None,
            enabled=enabled,
            category=category,
            created_at=now,
            updated_at=now,
        )
        check_rule(rule)
        self._rules.append(rule)
        return rule

    def update(self, rule_id: str, **changes) -> Rule | None:
        """Replace fields of a rule.  Returns None for an unknown id."""
        bad = _IMMUTABLE.intersection(changes)
        if bad:
            raise InvalidRuleError(f"cannot change {', '.join(sorted(bad))}")
        for i, rule in enumerate(self._rules):
            if rule.id != rule_id:
                continue
            updated = dataclasses.replace(rule, updated_at=_now_ms(), **changes)
            if _MATCHING_FIELDS.intersection(changes):
                check_rule(updated)
            self._rules[i] = updated
            return updated
        return None

    def delete(self, rule_id: str) -> bool:
        kept = [r for r in self._rules if r.id != rule_id]
        if len(kept) == len(self._rules):
            return False
        self._rules = kept
        return True

    def toggle(self, rule_id: str) -> Rule | None:
        rule = self.get(rule_id)
        if rule is None:
            return None
        return self.update(rule_id, enabled=not rule.enabled)

    def reorder(self, rule_ids: Sequence[str]) -> None:
        """Put rules in the given order.  Rules not listed are dropped."""
        by_id = {r.id: r for r in self._rules}
        self._rules = [by_id[i] for i in rule_ids if i in by_id]

    def sanitize(
        self, text: str, rule_ids: Iterable[str] | None = None,
    ) -> SanitizationResult:
        """Run the book's rules over text (optionally only ``rule_ids``)."""
        return preview_sanitization(text, self._rules, rule_ids)

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def export_json(self) -> str:
        return json.dumps([r.to_dict() for r in self._rules], indent=2, ensure_ascii=False)

    def import_json(self, data: str, *, merge: bool = True, strict: bool = True) -> int:
        """Load rules from an exported JSON array.

        With ``merge`` only rules whose id is new are appended;
        otherwise the whole book is replaced.  With ``strict`` (the
        default) a rule that ``add`` would refuse fails the whole
        import and the book is left unchanged.  Returns how many rules
        were added.
        """
        try:
            payload = json.loads(data)
        except json.JSONDecodeError as e:
            raise RuleImportError(f"Invalid JSON: {e}") from e
        if not isinstance(payload, list):
            raise RuleImportError("Invalid format")
        try:
            imported = [Rule.from_dict(item) for item in payload]
        except (KeyError, TypeError, AttributeError) as e:
            raise RuleImportError(f"Invalid rule: {e}") from e
        if strict:
            for rule in imported:
                try:
                    check_rule(rule)
                except InvalidRuleError as e:
                    raise RuleImportError(f"Invalid rule: {e}") from e

        if not merge:
            self._rules = imported
            return len(imported)

        existing = {r.id for r in self._rules}
        new_rules = [r for r in imported if r.id not in existing]
        self._rules.extend(new_rules)
        return len(new_rules)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def size(self) -> int:
        return len(self._rules)

    def clear(self) -> None:
        self._rules.clear()
