"""Matching strategies: literal substring or regular expression.

Both strategies expose the same two steps:

    matches = matcher.find_all(text)
    new_text, replacement_map = matcher.substitute(text, matches, "[EMAIL]")

``find_all`` is shared by ``sanitize`` and ``test_pattern`` so the
counts shown while authoring a rule are exactly what applying it
produces.
"""

from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Union

from .errors import PatternError
from .types import ReplacementMap, Rule

# Browser-style flag letters.  "g" is implied: scanning is always global.
DEFAULT_FLAGS = "g"
_FLAG_BITS: dict[str, int] = {
    "g": 0,
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "u": 0,
    "d": 0,
}


def compile_flags(flags: str | None) -> int:
    """Translate a flag string like ``"gi"`` into ``re`` flag bits."""
    flags = flags or DEFAULT_FLAGS
    bits = 0
    seen: set[str] = set()
    for ch in flags:
        if ch not in _FLAG_BITS or ch in seen:
            raise PatternError(f"Invalid flags supplied: {flags!r}")
        seen.add(ch)
        bits |= _FLAG_BITS[ch]
    return bits


def compile_regex(pattern: str, flags: str | None = None) -> re.Pattern:
    """Compile a rule pattern, raising PatternError on failure."""
    bits = compile_flags(flags)
    try:
        return re.compile(pattern, bits)
    except (re.error, OverflowError, RecursionError) as e:
        # huge repeat counts overflow, deep nesting exhausts the parser
        raise PatternError(str(e) or type(e).__name__, pattern) from e


def _token(replacement: str, index: int) -> str:
    return f"{replacement}_{index}"


@dataclass(frozen=True, slots=True)
class LiteralMatcher:
    """Plain substring, case-sensitive, non-overlapping."""

    pattern: str

    def find_all(self, text: str) -> list[str]:
        matches: list[str] = []
        idx = text.find(self.pattern)
        while idx != -1:
            matches.append(self.pattern)
            # advance past the hit, not by one char
            idx = text.find(self.pattern, idx + len(self.pattern))
        return matches

    def substitute(
        self, text: str, matches: list[str], replacement: str,
    ) -> tuple[str, ReplacementMap]:
        # Every hit is the pattern itself, so there is one distinct value.
        if not matches:
            return text, {}
        token = _token(replacement, 1)
        return text.replace(self.pattern, token), {self.pattern: token}


@dataclass(frozen=True, slots=True)
class RegexMatcher:
    """Compiled regex; every match is collected, left to right."""

    regex: re.Pattern

    @property
    def ignore_case(self) -> bool:
        return bool(self.regex.flags & re.IGNORECASE)

    def find_all(self, text: str) -> list[str]:
        matches: list[str] = []
        pos = 0
        try:
            while pos <= len(text):
                m = self.regex.search(text, pos)
                if m is None:
                    break
                matches.append(m.group())
                pos = m.end()
                if m.end() == m.start():
                    pos += 1  # zero-length match
        except RecursionError as e:
            raise PatternError(f"Pattern failed to evaluate: {e}", self.regex.pattern) from e
        return matches

    def substitute(
        self, text: str, matches: list[str], replacement: str,
    ) -> tuple[str, ReplacementMap]:
        replacement_map: ReplacementMap = {}
        value_flags = re.IGNORECASE if self.ignore_case else 0
        # dict.fromkeys keeps first-seen order
        for index, value in enumerate(dict.fromkeys(matches), start=1):
            token = _token(replacement, index)
            replacement_map[value] = token
            value_re = re.compile(re.escape(value), value_flags)
            # callable replacement: the token is inserted verbatim
            text = value_re.sub(lambda _m, t=token: t, text)
        return text, replacement_map


Matcher = Union[LiteralMatcher, RegexMatcher]


def build_matcher(pattern: str, is_regex: bool, flags: str | None = None) -> Matcher:
    """Pick the matching strategy for a pattern.

    Raises PatternError for an empty pattern or a regex / flag string
    that does not compile.  Flags are ignored in literal mode.
    """
    if not pattern:
        raise PatternError("Pattern cannot be empty", pattern)
    if is_regex:
        return RegexMatcher(compile_regex(pattern, flags))
    return LiteralMatcher(pattern)


def matcher_for(rule: Rule) -> Matcher:
    return build_matcher(rule.pattern, rule.is_regex, rule.flags)
