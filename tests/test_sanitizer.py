"""Tests for the sanitizer engine: matchers, sanitize, dry-run, validation."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from prompt_sanitizer import Rule, sanitize, preview_sanitization, validate_pattern
from prompt_sanitizer import test_pattern as dry_run
from prompt_sanitizer.matchers import LiteralMatcher, RegexMatcher, build_matcher, compile_flags
from prompt_sanitizer.errors import PatternError
from prompt_sanitizer.session import ReplacementSession


def literal(rule_id, pattern, replacement, **kw):
    return Rule(id=rule_id, name=rule_id, pattern=pattern, replacement=replacement, **kw)


def regex(rule_id, pattern, replacement, flags="g", **kw):
    return Rule(id=rule_id, name=rule_id, pattern=pattern, replacement=replacement,
                is_regex=True, flags=flags, **kw)


EMAIL = regex("email", r"[a-z]+@[a-z]+\.com", "[EMAIL]")
EMAIL_TEXT = "contact a@x.com or b@y.com or a@x.com again"


# ── Basic contract ───────────────────────────────────────────────────

def test_no_rules_is_identity():
    for text in ("", "hello", "a@x.com"):
        result = sanitize(text, [])
        assert result.original_text == text
        assert result.sanitized_text == text
        assert result.applied_rules == []
        assert result.has_changes is False


def test_disabled_rules_never_fire():
    rules = [
        literal("a", "foo", "[A]", enabled=False),
        regex("b", r"\d+", "[N]", enabled=False),
    ]
    result = sanitize("foo 123", rules)
    assert result.has_changes is False
    assert result.applied_rules == []


def test_rule_order_compounds():
    r1 = literal("r1", "foo", "[A]")
    r2 = literal("r2", "[A]_1", "[B]")
    result = sanitize("foo", [r1, r2])
    assert result.sanitized_text == "[B]_1"
    assert [a.rule.id for a in result.applied_rules] == ["r1", "r2"]

    # Reversed order: r2 finds nothing, r1 still applies
    result = sanitize("foo", [r2, r1])
    assert result.sanitized_text == "[A]_1"
    assert [a.rule.id for a in result.applied_rules] == ["r1"]


def test_only_matching_rules_are_recorded():
    result = sanitize("foo", [literal("a", "foo", "[A]"), literal("b", "bar", "[B]")])
    assert len(result.applied_rules) == 1
    assert result.applied_rules[0].rule.id == "a"


# ── Regex mode ───────────────────────────────────────────────────────

def test_distinct_value_indexing():
    result = sanitize(EMAIL_TEXT, [EMAIL])
    applied = result.applied_rules[0]
    assert applied.match_count == 3
    assert applied.matches == ["a@x.com", "b@y.com", "a@x.com"]
    assert applied.replacement_map == {"a@x.com": "[EMAIL]_1", "b@y.com": "[EMAIL]_2"}
    assert result.sanitized_text == "contact [EMAIL]_1 or [EMAIL]_2 or [EMAIL]_1 again"
    assert result.has_changes


def test_flags_default_to_global_scan():
    rule = regex("n", r"\d", "[N]", flags=None)
    result = sanitize("a1b2", [rule])
    assert result.applied_rules[0].matches == ["1", "2"]
    assert result.sanitized_text == "a[N]_1b[N]_2"


def test_scan_is_global_even_without_g():
    rule = regex("n", r"\d", "[N]", flags="i")
    assert sanitize("1 2 3", [rule]).applied_rules[0].match_count == 3


def test_case_sensitive_regex_by_default():
    rule = regex("s", "secret", "[S]")
    result = sanitize("Secret and secret", [rule])
    assert result.sanitized_text == "Secret and [S]_1"


def test_case_insensitive_replace_pass():
    rule = regex("s", "secret", "[S]", flags="gi")
    result = sanitize("Secret and SECRET and secret", [rule])
    applied = result.applied_rules[0]
    assert applied.matches == ["Secret", "SECRET", "secret"]
    assert len(applied.replacement_map) == 3
    # The first distinct value's case-insensitive pass covers all spellings
    assert result.sanitized_text == "[S]_1 and [S]_1 and [S]_1"


def test_matched_value_is_escaped_before_replacing():
    rule = regex("usd", r"\$\d+(\.\d+)?", "[USD]")
    result = sanitize("cost $5.00 or $5.00 or $500", [rule])
    assert result.sanitized_text == "cost [USD]_1 or [USD]_1 or [USD]_2"


def test_replacement_is_inserted_verbatim():
    rule = regex("g", r"(\w+)@", r"\1")
    result = sanitize("bob@", [rule])
    assert result.sanitized_text == r"\1_1"


def test_multiline_flag():
    assert dry_run("x\nx", "^x", True, "g").count == 1
    assert dry_run("x\nx", "^x", True, "gm").count == 2


def test_lookbehind_sees_text_before_scan_position():
    assert dry_run("abab", r"(?<=a)b", True).matches == ["b", "b"]


def test_zero_length_matches_terminate():
    outcome = dry_run("axxb", "x*", True)
    assert outcome.matches == ["", "xx", "", ""]

    result = sanitize("axxb", [regex("z", "x*", "[Z]")])
    assert result.applied_rules[0].match_count == 4


def test_zero_length_only_pattern():
    # Empty match at every position, including the end
    assert dry_run("abc", "(?:)", True).count == 4


# ── Literal mode ─────────────────────────────────────────────────────

def test_literal_never_treated_as_regex():
    rule = literal("dot", "a.b", "[DOT]")
    result = sanitize("a.b and axb", [rule])
    applied = result.applied_rules[0]
    assert applied.matches == ["a.b"]
    assert result.sanitized_text == "[DOT]_1 and axb"


def test_literal_regex_metacharacters():
    rule = literal("paren", "(unclosed", "[P]")
    result = sanitize("x (unclosed y (unclosed", [rule])
    assert result.applied_rules[0].match_count == 2
    assert result.applied_rules[0].replacement_map == {"(unclosed": "[P]_1"}
    assert result.sanitized_text == "x [P]_1 y [P]_1"


def test_literal_is_case_sensitive():
    result = sanitize("Acme acme ACME", [literal("co", "acme", "[CO]")])
    assert result.sanitized_text == "Acme [CO]_1 ACME"
    assert result.applied_rules[0].match_count == 1


def test_literal_hits_do_not_overlap():
    assert dry_run("aaaa", "aa", False).matches == ["aa", "aa"]
    assert dry_run("aaa", "aa", False).count == 1


def test_literal_ignores_flags():
    rule = literal("co", "acme", "[CO]", flags="i")
    assert sanitize("ACME", [rule]).has_changes is False


# ── Failing rules ────────────────────────────────────────────────────

def test_bad_regex_is_skipped_not_raised():
    bad = regex("bad", "(unclosed", "[X]")
    good = literal("good", "foo", "[F]")
    result = sanitize("foo (unclosed", [bad, good])
    assert result.sanitized_text == "[F]_1 (unclosed"
    assert [a.rule.id for a in result.applied_rules] == ["good"]
    assert len(result.skipped_rules) == 1
    assert result.skipped_rules[0].rule.id == "bad"
    assert result.skipped_rules[0].error


def test_bad_flags_are_skipped():
    result = sanitize("abc", [regex("f", "a", "[A]", flags="gx")])
    assert result.has_changes is False
    assert result.skipped_rules[0].rule.id == "f"


def test_empty_pattern_is_skipped():
    result = sanitize("abc", [literal("e", "", "[E]")])
    assert result.sanitized_text == "abc"
    assert result.skipped_rules[0].error == "Pattern cannot be empty"


HUGE_REPEAT = "a{99999999999999999999}"
DEEP_NESTING = "(" * 2000 + "a" + ")" * 2000


def test_huge_repeat_count_is_skipped():
    bad = regex("huge", HUGE_REPEAT, "[X]")
    good = literal("good", "foo", "[F]")
    result = sanitize("foo aaa", [bad, good])
    assert result.sanitized_text == "[F]_1 aaa"
    assert [s.rule.id for s in result.skipped_rules] == ["huge"]
    assert result.skipped_rules[0].error
    assert dry_run("aaa", HUGE_REPEAT, True).count == 0


def test_deeply_nested_pattern_is_skipped():
    result = sanitize("a", [regex("deep", DEEP_NESTING, "[X]")])
    assert result.sanitized_text == "a"
    assert [s.rule.id for s in result.skipped_rules] == ["deep"]
    assert dry_run("a", DEEP_NESTING, True).matches == []


def test_disabled_bad_rule_is_not_reported():
    result = sanitize("abc", [regex("bad", "(", "[X]", enabled=False)])
    assert result.skipped_rules == []


# ── Selective preview ────────────────────────────────────────────────

def test_preview_subset_ignores_stored_enabled_flag():
    a = literal("a", "foo", "[A]", enabled=False)
    b = literal("b", "bar", "[B]")
    rules = [a, b]
    result = preview_sanitization("foo bar", rules, ["a"])
    assert result.sanitized_text == "[A]_1 bar"
    # caller's rules untouched
    assert rules == [a, b]
    assert rules[0].enabled is False


def test_preview_without_subset_matches_sanitize():
    rules = [EMAIL, literal("c", "contact", "[C]")]
    assert preview_sanitization(EMAIL_TEXT, rules) == sanitize(EMAIL_TEXT, rules)


# ── Round trip & parity ──────────────────────────────────────────────

def test_replacement_map_inverts():
    result = sanitize(EMAIL_TEXT, [EMAIL])
    restored = result.sanitized_text
    for original, token in result.applied_rules[0].replacement_map.items():
        restored = restored.replace(token, original)
    assert restored == EMAIL_TEXT

    session = ReplacementSession.from_result(result)
    assert session.restore(result.sanitized_text) == EMAIL_TEXT


def test_dry_run_count_matches_sanitize():
    cases = [
        (EMAIL_TEXT, EMAIL),
        ("a.b and a.b", literal("dot", "a.b", "[D]")),
        ("axxb", regex("z", "x*", "[Z]")),
        ("Secret SECRET", regex("s", "secret", "[S]", flags="gi")),
    ]
    for text, rule in cases:
        applied = sanitize(text, [rule]).applied_rules[0]
        assert dry_run(text, rule.pattern, rule.is_regex, rule.flags).count == applied.match_count


# ── test_pattern ─────────────────────────────────────────────────────

def test_dry_run_empty_inputs():
    assert dry_run("", "a", False).count == 0
    assert dry_run("abc", "", False).count == 0
    assert dry_run("", "x*", True).matches == []


def test_dry_run_bad_regex_is_empty():
    outcome = dry_run("abc", "(unclosed", True)
    assert outcome.matches == []
    assert outcome.count == 0


# ── validate_pattern ─────────────────────────────────────────────────

def test_validate_rejects_empty():
    for is_regex in (True, False):
        v = validate_pattern("", is_regex)
        assert v.valid is False
        assert v.error == "Pattern cannot be empty"


def test_validate_regex_compiles():
    v = validate_pattern("(unclosed", True)
    assert v.valid is False
    assert v.error
    assert validate_pattern(r"\d+", True).valid


def test_validate_rejects_uncompilable_shapes():
    for pattern in (HUGE_REPEAT, DEEP_NESTING):
        v = validate_pattern(pattern, True)
        assert v.valid is False
        assert v.error
        # the same text is fine as a literal
        assert validate_pattern(pattern, False).valid is True


def test_validate_literal_always_valid():
    v = validate_pattern("(unclosed", False)
    assert v.valid is True
    assert v.error is None


# ── Matchers ─────────────────────────────────────────────────────────

def test_build_matcher_picks_strategy():
    assert isinstance(build_matcher("a.b", False), LiteralMatcher)
    m = build_matcher("a.b", True, "gi")
    assert isinstance(m, RegexMatcher)
    assert m.ignore_case


def test_compile_flags():
    assert compile_flags(None) == compile_flags("g") == 0
    assert compile_flags("gimsu")
    for bad in ("gg", "y", "gx"):
        try:
            compile_flags(bad)
        except PatternError:
            pass
        else:
            raise AssertionError(f"{bad!r} accepted")


if __name__ == "__main__":
    import pytest
    pytest.main([__file__, "-v"])
