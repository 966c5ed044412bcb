"""CLI interface for prompt-sanitizer.

Usage:
    # Sanitize text (stdin: text, stdout: JSON result)
    echo 'mail a@x.com' | python -m prompt_sanitizer.cli --preset email sanitize

    # Only a subset of the configured rules, plain text out
    python -m prompt_sanitizer.cli --rules rules.yaml sanitize --only acme --text-only < prompt.txt

    # Dry-run a pattern while writing a rule
    echo 'TCK-1 TCK-22' | python -m prompt_sanitizer.cli test --pattern 'TCK-\\d+' --regex

    # Undo a sanitize using its saved JSON result
    python -m prompt_sanitizer.cli restore --result result.json < reply.txt

Rules come from --rules (YAML or JSON) and/or --preset; the rules file
defaults to $PROMPT_SANITIZER_RULES.
"""

from __future__ import annotations
import argparse
import json
import logging
import os
import sys

from .config import build_rules, load_config, load_rules_file
from .patterns import COMMON_PATTERNS
from .sanitizer import preview_sanitization, test_pattern, validate_pattern
from .session import ReplacementSession
from .types import AppliedRule, Rule, SanitizationResult


DEFAULT_RULES = os.environ.get("PROMPT_SANITIZER_RULES", "")


def _load_rules(args: argparse.Namespace) -> list[Rule]:
    cfg = load_rules_file(args.rules) if args.rules else load_config({})
    for key in args.preset or []:
        if key not in cfg["presets"]:
            cfg["presets"].append(key)
    return build_rules(cfg)


def cmd_sanitize(args: argparse.Namespace) -> None:
    """Sanitize text on stdin."""
    rules = _load_rules(args)
    only = args.only.split(",") if args.only else None

    text = sys.stdin.read()
    result = preview_sanitization(text, rules, only)

    if args.text_only:
        sys.stdout.write(result.sanitized_text)
        return
    json.dump(result.to_dict(), sys.stdout, ensure_ascii=False)
    sys.stdout.write("\n")


def cmd_test(args: argparse.Namespace) -> None:
    """Dry-run a pattern against text on stdin."""
    text = sys.stdin.read()
    outcome = test_pattern(text, args.pattern, args.regex, args.flags)
    json.dump({"matches": outcome.matches, "count": outcome.count}, sys.stdout, ensure_ascii=False)
    sys.stdout.write("\n")


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate a pattern; exit status 1 when invalid."""
    validation = validate_pattern(args.pattern, args.regex)
    json.dump({"valid": validation.valid, "error": validation.error}, sys.stdout)
    sys.stdout.write("\n")
    return 0 if validation.valid else 1


def cmd_presets(args: argparse.Namespace) -> None:
    """List the preset catalog."""
    json.dump(COMMON_PATTERNS, sys.stdout, indent=2)
    sys.stdout.write("\n")


def cmd_restore(args: argparse.Namespace) -> None:
    """Restore tokens in stdin text from a saved sanitize result."""
    with open(args.result) as f:
        saved = json.load(f)
    result = SanitizationResult(
        original_text=saved.get("originalText", ""),
        sanitized_text=saved.get("sanitizedText", ""),
        applied_rules=[
            AppliedRule(
                rule=Rule.from_dict(a["rule"]),
                matches=a.get("matches", []),
                replacement_map=a.get("replacementMap", {}),
            )
            for a in saved.get("appliedRules", [])
        ],
    )
    session = ReplacementSession.from_result(result)
    sys.stdout.write(session.restore(sys.stdin.read()))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="prompt_sanitizer",
        description="Rule-based find/replace sanitizing for prompts",
    )
    parser.add_argument("--rules", default=DEFAULT_RULES, help="Rules file (YAML or JSON)")
    parser.add_argument(
        "--preset", action="append", choices=sorted(COMMON_PATTERNS),
        help="Add a preset rule (repeatable)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("sanitize", help="Sanitize text (stdin)")
    p.add_argument("--only", default="", help="Comma-separated rule ids to apply")
    p.add_argument("--text-only", action="store_true", help="Print only the sanitized text")

    p = sub.add_parser("test", help="Dry-run a pattern (stdin)")
    p.add_argument("--pattern", required=True)
    p.add_argument("--regex", action="store_true")
    p.add_argument("--flags", default=None)

    p = sub.add_parser("validate", help="Validate a pattern")
    p.add_argument("--pattern", required=True)
    p.add_argument("--regex", action="store_true")

    sub.add_parser("presets", help="List preset rules")

    p = sub.add_parser("restore", help="Restore tokens (stdin) from a saved result")
    p.add_argument("--result", required=True, help="JSON output of a previous sanitize")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    cmds = {
        "sanitize": cmd_sanitize,
        "test": cmd_test,
        "validate": cmd_validate,
        "presets": cmd_presets,
        "restore": cmd_restore,
    }
    return cmds[args.command](args) or 0


if __name__ == "__main__":
    sys.exit(main())
