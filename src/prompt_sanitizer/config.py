"""YAML/dict config loader for prompt-sanitizer.

Supports loading from a YAML file or a plain dict (for embedding
in a larger config, e.g. a gateway's config file).

Example YAML:

    prompt_sanitizer:
      enabled: true
      strict: true            # refuse rules whose pattern does not validate
      presets:
        - email
        - phone
      rules:
        - id: acme
          name: Company name
          pattern: Acme Corp
          replacement: "[COMPANY]"
        - id: ticket
          name: Ticket ids
          pattern: 'TCK-\\d+'
          replacement: "[TICKET]"
          isRegex: true
          flags: gi
"""

from __future__ import annotations
import json
from pathlib import Path
from typing import Any

from .errors import ConfigurationError, InvalidRuleError
from .middleware import SanitizeMiddleware
from .patterns import COMMON_PATTERNS, preset_rule
from .rulebook import check_rule
from .types import Rule


class _NoopMiddleware:
    """Pass-through middleware when sanitizing is disabled."""
    def pre_send(self, messages: list[dict]) -> list[dict]:
        return messages
    def post_receive(self, text: str) -> str:
        return text
    def sanitize_text(self, text: str) -> str:
        return text
    @property
    def stats(self) -> dict:
        return {"rules": 0, "enabled_rules": 0, "session_size": 0}


def _parse_rule(item: Any, strict: bool) -> Rule:
    if isinstance(item, Rule):
        rule = item
    elif isinstance(item, dict):
        try:
            rule = Rule.from_dict(item)
        except (KeyError, TypeError) as e:
            raise ConfigurationError(f"invalid rule {item!r}: {e}") from e
    else:
        raise ConfigurationError(f"rule entry must be a mapping, got {type(item).__name__}")
    if strict:
        try:
            check_rule(rule)
        except InvalidRuleError as e:
            raise ConfigurationError(str(e)) from e
    return rule


def load_config(data: dict[str, Any]) -> dict[str, Any]:
    """Normalize a config dict (from YAML or inline)."""
    # Support nested under "prompt_sanitizer" key or flat
    if "prompt_sanitizer" in data:
        data = data["prompt_sanitizer"] or {}

    strict = data.get("strict", True)
    presets = list(data.get("presets") or [])
    unknown = [p for p in presets if p not in COMMON_PATTERNS]
    if unknown:
        raise ConfigurationError(f"unknown presets: {', '.join(unknown)}")

    return {
        "enabled": data.get("enabled", True),
        "strict": strict,
        "presets": presets,
        "rules": [_parse_rule(item, strict) for item in data.get("rules") or []],
    }


def load_from_yaml(path: str | Path) -> dict[str, Any]:
    """Load config from a YAML file."""
    import yaml
    with open(path) as f:
        return load_config(yaml.safe_load(f) or {})


def load_rules_file(path: str | Path) -> dict[str, Any]:
    """Load a rules file: YAML or JSON by suffix.

    A bare list (e.g. a rule export) is read as the ``rules`` section.
    """
    path = Path(path).expanduser()
    with open(path) as f:
        if path.suffix == ".json":
            raw = json.load(f)
        else:
            import yaml
            raw = yaml.safe_load(f)
    if isinstance(raw, list):
        raw = {"rules": raw}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{path}: expected a mapping or a list of rules")
    return load_config(raw)


def build_rules(cfg: dict[str, Any]) -> list[Rule]:
    """Presets first (catalog keys in config order), then custom rules."""
    return [preset_rule(key) for key in cfg["presets"]] + list(cfg["rules"])


def create_middleware(config: dict[str, Any]) -> SanitizeMiddleware | _NoopMiddleware:
    """Create a fully configured middleware from a config dict."""
    cfg = load_config(config)

    if not cfg["enabled"]:
        # Return a pass-through middleware (no sanitizing)
        return _NoopMiddleware()

    return SanitizeMiddleware.create(rules=build_rules(cfg))
