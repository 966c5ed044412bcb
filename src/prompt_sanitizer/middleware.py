"""OpenAI-compatible middleware: sanitize outbound chat messages and
restore tokens in the model's reply.

Usage:

    mw = SanitizeMiddleware.create(rules=default_rules())

    # Before sending to provider
    safe_messages = mw.pre_send(messages)

    # After receiving response
    real_response = mw.post_receive(response_text)
"""

from __future__ import annotations
from collections.abc import Sequence
from dataclasses import dataclass

from .sanitizer import sanitize
from .session import ReplacementSession
from .types import Rule


@dataclass
class SanitizeMiddleware:
    """Middleware that sits between client and LLM provider."""

    rules: Sequence[Rule]
    session: ReplacementSession

    @classmethod
    def create(cls, *, rules: Sequence[Rule] = ()) -> "SanitizeMiddleware":
        """Create a middleware with a fresh session."""
        return cls(rules=list(rules), session=ReplacementSession())

    def pre_send(self, messages: list[dict], *, content_key: str = "content") -> list[dict]:
        """Sanitize string content of each message.

        Returns new message dicts; the originals are not mutated.
        """
        out: list[dict] = []
        for msg in messages:
            content = msg.get(content_key)
            if isinstance(content, str) and content:
                result = sanitize(content, self.rules)
                self.session.record(result)
                out.append({**msg, content_key: result.sanitized_text})
            else:
                out.append(msg)
        return out

    def post_receive(self, text: str) -> str:
        """Restore tokens in the model's response."""
        return self.session.restore(text)

    def sanitize_text(self, text: str) -> str:
        """Sanitize a single string (convenience)."""
        result = sanitize(text, self.rules)
        self.session.record(result)
        return result.sanitized_text

    @property
    def stats(self) -> dict:
        return {
            "rules": len(self.rules),
            "enabled_rules": sum(1 for r in self.rules if r.enabled),
            "session_size": self.session.size,
        }
