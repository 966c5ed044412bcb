"""Replacement session: turns tokens back into the values they hid.

The engine hands out a replacement map per applied rule and forgets
it.  A session keeps those maps so a caller can undo a sanitize, or
restore tokens echoed back by a model:

    result = sanitize("mail a@x.com", rules)
    session = ReplacementSession.from_result(result)
    session.restore("Sure, I'll write to [EMAIL]_1")
    # "Sure, I'll write to a@x.com"

Token numbering restarts at _1 on every sanitize call, so when several
results are recorded into one session the most recent mapping of an
ambiguous token wins.
"""

from __future__ import annotations
import time

from .types import ReplacementMap, SanitizationResult


class ReplacementSession:
    """Token → original store built from sanitize results."""

    __slots__ = ("_layers", "original_text", "sanitized_text", "timestamp")

    def __init__(self) -> None:
        # one token → original dict per applied rule, in application order
        self._layers: list[dict[str, str]] = []
        self.original_text = ""
        self.sanitized_text = ""
        self.timestamp = 0.0

    @classmethod
    def from_result(cls, result: SanitizationResult) -> "ReplacementSession":
        session = cls()
        session.record(result)
        return session

    # ------------------------------------------------------------------
    # Core API
    # ------------------------------------------------------------------

    def record(self, result: SanitizationResult) -> None:
        """Remember the replacement maps of one sanitize result."""
        for applied in result.applied_rules:
            self._layers.append(
                {token: original for original, token in applied.replacement_map.items()}
            )
        self.original_text = result.original_text
        self.sanitized_text = result.sanitized_text
        self.timestamp = time.time()

    def restore(self, text: str) -> str:
        """Replace every known token in text with its original value.

        Layers unwind last-applied first, so a token produced by a rule
        that matched an earlier rule's token resolves all the way back.
        """
        result = text
        for layer in reversed(self._layers):
            # Longest tokens first: "[X]_10" before "[X]_1"
            for token in sorted(layer, key=len, reverse=True):
                if token in result:
                    result = result.replace(token, layer[token])
        return result

    def lookup_token(self, token: str) -> str | None:
        """Look up the original value for a token (latest layer wins)."""
        for layer in reversed(self._layers):
            if token in layer:
                return layer[token]
        return None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def replacement_maps(self) -> list[ReplacementMap]:
        """Recorded maps in original → token form, application order."""
        return [{orig: tok for tok, orig in layer.items()} for layer in self._layers]

    @property
    def token_map(self) -> dict[str, str]:
        merged: dict[str, str] = {}
        for layer in self._layers:
            merged.update(layer)
        return merged

    @property
    def size(self) -> int:
        return len(self.token_map)

    def clear(self) -> None:
        self._layers.clear()
        self.original_text = ""
        self.sanitized_text = ""
        self.timestamp = 0.0
