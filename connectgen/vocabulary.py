"""Heuristic vocabularies shared by extraction, validation and rendering.

These word lists were tuned against real design systems and are NOT
universal. Every consumer takes an optional `Vocabulary` so callers can
override them without touching code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Tuple


def _words(*items: str) -> FrozenSet[str]:
    return frozenset(items)


@dataclass(frozen=True)
class Vocabulary:
    """Keyword sets consulted by heuristic checks (all lowercase)."""

    # FRAME/GROUP names treated as slot layers
    slot_layer_names: FrozenSet[str] = field(default_factory=lambda: _words(
        "icon", "leading", "trailing", "prefix", "suffix", "content",
        "children", "slot", "container", "start", "end", "left", "right",
    ))
    # Variant axes that only encode visual interaction state
    pseudo_state_axes: FrozenSet[str] = field(default_factory=lambda: _words(
        "state", "interaction",
    ))
    # Words that mark a '.'-prefixed boolean as a pseudo-state flag
    pseudo_state_flags: FrozenSet[str] = field(default_factory=lambda: _words(
        "hover", "focus", "active", "pressed", "selected", "current",
    ))
    # Two-option value sets accepted as boolean axes
    boolean_pairs: Tuple[FrozenSet[str], ...] = field(default_factory=lambda: (
        _words("yes", "no"),
        _words("true", "false"),
        _words("on", "off"),
    ))
    # Keys a `string` mapping may use without a TEXT property
    textual_keys: FrozenSet[str] = field(default_factory=lambda: _words(
        "children", "label", "text", "content", "title",
    ))
    # Surface-coercion keyword table
    left_slot_keywords: FrozenSet[str] = field(default_factory=lambda: _words(
        "start", "left", "leading", "prefix",
    ))
    right_slot_keywords: FrozenSet[str] = field(default_factory=lambda: _words(
        "end", "right", "trailing", "suffix",
    ))
    icon_keywords: FrozenSet[str] = field(default_factory=lambda: _words(
        "icon", "glyph", "symbol", "adornment",
    ))

    def is_pseudo_state_axis(self, name: str) -> bool:
        return (name or "").strip().lower() in self.pseudo_state_axes

    def is_boolean_pair(self, values) -> bool:
        """True for exactly two values forming a boolean-like pair."""
        lowered = frozenset(str(v).strip().lower() for v in values)
        if len(lowered) != 2:
            return False
        return any(lowered == pair for pair in self.boolean_pairs)

    def mentions_pseudo_state(self, text: str) -> bool:
        lowered = (text or "").lower()
        return any(word in lowered for word in self.pseudo_state_flags)


DEFAULT_VOCABULARY = Vocabulary()
