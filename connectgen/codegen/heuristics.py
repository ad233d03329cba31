"""Keyword heuristics for surface coercion and instance gating.

The keyword -> slot table is data (built from a Vocabulary) so every
decision here is a pure, enumerable mapping.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import FrozenSet, List, Optional, Sequence, Tuple

from ..surface import PropSurface
from ..vocabulary import DEFAULT_VOCABULARY, Vocabulary

_WORD_RE = re.compile(r"[A-Z]?[a-z0-9]+|[A-Z]+(?![a-z])")

# Presence-flag wording: "Show Icon", "Has Icon", "Icon visible", "Icon?"
_FLAG_WORDS = frozenset({"show", "has", "with", "is", "enable", "enabled", "visible", "display", "hide"})


class SlotSide(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    ICON = "icon"  # generic, side-less icon slot
    NONE = "none"


def split_words(name: Optional[str]) -> List[str]:
    """'iconStart' / 'Icon Start' / '.icon-start?' -> ['icon', 'start']."""
    return [w.lower() for w in _WORD_RE.findall(name or "")]


def keyword_table(vocabulary: Optional[Vocabulary] = None) -> Tuple[Tuple[FrozenSet[str], SlotSide], ...]:
    """Ordered (keyword set -> slot) rows; the first matching row wins."""
    vocab = vocabulary or DEFAULT_VOCABULARY
    return (
        (vocab.left_slot_keywords, SlotSide.LEFT),
        (vocab.right_slot_keywords, SlotSide.RIGHT),
        (vocab.icon_keywords, SlotSide.ICON),
    )


def classify_slot_side(name: Optional[str], vocabulary: Optional[Vocabulary] = None) -> SlotSide:
    words = set(split_words(name))
    for keywords, side in keyword_table(vocabulary):
        if words & keywords:
            return side
    return SlotSide.NONE


def surface_targets(
    side: SlotSide,
    surface: PropSurface,
    vocabulary: Optional[Vocabulary] = None,
) -> List[str]:
    """Surface names that classify to ``side``."""
    if side is SlotSide.NONE:
        return []
    return [n for n in surface.names if classify_slot_side(n, vocabulary) is side]


def coerce_to_surface(
    name: str,
    surface: Optional[PropSurface],
    vocabulary: Optional[Vocabulary] = None,
) -> str:
    """Rename ``name`` to the surface's real slot prop when unambiguous.

    Fires only when ``name`` is not already on the surface AND exactly one
    surface name shares its slot classification.
    """
    if not surface or surface.has(name):
        return name
    targets = surface_targets(classify_slot_side(name, vocabulary), surface, vocabulary)
    if len(targets) == 1:
        return targets[0]
    return name


def concept_key(name: Optional[str]) -> str:
    """Shared concept of an instance and its presence flag.

    'Show Icon Start' and 'Icon Start' -> 'icon start'.
    """
    words = [w for w in split_words(name) if w not in _FLAG_WORDS]
    return " ".join(sorted(words))


def find_gate(instance_key: str, boolean_keys: Sequence[str]) -> Optional[str]:
    """The boolean key that toggles ``instance_key``, if exactly one does."""
    wanted = concept_key(instance_key)
    if not wanted:
        return None
    matches = [k for k in boolean_keys if concept_key(k) == wanted]
    return matches[0] if len(matches) == 1 else None
