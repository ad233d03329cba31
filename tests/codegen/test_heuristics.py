"""Unit tests for codegen/heuristics.py — slot keywords and instance gating."""

from __future__ import annotations

import pytest

from connectgen.codegen.heuristics import (
    SlotSide,
    classify_slot_side,
    coerce_to_surface,
    concept_key,
    find_gate,
    split_words,
)
from connectgen.surface import PropSurface
from connectgen.vocabulary import Vocabulary


class TestSlotClassification:

    @pytest.mark.parametrize("name,words", [
        ("iconStart", ["icon", "start"]),
        ("Icon Start", ["icon", "start"]),
        (".icon-start?", ["icon", "start"]),
        (None, []),
    ])
    def test_split_words(self, name, words):
        assert split_words(name) == words

    @pytest.mark.parametrize("name,side", [
        ("leftIcon", SlotSide.LEFT),
        ("iconStart", SlotSide.LEFT),
        ("iconEnd", SlotSide.RIGHT),
        ("Trailing", SlotSide.RIGHT),
        ("Icon", SlotSide.ICON),
        ("label", SlotSide.NONE),
    ])
    def test_classify(self, name, side):
        assert classify_slot_side(name) is side

    def test_custom_vocabulary(self):
        vocab = Vocabulary(left_slot_keywords=frozenset({"before"}))
        assert classify_slot_side("iconBefore", vocab) is SlotSide.LEFT
        assert classify_slot_side("iconStart", vocab) is SlotSide.ICON


class TestCoercion:

    def test_icon_start_and_end(self):
        surface = PropSurface.of(["leftIcon", "rightIcon", "label"])
        assert coerce_to_surface("iconStart", surface) == "leftIcon"
        assert coerce_to_surface("iconEnd", surface) == "rightIcon"

    def test_name_already_on_surface(self):
        surface = PropSurface.of(["iconStart", "leftIcon"])
        assert coerce_to_surface("iconStart", surface) == "iconStart"

    def test_ambiguous_targets_left_alone(self):
        surface = PropSurface.of(["startIcon", "leftAdornment"])
        assert coerce_to_surface("iconStart", surface) == "iconStart"

    def test_no_surface(self):
        assert coerce_to_surface("iconStart", PropSurface()) == "iconStart"
        assert coerce_to_surface("iconStart", None) == "iconStart"

    def test_sideless_icon_does_not_pick_a_side(self):
        surface = PropSurface.of(["leftIcon", "rightIcon"])
        assert coerce_to_surface("icon", surface) == "icon"


class TestGating:

    def test_concept_key_ignores_flag_words(self):
        assert concept_key("Show Icon Start") == concept_key("Icon Start") == "icon start"
        assert concept_key("Has Icon") == "icon"

    def test_single_match(self):
        assert find_gate("Icon Start", ["Show Icon Start", "Disabled"]) == "Show Icon Start"

    def test_ambiguous_or_missing(self):
        assert find_gate("Icon", ["Show Icon", "Has Icon"]) is None
        assert find_gate("Icon", ["Disabled"]) is None
        assert find_gate("Show", ["Show"]) is None
