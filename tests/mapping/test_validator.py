"""Unit tests for mapping/validator.py — evidence-backed contract checks.

Tests cover:
1. Each prop kind against its evidence category
2. One itemized violation per offending prop
3. Pseudo-state suppression and its prop-surface override
4. Edge cases: empty props, missing figmaKey, all props suppressed
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from conftest import make_evidence, make_frame, make_instance, make_text
from connectgen.mapping.schema import MappingSchema
from connectgen.mapping.validator import NO_RETAINED_PROPS, Violation, validate_schema
from connectgen.surface import PropSurface


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_schema(props: List[Dict[str, Any]]) -> MappingSchema:
    return MappingSchema.model_validate({"componentName": "Button", "props": props})


def _prop(name: str, figma_key: Optional[str], kind: str, **extra: Any) -> Dict[str, Any]:
    return {"name": name, "figmaKey": figma_key, "kind": kind, **extra}


@pytest.fixture
def button_evidence():
    return make_evidence(
        "Button",
        axes={"Size": ["Small", "Large"], "State": ["Default", "Hover"], "Has Icon": ["Yes", "No"]},
        definitions={
            "Disabled#1:2": {"type": "BOOLEAN", "defaultValue": False},
            "Icon#1:3": {"type": "INSTANCE_SWAP"},
            "Label#1:4": {"type": "TEXT", "defaultValue": "Button"},
        },
        layers=[make_text("Title", "Click me"), make_frame("Leading", [make_instance()])],
    )


# ---------------------------------------------------------------------------
# 1. Kind contracts
# ---------------------------------------------------------------------------


class TestKindContracts:

    def test_fully_backed_schema_is_valid(self, button_evidence):
        schema = _make_schema([
            _prop("size", "Size", "enum", valueMapping={"Small": "sm", "Large": "lg"}),
            _prop("disabled", "Disabled", "boolean"),
            _prop("label", "Label", "string"),
            _prop("icon", "Icon", "instance"),
            _prop("title", "Title", "textContent"),
            _prop("children", "Leading", "children"),
        ])
        result = validate_schema(schema, button_evidence)
        assert result.valid
        assert result.errors == []
        assert [p.name for p in result.retained_props] == [
            "size", "disabled", "label", "icon", "title", "children",
        ]

    def test_keys_compare_normalized(self, button_evidence):
        schema = _make_schema([
            _prop("size", "size", "enum"),
            _prop("disabled", ".disabled?", "boolean"),
        ])
        assert validate_schema(schema, button_evidence).valid

    def test_yes_no_axis_accepted_as_boolean(self, button_evidence):
        result = validate_schema(_make_schema([_prop("hasIcon", "Has Icon", "boolean")]), button_evidence)
        assert result.valid

    def test_multi_value_axis_is_not_boolean(self, button_evidence):
        result = validate_schema(_make_schema([_prop("size", "Size", "boolean")]), button_evidence)
        assert not result.valid
        assert result.errors[0].kind == "boolean"

    def test_instance_requires_instance_swap_property(self, button_evidence):
        result = validate_schema(_make_schema([_prop("icon", "Disabled", "instance")]), button_evidence)
        assert not result.valid
        error = result.errors[0]
        assert error.kind == "instance"
        assert error.figma_key == "Disabled"
        assert error.prop_name == "icon"
        assert error.expected_evidence_category == "INSTANCE_SWAP property"

    def test_textual_key_needs_prop_surface(self):
        evidence = make_evidence("Tag", axes={"Tone": ["Info", "Warn"]})
        schema = _make_schema([_prop("children", "children", "string")])
        assert not validate_schema(schema, evidence).valid
        assert validate_schema(schema, evidence, PropSurface.of(["children"])).valid

    def test_children_wildcard_and_layer_list(self, button_evidence):
        assert validate_schema(_make_schema([_prop("children", "*", "children")]), button_evidence).valid

        schema = _make_schema([_prop("children", None, "children", values=["Leading", "Ghost"])])
        result = validate_schema(schema, button_evidence)
        assert not result.valid
        assert result.errors[0].figma_key == "Ghost"


# ---------------------------------------------------------------------------
# 2. Itemized violations
# ---------------------------------------------------------------------------


class TestViolations:

    def test_one_error_per_absent_key(self, button_evidence):
        schema = _make_schema([
            _prop("size", "Size", "enum"),
            _prop("color", "Color", "enum"),
            _prop("loading", "Loading", "boolean"),
            _prop("caption", "Caption", "textContent"),
        ])
        result = validate_schema(schema, button_evidence)
        assert not result.valid
        assert [(e.prop_name, e.figma_key) for e in result.errors] == [
            ("color", "Color"), ("loading", "Loading"), ("caption", "Caption"),
        ]

    def test_missing_figma_key(self, button_evidence):
        result = validate_schema(_make_schema([_prop("size", None, "enum")]), button_evidence)
        assert not result.valid
        assert result.errors[0].detail == "no figmaKey given"

    def test_describe(self):
        violation = Violation(
            figma_key="Icon", kind="instance",
            expected_evidence_category="INSTANCE_SWAP property", prop_name="icon",
        )
        assert violation.describe() == "[instance] icon -> 'Icon': expected INSTANCE_SWAP property"


# ---------------------------------------------------------------------------
# 3. Pseudo-state suppression
# ---------------------------------------------------------------------------


class TestPseudoState:

    def test_state_axis_suppressed(self, button_evidence):
        schema = _make_schema([
            _prop("size", "Size", "enum"),
            _prop("state", "State", "enum", valueMapping={"Default": "default", "Hover": "hover"}),
        ])
        result = validate_schema(schema, button_evidence)
        assert result.valid
        assert result.suppressed == ["state"]
        assert [p.name for p in result.retained_props] == ["size"]

    def test_state_axis_kept_when_surface_names_it(self, button_evidence):
        schema = _make_schema([_prop("state", "State", "enum")])
        result = validate_schema(schema, button_evidence, PropSurface.of(["state", "size"]))
        assert result.valid
        assert result.suppressed == []
        assert [p.name for p in result.retained_props] == ["state"]

    def test_dot_prefixed_flag_suppressed_even_without_evidence(self, button_evidence):
        schema = _make_schema([
            _prop("size", "Size", "enum"),
            _prop("hovered", ".hover?", "boolean"),
        ])
        result = validate_schema(schema, button_evidence)
        assert result.valid
        assert result.suppressed == ["hovered"]

    def test_everything_suppressed(self, button_evidence):
        result = validate_schema(_make_schema([_prop("state", "State", "enum")]), button_evidence)
        assert not result.valid
        assert result.errors[0].kind == NO_RETAINED_PROPS


# ---------------------------------------------------------------------------
# 4. Edge cases
# ---------------------------------------------------------------------------


class TestEdgeCases:

    def test_empty_props_valid(self, button_evidence):
        result = validate_schema(_make_schema([]), button_evidence)
        assert result.valid
        assert result.retained_props == []
