"""Unit tests for codegen/reconcile.py — the authoritative render prop list.

Tests cover:
1. Evidence-derived axes (enum / boolean pair / pseudo-state)
2. Evidence-derived component properties
3. Naming: sanitation, surface coercion, collisions
4. Instance gating
5. Schema-only fallback and exampleProps defaults
"""

from __future__ import annotations

from typing import Any, Dict, List

from conftest import make_evidence, make_text
from connectgen.codegen.heuristics import SlotSide
from connectgen.codegen.reconcile import reconcile_props
from connectgen.mapping.schema import MappingSchema
from connectgen.surface import PropSurface


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_schema(props: List[Dict[str, Any]], **extra: Any) -> MappingSchema:
    return MappingSchema.model_validate({"componentName": "Button", "props": props, **extra})


def _by_name(props):
    return {p.name: p for p in props}


# ---------------------------------------------------------------------------
# 1. Axes
# ---------------------------------------------------------------------------


class TestAxes:

    def test_enum_uses_schema_mapping_in_evidence_order(self, size_evidence):
        schema = _make_schema([
            {"name": "size", "figmaKey": "Size", "kind": "enum", "valueMapping": {"Large": "lg", "Small": "sm"}},
        ])
        (size,) = reconcile_props(schema, size_evidence)
        assert size.name == "size"
        assert size.kind == "enum"
        assert size.value_mapping == (("Small", "sm"), ("Large", "lg"))
        assert size.default == "sm"
        assert size.has_default

    def test_unmapped_values_become_tokens(self):
        evidence = make_evidence(axes={"Size": ["Small", "Extra Large"]})
        (size,) = reconcile_props(_make_schema([]), evidence)
        assert size.value_mapping == (("Small", "small"), ("Extra Large", "extra_large"))

    def test_state_axis_dropped_unless_on_surface(self):
        evidence = make_evidence(axes={"Size": ["Small", "Large"], "State": ["Default", "Hover"]})
        schema = _make_schema([{"name": "size", "figmaKey": "Size", "kind": "enum"}])
        assert [p.name for p in reconcile_props(schema, evidence)] == ["size"]

        surface = PropSurface.of(["size", "state"])
        names = [p.name for p in reconcile_props(schema, evidence, surface)]
        assert sorted(names) == ["size", "state"]

    def test_yes_no_axis_is_boolean(self):
        evidence = make_evidence(axes={"Has Icon": ["Yes", "No"]})
        (flag,) = reconcile_props(_make_schema([]), evidence)
        assert flag.name == "hasIcon"
        assert flag.kind == "boolean"
        assert flag.default is True

    def test_yes_no_axis_kept_as_enum_when_proposed(self):
        evidence = make_evidence(axes={"Has Icon": ["Yes", "No"]})
        schema = _make_schema([{"name": "hasIcon", "figmaKey": "Has Icon", "kind": "enum"}])
        (flag,) = reconcile_props(schema, evidence)
        assert flag.kind == "enum"


# ---------------------------------------------------------------------------
# 2. Component properties
# ---------------------------------------------------------------------------


class TestProperties:

    def test_property_kinds_and_defaults(self):
        evidence = make_evidence(definitions={
            "Disabled#1:2": {"type": "BOOLEAN", "defaultValue": False},
            "Label#1:3": {"type": "TEXT", "defaultValue": "Button"},
            "Icon#1:4": {"type": "INSTANCE_SWAP", "defaultValue": "9:9"},
            "Count#1:5": {"type": "NUMBER", "defaultValue": 3},
        })
        props = _by_name(reconcile_props(_make_schema([]), evidence))
        assert set(props) == {"disabled", "label", "icon"}
        assert props["disabled"].kind == "boolean"
        assert props["disabled"].default is False and props["disabled"].has_default
        assert props["label"].default == "Button"
        assert props["icon"].kind == "instance"
        assert not props["icon"].has_default

    def test_schema_lends_code_name(self):
        evidence = make_evidence(definitions={"Disabled": {"type": "BOOLEAN"}})
        schema = _make_schema([{"name": "isDisabled", "figmaKey": "Disabled", "kind": "boolean"}])
        (prop,) = reconcile_props(schema, evidence)
        assert prop.name == "isDisabled"
        assert prop.figma_key == "Disabled"

    def test_pseudo_state_flag_dropped(self):
        evidence = make_evidence(definitions={
            ".hover?": {"type": "BOOLEAN"},
            "Disabled": {"type": "BOOLEAN"},
        })
        assert [p.name for p in reconcile_props(_make_schema([]), evidence)] == ["disabled"]


# ---------------------------------------------------------------------------
# 3. Naming
# ---------------------------------------------------------------------------


class TestNaming:

    def test_instances_coerced_onto_surface(self):
        evidence = make_evidence(definitions={
            "Icon Start": {"type": "INSTANCE_SWAP"},
            "Icon End": {"type": "INSTANCE_SWAP"},
        })
        surface = PropSurface.of(["leftIcon", "rightIcon", "children"])
        props = reconcile_props(_make_schema([]), evidence, surface)
        assert [(p.name, p.figma_key) for p in props] == [
            ("leftIcon", "Icon Start"), ("rightIcon", "Icon End"),
        ]
        assert props[0].side is SlotSide.LEFT
        assert props[1].side is SlotSide.RIGHT

    def test_normalized_surface_match(self):
        evidence = make_evidence(definitions={"Full Width": {"type": "BOOLEAN"}})
        (prop,) = reconcile_props(_make_schema([]), evidence, PropSurface.of(["fullwidth"]))
        assert prop.name == "fullwidth"

    def test_first_name_wins_on_collision(self):
        evidence = make_evidence(axes={"Size": ["Small", "Large"], "Scale": ["One", "Two"]})
        schema = _make_schema([
            {"name": "size", "figmaKey": "Size", "kind": "enum"},
            {"name": "size", "figmaKey": "Scale", "kind": "enum"},
        ])
        props = reconcile_props(schema, evidence)
        assert len(props) == 1
        assert props[0].name == "size"


# ---------------------------------------------------------------------------
# 4. Gating
# ---------------------------------------------------------------------------


class TestGating:

    def _evidence(self):
        return make_evidence(definitions={
            "Show Icon Start": {"type": "BOOLEAN", "defaultValue": True},
            "Icon Start": {"type": "INSTANCE_SWAP"},
        })

    def test_boolean_gates_instance(self):
        surface = PropSurface.of(["leftIcon", "children"])
        props = _by_name(reconcile_props(_make_schema([]), self._evidence(), surface))
        assert props["leftIcon"].gate == "showIconStart"
        assert props["showIconStart"].gates

    def test_gating_boolean_on_surface_stays_an_attribute(self):
        evidence = make_evidence(definitions={
            "Show Icon": {"type": "BOOLEAN"},
            "Icon": {"type": "INSTANCE_SWAP"},
        })
        surface = PropSurface.of(["icon", "showIcon"])
        props = _by_name(reconcile_props(_make_schema([]), evidence, surface))
        assert props["icon"].gate == "showIcon"
        assert not props["showIcon"].gates


# ---------------------------------------------------------------------------
# 5. Schema-backed props and defaults
# ---------------------------------------------------------------------------


class TestSchemaBacked:

    def test_text_layer_sample_is_default(self):
        evidence = make_evidence(layers=[make_text("Title", "Click me")])
        schema = _make_schema([{"name": "title", "figmaKey": "Title", "kind": "textContent"}])
        (title,) = reconcile_props(schema, evidence)
        assert title.kind == "textContent"
        assert title.default == "Click me"

    def test_no_evidence_uses_schema_as_is(self):
        schema = _make_schema([
            {"name": "size", "figmaKey": "Size", "kind": "enum", "valueMapping": {"Small": "sm"}},
            {"name": "children", "figmaKey": "*", "kind": "children"},
        ])
        props = reconcile_props(schema, None)
        assert [(p.name, p.kind) for p in props] == [("size", "enum"), ("children", "children")]
        assert props[0].value_mapping == (("Small", "sm"),)
        assert props[1].layers == ("*",)

    def test_example_props_override_default(self, size_evidence):
        schema = _make_schema(
            [{"name": "size", "figmaKey": "Size", "kind": "enum"}],
            exampleProps={"size": "large"},
        )
        (size,) = reconcile_props(schema, size_evidence)
        assert size.default == "large"
