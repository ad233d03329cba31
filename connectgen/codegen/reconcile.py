"""Reconciliation — derive the authoritative render prop list.

When evidence exists, props come from evidence (one per variant axis and one
per usable component property), not from names the proposer invented. A
schema prop that maps the same figma key lends its code-facing name and its
enum value mapping; the kind stays evidence-derived. Layer-backed props
(textContent/children) and surface-backed textual strings come from the
validated schema because evidence alone cannot name them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..evidence.models import ComponentEvidence, ComponentProperty, PropertyType, VariantAxis
from ..mapping.schema import MappingSchema, PropMapping
from ..mapping.validator import is_pseudo_state, surface_references
from ..naming import normalize_key, to_enum_token, to_identifier
from ..surface import PropSurface
from ..vocabulary import DEFAULT_VOCABULARY, Vocabulary
from .heuristics import SlotSide, classify_slot_side, coerce_to_surface, find_gate

logger = logging.getLogger(__name__)

_PROPERTY_KINDS = {
    PropertyType.BOOLEAN: "boolean",
    PropertyType.TEXT: "string",
    PropertyType.INSTANCE_SWAP: "instance",
}

_MISSING = object()

_TRUTHY = frozenset({"yes", "true", "on"})


@dataclass(frozen=True)
class RenderProp:
    """One line of the rendered props block."""
    name: str
    figma_key: str
    kind: str
    value_mapping: Tuple[Tuple[str, Any], ...] = ()
    layers: Tuple[str, ...] = ()
    default: Any = None
    has_default: bool = False
    side: SlotSide = SlotSide.NONE
    gate: Optional[str] = None  # name of the boolean prop guarding this instance
    gates: bool = False  # this boolean only guards an instance


@dataclass
class _Draft:
    name: str
    figma_key: str
    kind: str
    value_mapping: List[Tuple[str, Any]] = field(default_factory=list)
    layers: List[str] = field(default_factory=list)
    default: Any = _MISSING


def _schema_index(props: Sequence[PropMapping]) -> Dict[str, PropMapping]:
    index: Dict[str, PropMapping] = {}
    for prop in props:
        if prop.figma_key:
            index.setdefault(normalize_key(prop.figma_key), prop)
    return index


def _match_axis_prop(axis: VariantAxis, index: Dict[str, PropMapping]) -> Optional[PropMapping]:
    for key in (axis.label, axis.name, *axis.raw_keys):
        prop = index.get(normalize_key(key))
        if prop is not None:
            return prop
    return None


def _enum_mapping(axis: VariantAxis, candidate: Optional[PropMapping]) -> List[Tuple[str, Any]]:
    """Axis values in evidence order; schema mapping wins where it has an entry."""
    proposed = {}
    if candidate is not None and candidate.value_mapping:
        proposed = {normalize_key(str(k)): v for k, v in candidate.value_mapping.items()}
    return [
        (value, proposed.get(normalize_key(value), to_enum_token(value) or value))
        for value in axis.values
    ]


def _axis_draft(
    axis: VariantAxis,
    candidate: Optional[PropMapping],
    vocab: Vocabulary,
) -> _Draft:
    name = candidate.name if candidate is not None else axis.label
    if vocab.is_boolean_pair(axis.values) and (candidate is None or candidate.kind == "boolean"):
        first = axis.values[0].strip().lower()
        return _Draft(name=name, figma_key=axis.label, kind="boolean", default=first in _TRUTHY)
    mapping = _enum_mapping(axis, candidate)
    return _Draft(
        name=name,
        figma_key=axis.label,
        kind="enum",
        value_mapping=mapping,
        default=mapping[0][1] if mapping else _MISSING,
    )


def _property_draft(prop: ComponentProperty, candidate: Optional[PropMapping]) -> Optional[_Draft]:
    kind = _PROPERTY_KINDS.get(prop.type)
    if kind is None:
        return None
    draft = _Draft(
        name=candidate.name if candidate is not None else prop.name,
        figma_key=prop.name,
        kind=kind,
    )
    if prop.has_default and kind != "instance":
        draft.default = prop.default_value
    return draft


def _derive_from_evidence(
    evidence: ComponentEvidence,
    schema_props: Sequence[PropMapping],
    surface: PropSurface,
    vocab: Vocabulary,
) -> List[_Draft]:
    index = _schema_index(schema_props)
    drafts: List[_Draft] = []

    for axis in evidence.axes:
        probe = PropMapping(name=axis.name, figma_key=axis.label, kind="enum")
        if is_pseudo_state(probe, vocab) and not surface_references(probe, surface):
            logger.debug("Reconcile [%s]: dropping pseudo-state axis %s", evidence.name, axis.label)
            continue
        drafts.append(_axis_draft(axis, _match_axis_prop(axis, index), vocab))

    for prop in evidence.component_properties:
        probe = PropMapping(name=prop.name, figma_key=prop.name, kind="boolean")
        if prop.type is PropertyType.BOOLEAN and is_pseudo_state(probe, vocab) and not surface_references(probe, surface):
            continue
        draft = _property_draft(prop, index.get(normalize_key(prop.name)))
        if draft is not None:
            drafts.append(draft)

    # Layer-backed and surface-backed props only the schema can name
    for prop in schema_props:
        layer = evidence.find_text_layer(prop.figma_key) if prop.kind == "textContent" else None
        if layer is not None:
            draft = _Draft(name=prop.name, figma_key=layer.name, kind="textContent")
            if layer.sample_text:
                draft.default = layer.sample_text
            drafts.append(draft)
        elif prop.kind == "children":
            drafts.append(_Draft(name=prop.name, figma_key=prop.figma_key, kind="children", layers=list(prop.keys)))
        elif prop.kind == "string" and evidence.find_property(prop.figma_key, PropertyType.TEXT) is None:
            if normalize_key(prop.figma_key) in vocab.textual_keys and surface.find(prop.figma_key):
                drafts.append(_Draft(name=prop.name, figma_key=prop.figma_key, kind="string"))
    return drafts


def _derive_from_schema(schema_props: Sequence[PropMapping]) -> List[_Draft]:
    drafts = []
    for prop in schema_props:
        mapping = list((prop.value_mapping or {}).items()) if prop.kind == "enum" else []
        drafts.append(_Draft(
            name=prop.name,
            figma_key=prop.figma_key,
            kind=prop.kind,
            value_mapping=mapping,
            layers=list(prop.keys) if prop.kind == "children" else [],
        ))
    return drafts


def _has_content(evidence: Optional[ComponentEvidence]) -> bool:
    if evidence is None:
        return False
    return bool(evidence.axes or evidence.component_properties or evidence.text_layers or evidence.slot_layers)


def _resolve_name(draft: _Draft, surface: PropSurface, vocab: Vocabulary) -> str:
    name = to_identifier(draft.name)
    if surface.has(name):
        return name
    found = surface.find(name)
    if found:
        return found
    if draft.kind in ("instance", "children"):
        return coerce_to_surface(name, surface, vocab)
    return name


def reconcile_props(
    schema: MappingSchema,
    evidence: Optional[ComponentEvidence],
    prop_surface: Optional[PropSurface] = None,
    vocabulary: Optional[Vocabulary] = None,
    schema_props: Optional[Sequence[PropMapping]] = None,
) -> List[RenderProp]:
    """Final, ordered prop list for rendering.

    ``schema_props`` is the validator's retained list (pseudo-state props
    removed); defaults to ``schema.props``.
    """
    vocab = vocabulary or DEFAULT_VOCABULARY
    surface = prop_surface or PropSurface()
    candidates = list(schema.props if schema_props is None else schema_props)

    if _has_content(evidence):
        drafts = _derive_from_evidence(evidence, candidates, surface, vocab)
    else:
        drafts = _derive_from_schema(candidates)

    # Name sanitation / coercion, first name wins on collision
    named: List[Tuple[str, _Draft]] = []
    seen = set()
    for draft in drafts:
        name = _resolve_name(draft, surface, vocab)
        if name in seen:
            logger.debug("Reconcile: duplicate prop name %s (figma key %s) dropped", name, draft.figma_key)
            continue
        seen.add(name)
        named.append((name, draft))

    # Instance/boolean gating
    boolean_keys = {d.figma_key: n for n, d in named if d.kind == "boolean"}
    gates: Dict[str, str] = {}
    for name, draft in named:
        if draft.kind == "instance":
            gate_key = find_gate(draft.figma_key, list(boolean_keys))
            if gate_key is not None:
                gates[name] = boolean_keys[gate_key]
    gating_booleans = set(gates.values())

    result: List[RenderProp] = []
    for name, draft in named:
        default = schema.example_props.get(name, schema.example_props.get(draft.name, draft.default))
        result.append(RenderProp(
            name=name,
            figma_key=draft.figma_key,
            kind=draft.kind,
            value_mapping=tuple(draft.value_mapping),
            layers=tuple(draft.layers),
            default=None if default is _MISSING else default,
            has_default=default is not _MISSING,
            side=classify_slot_side(draft.figma_key or name, vocab),
            gate=gates.get(name),
            gates=name in gating_booleans and not surface.has(name),
        ))
    return result
