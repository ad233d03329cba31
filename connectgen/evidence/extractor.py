"""Evidence Extractor — component-set node -> ComponentEvidence.

Pure functions, zero I/O. Malformed pieces of a node (bad variant-name
segments, untyped property entries) are skipped locally; an empty or missing
tree still yields valid evidence with zero variants.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .. import settings
from ..naming import normalize_variant_value, sanitize_filename, to_camel_case, to_enum_token
from ..vocabulary import DEFAULT_VOCABULARY, Vocabulary
from .models import (
    ComponentEvidence,
    ComponentProperty,
    PropertyType,
    SlotLayer,
    TextLayer,
    VariantAxis,
    infer_property_type,
)
from .nodes import DesignNode, NodeType, parse_node

logger = logging.getLogger(__name__)

_ALIAS_NOISE_RE = re.compile(r"\b(component|components|default|base|new)\b", re.IGNORECASE)
_TRAILING_PARENS_RE = re.compile(r"\s*\(.*?\)\s*$")


# ---------------------------------------------------------------------------
# Hiding / aliases
# ---------------------------------------------------------------------------

def is_hidden_component(name: Optional[str]) -> bool:
    """Empty, '.'/'_'-prefixed, or punctuation-only names are hidden."""
    trimmed = (name or "").strip()
    if not trimmed:
        return True
    if trimmed[0] in "._":
        return True
    return sanitize_filename(trimmed) == "_"


def build_aliases(name: Optional[str]) -> Tuple[str, ...]:
    """Candidate lookup names: 'Forms/Button (Legacy)' -> canonical, 'Button (Legacy)', 'Button'."""
    canonical = (name or "").strip()
    slash_parts = [p.strip() for p in canonical.split("/") if p.strip()]
    base = slash_parts[-1] if slash_parts else canonical
    without_parens = _TRAILING_PARENS_RE.sub("", base).strip()
    stripped = re.sub(r"\s{2,}", " ", _ALIAS_NOISE_RE.sub("", without_parens)).strip()
    alias = stripped or without_parens or base or canonical

    seen: List[str] = []
    for candidate in (canonical, base, without_parens, alias):
        if candidate and candidate not in seen:
            seen.append(candidate)
    return tuple(seen)


# ---------------------------------------------------------------------------
# Variant axes
# ---------------------------------------------------------------------------

def parse_variant_name(variant_name: Optional[str]) -> List[Tuple[str, str]]:
    """'Size=Large, State = Hover' -> [('Size', 'Large'), ('State', 'Hover')].

    Segments missing a key or value are dropped.
    """
    pairs: List[Tuple[str, str]] = []
    if not variant_name:
        return pairs
    for segment in variant_name.split(","):
        key, _, value = segment.strip().partition("=")
        key, value = key.strip(), value.strip()
        if not key or not value:
            logger.debug("Extractor: skipping malformed variant segment %r", segment)
            continue
        pairs.append((key, value))
    return pairs


def extract_variant_axes(variants: Sequence[DesignNode]) -> Tuple[VariantAxis, ...]:
    """Accumulate raw keys, values and enum tokens per camelCase axis key."""
    options: Dict[str, Dict[str, Any]] = {}
    for variant in variants:
        for raw_key, raw_value in parse_variant_name(variant.name):
            axis_key = to_camel_case(raw_key)
            if not axis_key:
                continue
            entry = options.setdefault(
                axis_key, {"label": raw_key, "raw_keys": [], "values": [], "enums": []},
            )
            value = normalize_variant_value(raw_value)
            token = to_enum_token(raw_value)
            for bucket, item in (("raw_keys", raw_key), ("values", value), ("enums", token)):
                if item not in entry[bucket]:
                    entry[bucket].append(item)

    return tuple(
        VariantAxis(
            name=axis_key,
            label=meta["label"],
            raw_keys=tuple(meta["raw_keys"]),
            values=tuple(meta["values"]),
            enum_tokens=tuple(meta["enums"]),
        )
        for axis_key, meta in sorted(options.items())
    )


# ---------------------------------------------------------------------------
# Component properties
# ---------------------------------------------------------------------------

def extract_component_properties(definitions: Optional[Dict[str, Any]]) -> Tuple[ComponentProperty, ...]:
    """Normalize a set-level property-definition map.

    Keys look like ``"Show Icon#12:5"``; the ``#nodeId`` suffix is dropped.
    VARIANT-typed entries are skipped (they are variant axes). When one name
    appears under several node ids, the lowest raw key wins.
    """
    chosen: Dict[str, Tuple[str, Dict[str, Any], PropertyType]] = {}
    for key, definition in (definitions or {}).items():
        if not isinstance(definition, dict):
            continue
        raw_key = str(key)
        name = raw_key.split("#", 1)[0].strip()
        if not name:
            continue
        prop_type = infer_property_type(name, definition.get("type"))
        if prop_type is None:
            continue
        current = chosen.get(name)
        if current is None or raw_key < current[0]:
            chosen[name] = (raw_key, definition, prop_type)

    return tuple(
        ComponentProperty(
            name=name,
            type=prop_type,
            default_value=definition.get("defaultValue"),
            has_default="defaultValue" in definition,
        )
        for name, (_, definition, prop_type) in chosen.items()
    )


# ---------------------------------------------------------------------------
# Text / slot layers
# ---------------------------------------------------------------------------

def _is_slot_candidate(node: DesignNode, vocabulary: Vocabulary) -> bool:
    if not node.is_container:
        return False
    name = node.name.strip()
    if not name:
        return False
    if name.lower() in vocabulary.slot_layer_names:
        return True
    return any(True for _ in node.iter_children(NodeType.INSTANCE))


def extract_layers(
    variants: Sequence[DesignNode],
    max_depth: int = settings.LAYER_DEPTH,
    vocabulary: Optional[Vocabulary] = None,
) -> Tuple[Tuple[TextLayer, ...], Tuple[SlotLayer, ...]]:
    """Walk each variant's layer tree (variant itself is depth 0).

    Text layers: one per uniquely named TEXT node.
    Slot layers: FRAME/GROUP nodes with a slot-like name or a direct
    INSTANCE child, deduped by name.

    Layers are listed in first-seen order, but the representative sample
    text and slot kind are the lexicographically smallest seen across all
    variants, so variant order never changes the result.
    """
    vocab = vocabulary or DEFAULT_VOCABULARY
    samples: Dict[str, Optional[str]] = {}
    slot_kinds: Dict[str, str] = {}

    def visit(node: DesignNode, depth: int) -> None:
        if depth > max_depth:
            return
        name = node.name.strip()
        if node.type is NodeType.TEXT:
            if name:
                sample = node.characters or None
                current = samples.get(name)
                if name not in samples or current is None:
                    samples[name] = sample
                elif sample is not None and sample < current:
                    samples[name] = sample
        elif _is_slot_candidate(node, vocab):
            kind = node.type.value
            if name not in slot_kinds or kind < slot_kinds[name]:
                slot_kinds[name] = kind
        for child in node.children:
            visit(child, depth + 1)

    for variant in variants:
        visit(variant, 0)
    text_layers = tuple(TextLayer(name=n, sample_text=s) for n, s in samples.items())
    slot_layers = tuple(SlotLayer(name=n, kind=k) for n, k in slot_kinds.items())
    return text_layers, slot_layers


# ---------------------------------------------------------------------------
# Evidence
# ---------------------------------------------------------------------------

def _variant_nodes(component_set: DesignNode) -> List[DesignNode]:
    """COMPONENT children only, each id counted once."""
    variants: List[DesignNode] = []
    seen_ids = set()
    for child in component_set.iter_children(NodeType.COMPONENT):
        if child.id and child.id in seen_ids:
            continue
        seen_ids.add(child.id)
        variants.append(child)
    return variants


def build_evidence(
    raw_set: Any,
    breadcrumbs: Sequence[str] = (),
    *,
    max_depth: Optional[int] = None,
    vocabulary: Optional[Vocabulary] = None,
) -> Optional[ComponentEvidence]:
    """Build evidence for one component set.

    Returns None for hidden sets (and non-node input); they produce no
    evidence at all.
    """
    node = parse_node(raw_set)
    if node is None or is_hidden_component(node.name):
        return None

    variants = _variant_nodes(node)
    text_layers, slot_layers = extract_layers(
        variants,
        max_depth=settings.LAYER_DEPTH if max_depth is None else max_depth,
        vocabulary=vocabulary,
    )
    evidence = ComponentEvidence.create(
        id=node.id,
        name=node.name,
        axes=extract_variant_axes(variants),
        component_properties=extract_component_properties(node.property_definitions),
        text_layers=text_layers,
        slot_layers=slot_layers,
        variant_count=len(variants),
        aliases=build_aliases(node.name),
        breadcrumb_path=" / ".join(b for b in breadcrumbs if b),
        description=node.description,
    )
    logger.debug(
        "Extractor [%s]: %d variants, %d axes, %d props, checksum=%s",
        evidence.name, evidence.variant_count, len(evidence.axes),
        len(evidence.component_properties), evidence.checksum[:12],
    )
    return evidence


def find_component_sets(root: DesignNode) -> List[Tuple[DesignNode, Tuple[str, ...]]]:
    """Every COMPONENT_SET under ``root`` with its ancestor-name trail (inclusive)."""
    found: List[Tuple[DesignNode, Tuple[str, ...]]] = []

    def walk(node: DesignNode, trail: Tuple[str, ...]) -> None:
        next_trail = trail + (node.name,) if node.name else trail
        if node.type is NodeType.COMPONENT_SET:
            found.append((node, next_trail))
        for child in node.children:
            walk(child, next_trail)

    walk(root, ())
    return found


def scan_document(
    document: Any,
    *,
    max_depth: Optional[int] = None,
    vocabulary: Optional[Vocabulary] = None,
) -> List[ComponentEvidence]:
    """Evidence for every visible component set in a design document tree."""
    root = parse_node(document)
    if root is None:
        return []

    results: List[ComponentEvidence] = []
    hidden = 0
    for node, trail in find_component_sets(root):
        evidence = build_evidence(node, trail, max_depth=max_depth, vocabulary=vocabulary)
        if evidence is None:
            hidden += 1
            continue
        results.append(evidence)

    logger.info("Extractor: %d component sets (%d hidden skipped)", len(results), hidden)
    return results
