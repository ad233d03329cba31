"""Schema Validator — evidence-backed contract checks (pure Python, zero LLM cost).

Each prop of a candidate MappingSchema is checked against the kind-specific
evidence it requires. Violations are itemized, one per offending prop, so the
retry loop can hand back targeted feedback.

Pseudo-state props (a ``state``/``interaction`` axis, or a ``.``-prefixed
boolean flag naming hover/focus/...) are suppressed before checking unless
the prop surface names them explicitly.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..evidence.models import ComponentEvidence, PropertyType
from ..naming import normalize_key, to_identifier
from ..surface import PropSurface
from ..vocabulary import DEFAULT_VOCABULARY, Vocabulary
from .schema import CHILDREN_WILDCARD, MappingSchema, PropMapping

logger = logging.getLogger(__name__)

# Violation kinds outside PropKind
UNSTRUCTURED_PROPOSAL = "unstructured_proposal"
PROPOSAL_ERROR = "proposal_error"
PROPOSAL_DECLINED = "proposal_declined"
NO_RETAINED_PROPS = "no_retained_props"


class Violation(BaseModel):
    """One addressable contract violation."""
    figma_key: str = ""
    kind: str
    expected_evidence_category: str
    prop_name: Optional[str] = None
    detail: str = ""

    def describe(self) -> str:
        target = f"{self.prop_name} -> " if self.prop_name else ""
        text = f"[{self.kind}] {target}'{self.figma_key}': expected {self.expected_evidence_category}"
        return f"{text} ({self.detail})" if self.detail else text


class ValidationResult(BaseModel):
    valid: bool
    errors: List[Violation] = Field(default_factory=list)
    retained_props: List[PropMapping] = Field(default_factory=list)
    suppressed: List[str] = Field(default_factory=list)

    @classmethod
    def failure(cls, violation: Violation) -> "ValidationResult":
        return cls(valid=False, errors=[violation])


# ---------------------------------------------------------------------------
# Kind contracts
# ---------------------------------------------------------------------------

def _check_enum(key: str, evidence: ComponentEvidence, surface: PropSurface, vocab: Vocabulary) -> bool:
    return evidence.find_axis(key) is not None


def _check_boolean(key: str, evidence: ComponentEvidence, surface: PropSurface, vocab: Vocabulary) -> bool:
    if evidence.find_property(key, PropertyType.BOOLEAN) is not None:
        return True
    axis = evidence.find_axis(key)
    return axis is not None and vocab.is_boolean_pair(axis.values)


def _check_string(key: str, evidence: ComponentEvidence, surface: PropSurface, vocab: Vocabulary) -> bool:
    if evidence.find_property(key, PropertyType.TEXT) is not None:
        return True
    return normalize_key(key) in vocab.textual_keys and surface.find(key) is not None


def _check_instance(key: str, evidence: ComponentEvidence, surface: PropSurface, vocab: Vocabulary) -> bool:
    return evidence.find_property(key, PropertyType.INSTANCE_SWAP) is not None


def _check_text_content(key: str, evidence: ComponentEvidence, surface: PropSurface, vocab: Vocabulary) -> bool:
    return evidence.find_text_layer(key) is not None


def _check_children(key: str, evidence: ComponentEvidence, surface: PropSurface, vocab: Vocabulary) -> bool:
    return key == CHILDREN_WILDCARD or evidence.find_slot_layer(key) is not None


_Check = Callable[[str, ComponentEvidence, PropSurface, Vocabulary], bool]

# kind -> (check, expected evidence category)
KIND_CONTRACTS: Dict[str, Tuple[_Check, str]] = {
    "enum": (_check_enum, "variant axis"),
    "boolean": (_check_boolean, "BOOLEAN property or boolean-like variant axis"),
    "string": (_check_string, "TEXT property or textual key backed by the prop surface"),
    "instance": (_check_instance, "INSTANCE_SWAP property"),
    "textContent": (_check_text_content, "text layer"),
    "children": (_check_children, "slot layer or '*'"),
}


# ---------------------------------------------------------------------------
# Pseudo-state suppression
# ---------------------------------------------------------------------------

def is_pseudo_state(prop: PropMapping, vocab: Vocabulary) -> bool:
    key = prop.figma_key
    if not key:
        return False
    if vocab.is_pseudo_state_axis(normalize_key(key)):
        return True
    return prop.kind == "boolean" and key.startswith(".") and vocab.mentions_pseudo_state(key)


def surface_references(prop: PropMapping, surface: PropSurface) -> bool:
    """True when the prop surface names this exact axis/flag as a real parameter."""
    return surface.has(to_identifier(prop.figma_key))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def validate_schema(
    schema: MappingSchema,
    evidence: ComponentEvidence,
    prop_surface: Optional[PropSurface] = None,
    vocabulary: Optional[Vocabulary] = None,
) -> ValidationResult:
    """Check every prop of ``schema`` against ``evidence``."""
    vocab = vocabulary or DEFAULT_VOCABULARY
    surface = prop_surface or PropSurface()

    if not schema.props:
        return ValidationResult(valid=True)

    retained: List[PropMapping] = []
    suppressed: List[str] = []
    errors: List[Violation] = []

    for prop in schema.props:
        if is_pseudo_state(prop, vocab) and not surface_references(prop, surface):
            suppressed.append(prop.name)
            continue
        retained.append(prop)

        check, category = KIND_CONTRACTS[prop.kind]
        keys = prop.keys
        missing = [k for k in keys if not check(k, evidence, surface, vocab)]
        if keys and not missing:
            continue
        errors.append(Violation(
            figma_key=", ".join(missing) if missing else "",
            kind=prop.kind,
            expected_evidence_category=category,
            prop_name=prop.name,
            detail="" if keys else "no figmaKey given",
        ))

    if not retained:
        errors.append(Violation(
            kind=NO_RETAINED_PROPS,
            expected_evidence_category="at least one non-pseudo-state prop",
            detail=f"all props suppressed as pseudo-state: {', '.join(suppressed)}",
        ))

    if suppressed:
        logger.debug("Validator [%s]: suppressed %s", evidence.name, suppressed)

    return ValidationResult(
        valid=not errors,
        errors=errors,
        retained_props=retained,
        suppressed=suppressed,
    )
