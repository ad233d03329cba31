"""Shared fixtures: raw design-node builders and evidence factories."""

from __future__ import annotations

import os
import tempfile
from typing import Any, Dict, List, Optional

# Keep the batch run log out of the working tree
os.environ.setdefault("CONNECTGEN_LOG_DIR", tempfile.mkdtemp(prefix="connectgen-test-logs-"))

import pytest  # noqa: E402

from connectgen.evidence import ComponentEvidence, build_evidence  # noqa: E402


def make_text(name: str, characters: Optional[str] = None, node_id: str = "t") -> Dict[str, Any]:
    node: Dict[str, Any] = {"id": node_id, "type": "TEXT", "name": name}
    if characters is not None:
        node["characters"] = characters
    return node


def make_frame(name: str, children: Optional[List[dict]] = None, node_type: str = "FRAME") -> Dict[str, Any]:
    return {"id": f"f-{name}", "type": node_type, "name": name, "children": children or []}


def make_instance(name: str = "Icon/Star") -> Dict[str, Any]:
    return {"id": f"i-{name}", "type": "INSTANCE", "name": name}


def make_variant(name: str, node_id: str, children: Optional[List[dict]] = None) -> Dict[str, Any]:
    return {"id": node_id, "type": "COMPONENT", "name": name, "children": children or []}


def make_component_set(
    name: str = "Button",
    variants: Optional[List[dict]] = None,
    definitions: Optional[Dict[str, Any]] = None,
    set_id: str = "1:1",
) -> Dict[str, Any]:
    node: Dict[str, Any] = {
        "id": set_id,
        "type": "COMPONENT_SET",
        "name": name,
        "children": variants or [],
    }
    if definitions is not None:
        node["componentPropertyDefinitions"] = definitions
    return node


def make_evidence(
    name: str = "Button",
    axes: Optional[Dict[str, List[str]]] = None,
    definitions: Optional[Dict[str, Any]] = None,
    layers: Optional[List[dict]] = None,
) -> ComponentEvidence:
    """Evidence from a compact description.

    ``axes`` maps axis label -> values; variants cycle through every axis's
    values so each value appears at least once.
    """
    axes = axes or {}
    labels = list(axes)
    variants: List[dict] = []
    if labels:
        longest = max(len(v) for v in axes.values())
        for idx in range(longest):
            parts = [f"{label}={axes[label][idx % len(axes[label])]}" for label in labels]
            variants.append(make_variant(", ".join(parts), f"v{idx}", layers))
    elif layers:
        variants.append(make_variant("Default", "v0", layers))
    evidence = build_evidence(make_component_set(name, variants, definitions))
    assert evidence is not None
    return evidence


@pytest.fixture
def size_evidence() -> ComponentEvidence:
    return make_evidence(axes={"Size": ["Small", "Large"]})
