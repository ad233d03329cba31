"""Evidence extraction: design component sets -> canonical ComponentEvidence."""

from .extractor import build_evidence, is_hidden_component, parse_variant_name, scan_document
from .models import (
    ComponentEvidence,
    ComponentProperty,
    PropertyType,
    SlotLayer,
    TextLayer,
    VariantAxis,
)
from .nodes import DesignNode, NodeType, parse_node

__all__ = [
    "ComponentEvidence",
    "ComponentProperty",
    "DesignNode",
    "NodeType",
    "PropertyType",
    "SlotLayer",
    "TextLayer",
    "VariantAxis",
    "build_evidence",
    "is_hidden_component",
    "parse_node",
    "parse_variant_name",
    "scan_document",
]
