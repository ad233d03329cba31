"""Evidence records: the canonical, hashable description of a component set.

Evidence is immutable once built. ``checksum`` covers only the structural
payload (id, name, axes, properties, text/slot layers, variant count) in a
canonical form, so re-ordering the source tree never changes it.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..naming import normalize_key, to_camel_case

SCHEMA_VERSION = "figma-component@1"
CHECKSUM_ALGORITHM = "sha256"


class PropertyType(str, Enum):
    BOOLEAN = "BOOLEAN"
    TEXT = "TEXT"
    INSTANCE_SWAP = "INSTANCE_SWAP"
    NUMBER = "NUMBER"


@dataclass(frozen=True)
class VariantAxis:
    """One variant dimension, e.g. Size = {Small, Large}."""
    name: str  # camelCase key, e.g. "iconPosition"
    label: str  # first raw spelling seen, e.g. "Icon Position"
    raw_keys: Tuple[str, ...] = ()
    values: Tuple[str, ...] = ()  # first-seen order
    enum_tokens: Tuple[str, ...] = ()

    def matches(self, key: str) -> bool:
        wanted = normalize_key(key)
        if not wanted:
            return False
        forms = {normalize_key(self.name), normalize_key(self.label)}
        forms.update(normalize_key(k) for k in self.raw_keys)
        return wanted in forms or normalize_key(to_camel_case(key)) == normalize_key(self.name)

    def canonical(self) -> Dict[str, Any]:
        return {
            "rawKeys": sorted(self.raw_keys),
            "values": sorted(self.values),
            "enums": sorted(self.enum_tokens),
        }


@dataclass(frozen=True)
class ComponentProperty:
    name: str
    type: PropertyType
    default_value: Any = None
    has_default: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "type": self.type.value}
        if self.has_default:
            data["defaultValue"] = self.default_value
        return data


@dataclass(frozen=True)
class TextLayer:
    name: str
    sample_text: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name}
        if self.sample_text is not None:
            data["characters"] = self.sample_text
        return data


@dataclass(frozen=True)
class SlotLayer:
    name: str
    kind: str  # "FRAME" | "GROUP"

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.kind}


def infer_property_type(name: str, declared: Any = None) -> Optional[PropertyType]:
    """Resolve a property type, inferring it from the name when undeclared.

    Trailing "?" means BOOLEAN; "label" or anything mentioning "text" means
    TEXT; any other name is assumed to be an instance swap. VARIANT entries
    return None (they are variant axes, not properties).
    """
    if declared:
        declared = str(declared).upper()
        if declared == "VARIANT":
            return None
        if declared == "STRING":
            return PropertyType.TEXT
        try:
            return PropertyType(declared)
        except ValueError:
            pass
    if not name:
        return None
    lower = name.lower()
    if name.endswith("?"):
        return PropertyType.BOOLEAN
    if lower == "label" or "text" in lower:
        return PropertyType.TEXT
    return PropertyType.INSTANCE_SWAP


def stable_stringify(value: Any) -> str:
    """JSON with object keys sorted recursively and no whitespace."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def compute_checksum(payload: Dict[str, Any]) -> str:
    return hashlib.sha256(stable_stringify(payload).encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class ComponentEvidence:
    """Evidence for one component set. Build via ``ComponentEvidence.create``."""
    id: str
    name: str
    axes: Tuple[VariantAxis, ...] = ()
    component_properties: Tuple[ComponentProperty, ...] = ()
    text_layers: Tuple[TextLayer, ...] = ()
    slot_layers: Tuple[SlotLayer, ...] = ()
    variant_count: int = 0
    aliases: Tuple[str, ...] = ()
    breadcrumb_path: str = ""
    description: str = ""
    checksum: str = field(default="", compare=False)

    @classmethod
    def create(cls, **kwargs: Any) -> "ComponentEvidence":
        """Construct and stamp the checksum."""
        draft = cls(**kwargs)
        return cls(**{**kwargs, "checksum": compute_checksum(draft.checksum_payload())})

    # --- canonical form ---

    def checksum_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "variantAxes": {a.name: a.canonical() for a in self.axes},
            "componentProperties": sorted(
                (p.to_dict() for p in self.component_properties),
                key=lambda p: (p["name"], p["type"]),
            ),
            "textLayers": sorted((t.to_dict() for t in self.text_layers), key=lambda t: t["name"]),
            "slotLayers": sorted((s.to_dict() for s in self.slot_layers), key=lambda s: s["name"]),
            "variantCount": self.variant_count,
        }

    @property
    def variant_axes(self) -> Dict[str, VariantAxis]:
        return {a.name: a for a in self.axes}

    # --- lookups (keys compared in normalized form) ---

    def find_axis(self, key: str) -> Optional[VariantAxis]:
        return next((a for a in self.axes if a.matches(key)), None)

    def find_property(
        self, key: str, prop_type: Optional[PropertyType] = None,
    ) -> Optional[ComponentProperty]:
        wanted = normalize_key(key)
        for prop in self.component_properties:
            if normalize_key(prop.name) != wanted:
                continue
            if prop_type is None or prop.type is prop_type:
                return prop
        return None

    def find_text_layer(self, key: str) -> Optional[TextLayer]:
        wanted = normalize_key(key)
        return next((t for t in self.text_layers if normalize_key(t.name) == wanted), None)

    def find_slot_layer(self, key: str) -> Optional[SlotLayer]:
        wanted = normalize_key(key)
        return next((s for s in self.slot_layers if normalize_key(s.name) == wanted), None)

    # --- serialization ---

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "schemaVersion": SCHEMA_VERSION,
            "checksum": {"algorithm": CHECKSUM_ALGORITHM, "value": self.checksum},
            "componentSetId": self.id,
            "componentName": self.name,
            "variantValueEnums": {
                a.label: {
                    "normalizedKey": a.name,
                    "rawKeys": list(a.raw_keys),
                    "values": list(a.values),
                    "enums": list(a.enum_tokens),
                }
                for a in self.axes
            },
            "componentProperties": [p.to_dict() for p in self.component_properties],
            "textLayers": [t.to_dict() for t in self.text_layers],
            "slotLayers": [s.to_dict() for s in self.slot_layers],
            "totalVariants": self.variant_count,
            "aliases": list(self.aliases),
            "breadcrumbPath": self.breadcrumb_path,
        }
        if self.description:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComponentEvidence":
        """Rebuild evidence from ``to_dict`` output (or a scanner payload).

        The checksum is always recomputed from content.
        """
        axes: List[VariantAxis] = []
        enums = data.get("variantValueEnums") or {}
        for label, meta in enums.items():
            meta = meta or {}
            axes.append(VariantAxis(
                name=meta.get("normalizedKey") or to_camel_case(label),
                label=label,
                raw_keys=tuple(meta.get("rawKeys") or (label,)),
                values=tuple(meta.get("values") or ()),
                enum_tokens=tuple(meta.get("enums") or ()),
            ))

        props = []
        for raw in data.get("componentProperties") or []:
            prop_type = infer_property_type(raw.get("name", ""), raw.get("type"))
            if prop_type is None:
                continue
            props.append(ComponentProperty(
                name=raw["name"],
                type=prop_type,
                default_value=raw.get("defaultValue"),
                has_default="defaultValue" in raw,
            ))

        return cls.create(
            id=str(data.get("componentSetId") or data.get("id") or ""),
            name=str(data.get("componentName") or data.get("name") or ""),
            axes=tuple(axes),
            component_properties=tuple(props),
            text_layers=tuple(
                TextLayer(name=t["name"], sample_text=t.get("characters"))
                for t in data.get("textLayers") or []
            ),
            slot_layers=tuple(
                SlotLayer(name=s["name"], kind=s.get("type") or "FRAME")
                for s in data.get("slotLayers") or []
            ),
            variant_count=int(data.get("totalVariants") or 0),
            aliases=tuple(_as_list(data.get("aliases"))),
            breadcrumb_path=str(data.get("breadcrumbPath") or ""),
            description=str(data.get("description") or ""),
        )


def _as_list(value: Any) -> Iterable[str]:
    if isinstance(value, dict):
        return value.get("candidates") or []
    return value or []
