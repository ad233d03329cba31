"""Design node tree as a closed tagged union.

Raw design payloads carry an ad hoc ``type`` string on every node. They are
parsed once into ``DesignNode`` values whose ``type`` is a ``NodeType``;
types this package does not care about collapse to ``NodeType.OTHER`` so
downstream code can switch on the discriminant exhaustively.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple


class NodeType(str, Enum):
    TEXT = "TEXT"
    FRAME = "FRAME"
    GROUP = "GROUP"
    INSTANCE = "INSTANCE"
    COMPONENT = "COMPONENT"
    COMPONENT_SET = "COMPONENT_SET"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, raw: Any) -> "NodeType":
        try:
            return cls(str(raw or "").upper())
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class DesignNode:
    """One node of a design document tree."""
    type: NodeType
    id: str = ""
    name: str = ""
    children: Tuple["DesignNode", ...] = ()
    # TEXT only
    characters: Optional[str] = None
    # COMPONENT_SET only: raw "Name#nodeId" -> {type, defaultValue}
    property_definitions: Dict[str, Any] = field(default_factory=dict)
    description: str = ""

    @property
    def is_container(self) -> bool:
        return self.type in (NodeType.FRAME, NodeType.GROUP)

    def iter_children(self, node_type: NodeType) -> Iterator["DesignNode"]:
        return (c for c in self.children if c.type is node_type)


def parse_node(raw: Any) -> Optional[DesignNode]:
    """Parse a raw JSON-shaped node (and its subtree) into a DesignNode.

    Non-dict input yields None; malformed children are skipped.
    """
    if isinstance(raw, DesignNode):
        return raw
    if not isinstance(raw, dict):
        return None

    raw_children = raw.get("children")
    children = []
    if isinstance(raw_children, list):
        for child in raw_children:
            parsed = parse_node(child)
            if parsed is not None:
                children.append(parsed)

    defs = raw.get("componentPropertyDefinitions")
    characters = raw.get("characters")
    return DesignNode(
        type=NodeType.parse(raw.get("type")),
        id=str(raw.get("id") or ""),
        name=str(raw.get("name") or ""),
        children=tuple(children),
        characters=characters if isinstance(characters, str) else None,
        property_definitions=dict(defs) if isinstance(defs, dict) else {},
        description=str(raw.get("description") or "").strip(),
    )
