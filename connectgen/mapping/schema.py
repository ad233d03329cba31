"""MappingSchema — a candidate proposal from the Proposal Source.

Proposers answer in camelCase JSON (``figmaKey``, ``exampleProps``); models
accept either the alias or the field name.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ProposalFormatError
from ..llm_utils import parse_llm_json

logger = logging.getLogger(__name__)

PropKind = Literal["enum", "boolean", "string", "instance", "textContent", "children"]

CHILDREN_WILDCARD = "*"


class ImportInfo(BaseModel):
    """Where the target unit is imported from."""
    model_config = ConfigDict(populate_by_name=True)

    path: Optional[str] = None
    default: Optional[str] = None
    named: List[str] = Field(default_factory=list)


class PropMapping(BaseModel):
    """One code prop bound to one piece of design evidence."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    figma_key: str = Field(default="", alias="figmaKey")
    kind: PropKind
    value_mapping: Optional[Dict[str, Any]] = Field(default=None, alias="valueMapping")
    values: Optional[List[str]] = None

    @field_validator("figma_key", mode="before")
    @classmethod
    def _coerce_key(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @property
    def keys(self) -> List[str]:
        """Evidence keys this prop references (children may list several layers)."""
        if self.figma_key:
            return [self.figma_key]
        return [v for v in (self.values or []) if v]


class MappingSchema(BaseModel):
    """Candidate mapping for one component."""
    model_config = ConfigDict(populate_by_name=True)

    status: str = "built"
    reason: Optional[str] = None
    confidence: Optional[float] = None
    component_name: str = Field(
        default="",
        validation_alias=AliasChoices("componentName", "reactComponentName", "component_name"),
    )
    figma_component_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("figmaComponentName", "figma_component_name"),
    )
    import_info: ImportInfo = Field(
        default_factory=ImportInfo,
        validation_alias=AliasChoices("import", "reactImport", "import_info"),
    )
    selector: Optional[str] = None
    props: List[PropMapping] = Field(default_factory=list)
    example_props: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("exampleProps", "example_props"),
    )
    inspected_files: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("inspectedFiles", "inspected_files"),
    )

    @field_validator("props", mode="before")
    @classmethod
    def _props_from_mapping(cls, value: Any) -> Any:
        # {"size": {"figmaKey": ..., "kind": ...}} form
        if isinstance(value, dict):
            props = []
            for name, spec in value.items():
                if spec is None:
                    spec = {}
                if not isinstance(spec, dict):
                    raise ValueError(f"prop {name!r} must map to an object, got {type(spec).__name__}")
                props.append({"name": name, **spec})
            return props
        return value or []

    @property
    def is_built(self) -> bool:
        return self.status.strip().lower() == "built"


def parse_proposal(raw: Any) -> MappingSchema:
    """Coerce proposer output into a MappingSchema.

    Accepts a MappingSchema, a dict, or raw response text (JSON, possibly
    fenced or lightly malformed). Raises ProposalFormatError otherwise.
    """
    if isinstance(raw, MappingSchema):
        return raw

    text = ""
    data = raw
    if isinstance(raw, str):
        text = raw
        data = parse_llm_json(raw, caller="Proposal")
    if not isinstance(data, dict):
        raise ProposalFormatError("proposal was not structured", raw=text)

    try:
        return MappingSchema.model_validate(data)
    except ValidationError as e:
        logger.warning("Proposal: schema validation failed: %s", e.errors()[:3])
        raise ProposalFormatError(f"proposal was not structured: {e}", raw=text) from e
