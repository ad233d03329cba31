"""MappingSchema model and evidence-backed validation."""

from .schema import ImportInfo, MappingSchema, PropMapping, parse_proposal
from .validator import ValidationResult, Violation, validate_schema

__all__ = [
    "ImportInfo",
    "MappingSchema",
    "PropMapping",
    "ValidationResult",
    "Violation",
    "parse_proposal",
    "validate_schema",
]
