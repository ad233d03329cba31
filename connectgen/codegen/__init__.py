"""Code Connect rendering: reconciliation, surface coercion, imports, output."""

from .heuristics import SlotSide, classify_slot_side, coerce_to_surface
from .imports import ResolvedImport, resolve_import
from .reconcile import RenderProp, reconcile_props
from .render import RenderedUnit, render_code_connect

__all__ = [
    "RenderProp",
    "RenderedUnit",
    "ResolvedImport",
    "SlotSide",
    "classify_slot_side",
    "coerce_to_surface",
    "reconcile_props",
    "render_code_connect",
    "resolve_import",
]
