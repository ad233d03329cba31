"""Code Renderer — validated schema + evidence -> one Code Connect source unit.

Two targets:
- react: ``figma.connect(Component, url, {...})`` with a JSX usage example
- html:  URL-only ``figma.connect(url, {...})`` with an ``html`` tag template
  (Angular / web components)

Rendering is deterministic: identical inputs (and filesystem probe results)
always produce identical bytes.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Literal, Optional, Sequence, Tuple

from ..evidence.models import ComponentEvidence
from ..mapping.schema import CHILDREN_WILDCARD, MappingSchema, PropMapping
from ..naming import is_bare_identifier, split_title, to_kebab_case, to_pascal_case, to_token_name
from ..surface import PropSurface
from ..vocabulary import Vocabulary
from .heuristics import SlotSide
from .imports import resolve_import
from .reconcile import RenderProp, reconcile_props

logger = logging.getLogger(__name__)

Target = Literal["react", "html"]

REACT_IMPORT = "import figma from '@figma/code-connect/react'"
HTML_IMPORT = "import figma, { html } from '@figma/code-connect/html'"

_INDENT = "  "


@dataclass(frozen=True)
class RenderedUnit:
    code: str
    props: Tuple[RenderProp, ...]
    component: str
    import_specifier: Optional[str] = None
    import_unresolved: bool = False


# ---------------------------------------------------------------------------
# Literals / keys
# ---------------------------------------------------------------------------

def js_string(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f"'{escaped}'"


def js_literal(value: Any) -> str:
    if value is None:
        return "undefined"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return json.dumps(value)
    if isinstance(value, str):
        return js_string(value)
    return json.dumps(value, sort_keys=True, ensure_ascii=False)


def js_key(name: str) -> str:
    """Bare identifiers unquoted, everything else quoted."""
    return name if is_bare_identifier(name) else js_string(name)


# ---------------------------------------------------------------------------
# Props block
# ---------------------------------------------------------------------------

def _helper_call(prop: RenderProp, indent: str) -> str:
    key = js_string(prop.figma_key)
    if prop.kind == "enum":
        if not prop.value_mapping:
            return f"figma.enum({key}, {{}})"
        inner = indent + _INDENT
        rows = [f"{inner}{js_key(label)}: {js_literal(value)}," for label, value in prop.value_mapping]
        return "\n".join([f"figma.enum({key}, {{", *rows, f"{indent}}})"])
    if prop.kind == "boolean":
        return f"figma.boolean({key})"
    if prop.kind == "string":
        return f"figma.string({key})"
    if prop.kind == "instance":
        return f"figma.instance({key})"
    if prop.kind == "textContent":
        return f"figma.textContent({key})"
    if prop.kind == "children":
        layers = list(prop.layers) or [prop.figma_key or CHILDREN_WILDCARD]
        if len(layers) == 1:
            return f"figma.children({js_string(layers[0])})"
        return f"figma.children([{', '.join(js_string(layer) for layer in layers)}])"
    raise ValueError(f"unknown prop kind: {prop.kind}")


def render_props_block(props: Sequence[RenderProp], indent: str = _INDENT) -> List[str]:
    if not props:
        return []
    inner = indent + _INDENT
    lines = [f"{indent}props: {{"]
    for prop in props:
        lines.append(f"{inner}{js_key(prop.name)}: {_helper_call(prop, inner)},")
    lines.append(f"{indent}}},")
    return lines


# ---------------------------------------------------------------------------
# Usage example
# ---------------------------------------------------------------------------

def example_default(prop: RenderProp) -> Optional[str]:
    """Literal default for the destructured prop bag, or None for no default."""
    if prop.has_default and prop.default is not None:
        return js_literal(prop.default)
    if prop.kind == "enum" and prop.value_mapping:
        return js_literal(prop.value_mapping[0][1])
    if prop.kind == "boolean":
        return "false"
    if prop.kind in ("string", "textContent"):
        return js_string(split_title(prop.name))
    return None


def _destructure(props: Sequence[RenderProp]) -> str:
    if not props:
        return "()"
    parts = []
    for prop in props:
        default = example_default(prop)
        parts.append(prop.name if default is None else f"{prop.name} = {default}")
    return "({ " + ", ".join(parts) + " })"


def _is_content(prop: RenderProp, surface: PropSurface) -> bool:
    if prop.name == "children":
        return True
    return prop.kind in ("children", "textContent") and not surface.has(prop.name)


def _layout(props: Sequence[RenderProp], surface: PropSurface) -> Tuple[List[RenderProp], List[RenderProp]]:
    """Split props into (attributes, ordered children-area content)."""
    attributes: List[RenderProp] = []
    left: List[RenderProp] = []
    middle: List[RenderProp] = []
    right: List[RenderProp] = []
    content: List[RenderProp] = []
    for prop in props:
        if prop.gates:
            continue
        if prop.gate:
            if prop.side is SlotSide.LEFT:
                left.append(prop)
            elif prop.side is SlotSide.RIGHT:
                right.append(prop)
            else:
                middle.append(prop)
        elif _is_content(prop, surface):
            content.append(prop)
        else:
            attributes.append(prop)
    return attributes, left + middle + content + right


def _react_expression(prop: RenderProp) -> str:
    if prop.gate:
        return f"{{{prop.gate} ? {prop.name} : null}}"
    return f"{{{prop.name}}}"


def _html_expression(prop: RenderProp) -> str:
    if prop.gate:
        return f"${{{prop.gate} ? {prop.name} : ''}}"
    return f"${{{prop.name}}}"


def _react_example(component: str, props: Sequence[RenderProp], surface: PropSurface) -> List[str]:
    attributes, content = _layout(props, surface)
    attrs = "".join(f" {p.name}={{{p.name}}}" for p in attributes)
    head = f"{_INDENT}example: {_destructure(props)} => "
    if not content:
        return [f"{head}<{component}{attrs} />,"]
    lines = [f"{head}(", f"{_INDENT * 2}<{component}{attrs}>"]
    lines.extend(f"{_INDENT * 3}{_react_expression(p)}" for p in content)
    lines.extend([f"{_INDENT * 2}</{component}>", f"{_INDENT}),"])
    return lines


def _html_example(selector: str, props: Sequence[RenderProp], surface: PropSurface) -> List[str]:
    attributes, content = _layout(props, surface)
    attrs = "".join(f' [{p.name}]="${{{p.name}}}"' for p in attributes)
    head = f"{_INDENT}example: {_destructure(props)} => html`"
    if not content:
        return [f"{head}<{selector}{attrs}></{selector}>`,"]
    lines = [head, f"{_INDENT * 2}<{selector}{attrs}>"]
    lines.extend(f"{_INDENT * 3}{_html_expression(p)}" for p in content)
    lines.extend([f"{_INDENT * 2}</{selector}>", f"{_INDENT}`,"])
    return lines


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def component_identifier(schema: MappingSchema, evidence: Optional[ComponentEvidence]) -> str:
    info = schema.import_info
    for candidate in (schema.component_name, info.default, *(info.named or [])):
        if candidate and is_bare_identifier(candidate):
            return candidate
    return to_pascal_case(evidence.name if evidence else schema.figma_component_name)


def figma_reference(schema: MappingSchema, evidence: Optional[ComponentEvidence], figma_url: Optional[str]) -> str:
    if figma_url:
        return figma_url
    return to_token_name(schema.figma_component_name or (evidence.name if evidence else "") or schema.component_name)


def _react_import_line(component: str, schema: MappingSchema, specifier: str) -> str:
    info = schema.import_info
    named = [n for n in info.named if n]
    default = info.default if info.default and is_bare_identifier(info.default) else None
    if not default and component not in named:
        named.append(component)
    clause = ", ".join(filter(None, [default, f"{{ {', '.join(named)} }}" if named else ""]))
    return f"import {clause} from {js_string(specifier)}"


def render_code_connect(
    schema: MappingSchema,
    evidence: Optional[ComponentEvidence],
    prop_surface: Optional[PropSurface] = None,
    *,
    target: Target = "react",
    figma_url: Optional[str] = None,
    repo_root: Optional[Path] = None,
    output_dir: Optional[Path] = None,
    vocabulary: Optional[Vocabulary] = None,
    schema_props: Optional[Sequence[PropMapping]] = None,
) -> RenderedUnit:
    """Render one Code Connect file for a validated schema.

    ``schema_props`` is the validator's retained prop list. ``repo_root``
    enables import probing; ``output_dir`` is where the file will live (for
    relative import specifiers).
    """
    surface = prop_surface or PropSurface()
    props = reconcile_props(schema, evidence, surface, vocabulary, schema_props)
    component = component_identifier(schema, evidence)
    reference = js_string(figma_reference(schema, evidence, figma_url))

    if target == "html":
        selector = surface.selector or schema.selector or to_kebab_case(component)
        lines = [HTML_IMPORT, "", f"figma.connect({reference}, {{"]
        lines.extend(render_props_block(props))
        lines.extend(_html_example(selector, props, surface))
        lines.append("})")
        return RenderedUnit(code="\n".join(lines) + "\n", props=tuple(props), component=selector)

    resolved = resolve_import(
        schema.import_info.path,
        repo_root,
        from_dir=output_dir,
        fallbacks=schema.inspected_files,
    )
    lines = [REACT_IMPORT]
    if resolved.specifier:
        lines.append(_react_import_line(component, schema, resolved.specifier))
    lines.extend(["", f"figma.connect({component}, {reference}, {{"])
    lines.extend(render_props_block(props))
    lines.extend(_react_example(component, props, surface))
    lines.append("})")
    return RenderedUnit(
        code="\n".join(lines) + "\n",
        props=tuple(props),
        component=component,
        import_specifier=resolved.specifier,
        import_unresolved=resolved.unresolved,
    )
