"""Mapping Proposal Prompt Templates

Prompt design for the Proposal Source: takes one component's evidence plus
the consuming source files and asks for a MappingSchema JSON object.

Every call is self-contained. A retry resends the full component prompt
plus a repair section (itemized violations, previous output, previous
rendered code); nothing relies on proposer-side memory.
"""

from __future__ import annotations

import json
from typing import Dict, List, Mapping, Optional, Sequence

MAPPING_SYSTEM_PROMPT = """\
You are an expert in Figma Code Connect. Your job is to map one Figma \
component set onto the code component that implements it.

Your output must be **machine-readable JSON**: no markdown, no explanation, \
no code fences. Return a single JSON object.

## Output Schema

```
{
  "status": "built" | "skipped",
  "reason": "<why, when skipped>",
  "componentName": "<exported identifier of the code component>",
  "import": {"path": "<repo-relative path of the source file>", "named": ["<export>"], "default": null},
  "selector": "<element selector, html/angular targets only>",
  "props": [
    {"name": "<code prop>", "figmaKey": "<evidence key>", "kind": "<kind>", "valueMapping": {"<Figma value>": "<code value>"}}
  ],
  "exampleProps": {"<code prop>": <literal example value>},
  "inspectedFiles": ["<repo-relative paths you relied on>"]
}
```

## Kinds and the evidence each one requires

- `enum`: figmaKey is a variant axis; give a valueMapping for its values
- `boolean`: figmaKey is a BOOLEAN property, or a Yes/No, True/False, On/Off axis
- `string`: figmaKey is a TEXT property (or children/label/text/content/title \
when the code really has that prop)
- `instance`: figmaKey is an INSTANCE_SWAP property
- `textContent`: figmaKey is a text layer name
- `children`: figmaKey is a slot layer name, or `*`

## Rules

1. **Only use keys present in the evidence.** Never invent Figma keys.
2. **Only use prop names the code accepts.** Prefer names from the prop surface.
3. Do not map purely visual interaction states (hover, focus, pressed) as props \
unless the code exposes them.
4. If the code component cannot be identified, return status "skipped" with a reason.
"""

TARGET_GUIDELINES = {
    "react": (
        "- Target: React (`@figma/code-connect/react`)\n"
        "- componentName must be the exported React component\n"
        "- import.path points at the file that exports it"
    ),
    "html": (
        "- Target: HTML / Angular (`@figma/code-connect/html`)\n"
        "- selector is the element selector (e.g. `zap-button`)\n"
        "- Props bind to component inputs"
    ),
}

MAPPING_USER_PROMPT = """\
Map this Figma component set to code.

## Target
{target_guidelines}

## Figma Component
- Name: {component_name}
- Reference: {figma_reference}

## Evidence
```json
{evidence_json}
```

## Prop Surface (parameters the code accepts)
{prop_surface}

## Source Files
{source_context}

Return a single JSON object following the output schema. No markdown, no explanation."""

MAPPING_REPAIR_PROMPT = """\
---
## Previous Attempt Failed Validation (attempt {attempt_number})

Fix EVERY violation below. Keep everything that was correct.

### Violations
{violations}

### Previous Output
```
{previous_output}
```
{previous_code_section}"""


def format_prop_surface(names: Sequence[str], selector: Optional[str] = None) -> str:
    if not names and not selector:
        return "(none discovered; infer from the source files)"
    lines = [f"- {name}" for name in names]
    if selector:
        lines.append(f"- selector: {selector}")
    return "\n".join(lines)


def format_source_context(files: Mapping[str, str], limit: int) -> str:
    """Source files as fenced blocks, each truncated to ``limit`` chars."""
    if not files:
        return "(no source files provided)"
    blocks: List[str] = []
    for path in sorted(files):
        content = files[path] or ""
        if len(content) > limit:
            content = content[:limit] + f"\n/* ... truncated ({len(content) - limit} chars) */"
        blocks.append(f"### {path}\n```\n{content}\n```")
    return "\n\n".join(blocks)


def format_violations(violations: Sequence[str]) -> str:
    return "\n".join(f"{idx}. {text}" for idx, text in enumerate(violations, 1)) or "(none)"


def build_component_prompt(
    *,
    target: str,
    component_name: str,
    figma_reference: str,
    evidence: Dict,
    prop_surface: str,
    source_context: str,
) -> str:
    return MAPPING_USER_PROMPT.format(
        target_guidelines=TARGET_GUIDELINES.get(target, TARGET_GUIDELINES["react"]),
        component_name=component_name,
        figma_reference=figma_reference,
        evidence_json=json.dumps(evidence, indent=2, ensure_ascii=False, sort_keys=True),
        prop_surface=prop_surface,
        source_context=source_context,
    )


def build_repair_section(
    *,
    attempt_number: int,
    violations: Sequence[str],
    previous_output: str,
    previous_code: Optional[str] = None,
) -> str:
    code_section = ""
    if previous_code:
        code_section = f"\n### Previous Rendered Code\n```\n{previous_code}\n```\n"
    return MAPPING_REPAIR_PROMPT.format(
        attempt_number=attempt_number,
        violations=format_violations(violations),
        previous_output=previous_output or "(empty)",
        previous_code_section=code_section,
    )
