"""Prop surface inspection — real parameter names of the consuming code unit.

Lightweight regex-based static inspection over source-file contents; no
parser, no execution. Understands:
- React: destructured function/arrow parameters, ``const { a, b } = props``,
  ``interface XProps { ... }`` and ``type XProps = { ... }`` members
- Angular: ``@Input()`` members, ``input()`` signals, ``selector`` in ``@Component``
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Tuple

from .naming import normalize_key

logger = logging.getLogger(__name__)

_IDENT = r"[A-Za-z_$][\w$]*"

# function Button({ a, b }) / const Button = ({ a, b }) => / forwardRef(({ a }, ref)
_PARAM_DESTRUCTURE_RE = re.compile(r"(?:function\s*" + _IDENT + r"?\s*|=\s*|forwardRef\s*(?:<[^>]*>)?\s*\(\s*|memo\s*\(\s*)\(\s*\{")
# const { a, b } = props
_BODY_DESTRUCTURE_RE = re.compile(r"(?:const|let|var)\s*\{(?P<body>[^{}]*)\}\s*=\s*props\b")
_PROPS_TYPE_RE = re.compile(r"(?:interface\s+(?P<iname>" + _IDENT + r")[^{=]*|type\s+(?P<tname>" + _IDENT + r")\s*=\s*)\{")
_MEMBER_RE = re.compile(r"^\s*(?:readonly\s+)?['\"]?(?P<name>" + _IDENT + r"(?:-[\w$]+)*)['\"]?\??\s*:", re.MULTILINE)

_INPUT_DECORATOR_RE = re.compile(r"@Input\s*\((?P<args>[^)]*)\)\s*(?:set\s+)?(?P<name>" + _IDENT + r")")
_INPUT_SIGNAL_RE = re.compile(r"(?P<name>" + _IDENT + r")\s*=\s*input(?:\.required)?\s*(?:<[^>]*>)?\s*\(")
_SELECTOR_RE = re.compile(r"selector\s*:\s*['\"`](?P<selector>[^'\"`]+)['\"`]")
_ALIAS_ARG_RE = re.compile(r"^\s*['\"](?P<alias>[^'\"]+)['\"]")
_ALIAS_OPTION_RE = re.compile(r"alias\s*:\s*['\"](?P<alias>[^'\"]+)['\"]")


@dataclass(frozen=True)
class PropSurface:
    """Parameter names accepted by the destination unit, in discovery order."""
    names: Tuple[str, ...] = ()
    selector: Optional[str] = None

    def __bool__(self) -> bool:
        return bool(self.names)

    def has(self, name: str) -> bool:
        """Exact (case-sensitive) membership."""
        return name in self.names

    def find(self, name: str) -> Optional[str]:
        """Surface name equal to ``name`` after key normalization, if any."""
        wanted = normalize_key(name)
        if not wanted:
            return None
        return next((n for n in self.names if normalize_key(n) == wanted), None)

    def merged(self, other: "PropSurface") -> "PropSurface":
        names = list(self.names)
        names.extend(n for n in other.names if n not in names)
        return PropSurface(names=tuple(names), selector=self.selector or other.selector)

    @classmethod
    def of(cls, names: Iterable[str], selector: Optional[str] = None) -> "PropSurface":
        unique: List[str] = []
        for name in names:
            if name and name not in unique:
                unique.append(name)
        return cls(names=tuple(unique), selector=selector)


def _balanced_body(text: str, open_index: int) -> str:
    """Contents between the '{' at ``open_index`` and its matching '}'."""
    depth = 0
    for idx in range(open_index, len(text)):
        ch = text[idx]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[open_index + 1:idx]
    return text[open_index + 1:]


def _split_top_level(body: str) -> List[str]:
    parts: List[str] = []
    depth = 0
    current: List[str] = []
    for ch in body:
        if ch in "{[(<":
            depth += 1
        elif ch in "}])>":
            depth = max(0, depth - 1)
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    parts.append("".join(current))
    return parts


def _destructured_names(body: str) -> List[str]:
    names: List[str] = []
    for part in _split_top_level(body):
        part = part.strip()
        if not part or part.startswith("..."):
            continue
        match = re.match(r"(" + _IDENT + r")", part)
        if match:
            names.append(match.group(1))
    return names


def _top_level_members(body: str) -> List[str]:
    """Member names of a type body, ignoring nested object types."""
    flat: List[str] = []
    depth = 0
    for ch in body:
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth = max(0, depth - 1)
        elif depth == 0:
            flat.append(ch)
    return [m.group("name") for m in _MEMBER_RE.finditer("".join(flat).replace(";", "\n"))]


def _props_type_name(component_name: str) -> str:
    return re.sub(r"[^a-z0-9]", "", component_name.lower()) + "props"


def inspect_react_source(content: str, component_name: Optional[str] = None) -> PropSurface:
    names: List[str] = []

    for match in _PARAM_DESTRUCTURE_RE.finditer(content):
        brace = content.find("{", match.end() - 1)
        names.extend(_destructured_names(_balanced_body(content, brace)))

    for match in _BODY_DESTRUCTURE_RE.finditer(content):
        names.extend(_destructured_names(match.group("body")))

    for match in _PROPS_TYPE_RE.finditer(content):
        type_name = match.group("iname") or match.group("tname") or ""
        if not type_name.endswith("Props"):
            continue
        if component_name and type_name.lower() not in (_props_type_name(component_name), "props"):
            continue
        names.extend(_top_level_members(_balanced_body(content, match.end() - 1)))

    return PropSurface.of(names)


def inspect_angular_source(content: str) -> PropSurface:
    names: List[str] = []
    for match in _INPUT_DECORATOR_RE.finditer(content):
        args = match.group("args")
        alias = _ALIAS_ARG_RE.match(args) or _ALIAS_OPTION_RE.search(args)
        names.append(alias.group("alias") if alias else match.group("name"))
    for match in _INPUT_SIGNAL_RE.finditer(content):
        names.append(match.group("name"))

    selector_match = _SELECTOR_RE.search(content)
    selector = selector_match.group("selector").split(",")[0].strip() if selector_match else None
    return PropSurface.of(names, selector=selector)


def inspect_source(
    content: str,
    path: str = "",
    component_name: Optional[str] = None,
) -> PropSurface:
    """Prop surface of one source file (Angular when it declares @Component)."""
    if "@Component" in content or path.endswith(".component.ts"):
        return inspect_angular_source(content)
    return inspect_react_source(content, component_name)


def inspect_sources(
    files: Mapping[str, str],
    component_name: Optional[str] = None,
) -> PropSurface:
    """Merged prop surface over several source files (path -> content)."""
    surface = PropSurface()
    for path in sorted(files):
        surface = surface.merged(inspect_source(files[path] or "", path, component_name))
    logger.debug(
        "Surface [%s]: %d names from %d files%s",
        component_name or "?", len(surface.names), len(files),
        f", selector={surface.selector}" if surface.selector else "",
    )
    return surface
