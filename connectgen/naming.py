"""Shared naming/string utilities — identifiers, slugs, enum tokens."""

from __future__ import annotations

import re
from typing import Optional

_SEPARATOR_RE = re.compile(r"[\s_-]+")
_NON_ALNUM_RE = re.compile(r"[^A-Za-z0-9]+")
_JS_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def to_camel_case(value: Optional[str]) -> str:
    """'Icon Start' / 'icon-start' / 'ICON_START' -> 'iconStart'."""
    safe = (value or "").strip().lower()
    if not safe:
        return ""
    parts = [p for p in _SEPARATOR_RE.split(safe) if p]
    return "".join(
        part if idx == 0 else part[:1].upper() + part[1:]
        for idx, part in enumerate(parts)
    )


def normalize_variant_value(raw: Optional[str]) -> str:
    """Trim and collapse internal whitespace."""
    return re.sub(r"\s+", " ", (raw or "").strip())


def to_enum_token(raw: Optional[str]) -> str:
    """'Extra Large!' -> 'extra_large'."""
    lowered = normalize_variant_value(raw).lower()
    return re.sub(r"[^a-z0-9]+", "_", lowered).strip("_")


def sanitize_filename(name: str) -> str:
    """Collapse every non-alphanumeric run to '_' and lowercase.

    Punctuation-only names collapse to a lone '_', which evidence scanning
    treats as hidden.
    """
    return re.sub(r"_+", "_", re.sub(r"[^a-z0-9]", "_", name, flags=re.IGNORECASE)).lower()


def sanitize_slug(value: Optional[str], fallback: str = "component") -> str:
    """Safe slug for filenames: lowercase, '_' separated, no edge underscores."""
    base = re.sub(r"[^a-z0-9]+", "_", (value or "").lower()).strip("_")
    return base or fallback


def to_token_name(value: Optional[str]) -> str:
    """Placeholder reference for a design node: 'Icon Button' -> '<FIGMA_ICON_BUTTON>'."""
    core = _NON_ALNUM_RE.sub("_", value or "node").strip("_").upper()
    return f"<FIGMA_{core}>"


def normalize_key(key: Optional[str]) -> str:
    """Comparison form of an evidence key: '.iconStart?' -> 'iconstart'."""
    text = (key or "").strip()
    if text.startswith("."):
        text = text[1:]
    if text.endswith("?"):
        text = text[:-1]
    return text.lower().strip()


def to_identifier(raw: Optional[str], fallback: str = "prop") -> str:
    """Legal bare identifier from a design key.

    Strips a leading '.', trailing '?', and all other punctuation; word
    boundaries become camelCase humps. The first character is lowercased so
    evidence labels ('Size', 'Show Icon') read like code props.
    """
    text = (raw or "").strip().lstrip(".").rstrip("?")
    parts = [p for p in _NON_ALNUM_RE.split(text) if p]
    if not parts:
        return fallback
    head = parts[0][:1].lower() + parts[0][1:]
    ident = head + "".join(p[:1].upper() + p[1:] for p in parts[1:])
    if ident[0].isdigit():
        ident = f"_{ident}"
    return ident


def is_bare_identifier(name: str) -> bool:
    """True when `name` can be emitted unquoted as an object key."""
    return bool(_JS_IDENTIFIER_RE.match(name or ""))


def to_kebab_case(value: Optional[str]) -> str:
    """'IconButton' / 'Icon Button' -> 'icon-button'."""
    spaced = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", value or "")
    parts = [p.lower() for p in _NON_ALNUM_RE.split(spaced) if p]
    return "-".join(parts)


def to_pascal_case(value: Optional[str], fallback: str = "Component") -> str:
    """'icon button' -> 'IconButton'. Existing humps are preserved."""
    parts = [p for p in _NON_ALNUM_RE.split(value or "") if p]
    if not parts:
        return fallback
    name = "".join(p[:1].upper() + p[1:] for p in parts)
    if name[0].isdigit():
        name = f"C{name}"
    return name


def split_title(value: Optional[str], fallback: str = "Text") -> str:
    """'iconLabel' / 'icon_label' -> 'Icon Label' (example fallback text)."""
    spaced = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", value or "")
    parts = [p for p in _NON_ALNUM_RE.split(spaced) if p]
    if not parts:
        return fallback
    return " ".join(p[:1].upper() + p[1:] for p in parts)
