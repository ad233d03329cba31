"""Import path resolution for the rendered target unit.

Probes the filesystem for the proposer's candidate path (trying the standard
source extensions), falls back through the files the proposer actually
inspected, and prefers a package-name import when the resolved file lives
under a package manifest that exports its root (a string ``exports``, ``"."``
or a wildcard ``"./*"``). A miss never raises: the best-guess path is kept
and flagged.
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

SOURCE_EXTENSIONS = ("", ".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs")
_INDEX_FILES = tuple(f"index{ext}" for ext in SOURCE_EXTENSIONS if ext)
_LEADING_DOT_SLASH_RE = re.compile(r"^(?:\./)+")


@dataclass(frozen=True)
class ResolvedImport:
    specifier: Optional[str]  # what goes in the `from '...'` clause
    file: Optional[Path] = None  # resolved source file, if found
    package: Optional[str] = None  # set when rewritten to a package import
    unresolved: bool = False


def _strip_extension(path: str) -> str:
    root, ext = os.path.splitext(path)
    return root if ext in SOURCE_EXTENSIONS[1:] else path


def _within(path: Path, root: Path) -> bool:
    return path.resolve().is_relative_to(root)


def probe_source_file(repo_root: Path, import_path: str) -> Optional[Path]:
    """Existing source file for ``import_path`` (relative to the repo root).

    Paths that resolve outside the repo root are never probed.
    """
    if not import_path:
        return None
    root = repo_root.resolve()
    base = repo_root / _strip_extension(_LEADING_DOT_SLASH_RE.sub("", import_path))
    if not _within(base, root):
        logger.warning("Imports: %r escapes the repo root; not probing", import_path)
        return None
    for ext in SOURCE_EXTENSIONS:
        candidate = Path(f"{base}{ext}")
        if candidate.is_file() and _within(candidate, root):
            return candidate
    if base.is_dir():
        for index in _INDEX_FILES:
            if (base / index).is_file() and _within(base / index, root):
                return base / index
    return None


def find_package_export(file: Path, repo_root: Path) -> Optional[str]:
    """Package name when ``file`` sits under a manifest exporting its root.

    A root export is a string ``exports`` or an ``exports`` map with a
    '.' or './*' entry.
    """
    root = repo_root.resolve()
    current = file.resolve().parent
    while True:
        manifest = current / "package.json"
        if manifest.is_file():
            try:
                data = json.loads(manifest.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("Imports: unreadable manifest %s: %s", manifest, e)
                return None
            name = data.get("name") if isinstance(data, dict) else None
            exports = data.get("exports") if isinstance(data, dict) else None
            if not name:
                return None
            # a bare string export is the root entry
            if isinstance(exports, str) and exports:
                return name
            if isinstance(exports, dict) and ("." in exports or "./*" in exports):
                return name
            return None
        if current == root or current.parent == current:
            return None
        current = current.parent


def _relative_specifier(file: Path, from_dir: Path) -> str:
    rel = os.path.relpath(_strip_extension(str(file.resolve())), str(from_dir.resolve()))
    rel = rel.replace(os.sep, "/")
    if rel.endswith("/index"):
        rel = rel[: -len("/index")]
    return rel if rel.startswith(".") else f"./{rel}"


def resolve_import(
    candidate: Optional[str],
    repo_root: Optional[Path],
    from_dir: Optional[Path] = None,
    fallbacks: Sequence[str] = (),
) -> ResolvedImport:
    """Resolve the import specifier for the rendered file.

    ``from_dir`` is the directory the rendered file will be written to;
    relative specifiers are computed from there (defaults to the repo root).
    """
    if repo_root is None:
        return ResolvedImport(specifier=candidate, unresolved=not candidate)
    if candidate and candidate.startswith("@") and probe_source_file(repo_root, candidate) is None:
        # Scoped package specifier, nothing to probe
        return ResolvedImport(specifier=candidate, package=candidate)

    file = probe_source_file(repo_root, candidate or "")
    if file is None:
        for path in fallbacks:
            file = probe_source_file(repo_root, path)
            if file is not None:
                logger.info("Imports: %r not found, using inspected file %s", candidate, path)
                break

    if file is None:
        logger.warning("Imports: could not resolve %r; keeping best guess", candidate)
        return ResolvedImport(specifier=candidate, unresolved=True)

    package = find_package_export(file, repo_root)
    if package:
        return ResolvedImport(specifier=package, file=file, package=package)
    return ResolvedImport(specifier=_relative_specifier(file, from_dir or repo_root), file=file)
