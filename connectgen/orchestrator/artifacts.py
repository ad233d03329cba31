"""Artifact store: Code Connect files, diagnostics and the batch summary.

Each component's files are disjoint, so only the shared summary writer is
serialized (one append at a time across concurrent workers).
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from ..naming import sanitize_slug
from .config import RunConfig
from .models import ComponentRun, TerminalStatus

logger = logging.getLogger(__name__)

SUMMARY_JSONL = "summary.jsonl"
SUMMARY_JSON = "summary.json"


class ArtifactArena:
    """Per-run filename allocator: 'button', 'button_1', 'button_2', ...

    Owned by one batch; never shared across runs.
    """

    def __init__(self) -> None:
        self._counters: Dict[str, int] = {}
        self._claimed: set = set()

    def claim(self, base: str) -> str:
        name = base
        suffix = self._counters.get(base, 0)
        while name in self._claimed:
            suffix += 1
            name = f"{base}_{suffix}"
        self._counters[base] = suffix
        self._claimed.add(name)
        return name


class ArtifactStore:
    def __init__(self, config: RunConfig) -> None:
        self.config = config
        self.output_dir = config.output_path
        self.log_dir = config.log_path
        self.arena = ArtifactArena()
        self._summary_lock = asyncio.Lock()

    @property
    def summary_path(self) -> Path:
        return self.log_dir / SUMMARY_JSONL

    def allocate(self, component_name: str) -> Path:
        """Reserve this batch's output path for a component."""
        name = self.arena.claim(sanitize_slug(component_name))
        return self.output_dir / f"{name}{self.config.file_extension}"

    def write_artifact(self, path: Path, code: str) -> bool:
        """Write an accepted Code Connect file. False when skipped (exists, no force)."""
        if path.exists() and not self.config.force:
            logger.info("ArtifactStore: %s exists, skipping (use force to overwrite)", path)
            return False
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(code, encoding="utf-8")
        logger.info("ArtifactStore: wrote %s", path)
        return True

    def write_diagnostic(self, run: ComponentRun, slug: Optional[str] = None) -> Path:
        """Diagnostic-only record for an exhausted run (never a production file)."""
        self.log_dir.mkdir(parents=True, exist_ok=True)
        path = self.log_dir / f"{slug or sanitize_slug(run.component_name)}-codegen-result.json"
        last = run.last_attempt
        payload: Dict[str, Any] = {
            "componentId": run.component_id,
            "componentName": run.component_name,
            "status": TerminalStatus.EXHAUSTED.value,
            "lastCode": last.rendered_code if last else None,
            "lastOutput": last.raw_output if last else None,
            "errors": [v.model_dump(mode="json") for v in last.validation_result.errors] if last else [],
            "attempts": [a.model_dump(mode="json") for a in run.attempts],
        }
        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        return path

    async def append_summary(self, entry: Dict[str, Any]) -> None:
        line = json.dumps(entry, ensure_ascii=False, sort_keys=True)
        async with self._summary_lock:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            with open(self.summary_path, "a", encoding="utf-8") as f:
                f.write(line + "\n")

    def write_totals(self, runs: Iterable[ComponentRun], not_started: int = 0) -> Path:
        runs = list(runs)
        accepted = [r for r in runs if r.terminal_status is TerminalStatus.ACCEPTED]
        totals = {
            "total": len(runs) + not_started,
            "built": sum(1 for r in accepted if not r.skipped_existing),
            "skippedExisting": sum(1 for r in accepted if r.skipped_existing),
            "exhausted": sum(1 for r in runs if r.terminal_status is TerminalStatus.EXHAUSTED),
            "notStarted": not_started,
            "importUnresolved": sum(1 for r in runs if r.import_unresolved),
            "components": [r.summary() for r in runs],
        }
        self.log_dir.mkdir(parents=True, exist_ok=True)
        path = self.log_dir / SUMMARY_JSON
        path.write_text(json.dumps(totals, indent=2, ensure_ascii=False), encoding="utf-8")
        return path
