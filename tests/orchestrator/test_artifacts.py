"""Unit tests for orchestrator/artifacts.py — file naming, writes, summaries."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from connectgen.mapping.validator import ValidationResult, Violation
from connectgen.orchestrator.artifacts import ArtifactArena, ArtifactStore
from connectgen.orchestrator.config import RunConfig
from connectgen.orchestrator.models import Attempt, ComponentRun, TerminalStatus


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_store(tmp_path: Path, **kwargs) -> ArtifactStore:
    return ArtifactStore(RunConfig(repo_root=tmp_path, output_dir="cc", log_dir="logs", **kwargs))


def _make_run(name: str, status: TerminalStatus, **fields) -> ComponentRun:
    run = ComponentRun(component_id=f"id-{name}", component_name=name, **fields)
    if status is TerminalStatus.ACCEPTED:
        result = ValidationResult(valid=True)
    else:
        result = ValidationResult.failure(
            Violation(figma_key="Color", kind="enum", expected_evidence_category="variant axis"),
        )
    run.add_attempt(Attempt(attempt_number=1, validation_result=result, raw_output="{}", rendered_code=None))
    run.finish(status)
    return run


# ---------------------------------------------------------------------------
# 1. Naming
# ---------------------------------------------------------------------------


class TestNaming:

    def test_arena_suffixes(self):
        arena = ArtifactArena()
        assert [arena.claim("button") for _ in range(3)] == ["button", "button_1", "button_2"]
        assert arena.claim("chip") == "chip"

    def test_arena_skips_taken_suffix(self):
        arena = ArtifactArena()
        assert arena.claim("button_1") == "button_1"
        assert arena.claim("button") == "button"
        assert arena.claim("button") == "button_2"

    def test_allocate(self, tmp_path: Path):
        store = _make_store(tmp_path)
        assert store.allocate("Forms / Button") == tmp_path / "cc" / "forms_button.figma.tsx"
        assert store.allocate("Forms / Button") == tmp_path / "cc" / "forms_button_1.figma.tsx"

    def test_allocate_html(self, tmp_path: Path):
        store = _make_store(tmp_path, target="html")
        assert store.allocate("Button").name == "button.figma.ts"


# ---------------------------------------------------------------------------
# 2. Writes
# ---------------------------------------------------------------------------


class TestWrites:

    def test_write_artifact_creates_dirs(self, tmp_path: Path):
        store = _make_store(tmp_path)
        path = store.allocate("Button")
        assert store.write_artifact(path, "code\n")
        assert path.read_text() == "code\n"

    def test_existing_file_kept_without_force(self, tmp_path: Path):
        store = _make_store(tmp_path)
        path = store.allocate("Button")
        path.parent.mkdir(parents=True)
        path.write_text("hand edited\n")
        assert not store.write_artifact(path, "generated\n")
        assert path.read_text() == "hand edited\n"

    def test_force_overwrites(self, tmp_path: Path):
        store = _make_store(tmp_path, force=True)
        path = store.allocate("Button")
        path.parent.mkdir(parents=True)
        path.write_text("old\n")
        assert store.write_artifact(path, "new\n")
        assert path.read_text() == "new\n"

    def test_diagnostic(self, tmp_path: Path):
        store = _make_store(tmp_path)
        run = _make_run("Button", TerminalStatus.EXHAUSTED)
        path = store.write_diagnostic(run)
        assert path == tmp_path / "logs" / "button-codegen-result.json"
        payload = json.loads(path.read_text())
        assert payload["status"] == "exhausted"
        assert payload["errors"][0]["figma_key"] == "Color"
        assert len(payload["attempts"]) == 1
        assert not (tmp_path / "cc").exists()


# ---------------------------------------------------------------------------
# 3. Summaries
# ---------------------------------------------------------------------------


class TestSummaries:

    @pytest.mark.asyncio
    async def test_concurrent_appends_stay_line_delimited(self, tmp_path: Path):
        store = _make_store(tmp_path)
        await asyncio.gather(*[store.append_summary({"componentId": str(i)}) for i in range(20)])
        lines = store.summary_path.read_text().splitlines()
        assert len(lines) == 20
        assert sorted(json.loads(line)["componentId"] for line in lines) == sorted(str(i) for i in range(20))

    def test_totals(self, tmp_path: Path):
        store = _make_store(tmp_path)
        runs = [
            _make_run("Button", TerminalStatus.ACCEPTED),
            _make_run("Chip", TerminalStatus.ACCEPTED, skipped_existing=True),
            _make_run("Tag", TerminalStatus.EXHAUSTED, import_unresolved=True),
        ]
        totals = json.loads(store.write_totals(runs, not_started=2).read_text())
        assert totals["total"] == 5
        assert totals["built"] == 1
        assert totals["skippedExisting"] == 1
        assert totals["exhausted"] == 1
        assert totals["notStarted"] == 2
        assert totals["importUnresolved"] == 1
        assert [c["componentName"] for c in totals["components"]] == ["Button", "Chip", "Tag"]
