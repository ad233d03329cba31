"""Retry Orchestrator — per-component retry loop and the batch runner.

run_component drives one component through the state machine:

    Proposing -> Validating -> Accepted | Proposing (retry) | Exhausted

Each retry call resends the full prompt context plus itemized feedback.
BatchRunner fans components out over a bounded worker pool; components share
nothing except the serialized summary writer.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote

from ..codegen.render import render_code_connect
from ..errors import ProposalFormatError
from ..evidence.models import ComponentEvidence
from ..logging_config import get_run_logger
from ..mapping.schema import MappingSchema, parse_proposal
from ..mapping.validator import (
    PROPOSAL_DECLINED,
    PROPOSAL_ERROR,
    UNSTRUCTURED_PROPOSAL,
    ValidationResult,
    Violation,
    validate_schema,
)
from ..naming import to_token_name
from ..surface import PropSurface, inspect_sources
from ..vocabulary import Vocabulary
from .artifacts import ArtifactStore
from .config import RunConfig
from .models import Attempt, ComponentRun, TerminalStatus
from .proposal import PriorAttempt, ProposalOutput, ProposalSource, build_prompt_context
from .state import RunState, transition

logger = logging.getLogger(__name__)

RENDER_ERROR = "render_error"


@dataclass
class ComponentJob:
    """One component to map: its evidence and the consuming source files."""
    evidence: ComponentEvidence
    source_files: Dict[str, str] = field(default_factory=dict)
    prop_surface: Optional[PropSurface] = None
    figma_url: Optional[str] = None


@dataclass
class _Outcome:
    result: ValidationResult
    schema: Optional[MappingSchema] = None
    raw_text: str = ""
    code: Optional[str] = None
    import_unresolved: bool = False


def build_figma_node_url(file_key: Optional[str], file_name: Optional[str], node_id: str) -> Optional[str]:
    """https://www.figma.com/design/<key>/<name>?node-id=1-2 (':' -> '-')."""
    if not file_key or not node_id:
        return None
    safe_name = quote(file_name, safe="") if file_name else "file"
    node = quote(node_id.replace(":", "-"), safe="")
    return f"https://www.figma.com/design/{file_key}/{safe_name}?node-id={node}"


def _raw_text(raw: ProposalOutput) -> str:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, MappingSchema):
        return raw.model_dump_json(by_alias=True)
    return repr(raw)


def _evaluate(
    raw: ProposalOutput,
    evidence: ComponentEvidence,
    surface: PropSurface,
    config: RunConfig,
    figma_url: Optional[str],
    vocabulary: Optional[Vocabulary],
) -> _Outcome:
    """Parse, validate and (when valid) render one proposal."""
    raw_text = _raw_text(raw)
    try:
        schema = parse_proposal(raw)
    except ProposalFormatError as e:
        return _Outcome(
            result=ValidationResult.failure(Violation(
                kind=UNSTRUCTURED_PROPOSAL,
                expected_evidence_category="MappingSchema JSON object",
                detail=str(e)[:500],
            )),
            raw_text=raw_text,
        )

    if not schema.is_built:
        return _Outcome(
            result=ValidationResult.failure(Violation(
                kind=PROPOSAL_DECLINED,
                expected_evidence_category="status 'built'",
                detail=schema.reason or f"status {schema.status!r} without a reason",
            )),
            schema=schema,
            raw_text=raw_text,
        )

    result = validate_schema(schema, evidence, surface, vocabulary)
    if not result.valid:
        return _Outcome(result=result, schema=schema, raw_text=raw_text)

    try:
        unit = render_code_connect(
            schema,
            evidence,
            surface,
            target=config.target,
            figma_url=figma_url,
            repo_root=config.repo_root,
            output_dir=config.output_path,
            vocabulary=vocabulary,
            schema_props=result.retained_props,
        )
    except ValueError as e:
        return _Outcome(
            result=ValidationResult.failure(Violation(
                kind=RENDER_ERROR,
                expected_evidence_category="renderable schema",
                detail=str(e),
            )),
            schema=schema,
            raw_text=raw_text,
        )
    return _Outcome(
        result=result,
        schema=schema,
        raw_text=raw_text,
        code=unit.code,
        import_unresolved=unit.import_unresolved,
    )


async def run_component(
    job: ComponentJob,
    source: ProposalSource,
    config: RunConfig,
    *,
    store: Optional[ArtifactStore] = None,
    artifact_path: Optional[Path] = None,
    vocabulary: Optional[Vocabulary] = None,
) -> ComponentRun:
    """Drive one component to a terminal state.

    Never raises for proposer failures, unparsable output or exhaustion;
    those are recorded on the returned ComponentRun.
    """
    evidence = job.evidence
    surface = job.prop_surface or inspect_sources(job.source_files, evidence.name)
    figma_url = job.figma_url or build_figma_node_url(
        config.figma_file_key, config.figma_file_name, evidence.id,
    )
    base_context = build_prompt_context(
        evidence,
        target=config.target,
        figma_reference=figma_url or to_token_name(evidence.name),
        prop_surface=surface,
        source_files=job.source_files,
    )

    run = ComponentRun(
        component_id=evidence.id,
        component_name=evidence.name,
        evidence_checksum=evidence.checksum,
    )
    state = RunState.PROPOSING
    retries_used = 0
    prior: Optional[PriorAttempt] = None
    outcome: Optional[_Outcome] = None

    while not state.is_terminal:
        context = base_context if prior is None else base_context.for_retry(prior)
        started = time.monotonic()
        try:
            raw = await source.propose(context, evidence, prior)
        except Exception as e:
            logger.error("Orchestrator [%s]: proposal source failed: %s", evidence.name, e)
            outcome = _Outcome(result=ValidationResult.failure(Violation(
                kind=PROPOSAL_ERROR,
                expected_evidence_category="proposal",
                detail=str(e)[:500],
            )))
        else:
            outcome = _evaluate(raw, evidence, surface, config, figma_url, vocabulary)

        state = transition(state, None, retries_used, config.max_retries)
        attempt = Attempt(
            attempt_number=len(run.attempts) + 1,
            schema_snapshot=outcome.schema.model_dump(mode="json", by_alias=True) if outcome.schema else None,
            raw_output=outcome.raw_text,
            validation_result=outcome.result,
            rendered_code=outcome.code,
            duration_ms=int((time.monotonic() - started) * 1000),
        )
        run.add_attempt(attempt)
        state = transition(state, outcome.result, retries_used, config.max_retries)

        if state is RunState.PROPOSING:
            logger.warning(
                "Orchestrator [%s]: attempt %d invalid (%d errors), retrying",
                evidence.name, attempt.attempt_number, len(outcome.result.errors),
            )
            retries_used += 1
            prior = PriorAttempt(
                attempt_number=attempt.attempt_number,
                raw_output=outcome.raw_text,
                rendered_code=outcome.code,
                violations=[v.describe() for v in outcome.result.errors],
            )

    if state is RunState.ACCEPTED:
        run.import_unresolved = outcome.import_unresolved
        if store is not None and outcome.code is not None:
            path = artifact_path or store.allocate(evidence.name)
            run.skipped_existing = not store.write_artifact(path, outcome.code)
            run.final_artifact_path = str(path)
        run.finish(TerminalStatus.ACCEPTED)
        logger.info(
            "Orchestrator [%s]: accepted after %d attempt(s)", evidence.name, len(run.attempts),
        )
    else:
        if store is not None:
            slug = artifact_path.name.split(".", 1)[0] if artifact_path else None
            run.diagnostic_path = str(store.write_diagnostic(run, slug))
        run.finish(TerminalStatus.EXHAUSTED)
        logger.warning(
            "Orchestrator [%s]: exhausted after %d attempt(s): %s",
            evidence.name, len(run.attempts),
            "; ".join(v.describe() for v in outcome.result.errors),
        )
    return run


@dataclass
class BatchResult:
    runs: List[ComponentRun] = field(default_factory=list)
    not_started: List[str] = field(default_factory=list)  # component ids
    failed: List[Tuple[str, str]] = field(default_factory=list)  # (component id, error)

    @property
    def stats(self) -> Dict[str, int]:
        return {
            "total": len(self.runs) + len(self.not_started) + len(self.failed),
            "accepted": sum(1 for r in self.runs if r.terminal_status is TerminalStatus.ACCEPTED),
            "exhausted": sum(1 for r in self.runs if r.terminal_status is TerminalStatus.EXHAUSTED),
            "not_started": len(self.not_started),
            "failed": len(self.failed),
        }


class BatchRunner:
    """Bounded worker pool over ComponentJobs with cooperative cancellation."""

    def __init__(
        self,
        source: ProposalSource,
        config: Optional[RunConfig] = None,
        *,
        vocabulary: Optional[Vocabulary] = None,
        write_summary: bool = True,
    ) -> None:
        self.source = source
        self.config = config or RunConfig()
        self.vocabulary = vocabulary
        self.write_summary = write_summary
        self._stop = asyncio.Event()
        self.run_logger = get_run_logger()

    def request_stop(self) -> None:
        """No new components start; in-flight ones finish normally."""
        if not self._stop.is_set():
            self.run_logger.info("BatchRunner: stop requested, finishing in-flight components")
        self._stop.set()

    @property
    def stop_requested(self) -> bool:
        return self._stop.is_set()

    async def run(self, jobs: Sequence[ComponentJob]) -> BatchResult:
        store = ArtifactStore(self.config)
        sem = asyncio.Semaphore(self.config.concurrency)
        # Allocate output names in input order so naming is deterministic
        paths = [store.allocate(job.evidence.name) for job in jobs]
        result = BatchResult()

        async def _run_one(job: ComponentJob, path: Path) -> Optional[ComponentRun]:
            async with sem:
                if self._stop.is_set():
                    return None
                run = await run_component(
                    job, self.source, self.config,
                    store=store, artifact_path=path, vocabulary=self.vocabulary,
                )
                if self.write_summary:
                    await store.append_summary(run.summary())
                return run

        self.run_logger.info(
            "BatchRunner: %d components (concurrency=%d, max_retries=%d, target=%s)",
            len(jobs), self.config.concurrency, self.config.max_retries, self.config.target,
        )
        raw_results = await asyncio.gather(
            *[_run_one(job, path) for job, path in zip(jobs, paths)],
            return_exceptions=True,
        )
        for job, r in zip(jobs, raw_results):
            if isinstance(r, BaseException):
                self.run_logger.error(
                    "BatchRunner: %s failed unexpectedly: %s", job.evidence.name, r,
                )
                result.failed.append((job.evidence.id, str(r)))
            elif r is None:
                result.not_started.append(job.evidence.id)
            else:
                result.runs.append(r)

        if self.write_summary:
            store.write_totals(result.runs, not_started=len(result.not_started))

        stats = result.stats
        self.run_logger.info(
            "BatchRunner: done. accepted=%d exhausted=%d not_started=%d failed=%d",
            stats["accepted"], stats["exhausted"], stats["not_started"], stats["failed"],
        )
        return result
