"""Run records: one Attempt per proposal, one ComponentRun per component."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..mapping.validator import ValidationResult


class TerminalStatus(str, Enum):
    ACCEPTED = "accepted"
    EXHAUSTED = "exhausted"


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Attempt(BaseModel):
    attempt_number: int = Field(..., ge=1)
    schema_snapshot: Optional[Dict[str, Any]] = None
    raw_output: Optional[str] = None
    validation_result: ValidationResult
    rendered_code: Optional[str] = None
    timestamp: str = Field(default_factory=_utc_now)
    duration_ms: Optional[int] = None


class ComponentRun(BaseModel):
    """All attempts for one component. Frozen (by contract) once terminal."""
    component_id: str
    component_name: str
    evidence_checksum: str = ""
    attempts: List[Attempt] = Field(default_factory=list)
    terminal_status: Optional[TerminalStatus] = None
    final_artifact_path: Optional[str] = None
    diagnostic_path: Optional[str] = None
    import_unresolved: bool = False
    skipped_existing: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.terminal_status is not None

    @property
    def last_attempt(self) -> Optional[Attempt]:
        return self.attempts[-1] if self.attempts else None

    def add_attempt(self, attempt: Attempt) -> None:
        if self.is_terminal:
            raise RuntimeError(f"run for {self.component_name} is already {self.terminal_status.value}")
        expected = len(self.attempts) + 1
        if attempt.attempt_number != expected:
            raise ValueError(f"attempt {attempt.attempt_number} out of order (expected {expected})")
        self.attempts.append(attempt)

    def finish(self, status: TerminalStatus) -> None:
        if self.is_terminal:
            raise RuntimeError(f"run for {self.component_name} is already {self.terminal_status.value}")
        self.terminal_status = status

    def summary(self) -> Dict[str, Any]:
        """Machine-readable per-component summary line."""
        last = self.last_attempt
        entry: Dict[str, Any] = {
            "componentId": self.component_id,
            "componentName": self.component_name,
            "status": self.terminal_status.value if self.terminal_status else "pending",
            "attempts": len(self.attempts),
            "outputPath": self.final_artifact_path,
            "evidenceChecksum": self.evidence_checksum,
        }
        if self.terminal_status is TerminalStatus.EXHAUSTED and last is not None:
            entry["errors"] = [v.model_dump(mode="json") for v in last.validation_result.errors]
            entry["diagnosticPath"] = self.diagnostic_path
        if self.import_unresolved:
            entry["importUnresolved"] = True
        if self.skipped_existing:
            entry["skippedExisting"] = True
        return entry
