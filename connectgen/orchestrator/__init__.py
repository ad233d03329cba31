"""Retry orchestration: state machine, Proposal Source contract, artifacts, batch runner."""

from .artifacts import ArtifactArena, ArtifactStore
from .config import RunConfig
from .models import Attempt, ComponentRun, TerminalStatus
from .proposal import ClaudeCliProposalSource, PriorAttempt, PromptContext, ProposalSource
from .runner import BatchResult, BatchRunner, ComponentJob, run_component
from .state import RunState, transition

__all__ = [
    "ArtifactArena",
    "ArtifactStore",
    "Attempt",
    "BatchResult",
    "BatchRunner",
    "ClaudeCliProposalSource",
    "ComponentJob",
    "ComponentRun",
    "PriorAttempt",
    "PromptContext",
    "ProposalSource",
    "RunConfig",
    "RunState",
    "TerminalStatus",
    "run_component",
    "transition",
]
