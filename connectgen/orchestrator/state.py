"""Retry state machine: Proposing -> Validating -> {Accepted | Proposing | Exhausted}.

``transition`` is pure so the loop can be tested without a Proposal Source.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from ..mapping.validator import ValidationResult


class RunState(str, Enum):
    PROPOSING = "proposing"
    VALIDATING = "validating"
    ACCEPTED = "accepted"
    EXHAUSTED = "exhausted"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.ACCEPTED, RunState.EXHAUSTED)


def transition(
    state: RunState,
    validation_result: Optional[ValidationResult],
    retries_used: int,
    max_retries: int,
) -> RunState:
    """Next state.

    Args:
        state: Current state.
        validation_result: Outcome of the attempt being validated (ignored
            while proposing; ``valid`` must already include rendering).
        retries_used: Retries already spent before this attempt (0 on the
            first attempt).
        max_retries: Retry budget (0 means a single attempt).

    Raises:
        ValueError: from a terminal state, or when validating without a result.
    """
    if state.is_terminal:
        raise ValueError(f"{state.value} is terminal")
    if state is RunState.PROPOSING:
        return RunState.VALIDATING
    if validation_result is None:
        raise ValueError("validating requires a validation result")
    if validation_result.valid:
        return RunState.ACCEPTED
    if retries_used < max_retries:
        return RunState.PROPOSING
    return RunState.EXHAUSTED
