"""Exception types raised by connectgen.

Contract violations and exhaustion are NOT exceptions: they are reported as
structured ValidationResult / ComponentRun data so a batch always completes.
"""

from __future__ import annotations


class ConnectgenError(Exception):
    """Base class for connectgen errors."""


class ProposalSourceError(ConnectgenError):
    """The Proposal Source could not produce any output (transport failure)."""

    def __init__(self, message: str, *, component: str = "") -> None:
        super().__init__(message)
        self.component = component


class ProposalFormatError(ConnectgenError):
    """Proposer output is not a structured MappingSchema."""

    def __init__(self, message: str, *, raw: str = "") -> None:
        super().__init__(message)
        self.raw = raw
