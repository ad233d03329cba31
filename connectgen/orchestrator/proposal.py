"""Proposal Source contract and the Claude CLI implementation.

A Proposal Source turns a PromptContext (plus evidence and, on retries, the
prior attempt) into a MappingSchema or raw text. Calls are stateless: every
call carries its full context.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Protocol, Union

from .. import settings
from ..errors import ProposalSourceError
from ..evidence.models import ComponentEvidence
from ..llm_utils import invoke_claude_cli
from ..mapping.schema import MappingSchema
from ..surface import PropSurface
from .prompts import (
    MAPPING_SYSTEM_PROMPT,
    build_component_prompt,
    build_repair_section,
    format_prop_surface,
    format_source_context,
)

logger = logging.getLogger(__name__)

ProposalOutput = Union[MappingSchema, Dict[str, Any], str]


@dataclass(frozen=True)
class PriorAttempt:
    """What a retry is allowed to know about the previous attempt."""
    attempt_number: int
    raw_output: str = ""
    rendered_code: Optional[str] = None
    violations: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class PromptContext:
    system_prompt: str
    component_prompt: str
    repair_section: str = ""

    @property
    def user_prompt(self) -> str:
        if not self.repair_section:
            return self.component_prompt
        return f"{self.component_prompt}\n\n{self.repair_section}"

    def for_retry(self, prior: PriorAttempt) -> "PromptContext":
        """Full context again plus a repair section (replaces any earlier one)."""
        return replace(self, repair_section=build_repair_section(
            attempt_number=prior.attempt_number,
            violations=prior.violations,
            previous_output=prior.raw_output,
            previous_code=prior.rendered_code,
        ))


def build_prompt_context(
    evidence: ComponentEvidence,
    *,
    target: str = "react",
    figma_reference: str = "",
    prop_surface: Optional[PropSurface] = None,
    source_files: Optional[Mapping[str, str]] = None,
    source_limit: int = settings.SOURCE_CONTEXT_LIMIT,
) -> PromptContext:
    surface = prop_surface or PropSurface()
    return PromptContext(
        system_prompt=MAPPING_SYSTEM_PROMPT,
        component_prompt=build_component_prompt(
            target=target,
            component_name=evidence.name,
            figma_reference=figma_reference,
            evidence=evidence.to_dict(),
            prop_surface=format_prop_surface(surface.names, surface.selector),
            source_context=format_source_context(source_files or {}, source_limit),
        ),
    )


class ProposalSource(Protocol):
    async def propose(
        self,
        prompt: PromptContext,
        evidence: ComponentEvidence,
        prior: Optional[PriorAttempt] = None,
    ) -> ProposalOutput:
        ...


class ClaudeCliProposalSource:
    """Proposal Source backed by a session-less Claude CLI subprocess."""

    def __init__(
        self,
        *,
        claude_bin: str = settings.CLAUDE_CLI_PATH,
        cwd: str = ".",
        model: str = "",
        timeout: float = settings.PROPOSAL_TIMEOUT,
        max_retries: int = settings.CLI_MAX_RETRIES,
        retry_base_delay: float = settings.CLI_RETRY_BASE_DELAY,
    ) -> None:
        self.claude_bin = claude_bin
        self.cwd = cwd
        self.model = model
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay

    async def propose(
        self,
        prompt: PromptContext,
        evidence: ComponentEvidence,
        prior: Optional[PriorAttempt] = None,
    ) -> ProposalOutput:
        try:
            result = await invoke_claude_cli(
                claude_bin=self.claude_bin,
                system_prompt=prompt.system_prompt,
                user_prompt=prompt.user_prompt,
                cwd=self.cwd,
                model=self.model,
                timeout=self.timeout,
                max_retries=self.max_retries,
                retry_base_delay=self.retry_base_delay,
                rate_limit_min_delay=settings.CLI_RATE_LIMIT_MIN_DELAY,
                component_name=evidence.name,
                caller="ClaudeCliProposalSource",
            )
        except (RuntimeError, TimeoutError) as e:
            raise ProposalSourceError(str(e), component=evidence.name) from e

        usage = result.get("token_usage") or {}
        logger.info(
            "ClaudeCliProposalSource [%s]: %s in %dms (cli retries=%d, tokens in=%s out=%s)",
            evidence.name,
            "retry proposal" if prior else "proposal",
            result.get("duration_ms", 0),
            result.get("retry_count", 0),
            usage.get("input_tokens", "?"),
            usage.get("output_tokens", "?"),
        )
        return result.get("text") or ""
