"""Shared LLM utilities — Claude CLI invocation + JSON response parsing.

Provides subprocess-based Claude CLI invocation with retry/backoff,
and tolerant JSON extraction from proposer responses.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import random
import re
import time
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

_RATE_LIMIT_MARKERS = ("rate", "429", "overloaded", "too many", "throttl")


async def invoke_claude_cli(
    *,
    claude_bin: str,
    system_prompt: str,
    user_prompt: str,
    cwd: str = ".",
    model: str = "",
    timeout: float = 300.0,
    max_retries: int = 2,
    retry_base_delay: float = 10.0,
    rate_limit_min_delay: float = 30.0,
    component_name: str = "unknown",
    caller: str = "ClaudeCLI",
) -> Dict[str, Any]:
    """Invoke Claude CLI subprocess and return response text + token usage.

    Each call is a fresh, session-less process: nothing carries over between
    calls except what the prompt itself contains.

    Returns {"text": str, "token_usage": {...} | None, "retry_count": int,
    "duration_ms": int}.
    Raises RuntimeError on CLI failure, TimeoutError on timeout (after all
    retries exhausted).
    """
    cli_prompt = "\n".join([system_prompt, "", user_prompt])

    cmd = [
        claude_bin,
        "-p", cli_prompt,
        "--output-format", "json",
        "--no-session-persistence",
        "--tools", "",
    ]
    if model:
        cmd.extend(["--model", model])

    # Inherit env but remove CLAUDECODE to avoid nested session detection
    cli_env = {k: v for k, v in os.environ.items() if k != "CLAUDECODE"}

    last_error: Optional[Exception] = None
    is_rate_limited = False
    attempts = 1 + max(0, max_retries)
    start_time = time.monotonic()

    for attempt in range(attempts):
        if attempt > 0:
            base = retry_base_delay * (2 ** (attempt - 1))
            if is_rate_limited:
                base = max(base, rate_limit_min_delay)
            # +/-25% jitter
            delay = base * (1.0 + random.uniform(-0.25, 0.25))
            logger.warning(
                "%s: retry %d/%d for %s after %.1fs%s (previous error: %s)",
                caller, attempt, max_retries, component_name, delay,
                " [rate-limited]" if is_rate_limited else "",
                last_error,
            )
            await asyncio.sleep(delay)

        logger.info(
            "%s: calling claude CLI for %s (attempt %d/%d)",
            caller, component_name, attempt + 1, attempts,
        )

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=cli_env,
            )
        except OSError as e:
            last_error = RuntimeError(f"CLI spawn failed for {component_name}: {e}")
            continue

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.communicate()
            last_error = TimeoutError(
                f"Claude CLI timed out ({timeout}s) for {component_name}"
            )
            continue

        raw_text = stdout.decode("utf-8", errors="replace").strip()

        # Parse CLI JSON envelope
        cli_output = None
        try:
            cli_output = json.loads(raw_text)
        except json.JSONDecodeError:
            pass

        if proc.returncode != 0 or (
            isinstance(cli_output, dict) and cli_output.get("is_error")
        ):
            err_msg = stderr.decode("utf-8", errors="replace").strip()
            if not err_msg and isinstance(cli_output, dict):
                err_msg = str(cli_output.get("result", ""))
            err_lower = err_msg.lower()
            is_rate_limited = any(s in err_lower for s in _RATE_LIMIT_MARKERS)
            last_error = RuntimeError(
                f"Claude CLI failed (exit {proc.returncode}) for "
                f"{component_name}: {err_msg[:500]}"
            )
            continue

        token_usage: Optional[Dict[str, int]] = None
        if isinstance(cli_output, dict):
            usage = cli_output.get("usage")
            if isinstance(usage, dict):
                token_usage = {
                    "input_tokens": usage.get("input_tokens", 0),
                    "output_tokens": usage.get("output_tokens", 0),
                }
            if "result" in cli_output:
                raw_text = cli_output["result"]
            elif "content" in cli_output:
                raw_text = cli_output["content"]

        return {
            "text": raw_text,
            "token_usage": token_usage,
            "retry_count": attempt,
            "duration_ms": int((time.monotonic() - start_time) * 1000),
        }

    raise last_error or RuntimeError(
        f"Claude CLI failed after {attempts} attempts for {component_name}"
    )


# ---------------------------------------------------------------------------
# JSON extraction
# ---------------------------------------------------------------------------

_LINE_COMMENT_RE = re.compile(r"^\s*(?://|#).*$", re.MULTILINE)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_SINGLE_QUOTED_RE = re.compile(r"'([^'\\]*(?:\\.[^'\\]*)*)'")
_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)


def _try_parse(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None


def _parse_with_repairs(text: str) -> Optional[Any]:
    """Direct parse, then comment/trailing-comma repair, then quote repair."""
    parsed = _try_parse(text)
    if parsed is not None:
        return parsed

    repaired = _TRAILING_COMMA_RE.sub(r"\1", _LINE_COMMENT_RE.sub("", text))
    parsed = _try_parse(repaired)
    if parsed is not None:
        return parsed

    if '"' not in repaired:
        swapped = _SINGLE_QUOTED_RE.sub(
            lambda m: '"' + m.group(1).replace('"', '\\"') + '"', repaired,
        )
        if swapped != repaired:
            return _try_parse(swapped)
    return None


def parse_llm_json(raw: str, caller: str = "LLM") -> Optional[Dict]:
    """Parse a JSON object from an LLM response.

    Tries in order: fenced block -> whole text -> outermost braces, each with
    light repairs. Returns None (never raises) when nothing parses to a dict.
    """
    if not raw:
        return None

    text = str(raw).strip()

    fence_match = _FENCE_RE.search(text)
    if fence_match:
        parsed = _parse_with_repairs(fence_match.group(1).strip())
        if isinstance(parsed, dict):
            return parsed

    parsed = _parse_with_repairs(text)
    if isinstance(parsed, dict):
        return parsed

    brace_start = text.find("{")
    brace_end = text.rfind("}")
    if brace_start >= 0 and brace_end > brace_start:
        parsed = _parse_with_repairs(text[brace_start:brace_end + 1])
        if isinstance(parsed, dict):
            return parsed

    logger.error("%s: JSON parse error, raw[:500]: %s", caller, text[:500])
    return None
