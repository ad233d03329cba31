"""Runtime settings — tunable parameters for mapping generation.

All values read from environment variables with sensible defaults.
Import from here instead of hardcoding.

Per-batch options that callers pass explicitly (retry limit, concurrency,
target) are validated by orchestrator.config.RunConfig, which takes its
defaults from this module.
"""

from __future__ import annotations

import os
import shutil


def _int(key: str, default: int) -> int:
    return int(os.getenv(key, str(default)))


def _float(key: str, default: float) -> float:
    return float(os.getenv(key, str(default)))


def _str(key: str, default: str) -> str:
    return os.getenv(key, default)


# =====================================================================
# Evidence extraction
# =====================================================================

# Max depth when walking a variant's layer tree for text/slot layers
LAYER_DEPTH = _int("CONNECTGEN_LAYER_DEPTH", 3)


# =====================================================================
# Retry loop / batch
# =====================================================================

# Retries after the first proposal (0 = single attempt)
MAX_RETRIES = _int("CONNECTGEN_MAX_RETRIES", 2)

# Max components processed in parallel
CONCURRENCY = _int("CONNECTGEN_CONCURRENCY", 5)

# Where accepted Code Connect files land (relative to the repo root)
OUTPUT_DIR = _str("CONNECTGEN_OUTPUT_DIR", "codeConnect")

# Per-component diagnostics + summary
LOG_DIR = _str("CONNECTGEN_LOG_DIR", "logs")

# Max characters of each source file embedded in a proposal prompt
SOURCE_CONTEXT_LIMIT = _int("CONNECTGEN_SOURCE_CONTEXT_LIMIT", 20000)


# =====================================================================
# Proposal Source (Claude CLI)
# =====================================================================

CLAUDE_CLI_PATH = os.getenv("CLAUDE_CLI_PATH") or shutil.which("claude") or "claude"

# Timeout for a single proposal call (seconds)
PROPOSAL_TIMEOUT = _float("CONNECTGEN_PROPOSAL_TIMEOUT", 300.0)

# Transport-level retries inside one proposal call (not validation retries)
CLI_MAX_RETRIES = _int("CONNECTGEN_CLI_MAX_RETRIES", 2)

# Base delay for exponential backoff (seconds)
CLI_RETRY_BASE_DELAY = _float("CONNECTGEN_CLI_RETRY_BASE_DELAY", 10.0)

# Min delay when rate-limited (overrides base delay)
CLI_RATE_LIMIT_MIN_DELAY = _float("CONNECTGEN_CLI_RATE_LIMIT_MIN_DELAY", 30.0)
