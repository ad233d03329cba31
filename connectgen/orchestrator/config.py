"""Per-batch run options."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field

from .. import settings


class RunConfig(BaseModel):
    """Configuration for one batch of component runs."""
    max_retries: int = Field(default=settings.MAX_RETRIES, ge=0, le=10)
    concurrency: int = Field(default=settings.CONCURRENCY, ge=1, le=64)
    target: Literal["react", "html"] = "react"
    repo_root: Optional[Path] = Field(
        None,
        description="Repository the mapped components live in (enables import probing)",
    )
    output_dir: str = Field(default=settings.OUTPUT_DIR, min_length=1)
    log_dir: str = Field(default=settings.LOG_DIR, min_length=1)
    force: bool = Field(
        default=False,
        description="Overwrite existing Code Connect files",
    )
    figma_file_key: Optional[str] = None
    figma_file_name: Optional[str] = None

    def _base(self) -> Path:
        return self.repo_root if self.repo_root is not None else Path.cwd()

    @property
    def output_path(self) -> Path:
        path = Path(self.output_dir)
        return path if path.is_absolute() else self._base() / path

    @property
    def log_path(self) -> Path:
        path = Path(self.log_dir)
        return path if path.is_absolute() else self._base() / path

    @property
    def file_extension(self) -> str:
        return ".figma.ts" if self.target == "html" else ".figma.tsx"
