"""Unit tests for orchestrator/config.py."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from connectgen import settings
from connectgen.orchestrator.config import RunConfig


class TestRunConfig:

    def test_defaults(self):
        config = RunConfig()
        assert config.max_retries == settings.MAX_RETRIES
        assert config.concurrency == settings.CONCURRENCY
        assert config.target == "react"
        assert config.file_extension == ".figma.tsx"

    def test_paths_relative_to_repo_root(self, tmp_path: Path):
        config = RunConfig(repo_root=tmp_path, output_dir="cc", log_dir="logs")
        assert config.output_path == tmp_path / "cc"
        assert config.log_path == tmp_path / "logs"

    def test_absolute_paths_kept(self, tmp_path: Path):
        config = RunConfig(repo_root=tmp_path / "repo", output_dir=str(tmp_path / "out"))
        assert config.output_path == tmp_path / "out"

    def test_html_extension(self):
        assert RunConfig(target="html").file_extension == ".figma.ts"

    @pytest.mark.parametrize("kwargs", [
        {"max_retries": -1},
        {"max_retries": 11},
        {"concurrency": 0},
        {"target": "vue"},
        {"output_dir": ""},
    ])
    def test_rejects_invalid(self, kwargs):
        with pytest.raises(ValidationError):
            RunConfig(**kwargs)
