"""Configuration management for the compliance gate.

Loads configuration from environment variables using Pydantic models.
Every setting has a default so the gate can run with no environment at all;
CI-provided values (commit, ref, run id) only enrich the report.

Provides:
- Config: Pydantic model with all application settings
- load_config: Factory function to create Config instance
"""

import os
from pathlib import Path

from pydantic import BaseModel, Field

from compliance_gate.core.models import NOT_AVAILABLE, PipelineContext

DEFAULT_SERVER_URL = "https://github.com"


def _env(name: str) -> str | None:
    """Read an environment variable, treating empty strings as unset."""
    return os.getenv(name) or None


def _env_path(name: str) -> Path | None:
    value = _env(name)
    return Path(value) if value else None


class Config(BaseModel):
    """Application configuration loaded from the environment.

    Attributes:
        artifact_dir: Directory holding scanner outputs and the report (ARTIFACT_DIR)
        report_filename: Name of the Markdown report written to artifact_dir
        step_summary_path: File the report is appended to (GITHUB_STEP_SUMMARY)
        commit_sha: Commit under evaluation (GITHUB_SHA)
        git_ref: Branch or tag ref (GITHUB_REF)
        repository: owner/name of the repository (GITHUB_REPOSITORY)
        run_id: Pipeline run identifier (GITHUB_RUN_ID)
        server_url: Base URL of the CI server (GITHUB_SERVER_URL)
    """

    artifact_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("ARTIFACT_DIR") or "artifacts").resolve()
    )
    report_filename: str = Field(
        default_factory=lambda: os.getenv("REPORT_FILENAME") or "compliance-report.md"
    )
    step_summary_path: Path | None = Field(default_factory=lambda: _env_path("GITHUB_STEP_SUMMARY"))

    # Pipeline metadata, each independently optional
    commit_sha: str | None = Field(default_factory=lambda: _env("GITHUB_SHA"))
    git_ref: str | None = Field(default_factory=lambda: _env("GITHUB_REF"))
    repository: str | None = Field(default_factory=lambda: _env("GITHUB_REPOSITORY"))
    run_id: str | None = Field(default_factory=lambda: _env("GITHUB_RUN_ID"))
    server_url: str = Field(
        default_factory=lambda: _env("GITHUB_SERVER_URL") or DEFAULT_SERVER_URL
    )

    @property
    def report_path(self) -> Path:
        return self.artifact_dir / self.report_filename

    def pipeline_context(self) -> PipelineContext:
        """Build the report's pipeline context block.

        The run URL is only linked when both the repository and the run id
        are known; otherwise it falls back to the placeholder like every
        other missing field.
        """
        run_url = NOT_AVAILABLE
        if self.repository and self.run_id:
            run_url = f"{self.server_url.rstrip('/')}/{self.repository}/actions/runs/{self.run_id}"

        return PipelineContext(
            commit=self.commit_sha or NOT_AVAILABLE,
            ref=self.git_ref or NOT_AVAILABLE,
            repository=self.repository or NOT_AVAILABLE,
            run_url=run_url,
        )


def load_config(artifact_dir: str | Path | None = None) -> Config:
    """Load configuration from the environment.

    Args:
        artifact_dir: Optional override for the artifact directory (CLI flag)

    Returns:
        Populated Config instance
    """
    config = Config()
    if artifact_dir is not None:
        config = config.model_copy(update={"artifact_dir": Path(artifact_dir).resolve()})
    return config
