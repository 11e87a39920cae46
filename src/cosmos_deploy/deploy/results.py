"""Result models for the deployment pipeline.

Pydantic v2 models that capture structured outcomes of a run. A
``PipelineRunResult`` holds an ordered list of ``StepResult`` objects, one
per step that actually executed. Steps after a failure are never run and
therefore never appear.

Key Concepts:
    StepStatus: PASSED, SKIPPED (non-fatal, e.g. repository already
        initialized) or FAILED (fatal, stops the pipeline).
    StepResult: One step's outcome, including the command lines it ran,
        warnings raised, and the exit code of a failure.
    PipelineRunResult: Whole-run envelope. ``mark_complete()`` finalises
        timestamps, duration, overall status and summary.

Architecture Decisions:
    - ``mark_complete()`` pattern: the runner calls it once the last step
      has finished and derives the overall status from the step list.
    - ISO-8601 string timestamps so ``model_dump_json()`` round-trips.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from cosmos_deploy.core.errors import DeployError


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _elapsed(started_at: str, completed_at: str) -> float:
    start = datetime.fromisoformat(started_at)
    end = datetime.fromisoformat(completed_at)
    return (end - start).total_seconds()


class StepStatus(str, Enum):
    """Outcome of a single pipeline step."""

    PASSED = "PASSED"
    SKIPPED = "SKIPPED"
    FAILED = "FAILED"


class OverallStatus(str, Enum):
    """Overall status of a pipeline run."""

    PASSED = "PASSED"
    FAILED = "FAILED"
    RUNNING = "RUNNING"
    PENDING = "PENDING"


class StepResult(BaseModel):
    """Outcome of one executed step."""

    name: str
    label: str = ""
    status: StepStatus = StepStatus.PASSED
    message: str = ""
    warnings: list[str] = Field(default_factory=list)
    commands: list[str] = Field(default_factory=list)
    exit_code: int = 0
    error: str | None = None
    error_category: str | None = None
    started_at: str = Field(default_factory=_now_iso)
    completed_at: str | None = None
    duration_seconds: float = 0.0

    @property
    def failed(self) -> bool:
        return self.status == StepStatus.FAILED

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def skip(self, message: str) -> None:
        """Mark the step as a non-fatal skip."""
        self.status = StepStatus.SKIPPED
        self.message = message

    def fail(self, error: DeployError) -> None:
        """Record a fatal error on this step."""
        self.status = StepStatus.FAILED
        self.error = error.message
        self.error_category = error.category.value
        self.exit_code = error.exit_code

    def mark_complete(self) -> None:
        self.completed_at = _now_iso()
        self.duration_seconds = _elapsed(self.started_at, self.completed_at)


class PipelineRunResult(BaseModel):
    """Result of a full pipeline run."""

    run_id: str
    root: str = ""
    dry_run: bool = False
    started_at: str = Field(default_factory=_now_iso)
    completed_at: str | None = None
    duration_seconds: float = 0.0
    steps: list[StepResult] = Field(default_factory=list)
    failed_step: str | None = None
    exit_code: int = 0
    overall_status: OverallStatus = OverallStatus.PENDING
    error: str | None = None
    summary: str = ""

    @property
    def succeeded(self) -> bool:
        return self.overall_status == OverallStatus.PASSED

    @property
    def executed_steps(self) -> list[str]:
        return [s.name for s in self.steps]

    def step(self, name: str) -> StepResult | None:
        """Look up an executed step by name."""
        for s in self.steps:
            if s.name == name:
                return s
        return None

    def record_failure(self, step: StepResult) -> None:
        self.failed_step = step.name
        self.exit_code = step.exit_code or 1
        self.error = step.error

    def mark_complete(self, total_steps: int | None = None) -> None:
        """Finalise timestamps, overall status and summary line."""
        self.completed_at = _now_iso()
        self.duration_seconds = _elapsed(self.started_at, self.completed_at)

        if self.failed_step or any(s.failed for s in self.steps):
            self.overall_status = OverallStatus.FAILED
        else:
            self.overall_status = OverallStatus.PASSED

        passed = sum(1 for s in self.steps if s.status == StepStatus.PASSED)
        skipped = sum(1 for s in self.steps if s.status == StepStatus.SKIPPED)
        total = total_steps if total_steps is not None else len(self.steps)
        summary = f"{passed}/{total} steps passed"
        if skipped:
            summary += f", {skipped} skipped"
        if self.failed_step:
            summary += f", failed at {self.failed_step} (exit {self.exit_code})"
        self.summary = summary

    def save(self, path: str | Path) -> Path:
        """Write the result as indented JSON, creating parent directories."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target


__all__ = ["OverallStatus", "PipelineRunResult", "StepResult", "StepStatus"]
