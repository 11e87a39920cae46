"""Deployment pipeline for the Cosmos Hub dashboard.

Key Concepts:
    PipelineConfig: pydantic-settings model holding every value
        ``deploy.sh`` hard-coded (remote URL, branch, workspaces, messages).
    DeploymentPipeline: Runs the eight steps in order with fail-fast
        semantics and returns a ``PipelineRunResult``.
    StepSpec / STEPS: Frozen registry of the steps in execution order.
    CommandRunner: subprocess wrapper with explicit ``cwd`` and dry-run.
    StatusReporter: rich-based ``[INFO]``/``[SUCCESS]``/``[WARNING]``/``[ERROR]`` lines.

Related Modules:
    - :mod:`cosmos_deploy.deploy.config` - Configuration model
    - :mod:`cosmos_deploy.deploy.results` - Result models
    - :mod:`cosmos_deploy.deploy.steps` - Step actions and registry
    - :mod:`cosmos_deploy.deploy.workflow` - Orchestrator
    - :mod:`cosmos_deploy.cli.deploy` - CLI commands

Example:
    >>> from cosmos_deploy.deploy import PipelineConfig
    >>> PipelineConfig().branch
    'main'
"""

from __future__ import annotations

from cosmos_deploy.deploy.commands import CommandOutcome, CommandRecord, CommandRunner
from cosmos_deploy.deploy.config import PipelineConfig, load_config
from cosmos_deploy.deploy.reporter import StatusReporter
from cosmos_deploy.deploy.results import (
    OverallStatus,
    PipelineRunResult,
    StepResult,
    StepStatus,
)
from cosmos_deploy.deploy.steps import STEPS, StepContext, StepSpec, get_step
from cosmos_deploy.deploy.workflow import DeploymentPipeline

__all__ = [
    "CommandOutcome",
    "CommandRecord",
    "CommandRunner",
    "DeploymentPipeline",
    "OverallStatus",
    "PipelineConfig",
    "PipelineRunResult",
    "STEPS",
    "StatusReporter",
    "StepContext",
    "StepResult",
    "StepSpec",
    "StepStatus",
    "get_step",
    "load_config",
]
