"""Fail-fast orchestrator for the deployment pipeline.

``DeploymentPipeline`` walks the step registry in order. The first step
that raises a ``DeployError`` is recorded as FAILED, an ``[ERROR]`` line
names the stage, and no later step runs. Completed steps are not rolled
back.

Key Concepts:
    DeploymentPipeline: Config + project root → ``PipelineRunResult``.
        Collaborators (command runner, reporter, clock) are injectable so
        the whole run can be exercised without real subprocesses.

Example::

    from cosmos_deploy.deploy import DeploymentPipeline, PipelineConfig

    pipeline = DeploymentPipeline(PipelineConfig(force_push=True), root=Path("."))
    result = pipeline.run()
    raise SystemExit(result.exit_code)
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path

from cosmos_deploy.core.errors import DeployError
from cosmos_deploy.core.logging import bind_context, get_logger, log_step
from cosmos_deploy.deploy.commands import CommandRunner
from cosmos_deploy.deploy.config import PipelineConfig
from cosmos_deploy.deploy.reporter import StatusReporter
from cosmos_deploy.deploy.results import PipelineRunResult, StepResult, StepStatus
from cosmos_deploy.deploy.steps import STEPS, StepContext, StepSpec, local_now
from cosmos_deploy.deploy.templates import NEXT_STEPS, repository_web_url

logger = get_logger(__name__)


class DeploymentPipeline:
    """Runs the deployment steps in order, stopping at the first failure.

    Parameters
    ----------
    config
        Pipeline configuration.
    root
        Project checkout the pipeline operates on. Defaults to the current
        directory, resolved once at construction.
    runner
        Command runner; built from ``config.dry_run`` when omitted.
    reporter
        Status line printer.
    clock
        Source of the deployment date written to the info document.
    steps
        Step sequence, the full registry by default.
    """

    def __init__(
        self,
        config: PipelineConfig,
        root: Path | None = None,
        *,
        runner: CommandRunner | None = None,
        reporter: StatusReporter | None = None,
        clock: Callable[[], datetime] = local_now,
        steps: Sequence[StepSpec] = STEPS,
    ) -> None:
        self.config = config
        self.root = (root or Path.cwd()).resolve()
        self.reporter = reporter or StatusReporter()
        self.runner = runner or CommandRunner(dry_run=config.dry_run, echo=self.reporter.echo)
        self.steps = tuple(steps)
        self.context = StepContext(
            root=self.root,
            config=config,
            runner=self.runner,
            reporter=self.reporter,
            clock=clock,
        )

    def run(self) -> PipelineRunResult:
        """Execute every step in order and return the run result."""
        result = PipelineRunResult(
            run_id=self.config.run_id,
            root=str(self.root),
            dry_run=self.config.dry_run,
        )
        bind_context(run_id=self.config.run_id)
        logger.info("pipeline.started", root=str(self.root), dry_run=self.config.dry_run)

        self.reporter.info("🌌 Welcome to Cosmos Hub Deployment!")
        self.reporter.echo()

        for spec in self.steps:
            step_result = self._run_step(spec)
            result.steps.append(step_result)
            if step_result.failed:
                result.record_failure(step_result)
                break

        result.mark_complete(total_steps=len(self.steps))

        if result.succeeded:
            self._report_success()
        logger.info(
            "pipeline.complete",
            status=result.overall_status.value,
            exit_code=result.exit_code,
            summary=result.summary,
        )
        return result

    def _run_step(self, spec: StepSpec) -> StepResult:
        step_result = StepResult(name=spec.name, label=spec.render_label(self.config))
        self.reporter.info(step_result.label)
        first_command = len(self.runner.history)

        with log_step(spec.name) as metrics:
            try:
                spec.action(self.context, step_result)
            except DeployError as e:
                e.with_context(step=spec.name)
                step_result.fail(e)
                self.reporter.error(e.message)
                self.reporter.error(f"Stage '{spec.name}' failed; aborting deployment.")
                logger.error("step.failed", **e.to_dict())

            step_result.commands = [r.display for r in self.runner.history[first_command:]]
            metrics["status"] = step_result.status.value
            metrics["commands"] = len(step_result.commands)

        step_result.mark_complete()
        if step_result.status == StepStatus.PASSED:
            self.reporter.success(spec.success_message)
        return step_result

    def _report_success(self) -> None:
        config = self.config
        self.reporter.echo()
        self.reporter.success("🎉 Deployment completed successfully!")
        self.reporter.echo()
        self.reporter.info("Next steps:")
        for i, line in enumerate(NEXT_STEPS, start=1):
            self.reporter.echo(f"{i}. {line}")
        self.reporter.echo()
        self.reporter.info(f"Repository: {repository_web_url(config.repository_url)}")
        self.reporter.info(f"Live URL: {config.live_url}")
        self.reporter.echo()


__all__ = ["DeploymentPipeline"]
