"""
CLI: pipeline commands.

Usage::

    cosmos-deploy run                      # full pipeline, asks before force-pushing
    cosmos-deploy run --force-push         # authorize the destructive push up front
    cosmos-deploy run --dry-run            # print commands, change nothing
    cosmos-deploy run --summary run.json   # also write the run result as JSON

    cosmos-deploy steps                    # list the steps in execution order
    cosmos-deploy config                   # show the resolved configuration
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.markup import escape
from rich.table import Table

from cosmos_deploy.cli.utils import console, err_console, print_dict, print_json, to_dict
from cosmos_deploy.core.errors import ConfigError
from cosmos_deploy.deploy.config import PipelineConfig, load_config
from cosmos_deploy.deploy.reporter import StatusReporter
from cosmos_deploy.deploy.results import PipelineRunResult, StepStatus
from cosmos_deploy.deploy.steps import STEPS
from cosmos_deploy.deploy.workflow import DeploymentPipeline


def _load(config_file: Path | None, **overrides: object) -> PipelineConfig:
    try:
        return load_config(config_file, **overrides)
    except ConfigError as e:
        err_console.print(f"[bold red]Error[/bold red] ({e.category.value}): {escape(e.message)}")
        raise typer.Exit(code=1) from e


# ── run ──────────────────────────────────────────────────────────────────


def run_pipeline(
    root: Path = typer.Option(
        Path("."), "--root", "-r",
        exists=True, file_okay=False, help="Project checkout to deploy.",
    ),
    config_file: Path | None = typer.Option(
        None, "--config", "-c", help="YAML file overriding the default configuration.",
    ),
    force_push: bool = typer.Option(
        False, "--force-push", help="Authorize overwriting the remote branch history.",
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Answer yes to the force-push prompt."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print commands without running them."),
    summary: Path | None = typer.Option(None, "--summary", help="Write the run result as JSON."),
    json_out: bool = typer.Option(False, "--json", help="Print the run result as JSON."),
) -> None:
    """Run the full deployment pipeline.

    Checks tools, installs, builds, tests, commits, force-pushes and
    writes DEPLOYMENT.md, stopping at the first failure.
    """
    overrides: dict[str, object] = {}
    if force_push:
        overrides["force_push"] = True
    if dry_run:
        overrides["dry_run"] = True
    config = _load(config_file, **overrides)

    reporter = StatusReporter(err_console if json_out else console)

    if not config.dry_run and not config.force_push:
        authorized = yes or typer.confirm(
            f"This will force-push to {config.push_target} ({config.repository_url}) "
            "and overwrite its history. Continue?",
            default=False,
            err=json_out,
        )
        if not authorized:
            reporter.error("Force push not authorized; nothing was run.")
            raise typer.Exit(code=1)
        config = config.model_copy(update={"force_push": True})

    reporter.info("🚀 Starting Cosmos Hub deployment process...")
    result = DeploymentPipeline(config, root=root, reporter=reporter).run()

    exit_code = result.exit_code
    if summary is not None:
        try:
            result.save(summary)
        except OSError as e:
            err_console.print(
                f"[bold red]Error[/bold red] (IO): cannot write summary {escape(str(summary))}: "
                f"{escape(str(e))}"
            )
            exit_code = exit_code or 1

    if json_out:
        typer.echo(result.model_dump_json(indent=2))
    else:
        _print_run_result(result)

    if exit_code != 0:
        raise typer.Exit(code=exit_code)


# ── steps / config ───────────────────────────────────────────────────────


def list_steps(
    json_out: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """List the pipeline steps in execution order."""
    if json_out:
        print_json([
            {"order": i, "name": spec.name, "description": spec.description}
            for i, spec in enumerate(STEPS, start=1)
        ])
        return

    table = Table(title="Pipeline Steps")
    table.add_column("#", justify="right")
    table.add_column("Name", style="bold cyan")
    table.add_column("Description")
    for i, spec in enumerate(STEPS, start=1):
        table.add_row(str(i), spec.name, spec.description)
    console.print(table)


def show_config(
    config_file: Path | None = typer.Option(
        None, "--config", "-c", help="YAML file overriding the default configuration.",
    ),
    json_out: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """Show the resolved pipeline configuration."""
    config = _load(config_file)
    data = to_dict(config)
    data.pop("run_id", None)
    if json_out:
        print_json(data)
        return
    print_dict(data, title="Pipeline Configuration")


# ── Output formatters ────────────────────────────────────────────────────


def _print_run_result(result: PipelineRunResult) -> None:
    table = Table(title=f"Deployment Run {result.run_id}")
    table.add_column("Step", style="bold")
    table.add_column("Status")
    table.add_column("Commands", justify="right")
    table.add_column("Time")
    table.add_column("Notes")

    for step in result.steps:
        style = {
            StepStatus.PASSED: "green",
            StepStatus.SKIPPED: "yellow",
            StepStatus.FAILED: "red bold",
        }[step.status]
        notes = step.error or "; ".join(step.warnings) or step.message or "-"
        table.add_row(
            escape(step.name),
            f"[{style}]{step.status.value}[/{style}]",
            str(len(step.commands)),
            f"{step.duration_seconds:.1f}s",
            escape(notes),
        )

    console.print(table)
    style = "green" if result.succeeded else "red"
    console.print(f"\n[bold {style}]{result.overall_status.value}[/]: {escape(result.summary)}")
