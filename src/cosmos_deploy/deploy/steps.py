"""The eight deployment steps and their registry.

Each step is a plain function ``action(ctx, result)`` that receives an
explicit ``StepContext``. It raises a ``DeployError`` to fail the run,
or calls ``result.skip()`` / ``result.warn()`` for non-fatal outcomes.
Steps never change the process working directory. Every subprocess
gets its ``cwd`` from the context.

Registry (fixed order):

    ======================  ==============================================
    check_requirements      required tools resolvable on PATH
    install_dependencies    package install at root and per workspace
    build_project           database client generation, then full build
    run_tests               full test suite
    init_repository         ``git init`` unless ``.git`` already exists
    commit_changes          ignore file (create-if-missing), add, commit
    push_to_remote          remote add/set-url, branch rename, force push
    write_deployment_info   render ``DEPLOYMENT.md`` (always overwritten)
    ======================  ==============================================
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from cosmos_deploy.core.errors import (
    ArtifactWriteError,
    ForcePushNotAuthorizedError,
    MissingToolError,
    NothingToCommitError,
)
from cosmos_deploy.deploy.commands import CommandRunner
from cosmos_deploy.deploy.config import PipelineConfig, tool_hint
from cosmos_deploy.deploy.reporter import StatusReporter
from cosmos_deploy.deploy.results import StepResult
from cosmos_deploy.deploy.templates import GITIGNORE_TEMPLATE, render_deployment_doc


def local_now() -> datetime:
    """Current time in the local timezone (what ``date`` would print)."""
    return datetime.now().astimezone()


@dataclass
class StepContext:
    """Everything a step needs, passed explicitly instead of via ``cd``."""

    root: Path
    config: PipelineConfig
    runner: CommandRunner
    reporter: StatusReporter
    clock: Callable[[], datetime] = local_now

    def path(self, relative: Path | str) -> Path:
        """Resolve a config path against the project root."""
        p = Path(relative)
        return p if p.is_absolute() else self.root / p

    def workspace(self, name: str) -> Path:
        return self.root / name

    @property
    def dry_run(self) -> bool:
        return self.config.dry_run


StepAction = Callable[[StepContext, StepResult], None]


@dataclass(frozen=True)
class StepSpec:
    """Registry entry describing one pipeline step."""

    name: str
    label: str
    """Status line printed before the step runs (may use config fields)."""

    description: str
    success_message: str
    action: StepAction

    def render_label(self, config: PipelineConfig) -> str:
        return self.label.format(
            repository_url=config.repository_url,
            branch=config.branch,
            remote=config.remote_name,
        )


# ---------------------------------------------------------------------------
# Step actions
# ---------------------------------------------------------------------------


def check_requirements(ctx: StepContext, result: StepResult) -> None:
    for tool in ctx.config.required_tools:
        if ctx.runner.which(tool) is None:
            raise MissingToolError(tool, tool_hint(tool))


def install_dependencies(ctx: StepContext, result: StepResult) -> None:
    command = ctx.config.install_command
    ctx.runner.check(command, ctx.root)
    for workspace in ctx.config.workspaces:
        ctx.runner.check(command, ctx.workspace(workspace))


def build_project(ctx: StepContext, result: StepResult) -> None:
    ctx.runner.check(
        ctx.config.client_generate_command,
        ctx.workspace(ctx.config.database_workspace),
    )
    ctx.runner.check(ctx.config.build_command, ctx.root)


def run_tests(ctx: StepContext, result: StepResult) -> None:
    ctx.runner.check(ctx.config.test_command, ctx.root)


def init_repository(ctx: StepContext, result: StepResult) -> None:
    if (ctx.root / ".git").exists():
        ctx.reporter.warning("Git repository already exists.")
        result.warn("Git repository already exists.")
        result.skip("Git repository already exists.")
        return
    ctx.runner.check(["git", "init"], ctx.root)


def ensure_gitignore(ctx: StepContext, result: StepResult) -> bool:
    """Write the ignore rules only if no ignore file exists.

    Returns True when the file was created.
    """
    path = ctx.path(ctx.config.gitignore_path)
    if path.exists():
        ctx.reporter.warning(f"{path.name} already exists; left unchanged.")
        result.warn(f"{path.name} already exists; left unchanged.")
        return False

    if ctx.dry_run:
        ctx.reporter.info(f"(dry-run) would create {path}")
        return False

    try:
        path.write_text(GITIGNORE_TEMPLATE, encoding="utf-8")
    except OSError as e:
        raise ArtifactWriteError(str(path), e) from e
    ctx.reporter.success(f"{path.name} created!")
    return True


def _has_changes(ctx: StepContext) -> bool:
    status = ctx.runner.run(
        ["git", "status", "--porcelain"], ctx.root, capture=True, read_only=True
    )
    # An unreadable status (e.g. no repository yet in dry-run) defers to commit.
    if not status.ok:
        return True
    return bool(status.stdout.strip())


def commit_changes(ctx: StepContext, result: StepResult) -> None:
    ensure_gitignore(ctx, result)
    ctx.runner.check(["git", "add", "."], ctx.root)

    if not ctx.dry_run and not _has_changes(ctx):
        if ctx.config.fail_on_empty_commit:
            raise NothingToCommitError()
        ctx.reporter.warning("Nothing to commit, working tree clean.")
        result.warn("Nothing to commit, working tree clean.")
        result.skip("Nothing to commit")
        return

    ctx.runner.check(["git", "commit", "-m", ctx.config.commit_message], ctx.root)


def push_to_remote(ctx: StepContext, result: StepResult) -> None:
    config = ctx.config
    if not config.force_push and not ctx.dry_run:
        raise ForcePushNotAuthorizedError(config.remote_name, config.branch)

    remote = config.remote_name
    existing = ctx.runner.run(
        ["git", "remote", "get-url", remote], ctx.root, capture=True, read_only=True
    )
    if existing.ok:
        ctx.reporter.warning(f"Remote '{remote}' already exists. Updating URL...")
        result.warn(f"Remote '{remote}' URL updated")
        ctx.runner.check(["git", "remote", "set-url", remote, config.repository_url], ctx.root)
    else:
        ctx.runner.check(["git", "remote", "add", remote, config.repository_url], ctx.root)

    ctx.runner.check(["git", "branch", "-M", config.branch], ctx.root)
    # Replaces the remote branch history unconditionally; never a merge.
    ctx.runner.check(["git", "push", "-u", remote, config.branch, "--force"], ctx.root)


def write_deployment_info(ctx: StepContext, result: StepResult) -> None:
    config = ctx.config
    path = ctx.path(config.deployment_doc_path)
    content = render_deployment_doc(
        repository_url=config.repository_url,
        live_url=config.live_url,
        database_workspace=config.database_workspace,
        deployed_at=ctx.clock(),
    )

    if ctx.dry_run:
        ctx.reporter.info(f"(dry-run) would write {path}")
        return

    try:
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ArtifactWriteError(str(path), e) from e
    result.message = str(path)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

STEPS: tuple[StepSpec, ...] = (
    StepSpec(
        name="check_requirements",
        label="Checking requirements...",
        description="Verify required executables are on PATH",
        success_message="All requirements met!",
        action=check_requirements,
    ),
    StepSpec(
        name="install_dependencies",
        label="Installing dependencies...",
        description="Install packages at the root and in each workspace",
        success_message="Dependencies installed!",
        action=install_dependencies,
    ),
    StepSpec(
        name="build_project",
        label="Building the project...",
        description="Generate the database client, then build all workspaces",
        success_message="Project built successfully!",
        action=build_project,
    ),
    StepSpec(
        name="run_tests",
        label="Running tests...",
        description="Run the full test suite",
        success_message="All tests passed!",
        action=run_tests,
    ),
    StepSpec(
        name="init_repository",
        label="Initializing Git repository...",
        description="Create version-control metadata if absent",
        success_message="Git repository initialized!",
        action=init_repository,
    ),
    StepSpec(
        name="commit_changes",
        label="Adding files and committing changes...",
        description="Create ignore rules if absent, stage everything, commit",
        success_message="Changes committed!",
        action=commit_changes,
    ),
    StepSpec(
        name="push_to_remote",
        label="Pushing to GitHub repository: {repository_url}",
        description="Configure the remote, rename the branch, force-push",
        success_message="Code pushed to GitHub!",
        action=push_to_remote,
    ),
    StepSpec(
        name="write_deployment_info",
        label="Creating deployment information...",
        description="Write the deployment info document with today's date",
        success_message="Deployment information created!",
        action=write_deployment_info,
    ),
)

STEP_REGISTRY: dict[str, StepSpec] = {spec.name: spec for spec in STEPS}


def get_step(name: str) -> StepSpec:
    """Look up a step by name.

    Raises
    ------
    KeyError
        If the step name is unknown.
    """
    try:
        return STEP_REGISTRY[name]
    except KeyError:
        available = ", ".join(STEP_REGISTRY)
        raise KeyError(f"Unknown step {name!r}. Available: {available}") from None


__all__ = [
    "STEPS",
    "STEP_REGISTRY",
    "StepContext",
    "StepSpec",
    "get_step",
    "local_now",
]
