"""
End-to-end runs of DeploymentPipeline against a real project directory.

External tools are scripted through FakeRunner; everything else (file
artifacts, step ordering, exit codes, operator output) is real.
TestRealGit drives an actual git binary against a local bare remote.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from cosmos_deploy.deploy.commands import CommandOutcome, CommandRunner
from cosmos_deploy.deploy.config import PipelineConfig
from cosmos_deploy.deploy.results import OverallStatus, StepStatus
from cosmos_deploy.deploy.steps import STEPS
from cosmos_deploy.deploy.workflow import DeploymentPipeline
from tests._support.fakes import FakeRunner, memory_reporter, reporter_output

ALL_STEPS = [s.name for s in STEPS]
GIT_PREFIXES = (("git", "init"), ("git", "add"), ("git", "commit"), ("git", "push"))


@pytest.fixture
def pipeline_factory(project, reporter, fixed_clock):
    def _make(runner: FakeRunner | None = None, **overrides) -> DeploymentPipeline:
        overrides.setdefault("force_push", True)
        config = PipelineConfig(**overrides)
        return DeploymentPipeline(
            config,
            root=project,
            runner=runner or FakeRunner(dry_run=config.dry_run),
            reporter=reporter,
            clock=fixed_clock,
        )

    return _make


class TestSuccessfulRun:
    def test_fresh_project(self, pipeline_factory, project, reporter):
        runner = FakeRunner(failures={("git", "remote", "get-url"): 2})
        result = pipeline_factory(runner).run()

        assert result.succeeded
        assert result.exit_code == 0
        assert result.executed_steps == ALL_STEPS
        assert all(s.status == StepStatus.PASSED for s in result.steps)
        assert result.summary == "8/8 steps passed"

        assert (project / ".gitignore").exists()
        doc = (project / "DEPLOYMENT.md").read_text(encoding="utf-8")
        assert "*Deployed on Sat Oct 17 12:00:00 UTC 2026*" in doc

        argv = runner.executed_argv()
        assert argv[-1] == ("git", "push", "-u", "origin", "main", "--force")
        assert argv.index(("npm", "test")) < argv.index(("git", "init"))

        output = reporter_output(reporter)
        assert "[INFO] 🌌 Welcome to Cosmos Hub Deployment!" in output
        assert "[SUCCESS] 🎉 Deployment completed successfully!" in output
        assert "1. 🔑 Set up environment variables in Vercel" in output
        assert "[INFO] Repository: https://github.com/Aju-lang/TRASPACE" in output
        assert "[INFO] Live URL: https://traspace.vercel.app" in output

    def test_step_commands_recorded(self, pipeline_factory):
        result = pipeline_factory().run()
        assert result.step("run_tests").commands == ["npm test"]
        assert result.step("install_dependencies").commands == ["npm install"] * 4

    def test_working_directory_untouched(self, pipeline_factory, project):
        before = os.getcwd()
        pipeline_factory().run()
        assert os.getcwd() == before
        assert before != str(project)

    def test_existing_repository_and_gitignore(self, pipeline_factory, project, reporter):
        (project / ".git").mkdir()
        (project / ".gitignore").write_text("node_modules/\n", encoding="utf-8")
        runner = FakeRunner()

        result = pipeline_factory(runner).run()

        assert result.succeeded
        assert result.step("init_repository").status == StepStatus.SKIPPED
        assert not runner.ran("git", "init")
        assert (project / ".gitignore").read_text(encoding="utf-8") == "node_modules/\n"
        assert runner.ran("git", "remote", "set-url", "origin")
        assert result.summary == "7/8 steps passed, 1 skipped"
        assert "[WARNING] Git repository already exists." in reporter_output(reporter)

    def test_deployment_doc_overwritten(self, pipeline_factory, project):
        (project / "DEPLOYMENT.md").write_text("old deployment\n", encoding="utf-8")
        pipeline_factory().run()
        doc = (project / "DEPLOYMENT.md").read_text(encoding="utf-8")
        assert "old deployment" not in doc
        assert "Sat Oct 17 12:00:00 UTC 2026" in doc

    def test_nothing_to_commit_is_not_fatal(self, pipeline_factory):
        runner = FakeRunner(outputs={("git", "status", "--porcelain"): ""})
        result = pipeline_factory(runner).run()

        assert result.succeeded
        assert result.step("commit_changes").status == StepStatus.SKIPPED
        assert runner.ran("git", "push")


class TestFailFast:
    def test_missing_tool_runs_nothing(self, pipeline_factory, project, reporter):
        runner = FakeRunner(missing=["node"])
        result = pipeline_factory(runner).run()

        assert result.overall_status == OverallStatus.FAILED
        assert result.exit_code == 1
        assert result.executed_steps == ["check_requirements"]
        assert runner.executed == []
        assert not (project / ".gitignore").exists()
        assert not (project / "DEPLOYMENT.md").exists()

        output = reporter_output(reporter)
        assert "[ERROR] Node.js is not installed" in output
        assert "[ERROR] Stage 'check_requirements' failed; aborting deployment." in output
        assert "Deployment completed successfully" not in output

    def test_test_failure_blocks_git(self, pipeline_factory, project):
        runner = FakeRunner(failures={("npm", "test"): 3})
        result = pipeline_factory(runner).run()

        assert result.exit_code == 3
        assert result.failed_step == "run_tests"
        assert result.executed_steps == ALL_STEPS[:4]
        assert not any(runner.ran(*prefix) for prefix in GIT_PREFIXES)
        assert not (project / "DEPLOYMENT.md").exists()
        assert result.summary == "3/8 steps passed, failed at run_tests (exit 3)"

    @pytest.mark.parametrize(
        ("failing", "returncode", "failed_step"),
        [
            (("npm", "install"), 1, "install_dependencies"),
            (("npx", "prisma", "generate"), 1, "build_project"),
            (("npm", "run", "build"), 2, "build_project"),
            (("git", "init"), 128, "init_repository"),
            (("git", "add"), 128, "commit_changes"),
            (("git", "commit"), 1, "commit_changes"),
            (("git", "remote", "add"), 3, "push_to_remote"),
            (("git", "push"), 128, "push_to_remote"),
        ],
    )
    def test_first_failure_stops_run(
        self, pipeline_factory, project, failing, returncode, failed_step
    ):
        runner = FakeRunner(
            failures={failing: returncode, ("git", "remote", "get-url"): 2},
        )
        result = pipeline_factory(runner).run()

        assert result.failed_step == failed_step
        assert result.exit_code == returncode
        index = ALL_STEPS.index(failed_step)
        assert result.executed_steps == ALL_STEPS[: index + 1]
        assert not (project / "DEPLOYMENT.md").exists()

    def test_push_not_authorized(self, pipeline_factory, project, reporter):
        runner = FakeRunner()
        result = pipeline_factory(runner, force_push=False).run()

        assert result.exit_code == 1
        assert result.failed_step == "push_to_remote"
        assert runner.ran("git", "commit")
        assert not runner.ran("git", "push")
        assert not runner.ran("git", "remote")
        assert not (project / "DEPLOYMENT.md").exists()
        assert "--force-push" in reporter_output(reporter)

    def test_empty_commit_fatal_when_configured(self, pipeline_factory):
        runner = FakeRunner(outputs={("git", "status", "--porcelain"): ""})
        result = pipeline_factory(runner, fail_on_empty_commit=True).run()

        assert result.failed_step == "commit_changes"
        assert result.exit_code == 1
        assert not runner.ran("git", "push")

    def test_failed_step_carries_error(self, pipeline_factory):
        result = pipeline_factory(FakeRunner(failures={("npm", "run", "build"): 2})).run()
        step = result.step("build_project")
        assert step.status == StepStatus.FAILED
        assert step.error_category == "COMMAND"
        assert "npm run build" in result.error


class TestDryRun:
    def test_no_files_and_no_mutating_commands(self, project):
        runner = FakeRunner(dry_run=True)
        reporter = memory_reporter()
        config = PipelineConfig(dry_run=True)
        result = DeploymentPipeline(config, root=project, runner=runner, reporter=reporter).run()

        assert result.succeeded
        assert result.dry_run
        assert result.executed_steps == ALL_STEPS
        assert not (project / ".gitignore").exists()
        assert not (project / "DEPLOYMENT.md").exists()
        # Only read-only probes reach the subprocess layer.
        assert runner.executed_argv() == [("git", "remote", "get-url", "origin")]
        assert any(r.args[:2] == ["git", "push"] and r.dry_run for r in runner.history)

    def test_default_runner_echoes_commands(self, project):
        reporter = memory_reporter()
        pipeline = DeploymentPipeline(
            PipelineConfig(dry_run=True, required_tools=[]), root=project, reporter=reporter
        )
        with patch.object(
            CommandRunner, "_execute", return_value=CommandOutcome(returncode=2)
        ) as execute:
            result = pipeline.run()

        assert result.succeeded
        execute.assert_called_once()
        assert execute.call_args.args[0] == ["git", "remote", "get-url", "origin"]
        output = reporter_output(reporter)
        assert f"(dry-run) npm install  [cwd: {project}]" in output
        assert "(dry-run) git remote add origin https://github.com/Aju-lang/TRASPACE.git" in output


def _git(*args: str, cwd: Path) -> str:
    proc = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True, check=True
    )
    return proc.stdout.strip()


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
class TestRealGit:
    @pytest.fixture(autouse=True)
    def _isolated_git_identity(self, monkeypatch, tmp_path):
        global_config = tmp_path / "gitconfig"
        global_config.write_text("", encoding="utf-8")
        monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(global_config))
        monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
        for role in ("AUTHOR", "COMMITTER"):
            monkeypatch.setenv(f"GIT_{role}_NAME", "Cosmos Deploy Tests")
            monkeypatch.setenv(f"GIT_{role}_EMAIL", "deploy-tests@example.com")

    @pytest.fixture
    def diverged_remote(self, tmp_path) -> tuple[Path, str]:
        """Bare remote whose ``main`` holds a commit the project never had."""
        remote = tmp_path / "remote.git"
        _git("init", "--bare", str(remote), cwd=tmp_path)

        seed = tmp_path / "seed"
        seed.mkdir()
        _git("init", cwd=seed)
        (seed / "REMOTE_ONLY.md").write_text("written elsewhere\n", encoding="utf-8")
        _git("add", ".", cwd=seed)
        _git("commit", "-m", "remote-only history", cwd=seed)
        _git("branch", "-M", "main", cwd=seed)
        _git("push", str(remote), "main", cwd=seed)
        return remote, _git("rev-parse", "HEAD", cwd=seed)

    def test_push_replaces_diverged_remote_history(
        self, project, reporter, fixed_clock, diverged_remote
    ):
        remote, remote_only_sha = diverged_remote
        noop = ["true"]
        config = PipelineConfig(
            repository_url=str(remote),
            required_tools=["git"],
            install_command=noop,
            client_generate_command=noop,
            build_command=noop,
            test_command=noop,
            force_push=True,
        )

        result = DeploymentPipeline(
            config, root=project, reporter=reporter, clock=fixed_clock
        ).run()

        assert result.succeeded, reporter_output(reporter)
        remote_history = _git("rev-list", "main", cwd=remote).splitlines()
        assert remote_only_sha not in remote_history
        assert len(remote_history) == 1
        subject = _git("log", "-1", "--format=%s", "main", cwd=remote)
        assert subject == "feat: Initial Cosmos Hub deployment with dynamic APIs"
        assert _git("rev-parse", "HEAD", cwd=project) == remote_history[0]
        assert (project / ".gitignore").exists()
