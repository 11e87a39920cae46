"""
Shared pytest fixtures for cosmos-deploy tests.

This module provides:
- A temporary project checkout with the three workspaces
- A status reporter writing to an in-memory console
- A fixed clock for deterministic deployment documents
- A StepContext factory around ``FakeRunner``
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from cosmos_deploy.deploy.config import PipelineConfig
from cosmos_deploy.deploy.reporter import StatusReporter
from cosmos_deploy.deploy.steps import StepContext
from tests._support.fakes import FIXED_NOW, FakeRunner, memory_reporter


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        if "integration" in Path(item.fspath).parts:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep COSMOS_DEPLOY_* variables from the host out of tests."""
    for key in list(os.environ):
        if key.startswith("COSMOS_DEPLOY_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A fresh checkout with the frontend/backend/db workspaces."""
    root = tmp_path / "cosmos-hub"
    for name in ("frontend", "backend", "db"):
        (root / name).mkdir(parents=True)
    (root / "package.json").write_text("{}", encoding="utf-8")
    return root


@pytest.fixture
def reporter() -> StatusReporter:
    return memory_reporter()


@pytest.fixture
def config() -> PipelineConfig:
    return PipelineConfig(force_push=True)


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def make_context(project: Path, config: PipelineConfig, reporter: StatusReporter, fixed_clock):
    """Build a StepContext around a FakeRunner."""

    def _make(runner: FakeRunner | None = None, **config_overrides: object) -> StepContext:
        cfg = config.model_copy(update=config_overrides) if config_overrides else config
        return StepContext(
            root=project,
            config=cfg,
            runner=runner or FakeRunner(dry_run=cfg.dry_run),
            reporter=reporter,
            clock=fixed_clock,
        )

    return _make
