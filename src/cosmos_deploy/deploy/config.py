"""Configuration model for the deployment pipeline.

Every value the project's ``deploy.sh`` hard-coded (remote URL, branch,
workspaces, commit message, artifact paths) is a field here, defaulting to
the value the script used.

Override precedence: keyword overrides > YAML file > ``COSMOS_DEPLOY_*``
environment variables > field defaults.

Key Concepts:
    PipelineConfig: pydantic-settings model. List fields accept
        comma-separated values from the environment
        (``COSMOS_DEPLOY_WORKSPACES=frontend,backend``). Command fields
        accept shell-style strings (``COSMOS_DEPLOY_TEST_COMMAND="npm run ci"``).
    load_config(): Builds a config from an optional YAML file plus overrides,
        converting validation problems into ``ConfigError``.
    TOOL_HINTS: Install hints printed when a required tool is missing.

Example:
    >>> config = PipelineConfig(branch="release")
    >>> config.remote_name
    'origin'
"""

from __future__ import annotations

import shlex
import uuid
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from cosmos_deploy.core.errors import ConfigError
from cosmos_deploy.deploy.templates import DEFAULT_COMMIT_MESSAGE

TOOL_HINTS: dict[str, str] = {
    "git": "Git is not installed. Please install Git and try again.",
    "node": "Node.js is not installed. Please install Node.js 18+ and try again.",
    "npm": "npm is not installed. Please install npm and try again.",
}


def tool_hint(tool: str) -> str:
    """Diagnostic for a missing tool, falling back to a generic message."""
    return TOOL_HINTS.get(tool, f"{tool} is not installed. Please install {tool} and try again.")


class PipelineConfig(BaseSettings):
    """Configuration for one deployment pipeline run.

    Example::

        config = PipelineConfig(
            repository_url="https://github.com/acme/cosmos.git",
            force_push=True,
        )
    """

    model_config = SettingsConfigDict(
        env_prefix="COSMOS_DEPLOY_",
        extra="ignore",
    )

    # Remote
    repository_url: str = Field(
        default="https://github.com/Aju-lang/TRASPACE.git",
        min_length=1,
        description="Remote repository the pipeline force-pushes to",
    )
    live_url: str = Field(
        default="https://traspace.vercel.app",
        description="Public URL of the deployed dashboard",
    )
    remote_name: str = Field(default="origin", min_length=1, description="Git remote name")
    branch: str = Field(default="main", min_length=1, description="Branch to rename to and push")

    # Workspaces and tools
    workspaces: Annotated[list[str], NoDecode] = Field(
        default=["frontend", "backend", "db"],
        description="Subdirectories that get their own package install",
    )
    database_workspace: str = Field(
        default="db",
        description="Workspace holding the Prisma schema",
    )
    required_tools: Annotated[list[str], NoDecode] = Field(
        default=["git", "node", "npm"],
        description="Executables that must be on PATH before anything runs",
    )

    # Commands
    install_command: Annotated[list[str], NoDecode] = Field(default=["npm", "install"])
    client_generate_command: Annotated[list[str], NoDecode] = Field(
        default=["npx", "prisma", "generate"],
    )
    build_command: Annotated[list[str], NoDecode] = Field(default=["npm", "run", "build"])
    test_command: Annotated[list[str], NoDecode] = Field(default=["npm", "test"])

    # Version control
    commit_message: str = Field(default=DEFAULT_COMMIT_MESSAGE, min_length=1)
    fail_on_empty_commit: bool = Field(
        default=False,
        description="Treat 'nothing to commit' as fatal instead of a skip",
    )
    force_push: bool = Field(
        default=False,
        description="Authorize the destructive force push to the remote branch",
    )

    # Artifacts (relative paths resolve against the project root)
    gitignore_path: Path = Field(default=Path(".gitignore"))
    deployment_doc_path: Path = Field(default=Path("DEPLOYMENT.md"))

    # Execution
    dry_run: bool = Field(default=False, description="Print commands without running them")
    run_id: str = Field(default="", description="Unique run identifier (auto-generated)")

    @field_validator("workspaces", "required_tools", mode="before")
    @classmethod
    def _split_names(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator(
        "install_command",
        "client_generate_command",
        "build_command",
        "test_command",
        mode="before",
    )
    @classmethod
    def _split_command(cls, value: Any) -> Any:
        if isinstance(value, str):
            return shlex.split(value)
        return value

    @field_validator(
        "install_command",
        "client_generate_command",
        "build_command",
        "test_command",
    )
    @classmethod
    def _command_not_empty(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("command must not be empty")
        return value

    @model_validator(mode="after")
    def _set_defaults(self) -> PipelineConfig:
        if not self.run_id:
            self.run_id = uuid.uuid4().hex[:12]
        return self

    @property
    def push_target(self) -> str:
        return f"{self.remote_name}/{self.branch}"

    @classmethod
    def from_yaml(cls, yaml_content: str, **overrides: Any) -> PipelineConfig:
        """Parse YAML content; keyword overrides win over file values.

        Raises
        ------
        ConfigError
            If the YAML is malformed, not a mapping, or fails validation.
        """
        try:
            data = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML: {e}", cause=e) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Pipeline config must be a YAML mapping")

        # Accept kebab-case keys as written in hand-edited files.
        values = {str(k).replace("-", "_"): v for k, v in data.items()}
        values.update(overrides)
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigError(f"Invalid pipeline config: {e}", cause=e) from e

    @classmethod
    def from_yaml_file(cls, path: str | Path, **overrides: Any) -> PipelineConfig:
        """Load and validate configuration from a YAML file."""
        try:
            content = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}", cause=e) from e
        return cls.from_yaml(content, **overrides)


def load_config(path: str | Path | None = None, **overrides: Any) -> PipelineConfig:
    """Resolve a ``PipelineConfig`` from an optional YAML file and overrides."""
    if path is not None:
        return PipelineConfig.from_yaml_file(path, **overrides)
    try:
        return PipelineConfig(**overrides)
    except ValidationError as e:
        raise ConfigError(f"Invalid pipeline config: {e}", cause=e) from e


__all__ = ["PipelineConfig", "TOOL_HINTS", "load_config", "tool_hint"]
