"""
Structured error types for cosmos-deploy.

Every fatal condition the deployment pipeline can hit is a ``DeployError``
subclass. Each error carries:

- **Category:** What kind of failure (missing dependency, command, VCS, ...)
- **Exit code:** The process exit status the CLI should propagate
- **Context:** Step name, command line and working directory
- **Cause:** Chained underlying exception, if any

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                        DeployError                           │
        │            (category, exit_code, context, cause)             │
        ├─────────────────────────────────────────────────────────────┤
        │  MissingToolError        CommandFailedError                  │
        │  (DEPENDENCY, exit 1)    (COMMAND, exit = subprocess code)   │
        │                                                              │
        │  NothingToCommitError    ForcePushNotAuthorizedError         │
        │  (VCS, exit 1)           (CONFIG, exit 1)                    │
        │                                                              │
        │  ConfigError             ArtifactWriteError                  │
        │  (CONFIG, exit 1)        (IO, exit 1)                        │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> err = MissingToolError("node")
    >>> err.exit_code
    1
    >>> err.to_dict()["category"]
    'DEPENDENCY'

Tags:
    errors, exit-codes, fail-fast, cosmos-deploy
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Categories used for reporting and exit code decisions."""

    DEPENDENCY = "DEPENDENCY"  # Required executable not on PATH
    COMMAND = "COMMAND"  # Subprocess exited non-zero
    VCS = "VCS"  # Version-control state problem
    CONFIG = "CONFIG"  # Missing/invalid configuration or authorization
    IO = "IO"  # Filesystem write failures
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """Structured metadata attached to a ``DeployError``.

    Only non-empty fields are serialized by :meth:`to_dict`.
    """

    step: str | None = None
    command: str | None = None
    cwd: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.step:
            result["step"] = self.step
        if self.command:
            result["command"] = self.command
        if self.cwd:
            result["cwd"] = self.cwd
        if self.metadata:
            result.update(self.metadata)
        return result


class DeployError(Exception):
    """Base exception for all pipeline failures.

    Subclasses set ``default_category`` and ``default_exit_code``.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_exit_code: int = 1

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        exit_code: int | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.exit_code = exit_code if exit_code is not None else self.default_exit_code
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> DeployError:
        """Add context to this error (fluent API).

        Usage:
            raise DeployError("boom").with_context(step="build", cwd="/src")
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "exit_code": self.exit_code,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class MissingToolError(DeployError):
    """A required executable is not resolvable on PATH."""

    default_category = ErrorCategory.DEPENDENCY

    def __init__(self, tool: str, message: str | None = None):
        self.tool = tool
        super().__init__(message or f"{tool} is not installed. Please install {tool} and try again.")


class CommandFailedError(DeployError):
    """An external command exited with a non-zero status.

    The exit code is the subprocess's own return code so the CLI can
    propagate it. A process killed by signal N (negative return code)
    maps to ``128 + N``, as a POSIX shell reports it.
    """

    default_category = ErrorCategory.COMMAND

    def __init__(
        self,
        command: str,
        returncode: int,
        *,
        cwd: str | None = None,
        cause: Exception | None = None,
    ):
        self.command = command
        self.returncode = returncode
        super().__init__(
            f"Command `{command}` exited with status {returncode}",
            exit_code=returncode if returncode >= 0 else 128 - returncode,
            context=ErrorContext(command=command, cwd=cwd),
            cause=cause,
        )


class NothingToCommitError(DeployError):
    """The working tree has no changes to commit."""

    default_category = ErrorCategory.VCS

    def __init__(self, message: str = "Nothing to commit, working tree clean"):
        super().__init__(message)


class ForcePushNotAuthorizedError(DeployError):
    """A force push was requested without explicit authorization."""

    default_category = ErrorCategory.CONFIG

    def __init__(self, remote: str, branch: str):
        self.remote = remote
        self.branch = branch
        super().__init__(
            f"Refusing to force-push to {remote}/{branch} without authorization "
            "(pass --force-push or set COSMOS_DEPLOY_FORCE_PUSH=true)"
        )


class ConfigError(DeployError):
    """Configuration could not be loaded or validated."""

    default_category = ErrorCategory.CONFIG


class ArtifactWriteError(DeployError):
    """A generated file could not be written."""

    default_category = ErrorCategory.IO

    def __init__(self, path: str, cause: Exception):
        self.path = path
        super().__init__(f"Could not write {path}: {cause}", cause=cause)


__all__ = [
    "ArtifactWriteError",
    "CommandFailedError",
    "ConfigError",
    "DeployError",
    "ErrorCategory",
    "ErrorContext",
    "ForcePushNotAuthorizedError",
    "MissingToolError",
    "NothingToCommitError",
]
