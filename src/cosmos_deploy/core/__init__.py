"""Core primitives shared by the deploy pipeline and the CLI.

- errors.py   Typed error hierarchy with exit codes (DeployError, ...)
- logging.py  structlog configuration, run context, step timing
"""

from cosmos_deploy.core.errors import (
    ArtifactWriteError,
    CommandFailedError,
    ConfigError,
    DeployError,
    ErrorCategory,
    ErrorContext,
    ForcePushNotAuthorizedError,
    MissingToolError,
    NothingToCommitError,
)

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
