"""
CLI layer for cosmos-deploy.

All pipeline logic lives in ``cosmos_deploy.deploy``. This package handles
argument parsing, confirmation prompts and table output only.

Entry point::

    cosmos-deploy --help
"""

from cosmos_deploy.cli.app import app

__all__ = ["app"]
