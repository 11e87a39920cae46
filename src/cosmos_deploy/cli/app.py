"""
Root Typer application for the cosmos-deploy CLI.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

import typer
from typer import Typer

from cosmos_deploy.cli.deploy import list_steps, run_pipeline, show_config
from cosmos_deploy.core.logging import configure_logging

app = Typer(
    name="cosmos-deploy",
    help="Install, build, test, commit and push the Cosmos Hub project.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        try:
            v = pkg_version("cosmos-hub-deploy")
        except PackageNotFoundError:
            from cosmos_deploy import __version__ as v
        typer.echo(f"cosmos-deploy {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Structured log level (DEBUG, INFO, WARNING, ERROR).",
    ),
    log_format: str | None = typer.Option(
        None, "--log-format", help="Structured log format: console or json.",
    ),
) -> None:
    """Run and inspect the Cosmos Hub deployment pipeline."""
    configure_logging(
        level=log_level.upper() if log_level else None,  # type: ignore[arg-type]
        format=log_format.lower() if log_format else None,  # type: ignore[arg-type]
    )


app.command("run")(run_pipeline)
app.command("steps")(list_steps)
app.command("config")(show_config)
