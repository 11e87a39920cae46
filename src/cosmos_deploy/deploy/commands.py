"""Subprocess wrapper for the external tools the pipeline drives.

Every step invokes ``git``, ``npm`` or ``npx`` through a
``CommandRunner``. The runner always receives an explicit working
directory and never calls ``os.chdir``.

Key Concepts:
    CommandRunner: ``which()`` for tool discovery, ``run()`` for a blocking
        invocation, ``check()`` to raise ``CommandFailedError`` on a
        non-zero exit. Every invocation is appended to ``history``.
    CommandRecord: One recorded invocation (argv, cwd, return code).
    Dry run: mutating commands are printed and recorded with exit code 0
        but not executed. Read-only probes (``read_only=True``) still run
        so later decisions see real repository state.

Architecture Decisions:
    - No timeouts: a hung install or push blocks until interrupted.
    - Output is inherited from the parent process unless ``capture=True``,
      so operators see tool output as it happens.
    - The executable is resolved with ``shutil.which`` before launch so
      ``npm.cmd``-style shims work on Windows.
"""

from __future__ import annotations

import shlex
import shutil
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from cosmos_deploy.core.errors import CommandFailedError
from cosmos_deploy.core.logging import get_logger

logger = get_logger(__name__)

# Shell convention for "command not found".
EXIT_NOT_FOUND = 127


def format_command(args: Sequence[str]) -> str:
    """Render argv as a copy-pasteable shell line."""
    return shlex.join(args)


@dataclass
class CommandRecord:
    """A single invocation made through a ``CommandRunner``."""

    args: list[str]
    cwd: str
    returncode: int
    dry_run: bool = False

    @property
    def display(self) -> str:
        return format_command(self.args)


@dataclass
class CommandOutcome:
    """Return code and (when captured) output of an invocation."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Runs external commands for pipeline steps.

    Parameters
    ----------
    dry_run
        Print and record mutating commands without executing them.
    echo
        Callback receiving the command line of each dry-run invocation.
    which
        Executable lookup, ``shutil.which`` by default.

    Example::

        runner = CommandRunner()
        runner.check(["npm", "install"], cwd=Path("frontend"))
    """

    def __init__(
        self,
        *,
        dry_run: bool = False,
        echo: Callable[[str], None] | None = None,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self.dry_run = dry_run
        self._echo = echo
        self._which = which
        self.history: list[CommandRecord] = []

    def which(self, tool: str) -> str | None:
        """Resolve ``tool`` on PATH, or ``None`` if it is not installed."""
        return self._which(tool)

    def run(
        self,
        args: Sequence[str],
        cwd: Path,
        *,
        capture: bool = False,
        read_only: bool = False,
    ) -> CommandOutcome:
        """Run a command to completion and return its outcome.

        Never raises for a non-zero exit; see :meth:`check`.
        """
        argv = list(args)
        display = format_command(argv)

        if self.dry_run and not read_only:
            if self._echo is not None:
                self._echo(f"(dry-run) {display}  [cwd: {cwd}]")
            self.history.append(CommandRecord(argv, str(cwd), 0, dry_run=True))
            logger.debug("command.dry_run", command=display, cwd=str(cwd))
            return CommandOutcome(returncode=0)

        logger.debug("command.started", command=display, cwd=str(cwd))
        outcome = self._execute(argv, cwd, capture=capture)
        self.history.append(CommandRecord(argv, str(cwd), outcome.returncode))

        if outcome.returncode != 0:
            logger.info(
                "command.failed",
                command=display,
                cwd=str(cwd),
                returncode=outcome.returncode,
            )
        return outcome

    def check(
        self,
        args: Sequence[str],
        cwd: Path,
        *,
        capture: bool = False,
    ) -> CommandOutcome:
        """Run a command and raise ``CommandFailedError`` on non-zero exit."""
        outcome = self.run(args, cwd, capture=capture)
        if outcome.returncode != 0:
            raise CommandFailedError(
                format_command(args), outcome.returncode, cwd=str(cwd)
            )
        return outcome

    def _execute(self, argv: list[str], cwd: Path, *, capture: bool) -> CommandOutcome:
        executable = self._which(argv[0]) or argv[0]
        try:
            proc = subprocess.run(  # noqa: S603
                [executable, *argv[1:]],
                cwd=cwd,
                capture_output=capture,
                text=True,
                check=False,
            )
        except OSError as e:
            logger.info("command.not_launched", command=format_command(argv), error=str(e))
            raise CommandFailedError(
                format_command(argv), EXIT_NOT_FOUND, cwd=str(cwd), cause=e
            ) from e
        return CommandOutcome(
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
        )


__all__ = ["CommandOutcome", "CommandRecord", "CommandRunner", "format_command"]
