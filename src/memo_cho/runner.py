"""Command runner protocol and the subprocess-backed implementation.

Editor and selector programs own the terminal while they run; the caller
blocks until they exit. There is no timeout.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from memo_cho.errors import ProcessError

logger = logging.getLogger(__name__)


@runtime_checkable
class CommandRunner(Protocol):
    """Protocol for launching interactive external programs."""

    def run(self, argv: Sequence[str]) -> int:
        """Run a foreground program and return its exit status."""
        ...

    def select(self, argv: Sequence[str], choices: Sequence[str]) -> str | None:
        """Let the user pick one of ``choices``. Returns None on cancel."""
        ...


def split_command(command: str) -> list[str]:
    """Split a configured command string such as ``code --wait`` into argv."""
    try:
        argv = shlex.split(command)
    except ValueError as e:
        raise ProcessError(f"cannot parse command {command!r}: {e}", [command]) from e
    if not argv:
        raise ProcessError("empty command", [command])
    return argv


class SubprocessRunner:
    """Runs programs with subprocess.run on explicit argument lists."""

    def run(self, argv: Sequence[str]) -> int:
        logger.debug("Running: %s", " ".join(argv))
        try:
            result = subprocess.run(list(argv))
        except OSError as e:
            raise ProcessError(f"cannot start {argv[0]}: {e.strerror or e}", argv) from e

        if result.returncode < 0:
            raise ProcessError(
                f"{argv[0]} was killed by signal {-result.returncode}",
                argv,
                result.returncode,
            )
        if result.returncode != 0:
            logger.warning("%s exited with status %d", argv[0], result.returncode)
        return result.returncode

    def select(self, argv: Sequence[str], choices: Sequence[str]) -> str | None:
        logger.debug("Selecting from %d choices with: %s", len(choices), " ".join(argv))
        try:
            # stdin/stdout carry the list; the selector draws its UI on the tty
            result = subprocess.run(
                list(argv),
                input="\n".join(choices) + "\n",
                stdout=subprocess.PIPE,
                text=True,
            )
        except OSError as e:
            raise ProcessError(f"cannot start {argv[0]}: {e.strerror or e}", argv) from e

        if result.returncode < 0:
            raise ProcessError(
                f"{argv[0]} was killed by signal {-result.returncode}",
                argv,
                result.returncode,
            )
        if result.returncode != 0:
            logger.info("Selector exited with status %d, nothing selected", result.returncode)
            return None

        lines = result.stdout.splitlines()
        selected = lines[0].strip() if lines else ""
        return selected or None
