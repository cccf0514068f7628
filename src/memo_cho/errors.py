"""Error kinds raised by the config store and memo engine."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class MemoError(Exception):
    """Base class for every memo-cho failure."""


class ConfigError(MemoError):
    """Configuration is missing, unreadable or malformed."""


class MemoIOError(MemoError):
    """A filesystem read/write/create failed."""

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(f"{message}: {path}")
        self.path = path


class AlreadyExistsError(MemoError):
    """A memo with the same name already exists."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"memo already exists: {path}")
        self.path = path


class NotFoundError(MemoError):
    """A memo directory or memo file is absent."""

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(f"{message}: {path}")
        self.path = path


class ProcessError(MemoError):
    """An external program could not be spawned or was killed."""

    def __init__(
        self, message: str, argv: Sequence[str], returncode: int | None = None
    ) -> None:
        super().__init__(message)
        self.argv = list(argv)
        self.returncode = returncode
