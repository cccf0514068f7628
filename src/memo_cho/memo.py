"""Memo engine: create, open, list, search and delete dated markdown memos.

A memo is just a file ``{YYYY-MM-DD}-{sanitized-title}.md`` inside the
configured memo directory. At most one memo per title per day: creation
fails instead of suffixing.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import frontmatter

from memo_cho.config import MemoConfig
from memo_cho.errors import (
    AlreadyExistsError,
    ConfigError,
    MemoError,
    MemoIOError,
    NotFoundError,
)
from memo_cho.runner import CommandRunner, SubprocessRunner, split_command

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_CONTENT = "# "
TITLE_TOKEN = "{{ title }}"
DATE_TOKEN = "{{ date }}"
MEMO_SUFFIX = ".md"


@dataclass
class MemoEntry:
    """A memo as shown by ``list``."""

    name: str
    path: Path
    title: str


@dataclass
class GrepMatch:
    """A single matching line from ``grep``."""

    name: str
    line_no: int
    line: str


def sanitize_title(title: str) -> str:
    """Hyphenate every character that is not a letter, then every space.

    Digits and punctuation become hyphens too.
    """
    kept = "".join(c if c.isalpha() or c == " " else "-" for c in title)
    return kept.replace(" ", "-")


def render_template(template: str, title: str, timestamp: str) -> str:
    return template.replace(TITLE_TOKEN, title).replace(DATE_TOKEN, timestamp)


def _title_from_markdown(path: Path) -> str:
    """Frontmatter ``title``, else first ``# `` heading, else the file stem."""
    try:
        post = frontmatter.load(str(path))
    except Exception:
        logger.debug("Unreadable memo for listing: %s", path, exc_info=True)
        return path.stem

    title = post.metadata.get("title")
    if title:
        return str(title)
    for line in post.content.splitlines():
        if line.startswith("# ") and line[2:].strip():
            return line[2:].strip()
    return path.stem


class MemoEngine:
    """Memo operations bound to one resolved configuration."""

    def __init__(
        self,
        config: MemoConfig,
        runner: CommandRunner | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.config = config
        self.runner = runner or SubprocessRunner()
        self.clock = clock

    # ── Paths ─────────────────────────────────────────────────

    def memo_path(self, title: str, now: datetime | None = None) -> Path:
        now = now or self.clock()
        filename = f"{now.strftime(DATE_FORMAT)}-{sanitize_title(title)}{MEMO_SUFFIX}"
        return self.config.memo_dir / filename

    def _existing_memo(self, name: str) -> Path:
        """Resolve a user-supplied memo file name inside memo_dir."""
        if not name or Path(name).name != name or name in (".", ".."):
            raise NotFoundError("not a memo name", Path(name))
        path = self.config.memo_dir / name
        if not path.is_file():
            raise NotFoundError("no such memo", path)
        return path

    def _require_memo_dir(self) -> Path:
        memo_dir = self.config.memo_dir
        if not memo_dir.is_dir():
            raise NotFoundError("memo directory does not exist", memo_dir)
        return memo_dir

    def _memo_files(self) -> list[Path]:
        memo_dir = self._require_memo_dir()
        return sorted(p for p in memo_dir.glob(f"*{MEMO_SUFFIX}") if p.is_file())

    # ── Creation ──────────────────────────────────────────────

    def _render_content(self, title: str, timestamp: str) -> str:
        template_path = self.config.template_path
        if not template_path.is_file():
            return DEFAULT_CONTENT
        try:
            template = template_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise MemoIOError(f"cannot read template ({e})", template_path) from e
        if not template:
            return DEFAULT_CONTENT
        return render_template(template, title, timestamp)

    def _write_new(self, path: Path, content: str) -> None:
        """Create ``path`` with ``content``; fail if it already exists."""
        try:
            f = path.open("x", encoding="utf-8")
        except FileExistsError as e:
            raise AlreadyExistsError(path) from e
        except OSError as e:
            raise MemoIOError(f"cannot create memo ({e.strerror})", path) from e

        try:
            with f:
                f.write(content)
        except OSError as e:
            path.unlink(missing_ok=True)
            raise MemoIOError(f"cannot write memo ({e.strerror})", path) from e

    def create_memo(self, title: str) -> Path:
        """Create a new memo seeded from the template and open it in the editor.

        The file is fully written before the editor starts. A non-zero editor
        exit is tolerated; spawn failures and signals raise ProcessError.
        """
        if not title.strip():
            raise MemoError("memo title must not be empty")

        now = self.clock()
        path = self.memo_path(title, now)
        content = self._render_content(title, now.strftime(TIMESTAMP_FORMAT))
        self._write_new(path, content)
        logger.info("Created memo: %s", path)

        self._launch_editor(path)
        return path

    # ── Editing ───────────────────────────────────────────────

    def _launch_editor(self, path: Path) -> int:
        argv = [*split_command(self.config.editor_command), str(path)]
        returncode = self.runner.run(argv)
        if returncode != 0:
            logger.info("Editor closed with status %d for %s", returncode, path)
        return returncode

    def edit_memo(self) -> Path | None:
        """Pick a memo with the selector and open it in the editor.

        Returns the edited path, or None when the selection was cancelled.
        """
        memo_dir = self._require_memo_dir()
        if not self.config.selector_command:
            raise ConfigError("no 'cmdselector' configured for interactive edit")

        names = [p.name for p in self._memo_files()]
        if not names:
            logger.info("No memos in %s", memo_dir)
            return None

        selected = self.runner.select(split_command(self.config.selector_command), names)
        if selected is None:
            logger.info("No memo selected")
            return None
        if selected not in names:
            raise NotFoundError("selection is not a memo", Path(selected))

        path = memo_dir / selected
        self._launch_editor(path)
        return path

    def open_memo(self, name: str) -> Path:
        path = self._existing_memo(name)
        self._launch_editor(path)
        return path

    # ── Listing, search, deletion ─────────────────────────────

    def list_memos(self) -> list[MemoEntry]:
        return [
            MemoEntry(name=p.name, path=p, title=_title_from_markdown(p))
            for p in self._memo_files()
        ]

    def grep_memos(self, pattern: str, ignore_case: bool = False) -> list[GrepMatch]:
        """Search every memo line by line with a regular expression."""
        try:
            regex = re.compile(pattern, re.IGNORECASE if ignore_case else 0)
        except re.error as e:
            raise MemoError(f"invalid search pattern {pattern!r}: {e}") from e

        matches: list[GrepMatch] = []
        for path in self._memo_files():
            try:
                text = path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                raise MemoIOError(f"cannot read memo ({e.strerror})", path) from e
            for line_no, line in enumerate(text.splitlines(), start=1):
                if regex.search(line):
                    matches.append(GrepMatch(name=path.name, line_no=line_no, line=line))
        return matches

    def delete_memo(self, name: str) -> Path:
        path = self._existing_memo(name)
        try:
            path.unlink()
        except OSError as e:
            raise MemoIOError(f"cannot delete memo ({e.strerror})", path) from e
        logger.info("Deleted memo: %s", path)
        return path
