"""Entry point: memo-cho <command>

- new / n              Prompt for a title and create a memo
- edit / e [filename]  Pick a memo with the selector (or open filename)
- delete / d filename  Delete a memo
- list / l             List memos
- grep / g pattern     Search memos
- serve                Not implemented
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from memo_cho.config import load_config
from memo_cho.errors import ConfigError, MemoError, MemoIOError
from memo_cho.memo import MemoEngine

logger = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _fail(message: str) -> int:
    print(f"memo-cho: {message}", file=sys.stderr)
    return 1


def _read_title() -> str | None:
    try:
        sys.stdout.write("Title: ")
        sys.stdout.flush()
        line = sys.stdin.readline()
    except KeyboardInterrupt:
        return None
    if not line:
        return None
    return line.rstrip("\r\n")


# ── Commands ──────────────────────────────────────────────────


def _cmd_new(engine: MemoEngine, args: argparse.Namespace) -> int:
    title = _read_title()
    if title is None:
        return _fail("no title given")
    if not title.strip():
        return _fail("title must not be empty")
    path = engine.create_memo(title)
    print(path)
    return 0


def _cmd_edit(engine: MemoEngine, args: argparse.Namespace) -> int:
    if args.filename:
        engine.open_memo(args.filename)
        return 0
    if engine.edit_memo() is None:
        print("No memo selected.", file=sys.stderr)
    return 0


def _cmd_delete(engine: MemoEngine, args: argparse.Namespace) -> int:
    path = engine.delete_memo(args.filename)
    print(f"Deleted {path.name}")
    return 0


def _cmd_list(engine: MemoEngine, args: argparse.Namespace) -> int:
    for entry in engine.list_memos():
        print(f"{entry.name}\t{entry.title}")
    return 0


def _cmd_grep(engine: MemoEngine, args: argparse.Namespace) -> int:
    for match in engine.grep_memos(args.pattern, ignore_case=args.ignore_case):
        print(f"{match.name}:{match.line_no}:{match.line}")
    return 0


def _cmd_serve(engine: MemoEngine, args: argparse.Namespace) -> int:
    return _fail("serve is not implemented")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="memo-cho", description="CLI Memo Tool")
    parser.add_argument(
        "--log-level",
        default=os.getenv("MEMO_CHO_LOG_LEVEL", "WARNING"),
        help="logging level (default: $MEMO_CHO_LOG_LEVEL or WARNING)",
    )
    sub = parser.add_subparsers(dest="command")

    p = sub.add_parser("new", aliases=["n"], help="Create a new memo")
    p.set_defaults(func=_cmd_new)

    p = sub.add_parser("edit", aliases=["e"], help="Edit an existing memo")
    p.add_argument("filename", nargs="?", help="memo to open; omit to pick interactively")
    p.set_defaults(func=_cmd_edit)

    p = sub.add_parser("delete", aliases=["d"], help="Delete a memo")
    p.add_argument("filename", help="memo to delete")
    p.set_defaults(func=_cmd_delete)

    p = sub.add_parser("list", aliases=["l"], help="List all memos")
    p.set_defaults(func=_cmd_list)

    p = sub.add_parser("grep", aliases=["g"], help="Search memos")
    p.add_argument("pattern", help="regular expression to search for")
    p.add_argument("-i", "--ignore-case", action="store_true")
    p.set_defaults(func=_cmd_grep)

    p = sub.add_parser("serve", help="Serve memos as a web page (not implemented)")
    p.set_defaults(func=_cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.log_level)

    if not getattr(args, "func", None):
        parser.print_help(sys.stderr)
        return 1

    try:
        config = load_config()
    except (ConfigError, MemoIOError) as e:
        return _fail(str(e))

    engine = MemoEngine(config)
    try:
        return args.func(engine, args)
    except MemoError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        return _fail(str(e))


if __name__ == "__main__":
    sys.exit(main())
