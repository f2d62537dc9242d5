# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""CrossNav CLI: run, validate, export, import commands.

Usage:
    python -m crossnav.cli run --url URL --html FILE
    python -m crossnav.cli validate FILE
    python -m crossnav.cli export [-o FILE]
    python -m crossnav.cli import FILE

Environment:
    CROSSNAV_DB_PATH    SQLite rule database (default: ~/.crossnav/rules.db)
    CROSSNAV_LOG_LEVEL  log level for crossnav loggers (default: WARNING)
    CROSSNAV_LOG_JSON   1/true/yes for JSON log lines
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path

from .errors import CrossNavError, RuleDecodeError, RuleValidationFailed

DEFAULT_DB_PATH = "~/.crossnav/rules.db"

_TRUTHY = ("1", "true", "yes")


def _apply_env_overrides(args: argparse.Namespace) -> argparse.Namespace:
    env_db = os.environ.get("CROSSNAV_DB_PATH", "").strip()
    if env_db and not args.db_path:
        args.db_path = env_db
    if not args.db_path:
        args.db_path = DEFAULT_DB_PATH

    env_level = os.environ.get("CROSSNAV_LOG_LEVEL", "").strip()
    if env_level and not args.log_level:
        args.log_level = env_level
    if args.verbose:
        args.log_level = "DEBUG"
    if not args.log_level:
        args.log_level = "WARNING"

    env_json = os.environ.get("CROSSNAV_LOG_JSON", "").strip().lower()
    args.log_json = args.log_json or env_json in _TRUTHY
    return args


async def _open_store(db_path: str):
    from .repository_sqlite import SqliteRuleRepository
    from .store import RuleStore

    repository = await SqliteRuleRepository.create(db_path)
    return RuleStore(repository), repository


async def _cmd_run(args: argparse.Namespace) -> int:
    from .document import LxmlDocument
    from .engine import RuleEngine
    from .serializer import result_to_json

    html = Path(args.html).read_bytes()
    document = LxmlDocument.from_html(html, base_url=args.url)

    store, repository = await _open_store(args.db_path)
    try:
        engine = RuleEngine(store.load)
        result = await engine.run(args.url, document)
    finally:
        await repository.close()

    if result is None:
        print(f"No site rule matched {args.url}", file=sys.stderr)
        return 1
    print(result_to_json(result))
    return 0


async def _cmd_validate(args: argparse.Namespace) -> int:
    from .serializer import profiles_from_json
    from .validator import validate

    profiles = profiles_from_json(Path(args.file).read_text(encoding="utf-8"))
    errors = validate(profiles)
    for error in errors:
        print(str(error))
    if errors:
        print(f"{len(errors)} error(s) in {len(profiles)} profile(s)", file=sys.stderr)
        return 1
    print(f"OK: {len(profiles)} profile(s)")
    return 0


async def _cmd_export(args: argparse.Namespace) -> int:
    store, repository = await _open_store(args.db_path)
    try:
        text = await store.export()
    finally:
        await repository.close()

    if args.output:
        out = Path(args.output)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text + "\n", encoding="utf-8")
        print(f"Exported to {out}")
    else:
        print(text)
    return 0


async def _cmd_import(args: argparse.Namespace) -> int:
    text = Path(args.file).read_text(encoding="utf-8")
    store, repository = await _open_store(args.db_path)
    try:
        profiles = await store.import_rules(text)
    finally:
        await repository.close()
    print(f"Imported {len(profiles)} profile(s)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="CrossNav site rule engine",
        prog="python -m crossnav.cli",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--db-path", default="", help=f"SQLite rule database (default: {DEFAULT_DB_PATH})")
    parser.add_argument("--log-level", default="", help="Log level (default: WARNING)")
    parser.add_argument("--log-json", action="store_true", help="Emit JSON log lines")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_run = subparsers.add_parser(
        "run",
        help="Evaluate a saved HTML page against the stored rules",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
examples:
  %(prog)s --url https://javdb.com/v/abc --html page.html""",
    )
    p_run.add_argument("--url", required=True, metavar="URL", help="URL the page was loaded from")
    p_run.add_argument("--html", required=True, metavar="FILE", help="HTML snapshot of the page")

    p_validate = subparsers.add_parser("validate", help="Validate a rule file without storing it")
    p_validate.add_argument("file", metavar="FILE")

    p_export = subparsers.add_parser("export", help="Print or save the stored rule set")
    p_export.add_argument("-o", "--output", metavar="FILE", help="Write to FILE instead of stdout")

    p_import = subparsers.add_parser("import", help="Validate and store a rule file")
    p_import.add_argument("file", metavar="FILE")

    return parser


_COMMANDS = {
    "run": _cmd_run,
    "validate": _cmd_validate,
    "export": _cmd_export,
    "import": _cmd_import,
}


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    args = _apply_env_overrides(build_parser().parse_args(argv))

    from .logging_config import configure

    configure(json_output=args.log_json, level=args.log_level)

    try:
        return asyncio.run(_COMMANDS[args.command](args))
    except RuleValidationFailed as e:
        for error in e.errors:
            print(str(error), file=sys.stderr)
        print(f"Rejected: {len(e.errors)} validation error(s)", file=sys.stderr)
        return 1
    except RuleDecodeError as e:
        print(f"Invalid rule file: {e}", file=sys.stderr)
        return 1
    except (CrossNavError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
