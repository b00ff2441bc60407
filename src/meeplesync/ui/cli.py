from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from meeplesync.app import (
    content_status,
    import_game,
    process_import_queue,
    queue_game,
    resync_game,
    sync_content,
    transition_game,
)
from meeplesync.common.logging import configure_logging
from meeplesync.domain.model import Actor, PipelineState
from meeplesync.domain.sync.queue import DEFAULT_PRIORITY

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

_EXTERNAL_ACTORS = (Actor.DOCUMENTS, Actor.REVIEWER)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Board-game catalog ingestion and enrichment")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_cmd = subparsers.add_parser("import", help="Import (or re-sync) a game by BGG ID")
    import_cmd.add_argument("bgg_id", type=int, help="BoardGameGeek thing ID")

    resync = subparsers.add_parser("resync", help="Re-sync an existing catalog entry")
    resync.add_argument("entry_id", type=str, help="Catalog entry UUID")

    transition = subparsers.add_parser(
        "transition",
        help="Request a pipeline transition on behalf of an external actor",
    )
    transition.add_argument("entry_id", type=str, help="Catalog entry UUID")
    transition.add_argument(
        "target",
        type=str,
        choices=[state.value for state in PipelineState],
        help="Target pipeline state",
    )
    transition.add_argument(
        "--actor",
        type=str,
        choices=[actor.value for actor in _EXTERNAL_ACTORS],
        default=Actor.REVIEWER.value,
        help="Who is asking for the transition (default: %(default)s)",
    )

    queue = subparsers.add_parser("queue", help="Import queue commands")
    queue_sub = queue.add_subparsers(dest="queue_command", required=True)
    queue_add = queue_sub.add_parser("add", help="Queue a BGG ID for import")
    queue_add.add_argument("bgg_id", type=int, help="BoardGameGeek thing ID")
    queue_add.add_argument("--name", type=str, help="Optional display name for the queue item")
    queue_add.add_argument(
        "--priority",
        type=int,
        default=DEFAULT_PRIORITY,
        help="Lower numbers are imported first (default: %(default)s)",
    )
    queue_process = queue_sub.add_parser("process", help="Import pending queue items")
    queue_process.add_argument(
        "--limit",
        type=int,
        help="Maximum number of items to import (defaults to config)",
    )

    content = subparsers.add_parser("content-sync", help="Pull curated content from the feed")
    content.add_argument(
        "--limit",
        type=int,
        help="Maximum number of feed items to request (defaults to config)",
    )

    subparsers.add_parser("content-status", help="Show content feed sync status")

    return parser.parse_args(list(argv))


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _validate(args: argparse.Namespace) -> None:
    if args.command in {"import", "queue"} and getattr(args, "bgg_id", 1) <= 0:
        raise ValueError(f"BGG IDs are positive integers, got {args.bgg_id}")
    for name in ("limit", "priority"):
        value = getattr(args, name, None)
        if value is not None and value <= 0:
            raise ValueError(f"--{name} must be positive, got {value}")
    if args.command in {"resync", "transition"}:
        args.entry_id = _parse_uuid(args.entry_id)


def _run(args: argparse.Namespace) -> int:
    """Dispatch a parsed command; returns the process exit code."""

    if args.command == "import":
        outcome = import_game(args.bgg_id)
        return 0 if outcome.succeeded else 1
    if args.command == "resync":
        outcome = resync_game(args.entry_id)
        return 0 if outcome.succeeded else 1
    if args.command == "transition":
        result = transition_game(
            args.entry_id,
            PipelineState(args.target),
            actor=Actor(args.actor),
        )
        return 0 if result.accepted else 1
    if args.command == "queue" and args.queue_command == "add":
        queue_game(args.bgg_id, name=args.name, priority=args.priority)
        return 0
    if args.command == "queue" and args.queue_command == "process":
        process_import_queue(limit=args.limit)
        return 0
    if args.command == "content-sync":
        result = sync_content(limit=args.limit)
        return 1 if result.errors else 0
    if args.command == "content-status":
        content_status()
        return 0
    raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        _validate(parsed_args)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        exit_code = _run(parsed_args)
    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)
    sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    main()
