# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from aclbatch.app import list_acl_entries, modify_acl_entries
from aclbatch.config import ConfigurationError, configure_logging
from aclbatch.domain.errors import BuildError, SubmissionError, TransportError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from aclbatch.domain.model import ACLEntry, RawBatchEntry

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Batch-modify ACL entries")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    apply = subparsers.add_parser("apply", help="Apply a JSON file of batch operations")
    _add_target_arguments(apply)
    apply.add_argument(
        "operations_file",
        type=Path,
        help='JSON array of operations, e.g. [{"op": "create", "ip": "10.0.0.1"}]',
    )
    apply.add_argument(
        "--timeout",
        type=float,
        help="Overall deadline for the submission in seconds",
    )

    listing = subparsers.add_parser("list", help="List ACL entries in normalized order")
    _add_target_arguments(listing)

    return parser.parse_args(list(argv))


def _add_target_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--service-id", required=True, help="Service owning the ACL")
    parser.add_argument("--acl-id", required=True, help="ACL to modify")


def _load_operations(path: Path) -> list[RawBatchEntry]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ValueError(f"Cannot read operations from {path}: {exc}") from exc
    if not isinstance(raw, list) or not all(isinstance(item, dict) for item in raw):
        raise ValueError(f"{path} must contain a JSON array of objects")
    return raw


def _format_entry(entry: ACLEntry) -> str:
    prefix = f"{entry.ip}/{entry.subnet}" if entry.subnet is not None else entry.ip
    marker = "!" if entry.negated else ""
    return f"{entry.id}\t{marker}{prefix}\t{entry.comment}"


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "apply":
            operations = _load_operations(parsed_args.operations_file)
            modify_acl_entries(
                parsed_args.service_id,
                parsed_args.acl_id,
                operations,
                timeout=parsed_args.timeout,
            )
        entries = list_acl_entries(parsed_args.service_id, parsed_args.acl_id)
    except (ValueError, BuildError, ConfigurationError) as exc:
        log.error("Invalid input: %s", exc)  # noqa: TRY400
        sys.exit(2)
    except (SubmissionError, TransportError) as exc:
        log.error("Remote call failed: %s", exc)  # noqa: TRY400
        sys.exit(1)

    for entry in entries:
        print(_format_entry(entry))


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
