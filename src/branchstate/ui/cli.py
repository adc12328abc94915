from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from branchstate.adapters.payloads import serialize_result, serialize_state
from branchstate.app import advance_page_files, reconcile_page_files
from branchstate.config import ConfigurationError, configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _add_payload_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--plan",
        type=Path,
        required=True,
        help="JSON file holding the planner output (stateIntents)",
    )
    parser.add_argument(
        "--writer",
        type=Path,
        required=True,
        help="JSON file holding the writer output (narrative, sceneSummary)",
    )
    parser.add_argument(
        "--state",
        type=Path,
        required=True,
        help="JSON file holding the previous page state",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Write the JSON result to this file instead of stdout",
    )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile branching story state")
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile = subparsers.add_parser(
        "reconcile",
        help="Validate a page plan against the previous state",
    )
    _add_payload_arguments(reconcile)

    advance = subparsers.add_parser(
        "advance",
        help="Reconcile a page plan and build the next state",
    )
    _add_payload_arguments(advance)

    return parser.parse_args(list(argv))


def _write_output(payload: dict[str, object], output: Path | None) -> None:
    rendered = json.dumps(payload, indent=2, ensure_ascii=False)
    if output is None:
        print(rendered)  # noqa: T201
        return
    output.write_text(rendered + "\n", encoding="utf-8")
    log.info("Wrote result to %s", output)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    try:
        configure_logging()
    except ConfigurationError:
        configure_logging(level=logging.INFO)
        log.exception("Invalid logging configuration")
        sys.exit(2)

    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        if parsed_args.command == "reconcile":
            result = reconcile_page_files(parsed_args.plan, parsed_args.writer, parsed_args.state)
            payload = serialize_result(result)
        elif parsed_args.command == "advance":
            advanced = advance_page_files(
                parsed_args.plan, parsed_args.writer, parsed_args.state
            )
            payload = {
                "reconciliation": serialize_result(advanced.reconciliation),
                "nextState": serialize_state(advanced.next_state),
            }
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
        _write_output(payload, parsed_args.output)
    except ValueError:
        log.exception("Payload validation error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
