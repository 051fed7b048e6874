"""Summary: Command-line interface for nylasbridge.

Importance: Runs Nylas operation batches from JSON files without a workflow engine.
Alternatives: Only expose the dispatcher through the HTTP API.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from nylasbridge.app import build_context, supported_operations
from nylasbridge.config import AppConfig


def build_parser() -> argparse.ArgumentParser:
    """Summary: Build the CLI argument parser.

    Importance: Defines supported commands for local operation.
    Alternatives: Use a CLI framework like Typer or Click.
    """

    parser = argparse.ArgumentParser(description="nylasbridge CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    execute = subparsers.add_parser("execute", help="Execute a batch of items from a JSON file")
    execute.add_argument("items_path", type=str, help="JSON file holding a list of item parameters")
    fail_policy = execute.add_mutually_exclusive_group()
    fail_policy.add_argument(
        "--continue-on-fail",
        dest="continue_on_fail",
        action="store_true",
        default=None,
        help="Record failures as error items and keep going",
    )
    fail_policy.add_argument(
        "--abort-on-fail",
        dest="continue_on_fail",
        action="store_false",
        default=None,
        help="Stop the batch at the first failure",
    )

    subparsers.add_parser("check-credentials", help="Verify the configured access token")
    subparsers.add_parser("operations", help="List supported resource/operation pairs")

    return parser


def load_items(path: Path) -> list[dict]:
    """Summary: Load item parameters from a JSON file.

    Importance: Accepts either a list of items or an object with an "items" key.
    Alternatives: Read one item per line as JSON Lines.
    """

    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("items", [])
    if not isinstance(data, list):
        raise ValueError("Items file must contain a JSON list")
    return data


def run_cli(argv: list[str] | None = None) -> int:
    """Summary: Execute CLI commands based on arguments.

    Importance: Drives batch execution and credential checks from a shell.
    Alternatives: Invoke the dispatcher via the HTTP API.
    """

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "operations":
        for resource, operation in supported_operations():
            print(f"{resource}/{operation}")
        return 0

    config = AppConfig.from_env()
    context = build_context(config)

    if args.command == "check-credentials":
        if context.check_credentials():
            print("Credentials are valid.")
            return 0
        print("Credentials are invalid.", file=sys.stderr)
        return 1

    if args.command == "execute":
        items = load_items(Path(args.items_path))
        records = context.run_batch(items, continue_on_fail=args.continue_on_fail)
        print(json.dumps([record.to_dict() for record in records], indent=2))
        return 0

    return 2


def main() -> None:
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
