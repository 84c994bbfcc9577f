from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from venuemark.app import attribute_page, attribute_response, lookup_items, search_collection
from venuemark.config import configure_logging
from venuemark.messaging import snapshot_entries

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from types import FrameType

    from venuemark.domain.model import AttributionRecord

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Attribute Getgems NFTs to their marketplace")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log skipped items and lookups at debug level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    response = subparsers.add_parser("response", help="Attribute a saved GraphQL response")
    response.add_argument("file", type=Path, help="JSON file holding one GraphQL response")

    page = subparsers.add_parser("page", help="Attribute items embedded in a saved page")
    page.add_argument("file", type=Path, help="HTML page or bare __NEXT_DATA__ JSON")

    lookup = subparsers.add_parser("lookup", help="Query the API for individual NFTs")
    lookup.add_argument("addresses", nargs="+", help="NFT item addresses")

    collection = subparsers.add_parser(
        "collection",
        help="Query the fixed-price items of a collection",
    )
    collection.add_argument("address", help="Collection address")

    return parser.parse_args(list(argv))


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"Cannot read {path}: {exc.strerror}") from exc


def _render(snapshot: Mapping[str, AttributionRecord]) -> str:
    entries = snapshot_entries(snapshot)
    return json.dumps(
        {item_id: entry.model_dump(mode="json") for item_id, entry in entries.items()},
        indent=2,
        ensure_ascii=False,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    load_dotenv()
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    text = ""
    body: object = None
    try:
        if parsed_args.command in {"response", "page"}:
            text = _read_text(parsed_args.file)
        if parsed_args.command == "response":
            body = json.loads(text)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "response":
            snapshot = attribute_response(body)
        elif parsed_args.command == "page":
            snapshot = attribute_page(text)
        elif parsed_args.command == "lookup":
            snapshot = asyncio.run(lookup_items(parsed_args.addresses))
        elif parsed_args.command == "collection":
            snapshot = asyncio.run(search_collection(parsed_args.address))
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except Exception:
        log.exception("Fatal error during attribution")
        sys.exit(1)

    print(_render(snapshot))  # noqa: T201


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
