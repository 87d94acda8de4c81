import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from .cached import CachedRpcProvider
from .config import load_config
from .queries import (
    AccountQuery,
    BlobQuery,
    BlockQuery,
    LogsQuery,
    StorageQuery,
    TxQuery,
    proof_query,
)


def _block_number(value: str) -> int:
    text = (value or "").strip().lower()
    try:
        if text.startswith("0x"):
            return int(text, 16)
        return int(text, 10)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not a decimal or 0x-prefixed block number.") from None


def _add_block(parser: argparse.ArgumentParser, name: str = "--block") -> None:
    parser.add_argument(
        name,
        required=True,
        type=_block_number,
        help="Block number: decimal or 0x-prefixed hex.",
    )


def _add_address(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--address",
        required=True,
        help="Account address (0x-prefixed).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fetch chain data through a local file cache backed by a JSON-RPC node.",
        allow_abbrev=False,
    )
    parser.add_argument(
        "--rpc-url",
        required=False,
        help="JSON-RPC endpoint. Defaults to RPC_URL env.",
    )
    parser.add_argument(
        "--beacon-rpc-url",
        required=False,
        help="Beacon node endpoint for blob data. Defaults to BEACON_RPC_URL env.",
    )
    parser.add_argument(
        "--cache-path",
        required=False,
        help="Cache file location. Defaults to CACHE_PATH env or ~/.cache/chain-cache/cache.json.",
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Do not write newly fetched data back to the cache file.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for diagnostics on stderr.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("block", "Fetch a block with full transaction objects"),
        ("partial-block", "Fetch a block with transaction hashes only"),
        ("receipts", "Fetch all receipts of a block"),
    ):
        _add_block(subparsers.add_parser(name, help=help_text))

    for name, help_text in (
        ("tx-count", "Fetch an account nonce at a block"),
        ("balance", "Fetch an account balance (wei) at a block"),
        ("code", "Fetch contract code at a block"),
    ):
        account_parser = subparsers.add_parser(name, help=help_text)
        _add_address(account_parser)
        _add_block(account_parser)

    storage_parser = subparsers.add_parser("storage", help="Fetch a storage slot at a block")
    _add_address(storage_parser)
    storage_parser.add_argument(
        "--slot",
        required=True,
        help="Storage slot (0x-prefixed 32-byte hex).",
    )
    _add_block(storage_parser)

    proof_parser = subparsers.add_parser("proof", help="Fetch an account proof (eth_getProof)")
    _add_address(proof_parser)
    proof_parser.add_argument(
        "--slot",
        dest="slots",
        action="append",
        default=[],
        help="Storage slot to include in the proof. Repeatable.",
    )
    _add_block(proof_parser)

    logs_parser = subparsers.add_parser("logs", help="Fetch logs for an address in a block range")
    _add_address(logs_parser)
    _add_block(logs_parser, "--from-block")
    _add_block(logs_parser, "--to-block")
    logs_parser.add_argument(
        "--topic",
        dest="topics",
        action="append",
        default=[],
        help="Topic filter by position. Repeatable; use '*' for a wildcard position.",
    )

    tx_parser = subparsers.add_parser("transaction", help="Fetch a transaction by hash")
    tx_parser.add_argument(
        "--hash",
        required=True,
        help="Transaction hash (0x-prefixed).",
    )
    tx_parser.add_argument(
        "--block",
        required=False,
        type=_block_number,
        help="Optional block the transaction was included in; lets a cached block answer the lookup.",
    )

    blob_parser = subparsers.add_parser("blob", help="Fetch blob sidecars for a beacon block")
    blob_parser.add_argument(
        "--block-id",
        required=True,
        type=int,
        help="Beacon block id (slot).",
    )

    return parser


def _run(provider: CachedRpcProvider, args: argparse.Namespace) -> Any:
    command = args.command
    if command == "block":
        return provider.get_full_block(BlockQuery(args.block))
    if command == "partial-block":
        return provider.get_partial_block(BlockQuery(args.block))
    if command == "receipts":
        return provider.get_block_receipts(BlockQuery(args.block))
    if command == "tx-count":
        return provider.get_transaction_count(AccountQuery(args.address, args.block))
    if command == "balance":
        return provider.get_balance(AccountQuery(args.address, args.block))
    if command == "code":
        return provider.get_code(AccountQuery(args.address, args.block))
    if command == "storage":
        return provider.get_storage(StorageQuery(args.address, args.slot, args.block))
    if command == "proof":
        return provider.get_proof(proof_query(args.address, args.slots, args.block))
    if command == "logs":
        topics = tuple(None if topic == "*" else topic for topic in args.topics)
        return provider.get_logs(LogsQuery(args.address, args.from_block, args.to_block, topics))
    if command == "transaction":
        return provider.get_transaction(TxQuery(args.hash, args.block))
    if command == "blob":
        return provider.get_blob_data(BlobQuery(args.block_id))
    raise ValueError(f"Unknown command '{command}'.")


def main(argv: Optional[list[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, stream=sys.stderr)

    try:
        config = load_config(args.rpc_url)
        if args.beacon_rpc_url:
            config = dataclasses.replace(config, beacon_rpc_url=args.beacon_rpc_url)
        if args.cache_path:
            config = dataclasses.replace(config, cache_path=str(Path(args.cache_path).expanduser()))
        provider = CachedRpcProvider.from_config(config)

        result = _run(provider, args)
        if not args.no_save:
            provider.save()
        print(json.dumps(result, indent=2))
    except Exception as exc:  # pylint: disable=broad-except
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
