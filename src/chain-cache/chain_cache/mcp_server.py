"""
MCP server exposing cached chain data lookups backed by a JSON-RPC node.

Fetched data stays in memory until the ``save_cache`` tool is called.
"""

import argparse
from collections.abc import Mapping
from typing import Any, Optional

from mcp.server.fastmcp import FastMCP

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

server = FastMCP(
    name="chain-cache",
    instructions="Fetch historical chain data (blocks, proofs, state, logs, blobs) through a persistent local cache.",
)

_provider: Optional[CachedRpcProvider] = None


def _get_provider() -> CachedRpcProvider:
    global _provider
    if _provider is None:
        _provider = CachedRpcProvider.from_config(load_config())
    return _provider


def _normalize_array_param(value: Optional[Any], name: str) -> list:
    """
    Ensure a parameter intended as an array is actually treated as one:
    - None: empty list
    - str/bytes: likely misuse, raise with guidance
    - list/tuple: keep as list
    - Mapping: reject (not an array)
    - other scalars: auto-wrap into single-element list
    """
    if value is None:
        return []
    if isinstance(value, (str, bytes, bytearray)):
        raise ValueError(f"{name} must be an array (e.g. ['0x...']); got a string/bytes.")
    if isinstance(value, Mapping):
        raise ValueError(f"{name} must be an array, not an object/map.")
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


@server.tool(
    name="get_block",
    title="Get Block",
    description="Fetch a block by number. full_transactions=true returns transaction objects, false returns hashes.",
)
def get_block(block_number: int, full_transactions: bool = True) -> dict:
    provider = _get_provider()
    query = BlockQuery(block_number)
    if full_transactions:
        return provider.get_full_block(query)
    return provider.get_partial_block(query)


@server.tool(
    name="get_block_receipts",
    title="Get Block Receipts",
    description="Fetch every transaction receipt of a block.",
)
def get_block_receipts(block_number: int) -> dict:
    provider = _get_provider()
    receipts = provider.get_block_receipts(BlockQuery(block_number))
    return {"block_number": block_number, "receipts": receipts}


@server.tool(
    name="get_proof",
    title="Get Account Proof",
    description="Fetch an EIP-1186 account proof with optional storage slots at a block.",
)
def get_proof(address: str, block_number: int, slots: Optional[list] = None) -> dict:
    provider = _get_provider()
    indices = _normalize_array_param(slots, "slots")
    return provider.get_proof(proof_query(address, indices, block_number))


@server.tool(
    name="get_account",
    title="Get Account State",
    description="Fetch nonce, balance (wei) and code of an address at a block.",
)
def get_account(address: str, block_number: int) -> dict:
    provider = _get_provider()
    query = AccountQuery(address, block_number)
    return {
        "address": query.address,
        "block_number": block_number,
        "nonce": provider.get_transaction_count(query),
        "balance": str(provider.get_balance(query)),
        "code": provider.get_code(query),
    }


@server.tool(
    name="get_storage_at",
    title="Get Storage Slot",
    description="Read a raw storage slot of an address at a block.",
)
def get_storage_at(address: str, slot: str, block_number: int) -> dict:
    provider = _get_provider()
    query = StorageQuery(address, slot, block_number)
    return {
        "address": query.address,
        "slot": query.index,
        "block_number": block_number,
        "data": provider.get_storage(query),
    }


@server.tool(
    name="get_logs",
    title="Get Logs",
    description="Fetch logs of an address in an inclusive block range. topics is positional; null matches any.",
)
def get_logs(
    address: str,
    from_block: int,
    to_block: int,
    topics: Optional[list] = None,
) -> dict:
    provider = _get_provider()
    topic_list = tuple(_normalize_array_param(topics, "topics"))
    query = LogsQuery(address, from_block, to_block, topic_list)
    return {"address": query.address, "logs": provider.get_logs(query)}


@server.tool(
    name="get_transaction",
    title="Get Transaction",
    description="Fetch a transaction by hash. Passing block_number lets a cached block answer without a network call.",
)
def get_transaction(tx_hash: str, block_number: Optional[int] = None) -> dict:
    provider = _get_provider()
    return provider.get_transaction(TxQuery(tx_hash, block_number))


@server.tool(
    name="get_blob_data",
    title="Get Blob Sidecars",
    description="Fetch blob sidecars for a beacon block id. Requires BEACON_RPC_URL.",
)
def get_blob_data(block_id: int) -> dict:
    provider = _get_provider()
    return provider.get_blob_data(BlobQuery(block_id))


@server.tool(
    name="save_cache",
    title="Save Cache",
    description="Write all fetched data to the cache file so later runs can reuse it.",
)
def save_cache() -> dict:
    provider = _get_provider()
    provider.save()
    return {"saved": True, "path": str(provider.cache.path), "entries": len(provider.cache)}


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the chain-cache MCP server.")
    parser.add_argument(
        "--transport",
        choices=["stdio", "sse", "streamable-http"],
        default="stdio",
        help="Transport protocol for MCP.",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host for SSE/HTTP transports.",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port for SSE/HTTP transports.",
    )
    parser.add_argument(
        "--mount-path",
        default="/",
        help="Mount path for SSE transport (only when transport=sse).",
    )
    args = parser.parse_args()

    # FastMCP uses host/port only for SSE/HTTP transports; stdio ignores them.
    server.settings.host = args.host
    server.settings.port = args.port

    if args.transport == "sse":
        server.run(transport="sse", mount_path=args.mount_path)
    else:
        server.run(transport=args.transport)


if __name__ == "__main__":
    main()
