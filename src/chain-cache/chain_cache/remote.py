import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import requests

from .errors import NotFoundError, RemoteError
from .provider import Provider
from .queries import (
    AccountQuery,
    BlobQuery,
    BlockQuery,
    LogsQuery,
    ProofQuery,
    StorageQuery,
    TxQuery,
)
from .rpc_client import RpcClient

_logger = logging.getLogger(__name__)

HTTP_SCHEMES = {"http", "https"}


def _validate_url(url: str, field: str, schemes: set) -> str:
    candidate = (url or "").strip()
    parsed = urlparse(candidate)
    if parsed.scheme not in schemes or not parsed.netloc:
        allowed = "|".join(sorted(schemes))
        raise ValueError(f"{field} must be an absolute {allowed} URL; got '{url}'.")
    return candidate.rstrip("/")


def _quantity(value: int) -> str:
    return hex(int(value))


def _require(result: Any, message: str) -> Any:
    if result is None:
        raise NotFoundError(message)
    return result


def _hex_to_int(value: Any, field: str) -> int:
    if not isinstance(value, str):
        raise RemoteError(f"{field} returned a non-string quantity.")
    try:
        return int(value, 16)
    except ValueError:
        raise RemoteError(f"{field} is not a valid hex value.") from None


class RpcProvider(Provider):
    """Fetch chain data from an execution-layer JSON-RPC node and, for blobs, a beacon node."""

    def __init__(
        self,
        rpc_url: str,
        beacon_rpc_url: Optional[str] = None,
        timeout: int = 10,
        max_retries: int = 3,
        backoff_seconds: float = 0.5,
    ) -> None:
        self.rpc_url = _validate_url(rpc_url, "rpc_url", HTTP_SCHEMES)
        self.beacon_rpc_url = (
            _validate_url(beacon_rpc_url, "beacon_rpc_url", HTTP_SCHEMES) if beacon_rpc_url else None
        )
        self.timeout = timeout
        self.client = RpcClient(
            self.rpc_url,
            timeout=timeout,
            max_retries=max_retries,
            backoff_seconds=backoff_seconds,
        )
        self.beacon_session = requests.Session()

    def save(self) -> None:
        pass

    def get_full_block(self, query: BlockQuery) -> Dict[str, Any]:
        return self._get_block(query, full_transactions=True)

    def get_partial_block(self, query: BlockQuery) -> Dict[str, Any]:
        return self._get_block(query, full_transactions=False)

    def get_block_receipts(self, query: BlockQuery) -> List[Dict[str, Any]]:
        result = self.client.call("eth_getBlockReceipts", [_quantity(query.block_no)])
        if result is None:
            raise NotFoundError(f"No receipts for block {query.block_no}.")
        return result

    def get_proof(self, query: ProofQuery) -> Dict[str, Any]:
        result = self.client.call(
            "eth_getProof",
            [query.address, query.sorted_indices(), _quantity(query.block_no)],
        )
        return _require(result, f"No proof for {query.address} at block {query.block_no}.")

    def get_transaction_count(self, query: AccountQuery) -> int:
        result = self.client.call("eth_getTransactionCount", [query.address, _quantity(query.block_no)])
        return _hex_to_int(result, "eth_getTransactionCount")

    def get_balance(self, query: AccountQuery) -> int:
        result = self.client.call("eth_getBalance", [query.address, _quantity(query.block_no)])
        return _hex_to_int(result, "eth_getBalance")

    def get_code(self, query: AccountQuery) -> str:
        result = self.client.call("eth_getCode", [query.address, _quantity(query.block_no)])
        return _require(result, f"No code for {query.address} at block {query.block_no}.")

    def get_storage(self, query: StorageQuery) -> str:
        result = self.client.call(
            "eth_getStorageAt",
            [query.address, query.index, _quantity(query.block_no)],
        )
        return _require(result, f"No storage at {query.address}:{query.index} at block {query.block_no}.")

    def get_logs(self, query: LogsQuery) -> List[Dict[str, Any]]:
        log_filter: Dict[str, Any] = {
            "address": query.address,
            "fromBlock": _quantity(query.from_block),
            "toBlock": _quantity(query.to_block),
        }
        if query.topics:
            log_filter["topics"] = list(query.topics)
        result = self.client.call("eth_getLogs", [log_filter])
        return _require(result, f"No logs for {query.address} in blocks {query.from_block}-{query.to_block}.")

    def get_transaction(self, query: TxQuery) -> Dict[str, Any]:
        result = self.client.call("eth_getTransactionByHash", [query.tx_hash])
        if result is None:
            raise NotFoundError(f"Transaction {query.tx_hash} not found.")
        return result

    def get_blob_data(self, query: BlobQuery) -> Dict[str, Any]:
        if not self.beacon_rpc_url:
            raise RemoteError("beacon_rpc_url is required to fetch blob data.")

        url = f"{self.beacon_rpc_url}/eth/v1/beacon/blob_sidecars/{query.block_id}"
        _logger.debug("GET %s", url)
        response = self.beacon_session.get(url, timeout=self.timeout)
        if response.status_code == 404:
            raise NotFoundError(f"No blob sidecars for block {query.block_id}.")
        response.raise_for_status()
        try:
            payload = response.json()
        except ValueError as exc:
            raise RemoteError("Failed to parse blob sidecars response.") from exc
        if not isinstance(payload, dict):
            raise RemoteError("Unexpected blob sidecars response (non-object).")
        return payload

    def _get_block(self, query: BlockQuery, full_transactions: bool) -> Dict[str, Any]:
        result = self.client.call("eth_getBlockByNumber", [_quantity(query.block_no), full_transactions])
        if result is None:
            raise NotFoundError(f"Block {query.block_no} not found.")
        return result
