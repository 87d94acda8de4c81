"""
Cache-then-remote composition of :class:`FileCache` and :class:`RpcProvider`.

Every query is answered from the cache when possible. On a miss the remote
node is asked once; a successful answer is inserted into the in-memory cache
and returned, a failure propagates as raised and leaves the cache untouched.

Results are deep copies of the stored values; mutating one never alters the
cache.

Nothing is written to disk until ``save()`` is called. Callers that want
fetched data to survive a restart must call it before exiting.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union

from .cache import FileCache
from .config import Config
from .errors import CacheLoadError
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
from .remote import RpcProvider

_logger = logging.getLogger(__name__)

_MISS = object()

Q = TypeVar("Q")
V = TypeVar("V")


class CachedRpcProvider(Provider):
    """Serve chain data from a local file cache, falling back to an RPC node."""

    def __init__(
        self,
        cache_path: Union[str, Path],
        rpc_url: str,
        beacon_rpc_url: Optional[str] = None,
        timeout: int = 10,
        max_retries: int = 3,
        backoff_seconds: float = 0.5,
    ) -> None:
        try:
            self.cache = FileCache.load(cache_path)
        except CacheLoadError as exc:
            _logger.info("Starting with an empty cache: %s", exc)
            self.cache = FileCache.empty(cache_path)
        self.rpc = RpcProvider(
            rpc_url,
            beacon_rpc_url,
            timeout=timeout,
            max_retries=max_retries,
            backoff_seconds=backoff_seconds,
        )

    @classmethod
    def from_config(cls, config: Config) -> "CachedRpcProvider":
        return cls(
            config.cache_path,
            config.rpc_url,
            config.beacon_rpc_url,
            timeout=config.request_timeout,
            max_retries=config.max_retries,
            backoff_seconds=config.backoff_seconds,
        )

    def save(self) -> None:
        self.cache.save()

    def get_full_block(self, query: BlockQuery) -> Dict[str, Any]:
        return self._through_cache(
            query, self.cache.get_full_block, self.rpc.get_full_block, self.cache.insert_full_block
        )

    def get_partial_block(self, query: BlockQuery) -> Dict[str, Any]:
        return self._through_cache(
            query, self.cache.get_partial_block, self.rpc.get_partial_block, self.cache.insert_partial_block
        )

    def get_block_receipts(self, query: BlockQuery) -> List[Dict[str, Any]]:
        return self._through_cache(
            query, self.cache.get_block_receipts, self.rpc.get_block_receipts, self.cache.insert_block_receipts
        )

    def get_proof(self, query: ProofQuery) -> Dict[str, Any]:
        return self._through_cache(query, self.cache.get_proof, self.rpc.get_proof, self.cache.insert_proof)

    def get_transaction_count(self, query: AccountQuery) -> int:
        return self._through_cache(
            query,
            self.cache.get_transaction_count,
            self.rpc.get_transaction_count,
            self.cache.insert_transaction_count,
        )

    def get_balance(self, query: AccountQuery) -> int:
        return self._through_cache(query, self.cache.get_balance, self.rpc.get_balance, self.cache.insert_balance)

    def get_code(self, query: AccountQuery) -> str:
        return self._through_cache(query, self.cache.get_code, self.rpc.get_code, self.cache.insert_code)

    def get_storage(self, query: StorageQuery) -> str:
        return self._through_cache(query, self.cache.get_storage, self.rpc.get_storage, self.cache.insert_storage)

    def get_logs(self, query: LogsQuery) -> List[Dict[str, Any]]:
        return self._through_cache(query, self.cache.get_logs, self.rpc.get_logs, self.cache.insert_logs)

    def get_blob_data(self, query: BlobQuery) -> Dict[str, Any]:
        return self._through_cache(query, self.cache.get_blob_data, self.rpc.get_blob_data, self.cache.insert_blob)

    def get_transaction(self, query: TxQuery) -> Dict[str, Any]:
        cached = self._cache_lookup(query, self.cache.get_transaction)
        if cached is not _MISS:
            return copy.deepcopy(cached)

        if query.block_no is not None:
            tx = self._find_in_block(query)
            if tx is not None:
                return tx

        _logger.debug("Fetching transaction %s from %s", query.tx_hash, self.rpc.rpc_url)
        out = self.rpc.get_transaction(query)
        self.cache.insert_transaction(query, out)
        return copy.deepcopy(out)

    def _find_in_block(self, query: TxQuery) -> Optional[Dict[str, Any]]:
        try:
            block = self.get_full_block(BlockQuery(block_no=query.block_no))
        except Exception as exc:  # pylint: disable=broad-except
            _logger.debug("Block %s unavailable for tx lookup: %s", query.block_no, exc)
            return None

        for tx in block.get("transactions") or []:
            if isinstance(tx, dict) and str(tx.get("hash", "")).lower() == query.tx_hash:
                return tx
        return None

    def _cache_lookup(self, query: Any, getter: Callable[[Any], V]) -> Any:
        # A corrupted entry and an absent one are both treated as a miss.
        try:
            value = getter(query)
        except Exception as exc:  # pylint: disable=broad-except
            _logger.debug("Cache miss for %r: %s", query, exc)
            return _MISS
        _logger.debug("Cache hit for %r", query)
        return value

    def _through_cache(
        self,
        query: Q,
        getter: Callable[[Q], V],
        fetcher: Callable[[Q], V],
        inserter: Callable[[Q, V], None],
    ) -> V:
        cached = self._cache_lookup(query, getter)
        if cached is not _MISS:
            return copy.deepcopy(cached)

        out = fetcher(query)
        inserter(query, out)
        return copy.deepcopy(out)
