import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Union

from .errors import CacheLoadError, CacheMissError
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

_logger = logging.getLogger(__name__)

FULL_BLOCKS = "full_blocks"
PARTIAL_BLOCKS = "partial_blocks"
BLOCK_RECEIPTS = "block_receipts"
PROOFS = "proofs"
TRANSACTION_COUNT = "transaction_count"
BALANCE = "balance"
CODE = "code"
STORAGE = "storage"
LOGS = "logs"
TRANSACTIONS = "transactions"
BLOBS = "blobs"

KINDS = (
    FULL_BLOCKS,
    PARTIAL_BLOCKS,
    BLOCK_RECEIPTS,
    PROOFS,
    TRANSACTION_COUNT,
    BALANCE,
    CODE,
    STORAGE,
    LOGS,
    TRANSACTIONS,
    BLOBS,
)


class FileCache(Provider):
    """JSON-file backed store of fetched chain data, keyed by kind and query.

    Entries live in memory until ``save()`` writes the whole store to ``path``.
    """

    def __init__(self, path: Union[str, Path], entries: Dict[str, Dict[str, Any]]) -> None:
        self.path = Path(path)
        self._memory: Dict[str, Dict[str, Any]] = {kind: dict(entries.get(kind, {})) for kind in KINDS}

    @classmethod
    def empty(cls, path: Union[str, Path]) -> "FileCache":
        return cls(path, {})

    @classmethod
    def load(cls, path: Union[str, Path]) -> "FileCache":
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            raise CacheLoadError(f"Failed to load cache from {path}: {exc}") from exc

        if not isinstance(data, dict):
            raise CacheLoadError(f"Cache file {path} is not a JSON object.")
        for kind in KINDS:
            section = data.get(kind, {})
            if not isinstance(section, dict):
                raise CacheLoadError(f"Cache file {path} has malformed '{kind}' section.")

        cache = cls(path, data)
        _logger.info("Loaded %d cache entries from %s", len(cache), path)
        return cache

    def __len__(self) -> int:
        return sum(len(section) for section in self._memory.values())

    def __contains__(self, item: Any) -> bool:
        kind, query = item
        return query.cache_key() in self._memory[kind]

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(self._memory, fh)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        _logger.info("Saved %d cache entries to %s", len(self), self.path)

    def get(self, kind: str, query: Any) -> Any:
        key = query.cache_key()
        try:
            return self._memory[kind][key]
        except KeyError:
            raise CacheMissError(kind, key) from None

    def insert(self, kind: str, query: Any, value: Any) -> None:
        self._memory[kind][query.cache_key()] = value

    def get_full_block(self, query: BlockQuery) -> Dict[str, Any]:
        return self.get(FULL_BLOCKS, query)

    def get_partial_block(self, query: BlockQuery) -> Dict[str, Any]:
        return self.get(PARTIAL_BLOCKS, query)

    def get_block_receipts(self, query: BlockQuery) -> List[Dict[str, Any]]:
        return self.get(BLOCK_RECEIPTS, query)

    def get_proof(self, query: ProofQuery) -> Dict[str, Any]:
        return self.get(PROOFS, query)

    def get_transaction_count(self, query: AccountQuery) -> int:
        return self.get(TRANSACTION_COUNT, query)

    def get_balance(self, query: AccountQuery) -> int:
        return self.get(BALANCE, query)

    def get_code(self, query: AccountQuery) -> str:
        return self.get(CODE, query)

    def get_storage(self, query: StorageQuery) -> str:
        return self.get(STORAGE, query)

    def get_logs(self, query: LogsQuery) -> List[Dict[str, Any]]:
        return self.get(LOGS, query)

    def get_transaction(self, query: TxQuery) -> Dict[str, Any]:
        return self.get(TRANSACTIONS, query)

    def get_blob_data(self, query: BlobQuery) -> Dict[str, Any]:
        return self.get(BLOBS, query)

    def insert_full_block(self, query: BlockQuery, value: Dict[str, Any]) -> None:
        self.insert(FULL_BLOCKS, query, value)

    def insert_partial_block(self, query: BlockQuery, value: Dict[str, Any]) -> None:
        self.insert(PARTIAL_BLOCKS, query, value)

    def insert_block_receipts(self, query: BlockQuery, value: List[Dict[str, Any]]) -> None:
        self.insert(BLOCK_RECEIPTS, query, value)

    def insert_proof(self, query: ProofQuery, value: Dict[str, Any]) -> None:
        self.insert(PROOFS, query, value)

    def insert_transaction_count(self, query: AccountQuery, value: int) -> None:
        self.insert(TRANSACTION_COUNT, query, value)

    def insert_balance(self, query: AccountQuery, value: int) -> None:
        self.insert(BALANCE, query, value)

    def insert_code(self, query: AccountQuery, value: str) -> None:
        self.insert(CODE, query, value)

    def insert_storage(self, query: StorageQuery, value: str) -> None:
        self.insert(STORAGE, query, value)

    def insert_logs(self, query: LogsQuery, value: List[Dict[str, Any]]) -> None:
        self.insert(LOGS, query, value)

    def insert_transaction(self, query: TxQuery, value: Dict[str, Any]) -> None:
        self.insert(TRANSACTIONS, query, value)

    def insert_blob(self, query: BlobQuery, value: Dict[str, Any]) -> None:
        self.insert(BLOBS, query, value)
