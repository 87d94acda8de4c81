from abc import ABC, abstractmethod
from typing import Any, Dict, List

from .queries import (
    AccountQuery,
    BlobQuery,
    BlockQuery,
    LogsQuery,
    ProofQuery,
    StorageQuery,
    TxQuery,
)


class Provider(ABC):
    """Read surface shared by the local cache, the RPC fetcher and the cached composition."""

    @abstractmethod
    def save(self) -> None: ...

    @abstractmethod
    def get_full_block(self, query: BlockQuery) -> Dict[str, Any]: ...

    @abstractmethod
    def get_partial_block(self, query: BlockQuery) -> Dict[str, Any]: ...

    @abstractmethod
    def get_block_receipts(self, query: BlockQuery) -> List[Dict[str, Any]]: ...

    @abstractmethod
    def get_proof(self, query: ProofQuery) -> Dict[str, Any]: ...

    @abstractmethod
    def get_transaction_count(self, query: AccountQuery) -> int: ...

    @abstractmethod
    def get_balance(self, query: AccountQuery) -> int: ...

    @abstractmethod
    def get_code(self, query: AccountQuery) -> str: ...

    @abstractmethod
    def get_storage(self, query: StorageQuery) -> str: ...

    @abstractmethod
    def get_logs(self, query: LogsQuery) -> List[Dict[str, Any]]: ...

    @abstractmethod
    def get_transaction(self, query: TxQuery) -> Dict[str, Any]: ...

    @abstractmethod
    def get_blob_data(self, query: BlobQuery) -> Dict[str, Any]: ...
