"""Exception hierarchy for chain-cache."""

from typing import Any, Optional


class ChainCacheError(Exception):
    """Base exception for all chain-cache errors."""


class CacheError(ChainCacheError):
    """Failure in the local cache layer."""


class CacheMissError(CacheError, KeyError):
    """No entry is stored for the requested query."""

    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"No cached {kind} for {key}.")

    def __str__(self) -> str:
        return self.args[0]


class CacheLoadError(CacheError):
    """Persisted cache file is missing, unreadable or malformed."""


class RemoteError(ChainCacheError):
    """Failure reported by the remote data source."""


class RpcError(RemoteError):
    """JSON-RPC error object or malformed JSON-RPC response."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[int] = None,
        data: Any = None,
    ) -> None:
        self.code = code
        self.data = data
        super().__init__(message)


class NotFoundError(RemoteError):
    """Remote node returned no object for the query."""
