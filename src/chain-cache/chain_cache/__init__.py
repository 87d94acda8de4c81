from .cache import FileCache
from .cached import CachedRpcProvider
from .config import Config, load_config
from .errors import (
    CacheError,
    CacheLoadError,
    CacheMissError,
    ChainCacheError,
    NotFoundError,
    RemoteError,
    RpcError,
)
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

__all__ = [
    "AccountQuery",
    "BlobQuery",
    "BlockQuery",
    "CacheError",
    "CacheLoadError",
    "CacheMissError",
    "CachedRpcProvider",
    "ChainCacheError",
    "Config",
    "FileCache",
    "LogsQuery",
    "NotFoundError",
    "ProofQuery",
    "Provider",
    "RemoteError",
    "RpcError",
    "RpcProvider",
    "StorageQuery",
    "TxQuery",
    "load_config",
]
