import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_CACHE_PATH = str(Path("~/.cache/chain-cache/cache.json").expanduser())


@dataclass
class Config:
    rpc_url: str
    beacon_rpc_url: Optional[str] = None
    cache_path: str = DEFAULT_CACHE_PATH
    request_timeout: int = 10
    max_retries: int = 3
    backoff_seconds: float = 0.5


def load_config(rpc_url: Optional[str] = None) -> Config:
    """Load configuration from environment variables; an explicit rpc_url wins over RPC_URL."""
    rpc_url = (rpc_url or os.getenv("RPC_URL") or "").strip()
    if not rpc_url:
        raise ValueError("RPC_URL is required but not set.")

    beacon_env = (os.getenv("BEACON_RPC_URL") or "").strip()
    cache_path = os.getenv("CACHE_PATH", DEFAULT_CACHE_PATH)
    timeout = int(os.getenv("REQUEST_TIMEOUT", "10"))
    max_retries = int(os.getenv("REQUEST_RETRIES", "3"))
    backoff = float(os.getenv("REQUEST_BACKOFF_SECONDS", "0.5"))

    return Config(
        rpc_url=rpc_url,
        beacon_rpc_url=beacon_env or None,
        cache_path=str(Path(cache_path).expanduser()),
        request_timeout=timeout,
        max_retries=max_retries,
        backoff_seconds=backoff,
    )
