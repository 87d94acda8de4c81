from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Any

import pytest

from chain_cache.cached import CachedRpcProvider
from chain_cache.errors import NotFoundError
from chain_cache.provider import Provider

RPC_URL = "http://localhost:8545"


class FakeRemote(Provider):
    """Remote stand-in answering from canned values and counting calls per method."""

    def __init__(self) -> None:
        self.responses: dict[tuple[str, Any], Any] = {}
        self.failures: dict[tuple[str, Any], Exception] = {}
        self.calls: Counter[str] = Counter()
        self.rpc_url = RPC_URL

    def answer(self, method: str, query: Any, value: Any) -> None:
        self.responses[(method, query)] = value

    def fail(self, method: str, query: Any, exc: Exception) -> None:
        self.failures[(method, query)] = exc

    def _serve(self, method: str, query: Any) -> Any:
        self.calls[method] += 1
        if (method, query) in self.failures:
            raise self.failures[(method, query)]
        if (method, query) in self.responses:
            return self.responses[(method, query)]
        raise NotFoundError(f"{method} has no answer for {query!r}")

    def save(self) -> None:
        pass

    def get_full_block(self, query):
        return self._serve("get_full_block", query)

    def get_partial_block(self, query):
        return self._serve("get_partial_block", query)

    def get_block_receipts(self, query):
        return self._serve("get_block_receipts", query)

    def get_proof(self, query):
        return self._serve("get_proof", query)

    def get_transaction_count(self, query):
        return self._serve("get_transaction_count", query)

    def get_balance(self, query):
        return self._serve("get_balance", query)

    def get_code(self, query):
        return self._serve("get_code", query)

    def get_storage(self, query):
        return self._serve("get_storage", query)

    def get_logs(self, query):
        return self._serve("get_logs", query)

    def get_transaction(self, query):
        return self._serve("get_transaction", query)

    def get_blob_data(self, query):
        return self._serve("get_blob_data", query)


def make_provider(cache_path: Path, remote: FakeRemote) -> CachedRpcProvider:
    provider = CachedRpcProvider(cache_path, RPC_URL)
    provider.rpc = remote
    return provider


@pytest.fixture
def cache_path(tmp_path: Path) -> Path:
    return tmp_path / "cache" / "cache.json"


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def provider(cache_path: Path, remote: FakeRemote) -> CachedRpcProvider:
    return make_provider(cache_path, remote)
