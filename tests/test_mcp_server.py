from __future__ import annotations

import pytest

from chain_cache import mcp_server
from chain_cache.queries import AccountQuery, BlockQuery, StorageQuery, TxQuery, proof_query

from conftest import make_provider


@pytest.fixture
def served(monkeypatch, cache_path, remote):
    provider = make_provider(cache_path, remote)
    monkeypatch.setattr(mcp_server, "_provider", provider)
    return provider


def test_get_block_switches_on_full_transactions(served, remote) -> None:
    remote.answer("get_full_block", BlockQuery(1), {"transactions": [{"hash": "0x1"}]})
    remote.answer("get_partial_block", BlockQuery(1), {"transactions": ["0x1"]})

    assert mcp_server.get_block(1)["transactions"] == [{"hash": "0x1"}]
    assert mcp_server.get_block(1, full_transactions=False)["transactions"] == ["0x1"]


def test_get_account_combines_cached_lookups(served, remote) -> None:
    query = AccountQuery("0xAA", 3)
    remote.answer("get_transaction_count", query, 1)
    remote.answer("get_balance", query, 10**20)
    remote.answer("get_code", query, "0x")

    first = mcp_server.get_account("0xAA", 3)
    second = mcp_server.get_account("0xaa", 3)

    assert first == second == {
        "address": "0xaa",
        "block_number": 3,
        "nonce": 1,
        "balance": str(10**20),
        "code": "0x",
    }
    assert remote.calls["get_balance"] == 1


def test_get_storage_and_proof(served, remote) -> None:
    remote.answer("get_storage", StorageQuery("0xaa", "0x01", 2), "0x05")
    remote.answer("get_proof", proof_query("0xaa", ["0x01"], 2), {"address": "0xaa"})

    assert mcp_server.get_storage_at("0xaa", "0x01", 2)["data"] == "0x05"
    assert mcp_server.get_proof("0xaa", 2, ["0x01"]) == {"address": "0xaa"}


def test_string_array_params_rejected(served) -> None:
    with pytest.raises(ValueError):
        mcp_server.get_proof("0xaa", 2, "0x01")  # type: ignore[arg-type]


def test_save_cache_tool_persists(served, remote, cache_path) -> None:
    remote.answer("get_transaction", TxQuery("0xab"), {"hash": "0xab"})
    mcp_server.get_transaction("0xab")

    assert not cache_path.exists()
    result = mcp_server.save_cache()

    assert result == {"saved": True, "path": str(cache_path), "entries": 1}
    assert cache_path.exists()
