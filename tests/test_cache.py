from __future__ import annotations

import json

import pytest

from chain_cache.cache import BALANCE, FULL_BLOCKS, KINDS, FileCache
from chain_cache.errors import CacheLoadError, CacheMissError
from chain_cache.queries import AccountQuery, BlockQuery, TxQuery


def test_get_missing_raises_cache_miss(tmp_path) -> None:
    cache = FileCache.empty(tmp_path / "cache.json")

    with pytest.raises(CacheMissError) as exc_info:
        cache.get_full_block(BlockQuery(1))

    assert exc_info.value.kind == FULL_BLOCKS
    assert exc_info.value.key == "1"
    assert isinstance(exc_info.value, KeyError)


def test_kinds_are_separate(tmp_path) -> None:
    cache = FileCache.empty(tmp_path / "cache.json")
    cache.insert_full_block(BlockQuery(1), {"number": "0x1"})

    with pytest.raises(CacheMissError):
        cache.get_partial_block(BlockQuery(1))


def test_load_missing_file_raises(tmp_path) -> None:
    with pytest.raises(CacheLoadError):
        FileCache.load(tmp_path / "absent.json")


@pytest.mark.parametrize(
    "content",
    ["{broken", "[]", json.dumps({BALANCE: []})],
    ids=["invalid-json", "not-an-object", "bad-section"],
)
def test_load_malformed_file_raises(tmp_path, content) -> None:
    path = tmp_path / "cache.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(CacheLoadError):
        FileCache.load(path)


def test_save_then_load(tmp_path) -> None:
    path = tmp_path / "nested" / "cache.json"
    cache = FileCache.empty(path)
    cache.insert_balance(AccountQuery("0xAB", 2), 12)
    cache.insert_transaction(TxQuery("0xFEED", 9), {"hash": "0xfeed"})

    cache.save()
    loaded = FileCache.load(path)

    assert len(loaded) == 2
    assert loaded.get_balance(AccountQuery("0xab", 2)) == 12
    assert loaded.get_transaction(TxQuery("0xfeed")) == {"hash": "0xfeed"}
    assert sorted(json.loads(path.read_text(encoding="utf-8"))) == sorted(KINDS)
    assert [p.name for p in path.parent.iterdir()] == ["cache.json"]


def test_load_tolerates_missing_sections(tmp_path) -> None:
    path = tmp_path / "cache.json"
    path.write_text(json.dumps({BALANCE: {"0xab@2": 1}}), encoding="utf-8")

    cache = FileCache.load(path)

    assert cache.get_balance(AccountQuery("0xab", 2)) == 1
    with pytest.raises(CacheMissError):
        cache.get_full_block(BlockQuery(2))


def test_save_is_explicit(tmp_path) -> None:
    path = tmp_path / "cache.json"
    cache = FileCache.empty(path)

    cache.insert_full_block(BlockQuery(1), {"number": "0x1"})

    assert not path.exists()
    cache.save()
    assert path.exists()
