"""
Query values used as lookup keys for every data kind.

All queries are frozen dataclasses: equality and hashing are structural, and
``cache_key()`` gives the stable string a query is persisted under. Hex
strings are lower-cased on construction so ``0xAB`` and ``0xab`` hit the same
entry. Nothing here checks that a block exists or an address is well formed.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional, Tuple


def _hex(value: str) -> str:
    return (value or "").strip().lower()


def _set(obj: object, name: str, value: object) -> None:
    object.__setattr__(obj, name, value)


@dataclass(frozen=True)
class BlockQuery:
    block_no: int

    def cache_key(self) -> str:
        return str(self.block_no)


@dataclass(frozen=True)
class AccountQuery:
    address: str
    block_no: int

    def __post_init__(self) -> None:
        _set(self, "address", _hex(self.address))

    def cache_key(self) -> str:
        return f"{self.address}@{self.block_no}"


@dataclass(frozen=True)
class StorageQuery:
    address: str
    index: str
    block_no: int

    def __post_init__(self) -> None:
        _set(self, "address", _hex(self.address))
        _set(self, "index", _hex(self.index))

    def cache_key(self) -> str:
        return f"{self.address}:{self.index}@{self.block_no}"


@dataclass(frozen=True)
class ProofQuery:
    address: str
    indices: FrozenSet[str]
    block_no: int

    def __post_init__(self) -> None:
        _set(self, "address", _hex(self.address))
        _set(self, "indices", frozenset(_hex(i) for i in self.indices))

    def sorted_indices(self) -> list:
        return sorted(self.indices)

    def cache_key(self) -> str:
        return f"{self.address}:{','.join(self.sorted_indices())}@{self.block_no}"


@dataclass(frozen=True)
class LogsQuery:
    """Logs emitted by ``address`` in the inclusive range, optionally filtered by topics."""

    address: str
    from_block: int
    to_block: int
    topics: Tuple[Optional[str], ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        _set(self, "address", _hex(self.address))
        _set(
            self,
            "topics",
            tuple(_hex(t) if t is not None else None for t in (self.topics or ())),
        )

    def cache_key(self) -> str:
        key = f"{self.address}@{self.from_block}-{self.to_block}"
        if self.topics:
            key += "/" + ",".join(t if t is not None else "*" for t in self.topics)
        return key


@dataclass(frozen=True)
class TxQuery:
    """
    Transaction by hash. ``block_no`` is an optional hint naming the block the
    transaction was included in; the cache entry is keyed by hash alone.
    """

    tx_hash: str
    block_no: Optional[int] = None

    def __post_init__(self) -> None:
        _set(self, "tx_hash", _hex(self.tx_hash))

    def cache_key(self) -> str:
        return self.tx_hash


@dataclass(frozen=True)
class BlobQuery:
    block_id: int

    def cache_key(self) -> str:
        return str(self.block_id)


def proof_query(address: str, indices: Iterable[str], block_no: int) -> ProofQuery:
    return ProofQuery(address=address, indices=frozenset(indices), block_no=block_no)
