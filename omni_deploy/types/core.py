from __future__ import annotations

"""
Core chain types used by the gateway and the transaction pipeline.

This module provides:
- Lightweight `TypedDict` shapes mirroring JSON-RPC payloads.
- Ergonomic `@dataclass` models with bytes-friendly fields and helpers.

RPC dicts use hex strings for binary fields; dataclasses use `bytes` and
`Address`. Nothing here performs network I/O.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Mapping, Optional, Sequence, TypedDict

from omni_deploy.address import Address
from omni_deploy.wallet.keys import AccountKey

# --- Common aliases ----------------------------------------------------------

Hex = str  # hex string, no prefix for ids
TxId = str


def _hex_to_bytes(s: str) -> bytes:
    s = s[2:] if s.startswith(("0x", "0X")) else s
    if len(s) % 2:
        s = "0" + s
    return bytes.fromhex(s)


# --- JSON-RPC TypedDict shapes ----------------------------------------------


class BlockDict(TypedDict, total=False):
    id: Hex
    parentId: Hex
    height: int
    timestamp: int


class AccountDict(TypedDict, total=False):
    address: Hex
    balance: int
    keys: List[Dict[str, Any]]
    contracts: Dict[str, Hex]  # name -> hex code


class EventDict(TypedDict, total=False):
    type: str
    transactionId: Hex
    transactionIndex: int
    eventIndex: int
    values: Dict[str, Any]


class TransactionResultDict(TypedDict, total=False):
    id: Hex
    status: int
    errorMessage: str
    events: List[EventDict]
    blockId: Hex


# --- Dataclasses -------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class Block:
    id: bytes
    height: int
    parent_id: bytes = b""
    timestamp: int = 0

    @staticmethod
    def from_rpc_dict(d: BlockDict) -> "Block":
        return Block(
            id=_hex_to_bytes(d["id"]),
            height=int(d.get("height", 0)),
            parent_id=_hex_to_bytes(d.get("parentId", "")),
            timestamp=int(d.get("timestamp", 0)),
        )


@dataclass(slots=True)
class Account:
    """On-chain account state as returned by the gateway."""

    address: Address
    balance: int = 0
    keys: List[AccountKey] = field(default_factory=list)
    contracts: Dict[str, bytes] = field(default_factory=dict)

    def key(self, index: int) -> Optional[AccountKey]:
        for k in self.keys:
            if k.index == index:
                return k
        return None

    @staticmethod
    def from_rpc_dict(d: AccountDict) -> "Account":
        return Account(
            address=Address.from_hex(d["address"]),
            balance=int(d.get("balance", 0)),
            keys=[AccountKey.from_rpc_dict(k) for k in d.get("keys", [])],
            contracts={str(n): _hex_to_bytes(c) for n, c in (d.get("contracts") or {}).items()},
        )


@dataclass(slots=True, frozen=True)
class Event:
    type: str
    values: Mapping[str, Any]
    transaction_id: Optional[TxId] = None
    transaction_index: int = 0
    event_index: int = 0

    @staticmethod
    def from_rpc_dict(d: EventDict) -> "Event":
        return Event(
            type=str(d["type"]),
            values=dict(d.get("values") or {}),
            transaction_id=d.get("transactionId"),
            transaction_index=int(d.get("transactionIndex", 0)),
            event_index=int(d.get("eventIndex", 0)),
        )


class TransactionStatus(IntEnum):
    UNKNOWN = 0
    PENDING = 1
    FINALIZED = 2
    EXECUTED = 3
    SEALED = 4
    EXPIRED = 5


@dataclass(slots=True, frozen=True)
class TransactionResult:
    status: TransactionStatus
    error: Optional[str] = None
    events: Sequence[Event] = ()
    transaction_id: Optional[TxId] = None
    block_id: Optional[bytes] = None

    @property
    def sealed(self) -> bool:
        return self.status == TransactionStatus.SEALED

    @property
    def final(self) -> bool:
        """Sealed or expired: the status will not change any more."""
        return self.status in (TransactionStatus.SEALED, TransactionStatus.EXPIRED)

    @staticmethod
    def from_rpc_dict(d: TransactionResultDict) -> "TransactionResult":
        status = int(d.get("status", TransactionStatus.UNKNOWN))
        try:
            st = TransactionStatus(status)
        except ValueError:
            st = TransactionStatus.UNKNOWN
        block_id = d.get("blockId")
        return TransactionResult(
            status=st,
            error=d.get("errorMessage") or None,
            events=tuple(Event.from_rpc_dict(e) for e in d.get("events", [])),
            transaction_id=d.get("id"),
            block_id=_hex_to_bytes(block_id) if block_id else None,
        )


__all__ = [
    "Hex",
    "TxId",
    "BlockDict",
    "AccountDict",
    "EventDict",
    "TransactionResultDict",
    "Block",
    "Account",
    "Event",
    "TransactionStatus",
    "TransactionResult",
]
