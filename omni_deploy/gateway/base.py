"""
omni_deploy.gateway.base
========================

The node capability every service depends on. Anything with these five
methods can stand in for a node: the HTTP gateway, or an in-memory fake in
tests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, Sequence

from omni_deploy.address import Address
from omni_deploy.types.core import Account, Block, TransactionResult
from omni_deploy.types.values import Argument

if TYPE_CHECKING:  # pragma: no cover
    from omni_deploy.tx.transaction import Transaction


class Gateway(Protocol):
    def get_account(self, address: Address) -> Account: ...

    def get_latest_block(self) -> Block: ...

    def send_signed_transaction(self, tx: "Transaction") -> str:
        """Submit a signed transaction; returns its id (hex)."""
        ...

    def get_transaction_result(self, tx_id: str, wait_for_seal: bool = True) -> TransactionResult: ...

    def execute_script(self, script: bytes, args: Sequence[Argument] = ()) -> Any: ...


__all__ = ["Gateway"]
