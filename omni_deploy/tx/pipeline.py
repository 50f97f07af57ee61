"""
omni_deploy.tx.pipeline
=======================

Prepare, submit and await every write transaction the same way.

Primary entry points
--------------------
- prepare(tx, account) -> Transaction
    Reference the latest sealed block, take the proposer sequence number from
    a fresh read of the signing account, sign.

- submit(tx) -> str
    Send the signed transaction; returns its id.

- await_seal(tx_id) -> TransactionResult
    Block until the gateway reports the transaction sealed. A sealed result
    carrying an execution error, or an expired transaction, raises `TxError`.

- execute(request, account) -> (tx_id, TransactionResult)
    build_transaction + prepare + submit + await_seal, inside the signing
    account's session.

Nothing here retries: a failure at any step propagates unchanged (transport
retries belong to the gateway).
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

from omni_deploy.errors import TxError
from omni_deploy.gateway.base import Gateway
from omni_deploy.logging import get_logger
from omni_deploy.tx.requests import OperationRequest, build_transaction
from omni_deploy.tx.session import SessionRegistry
from omni_deploy.tx.transaction import DEFAULT_GAS_LIMIT, SigningAccount, Transaction
from omni_deploy.types.core import TransactionResult, TransactionStatus

__all__ = ["TransactionPipeline"]


class TransactionPipeline:
    def __init__(
        self,
        gateway: Gateway,
        *,
        gas_limit: int = DEFAULT_GAS_LIMIT,
        sessions: Optional[SessionRegistry] = None,
        logger: Any = None,
    ) -> None:
        self.gateway = gateway
        self.gas_limit = gas_limit
        self.sessions = sessions or SessionRegistry()
        self._log = logger or get_logger(__name__)

    def prepare(self, tx: Transaction, account: SigningAccount) -> Transaction:
        block = self.gateway.get_latest_block()
        tx.set_block_reference(block)

        proposer = self.gateway.get_account(account.address)
        tx.set_proposer(proposer, account.key_index)

        tx.sign(account)
        return tx

    def submit(self, tx: Transaction) -> str:
        tx_id = self.gateway.send_signed_transaction(tx)
        self._log.info("tx_submitted", tx_id=tx_id, payer=str(tx.payer))
        return tx_id

    def await_seal(self, tx_id: str) -> TransactionResult:
        result = self.gateway.get_transaction_result(tx_id, wait_for_seal=True)
        if result.error or result.status == TransactionStatus.EXPIRED:
            error = result.error or "transaction expired before it was sealed"
            self._log.warning("tx_failed", tx_id=tx_id, status=result.status.name, error=error)
            raise TxError(error, tx_id=tx_id, result=result)
        self._log.info("tx_sealed", tx_id=tx_id, events=len(result.events))
        return result

    def execute(self, request: OperationRequest, account: SigningAccount) -> Tuple[str, TransactionResult]:
        with self.sessions.get(account.address):
            tx = build_transaction(request, account, gas_limit=self.gas_limit)
            self.prepare(tx, account)
            tx_id = self.submit(tx)
            return tx_id, self.await_seal(tx_id)
