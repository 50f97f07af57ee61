"""
omni_deploy.tx
==============

Write-transaction pipeline.

Submodules
----------
- transaction : `Transaction` envelope (reference block, proposer, signatures).
- encode      : canonical CBOR payload/envelope encoding and transaction ids.
- templates   : account and contract management scripts.
- requests    : operation requests and `build_transaction`.
- session     : per-account serialization of in-flight transactions.
- pipeline    : `TransactionPipeline` (prepare / submit / await_seal / execute).
"""

from .pipeline import TransactionPipeline
from .requests import (AddContractRequest, CreateAccountRequest, OperationRequest,
                       RemoveContractRequest, UpdateContractRequest, build_transaction)
from .session import AccountSession, SessionRegistry
from .transaction import DEFAULT_GAS_LIMIT, ProposalKey, Transaction, TransactionSignature

__all__ = [
    "TransactionPipeline",
    "AddContractRequest",
    "CreateAccountRequest",
    "OperationRequest",
    "RemoveContractRequest",
    "UpdateContractRequest",
    "build_transaction",
    "AccountSession",
    "SessionRegistry",
    "DEFAULT_GAS_LIMIT",
    "ProposalKey",
    "Transaction",
    "TransactionSignature",
]
