"""
omni_deploy.types
=================

Chain data types (blocks, accounts, events, transaction results) and typed
argument values.
"""

from .core import (Account, Block, Event, TransactionResult,  # noqa: F401
                   TransactionStatus, TxId)
from .values import Argument, arguments_from_json, arguments_to_json  # noqa: F401

__all__ = [
    "Account",
    "Block",
    "Event",
    "TransactionResult",
    "TransactionStatus",
    "TxId",
    "Argument",
    "arguments_from_json",
    "arguments_to_json",
]
