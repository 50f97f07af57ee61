"""
omni_deploy.errors
------------------

Typed exceptions raised across the deploy pipeline. Every error names the
offending entity (import path, contract name, account address) so messages stay
actionable when they reach an operator.

Hierarchy:

    DeployError (base)
    ├── ConfigError              missing network/account/contract, bad `name:path`
    ├── ImportResolutionError    import path absent from the location table
    ├── KeyValidationError       key/weight count mismatch, invalid account key
    ├── InvalidKeyIndexError     proposer key index not usable on the account
    ├── ContractExistsError      contract present with different code, no update
    ├── ContractNotFoundError    removal of a contract the account does not hold
    ├── NoDiffError              contract present with identical code (skip)
    ├── RpcError                 transport / JSON-RPC failure
    └── TxError                  sealed with an execution error, or missing data

Notes
-----
* `NoDiffError` is a signal, not a failure: the deployment planner treats it
  as "nothing to do" and moves on.
* Callers distinguish "never reached the network" (`RpcError`) from
  "submitted but execution failed" (`TxError`) by type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

__all__ = [
    "DeployError",
    "ConfigError",
    "ImportResolutionError",
    "KeyValidationError",
    "InvalidKeyIndexError",
    "ContractExistsError",
    "ContractNotFoundError",
    "NoDiffError",
    "RpcError",
    "TxError",
]


class DeployError(Exception):
    """Base class for all omni-deploy errors."""


@dataclass(eq=False)
class ConfigError(DeployError):
    """Configuration is missing or malformed."""

    message: str
    entity: Optional[str] = None

    def __str__(self) -> str:
        return self.message


@dataclass(eq=False)
class ImportResolutionError(DeployError):
    """An import path of a program has no entry in the location table."""

    import_path: str
    location: Optional[str] = None

    def __str__(self) -> str:
        where = f" (imported by {self.location})" if self.location else ""
        return f"import {self.import_path} could not be resolved from the configuration{where}"


@dataclass(eq=False)
class KeyValidationError(DeployError):
    message: str
    key_index: Optional[int] = None

    def __str__(self) -> str:
        if self.key_index is None:
            return self.message
        return f"invalid account key {self.key_index}: {self.message}"


@dataclass(eq=False)
class InvalidKeyIndexError(DeployError):
    address: str
    key_index: int
    reason: str = "key index does not exist on the account"

    def __str__(self) -> str:
        return f"invalid key index {self.key_index} for account {self.address}: {self.reason}"


@dataclass(eq=False)
class ContractExistsError(DeployError):
    name: str
    account: str

    def __str__(self) -> str:
        return f"contract {self.name} exists in account {self.account}"


@dataclass(eq=False)
class ContractNotFoundError(DeployError):
    name: str
    address: str
    available: Tuple[str, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        return (
            f"can not remove a non-existing contract named '{self.name}' from {self.address}. "
            f"Account only contains the contracts: {', '.join(self.available)}"
        )


@dataclass(eq=False)
class NoDiffError(DeployError):
    """Contract already deployed with byte-identical code."""

    name: str
    address: str

    def __str__(self) -> str:
        return (
            f"contract {self.name} already exists on {self.address} "
            "and is the same as the contract provided for update"
        )


@dataclass(eq=False)
class RpcError(DeployError):
    """Raised when a gateway call fails or the node returns a JSON-RPC error."""

    message: str
    method: Optional[str] = None
    code: Optional[int] = None
    data: Optional[Any] = None

    def __str__(self) -> str:
        parts = [f"RPC[{self.method or '-'}]"]
        if self.code is not None:
            parts.append(f"code={self.code}")
        parts.append(f"msg={self.message!r}")
        if self.data is not None:
            parts.append(f"data={self.data!r}")
        return " ".join(parts)


@dataclass(eq=False)
class TxError(DeployError):
    """
    Raised when a sealed transaction carries an execution error, or when the
    sealed result lacks data the operation needs (e.g. a created address).

    Fields:
      - message: human-readable description (the chain error when sealed with one)
      - tx_id: hex id of the transaction if it was submitted
      - result: the sealed TransactionResult, when available
    """

    message: str
    tx_id: Optional[str] = None
    result: Optional[Any] = None

    def __str__(self) -> str:
        suffix = f" tx={self.tx_id}" if self.tx_id else ""
        return f"TxError{suffix}: {self.message}"

