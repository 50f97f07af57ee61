"""
omni_deploy.tx.requests
=======================

Operation requests: one frozen record per kind of write the deploy tool makes.

    OperationRequest = CreateAccountRequest
                     | AddContractRequest
                     | UpdateContractRequest
                     | RemoveContractRequest

`build_transaction(request, account)` is the single place a request becomes a
`Transaction`: it picks the script template, encodes the arguments and sets
the signing account as payer and sole authorizer. Reference block, proposer
and signatures are added later by the pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

from omni_deploy.tx import templates
from omni_deploy.tx.transaction import DEFAULT_GAS_LIMIT, SigningAccount, Transaction
from omni_deploy.types.values import Argument
from omni_deploy.wallet.keys import AccountKey

__all__ = [
    "CreateAccountRequest",
    "AddContractRequest",
    "UpdateContractRequest",
    "RemoveContractRequest",
    "OperationRequest",
    "build_transaction",
]


@dataclass(frozen=True)
class CreateAccountRequest:
    keys: Tuple[AccountKey, ...]
    contracts: Tuple[Tuple[str, bytes], ...] = ()  # (name, code)


@dataclass(frozen=True)
class AddContractRequest:
    name: str
    code: bytes
    args: Tuple[Argument, ...] = ()


@dataclass(frozen=True)
class UpdateContractRequest:
    name: str
    code: bytes


@dataclass(frozen=True)
class RemoveContractRequest:
    name: str


OperationRequest = Union[CreateAccountRequest, AddContractRequest, UpdateContractRequest, RemoveContractRequest]


def _code_arg(code: bytes) -> Argument:
    return Argument.string(bytes(code).hex())


def build_transaction(
    request: OperationRequest, account: SigningAccount, *, gas_limit: int = DEFAULT_GAS_LIMIT
) -> Transaction:
    payer = account.address
    if isinstance(request, CreateAccountRequest):
        script = templates.CREATE_ACCOUNT
        args = [
            Argument.array(Argument.string(k.encode().hex()) for k in request.keys),
            Argument.dictionary((Argument.string(n), _code_arg(c)) for n, c in request.contracts),
        ]
    elif isinstance(request, AddContractRequest):
        script = templates.add_contract(request.args)
        args = [Argument.string(request.name), _code_arg(request.code), *request.args]
    elif isinstance(request, UpdateContractRequest):
        script = templates.UPDATE_CONTRACT
        args = [Argument.string(request.name), _code_arg(request.code)]
    elif isinstance(request, RemoveContractRequest):
        script = templates.REMOVE_CONTRACT
        args = [Argument.string(request.name)]
    else:
        raise TypeError(f"unknown operation request: {type(request).__name__}")

    return Transaction(
        script.encode("utf-8"),
        args,
        gas_limit=gas_limit,
        payer=payer,
        authorizers=[payer],
    )
