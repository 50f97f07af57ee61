"""
omni_deploy.services.accounts
=============================

Account operations: look an account up, create one, add/update a contract on
it, remove a contract from it.

Every write goes through `TransactionPipeline.execute`, so it is prepared
against fresh chain state (latest block, current proposer sequence number),
signed by the project account and awaited until sealed.

Notes
-----
- `add_contract` decides between add, update and "nothing to do" from the
  account's current on-chain contracts. Byte-identical code raises
  `NoDiffError`, which callers treat as a skip.
- Updates always submit the import-resolved code.
- `create` validates every key before touching the network.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Tuple, Union

from omni_deploy.address import Address
from omni_deploy.errors import (ConfigError, ContractExistsError, ContractNotFoundError,
                                KeyValidationError, NoDiffError, TxError)
from omni_deploy.events import created_addresses
from omni_deploy.gateway.base import Gateway
from omni_deploy.logging import get_logger
from omni_deploy.project.imports import ImportReplacer
from omni_deploy.project.program import Program, Script
from omni_deploy.state import Account as ProjectAccount
from omni_deploy.state import State
from omni_deploy.tx.pipeline import TransactionPipeline
from omni_deploy.tx.requests import (AddContractRequest, CreateAccountRequest,
                                     RemoveContractRequest, UpdateContractRequest)
from omni_deploy.types.core import Account
from omni_deploy.wallet.keys import (ACCOUNT_KEY_WEIGHT_THRESHOLD, AccountKey, HashAlgorithm,
                                     PublicKey, SignatureAlgorithm)

__all__ = ["Accounts", "parse_contract_arg"]


def parse_contract_arg(arg: str) -> Tuple[str, str]:
    """Split ``name:path`` at the first colon."""
    parts = arg.split(":", 1)
    if len(parts) != 2:
        raise ConfigError(f"wrong format for contract. Correct format is name:path, but got: {arg}", entity=arg)
    return parts[0], parts[1]


class Accounts:
    def __init__(
        self,
        state: State,
        gateway: Gateway,
        pipeline: Optional[TransactionPipeline] = None,
        *,
        logger: Any = None,
    ) -> None:
        self.state = state
        self.gateway = gateway
        self._log = logger or get_logger(__name__)
        self.pipeline = pipeline or TransactionPipeline(gateway, logger=self._log)

    def get(self, address: Union[Address, str]) -> Account:
        addr = Address.coerce(address)
        self._log.debug("account_fetch", address=str(addr))
        return self.gateway.get_account(addr)

    def create(
        self,
        signer: ProjectAccount,
        public_keys: Sequence[PublicKey],
        weights: Sequence[int],
        sig_algos: Sequence[SignatureAlgorithm],
        hash_algos: Sequence[HashAlgorithm],
        contract_args: Sequence[str] = (),
    ) -> Account:
        """
        Create a new account holding `public_keys` and, optionally, contracts
        given as ``name:path``. Returns the new on-chain account.
        """
        if weights and len(weights) != len(public_keys):
            raise KeyValidationError(
                "number of keys and weights provided must match, "
                f"number of provided keys: {len(public_keys)}, number of provided key weights: {len(weights)}"
            )
        if len(sig_algos) != len(public_keys) or len(hash_algos) != len(public_keys):
            raise KeyValidationError(
                "a signature and a hash algorithm must be provided for every key, "
                f"number of provided keys: {len(public_keys)}, signature algorithms: {len(sig_algos)}, "
                f"hash algorithms: {len(hash_algos)}"
            )

        keys: List[AccountKey] = []
        for i, pk in enumerate(public_keys):
            key = AccountKey(
                public_key=pk,
                sig_algo=sig_algos[i],
                hash_algo=hash_algos[i],
                weight=weights[i] if i < len(weights) else ACCOUNT_KEY_WEIGHT_THRESHOLD,
                index=i,
            )
            key.validate()
            keys.append(key)

        contracts: List[Tuple[str, bytes]] = []
        for arg in contract_args:
            name, path = parse_contract_arg(arg)
            contracts.append((name, self.state.read_file(path)))

        tx_id, result = self.pipeline.execute(
            CreateAccountRequest(keys=tuple(keys), contracts=tuple(contracts)), signer
        )

        addresses = created_addresses(result.events)
        if not addresses:
            raise TxError("new account address couldn't be fetched", tx_id=tx_id, result=result)

        self._log.info("account_created", address=str(addresses[0]), tx_id=tx_id, keys=len(keys))
        return self.gateway.get_account(addresses[0])

    def add_contract(
        self,
        account: ProjectAccount,
        script: Union[Script, Program],
        network: str,
        update_existing: bool = False,
    ) -> Tuple[str, bool]:
        """
        Deploy `script` to `account`, or update it when `update_existing` is
        set and the account already holds a contract of the same name.

        Returns ``(tx_id, updated)``.
        """
        program = script if isinstance(script, Program) else Program.from_script(script)

        if program.has_imports():
            replacer = ImportReplacer(
                self.state.deployment_contracts_by_network(network),
                self.state.aliases_for_network(network),
            )
            program = replacer.replace(program)

        name = program.name()
        onchain = self.gateway.get_account(account.address)
        existing = onchain.contracts.get(name)

        if existing is not None:
            if existing == program.code:
                raise NoDiffError(name, str(account.address))
            if not update_existing:
                raise ContractExistsError(name, str(account.address))
            request: Any = UpdateContractRequest(name=name, code=program.code)
        else:
            request = AddContractRequest(name=name, code=program.code, args=tuple(program.args))

        updated = existing is not None
        tx_id, _ = self.pipeline.execute(request, account)
        self._log.info(
            "contract_updated" if updated else "contract_added",
            name=name,
            address=str(account.address),
            tx_id=tx_id,
        )
        return tx_id, updated

    def remove_contract(self, account: ProjectAccount, name: str) -> str:
        onchain = self.gateway.get_account(account.address)
        if name not in onchain.contracts:
            raise ContractNotFoundError(name, str(account.address), tuple(sorted(onchain.contracts)))

        tx_id, _ = self.pipeline.execute(RemoveContractRequest(name=name), account)
        self._log.info("contract_removed", name=name, address=str(account.address), tx_id=tx_id)
        return tx_id
