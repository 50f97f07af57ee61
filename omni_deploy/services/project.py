"""
omni_deploy.services.project
============================

The deployment planner.

`Project.deploy(network)` takes every contract the network's deployments name
(configuration order: account blocks in order, contracts in list order),
resolves their imports against one location table and hands each to
`Accounts.add_contract`.

Design notes
------------
* Addresses come from configuration, so the table is complete before the
  first transaction and resolution order never matters.
* Contracts with an alias on the network live elsewhere and are not deployed.
* A contract already on-chain with identical code is skipped and still
  reported; any other failure stops the run.
* Contracts are processed one at a time.
"""

from __future__ import annotations

from typing import Any, List, Optional, Set, Tuple

from omni_deploy.address import Address
from omni_deploy.errors import ConfigError, NoDiffError
from omni_deploy.logging import bind_deploy_context, clear_deploy_context, get_logger
from omni_deploy.project.contract import Contract
from omni_deploy.project.imports import ImportReplacer
from omni_deploy.services.accounts import Accounts
from omni_deploy.state import State

__all__ = ["Project"]


class Project:
    def __init__(self, state: State, accounts: Accounts, *, logger: Any = None) -> None:
        self.state = state
        self.accounts = accounts
        self._log = logger or get_logger(__name__)

    def contracts_for(self, network: str) -> List[Contract]:
        """Contracts `deploy` would process on `network`, duplicates rejected."""
        contracts = self.state.deployment_contracts_by_network(network)
        seen: Set[Tuple[Address, str]] = set()
        for c in contracts:
            key = (c.account_address, c.name)
            if key in seen:
                raise ConfigError(
                    f"contract {c.name} is deployed more than once to account {c.account_address} "
                    f"on network {network}",
                    entity=c.name,
                )
            seen.add(key)
        return contracts

    def deploy(self, network: str, update_existing: bool = False) -> List[Contract]:
        self.state.network(network)
        bind_deploy_context(network=network)
        try:
            return self._deploy(network, update_existing)
        finally:
            clear_deploy_context("network")

    def _deploy(self, network: str, update_existing: bool) -> List[Contract]:
        log = self._log
        contracts = self.contracts_for(network)
        replacer = ImportReplacer(contracts, self.state.aliases_for_network(network))

        accounts = sorted({c.account_name for c in contracts})
        log.info("deploy_started", contracts=len(contracts), accounts=accounts)

        deployed: List[Contract] = []
        for contract in contracts:
            account = self.state.account(contract.account_name)

            program = contract.program()
            if program.has_imports():
                program = replacer.replace(program)
            resolved = contract.with_code(program.code)

            try:
                tx_id, updated = self.accounts.add_contract(account, program, network, update_existing)
            except NoDiffError:
                log.info("contract_skipped", name=contract.name, address=str(account.address), reason="no_diff")
                deployed.append(resolved)
                continue

            log.info(
                "contract_deployed",
                name=contract.name,
                address=str(account.address),
                tx_id=tx_id,
                updated=updated,
            )
            deployed.append(resolved)

        log.info("deploy_finished", deployed=len(deployed))
        return deployed

    def deployed_address(self, network: str, name: str) -> Optional[Address]:
        """Target address of contract `name` on `network`, if it is deployed there."""
        for c in self.contracts_for(network):
            if c.name == name:
                return c.account_address
        return None
