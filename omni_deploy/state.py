"""
omni_deploy.state
=================

In-memory project state: the configuration registries plus access to contract
sources on disk.

`State` is what the services consume. It answers

- which networks, accounts and contracts exist (lookups raise `ConfigError`
  naming the missing entity),
- which contracts a network deploys, in configuration order, as `Contract`
  records with their sources already read,
- which aliases apply on a network (location -> hex address),
- the bytes at a source location (relative to the project root).

Registries can also be edited in code (`add_or_update_*`), which is how tests
and embedding tools build projects without a file.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from omni_deploy.address import Address, AddressError
from omni_deploy.config import (AccountConfig, ContractConfig, DeploymentConfig,
                                NetworkConfig, ProjectConfig, load_project)
from omni_deploy.errors import ConfigError
from omni_deploy.project.contract import Contract
from omni_deploy.types.values import arguments_from_json
from omni_deploy.wallet.signer import InMemorySigner

__all__ = ["ReaderWriter", "FileReaderWriter", "Account", "State"]


class ReaderWriter(Protocol):
    def read_file(self, path: str) -> bytes: ...


class FileReaderWriter:
    """Reads files relative to a root directory."""

    def __init__(self, root: str | Path = ".") -> None:
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        p = Path(path)
        return p if p.is_absolute() else self.root / p

    def read_file(self, path: str) -> bytes:
        return self._resolve(path).read_bytes()


@dataclass(frozen=True)
class Account:
    """A project account: a name, its on-chain address and a signing key."""

    name: str
    address: Address
    signer: InMemorySigner
    key_index: int = 0

    @classmethod
    def from_config(cls, cfg: AccountConfig) -> "Account":
        try:
            address = Address.from_hex(cfg.address)
        except AddressError as e:
            raise ConfigError(f"account {cfg.name} has an invalid address: {e}", entity=cfg.name) from e
        signer = InMemorySigner.from_hex(
            cfg.key.private_key, sig_algo=cfg.key.sig_algo, hash_algo=cfg.key.hash_algo
        )
        return cls(name=cfg.name, address=address, signer=signer, key_index=cfg.key.index)


class State:
    def __init__(self, config: Optional[ProjectConfig] = None, readerwriter: Optional[ReaderWriter] = None) -> None:
        config = config or ProjectConfig()
        self._rw: ReaderWriter = readerwriter or FileReaderWriter(".")
        self._contracts: Dict[str, ContractConfig] = {}
        self._networks: Dict[str, NetworkConfig] = {}
        self._accounts: Dict[str, Account] = {}
        self._deployments: List[DeploymentConfig] = []

        for c in config.contracts:
            self.add_or_update_contract(c)
        for n in config.networks:
            self.add_or_update_network(n)
        for a in config.accounts:
            self.add_or_update_account(Account.from_config(a))
        for d in config.deployments:
            self.add_or_update_deployment(d)

    @classmethod
    def load(cls, path: str | Path) -> "State":
        """Load a project file; sources resolve relative to its directory."""
        p = Path(path)
        return cls(load_project(p), FileReaderWriter(p.parent))

    # ---- Registries ----

    def add_or_update_contract(self, contract: ContractConfig) -> None:
        self._contracts[contract.name] = contract

    def add_or_update_network(self, network: NetworkConfig) -> None:
        self._networks[network.name] = network

    def add_or_update_account(self, account: Account) -> None:
        self._accounts[account.name] = account

    def add_or_update_deployment(self, deployment: DeploymentConfig) -> None:
        for i, d in enumerate(self._deployments):
            if d.network == deployment.network and d.account == deployment.account:
                self._deployments[i] = deployment
                return
        self._deployments.append(deployment)

    # ---- Lookups ----

    def contracts(self) -> List[ContractConfig]:
        return list(self._contracts.values())

    def networks(self) -> List[NetworkConfig]:
        return list(self._networks.values())

    def accounts(self) -> List[Account]:
        return list(self._accounts.values())

    def deployments(self) -> List[DeploymentConfig]:
        return list(self._deployments)

    def contract(self, name: str) -> ContractConfig:
        try:
            return self._contracts[name]
        except KeyError:
            raise ConfigError(f"contract {name} is not defined in the configuration", entity=name) from None

    def network(self, name: str) -> NetworkConfig:
        try:
            return self._networks[name]
        except KeyError:
            raise ConfigError(f"network {name} is not defined in the configuration", entity=name) from None

    def account(self, name: str) -> Account:
        try:
            return self._accounts[name]
        except KeyError:
            raise ConfigError(f"account {name} is not defined in the configuration", entity=name) from None

    def account_by_address(self, address: Address | str) -> Optional[Account]:
        addr = Address.coerce(address)
        for acc in self._accounts.values():
            if acc.address == addr:
                return acc
        return None

    def read_file(self, location: str) -> bytes:
        try:
            return self._rw.read_file(location)
        except OSError as e:
            raise ConfigError(f"cannot read source {location}: {e}", entity=location) from e

    # ---- Per-network views ----

    def aliases_for_network(self, network: str) -> Dict[str, str]:
        """Source location -> hex address for every contract aliased on `network`."""
        return {c.source: c.aliases[network] for c in self._contracts.values() if network in c.aliases}

    def deployments_for_network(self, network: str) -> List[DeploymentConfig]:
        return [d for d in self._deployments if d.network == network]

    def deployment_contracts_by_network(self, network: str) -> List[Contract]:
        """
        Contracts deployed on `network`, in configuration order, sources read.

        Contracts aliased on the network already live on-chain and are left out.
        """
        self.network(network)
        out: List[Contract] = []
        for d in self.deployments_for_network(network):
            account = self.account(d.account)
            for cd in d.contracts:
                cfg = self.contract(cd.name)
                if network in cfg.aliases:
                    continue
                try:
                    args = arguments_from_json(cd.args)
                except (ValueError, KeyError) as e:
                    raise ConfigError(f"invalid arguments for contract {cd.name}: {e}", entity=cd.name) from e
                out.append(
                    Contract(
                        name=cd.name,
                        location=cfg.source,
                        network=network,
                        code=self.read_file(cfg.source),
                        account_address=account.address,
                        account_name=account.name,
                        args=args,
                    )
                )
        return out
