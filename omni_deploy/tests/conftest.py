from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import cbor2
import pytest

from omni_deploy.address import Address
from omni_deploy.config import ContractConfig, ContractDeploymentConfig, DeploymentConfig, NetworkConfig
from omni_deploy.errors import RpcError
from omni_deploy.events import (
    ACCOUNT_CONTRACT_ADDED_EVENT,
    ACCOUNT_CONTRACT_UPDATED_EVENT,
    ACCOUNT_CREATED_EVENT,
)
from omni_deploy.services import Services
from omni_deploy.state import Account as ProjectAccount
from omni_deploy.state import FileReaderWriter, State
from omni_deploy.tx.encode import sha3_256
from omni_deploy.tx.transaction import Transaction
from omni_deploy.types.core import Account, Block, Event, TransactionResult, TransactionStatus
from omni_deploy.types.values import Argument
from omni_deploy.wallet.keys import AccountKey, HashAlgorithm, PublicKey, SignatureAlgorithm
from omni_deploy.wallet.signer import InMemorySigner

# -------------------------
# Contract sources
# -------------------------

HELLO = b"""access(all) contract Hello {
    access(all) let greeting: String

    init() {
        self.greeting = "Hello, World!"
    }
}
"""

CONTRACT_A = b"""pub contract ContractA {
    init() {}
}
"""

CONTRACT_B = b"""import ContractA from "./contractA.cdc"

pub contract ContractB {
    pub let x: String

    init(x: String) {
        self.x = x
    }
}
"""

CONTRACT_C = b"""import ContractB from "./contractB.cdc"
import ContractA from "./contractA.cdc"

pub contract ContractC {
    init() {}
}
"""

ALICE_KEY = "11" * 32
BOB_KEY = "22" * 32
CHARLIE_KEY = "33" * 32

ALICE_ADDRESS = "f8d6e0586b0a20c7"
BOB_ADDRESS = "01cf0e2f2f715450"
CHARLIE_ADDRESS = "179b6b1cb6755e31"


# -------------------------
# Fake chain
# -------------------------


class FakeChain:
    """
    In-memory node implementing the gateway methods used by the services.

    Submitted transactions are interpreted by their script text: contract
    add/update/remove and account creation mutate the stored accounts, and
    every transaction bumps the proposer key's sequence number.
    """

    def __init__(self) -> None:
        self.accounts: Dict[Address, Account] = {}
        self.results: Dict[str, TransactionResult] = {}
        self.sent: List[Transaction] = []
        self.calls: List[Tuple[str, Any]] = []
        self.height = 1
        self.fail_next: Optional[str] = None
        self.emit_created = True
        self.script_result: Any = None
        self._next_address = 0x01

    # ---- setup helpers ----

    def add_account(self, address: Address, keys: Sequence[AccountKey] = (), contracts: Optional[Dict[str, bytes]] = None) -> Account:
        acc = Account(address=address, balance=0, keys=list(keys), contracts=dict(contracts or {}))
        self.accounts[address] = acc
        return acc

    def methods(self) -> List[str]:
        return [m for m, _ in self.calls]

    # ---- gateway API ----

    def get_account(self, address: Address) -> Account:
        self.calls.append(("get_account", address))
        acc = self.accounts.get(address)
        if acc is None:
            raise RpcError(f"account {address} not found", method="account.get")
        return Account(address=acc.address, balance=acc.balance, keys=list(acc.keys), contracts=dict(acc.contracts))

    def get_latest_block(self) -> Block:
        self.calls.append(("get_latest_block", None))
        return Block(id=sha3_256(self.height.to_bytes(8, "big")), height=self.height)

    def send_signed_transaction(self, tx: Transaction) -> str:
        self.calls.append(("send_signed_transaction", tx))
        assert tx.signed, "transaction must carry the payer envelope signature"
        self.sent.append(tx)
        tx_id = tx.id()
        self.height += 1

        error, events = self.fail_next, []
        self.fail_next = None
        if error is None:
            events = self._apply(tx, tx_id)
        self._bump_sequence(tx)
        self.results[tx_id] = TransactionResult(
            status=TransactionStatus.SEALED, error=error, events=tuple(events), transaction_id=tx_id
        )
        return tx_id

    def get_transaction_result(self, tx_id: str, wait_for_seal: bool = True) -> TransactionResult:
        self.calls.append(("get_transaction_result", tx_id))
        return self.results[tx_id]

    def execute_script(self, script: bytes, args: Sequence[Argument] = ()) -> Any:
        self.calls.append(("execute_script", (bytes(script), tuple(args))))
        return self.script_result

    # ---- interpretation ----

    def _bump_sequence(self, tx: Transaction) -> None:
        pk = tx.proposal_key
        acc = self.accounts[pk.address]
        acc.keys = [
            replace(k, sequence_number=k.sequence_number + 1) if k.index == pk.key_index else k for k in acc.keys
        ]

    def _apply(self, tx: Transaction, tx_id: str) -> List[Event]:
        script = tx.script.decode("utf-8")
        payer = self.accounts[tx.payer]
        if "AuthAccount(payer: signer)" in script:
            keys_arg, contracts_arg = tx.arguments[0], tx.arguments[1]
            address = Address(self._next_address.to_bytes(8, "big"))
            self._next_address += 1
            keys = []
            for i, k in enumerate(keys_arg.value):
                raw, sig_algo, hash_algo, weight = cbor2.loads(bytes.fromhex(k.value))
                algo = SignatureAlgorithm(sig_algo)
                keys.append(
                    AccountKey(PublicKey(algo, raw), algo, HashAlgorithm(hash_algo), weight=weight, index=i)
                )
            contracts = {n.value: bytes.fromhex(c.value) for n, c in contracts_arg.value}
            self.add_account(address, keys, contracts)
            if not self.emit_created:
                return []
            return [Event(ACCOUNT_CREATED_EVENT, {"address": address.hex()}, tx_id)]

        name = tx.arguments[0].value
        if "signer.contracts.add" in script:
            payer.contracts[name] = bytes.fromhex(tx.arguments[1].value)
            return [Event(ACCOUNT_CONTRACT_ADDED_EVENT, {"address": payer.address.hex(), "contract": name}, tx_id)]
        if "signer.contracts.update__experimental" in script:
            payer.contracts[name] = bytes.fromhex(tx.arguments[1].value)
            return [Event(ACCOUNT_CONTRACT_UPDATED_EVENT, {"address": payer.address.hex(), "contract": name}, tx_id)]
        if "signer.contracts.remove" in script:
            del payer.contracts[name]
            return []
        raise AssertionError(f"unexpected script:\n{script}")


# -------------------------
# Fixtures
# -------------------------


def make_account(chain: FakeChain, name: str, address_hex: str, private_key_hex: str) -> ProjectAccount:
    signer = InMemorySigner.from_hex(private_key_hex)
    account = ProjectAccount(name=name, address=Address.from_hex(address_hex), signer=signer, key_index=0)
    key = AccountKey(signer.public_key(), signer.sig_algo, signer.hash_algo, index=0)
    if account.address not in chain.accounts:
        chain.add_account(account.address, [key])
    return account


@pytest.fixture
def chain() -> FakeChain:
    return FakeChain()


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    (tmp_path / "Hello.cdc").write_bytes(HELLO)
    (tmp_path / "contractA.cdc").write_bytes(CONTRACT_A)
    (tmp_path / "contractB.cdc").write_bytes(CONTRACT_B)
    (tmp_path / "contractC.cdc").write_bytes(CONTRACT_C)
    return tmp_path


@pytest.fixture
def state(project_dir: Path) -> State:
    st = State(readerwriter=FileReaderWriter(project_dir))
    st.add_or_update_network(NetworkConfig(name="emulator", host="127.0.0.1:3569"))
    return st


@pytest.fixture
def alice(chain: FakeChain, state: State) -> ProjectAccount:
    acc = make_account(chain, "alice", ALICE_ADDRESS, ALICE_KEY)
    state.add_or_update_account(acc)
    return acc


@pytest.fixture
def bob(chain: FakeChain, state: State) -> ProjectAccount:
    acc = make_account(chain, "bob", BOB_ADDRESS, BOB_KEY)
    state.add_or_update_account(acc)
    return acc


@pytest.fixture
def services(state: State, chain: FakeChain) -> Services:
    return Services(state, chain)


def deploy_hello(state: State, account: ProjectAccount) -> None:
    state.add_or_update_contract(ContractConfig(name="Hello", source="./Hello.cdc"))
    state.add_or_update_deployment(
        DeploymentConfig(network="emulator", account=account.name, contracts=[ContractDeploymentConfig(name="Hello")])
    )
