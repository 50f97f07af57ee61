import threading
import time

import pytest

from omni_deploy.errors import InvalidKeyIndexError, TxError
from omni_deploy.tx.pipeline import TransactionPipeline
from omni_deploy.tx.requests import AddContractRequest, RemoveContractRequest
from omni_deploy.tx.session import SessionRegistry
from omni_deploy.types.core import TransactionResult, TransactionStatus

from .conftest import ALICE_ADDRESS, ALICE_KEY, BOB_ADDRESS, BOB_KEY, HELLO, FakeChain, make_account


def test_execute_runs_prepare_submit_await(chain: FakeChain):
    alice = make_account(chain, "alice", ALICE_ADDRESS, ALICE_KEY)
    pipeline = TransactionPipeline(chain)

    tx_id, result = pipeline.execute(AddContractRequest("Hello", HELLO), alice)

    assert result.sealed
    assert result.transaction_id == tx_id
    assert chain.methods() == [
        "get_latest_block",
        "get_account",
        "send_signed_transaction",
        "get_transaction_result",
    ]
    assert chain.accounts[alice.address].contracts["Hello"] == HELLO


def test_sequence_number_advances_between_transactions(chain: FakeChain):
    alice = make_account(chain, "alice", ALICE_ADDRESS, ALICE_KEY)
    pipeline = TransactionPipeline(chain)

    pipeline.execute(AddContractRequest("Hello", HELLO), alice)
    pipeline.execute(RemoveContractRequest("Hello"), alice)

    assert [tx.proposal_key.sequence_number for tx in chain.sent] == [0, 1]
    assert "Hello" not in chain.accounts[alice.address].contracts


def test_execution_error_raises_tx_error(chain: FakeChain):
    alice = make_account(chain, "alice", ALICE_ADDRESS, ALICE_KEY)
    chain.fail_next = "cannot deploy invalid contract"

    with pytest.raises(TxError) as ei:
        TransactionPipeline(chain).execute(AddContractRequest("Hello", HELLO), alice)

    assert ei.value.tx_id == chain.sent[0].id()
    assert ei.value.result is not None and ei.value.result.error == "cannot deploy invalid contract"
    assert "cannot deploy invalid contract" in str(ei.value)


def test_expired_transaction_raises_tx_error():
    class ExpiringChain(FakeChain):
        def get_transaction_result(self, tx_id, wait_for_seal=True):
            return TransactionResult(status=TransactionStatus.EXPIRED, transaction_id=tx_id)

    expiring = ExpiringChain()
    alice = make_account(expiring, "alice", ALICE_ADDRESS, ALICE_KEY)

    with pytest.raises(TxError) as ei:
        TransactionPipeline(expiring).execute(RemoveContractRequest("Hello"), alice)

    assert ei.value.result.status == TransactionStatus.EXPIRED
    assert "expired" in str(ei.value)


def test_prepare_failure_never_submits(chain: FakeChain):
    alice = make_account(chain, "alice", ALICE_ADDRESS, ALICE_KEY)
    broken = type(alice)(name=alice.name, address=alice.address, signer=alice.signer, key_index=4)

    with pytest.raises(InvalidKeyIndexError):
        TransactionPipeline(chain).execute(RemoveContractRequest("Hello"), broken)
    assert chain.sent == []


def test_registry_returns_one_session_per_address(chain: FakeChain):
    alice = make_account(chain, "alice", ALICE_ADDRESS, ALICE_KEY)
    bob = make_account(chain, "bob", BOB_ADDRESS, BOB_KEY)
    registry = SessionRegistry()

    assert registry.get(alice.address) is registry.get(alice.address)
    assert registry.get(alice.address) is not registry.get(bob.address)
    assert len(registry) == 2


class SlowChain(FakeChain):
    """Records overlapping submissions per payer."""

    def __init__(self) -> None:
        super().__init__()
        self.in_flight = {}
        self.max_in_flight = 0
        self._guard = threading.Lock()

    def get_latest_block(self):
        with self._guard:
            return super().get_latest_block()

    def get_account(self, address):
        with self._guard:
            return super().get_account(address)

    def send_signed_transaction(self, tx):
        with self._guard:
            n = self.in_flight.get(tx.payer, 0) + 1
            self.in_flight[tx.payer] = n
            self.max_in_flight = max(self.max_in_flight, n)
        time.sleep(0.01)
        with self._guard:
            return super().send_signed_transaction(tx)

    def get_transaction_result(self, tx_id, wait_for_seal=True):
        time.sleep(0.01)
        with self._guard:
            result = super().get_transaction_result(tx_id, wait_for_seal)
            payer = next(tx.payer for tx in self.sent if tx.id() == tx_id)
            self.in_flight[payer] -= 1
            return result


def test_sessions_serialize_one_account_across_threads():
    chain = SlowChain()
    alice = make_account(chain, "alice", ALICE_ADDRESS, ALICE_KEY)
    pipeline = TransactionPipeline(chain)
    errors = []

    def deploy(i: int) -> None:
        code = b"pub contract C%d {}\n" % i
        try:
            pipeline.execute(AddContractRequest(f"C{i}", code), alice)
        except Exception as e:  # pragma: no cover - surfaced below
            errors.append(e)

    threads = [threading.Thread(target=deploy, args=(i,)) for i in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert chain.max_in_flight == 1
    assert sorted(tx.proposal_key.sequence_number for tx in chain.sent) == [0, 1, 2, 3, 4]
    assert len(chain.accounts[alice.address].contracts) == 5
