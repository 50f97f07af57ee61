import pytest

from omni_deploy.config import ContractConfig, ContractDeploymentConfig, DeploymentConfig
from omni_deploy.errors import (ConfigError, ContractExistsError, ContractNotFoundError,
                                ImportResolutionError, KeyValidationError, NoDiffError, TxError)
from omni_deploy.events import ACCOUNT_CONTRACT_UPDATED_EVENT
from omni_deploy.project.program import Script
from omni_deploy.services.accounts import parse_contract_arg
from omni_deploy.wallet.keys import ACCOUNT_KEY_WEIGHT_THRESHOLD, HashAlgorithm, SignatureAlgorithm
from omni_deploy.wallet.signer import InMemorySigner

from .conftest import CONTRACT_A, CONTRACT_B, HELLO


def _keys(n: int):
    pks = [InMemorySigner.from_hex(f"{i + 1:02x}" * 32).public_key() for i in range(n)]
    return pks, [SignatureAlgorithm.ECDSA_P256] * n, [HashAlgorithm.SHA3_256] * n


def test_get_account(services, chain, alice):
    acc = services.accounts.get(str(alice.address))
    assert acc.address == alice.address
    assert chain.methods() == ["get_account"]


# ---- create ----


def test_create_defaults_weights_to_threshold(services, chain, alice):
    pks, sigs, hashes = _keys(2)
    created = services.accounts.create(alice, pks, [], sigs, hashes)

    assert [k.weight for k in created.keys] == [ACCOUNT_KEY_WEIGHT_THRESHOLD] * 2
    assert [k.public_key for k in created.keys] == pks
    assert created.address != alice.address
    assert chain.sent[0].payer == alice.address


def test_create_with_explicit_weights_and_contract(services, chain, alice):
    pks, sigs, hashes = _keys(2)
    created = services.accounts.create(alice, pks, [500, 500], sigs, hashes, ["Hello:./Hello.cdc"])

    assert [k.weight for k in created.keys] == [500, 500]
    assert created.contracts == {"Hello": HELLO}


def test_create_weight_count_mismatch_fails_before_network(services, chain, alice):
    pks, sigs, hashes = _keys(2)
    with pytest.raises(KeyValidationError) as ei:
        services.accounts.create(alice, pks, [1000], sigs, hashes)
    assert "number of keys and weights provided must match" in str(ei.value)
    assert chain.calls == []


def test_create_invalid_key_fails_before_network(services, chain, alice):
    pks, sigs, hashes = _keys(1)
    with pytest.raises(KeyValidationError):
        services.accounts.create(alice, pks, [1001], sigs, hashes)
    with pytest.raises(KeyValidationError):
        services.accounts.create(alice, pks, [], [SignatureAlgorithm.ECDSA_SECP256K1], hashes)
    assert chain.calls == []


def test_create_bad_contract_arg(services, chain, alice):
    pks, sigs, hashes = _keys(1)
    with pytest.raises(ConfigError) as ei:
        services.accounts.create(alice, pks, [], sigs, hashes, ["Hello"])
    assert "name:path" in str(ei.value)
    assert chain.calls == []


def test_create_without_created_event(services, chain, alice):
    chain.emit_created = False
    pks, sigs, hashes = _keys(1)
    with pytest.raises(TxError) as ei:
        services.accounts.create(alice, pks, [], sigs, hashes)
    assert "new account address couldn't be fetched" in str(ei.value)


def test_parse_contract_arg_splits_once():
    assert parse_contract_arg("Hello:./a:b.cdc") == ("Hello", "./a:b.cdc")


# ---- add_contract ----


def test_add_new_contract(services, chain, alice):
    tx_id, updated = services.accounts.add_contract(alice, Script(HELLO, location="./Hello.cdc"), "emulator")

    assert not updated
    assert chain.results[tx_id].sealed
    assert "signer.contracts.add" in chain.sent[0].script.decode()
    assert chain.accounts[alice.address].contracts["Hello"] == HELLO


def test_add_identical_contract_is_no_diff(services, chain, alice):
    chain.accounts[alice.address].contracts["Hello"] = HELLO
    with pytest.raises(NoDiffError):
        services.accounts.add_contract(alice, Script(HELLO), "emulator")
    with pytest.raises(NoDiffError):
        services.accounts.add_contract(alice, Script(HELLO), "emulator", update_existing=True)
    assert chain.sent == []


def test_add_existing_contract_without_update(services, chain, alice):
    chain.accounts[alice.address].contracts["Hello"] = b"pub contract Hello {}"
    with pytest.raises(ContractExistsError) as ei:
        services.accounts.add_contract(alice, Script(HELLO), "emulator")
    assert str(ei.value) == f"contract Hello exists in account {alice.address}"
    assert chain.sent == []


def test_update_existing_contract_uses_resolved_code(services, state, chain, alice):
    state.add_or_update_contract(ContractConfig(name="ContractA", source="./contractA.cdc"))
    state.add_or_update_deployment(
        DeploymentConfig(network="emulator", account="alice", contracts=[ContractDeploymentConfig(name="ContractA")])
    )
    chain.accounts[alice.address].contracts["ContractB"] = b"pub contract ContractB {}"

    tx_id, updated = services.accounts.add_contract(
        alice, Script(CONTRACT_B, location="./contractB.cdc"), "emulator", update_existing=True
    )

    assert updated
    script = chain.sent[0].script.decode()
    assert "signer.contracts.update__experimental" in script
    stored = chain.accounts[alice.address].contracts["ContractB"]
    assert b"import ContractA from %s" % str(alice.address).encode() in stored
    assert b'"./contractA.cdc"' not in stored
    assert [e.type for e in chain.results[tx_id].events] == [ACCOUNT_CONTRACT_UPDATED_EVENT]


def test_add_contract_unresolvable_import(services, chain, alice):
    with pytest.raises(ImportResolutionError):
        services.accounts.add_contract(alice, Script(CONTRACT_B, location="./contractB.cdc"), "emulator")
    assert chain.sent == []


# ---- remove_contract ----


def test_remove_contract(services, chain, alice):
    chain.accounts[alice.address].contracts["Hello"] = HELLO
    services.accounts.remove_contract(alice, "Hello")
    assert "signer.contracts.remove" in chain.sent[0].script.decode()
    assert "Hello" not in chain.accounts[alice.address].contracts


def test_remove_missing_contract_lists_available(services, chain, alice):
    chain.accounts[alice.address].contracts.update({"ContractA": CONTRACT_A, "Hello": HELLO})
    with pytest.raises(ContractNotFoundError) as ei:
        services.accounts.remove_contract(alice, "Missing")
    assert ei.value.available == ("ContractA", "Hello")
    assert "ContractA, Hello" in str(ei.value)
    assert "Missing" in str(ei.value)
    assert chain.sent == []
