"""
omni_deploy.tx.transaction
==========================

The write-transaction envelope.

A `Transaction` is filled in a fixed order and then left alone:

    tx = Transaction(script=code, arguments=args, payer=addr, authorizers=[addr])
    tx.set_block_reference(block)          # latest sealed block
    tx.set_proposer(onchain_account, 0)    # proposer key + current sequence number
    tx.sign(project_account)               # payload or envelope signature
    raw = tx.encode()

Signing freezes the payload: changing the reference block, proposer or
authorizers after a signature was added raises `ValueError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Protocol, Sequence

from omni_deploy.address import EMPTY_ADDRESS, Address
from omni_deploy.errors import InvalidKeyIndexError
from omni_deploy.tx import encode
from omni_deploy.types.core import Account as ChainAccount
from omni_deploy.types.core import Block
from omni_deploy.types.values import Argument
from omni_deploy.wallet.signer import Signer

DEFAULT_GAS_LIMIT = 9999

__all__ = [
    "DEFAULT_GAS_LIMIT",
    "ProposalKey",
    "TransactionSignature",
    "SigningAccount",
    "Transaction",
]


@dataclass(frozen=True)
class ProposalKey:
    address: Address = EMPTY_ADDRESS
    key_index: int = 0
    sequence_number: int = 0


@dataclass(frozen=True)
class TransactionSignature:
    address: Address
    key_index: int
    signature: bytes


class SigningAccount(Protocol):
    """Anything that can sign for an address with one of its keys."""

    @property
    def address(self) -> Address: ...

    @property
    def key_index(self) -> int: ...

    @property
    def signer(self) -> Signer: ...


class Transaction:
    def __init__(
        self,
        script: bytes,
        arguments: Sequence[Argument] = (),
        *,
        gas_limit: int = DEFAULT_GAS_LIMIT,
        payer: Address = EMPTY_ADDRESS,
        authorizers: Iterable[Address] = (),
    ) -> None:
        self.script = bytes(script)
        self.arguments: List[Argument] = list(arguments)
        self.gas_limit = int(gas_limit)
        self.reference_block_id = b""
        self.proposal_key = ProposalKey()
        self._payer = payer
        self._authorizers: List[Address] = list(authorizers)
        self.payload_signatures: List[TransactionSignature] = []
        self.envelope_signatures: List[TransactionSignature] = []

    # ---- Payload ----

    def _ensure_unsigned(self) -> None:
        if self.payload_signatures or self.envelope_signatures:
            raise ValueError("transaction payload is frozen once signed")

    @property
    def payer(self) -> Address:
        return self._payer

    @property
    def authorizers(self) -> Sequence[Address]:
        return tuple(self._authorizers)

    def add_authorizer(self, address: Address) -> "Transaction":
        self._ensure_unsigned()
        self._authorizers.append(address)
        return self

    def set_block_reference(self, block: Block) -> "Transaction":
        self._ensure_unsigned()
        self.reference_block_id = bytes(block.id)
        return self

    def set_proposer(self, account: ChainAccount, key_index: int) -> "Transaction":
        """
        Use `account`'s key at `key_index` as proposal key, taking its current
        sequence number. The key must exist and not be revoked.
        """
        self._ensure_unsigned()
        key = account.key(key_index)
        if key is None:
            raise InvalidKeyIndexError(str(account.address), key_index)
        if key.revoked:
            raise InvalidKeyIndexError(str(account.address), key_index, "key is revoked")
        self.proposal_key = ProposalKey(
            address=account.address, key_index=key_index, sequence_number=key.sequence_number
        )
        return self

    # ---- Signing ----

    def sign(self, account: SigningAccount) -> "Transaction":
        """
        Sign with `account`. The payer signs the envelope, any other signer
        (proposer or authorizer) signs the payload.
        """
        if account.address == self._payer:
            msg = encode.envelope_message(self)
            self.envelope_signatures.append(
                TransactionSignature(account.address, account.key_index, account.signer.sign(msg))
            )
        else:
            if self.envelope_signatures:
                raise ValueError("payload signatures must be added before the envelope signature")
            msg = encode.payload_message(self)
            self.payload_signatures.append(
                TransactionSignature(account.address, account.key_index, account.signer.sign(msg))
            )
        return self

    @property
    def signed(self) -> bool:
        return bool(self.envelope_signatures)

    # ---- Views ----

    def id(self) -> str:
        return encode.transaction_id(self).hex()

    def encode(self) -> bytes:
        return encode.encode_transaction(self)

    def __repr__(self) -> str:
        return (
            f"Transaction(payer={self._payer}, authorizers={[str(a) for a in self._authorizers]}, "
            f"proposer={self.proposal_key.address}#{self.proposal_key.key_index}, signed={self.signed})"
        )
