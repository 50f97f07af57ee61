"""
omni_deploy.tx.encode
=====================

Deterministic CBOR encoding for transactions.

This module provides:
- `payload_dict(tx)` -> canonical view of the signable payload
- `payload_message(tx)` -> domain-tagged bytes signed by proposer/authorizers
- `envelope_message(tx)` -> domain-tagged bytes signed by the payer
- `encode_transaction(tx)` -> raw signed CBOR blob ready for RPC
- `decode_transaction(raw)` -> parsed envelope {payload, payloadSignatures, envelopeSignatures}
- `transaction_id(tx)` -> sha3_256 of the payload plus its signatures

Design notes
------------
* `cbor2.dumps(..., canonical=True)` gives deterministic map ordering, so the
  same transaction always encodes to the same bytes.
* Two signing rounds, as on the node:
    - payload signatures cover the payload only (proposer and authorizers
      that are not the payer),
    - envelope signatures cover the payload plus the payload signatures and
      are made by the payer.
* Every signed message is prefixed with `TRANSACTION_DOMAIN_TAG`, right-padded
  with zeros to 32 bytes, so a transaction signature cannot be replayed as a
  signature over some other structure.
* The wire envelope is:
    {
      "payload":            { ... canonical payload ... },
      "payloadSignatures":  [ {"address": <8 bytes>, "keyIndex": <int>, "signature": <64 bytes>}, ... ],
      "envelopeSignatures": [ ... same shape ... ],
    }
"""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING, Any, Dict, Iterable, List

import cbor2

if TYPE_CHECKING:  # pragma: no cover
    from omni_deploy.tx.transaction import Transaction, TransactionSignature

DOMAIN_TAG_LENGTH = 32
TRANSACTION_DOMAIN_TAG = b"OMNI-V0.0-transaction".ljust(DOMAIN_TAG_LENGTH, b"\x00")


def cbor_dumps(obj: Any) -> bytes:
    return cbor2.dumps(obj, canonical=True)


def sha3_256(b: bytes) -> bytes:
    return hashlib.sha3_256(b).digest()


# -----------------------------------------------------------------------------
# Canonical payload (SignBytes source)
# -----------------------------------------------------------------------------


def payload_dict(tx: "Transaction") -> Dict[str, Any]:
    """
    Canonical, signable payload of a transaction.

    Fields (and types):
      - script           : bytes
      - arguments        : [bytes]   canonical JSON of each argument
      - referenceBlockId : bytes
      - gasLimit         : int
      - proposalKey      : {address: bytes, keyIndex: int, sequenceNumber: int}
      - payer            : bytes
      - authorizers      : [bytes]
    """
    pk = tx.proposal_key
    return {
        "script": bytes(tx.script),
        "arguments": [a.encode() for a in tx.arguments],
        "referenceBlockId": bytes(tx.reference_block_id),
        "gasLimit": int(tx.gas_limit),
        "proposalKey": {
            "address": pk.address.raw,
            "keyIndex": int(pk.key_index),
            "sequenceNumber": int(pk.sequence_number),
        },
        "payer": tx.payer.raw,
        "authorizers": [a.raw for a in tx.authorizers],
    }


def signatures_list(sigs: Iterable["TransactionSignature"]) -> List[Dict[str, Any]]:
    return [
        {"address": s.address.raw, "keyIndex": int(s.key_index), "signature": bytes(s.signature)}
        for s in sigs
    ]


def payload_message(tx: "Transaction") -> bytes:
    """Bytes signed by the proposer and by authorizers other than the payer."""
    return TRANSACTION_DOMAIN_TAG + cbor_dumps(payload_dict(tx))


def envelope_message(tx: "Transaction") -> bytes:
    """Bytes signed by the payer: payload plus payload signatures."""
    body = {"payload": payload_dict(tx), "payloadSignatures": signatures_list(tx.payload_signatures)}
    return TRANSACTION_DOMAIN_TAG + cbor_dumps(body)


# -----------------------------------------------------------------------------
# Signed envelope (wire format)
# -----------------------------------------------------------------------------


def encode_transaction(tx: "Transaction") -> bytes:
    env = {
        "payload": payload_dict(tx),
        "payloadSignatures": signatures_list(tx.payload_signatures),
        "envelopeSignatures": signatures_list(tx.envelope_signatures),
    }
    return cbor_dumps(env)


def decode_transaction(raw: bytes) -> Dict[str, Any]:
    """
    Parse a raw signed CBOR transaction into a Python dictionary.

    Returns a dict with keys: payload, payloadSignatures, envelopeSignatures.
    """
    if not isinstance(raw, (bytes, bytearray)):
        raise TypeError("raw must be bytes")
    obj = cbor2.loads(bytes(raw))
    if not isinstance(obj, dict):
        raise ValueError("signed tx must decode to a CBOR map")
    for k in ("payload", "payloadSignatures", "envelopeSignatures"):
        if k not in obj:
            raise ValueError(f"signed tx missing field '{k}'")
    return obj


# -----------------------------------------------------------------------------
# Hash helpers
# -----------------------------------------------------------------------------


def transaction_id(tx: "Transaction") -> bytes:
    """sha3_256 of the payload and payload signatures (stable across payer signing)."""
    body = {"payload": payload_dict(tx), "payloadSignatures": signatures_list(tx.payload_signatures)}
    return sha3_256(cbor_dumps(body))


__all__ = [
    "DOMAIN_TAG_LENGTH",
    "TRANSACTION_DOMAIN_TAG",
    "cbor_dumps",
    "sha3_256",
    "payload_dict",
    "signatures_list",
    "payload_message",
    "envelope_message",
    "encode_transaction",
    "decode_transaction",
    "transaction_id",
]
