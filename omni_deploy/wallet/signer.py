"""
omni_deploy.wallet.signer
=========================

ECDSA signers backed by the `cryptography` library.

Signatures are returned in the raw fixed-width form the chain verifies:
``r || s`` with each component as 32 big-endian bytes. The message is hashed
with the signer's hash algorithm (SHA2-256 or SHA3-256) before signing.

Typical usage
-------------
    from omni_deploy.wallet.signer import InMemorySigner

    signer = InMemorySigner.from_hex("f3a1...", sig_algo="ECDSA_P256", hash_algo="SHA3_256")
    sig = signer.sign(message)
    assert signer.verify(message, sig)

Notes
-----
- Keys live in memory only; persisting or encrypting them is the caller's
  concern.
- `Signer` is the minimal protocol the transaction pipeline relies on.
"""

from __future__ import annotations

from typing import Optional, Protocol

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (decode_dss_signature,
                                                              encode_dss_signature)

from omni_deploy.errors import KeyValidationError
from omni_deploy.wallet.keys import HashAlgorithm, PublicKey, SignatureAlgorithm

__all__ = ["Signer", "InMemorySigner"]


class Signer(Protocol):
    """Minimal signing interface used by the transaction pipeline."""

    @property
    def sig_algo(self) -> SignatureAlgorithm: ...

    @property
    def hash_algo(self) -> HashAlgorithm: ...

    def public_key(self) -> PublicKey: ...

    def sign(self, message: bytes) -> bytes: ...


class InMemorySigner:
    def __init__(
        self,
        private_key: ec.EllipticCurvePrivateKey,
        *,
        sig_algo: SignatureAlgorithm = SignatureAlgorithm.ECDSA_P256,
        hash_algo: HashAlgorithm = HashAlgorithm.SHA3_256,
    ) -> None:
        if private_key.curve.name != sig_algo.curve().name:
            raise KeyValidationError(
                f"private key curve {private_key.curve.name} does not match {sig_algo.value}"
            )
        self._sk = private_key
        self._sig_algo = sig_algo
        self._hash_algo = hash_algo
        self._pk = PublicKey.from_crypto(private_key.public_key(), sig_algo)

    # ---- Constructors ----

    @classmethod
    def from_hex(
        cls,
        private_key_hex: str,
        *,
        sig_algo: SignatureAlgorithm | str = SignatureAlgorithm.ECDSA_P256,
        hash_algo: HashAlgorithm | str = HashAlgorithm.SHA3_256,
    ) -> "InMemorySigner":
        sa = sig_algo if isinstance(sig_algo, SignatureAlgorithm) else SignatureAlgorithm.parse(sig_algo)
        ha = hash_algo if isinstance(hash_algo, HashAlgorithm) else HashAlgorithm.parse(hash_algo)
        s = private_key_hex[2:] if private_key_hex.startswith(("0x", "0X")) else private_key_hex
        try:
            scalar = int(s, 16)
            sk = ec.derive_private_key(scalar, sa.curve())
        except ValueError as e:
            raise KeyValidationError(f"invalid {sa.value} private key") from e
        return cls(sk, sig_algo=sa, hash_algo=ha)

    # ---- Properties ----

    @property
    def sig_algo(self) -> SignatureAlgorithm:
        return self._sig_algo

    @property
    def hash_algo(self) -> HashAlgorithm:
        return self._hash_algo

    def public_key(self) -> PublicKey:
        return self._pk

    def private_key_hex(self) -> str:
        return self._sk.private_numbers().private_value.to_bytes(32, "big").hex()

    # ---- Operations ----

    def sign(self, message: bytes) -> bytes:
        der = self._sk.sign(bytes(message), ec.ECDSA(self._hash_algo.hash()))
        r, s = decode_dss_signature(der)
        return r.to_bytes(32, "big") + s.to_bytes(32, "big")

    def verify(self, message: bytes, signature: bytes, public_key: Optional[PublicKey] = None) -> bool:
        if len(signature) != 64:
            return False
        pk = (public_key or self._pk).to_crypto()
        der = encode_dss_signature(int.from_bytes(signature[:32], "big"), int.from_bytes(signature[32:], "big"))
        try:
            pk.verify(der, bytes(message), ec.ECDSA(self._hash_algo.hash()))
        except InvalidSignature:
            return False
        return True

    def __repr__(self) -> str:
        return f"InMemorySigner(sig_algo={self._sig_algo.value}, hash_algo={self._hash_algo.value})"
