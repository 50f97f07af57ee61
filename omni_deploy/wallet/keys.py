"""
omni_deploy.wallet.keys
=======================

Key algorithms, public keys and account keys.

Public keys are carried as 64 raw bytes (X || Y, big-endian, no SEC1 prefix)
and are checked to be valid curve points for their algorithm with the
`cryptography` library. An `AccountKey` is the on-chain record of one key:
algorithms, weight, sequence number and revocation flag.

Weights are expressed in thousandths; a key (or set of keys) must reach
`ACCOUNT_KEY_WEIGHT_THRESHOLD` to authorize a transaction alone.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

import cbor2
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec

from omni_deploy.errors import KeyValidationError

ACCOUNT_KEY_WEIGHT_THRESHOLD = 1000

__all__ = [
    "ACCOUNT_KEY_WEIGHT_THRESHOLD",
    "SignatureAlgorithm",
    "HashAlgorithm",
    "PublicKey",
    "AccountKey",
]


class SignatureAlgorithm(str, Enum):
    ECDSA_P256 = "ECDSA_P256"
    ECDSA_SECP256K1 = "ECDSA_secp256k1"

    @classmethod
    def parse(cls, name: str) -> "SignatureAlgorithm":
        n = str(name).strip().lower().replace("-", "_")
        aliases = {
            "ecdsa_p256": cls.ECDSA_P256,
            "p256": cls.ECDSA_P256,
            "ecdsa_secp256k1": cls.ECDSA_SECP256K1,
            "secp256k1": cls.ECDSA_SECP256K1,
        }
        if n not in aliases:
            raise KeyValidationError(f"unsupported signature algorithm: {name!r}")
        return aliases[n]

    def curve(self) -> ec.EllipticCurve:
        if self is SignatureAlgorithm.ECDSA_P256:
            return ec.SECP256R1()
        return ec.SECP256K1()


class HashAlgorithm(str, Enum):
    SHA2_256 = "SHA2_256"
    SHA3_256 = "SHA3_256"

    @classmethod
    def parse(cls, name: str) -> "HashAlgorithm":
        n = str(name).strip().upper().replace("-", "_")
        aliases = {"SHA2_256": cls.SHA2_256, "SHA256": cls.SHA2_256, "SHA3_256": cls.SHA3_256}
        if n not in aliases:
            raise KeyValidationError(f"unsupported hash algorithm: {name!r}")
        return aliases[n]

    def hash(self) -> hashes.HashAlgorithm:
        if self is HashAlgorithm.SHA2_256:
            return hashes.SHA256()
        return hashes.SHA3_256()


@dataclass(frozen=True)
class PublicKey:
    """Raw 64-byte public key bound to its signature algorithm."""

    algorithm: SignatureAlgorithm
    encoded: bytes

    @classmethod
    def from_hex(cls, value: str, algorithm: SignatureAlgorithm | str = SignatureAlgorithm.ECDSA_P256) -> "PublicKey":
        s = value[2:] if value.startswith(("0x", "0X")) else value
        try:
            raw = bytes.fromhex(s)
        except ValueError as e:
            raise KeyValidationError(f"public key is not valid hex: {value!r}") from e
        algo = algorithm if isinstance(algorithm, SignatureAlgorithm) else SignatureAlgorithm.parse(algorithm)
        return cls(algorithm=algo, encoded=raw)

    @classmethod
    def from_crypto(cls, key: ec.EllipticCurvePublicKey, algorithm: SignatureAlgorithm) -> "PublicKey":
        nums = key.public_numbers()
        return cls(algorithm=algorithm, encoded=nums.x.to_bytes(32, "big") + nums.y.to_bytes(32, "big"))

    def to_crypto(self) -> ec.EllipticCurvePublicKey:
        if len(self.encoded) != 64:
            raise KeyValidationError(f"public key must be 64 bytes, got {len(self.encoded)}")
        try:
            return ec.EllipticCurvePublicKey.from_encoded_point(self.algorithm.curve(), b"\x04" + self.encoded)
        except ValueError as e:
            raise KeyValidationError(f"public key is not a valid {self.algorithm.value} point") from e

    def hex(self) -> str:
        return self.encoded.hex()


@dataclass(frozen=True)
class AccountKey:
    public_key: PublicKey
    sig_algo: SignatureAlgorithm
    hash_algo: HashAlgorithm
    weight: int = ACCOUNT_KEY_WEIGHT_THRESHOLD
    index: int = 0
    sequence_number: int = 0
    revoked: bool = False

    def validate(self) -> None:
        """Raise KeyValidationError if the key cannot be registered on-chain."""
        if not isinstance(self.sig_algo, SignatureAlgorithm):
            raise KeyValidationError(f"unsupported signature algorithm: {self.sig_algo!r}", self.index)
        if not isinstance(self.hash_algo, HashAlgorithm):
            raise KeyValidationError(f"unsupported hash algorithm: {self.hash_algo!r}", self.index)
        if self.public_key.algorithm is not self.sig_algo:
            raise KeyValidationError(
                f"public key algorithm {self.public_key.algorithm.value} does not match "
                f"signature algorithm {self.sig_algo.value}",
                self.index,
            )
        if not 0 <= int(self.weight) <= ACCOUNT_KEY_WEIGHT_THRESHOLD:
            raise KeyValidationError(
                f"weight must be between 0 and {ACCOUNT_KEY_WEIGHT_THRESHOLD}, got {self.weight}",
                self.index,
            )
        self.public_key.to_crypto()

    def to_rpc_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "publicKey": self.public_key.hex(),
            "sigAlgo": self.sig_algo.value,
            "hashAlgo": self.hash_algo.value,
            "weight": self.weight,
            "sequenceNumber": self.sequence_number,
            "revoked": self.revoked,
        }

    @staticmethod
    def from_rpc_dict(d: Dict[str, Any]) -> "AccountKey":
        sig_algo = SignatureAlgorithm.parse(d.get("sigAlgo", SignatureAlgorithm.ECDSA_P256.value))
        return AccountKey(
            public_key=PublicKey.from_hex(str(d.get("publicKey", "")), sig_algo),
            sig_algo=sig_algo,
            hash_algo=HashAlgorithm.parse(d.get("hashAlgo", HashAlgorithm.SHA3_256.value)),
            weight=int(d.get("weight", ACCOUNT_KEY_WEIGHT_THRESHOLD)),
            index=int(d.get("index", 0)),
            sequence_number=int(d.get("sequenceNumber", 0)),
            revoked=bool(d.get("revoked", False)),
        )

    def encode(self) -> bytes:
        """Canonical encoding used as the creation-transaction key argument."""
        return cbor2.dumps([self.public_key.encoded, self.sig_algo.value, self.hash_algo.value, int(self.weight)], canonical=True)

