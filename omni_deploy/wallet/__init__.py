"""
omni_deploy.wallet
==================

Convenience exports for key and signer helpers:

- Signature / hash algorithm enums and key records.
- In-memory ECDSA signer (P-256, secp256k1).
"""

from .keys import (ACCOUNT_KEY_WEIGHT_THRESHOLD, AccountKey, HashAlgorithm,
                   PublicKey, SignatureAlgorithm)
from .signer import InMemorySigner, Signer

__all__ = [
    "ACCOUNT_KEY_WEIGHT_THRESHOLD",
    "AccountKey",
    "HashAlgorithm",
    "PublicKey",
    "SignatureAlgorithm",
    "Signer",
    "InMemorySigner",
]
