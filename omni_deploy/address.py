"""
omni_deploy.address
===================

Account addresses.

Format
------
An address is 8 raw bytes. Its canonical string form is lower-case hex with a
`0x` prefix and left zero-padding, e.g. ``0xf8d6e0586b0a20c7``. The canonical
string is also the token written into resolved import statements.

Parsing from hex follows the node's rules:
- an optional ``0x``/``0X`` prefix is stripped,
- short values are left-padded with zeros,
- values longer than 8 bytes keep their trailing 8 bytes,
- an odd number of digits gets a leading zero.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

ADDRESS_LENGTH = 8

_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")

__all__ = ["ADDRESS_LENGTH", "Address", "AddressError", "EMPTY_ADDRESS"]


class AddressError(ValueError):
    """Raised for malformed address strings."""


@dataclass(frozen=True, slots=True)
class Address:
    raw: bytes

    def __post_init__(self) -> None:
        if len(self.raw) != ADDRESS_LENGTH:
            raise AddressError(f"address must be {ADDRESS_LENGTH} bytes, got {len(self.raw)}")

    # ---- Constructors ----

    @classmethod
    def from_hex(cls, value: str) -> "Address":
        s = value.strip()
        if s[:2] in ("0x", "0X"):
            s = s[2:]
        if not _HEX_RE.match(s):
            raise AddressError(f"invalid hex address: {value!r}")
        if len(s) % 2:
            s = "0" + s
        b = bytes.fromhex(s)
        if len(b) > ADDRESS_LENGTH:
            b = b[-ADDRESS_LENGTH:]
        return cls(b.rjust(ADDRESS_LENGTH, b"\x00"))

    @classmethod
    def coerce(cls, value: Union["Address", str, bytes]) -> "Address":
        if isinstance(value, Address):
            return value
        if isinstance(value, (bytes, bytearray)):
            return cls(bytes(value).rjust(ADDRESS_LENGTH, b"\x00"))
        return cls.from_hex(str(value))

    # ---- Views ----

    def hex(self) -> str:
        return "0x" + self.raw.hex()

    def __str__(self) -> str:
        return self.hex()

    def __bool__(self) -> bool:
        return any(self.raw)


EMPTY_ADDRESS = Address(b"\x00" * ADDRESS_LENGTH)
