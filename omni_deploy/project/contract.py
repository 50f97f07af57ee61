"""
omni_deploy.project.contract
============================

A `Contract` is one concrete deployment unit: a named source at a location,
bound to a target account on a network, with its constructor arguments.
Records are immutable; resolving imports produces a new record via
`with_code`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple

from omni_deploy.address import Address
from omni_deploy.project.program import Program, Script
from omni_deploy.types.values import Argument


@dataclass(frozen=True)
class Contract:
    name: str
    location: str
    network: str
    code: bytes
    account_address: Address
    account_name: str = ""
    args: Tuple[Argument, ...] = ()

    def program(self) -> Program:
        return Program(code=self.code, location=self.location, args=self.args)

    def script(self) -> Script:
        return Script(code=self.code, args=self.args, location=self.location)

    def with_code(self, code: bytes) -> "Contract":
        return replace(self, code=bytes(code))


__all__ = ["Contract"]
