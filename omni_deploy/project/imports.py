"""
omni_deploy.project.imports
===========================

Import resolution for project contracts.

A `LocationTable` maps cleaned source locations to address tokens. It is built
once per deployment run from

1. every contract configured for deployment on the network
   (location -> target account address), then
2. the network's aliases (location -> externally deployed address).

and is immutable afterwards. `replace_imports` rewrites each string-location
import of a program to the token found in the table.

Design notes
------------
* Resolution is syntactic. An import path is made absolute against the
  directory of the importing program's location, cleaned, and looked up.
* Addresses are assigned by configuration, not discovered while deploying, so
  two project contracts importing each other resolve without error.
* The first unresolved import aborts resolution of that program. Programs are
  immutable, so no partially rewritten program ever escapes.
* Alias addresses arrive as hex strings and are normalized through
  `Address.from_hex` so they match the canonical form of contract targets.

Example
-------
    table = build_location_table(contracts, {"./FungibleToken.cdc": "ee82856bf20e2aa6"})
    resolved = replace_imports(program, table)
"""

from __future__ import annotations

import posixpath
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Mapping, Optional

from omni_deploy.address import Address
from omni_deploy.errors import ConfigError, ImportResolutionError
from omni_deploy.project.contract import Contract
from omni_deploy.project.program import Program

Aliases = Mapping[str, str]  # location -> hex address


def clean_path(path: str) -> str:
    """Lexical path cleaning (``a/./b/../c`` -> ``a/c``); empty becomes ``.``."""
    return posixpath.normpath(path) if path else "."


def absolute_path(base_path: str, relative_path: str) -> str:
    """Join `relative_path` onto the directory of `base_path` and clean it."""
    parts = [p for p in (posixpath.dirname(base_path), relative_path) if p]
    return clean_path("/".join(parts))


class LocationTable(Mapping[str, str]):
    """Read-only mapping of cleaned location -> address token."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Optional[Mapping[str, str]] = None) -> None:
        self._entries: Mapping[str, str] = MappingProxyType(
            {clean_path(k): str(v) for k, v in (entries or {}).items()}
        )

    def __getitem__(self, location: str) -> str:
        return self._entries[clean_path(location)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, location: object) -> bool:
        return isinstance(location, str) and clean_path(location) in self._entries

    def __repr__(self) -> str:
        return f"LocationTable({dict(self._entries)!r})"


def build_location_table(contracts: Iterable[Contract], aliases: Optional[Aliases] = None) -> LocationTable:
    """
    Build the location -> address table for one deployment run.

    Raises ConfigError if one location is targeted at two different accounts
    by project contracts. Alias entries are applied last and may overwrite.
    """
    entries: Dict[str, str] = {}
    for c in contracts:
        loc = clean_path(c.location)
        addr = str(c.account_address)
        prev = entries.get(loc)
        if prev is not None and prev != addr:
            raise ConfigError(
                f"contract source {c.location} is deployed to multiple accounts ({prev}, {addr}) "
                f"on network {c.network}; the same contract cannot be deployed to multiple accounts",
                entity=c.location,
            )
        entries[loc] = addr

    for loc, hex_addr in (aliases or {}).items():
        entries[clean_path(loc)] = str(Address.from_hex(hex_addr))

    return LocationTable(entries)


def replace_imports(program: Program, table: Mapping[str, str]) -> Program:
    """
    Rewrite every string-location import of `program` to its resolved address.

    Raises ImportResolutionError naming the first import with no table entry.
    """
    resolved = program
    for imp in program.imports():
        location = absolute_path(program.location, imp)
        target = table.get(location)
        if target is None:
            raise ImportResolutionError(imp, program.location or None)
        resolved = resolved.replace_import(imp, target)
    return resolved


class ImportReplacer:
    """Resolves program imports against one fixed `LocationTable`."""

    def __init__(self, contracts: Iterable[Contract], aliases: Optional[Aliases] = None) -> None:
        self.table = build_location_table(contracts, aliases)

    def replace(self, program: Program) -> Program:
        return replace_imports(program, self.table)


__all__ = [
    "Aliases",
    "LocationTable",
    "ImportReplacer",
    "absolute_path",
    "build_location_table",
    "clean_path",
    "replace_imports",
]
