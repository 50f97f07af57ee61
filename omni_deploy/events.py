"""
omni_deploy.events
==================

Helpers to read side-channel data from the events of a sealed transaction.

Public API
----------
- ACCOUNT_CREATED_EVENT
- filter_events(events, event_type) -> List[Event]
- created_addresses(events) -> List[Address]
"""

from __future__ import annotations

from typing import Iterable, List

from omni_deploy.address import Address
from omni_deploy.types.core import Event

ACCOUNT_CREATED_EVENT = "flow.AccountCreated"
ACCOUNT_CONTRACT_ADDED_EVENT = "flow.AccountContractAdded"
ACCOUNT_CONTRACT_UPDATED_EVENT = "flow.AccountContractUpdated"


def filter_events(events: Iterable[Event], event_type: str) -> List[Event]:
    return [e for e in events if e.type == event_type]


def created_addresses(events: Iterable[Event]) -> List[Address]:
    """
    Addresses announced by account-creation events, in emission order.

    Events without an ``address`` field are ignored.
    """
    out: List[Address] = []
    for ev in filter_events(events, ACCOUNT_CREATED_EVENT):
        raw = ev.values.get("address")
        if raw:
            out.append(Address.from_hex(str(raw)))
    return out


__all__ = [
    "ACCOUNT_CREATED_EVENT",
    "ACCOUNT_CONTRACT_ADDED_EVENT",
    "ACCOUNT_CONTRACT_UPDATED_EVENT",
    "filter_events",
    "created_addresses",
]
