"""
omni_deploy.tx.session
======================

Per-account transaction sessions.

The proposer sequence number is read from the chain when a transaction is
prepared, so two transactions for the same account prepared concurrently
would claim the same number and one would be rejected. An `AccountSession`
serializes prepare/submit/await for one signing address within the process;
different addresses proceed independently.

    registry = SessionRegistry()
    with registry.get(address):
        ...  # at most one transaction in flight for `address`
"""

from __future__ import annotations

import threading
from typing import Dict

from omni_deploy.address import Address

__all__ = ["AccountSession", "SessionRegistry"]


class AccountSession:
    def __init__(self, address: Address) -> None:
        self.address = address
        self._lock = threading.Lock()

    def __enter__(self) -> "AccountSession":
        self._lock.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._lock.release()

    def __repr__(self) -> str:
        return f"AccountSession({self.address}, locked={self._lock.locked()})"


class SessionRegistry:
    """Hands out exactly one `AccountSession` per address."""

    def __init__(self) -> None:
        self._sessions: Dict[Address, AccountSession] = {}
        self._guard = threading.Lock()

    def get(self, address: Address) -> AccountSession:
        with self._guard:
            session = self._sessions.get(address)
            if session is None:
                session = AccountSession(address)
                self._sessions[address] = session
            return session

    def __len__(self) -> int:
        return len(self._sessions)
