"""
omni_deploy.services
====================

High-level operations over a project `State` and a node `Gateway`.

    services = Services(state, gateway)
    services.project.deploy("emulator")
    services.accounts.remove_contract(account, "Hello")
    services.scripts.execute(code, network="emulator")

`Services.connect()` wires everything from runtime settings: logging, the
HTTP gateway and the project file.
"""

from __future__ import annotations

from typing import Any, Optional

from omni_deploy.gateway.base import Gateway
from omni_deploy.gateway.http import HttpGateway
from omni_deploy.logging import get_logger, setup_logging
from omni_deploy.settings import Settings, get_settings
from omni_deploy.state import State
from omni_deploy.tx.pipeline import TransactionPipeline
from omni_deploy.tx.transaction import DEFAULT_GAS_LIMIT

from .accounts import Accounts
from .project import Project
from .scripts import Scripts

__all__ = ["Services", "Accounts", "Project", "Scripts"]


class Services:
    def __init__(
        self,
        state: State,
        gateway: Gateway,
        *,
        gas_limit: int = DEFAULT_GAS_LIMIT,
        logger: Any = None,
    ) -> None:
        log = logger or get_logger("omni_deploy.services")
        self.state = state
        self.gateway = gateway
        self.pipeline = TransactionPipeline(gateway, gas_limit=gas_limit, logger=log)
        self.accounts = Accounts(state, gateway, self.pipeline, logger=log)
        self.project = Project(state, self.accounts, logger=log)
        self.scripts = Scripts(state, gateway, logger=log)

    @classmethod
    def connect(cls, settings: Optional[Settings] = None) -> "Services":
        s = settings or get_settings()
        setup_logging(level=s.log_level, log_format=s.log_format)
        return cls(State.load(s.project_path), HttpGateway.from_settings(s))
