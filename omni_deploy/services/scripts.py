"""
omni_deploy.services.scripts
============================

Read-only script execution. Project imports in the script are resolved with
the same table a deployment on `network` would use.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from omni_deploy.errors import ConfigError
from omni_deploy.gateway.base import Gateway
from omni_deploy.logging import get_logger
from omni_deploy.project.imports import ImportReplacer
from omni_deploy.project.program import Program
from omni_deploy.state import State
from omni_deploy.types.values import Argument

__all__ = ["Scripts"]


class Scripts:
    def __init__(self, state: State, gateway: Gateway, *, logger: Any = None) -> None:
        self.state = state
        self.gateway = gateway
        self._log = logger or get_logger(__name__)

    def execute(
        self,
        code: bytes,
        args: Sequence[Argument] = (),
        location: str = "",
        network: Optional[str] = None,
    ) -> Any:
        program = Program(code=bytes(code), location=location, args=tuple(args))
        if program.has_imports():
            if not network:
                raise ConfigError(
                    "script has imports to resolve but no network was given", entity=location or None
                )
            replacer = ImportReplacer(
                self.state.deployment_contracts_by_network(network),
                self.state.aliases_for_network(network),
            )
            program = replacer.replace(program)

        self._log.debug("script_execute", location=location or None, network=network, args=len(program.args))
        return self.gateway.execute_script(program.code, program.args)
