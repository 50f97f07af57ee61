"""
omni_deploy
===========

Deploy multi-contract projects to a chain: resolve cross-contract imports to
on-chain addresses, then push each contract through one signed transaction
pipeline (reference block, proposer key, signing, submission, seal wait).

Quick start
-----------
    from omni_deploy import Services, State, HttpGateway

    state = State.load("omni.yaml")
    with HttpGateway("http://127.0.0.1:8545") as gw:
        deployed = Services(state, gw).project.deploy("emulator")

Subpackages
-----------
- project  : Program / Contract model and import resolution.
- tx       : transaction envelope, encoding, requests, sessions, pipeline.
- gateway  : node access (protocol + JSON-RPC over HTTP).
- services : accounts, project deployment, scripts.
- wallet   : key algorithms and ECDSA signers.
- types    : chain data types and typed argument values.
"""

from .address import Address
from .errors import (ConfigError, ContractExistsError, ContractNotFoundError, DeployError,
                     ImportResolutionError, InvalidKeyIndexError, KeyValidationError, NoDiffError,
                     RpcError, TxError)
from .gateway import Gateway, HttpGateway
from .project import Contract, Program, Script, replace_imports
from .services import Services
from .state import State
from .version import __version__

__all__ = [
    "__version__",
    "Address",
    "Contract",
    "Program",
    "Script",
    "replace_imports",
    "Gateway",
    "HttpGateway",
    "Services",
    "State",
    "DeployError",
    "ConfigError",
    "ImportResolutionError",
    "KeyValidationError",
    "InvalidKeyIndexError",
    "ContractExistsError",
    "ContractNotFoundError",
    "NoDiffError",
    "RpcError",
    "TxError",
]
