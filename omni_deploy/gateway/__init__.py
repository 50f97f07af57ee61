"""
omni_deploy.gateway
===================

Node access: the `Gateway` protocol and its JSON-RPC over HTTP implementation.
"""

from .base import Gateway
from .http import HttpGateway

__all__ = ["Gateway", "HttpGateway"]
