"""
Version helpers for omni-deploy.
We keep a static __version__ (PEP 440) and derive the HTTP User-Agent from it.
"""

from __future__ import annotations

# Bump this when publishing
__version__ = "0.1.0"


def user_agent() -> str:
    """User-Agent string sent by the HTTP gateway."""
    return f"omni-deploy-py/{__version__}"


__all__ = ["__version__", "user_agent"]
