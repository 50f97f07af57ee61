"""
omni_deploy.project
===================

Contract/Program model and import resolution.

Submodules
----------
- program  : `Script` and `Program` (imports, declared name, textual rewrite).
- contract : `Contract` deployment records.
- imports  : `LocationTable`, `build_location_table`, `replace_imports`.
"""

from .contract import Contract
from .imports import (ImportReplacer, LocationTable, absolute_path,
                      build_location_table, clean_path, replace_imports)
from .program import Program, Script

__all__ = [
    "Contract",
    "Program",
    "Script",
    "ImportReplacer",
    "LocationTable",
    "absolute_path",
    "build_location_table",
    "clean_path",
    "replace_imports",
]
