"""
omni_deploy.project.program
===========================

In-memory view of one contract (or script) source.

A `Program` recognizes exactly two things in the source text:

- import statements with a string location::

      import Foo from "./Foo.cdc"
      import Foo, Bar from "../shared/FooBar.cdc"

  Address imports (``import Foo from 0x01``) already point on-chain and are not
  project imports.
- the declared contract or contract interface name::

      access(all) contract Hello { ... }
      pub contract interface Token { ... }

Everything else is opaque text. Programs are immutable: `replace_import`
returns a new Program and leaves the receiver untouched.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from functools import cached_property
from typing import List, Tuple

from omni_deploy.errors import ConfigError
from omni_deploy.types.values import Argument

_IDENT = r"[A-Za-z_][A-Za-z0-9_]*"
_IMPORT_HEAD = rf"\bimport\s+(?:{_IDENT}(?:\s*,\s*{_IDENT})*\s+from\s+)?"
_IMPORT_RE = re.compile(_IMPORT_HEAD + r'"([^"\n]+)"')
_CONTRACT_RE = re.compile(
    rf"^[ \t]*(?:(?:pub|priv|access\([^)\n]*\))\s+)?contract\s+(?:interface\s+)?({_IDENT})",
    re.MULTILINE,
)
_LINE_COMMENT_RE = re.compile(r"//[^\n]*")
_BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)


def _strip_comments(text: str) -> str:
    text = _BLOCK_COMMENT_RE.sub(lambda m: re.sub(r"[^\n]", " ", m.group(0)), text)
    return _LINE_COMMENT_RE.sub("", text)


@dataclass(frozen=True)
class Script:
    """Source code plus arguments and the location it was read from."""

    code: bytes
    args: Tuple[Argument, ...] = ()
    location: str = ""


@dataclass(frozen=True)
class Program:
    code: bytes
    location: str = ""
    args: Tuple[Argument, ...] = field(default_factory=tuple)

    @classmethod
    def from_script(cls, script: Script) -> "Program":
        return cls(code=bytes(script.code), location=script.location, args=tuple(script.args))

    def to_script(self) -> Script:
        return Script(code=self.code, args=self.args, location=self.location)

    @cached_property
    def _text(self) -> str:
        return self.code.decode("utf-8")

    @cached_property
    def _scan_text(self) -> str:
        return _strip_comments(self._text)

    def imports(self) -> List[str]:
        """String-location import paths, unique, in order of first appearance."""
        seen: List[str] = []
        for m in _IMPORT_RE.finditer(self._scan_text):
            if m.group(1) not in seen:
                seen.append(m.group(1))
        return seen

    def has_imports(self) -> bool:
        return len(self.imports()) > 0

    def name(self) -> str:
        names = _CONTRACT_RE.findall(self._scan_text)
        if len(names) != 1:
            raise ConfigError(
                "the code must declare exactly one contract or contract interface"
                + (f" ({self.location})" if self.location else ""),
                entity=self.location or None,
            )
        return names[0]

    def replace_import(self, path: str, target: str) -> "Program":
        """
        Return a new Program whose import statements referencing ``"path"``
        reference `target` instead. `target` is inserted verbatim.
        """
        stmt = re.compile("(" + _IMPORT_HEAD + ')"' + re.escape(path) + '"')
        new_text = stmt.sub(lambda m: m.group(1) + target, self._text)
        return replace(self, code=new_text.encode("utf-8"))


__all__ = ["Script", "Program"]
