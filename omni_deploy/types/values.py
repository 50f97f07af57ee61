"""
Typed argument values for transactions and scripts.

Arguments travel as JSON objects of the form ``{"type": <T>, "value": <V>}``:

    {"type": "String",  "value": "foo"}
    {"type": "UInt64",  "value": "42"}          # integers are decimal strings
    {"type": "Address", "value": "0x01cf0e2f2f715450"}
    {"type": "Bool",    "value": true}
    {"type": "Array",   "value": [<arg>, ...]}
    {"type": "Dictionary", "value": [{"key": <arg>, "value": <arg>}, ...]}

`Argument` is immutable and hashable so contract records can hold them in
tuples. Nothing here performs I/O.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from omni_deploy.address import Address

INT_TYPES = frozenset(
    {
        "Int", "Int8", "Int16", "Int32", "Int64", "Int128", "Int256",
        "UInt", "UInt8", "UInt16", "UInt32", "UInt64", "UInt128", "UInt256",
        "Word8", "Word16", "Word32", "Word64",
    }
)


@dataclass(frozen=True)
class Argument:
    type: str
    value: Any

    # ---- Constructors ----

    @classmethod
    def string(cls, value: str) -> "Argument":
        return cls("String", str(value))

    @classmethod
    def uint64(cls, value: int) -> "Argument":
        if int(value) < 0:
            raise ValueError("UInt64 must be non-negative")
        return cls("UInt64", int(value))

    @classmethod
    def boolean(cls, value: bool) -> "Argument":
        return cls("Bool", bool(value))

    @classmethod
    def address(cls, value: Address | str) -> "Argument":
        return cls("Address", Address.coerce(value).hex())

    @classmethod
    def array(cls, items: Iterable["Argument"]) -> "Argument":
        return cls("Array", tuple(items))

    @classmethod
    def dictionary(cls, pairs: Iterable[Tuple["Argument", "Argument"]]) -> "Argument":
        return cls("Dictionary", tuple((k, v) for k, v in pairs))

    # ---- JSON ----

    def to_json(self) -> Dict[str, Any]:
        if self.type == "Array":
            return {"type": "Array", "value": [a.to_json() for a in self.value]}
        if self.type == "Dictionary":
            return {
                "type": "Dictionary",
                "value": [{"key": k.to_json(), "value": v.to_json()} for k, v in self.value],
            }
        if self.type == "Optional":
            return {"type": "Optional", "value": None if self.value is None else self.value.to_json()}
        if self.type in INT_TYPES:
            return {"type": self.type, "value": str(int(self.value))}
        return {"type": self.type, "value": self.value}

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> "Argument":
        if not isinstance(obj, Mapping) or "type" not in obj:
            raise ValueError(f"argument must be an object with a 'type' field, got {obj!r}")
        t = str(obj["type"])
        v = obj.get("value")
        if t == "Array":
            return cls("Array", tuple(cls.from_json(x) for x in (v or [])))
        if t == "Dictionary":
            return cls(
                "Dictionary",
                tuple((cls.from_json(p["key"]), cls.from_json(p["value"])) for p in (v or [])),
            )
        if t == "Optional":
            return cls("Optional", None if v is None else cls.from_json(v))
        if t in INT_TYPES:
            return cls(t, int(v))
        if t == "Address":
            return cls(t, Address.from_hex(str(v)).hex())
        return cls(t, v)

    def encode(self) -> bytes:
        """Canonical JSON bytes (sorted keys, compact) for the wire envelope."""
        return json.dumps(self.to_json(), sort_keys=True, separators=(",", ":")).encode("utf-8")

    def to_python(self) -> Any:
        if self.type == "Array":
            return [a.to_python() for a in self.value]
        if self.type == "Dictionary":
            return {k.to_python(): v.to_python() for k, v in self.value}
        if self.type == "Optional":
            return None if self.value is None else self.value.to_python()
        return self.value


def arguments_from_json(items: Sequence[Mapping[str, Any]] | None) -> Tuple[Argument, ...]:
    return tuple(Argument.from_json(x) for x in (items or []))


def arguments_to_json(args: Iterable[Argument]) -> List[Dict[str, Any]]:
    return [a.to_json() for a in args]


__all__ = [
    "Argument",
    "INT_TYPES",
    "arguments_from_json",
    "arguments_to_json",
]
