"""
omni_deploy.tx.templates
========================

Transaction script templates for account and contract management.

Contract code travels as a hex string argument and is decoded on-chain, so a
template never embeds user source text. Contract initializer arguments are
appended to the add-contract template as extra transaction parameters
(``arg0``, ``arg1``, ...), typed from the `Argument` values.
"""

from __future__ import annotations

from typing import Sequence

from omni_deploy.types.values import Argument

CREATE_ACCOUNT = """\
transaction(publicKeys: [String], contracts: {String: String}) {
\tprepare(signer: AuthAccount) {
\t\tlet acct = AuthAccount(payer: signer)

\t\tfor key in publicKeys {
\t\t\tacct.addPublicKey(key.decodeHex())
\t\t}

\t\tfor contract in contracts.keys {
\t\t\tacct.contracts.add(name: contract, code: contracts[contract]!.decodeHex())
\t\t}
\t}
}
"""

_ADD_CONTRACT = """\
transaction(name: String, code: String{params}) {{
\tprepare(signer: AuthAccount) {{
\t\tsigner.contracts.add(name: name, code: code.decodeHex(){passed})
\t}}
}}
"""

UPDATE_CONTRACT = """\
transaction(name: String, code: String) {
\tprepare(signer: AuthAccount) {
\t\tsigner.contracts.update__experimental(name: name, code: code.decodeHex())
\t}
}
"""

REMOVE_CONTRACT = """\
transaction(name: String) {
\tprepare(signer: AuthAccount) {
\t\tsigner.contracts.remove(name: name)
\t}
}
"""


def type_expr(arg: Argument) -> str:
    """Script-level type of an argument value."""
    if arg.type == "Array":
        inner = type_expr(arg.value[0]) if arg.value else "AnyStruct"
        return f"[{inner}]"
    if arg.type == "Dictionary":
        if not arg.value:
            return "{String: AnyStruct}"
        k, v = arg.value[0]
        return f"{{{type_expr(k)}: {type_expr(v)}}}"
    if arg.type == "Optional":
        return "AnyStruct?" if arg.value is None else f"{type_expr(arg.value)}?"
    return arg.type


def add_contract(args: Sequence[Argument] = ()) -> str:
    params = "".join(f", arg{i}: {type_expr(a)}" for i, a in enumerate(args))
    passed = "".join(f", arg{i}" for i in range(len(args)))
    return _ADD_CONTRACT.format(params=params, passed=passed)


__all__ = ["CREATE_ACCOUNT", "UPDATE_CONTRACT", "REMOVE_CONTRACT", "add_contract", "type_expr"]
