import pytest

from omni_deploy.errors import ConfigError
from omni_deploy.project.program import Program, Script
from omni_deploy.types.values import Argument

from .conftest import CONTRACT_B, CONTRACT_C, HELLO


def test_imports_in_order_and_unique():
    code = b'''import Foo from "./Foo.cdc"
import Bar, Baz from "../shared/BarBaz.cdc"
import Foo from "./Foo.cdc"
import Crypto
import FungibleToken from 0xee82856bf20e2aa6

pub contract X {}
'''
    p = Program(code, location="contracts/X.cdc")
    assert p.imports() == ["./Foo.cdc", "../shared/BarBaz.cdc"]
    assert p.has_imports()


def test_no_imports():
    p = Program(HELLO, location="./Hello.cdc")
    assert p.imports() == []
    assert not p.has_imports()


def test_commented_out_import_is_ignored():
    code = b'''// import Old from "./Old.cdc"
/* import Older from "./Older.cdc" */
import New from "./New.cdc"
pub contract X {}
'''
    assert Program(code).imports() == ["./New.cdc"]


def test_name_of_contract_and_interface():
    assert Program(HELLO).name() == "Hello"
    assert Program(CONTRACT_C).name() == "ContractC"
    iface = b"pub contract interface Token {\n  pub fun balance(): UFix64\n}\n"
    assert Program(iface).name() == "Token"


def test_name_requires_exactly_one_declaration():
    with pytest.raises(ConfigError):
        Program(b"pub fun main(): Int { return 1 }\n").name()
    two = b"pub contract A {}\npub contract B {}\n"
    with pytest.raises(ConfigError):
        Program(two, location="./two.cdc").name()


def test_replace_import_returns_new_program():
    p = Program(CONTRACT_B, location="./contractB.cdc", args=(Argument.string("foo"),))
    q = p.replace_import("./contractA.cdc", "0xf8d6e0586b0a20c7")

    assert q is not p
    assert b'"./contractA.cdc"' in p.code
    assert b"import ContractA from 0xf8d6e0586b0a20c7" in q.code
    assert q.imports() == []
    assert q.location == p.location
    assert q.args == p.args
    assert q.name() == "ContractB"


def test_replace_import_leaves_other_imports():
    q = Program(CONTRACT_C).replace_import("./contractB.cdc", "0x01")
    assert b"import ContractB from 0x01" in q.code
    assert q.imports() == ["./contractA.cdc"]


def test_script_roundtrip():
    s = Script(code=HELLO, args=(Argument.uint64(3),), location="./Hello.cdc")
    p = Program.from_script(s)
    assert p.to_script() == s
