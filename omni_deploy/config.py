from __future__ import annotations

"""
Project configuration models and loader.

A project file is YAML (JSON is accepted too, it is a YAML subset) with four
top-level sections. Sections are mappings in the file and ordered lists in the
models; file order is preserved and becomes deployment order.

    contracts:
      Hello: ./contracts/Hello.cdc
      FungibleToken:
        source: ./contracts/FungibleToken.cdc
        aliases:
          testnet: 9a0766d93b6608b7

    networks:
      emulator: 127.0.0.1:3569
      testnet:
        host: access.devnet.example.org:9000

    accounts:
      emulator-account:
        address: f8d6e0586b0a20c7
        key: 1a2b...                  # hex private key, index 0, P-256 / SHA3-256
      deployer:
        address: 01cf0e2f2f715450
        key:
          index: 1
          signatureAlgorithm: ECDSA_secp256k1
          hashAlgorithm: SHA2_256
          privateKey: 3c4d...

    deployments:
      emulator:
        emulator-account:
          - Hello
          - name: Greeter
            args:
              - {type: String, value: hi}

Notes
-----
- Validation failures surface as `ConfigError`, never as pydantic errors.
- Plain scalars are never read as numbers (`ProjectLoader`), so hex values need
  no quoting. Integer fields such as a key index are coerced by the models.
- Only the shape is validated here; cross references (a deployment naming an
  unknown account) are checked by `omni_deploy.state.State`.
"""

from pathlib import Path
from typing import Any, Dict, List, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from omni_deploy.errors import ConfigError

# ----------------------------- Helpers & Models ------------------------------ #

_NUMERIC_TAGS = frozenset({"tag:yaml.org,2002:int", "tag:yaml.org,2002:float"})


class ProjectLoader(yaml.SafeLoader):
    """
    SafeLoader that never resolves plain scalars to numbers.

    Addresses, aliases and hex keys are written unquoted and may look like
    YAML ints (``0x9a07...``, ``1111...``); they must reach the models
    verbatim. Booleans and nulls still resolve.
    """


ProjectLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in _NUMERIC_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _named_list(section: Any, *, shorthand: str) -> List[Dict[str, Any]]:
    """
    Turn ``{name: value}`` into ``[{"name": name, ...}]``. A scalar value is
    expanded to ``{shorthand: value}``.
    """
    if section is None:
        return []
    if isinstance(section, list):
        return section
    if not isinstance(section, Mapping):
        raise ValueError(f"expected a mapping, got {type(section).__name__}")
    out: List[Dict[str, Any]] = []
    for name, value in section.items():
        if isinstance(value, Mapping):
            out.append({"name": str(name), **value})
        else:
            out.append({"name": str(name), shorthand: value})
    return out


class ContractConfig(BaseModel):
    name: str
    source: str
    aliases: Dict[str, str] = Field(default_factory=dict, description="network -> hex address")

    @field_validator("aliases", mode="before")
    @classmethod
    def _coerce_aliases(cls, v):
        if v is None:
            return {}
        out = {}
        for network, address in v.items():
            if not isinstance(address, str):
                raise ValueError(f"alias for network {network} must be a hex string, got {address!r}")
            out[str(network)] = address
        return out


class NetworkConfig(BaseModel):
    name: str
    host: str = ""


class KeyConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str = "hex"
    index: int = Field(0, ge=0)
    sig_algo: str = Field("ECDSA_P256", alias="signatureAlgorithm")
    hash_algo: str = Field("SHA3_256", alias="hashAlgorithm")
    private_key: str = Field(..., alias="privateKey", repr=False)

    @field_validator("type")
    @classmethod
    def _only_hex(cls, v: str) -> str:
        if v != "hex":
            raise ValueError(f"unsupported key type {v!r}, only 'hex' keys are supported")
        return v


class AccountConfig(BaseModel):
    name: str
    address: str
    key: KeyConfig

    @field_validator("key", mode="before")
    @classmethod
    def _expand_key(cls, v):
        if isinstance(v, str):
            return {"privateKey": v}
        return v


class ContractDeploymentConfig(BaseModel):
    name: str
    args: List[Dict[str, Any]] = Field(default_factory=list, description="JSON-encoded typed values")


class DeploymentConfig(BaseModel):
    network: str
    account: str
    contracts: List[ContractDeploymentConfig] = Field(default_factory=list)

    @field_validator("contracts", mode="before")
    @classmethod
    def _expand_names(cls, v):
        return [{"name": c} if isinstance(c, str) else c for c in (v or [])]


class ProjectConfig(BaseModel):
    contracts: List[ContractConfig] = Field(default_factory=list)
    networks: List[NetworkConfig] = Field(default_factory=list)
    accounts: List[AccountConfig] = Field(default_factory=list)
    deployments: List[DeploymentConfig] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _from_file_shape(cls, data):
        if not isinstance(data, Mapping):
            return data
        out = dict(data)
        out["contracts"] = _named_list(data.get("contracts"), shorthand="source")
        out["networks"] = _named_list(data.get("networks"), shorthand="host")
        out["accounts"] = _named_list(data.get("accounts"), shorthand="address")

        deployments = data.get("deployments")
        if isinstance(deployments, Mapping):
            flat: List[Dict[str, Any]] = []
            for network, per_account in deployments.items():
                for account, contracts in (per_account or {}).items():
                    flat.append({"network": str(network), "account": str(account), "contracts": contracts})
            out["deployments"] = flat
        elif deployments is None:
            out["deployments"] = []
        return out


# ------------------------------- Loader API -------------------------------- #


def parse_project(data: Any, *, source: str = "<memory>") -> ProjectConfig:
    """Validate already-decoded configuration data."""
    if data is None:
        data = {}
    try:
        return ProjectConfig.model_validate(data)
    except (ValidationError, ValueError) as e:
        raise ConfigError(f"invalid project configuration {source}: {e}", entity=source) from e


def load_project(path: str | Path) -> ProjectConfig:
    """Read and validate a YAML/JSON project file."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot read project configuration {p}: {e}", entity=str(p)) from e
    try:
        data = yaml.load(text, Loader=ProjectLoader)
    except yaml.YAMLError as e:
        raise ConfigError(f"project configuration {p} is not valid YAML: {e}", entity=str(p)) from e
    return parse_project(data, source=str(p))


__all__ = [
    "ContractConfig",
    "NetworkConfig",
    "KeyConfig",
    "AccountConfig",
    "ContractDeploymentConfig",
    "DeploymentConfig",
    "ProjectConfig",
    "ProjectLoader",
    "parse_project",
    "load_project",
]
