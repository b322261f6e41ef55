"""Deployment settings — the static configuration of one run.

Settings are read once from a JSON document and are immutable for the
rest of the run. Loading checks the shape and type of every field that
is present. Whether a field is required is decided by the stage that
uses it, so a missing field is reported by that stage with the field's
dotted name.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from eth_utils import is_hex_address, to_checksum_address

from bridgedrop.constants import DEFAULT_NATIVE_TOKEN_PRICE
from bridgedrop.errors import SettingsValidationError

_UINT_RE = re.compile(r"^\d+$")
_HEX_RE = re.compile(r"^0x([0-9a-fA-F]{2})*$")


@dataclass(frozen=True)
class ContractSpec:
    """How one named contract is deployed.

    A spec with a salt is deployed through CREATE2 by ``deployer`` (the
    deterministic deployment proxy when unset). Its init code is either
    given by hash or assembled from ``bytecode`` and ABI-encoded
    constructor arguments, where an argument of the form ``@name``
    refers to the predicted address of an earlier contract.
    """
    name: str
    deployer: Optional[str] = None
    salt: Optional[bytes] = None
    nonce: Optional[int] = None
    init_code_hash: Optional[bytes] = None
    bytecode: Optional[bytes] = None
    constructor_types: tuple[str, ...] = ()
    constructor_args: tuple[Any, ...] = ()
    expected_address: Optional[str] = None


@dataclass(frozen=True)
class Settings:
    """Static configuration for a deployment run."""
    multi_token_mediator_gnosis_chain: Optional[str] = None
    gno_price: Optional[int] = None
    native_token_price: int = DEFAULT_NATIVE_TOKEN_PRICE
    contracts: tuple[ContractSpec, ...] = ()
    tokens: Mapping[str, Mapping[int, str]] = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: Path) -> Settings:
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SettingsValidationError(str(path), f"cannot read settings file: {exc}") from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise SettingsValidationError(str(path), f"not valid JSON: {exc}") from exc
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Any) -> Settings:
        if not isinstance(data, dict):
            raise SettingsValidationError("<root>", "settings must be a JSON object")

        bridge = _section(data, "bridge")
        virtual_token = _section(data, "virtualCowToken")

        native_price = _uint(virtual_token, "nativeTokenPrice", "virtualCowToken.nativeTokenPrice")

        contracts_raw = _section(data, "contracts")
        contracts = tuple(
            _contract_spec(name, spec) for name, spec in contracts_raw.items()
        )

        return cls(
            multi_token_mediator_gnosis_chain=_address(
                bridge, "multiTokenMediatorGnosisChain", "bridge.multiTokenMediatorGnosisChain"
            ),
            gno_price=_uint(virtual_token, "gnoPrice", "virtualCowToken.gnoPrice"),
            native_token_price=native_price if native_price is not None else DEFAULT_NATIVE_TOKEN_PRICE,
            contracts=contracts,
            tokens=_tokens(_section(data, "tokens")),
        )

    def contract(self, name: str) -> Optional[ContractSpec]:
        for spec in self.contracts:
            if spec.name == name:
                return spec
        return None

    def expected_addresses(self) -> dict[str, Optional[str]]:
        """Map each configured contract name to its expected address, if any."""
        return {spec.name: spec.expected_address for spec in self.contracts}


# ------------------------------------------------------------------
# Field readers
# ------------------------------------------------------------------

def _section(data: dict[str, Any], key: str, prefix: str = "") -> dict[str, Any]:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise SettingsValidationError(prefix + key, "must be a JSON object")
    return value


def _address(data: dict[str, Any], key: str, dotted: str, checksum: bool = True) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not is_hex_address(value):
        raise SettingsValidationError(dotted, f"not a valid address: {value!r}")
    return to_checksum_address(value) if checksum else value


def _uint(data: dict[str, Any], key: str, dotted: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        raise SettingsValidationError(dotted, f"not an unsigned integer: {value!r}")
    if isinstance(value, int) and value >= 0:
        return value
    if isinstance(value, str) and _UINT_RE.match(value.strip()):
        return int(value.strip())
    raise SettingsValidationError(dotted, f"not an unsigned integer: {value!r}")


def _hex_bytes(data: dict[str, Any], key: str, dotted: str, size: Optional[int] = None) -> Optional[bytes]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not _HEX_RE.match(value):
        raise SettingsValidationError(dotted, f"not a 0x-prefixed hex string: {value!r}")
    raw = bytes.fromhex(value[2:])
    if size is not None and len(raw) != size:
        raise SettingsValidationError(dotted, f"must be {size} bytes, got {len(raw)}")
    return raw


def _contract_spec(name: str, spec: Any) -> ContractSpec:
    prefix = f"contracts.{name}"
    if not isinstance(spec, dict):
        raise SettingsValidationError(prefix, "must be a JSON object")

    constructor = _section(spec, "constructor", prefix + ".")
    types = constructor.get("types", [])
    args = constructor.get("args", [])
    if not isinstance(types, list) or not all(isinstance(t, str) for t in types):
        raise SettingsValidationError(prefix + ".constructor.types", "must be a list of ABI type names")
    if not isinstance(args, list) or len(args) != len(types):
        raise SettingsValidationError(
            prefix + ".constructor.args",
            f"must be a list with one value per type ({len(types)} expected)",
        )

    return ContractSpec(
        name=name,
        deployer=_address(spec, "deployer", prefix + ".deployer"),
        salt=_hex_bytes(spec, "salt", prefix + ".salt", size=32),
        nonce=_uint(spec, "nonce", prefix + ".nonce"),
        init_code_hash=_hex_bytes(spec, "initCodeHash", prefix + ".initCodeHash", size=32),
        bytecode=_hex_bytes(spec, "bytecode", prefix + ".bytecode"),
        constructor_types=tuple(types),
        constructor_args=tuple(args),
        # verbatim, not checksummed
        expected_address=_address(spec, "expectedAddress", prefix + ".expectedAddress", checksum=False),
    )


def _tokens(data: dict[str, Any]) -> dict[str, dict[int, str]]:
    tokens: dict[str, dict[int, str]] = {}
    for token, per_chain in data.items():
        if not isinstance(per_chain, dict):
            raise SettingsValidationError(f"tokens.{token}", "must map chain ids to addresses")
        tokens[token] = {}
        for chain_id in per_chain:
            dotted = f"tokens.{token}.{chain_id}"
            if not str(chain_id).isdigit():
                raise SettingsValidationError(dotted, "chain id must be a decimal integer")
            address = _address(per_chain, chain_id, dotted)
            if address is not None:
                tokens[token][int(chain_id)] = address
    return tokens
