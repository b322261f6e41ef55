"""Deployment planner — settings contract specs to ordered deploy steps.

Contracts are deployed in the order the settings document lists them,
followed by the bridged token deployer itself. Constructor arguments may
refer to the predicted address of an earlier contract with ``@name``;
that is how a contract's init code can embed the address of a contract
that does not exist yet.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Iterable, Mapping

from eth_abi import encode
from eth_abi.exceptions import ABITypeError, EncodingError, NoEntriesFound, ParseError
from eth_utils import is_hex_address, keccak, to_checksum_address

from bridgedrop.constants import DETERMINISTIC_DEPLOYER
from bridgedrop.crypto.address import predict_address
from bridgedrop.errors import DeploymentPlanError, SettingsValidationError
from bridgedrop.models.deployment import AddressScheme, DeployStep, Deployer, PredictedAddress
from bridgedrop.settings import ContractSpec, Settings

logger = logging.getLogger(__name__)

TARGET_CONTRACT = "bridgedTokenDeployer"


def plan_deployment(settings: Settings, deployer: Deployer) -> list[PredictedAddress]:
    """Predict every address of the deployment, target contract last.

    Settings contracts sent by ``deployer`` through CREATE without an
    explicit nonce take consecutive nonces starting at the deployer's
    current nonce, in plan order. The target contract is created by
    ``deployer`` at the next unused nonce. Two steps predicted at the
    same address make the plan invalid.
    """
    if not deployer.address:
        raise DeploymentPlanError("Deployer identity is empty")

    predicted: dict[str, PredictedAddress] = {}
    next_nonce = deployer.nonce
    for position, spec in enumerate(settings.contracts):
        if spec.name == TARGET_CONTRACT:
            raise SettingsValidationError(
                f"contracts.{spec.name}", "name is reserved for the target contract"
            )
        step = build_step(spec, predicted, deployer)
        if _uses_deployer_nonce(step, deployer):
            step = replace(step, nonce=next_nonce)
            next_nonce += 1
        result = predict_address(step, position)
        predicted[spec.name] = result
        logger.debug(
            "Predicted %s at %s (%s, chain independent: %s)",
            result.name, result.address, result.scheme.value, result.chain_independent,
        )

    target = DeployStep(name=TARGET_CONTRACT, deployer=deployer.address, nonce=next_nonce)
    predicted[TARGET_CONTRACT] = predict_address(target, len(settings.contracts))

    _check_distinct(predicted.values())
    return list(predicted.values())


def _uses_deployer_nonce(step: DeployStep, deployer: Deployer) -> bool:
    return (
        step.scheme is AddressScheme.CREATE
        and step.nonce is None
        and step.deployer.lower() == deployer.address.lower()
    )


def _check_distinct(predicted: Iterable[PredictedAddress]) -> None:
    seen: dict[str, str] = {}
    for p in predicted:
        other = seen.get(p.address.lower())
        if other is not None:
            raise DeploymentPlanError(
                f"'{other}' and '{p.name}' are predicted at the same address {p.address}"
            )
        seen[p.address.lower()] = p.name


def build_step(
    spec: ContractSpec,
    predicted: Mapping[str, PredictedAddress],
    deployer: Deployer,
) -> DeployStep:
    """Turn one contract spec into a deploy step, resolving references."""
    if spec.salt is None:
        return DeployStep(
            name=spec.name,
            deployer=spec.deployer or deployer.address,
            nonce=spec.nonce,
        )
    return DeployStep(
        name=spec.name,
        deployer=spec.deployer or DETERMINISTIC_DEPLOYER,
        salt=spec.salt,
        init_code_hash=init_code_hash(spec, predicted),
    )


def init_code_hash(spec: ContractSpec, predicted: Mapping[str, PredictedAddress]) -> bytes:
    """Hash of the creation code a CREATE2 step will run."""
    if spec.init_code_hash is not None:
        return spec.init_code_hash
    if spec.bytecode is None:
        raise SettingsValidationError(
            f"contracts.{spec.name}",
            f"{AddressScheme.CREATE2.value} deployment needs 'initCodeHash' or 'bytecode'",
        )
    args = [
        _abi_value(abi_type, value, predicted, f"contracts.{spec.name}.constructor.args[{i}]")
        for i, (abi_type, value) in enumerate(zip(spec.constructor_types, spec.constructor_args))
    ]
    try:
        encoded = encode(list(spec.constructor_types), args)
    except (ABITypeError, EncodingError, NoEntriesFound, ParseError) as exc:
        raise SettingsValidationError(f"contracts.{spec.name}.constructor", str(exc)) from exc
    return keccak(spec.bytecode + encoded)


def _abi_value(
    abi_type: str,
    value: Any,
    predicted: Mapping[str, PredictedAddress],
    dotted: str,
) -> Any:
    if isinstance(value, str) and value.startswith("@"):
        ref = value[1:]
        if ref not in predicted:
            raise SettingsValidationError(
                dotted, f"refers to '{ref}', which is not deployed earlier in the plan"
            )
        value = predicted[ref].address

    if abi_type == "address":
        if not isinstance(value, str) or not is_hex_address(value):
            raise SettingsValidationError(dotted, f"not a valid address: {value!r}")
        return to_checksum_address(value)
    if abi_type.startswith(("uint", "int")):
        try:
            return int(value)
        except (TypeError, ValueError):
            raise SettingsValidationError(dotted, f"not an integer: {value!r}") from None
    if abi_type.startswith("bytes") and isinstance(value, str):
        if not value.startswith("0x"):
            raise SettingsValidationError(dotted, f"not a 0x-prefixed hex string: {value!r}")
        try:
            return bytes.fromhex(value[2:])
        except ValueError:
            raise SettingsValidationError(dotted, f"not a hex string: {value!r}") from None
    return value
