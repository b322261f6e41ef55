"""Contract address prediction — where a deploy step will land, without deploying.

Two derivation schemes exist and they behave differently across chains:

- CREATE: keccak256(rlp([deployer, nonce]))[12:]. Depends on the
  deployer's nonce, which is per-chain account state, so a prediction
  only holds for the chain whose nonce was used.
- CREATE2: keccak256(0xff || deployer || salt || keccak256(init_code))[12:].
  Depends only on its inputs, so the same factory, salt and init code
  yield the same address on every chain.

Every function here is pure.
"""

from __future__ import annotations

from typing import Sequence

import rlp
from eth_utils import is_hex_address, keccak, to_canonical_address, to_checksum_address

from bridgedrop.errors import DeploymentPlanError
from bridgedrop.models.deployment import AddressScheme, DeployStep, PredictedAddress

CREATE2_PREFIX = b"\xff"


def create_address(deployer: str, nonce: int) -> str:
    """Address of the contract created by ``deployer`` at ``nonce``."""
    if nonce < 0:
        raise DeploymentPlanError(f"Nonce must be non-negative, got {nonce}")
    encoded = rlp.encode([_deployer_bytes(deployer), nonce])
    return to_checksum_address(keccak(encoded)[12:])


def create2_address(deployer: str, salt: bytes, init_code_hash: bytes) -> str:
    """Address of the contract created through CREATE2 by ``deployer``."""
    if len(salt) != 32:
        raise DeploymentPlanError(f"Salt must be 32 bytes, got {len(salt)}")
    if len(init_code_hash) != 32:
        raise DeploymentPlanError(
            f"Init code hash must be 32 bytes, got {len(init_code_hash)}"
        )
    digest = keccak(CREATE2_PREFIX + _deployer_bytes(deployer) + salt + init_code_hash)
    return to_checksum_address(digest[12:])


def predict_address(step: DeployStep, position: int, base_nonce: int = 0) -> PredictedAddress:
    """Predict the address for one step at ``position`` in its plan."""
    if step.scheme is AddressScheme.CREATE2:
        if step.init_code_hash is None:
            raise DeploymentPlanError(
                f"Step '{step.name}' has a salt but no init code hash"
            )
        address = create2_address(step.deployer, step.salt, step.init_code_hash)
    else:
        nonce = step.nonce if step.nonce is not None else base_nonce + position
        address = create_address(step.deployer, nonce)
    return PredictedAddress(
        name=step.name,
        address=address,
        step_index=position,
        scheme=step.scheme,
    )


def predict_addresses(steps: Sequence[DeployStep], base_nonce: int = 0) -> list[PredictedAddress]:
    """Predict every step of an ordered deployment.

    CREATE steps without an explicit nonce use ``base_nonce`` plus their
    position in ``steps``.
    """
    if not steps:
        raise DeploymentPlanError("Deployment step list is empty")
    return [predict_address(step, i, base_nonce) for i, step in enumerate(steps)]


def _deployer_bytes(deployer: str) -> bytes:
    if not deployer:
        raise DeploymentPlanError("Deployer identity is empty")
    if not is_hex_address(deployer):
        raise DeploymentPlanError(f"Invalid deployer address: {deployer}")
    return to_canonical_address(deployer)
