"""Deployment plan models — steps, predicted addresses, constructor parameters."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Optional


class AddressScheme(str, enum.Enum):
    """How a contract address is derived from its deploy step."""
    CREATE = "create"  # deployer + nonce, depends on per-chain account state
    CREATE2 = "create2"  # deployer + salt + init code hash, same on every chain

    @property
    def chain_independent(self) -> bool:
        return self is AddressScheme.CREATE2


@dataclass(frozen=True)
class DeployStep:
    """A single contract creation in an ordered deployment.

    A step with a salt is a CREATE2 deployment through ``deployer`` (a
    factory) and needs the hash of the init code. A step without a salt
    is a plain CREATE from ``deployer``; its nonce is either explicit or
    taken from the step's position in the plan.
    """
    name: str
    deployer: str
    salt: Optional[bytes] = None
    init_code_hash: Optional[bytes] = None
    nonce: Optional[int] = None

    @property
    def scheme(self) -> AddressScheme:
        if self.salt is not None:
            return AddressScheme.CREATE2
        return AddressScheme.CREATE


@dataclass(frozen=True)
class PredictedAddress:
    """Address a step will create, derived without deploying."""
    name: str
    address: str
    step_index: int
    scheme: AddressScheme

    @property
    def chain_independent(self) -> bool:
        return self.scheme.chain_independent


@dataclass(frozen=True)
class Deployer:
    """The account that sends the deployment transaction on the target chain."""
    address: str
    nonce: int = 0


@dataclass(frozen=True)
class DeploymentParameters:
    """Constructor arguments of the bridged token deployer.

    Field order is the constructor's argument order.
    """
    foreign_token: str
    multi_token_mediator_gnosis_chain: str
    merkle_root: str
    community_funds_target: str
    gno_token: str
    gno_price: int
    native_token_price: int
    wrapped_native_token: str

    def constructor_input(self) -> list[Any]:
        """Return the arguments in the order the constructor expects."""
        return [
            self.foreign_token,
            self.multi_token_mediator_gnosis_chain,
            self.merkle_root,
            self.community_funds_target,
            self.gno_token,
            self.gno_price,
            self.native_token_price,
            self.wrapped_native_token,
        ]

    def to_json(self) -> dict[str, Any]:
        return {
            "foreignToken": self.foreign_token,
            "multiTokenMediatorGnosisChain": self.multi_token_mediator_gnosis_chain,
            "merkleRoot": self.merkle_root,
            "communityFundsTarget": self.community_funds_target,
            "gnoToken": self.gno_token,
            "gnoPrice": str(self.gno_price),
            "nativeTokenPrice": str(self.native_token_price),
            "wrappedNativeToken": self.wrapped_native_token,
        }
