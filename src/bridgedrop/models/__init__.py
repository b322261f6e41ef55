"""Core data models for bridgedrop."""

from bridgedrop.models.claim import (
    Claim,
    ClaimType,
    ClaimWithProof,
    MerkleProof,
    ProofStep,
)
from bridgedrop.models.deployment import (
    AddressScheme,
    DeployStep,
    Deployer,
    DeploymentParameters,
    PredictedAddress,
)

__all__ = [
    "AddressScheme",
    "Claim",
    "ClaimType",
    "ClaimWithProof",
    "DeployStep",
    "Deployer",
    "DeploymentParameters",
    "MerkleProof",
    "PredictedAddress",
    "ProofStep",
]
