"""Cryptographic primitives — Merkle trees, claim commitments, address prediction."""

from bridgedrop.crypto.merkle import MerkleTree
from bridgedrop.crypto.commitment_builder import ClaimCommitment, CommitmentBuilder
from bridgedrop.crypto.address import create_address, create2_address, predict_addresses

__all__ = [
    "ClaimCommitment",
    "CommitmentBuilder",
    "MerkleTree",
    "create2_address",
    "create_address",
    "predict_addresses",
]
