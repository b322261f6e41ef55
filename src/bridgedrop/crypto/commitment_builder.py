"""Commitment builder — commits a claim list to a single Merkle root.

Each claim is encoded to a fixed-width leaf:

    keccak256(0x00 || uint8 LEAF_VERSION || uint8 claim_type_code
              || address (20 bytes) || uint256 amount)

All fields are fixed width, so no two claims share an encoding, and the
version byte keeps a future encoding from colliding with this one.

The builder is deterministic: given the same claim sequence, it
produces the same root and the same proofs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from eth_utils import keccak, to_canonical_address

from bridgedrop.crypto.merkle import MerkleTree, verify_proof
from bridgedrop.models.claim import Claim, ClaimWithProof, MerkleProof

LEAF_PREFIX = b"\x00"
LEAF_VERSION = 1


@dataclass(frozen=True)
class ClaimCommitment:
    """Root of a claim set plus every claim's inclusion proof."""
    root: bytes
    claims: tuple[ClaimWithProof, ...]

    @property
    def root_hex(self) -> str:
        return "0x" + self.root.hex()


def encode_claim(claim: Claim) -> bytes:
    """Canonical byte encoding of a claim, before hashing."""
    return (
        LEAF_PREFIX
        + bytes([LEAF_VERSION, claim.claim_type.code])
        + to_canonical_address(claim.account)
        + claim.amount.to_bytes(32, byteorder="big")
    )


def leaf_hash(claim: Claim) -> bytes:
    return keccak(encode_claim(claim))


class CommitmentBuilder:
    """Builds the claim commitment.

    Usage:
        builder = CommitmentBuilder()
        for claim in claims:
            builder.add_claim(claim)
        commitment = builder.build()
    """

    def __init__(self, claims: Sequence[Claim] = ()) -> None:
        self._claims: list[Claim] = list(claims)

    def add_claim(self, claim: Claim) -> None:
        self._claims.append(claim)

    def build(self) -> ClaimCommitment:
        """Hash every claim, build the tree and collect per-claim proofs."""
        if not self._claims:
            raise ValueError("Cannot commit to an empty claim list")

        tree = MerkleTree(leaf_hash(claim) for claim in self._claims)
        root = tree.compute_root()
        with_proofs = tuple(
            ClaimWithProof(claim=claim, index=i, proof=tree.inclusion_proof(i))
            for i, claim in enumerate(self._claims)
        )
        return ClaimCommitment(root=root, claims=with_proofs)


def verify_claim(claim: Claim, proof: MerkleProof, root: bytes) -> bool:
    """Check a claim against a root using only the proof's sibling path."""
    return verify_proof(leaf_hash(claim), proof.path, root)
