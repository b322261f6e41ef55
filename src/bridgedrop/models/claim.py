"""Claim records and their inclusion proofs.

A claim entitles one account to a fixed amount under a named claim
type. Claims are immutable once loaded; the commitment builder pairs
each one with the proof that places it under the Merkle root.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any


class ClaimType(str, enum.Enum):
    """Closed set of claim types understood by the claiming contract.

    The declaration order fixes the one-byte code that goes into the
    leaf encoding. Never reorder.
    """
    AIRDROP = "Airdrop"
    GNO_OPTION = "GnoOption"
    USER_OPTION = "UserOption"
    INVESTOR = "Investor"
    TEAM = "Team"
    ADVISOR = "Advisor"

    @property
    def code(self) -> int:
        return list(ClaimType).index(self)

    @classmethod
    def from_name(cls, name: str) -> ClaimType:
        """Look up a claim type by its name, ignoring case."""
        wanted = name.strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        raise ValueError(f"Unknown claim type: {name!r}")


@dataclass(frozen=True)
class Claim:
    """A single beneficiary entitlement."""
    account: str  # checksummed 0x-prefixed address
    amount: int
    claim_type: ClaimType


@dataclass(frozen=True)
class ProofStep:
    """One level of an inclusion proof."""
    sibling: bytes
    position: str  # "L" if the sibling is the left operand, "R" otherwise


@dataclass(frozen=True)
class MerkleProof:
    """An inclusion proof for a single leaf."""
    leaf_hash: bytes
    path: tuple[ProofStep, ...]
    root: bytes


@dataclass(frozen=True)
class ClaimWithProof:
    """A claim together with its position and proof in the commitment."""
    claim: Claim
    index: int
    proof: MerkleProof

    def to_json(self) -> dict[str, Any]:
        """Serialize for the claim artifact files.

        Amounts are decimal strings so that uint256 values survive JSON
        consumers without arbitrary-precision integers.
        """
        return {
            "account": self.claim.account,
            "claimType": self.claim.claim_type.value,
            "amount": str(self.claim.amount),
            "index": self.index,
            "leaf": "0x" + self.proof.leaf_hash.hex(),
            "proof": [
                {"sibling": "0x" + step.sibling.hex(), "position": step.position}
                for step in self.proof.path
            ],
        }
