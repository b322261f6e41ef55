"""Merkle tree over claim leaves, verifiable by the claiming contract.

Uses Keccak-256 as the hash function. Leaves keep their insertion
order; the tree is positional, not sorted, so every proof step records
whether its sibling sits on the left or on the right.

Hashing is domain separated: leaves are hashed with a 0x00 prefix by
the commitment builder, internal nodes with a 0x01 prefix here. An
internal node can therefore never be replayed as a leaf.

Odd levels promote their last node unchanged to the next level. The
promoted node has no sibling at that level, so its proof records no
step there. The on-chain verifier folds exactly the steps it is given,
so it follows the same rule without knowing about it.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from eth_utils import keccak

from bridgedrop.models.claim import MerkleProof, ProofStep

NODE_PREFIX = b"\x01"
HASH_SIZE = 32


class MerkleTree:
    """A deterministic positional Merkle tree.

    Usage:
        tree = MerkleTree()
        tree.add_leaf(leaf_a)
        tree.add_leaf(leaf_b)
        root = tree.compute_root()
        proof = tree.inclusion_proof(0)
    """

    def __init__(self, leaves: Iterable[bytes] = ()) -> None:
        self._leaves: list[bytes] = []
        self._tree: list[list[bytes]] = []
        self._computed = False
        for leaf in leaves:
            self.add_leaf(leaf)

    def add_leaf(self, leaf_hash: bytes) -> None:
        """Add a leaf hash. Must be called before compute_root."""
        if self._computed:
            raise RuntimeError("Tree already computed. Create a new tree.")
        if len(leaf_hash) != HASH_SIZE:
            raise ValueError(f"Leaf must be {HASH_SIZE} bytes, got {len(leaf_hash)}")
        self._leaves.append(bytes(leaf_hash))

    @property
    def leaf_count(self) -> int:
        return len(self._leaves)

    def compute_root(self) -> bytes:
        """Compute the Merkle root.

        Idempotent: a second call returns the root computed by the first.
        """
        if self._computed:
            return self._tree[-1][0]
        if not self._leaves:
            raise ValueError("No leaves to build tree")

        self._tree = [list(self._leaves)]
        current_level = self._tree[0]
        while len(current_level) > 1:
            next_level: list[bytes] = []
            for i in range(0, len(current_level) - 1, 2):
                next_level.append(hash_pair(current_level[i], current_level[i + 1]))
            if len(current_level) % 2 == 1:
                next_level.append(current_level[-1])  # promoted
            self._tree.append(next_level)
            current_level = next_level

        self._computed = True
        return current_level[0]

    def inclusion_proof(self, index: int) -> MerkleProof:
        """Generate an inclusion proof for the leaf at ``index``.

        Must call compute_root first.
        """
        if not self._computed:
            raise RuntimeError("Must call compute_root before generating proofs")
        if not 0 <= index < len(self._leaves):
            raise IndexError(f"Leaf index {index} out of range (0..{len(self._leaves) - 1})")

        path: list[ProofStep] = []
        current_idx = index
        for level in self._tree[:-1]:
            if current_idx % 2 == 0:
                sibling_idx = current_idx + 1
                if sibling_idx < len(level):
                    path.append(ProofStep(sibling=level[sibling_idx], position="R"))
                # else: promoted, nothing to record
            else:
                path.append(ProofStep(sibling=level[current_idx - 1], position="L"))
            current_idx //= 2

        return MerkleProof(
            leaf_hash=self._leaves[index],
            path=tuple(path),
            root=self._tree[-1][0],
        )


def hash_pair(left: bytes, right: bytes) -> bytes:
    """Hash two nodes together, left operand first."""
    return keccak(NODE_PREFIX + left + right)


def fold_proof(leaf_hash: bytes, path: Sequence[ProofStep]) -> bytes:
    """Recompute the root implied by a leaf and its proof path."""
    node = leaf_hash
    for step in path:
        if step.position == "L":
            node = hash_pair(step.sibling, node)
        elif step.position == "R":
            node = hash_pair(node, step.sibling)
        else:
            raise ValueError(f"Invalid proof position: {step.position!r}")
    return node


def verify_proof(leaf_hash: bytes, path: Sequence[ProofStep], root: bytes) -> bool:
    """Check that ``path`` places ``leaf_hash`` under ``root``."""
    return fold_proof(leaf_hash, path) == root
