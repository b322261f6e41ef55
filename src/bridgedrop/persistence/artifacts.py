"""Artifact writer — reproducible output directory for a deployment run.

Layout of the output directory:

    addresses.json     predicted address of the bridged token deployer
    params.json        constructor parameters, including the Merkle root
    claims.json        full ordered claim + proof list
    chunks/<n>.json    the same list split into bounded shards

Writing is an explicit ordered list of steps, built only after every
check of the run has passed:

1. every file is rendered in memory,
2. every file is staged into a temporary sibling directory,
3. stale outputs (including the whole chunks directory) are removed,
4. staged files are moved into place with whole-file replacements.

A failure while rendering or staging leaves the previous artifacts
untouched. Only the final removal and rename steps touch the output
directory.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence

from bridgedrop.crypto.commitment_builder import leaf_hash
from bridgedrop.crypto.merkle import verify_proof
from bridgedrop.errors import ArtifactWriteError
from bridgedrop.models.claim import Claim, ClaimType, ClaimWithProof, ProofStep
from bridgedrop.models.deployment import DeploymentParameters

logger = logging.getLogger(__name__)

ADDRESSES_FILE = "addresses.json"
PARAMS_FILE = "params.json"
CLAIMS_FILE = "claims.json"
CHUNKS_DIR = "chunks"

STALE_OUTPUTS = (ADDRESSES_FILE, PARAMS_FILE, CLAIMS_FILE, CHUNKS_DIR)


@dataclass(frozen=True)
class ShardLimits:
    """Upper bounds for one shard file.

    ``max_bytes`` bounds the compact JSON size of a shard. An entry that
    alone exceeds it is written as a single-entry shard.
    """
    max_items: int = 500
    max_bytes: Optional[int] = None

    def __post_init__(self) -> None:
        if self.max_items < 1:
            raise ValueError(f"max_items must be at least 1, got {self.max_items}")
        if self.max_bytes is not None and self.max_bytes < 3:
            raise ValueError(f"max_bytes must be at least 3, got {self.max_bytes}")


@dataclass(frozen=True)
class ArtifactStep:
    """One filesystem action, relative to the output directory."""
    action: str  # "remove" | "write"
    path: str
    content: Optional[str] = None


def _compact(obj: Any) -> str:
    return json.dumps(obj, separators=(",", ":"))


def split_into_shards(entries: Sequence[dict[str, Any]], limits: ShardLimits) -> list[list[dict[str, Any]]]:
    """Partition ``entries`` in order into shards bounded by ``limits``."""
    shards: list[list[dict[str, Any]]] = []
    current: list[dict[str, Any]] = []
    current_size = 2  # "[]"

    for entry in entries:
        entry_size = len(_compact(entry).encode("utf-8"))
        added = entry_size + (1 if current else 0)  # "," separator
        too_many = len(current) >= limits.max_items
        too_big = limits.max_bytes is not None and current_size + added > limits.max_bytes
        if current and (too_many or too_big):
            shards.append(current)
            current, current_size = [], 2
            added = entry_size
        current.append(entry)
        current_size += added

    if current:
        shards.append(current)
    return shards


class ArtifactWriter:
    """Plans and executes the write of one output directory.

    Usage:
        writer = ArtifactWriter(Path("output/deployment-gc"))
        steps = writer.plan(deployer_address, parameters, claims)
        writer.execute(steps)
    """

    def __init__(self, output_dir: Path, limits: ShardLimits = ShardLimits()) -> None:
        self._output_dir = output_dir
        self._limits = limits

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def plan(
        self,
        deployer_address: str,
        parameters: DeploymentParameters,
        claims: Sequence[ClaimWithProof],
    ) -> list[ArtifactStep]:
        """Render every output file and return the ordered step list."""
        entries = [c.to_json() for c in claims]
        steps = [ArtifactStep("remove", name) for name in STALE_OUTPUTS]
        steps.append(ArtifactStep("write", ADDRESSES_FILE, json.dumps(deployer_address, indent=2)))
        steps.append(ArtifactStep("write", PARAMS_FILE, json.dumps(parameters.to_json(), indent=2)))
        steps.append(ArtifactStep("write", CLAIMS_FILE, _compact(entries)))
        for index, shard in enumerate(split_into_shards(entries, self._limits)):
            steps.append(ArtifactStep("write", f"{CHUNKS_DIR}/{index}.json", _compact(shard)))
        return steps

    def execute(self, steps: Sequence[ArtifactStep]) -> list[Path]:
        """Stage, clean up, then move into place. Returns the written paths."""
        writes = [s for s in steps if s.action == "write"]
        removes = [s for s in steps if s.action == "remove"]

        parent = self._output_dir.resolve().parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
            staging = Path(tempfile.mkdtemp(prefix=".bridgedrop-", dir=parent))
        except OSError as exc:
            raise ArtifactWriteError(parent, "create staging directory in", exc) from exc

        try:
            for step in writes:
                _write_file(staging / step.path, step.content or "")

            logger.info("Clearing old files in %s", self._output_dir)
            for step in removes:
                _remove(self._output_dir / step.path)

            logger.info("Saving generated data to %s", self._output_dir)
            written: list[Path] = []
            for step in writes:
                target = self._output_dir / step.path
                try:
                    target.parent.mkdir(parents=True, exist_ok=True)
                    os.replace(staging / step.path, target)
                except OSError as exc:
                    raise ArtifactWriteError(target, "move into place", exc) from exc
                written.append(target)
            return written
        finally:
            shutil.rmtree(staging, ignore_errors=True)

    def write(
        self,
        deployer_address: str,
        parameters: DeploymentParameters,
        claims: Sequence[ClaimWithProof],
    ) -> list[Path]:
        return self.execute(self.plan(deployer_address, parameters, claims))


def _write_file(path: Path, content: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise ArtifactWriteError(path, "write", exc) from exc


def _remove(path: Path) -> None:
    try:
        if path.is_dir():
            shutil.rmtree(path)
        else:
            path.unlink(missing_ok=True)
    except OSError as exc:
        raise ArtifactWriteError(path, "remove", exc) from exc


# ------------------------------------------------------------------
# Reading artifacts back
# ------------------------------------------------------------------

def claim_from_entry(entry: dict[str, Any]) -> tuple[Claim, tuple[ProofStep, ...]]:
    """Rebuild a claim and its proof path from a claims.json entry."""
    claim = Claim(
        account=entry["account"],
        amount=int(entry["amount"]),
        claim_type=ClaimType.from_name(entry["claimType"]),
    )
    path = tuple(
        ProofStep(sibling=bytes.fromhex(step["sibling"][2:]), position=step["position"])
        for step in entry["proof"]
    )
    return claim, path


def find_claims(entries: Sequence[dict[str, Any]], account: str) -> list[dict[str, Any]]:
    """Return every entry of ``account``, compared case-insensitively."""
    wanted = account.lower()
    return [e for e in entries if e["account"].lower() == wanted]


def read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def verify_output_dir(output_dir: Path) -> int:
    """Re-check a written output directory.

    Every entry's leaf and proof must match the root in params.json, and
    the shards must concatenate to claims.json. Returns the number of
    verified claims; raises ValueError on the first inconsistency.
    """
    params = read_json(output_dir / PARAMS_FILE)
    root = bytes.fromhex(params["merkleRoot"][2:])
    entries = read_json(output_dir / CLAIMS_FILE)

    for entry in entries:
        claim, path = claim_from_entry(entry)
        leaf = leaf_hash(claim)
        if "0x" + leaf.hex() != entry["leaf"]:
            raise ValueError(f"Leaf mismatch for claim index {entry['index']}")
        if not verify_proof(leaf, path, root):
            raise ValueError(f"Proof does not match root for claim index {entry['index']}")

    chunks_dir = output_dir / CHUNKS_DIR
    shard_files = sorted(chunks_dir.glob("*.json"), key=lambda p: int(p.stem))
    if [int(p.stem) for p in shard_files] != list(range(len(shard_files))):
        raise ValueError(f"Shard files in {chunks_dir} are not numbered 0..n-1")
    from_shards: list[dict[str, Any]] = []
    for shard_file in shard_files:
        from_shards.extend(read_json(shard_file))
    if from_shards != entries:
        raise ValueError("Shards do not concatenate to the full claim list")

    return len(entries)
