"""Tests for artifact planning, sharding and writing."""

import json
from pathlib import Path

import pytest
from eth_utils import to_checksum_address

from bridgedrop.crypto.commitment_builder import CommitmentBuilder, leaf_hash
from bridgedrop.crypto.merkle import verify_proof
from bridgedrop.models.claim import Claim, ClaimType
from bridgedrop.models.deployment import DeploymentParameters
from bridgedrop.persistence.artifacts import (
    ADDRESSES_FILE,
    CHUNKS_DIR,
    CLAIMS_FILE,
    PARAMS_FILE,
    ArtifactWriter,
    ShardLimits,
    claim_from_entry,
    find_claims,
    split_into_shards,
    verify_output_dir,
)

TARGET = "0x" + "7a" * 20


def _commitment(count: int):
    claims = [
        Claim(
            account=to_checksum_address("0x" + f"{i + 1:040x}"),
            amount=10**18 + i,
            claim_type=list(ClaimType)[i % 6],
        )
        for i in range(count)
    ]
    return CommitmentBuilder(claims).build()


def _parameters(root: str) -> DeploymentParameters:
    return DeploymentParameters(
        foreign_token="0x" + "01" * 20,
        multi_token_mediator_gnosis_chain="0x" + "02" * 20,
        merkle_root=root,
        community_funds_target="0x" + "03" * 20,
        gno_token="0x" + "04" * 20,
        gno_price=5,
        native_token_price=6,
        wrapped_native_token="0x" + "05" * 20,
    )


def _write(output_dir: Path, count: int, limits: ShardLimits = ShardLimits()) -> list[Path]:
    commitment = _commitment(count)
    writer = ArtifactWriter(output_dir, limits)
    return writer.write(TARGET, _parameters(commitment.root_hex), commitment.claims)


class TestSplitIntoShards:
    def test_item_limit(self) -> None:
        entries = [{"i": i} for i in range(7)]
        shards = split_into_shards(entries, ShardLimits(max_items=3))
        assert [len(s) for s in shards] == [3, 3, 1]
        assert [e for s in shards for e in s] == entries

    def test_byte_limit(self) -> None:
        entries = [{"i": i} for i in range(4)]  # each {"i":N} is 7 bytes
        shards = split_into_shards(entries, ShardLimits(max_bytes=2 + 7 + 1 + 7))
        assert [len(s) for s in shards] == [2, 2]
        for shard in shards:
            assert len(json.dumps(shard, separators=(",", ":"))) <= 17

    def test_oversize_entry_gets_own_shard(self) -> None:
        entries = [{"i": 0}, {"big": "x" * 50}, {"i": 1}]
        shards = split_into_shards(entries, ShardLimits(max_bytes=20))
        assert shards == [[{"i": 0}], [{"big": "x" * 50}], [{"i": 1}]]

    def test_empty(self) -> None:
        assert split_into_shards([], ShardLimits()) == []

    @pytest.mark.parametrize("kwargs", [{"max_items": 0}, {"max_bytes": 2}])
    def test_invalid_limits(self, kwargs) -> None:
        with pytest.raises(ValueError):
            ShardLimits(**kwargs)


class TestArtifactPlan:
    def test_removes_precede_writes(self, tmp_path: Path) -> None:
        commitment = _commitment(3)
        steps = ArtifactWriter(tmp_path).plan(TARGET, _parameters(commitment.root_hex), commitment.claims)
        actions = [s.action for s in steps]
        assert actions == sorted(actions, key=lambda a: a != "remove")
        assert {s.path for s in steps if s.action == "remove"} == {
            ADDRESSES_FILE, PARAMS_FILE, CLAIMS_FILE, CHUNKS_DIR,
        }

    def test_plan_touches_nothing(self, tmp_path: Path) -> None:
        commitment = _commitment(3)
        ArtifactWriter(tmp_path / "out").plan(TARGET, _parameters(commitment.root_hex), commitment.claims)
        assert list(tmp_path.iterdir()) == []


class TestArtifactWriter:
    def test_layout(self, tmp_path: Path) -> None:
        out = tmp_path / "out"
        written = _write(out, 5, ShardLimits(max_items=2))
        assert json.loads((out / ADDRESSES_FILE).read_text()) == TARGET
        params = json.loads((out / PARAMS_FILE).read_text())
        claims = json.loads((out / CLAIMS_FILE).read_text())
        assert len(claims) == 5
        assert sorted(p.name for p in (out / CHUNKS_DIR).iterdir()) == ["0.json", "1.json", "2.json"]
        assert len(written) == 3 + 3
        assert params["merkleRoot"].startswith("0x")

    def test_written_proofs_verify(self, tmp_path: Path) -> None:
        out = tmp_path / "out"
        _write(out, 9)
        root = bytes.fromhex(json.loads((out / PARAMS_FILE).read_text())["merkleRoot"][2:])
        for entry in json.loads((out / CLAIMS_FILE).read_text()):
            claim, path = claim_from_entry(entry)
            assert verify_proof(leaf_hash(claim), path, root)

    def test_rerun_removes_orphan_shards(self, tmp_path: Path) -> None:
        out = tmp_path / "out"
        _write(out, 10, ShardLimits(max_items=2))
        assert len(list((out / CHUNKS_DIR).iterdir())) == 5
        (out / CHUNKS_DIR / "stray.txt").write_text("left over")
        _write(out, 3, ShardLimits(max_items=2))
        assert sorted(p.name for p in (out / CHUNKS_DIR).iterdir()) == ["0.json", "1.json"]
        assert verify_output_dir(out) == 3

    def test_unrelated_files_kept(self, tmp_path: Path) -> None:
        out = tmp_path / "out"
        out.mkdir()
        (out / "notes.md").write_text("keep me")
        _write(out, 2)
        assert (out / "notes.md").read_text() == "keep me"

    def test_no_staging_directory_left(self, tmp_path: Path) -> None:
        _write(tmp_path / "out", 4)
        assert [p.name for p in tmp_path.iterdir()] == ["out"]

    def test_reproducible(self, tmp_path: Path) -> None:
        _write(tmp_path / "a", 6, ShardLimits(max_items=4))
        _write(tmp_path / "b", 6, ShardLimits(max_items=4))
        for name in (ADDRESSES_FILE, PARAMS_FILE, CLAIMS_FILE, f"{CHUNKS_DIR}/0.json", f"{CHUNKS_DIR}/1.json"):
            assert (tmp_path / "a" / name).read_bytes() == (tmp_path / "b" / name).read_bytes()


class TestReadBack:
    def test_find_claims_ignores_case(self, tmp_path: Path) -> None:
        out = tmp_path / "out"
        _write(out, 3)
        entries = json.loads((out / CLAIMS_FILE).read_text())
        account = entries[1]["account"]
        assert find_claims(entries, account.lower()) == [entries[1]]
        assert find_claims(entries, "0x" + "ff" * 20) == []

    def test_verify_output_dir_detects_tampering(self, tmp_path: Path) -> None:
        out = tmp_path / "out"
        _write(out, 4)
        entries = json.loads((out / CLAIMS_FILE).read_text())
        entries[2]["amount"] = str(int(entries[2]["amount"]) + 1)
        (out / CLAIMS_FILE).write_text(json.dumps(entries))
        with pytest.raises(ValueError, match="Leaf mismatch"):
            verify_output_dir(out)

    def test_verify_output_dir_detects_shard_gap(self, tmp_path: Path) -> None:
        out = tmp_path / "out"
        _write(out, 4, ShardLimits(max_items=1))
        (out / CHUNKS_DIR / "1.json").unlink()
        with pytest.raises(ValueError, match="numbered"):
            verify_output_dir(out)
