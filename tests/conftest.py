"""Shared fixtures: claim tables and settings documents on disk."""

import csv
import json
from pathlib import Path
from typing import Any

import pytest

ALICE = "0x" + "aa" * 20
BOB = "0x" + "bb" * 20
CAROL = "0x" + "cc" * 20
DEPLOYER = "0x6ac7ea33f8831ea9dcc53393aaa88b25a785dbf0"
MEDIATOR = "0xf6A78083ca3e2a662D6dd1703c939c8aCE2e268d"
DAO_FACTORY = "0xa6B71E26C5e0845f74c812102Ca7114b6a896AB2"

DAO_SALT = "0x" + "00" * 31 + "01"
DAO_INIT_CODE_HASH = "0x" + "ab" * 32
TOKEN_SALT = "0x" + "00" * 31 + "02"
TOKEN_BYTECODE = "0x6080604052"


def write_claims_csv(path: Path, rows: list[tuple[str, Any, str]], header=("account", "amount", "claimType")) -> Path:
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for row in rows:
            writer.writerow(row)
    return path


def settings_document(**contract_overrides: dict[str, Any]) -> dict[str, Any]:
    """A complete settings document; contract entries can be overridden."""
    contracts: dict[str, Any] = {
        "cowDao": {
            "deployer": DAO_FACTORY,
            "salt": DAO_SALT,
            "initCodeHash": DAO_INIT_CODE_HASH,
        },
        "cowToken": {
            "salt": TOKEN_SALT,
            "bytecode": TOKEN_BYTECODE,
            "constructor": {"types": ["address", "uint256"], "args": ["@cowDao", "1000"]},
        },
    }
    for name, override in contract_overrides.items():
        contracts[name] = {**contracts.get(name, {}), **override}
    return {
        "bridge": {"multiTokenMediatorGnosisChain": MEDIATOR},
        "virtualCowToken": {"gnoPrice": "375000000000000000000"},
        "contracts": contracts,
    }


def write_settings(path: Path, document: dict[str, Any]) -> Path:
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


@pytest.fixture
def claims_csv(tmp_path: Path) -> Path:
    return write_claims_csv(
        tmp_path / "claims.csv",
        [
            (ALICE, "100", "Airdrop"),
            (BOB, "250", "Investor"),
            (CAROL, "5000", "Team"),
            (ALICE, "42", "Advisor"),
        ],
    )


@pytest.fixture
def settings_json(tmp_path: Path) -> Path:
    return write_settings(tmp_path / "settings.json", settings_document())
