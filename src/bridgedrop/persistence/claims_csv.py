"""Claims table loader — CSV rows to validated Claim records.

The header row defines field order; it must name the columns
``account``, ``amount`` and ``claimType`` (case-insensitive). Extra
columns are ignored. Rows are returned in file order.
Mixed-case addresses must carry a valid EIP-55 checksum; all-lower or
all-upper addresses are accepted as is.

Fail-closed: one malformed row rejects the whole table, with the
1-based data row number (header excluded) and the offending field.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable, Mapping

from eth_utils import is_checksum_address, is_hex_address, to_checksum_address

from bridgedrop.errors import ClaimValidationError
from bridgedrop.models.claim import Claim, ClaimType

REQUIRED_COLUMNS = ("account", "amount", "claimType")
ZERO_ADDRESS = "0x" + "0" * 40
MAX_UINT256 = 2**256 - 1


def load_claims(path: Path) -> list[Claim]:
    """Read and validate every claim in a CSV file."""
    with path.open("r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        columns = _resolve_columns(reader.fieldnames or [])
        rows = (
            {name: row.get(column) for name, column in columns.items()}
            for row in reader
        )
        return parse_claim_rows(rows)


def parse_claim_rows(rows: Iterable[Mapping[str, object]]) -> list[Claim]:
    """Validate raw rows keyed by ``account``, ``amount`` and ``claimType``."""
    claims: list[Claim] = []
    seen: set[tuple[str, ClaimType]] = set()

    for row_num, row in enumerate(rows, 1):
        account = _parse_account(row_num, row.get("account"))
        amount = _parse_amount(row_num, row.get("amount"))
        claim_type = _parse_claim_type(row_num, row.get("claimType"))

        key = (account, claim_type)
        if key in seen:
            raise ClaimValidationError(
                row_num, "account",
                f"duplicate claim for {account} with type {claim_type.value}",
            )
        seen.add(key)
        claims.append(Claim(account=account, amount=amount, claim_type=claim_type))

    if not claims:
        raise ClaimValidationError(0, "account", "claims table has no data rows")
    return claims


def _resolve_columns(fieldnames: Iterable[str]) -> dict[str, str]:
    """Map each required column to the header spelling used in the file."""
    by_lower = {name.strip().lower(): name for name in fieldnames if name}
    columns: dict[str, str] = {}
    for required in REQUIRED_COLUMNS:
        actual = by_lower.get(required.lower())
        if actual is None:
            raise ClaimValidationError(0, required, "missing column in header row")
        columns[required] = actual
    return columns


def _parse_account(row_num: int, value: object) -> str:
    text = str(value or "").strip()
    if not is_hex_address(text) or not text.startswith("0x"):
        raise ClaimValidationError(row_num, "account", f"not a valid address: {text!r}")
    digits = text[2:]
    if digits != digits.lower() and digits != digits.upper() and not is_checksum_address(text):
        raise ClaimValidationError(row_num, "account", f"invalid checksum: {text!r}")
    if text.lower() == ZERO_ADDRESS:
        raise ClaimValidationError(row_num, "account", "zero address cannot claim")
    return to_checksum_address(text)


def _parse_amount(row_num: int, value: object) -> int:
    text = str(value or "").strip()
    if not text.isdigit() or not text.isascii():
        raise ClaimValidationError(row_num, "amount", f"not a non-negative integer: {text!r}")
    amount = int(text)
    if amount == 0:
        raise ClaimValidationError(row_num, "amount", "amount must be positive")
    if amount > MAX_UINT256:
        raise ClaimValidationError(row_num, "amount", "amount does not fit in uint256")
    return amount


def _parse_claim_type(row_num: int, value: object) -> ClaimType:
    text = str(value or "").strip()
    try:
        return ClaimType.from_name(text)
    except ValueError:
        allowed = ", ".join(t.value for t in ClaimType)
        raise ClaimValidationError(
            row_num, "claimType", f"unknown claim type {text!r} (expected one of: {allowed})"
        ) from None
