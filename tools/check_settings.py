#!/usr/bin/env python3
"""Check a deployment settings file without contacting a node.

Predicts every contract the settings describe and compares it against
its expected address. Contracts deployed through CREATE are predicted
for a deployer that has sent no transactions yet (nonce 0), so only
CREATE2 predictions are final here.

Usage:
    python3 tools/check_settings.py settings.json [--deployer 0x...]
"""

import argparse
import sys
from pathlib import Path

# Add src to path for bridgedrop imports
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from bridgedrop.engine.planner import TARGET_CONTRACT, plan_deployment
from bridgedrop.engine.verifier import verify_expected_addresses
from bridgedrop.errors import BridgeDropError
from bridgedrop.models.deployment import Deployer
from bridgedrop.settings import Settings


def check(settings_path: Path, deployer: str) -> int:
    try:
        settings = Settings.from_file(settings_path)
        predicted = [
            p for p in plan_deployment(settings, Deployer(address=deployer))
            if p.name != TARGET_CONTRACT
        ]
        warnings = verify_expected_addresses(predicted, settings.expected_addresses())
    except BridgeDropError as exc:
        print(f"FAIL: {exc}")
        return 1

    for p in predicted:
        final = "final" if p.chain_independent else "nonce-dependent"
        print(f"  {p.name:<16} {p.address}  {p.scheme.value} ({final})")
    for warning in warnings:
        print(f"  WARN: {warning}")
    print(f"OK: {len(predicted)} contracts checked")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("settings", type=Path)
    parser.add_argument("--deployer", default="0x" + "11" * 20, help="Deployer for CREATE steps")
    args = parser.parse_args()
    return check(args.settings, args.deployer)


if __name__ == "__main__":
    raise SystemExit(main())
