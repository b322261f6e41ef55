"""bridgedrop CLI — prepare and inspect a bridged token deployment.

Usage:
    bridgedrop prepare --claims claims.csv --settings settings.json
    bridgedrop prepare --claims claims.csv --settings settings.json --deployer 0x... --offline
    bridgedrop root --claims claims.csv
    bridgedrop proof --account 0x...
    bridgedrop verify --account 0x... --claim-type Airdrop
    bridgedrop predict --deployer 0x... --nonce 7
    bridgedrop predict --deployer 0x... --salt 0x... --init-code-hash 0x...
    bridgedrop verify-artifacts --output output/deployment-gc

Environment (read from .env in the working directory when present):
    RPC_URL           JSON-RPC endpoint of the target chain
    DEPLOYER_ADDRESS  deployer account, if not derived from PRIVATE_KEY
    PRIVATE_KEY       only used to derive the deployer address
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from eth_utils import keccak

from bridgedrop.chain.provider import ChainProvider, StaticChainProvider, Web3ChainProvider
from bridgedrop.constants import GNOSIS_CHAIN_ID
from bridgedrop.crypto.address import create2_address, create_address
from bridgedrop.crypto.commitment_builder import CommitmentBuilder, leaf_hash
from bridgedrop.crypto.merkle import verify_proof
from bridgedrop.errors import BridgeDropError
from bridgedrop.models.claim import ClaimType
from bridgedrop.persistence.artifacts import (
    CLAIMS_FILE,
    PARAMS_FILE,
    ShardLimits,
    claim_from_entry,
    find_claims,
    read_json,
    verify_output_dir,
)
from bridgedrop.persistence.claims_csv import load_claims
from bridgedrop.service import DEFAULT_OUTPUT_DIR, DeploymentService


def _make_provider(args: argparse.Namespace) -> ChainProvider:
    """Live provider when an RPC URL is known, static one with --offline."""
    if args.offline:
        if not args.deployer:
            raise BridgeDropError("--offline needs --deployer (or DEPLOYER_ADDRESS)")
        return StaticChainProvider(args.chain_id, args.deployer, args.deployer_nonce)
    if not args.rpc_url:
        raise BridgeDropError("Missing RPC_URL: pass --rpc-url, set it in .env, or use --offline")
    return Web3ChainProvider(
        args.rpc_url,
        deployer=args.deployer,
        private_key=os.getenv("PRIVATE_KEY"),
    )


def cmd_prepare(args: argparse.Namespace) -> int:
    service = DeploymentService(
        _make_provider(args),
        expected_chain_id=args.chain_id,
        shard_limits=ShardLimits(max_items=args.max_shard_items, max_bytes=args.max_shard_bytes),
    )
    result = service.prepare(args.claims, args.settings, args.output, dry_run=args.dry_run)

    print(f"Merkle root:      {result.merkle_root}")
    print(f"Claims:           {result.claim_count}")
    for predicted in result.predicted:
        scope = "all chains" if predicted.chain_independent else f"chain {result.chain_id}"
        print(f"{predicted.name + ':':<18}{predicted.address} ({predicted.scheme.value}, {scope})")
    if args.dry_run:
        print("Dry run: no files written")
    else:
        print(f"Wrote {len(result.written)} files to {args.output}")
    return 0


def cmd_root(args: argparse.Namespace) -> int:
    commitment = CommitmentBuilder(load_claims(args.claims)).build()
    print(commitment.root_hex)
    return 0


def cmd_proof(args: argparse.Namespace) -> int:
    entries = find_claims(read_json(args.claims_file), args.account)
    if not entries:
        print(f"Account {args.account} not found in claims", file=sys.stderr)
        return 1
    print(json.dumps(entries, indent=2))
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    root = bytes.fromhex(read_json(args.params_file)["merkleRoot"][2:])
    entries = find_claims(read_json(args.claims_file), args.account)
    if args.claim_type:
        wanted = ClaimType.from_name(args.claim_type)
        entries = [e for e in entries if ClaimType.from_name(e["claimType"]) is wanted]
    if not entries:
        print(f"No matching claim for {args.account}", file=sys.stderr)
        return 1

    all_valid = True
    for entry in entries:
        claim, path = claim_from_entry(entry)
        ok = verify_proof(leaf_hash(claim), path, root)
        all_valid = all_valid and ok
        print(f"{claim.claim_type.value} {claim.amount}: valid proof: {ok}")
    return 0 if all_valid else 1


def cmd_predict(args: argparse.Namespace) -> int:
    if args.salt is None:
        print(create_address(args.deployer, args.nonce))
        return 0

    salt = bytes.fromhex(args.salt.removeprefix("0x"))
    if args.init_code_hash:
        code_hash = bytes.fromhex(args.init_code_hash.removeprefix("0x"))
    elif args.init_code:
        code_hash = keccak(bytes.fromhex(args.init_code.removeprefix("0x")))
    else:
        print("--salt needs --init-code-hash or --init-code", file=sys.stderr)
        return 1
    print(create2_address(args.deployer, salt, code_hash))
    return 0


def cmd_verify_artifacts(args: argparse.Namespace) -> int:
    count = verify_output_dir(args.output)
    print(f"Verified {count} claims in {args.output}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bridgedrop",
        description="Claim commitments and address prediction for the bridged token deployer",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    # prepare
    p_prep = sub.add_parser(
        "prepare",
        help="Generate claims, proofs and deployment parameters for the bridged token deployer",
    )
    p_prep.add_argument("--claims", type=Path, required=True, help="CSV file with the claims")
    p_prep.add_argument("--settings", type=Path, required=True, help="JSON file with deployment settings")
    p_prep.add_argument(
        "--output", type=Path, default=DEFAULT_OUTPUT_DIR,
        help=f"Output directory (default: {DEFAULT_OUTPUT_DIR})",
    )
    p_prep.add_argument(
        "--chain-id", type=int, default=GNOSIS_CHAIN_ID,
        help=f"Chain the deployment must run on (default: {GNOSIS_CHAIN_ID})",
    )
    p_prep.add_argument("--rpc-url", default=os.getenv("RPC_URL"), help="JSON-RPC endpoint (default: $RPC_URL)")
    p_prep.add_argument(
        "--deployer", default=os.getenv("DEPLOYER_ADDRESS"),
        help="Deployer address (default: $DEPLOYER_ADDRESS, else derived from $PRIVATE_KEY)",
    )
    p_prep.add_argument("--offline", action="store_true", help="Do not contact a node; use --deployer and --deployer-nonce")
    p_prep.add_argument("--deployer-nonce", type=int, default=0, help="Deployer nonce in offline mode (default: 0)")
    p_prep.add_argument("--max-shard-items", type=int, default=500, help="Maximum claims per shard (default: 500)")
    p_prep.add_argument("--max-shard-bytes", type=int, help="Maximum shard size in bytes")
    p_prep.add_argument("--dry-run", action="store_true", help="Run every check but write nothing")

    # root
    p_root = sub.add_parser("root", help="Print the Merkle root of a claims CSV")
    p_root.add_argument("--claims", type=Path, required=True, help="CSV file with the claims")

    # proof
    p_proof = sub.add_parser("proof", help="Print the claims and proofs of an account")
    p_proof.add_argument("--account", required=True, help="Claimant address")
    p_proof.add_argument(
        "--claims-file", type=Path, default=DEFAULT_OUTPUT_DIR / CLAIMS_FILE,
        help="claims.json written by prepare",
    )

    # verify
    p_verify = sub.add_parser("verify", help="Verify an account's proofs against params.json")
    p_verify.add_argument("--account", required=True, help="Claimant address")
    p_verify.add_argument("--claim-type", choices=[t.value for t in ClaimType], help="Only this claim type")
    p_verify.add_argument(
        "--claims-file", type=Path, default=DEFAULT_OUTPUT_DIR / CLAIMS_FILE,
        help="claims.json written by prepare",
    )
    p_verify.add_argument(
        "--params-file", type=Path, default=DEFAULT_OUTPUT_DIR / PARAMS_FILE,
        help="params.json written by prepare",
    )

    # predict
    p_pred = sub.add_parser("predict", help="Predict a CREATE or CREATE2 address")
    p_pred.add_argument("--deployer", required=True, help="Deployer (CREATE) or factory (CREATE2) address")
    p_pred.add_argument("--nonce", type=int, default=0, help="Deployer nonce for CREATE (default: 0)")
    p_pred.add_argument("--salt", help="32-byte salt; selects CREATE2")
    p_pred.add_argument("--init-code-hash", help="keccak256 of the init code (CREATE2)")
    p_pred.add_argument("--init-code", help="Init code, hashed here (CREATE2)")

    # verify-artifacts
    p_art = sub.add_parser("verify-artifacts", help="Re-check every proof and shard of an output directory")
    p_art.add_argument("--output", type=Path, default=DEFAULT_OUTPUT_DIR, help="Output directory")

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv(find_dotenv(usecwd=True))
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "prepare": cmd_prepare,
        "root": cmd_root,
        "proof": cmd_proof,
        "verify": cmd_verify,
        "predict": cmd_predict,
        "verify-artifacts": cmd_verify_artifacts,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    try:
        return handler(args)
    except (BridgeDropError, OSError, ValueError, KeyError) as exc:
        print(f"Failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
