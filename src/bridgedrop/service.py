"""Deployment service — the end-to-end preparation pipeline.

Stages run strictly in order, each on the complete output of the
previous one:

1. Network check: the provider's chain id must equal the target chain,
   before claims or settings are read.
2. Deployer resolution.
3. Claim loading and commitment building.
4. Address prediction for the whole deployment plan.
5. Verification of predicted addresses against expectations.
6. Parameter assembly.
7. Artifact writing.

Every failure aborts the run. Nothing in the output directory changes
unless steps 1-6 have all succeeded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping

from bridgedrop.chain.provider import ChainProvider
from bridgedrop.constants import DEFAULT_TOKENS, GNOSIS_CHAIN_ID
from bridgedrop.crypto.commitment_builder import CommitmentBuilder
from bridgedrop.engine.assembler import assemble_parameters, merge_token_registries
from bridgedrop.engine.planner import TARGET_CONTRACT, plan_deployment
from bridgedrop.engine.verifier import verify_expected_addresses
from bridgedrop.errors import NetworkIdentityMismatch
from bridgedrop.models.deployment import Deployer, DeploymentParameters, PredictedAddress
from bridgedrop.persistence.artifacts import ArtifactWriter, ShardLimits
from bridgedrop.persistence.claims_csv import load_claims
from bridgedrop.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = Path("output") / "deployment-gc"


@dataclass(frozen=True)
class DeploymentResult:
    """Everything a preparation run produced."""
    chain_id: int
    deployer: Deployer
    merkle_root: str
    claim_count: int
    predicted: tuple[PredictedAddress, ...]
    parameters: DeploymentParameters
    warnings: tuple[str, ...] = ()
    written: tuple[Path, ...] = ()

    @property
    def target_address(self) -> str:
        """Predicted address of the bridged token deployer."""
        return next(p.address for p in self.predicted if p.name == TARGET_CONTRACT)


class DeploymentService:
    """Prepares the bridged token deployer deployment.

    Usage:
        provider = StaticChainProvider(chain_id=100, deployer="0x...")
        service = DeploymentService(provider)
        result = service.prepare(claims_csv, settings_json, output_dir)
    """

    def __init__(
        self,
        provider: ChainProvider,
        expected_chain_id: int = GNOSIS_CHAIN_ID,
        token_defaults: Mapping[str, Mapping[int, str]] = DEFAULT_TOKENS,
        shard_limits: ShardLimits = ShardLimits(),
    ) -> None:
        self._provider = provider
        self._expected_chain_id = expected_chain_id
        self._token_defaults = token_defaults
        self._shard_limits = shard_limits

    def prepare(
        self,
        claims_path: Path,
        settings_path: Path,
        output_dir: Path = DEFAULT_OUTPUT_DIR,
        dry_run: bool = False,
    ) -> DeploymentResult:
        """Run the full pipeline. With ``dry_run``, nothing is written."""
        chain_id = self._provider.resolve_network()
        if chain_id != self._expected_chain_id:
            raise NetworkIdentityMismatch(self._expected_chain_id, chain_id)

        deployer = self._provider.resolve_deployer()
        logger.info("Using deployer %s (nonce %d)", deployer.address, deployer.nonce)

        settings = Settings.from_file(settings_path)

        logger.info("Reading user claims for chain %d from %s", chain_id, claims_path)
        claims = load_claims(claims_path)

        logger.info("Generating Merkle proofs for %d claims", len(claims))
        commitment = CommitmentBuilder(claims).build()
        logger.info("Merkle root: %s", commitment.root_hex)

        predicted = plan_deployment(settings, deployer)
        warnings = verify_expected_addresses(predicted, settings.expected_addresses())

        registry = merge_token_registries(self._token_defaults, settings.tokens)
        parameters = assemble_parameters(
            commitment.root_hex, predicted, settings, chain_id, registry
        )
        logger.info("The following deployment parameters will be used: %s", parameters.to_json())

        result = DeploymentResult(
            chain_id=chain_id,
            deployer=deployer,
            merkle_root=commitment.root_hex,
            claim_count=len(commitment.claims),
            predicted=tuple(predicted),
            parameters=parameters,
            warnings=tuple(warnings),
        )
        if dry_run:
            return result

        writer = ArtifactWriter(output_dir, self._shard_limits)
        written = writer.write(result.target_address, parameters, commitment.claims)
        return replace(result, written=tuple(written))
