"""Parameter assembler — constructor arguments of the bridged token deployer.

A pure merge of the commitment root, the verified predicted addresses
and the static configuration. Token addresses come from a registry
keyed by token name and chain id that the caller injects.
"""

from __future__ import annotations

from typing import Mapping, Optional, Sequence, TypeVar

from bridgedrop.errors import SettingsValidationError
from bridgedrop.models.deployment import DeploymentParameters, PredictedAddress
from bridgedrop.settings import Settings

FOREIGN_TOKEN_CONTRACT = "cowToken"
COMMUNITY_FUNDS_CONTRACT = "cowDao"

T = TypeVar("T")


def assemble_parameters(
    merkle_root: str,
    predicted: Sequence[PredictedAddress],
    settings: Settings,
    chain_id: int,
    token_registry: Mapping[str, Mapping[int, str]],
) -> DeploymentParameters:
    """Build the constructor record for the deployer on ``chain_id``."""
    by_name = {p.name: p.address for p in predicted}

    return DeploymentParameters(
        foreign_token=_require(
            by_name.get(FOREIGN_TOKEN_CONTRACT), f"contracts.{FOREIGN_TOKEN_CONTRACT}"
        ),
        multi_token_mediator_gnosis_chain=_require(
            settings.multi_token_mediator_gnosis_chain, "bridge.multiTokenMediatorGnosisChain"
        ),
        merkle_root=merkle_root,
        community_funds_target=_require(
            by_name.get(COMMUNITY_FUNDS_CONTRACT), f"contracts.{COMMUNITY_FUNDS_CONTRACT}"
        ),
        gno_token=_require(_token(token_registry, "gno", chain_id), f"tokens.gno.{chain_id}"),
        gno_price=_require(settings.gno_price, "virtualCowToken.gnoPrice"),
        native_token_price=settings.native_token_price,
        wrapped_native_token=_require(
            _token(token_registry, "weth", chain_id), f"tokens.weth.{chain_id}"
        ),
    )


def merge_token_registries(
    defaults: Mapping[str, Mapping[int, str]],
    overrides: Mapping[str, Mapping[int, str]],
) -> dict[str, dict[int, str]]:
    """Overlay per-chain token addresses from settings onto the defaults."""
    merged = {token: dict(per_chain) for token, per_chain in defaults.items()}
    for token, per_chain in overrides.items():
        merged.setdefault(token, {}).update(per_chain)
    return merged


def _token(registry: Mapping[str, Mapping[int, str]], token: str, chain_id: int) -> Optional[str]:
    return registry.get(token, {}).get(chain_id)


def _require(value: Optional[T], field: str) -> T:
    if value is None:
        raise SettingsValidationError(field, "required field is missing")
    return value
