"""Chain capability — the only network boundary of a deployment run.

The pipeline needs exactly two facts from the chain it targets: which
chain it is (``resolve_network``) and who deploys, at which nonce
(``resolve_deployer``). Both are resolved once, before any prediction.
Everything downstream is pure and runs without a node.

``Web3ChainProvider`` performs the real calls. ``StaticChainProvider``
answers from fixed values, for offline planning and for tests.
"""

from __future__ import annotations

from typing import Optional, Protocol

from eth_utils import is_hex_address, to_checksum_address

from bridgedrop.errors import DeploymentPlanError
from bridgedrop.models.deployment import Deployer


class ChainProvider(Protocol):
    def resolve_network(self) -> int: ...

    def resolve_deployer(self) -> Deployer: ...


class StaticChainProvider:
    """Chain provider backed by known values."""

    def __init__(self, chain_id: int, deployer: str, nonce: int = 0) -> None:
        if not is_hex_address(deployer):
            raise DeploymentPlanError(f"Invalid deployer address: {deployer!r}")
        self._chain_id = chain_id
        self._deployer = Deployer(address=to_checksum_address(deployer), nonce=nonce)

    def resolve_network(self) -> int:
        return self._chain_id

    def resolve_deployer(self) -> Deployer:
        return self._deployer


class Web3ChainProvider:
    """Chain provider backed by a JSON-RPC endpoint.

    The deployer is either given as an address or derived from a private
    key. The key is only used to derive the address; nothing is signed.
    """

    def __init__(
        self,
        rpc_url: str,
        deployer: Optional[str] = None,
        private_key: Optional[str] = None,
    ) -> None:
        from web3 import Web3, HTTPProvider

        if deployer is None and private_key is None:
            raise DeploymentPlanError("Deployer identity is empty: pass an address or a private key")
        self._w3 = Web3(HTTPProvider(rpc_url))
        self._deployer = deployer
        self._private_key = private_key

    def resolve_network(self) -> int:
        return int(self._w3.eth.chain_id)

    def resolve_deployer(self) -> Deployer:
        if self._deployer is not None:
            if not is_hex_address(self._deployer):
                raise DeploymentPlanError(f"Invalid deployer address: {self._deployer!r}")
            address = to_checksum_address(self._deployer)
        else:
            from eth_account import Account

            address = Account.from_key(self._private_key).address

        nonce = self._w3.eth.get_transaction_count(address)
        return Deployer(address=address, nonce=nonce)
