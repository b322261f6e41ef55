"""Chain access — network identity and deployer resolution."""

from bridgedrop.chain.provider import ChainProvider, StaticChainProvider, Web3ChainProvider

__all__ = ["ChainProvider", "StaticChainProvider", "Web3ChainProvider"]
