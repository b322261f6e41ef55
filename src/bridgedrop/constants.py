"""Well-known addresses and chain identifiers.

Nothing in the pipeline reads these tables directly. They are the
defaults the service injects into the parameter assembler, and the
settings file can override them.
"""

from __future__ import annotations

from typing import Mapping

MAINNET_CHAIN_ID = 1
GNOSIS_CHAIN_ID = 100

# Arachnid deterministic deployment proxy, present at the same address on
# every EVM chain that supports pre-EIP-155 transactions.
DETERMINISTIC_DEPLOYER = "0x4e59b44847b379578588920cA78FbF26c0B4956C"

# Price of one unit of COW in xDAI, 0.15 with 18 decimals.
DEFAULT_NATIVE_TOKEN_PRICE = 150_000_000_000_000_000

DEFAULT_TOKENS: Mapping[str, Mapping[int, str]] = {
    "gno": {
        MAINNET_CHAIN_ID: "0x6810e776880C02933D47DB1b9fc05908e5386b96",
        GNOSIS_CHAIN_ID: "0x9C58BAcC331c9aa871AFD802DB6379a98e80CEdb",
    },
    "weth": {
        MAINNET_CHAIN_ID: "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
        GNOSIS_CHAIN_ID: "0xe91D153E0b41518A2Ce8Dd3D7944Fa863463a97d",
    },
}
