"""Error taxonomy for a deployment run.

Every error is fatal to the run. The only non-fatal condition (an
expected address that was not configured) is reported as a warning by
the verifier and never raised.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class BridgeDropError(Exception):
    """Base class for all pipeline failures."""


class NetworkIdentityMismatch(BridgeDropError):
    """The provider is connected to a chain other than the target chain."""

    def __init__(self, expected_chain_id: int, found_chain_id: int) -> None:
        self.expected_chain_id = expected_chain_id
        self.found_chain_id = found_chain_id
        super().__init__(
            f"This deployment must run on chain {expected_chain_id}. "
            f"Found chainId {found_chain_id}"
        )


class ClaimValidationError(BridgeDropError, ValueError):
    """A row of the claims table failed validation."""

    def __init__(self, row: int, field: str, reason: str) -> None:
        self.row = row
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid claim at row {row}, field '{field}': {reason}")


class SettingsValidationError(BridgeDropError, ValueError):
    """A settings field is missing or has the wrong shape."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid settings field '{field}': {reason}")


class AddressMismatchError(BridgeDropError):
    """A predicted contract address differs from the configured expectation."""

    def __init__(self, contract: str, expected: str, predicted: str) -> None:
        self.contract = contract
        self.expected = expected
        self.predicted = predicted
        super().__init__(
            f"Expected {contract} address {expected} does not coincide "
            f"with calculated address {predicted}"
        )


class DeploymentPlanError(BridgeDropError, ValueError):
    """The deployment step list cannot be used for address prediction."""


class ArtifactWriteError(BridgeDropError):
    """A filesystem operation on the output directory failed."""

    def __init__(self, path: Path, reason: str, cause: Optional[OSError] = None) -> None:
        self.path = path
        self.reason = reason
        self.cause = cause
        super().__init__(f"Failed to {reason} {path}: {cause}" if cause else f"Failed to {reason} {path}")
