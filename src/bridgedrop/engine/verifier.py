"""Consistency verifier — gates the run on operator-supplied expected addresses.

For each named contract:
- expectation present and equal (case-insensitive): proceed silently,
- expectation present and different: raise AddressMismatchError,
- expectation absent: warn and proceed.

Runs before parameters are assembled and before the output directory
is touched, so a mismatch leaves previous artifacts intact.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence

from bridgedrop.errors import AddressMismatchError, SettingsValidationError
from bridgedrop.models.deployment import PredictedAddress

logger = logging.getLogger(__name__)


def verify_expected_addresses(
    predicted: Sequence[PredictedAddress],
    expected: Mapping[str, Optional[str]],
) -> list[str]:
    """Compare predictions against expectations.

    Only contracts named in ``expected`` are checked. Returns the
    warnings emitted for contracts without an expectation.
    """
    by_name = {p.name: p for p in predicted}
    warnings: list[str] = []

    for name, expected_address in expected.items():
        prediction = by_name.get(name)
        if prediction is None:
            raise SettingsValidationError(
                f"contracts.{name}.expectedAddress", "no contract of that name is predicted"
            )

        if expected_address is None:
            message = f"settings.contracts.{name}.expectedAddress was not defined"
            logger.warning(message)
            warnings.append(message)
            continue

        if expected_address.lower() != prediction.address.lower():
            raise AddressMismatchError(name, expected_address, prediction.address)

        logger.debug("%s matches expected address %s", name, prediction.address)

    return warnings
