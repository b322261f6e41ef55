"""Tests for deployment planning from settings."""

import pytest
from eth_abi import encode
from eth_utils import keccak, to_checksum_address

from bridgedrop.constants import DETERMINISTIC_DEPLOYER
from bridgedrop.crypto.address import create2_address, create_address
from bridgedrop.engine.planner import TARGET_CONTRACT, plan_deployment
from bridgedrop.errors import DeploymentPlanError, SettingsValidationError
from bridgedrop.models.deployment import AddressScheme, Deployer
from bridgedrop.settings import Settings

from conftest import DAO_FACTORY, DEPLOYER, settings_document

DEPLOYER_AT_5 = Deployer(address=to_checksum_address(DEPLOYER), nonce=5)


def _by_name(predicted):
    return {p.name: p for p in predicted}


class TestPlanDeployment:
    def test_plan_order_and_schemes(self) -> None:
        predicted = plan_deployment(Settings.from_dict(settings_document()), DEPLOYER_AT_5)
        assert [p.name for p in predicted] == ["cowDao", "cowToken", TARGET_CONTRACT]
        assert [p.step_index for p in predicted] == [0, 1, 2]
        assert [p.scheme for p in predicted] == [
            AddressScheme.CREATE2, AddressScheme.CREATE2, AddressScheme.CREATE,
        ]

    def test_init_code_hash_used_directly(self) -> None:
        predicted = _by_name(plan_deployment(Settings.from_dict(settings_document()), DEPLOYER_AT_5))
        expected = create2_address(DAO_FACTORY, b"\x00" * 31 + b"\x01", b"\xab" * 32)
        assert predicted["cowDao"].address == expected

    def test_constructor_references_earlier_prediction(self) -> None:
        predicted = _by_name(plan_deployment(Settings.from_dict(settings_document()), DEPLOYER_AT_5))
        dao = predicted["cowDao"].address
        init_code = bytes.fromhex("6080604052") + encode(["address", "uint256"], [dao, 1000])
        expected = create2_address(DETERMINISTIC_DEPLOYER, b"\x00" * 31 + b"\x02", keccak(init_code))
        assert predicted["cowToken"].address == expected

    def test_token_depends_on_dao_prediction(self) -> None:
        base = _by_name(plan_deployment(Settings.from_dict(settings_document()), DEPLOYER_AT_5))
        other_dao = settings_document(cowDao={"initCodeHash": "0x" + "cd" * 32})
        changed = _by_name(plan_deployment(Settings.from_dict(other_dao), DEPLOYER_AT_5))
        assert changed["cowDao"].address != base["cowDao"].address
        assert changed["cowToken"].address != base["cowToken"].address

    def test_target_uses_deployer_nonce(self) -> None:
        predicted = _by_name(plan_deployment(Settings.from_dict(settings_document()), DEPLOYER_AT_5))
        assert predicted[TARGET_CONTRACT].address == create_address(DEPLOYER, 5)
        assert not predicted[TARGET_CONTRACT].chain_independent

    def test_salt_based_predictions_ignore_deployer_state(self) -> None:
        settings = Settings.from_dict(settings_document())
        at_5 = _by_name(plan_deployment(settings, DEPLOYER_AT_5))
        elsewhere = _by_name(plan_deployment(settings, Deployer(address="0x" + "12" * 20, nonce=99)))
        assert at_5["cowDao"] == elsewhere["cowDao"]
        assert at_5["cowToken"] == elsewhere["cowToken"]
        assert at_5[TARGET_CONTRACT] != elsewhere[TARGET_CONTRACT]

    def test_create_contract_defaults_to_deployer(self) -> None:
        document = settings_document()
        document["contracts"] = {"plain": {}}
        predicted = _by_name(plan_deployment(Settings.from_dict(document), DEPLOYER_AT_5))
        assert predicted["plain"].address == create_address(DEPLOYER, 5)
        assert predicted[TARGET_CONTRACT].address == create_address(DEPLOYER, 6)

    def test_create_contract_explicit_nonce(self) -> None:
        document = settings_document()
        document["contracts"] = {"plain": {"nonce": 12}}
        predicted = _by_name(plan_deployment(Settings.from_dict(document), DEPLOYER_AT_5))
        assert predicted["plain"].address == create_address(DEPLOYER, 12)
        assert predicted[TARGET_CONTRACT].address == create_address(DEPLOYER, 5)

    def test_create_contracts_take_consecutive_nonces(self) -> None:
        document = settings_document()
        document["contracts"] = {
            "first": {},
            "viaFactory": document["contracts"]["cowDao"],
            "second": {},
        }
        predicted = _by_name(plan_deployment(Settings.from_dict(document), DEPLOYER_AT_5))
        assert predicted["first"].address == create_address(DEPLOYER, 5)
        assert predicted["second"].address == create_address(DEPLOYER, 6)
        assert predicted[TARGET_CONTRACT].address == create_address(DEPLOYER, 7)

    def test_create_contract_from_other_deployer_keeps_position(self) -> None:
        other = "0x" + "12" * 20
        document = settings_document()
        document["contracts"] = {"plain": {"deployer": other}}
        predicted = _by_name(plan_deployment(Settings.from_dict(document), DEPLOYER_AT_5))
        assert predicted["plain"].address == create_address(other, 0)
        assert predicted[TARGET_CONTRACT].address == create_address(DEPLOYER, 5)

    @pytest.mark.parametrize("nonce", [0, 7])
    def test_predictions_are_distinct(self, nonce: int) -> None:
        document = settings_document()
        document["contracts"]["cowDao"] = {}
        deployer = Deployer(address=to_checksum_address(DEPLOYER), nonce=nonce)
        predicted = plan_deployment(Settings.from_dict(document), deployer)
        addresses = [p.address for p in predicted]
        assert len(set(addresses)) == len(addresses) == 3
        assert _by_name(predicted)["cowDao"].address == create_address(DEPLOYER, nonce)
        assert _by_name(predicted)[TARGET_CONTRACT].address == create_address(DEPLOYER, nonce + 1)

    def test_deterministic(self) -> None:
        settings = Settings.from_dict(settings_document())
        assert plan_deployment(settings, DEPLOYER_AT_5) == plan_deployment(settings, DEPLOYER_AT_5)


class TestPlanErrors:
    def test_explicit_nonce_colliding_with_target(self) -> None:
        document = settings_document()
        document["contracts"] = {"plain": {"nonce": 5}}
        with pytest.raises(DeploymentPlanError, match="same address"):
            plan_deployment(Settings.from_dict(document), DEPLOYER_AT_5)

    def test_identical_create2_steps(self) -> None:
        document = settings_document()
        document["contracts"] = {
            "one": document["contracts"]["cowDao"],
            "two": document["contracts"]["cowDao"],
        }
        with pytest.raises(DeploymentPlanError, match="'one' and 'two'"):
            plan_deployment(Settings.from_dict(document), DEPLOYER_AT_5)

    def test_empty_deployer(self) -> None:
        with pytest.raises(DeploymentPlanError, match="empty"):
            plan_deployment(Settings.from_dict(settings_document()), Deployer(address=""))

    def test_forward_reference(self) -> None:
        document = settings_document()
        document["contracts"] = {
            "cowToken": document["contracts"]["cowToken"],
            "cowDao": document["contracts"]["cowDao"],
        }
        with pytest.raises(SettingsValidationError) as exc_info:
            plan_deployment(Settings.from_dict(document), DEPLOYER_AT_5)
        assert exc_info.value.field == "contracts.cowToken.constructor.args[0]"

    def test_create2_without_init_code(self) -> None:
        document = settings_document()
        document["contracts"] = {"x": {"salt": "0x" + "00" * 32}}
        with pytest.raises(SettingsValidationError, match="initCodeHash"):
            plan_deployment(Settings.from_dict(document), DEPLOYER_AT_5)

    def test_reserved_name(self) -> None:
        document = settings_document()
        document["contracts"] = {TARGET_CONTRACT: {}}
        with pytest.raises(SettingsValidationError, match="reserved"):
            plan_deployment(Settings.from_dict(document), DEPLOYER_AT_5)

    def test_bad_constructor_value(self) -> None:
        document = settings_document(
            cowToken={"constructor": {"types": ["address", "uint256"], "args": ["@cowDao", "lots"]}}
        )
        with pytest.raises(SettingsValidationError, match="not an integer"):
            plan_deployment(Settings.from_dict(document), DEPLOYER_AT_5)

    def test_unknown_abi_type(self) -> None:
        document = settings_document(
            cowToken={"constructor": {"types": ["uint7"], "args": ["1"]}}
        )
        with pytest.raises(SettingsValidationError) as exc_info:
            plan_deployment(Settings.from_dict(document), DEPLOYER_AT_5)
        assert exc_info.value.field == "contracts.cowToken.constructor"
