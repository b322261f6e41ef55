"""Tests for tools/check_settings.py."""

import importlib.util
from pathlib import Path

from bridgedrop.engine.planner import TARGET_CONTRACT, plan_deployment
from bridgedrop.models.deployment import Deployer
from bridgedrop.settings import Settings

from conftest import settings_document, write_settings

TOOL = Path(__file__).resolve().parents[1] / "tools" / "check_settings.py"


def _load_tool():
    spec = importlib.util.spec_from_file_location("check_settings", TOOL)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestCheckSettings:
    def test_reports_predictions_and_warnings(self, settings_json: Path, capsys) -> None:
        assert _load_tool().check(settings_json, "0x" + "11" * 20) == 0
        out = capsys.readouterr().out
        assert "cowDao" in out and "cowToken" in out
        assert "WARN: settings.contracts.cowDao.expectedAddress was not defined" in out
        assert "OK: 2 contracts checked" in out

    def test_mismatch_fails(self, tmp_path: Path, capsys) -> None:
        document = settings_document(cowDao={"expectedAddress": "0x" + "22" * 20})
        path = write_settings(tmp_path / "s.json", document)
        assert _load_tool().check(path, "0x" + "11" * 20) == 1
        assert capsys.readouterr().out.startswith("FAIL: Expected cowDao address")

    def test_matches_planner_for_create_contracts(self, tmp_path: Path, capsys) -> None:
        document = settings_document()
        document["contracts"]["cowDao"] = {}
        path = write_settings(tmp_path / "s.json", document)
        deployer = "0x" + "11" * 20

        assert _load_tool().check(path, deployer) == 0
        out = capsys.readouterr().out
        planned = plan_deployment(Settings.from_dict(document), Deployer(address=deployer))
        assert planned[0].address in out
        assert TARGET_CONTRACT not in out
