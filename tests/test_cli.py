from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner

from pvcharger import cli as cli_module
from pvcharger.cli import cli
from pvcharger.power import Power


@pytest.fixture
def config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "log_level: WARNING\n"
        "min_amps: 3\n"
        "adjustment_window: 3\n"
        "exceed_charge_minutes: 0\n"
        "tesla_email: owner@example.com\n"
    )
    return str(path)


def test_simulate_replays_readings(tmp_path, config):
    readings = tmp_path / "readings.yaml"
    readings.write_text(
        "- {solar: 200}\n"
        "- {solar: 1000, feeding: 700}\n"
        "- {solar: 1000, drawing: 1000}\n"
    )

    result = CliRunner().invoke(cli, ["-c", config, "simulate", str(readings)])

    assert result.exit_code == 0, result.output
    lines = [line for line in result.output.splitlines() if "  ->  " in line]
    assert len(lines) == 3
    assert lines[0].endswith("0A  [-]")
    assert lines[1].endswith("3A  [start(3A)]")
    assert lines[2].endswith("0A  [stop]")


def test_simulate_rejects_non_list(tmp_path, config):
    readings = tmp_path / "readings.yaml"
    readings.write_text("solar: 200\n")

    result = CliRunner().invoke(cli, ["-c", config, "simulate", str(readings)])

    assert result.exit_code != 0
    assert "YAML list" in result.output


def test_missing_config_file(tmp_path):
    result = CliRunner().invoke(cli, ["-c", str(tmp_path / "nope.yaml"), "status"])

    assert result.exit_code == 1
    assert "not found" in result.output


def test_status_prints_vehicle_state(config, monkeypatch):
    vehicle = MagicMock()
    vehicle.charge_required.return_value = True
    vehicle.current_charge_power.return_value = Power.of_amps(8)
    monkeypatch.setattr(cli_module, "TeslaVehicle", MagicMock(return_value=vehicle))

    result = CliRunner().invoke(cli, ["-c", config, "status"])

    assert result.exit_code == 0, result.output
    vehicle.heartbeat.assert_called_once_with()
    assert "Charge required: True" in result.output
    assert "Charge current: 8.0A" in result.output


def test_start_requires_inverter_host(config, monkeypatch):
    monkeypatch.setattr(cli_module, "TeslaVehicle", MagicMock())

    result = CliRunner().invoke(cli, ["-c", config, "start"])

    assert result.exit_code == 1
    assert "inverter_host" in result.output
    assert "Starting" not in result.output


def test_watch_reports_missing_vehicle_config(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text("log_level: WARNING\n")
    vehicle_cls = MagicMock()
    monkeypatch.setattr(cli_module, "TeslaVehicle", vehicle_cls)

    result = CliRunner().invoke(cli, ["-c", str(path), "watch"])

    assert result.exit_code == 1
    assert "tesla_email, inverter_host" in result.output
    assert "Starting" not in result.output
    vehicle_cls.assert_not_called()
