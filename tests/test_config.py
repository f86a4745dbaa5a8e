from datetime import timedelta

import pytest

from pvcharger.config import ConfigError, load_config, parse_config, require
from pvcharger.power import Power
from pvcharger.settings import ChargeSettings


def test_defaults_match_charge_settings(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")

    cfg = load_config(path)

    assert cfg['poll_interval'] == 30
    assert ChargeSettings.from_config(cfg) == ChargeSettings.DEFAULTS


def test_values_override_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "min_amps: 6\n"
        "max_amps: 16\n"
        "adjustment_window: 3\n"
        "accepted_external_watts: 400\n"
        "exceed_charge_minutes: 5\n"
        "log_level: debug\n"
    )

    cfg = load_config(path)
    settings = ChargeSettings.from_config(cfg)

    assert cfg['log_level'] == 'DEBUG'
    assert settings.min_current == Power.of_amps(6)
    assert settings.max_current == Power.of_amps(16)
    assert settings.adjustment_window == 3
    assert settings.accepted_external_consumption.in_watt() == pytest.approx(400)
    assert settings.exceed_charge_window == timedelta(minutes=5)


def test_zero_grace_period_is_kept():
    settings = ChargeSettings.from_config(parse_config({'exceed_charge_minutes': 0}))

    assert settings.exceed_charge_window == timedelta(0)


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "missing.yaml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("min_amps: [5\n")

    with pytest.raises(ConfigError):
        load_config(path)


@pytest.mark.parametrize("raw", [
    ["min_amps"],
    {"min_amp": 5},
    {"min_amps": "five"},
    {"max_amps": -1},
    {"adjustment_window": 0},
    {"adjustment_window": 2.5},
    {"min_amps": 16, "max_amps": 13},
    {"min_amps": 0},
    {"min_amps": 8, "max_amps": 0},
    {"queue_size": 0},
    {"log_level": "chatty"},
])
def test_rejects_invalid_config(raw):
    with pytest.raises(ConfigError):
        parse_config(raw)


def test_require():
    cfg = parse_config({'inverter_host': 'sma.local'})

    require(cfg, 'inverter_host')
    with pytest.raises(ConfigError, match="tesla_email"):
        require(cfg, 'inverter_host', 'tesla_email')
