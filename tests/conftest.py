"""Fixtures for testing."""
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from pvcharger.device import CommandResult
from pvcharger.power import Power
from pvcharger.settings import ChargeSettings


@pytest.fixture
def device():
    """A charging device that needs charge and accepts every command."""
    device = MagicMock()
    device.charge_required.return_value = True
    device.start.return_value = CommandResult.success()
    device.stop.return_value = CommandResult.success()
    device.adjust.return_value = CommandResult.success()
    return device


@pytest.fixture
def settings():
    return ChargeSettings.DEFAULTS.with_changes(
        min_current=Power.of_amps(3),
        max_current=Power.of_amps(13),
        adjustment_window=3,
        accepted_external_consumption=Power.of_watt(0),
    )


@pytest.fixture
def now():
    return datetime(2024, 6, 21, 12, 0, tzinfo=timezone.utc)
