"""The charging device as seen by the controller."""
import logging
from collections import deque
from dataclasses import dataclass
from typing import Protocol

from .power import Power

_LOGGER = logging.getLogger(__name__)


class DeviceError(RuntimeError):
    """Raised when the device cannot be reached or reports garbage."""


@dataclass(frozen=True)
class CommandResult:
    ok: bool
    error: str | None = None

    @classmethod
    def success(cls) -> "CommandResult":
        return cls(True)

    @classmethod
    def failure(cls, error) -> "CommandResult":
        return cls(False, str(error))


class ChargingDevice(Protocol):

    def heartbeat(self) -> None:
        ...

    def charge_required(self) -> bool:
        ...

    def current_charge_power(self) -> Power:
        ...

    def start(self, current: Power) -> CommandResult:
        ...

    def stop(self) -> CommandResult:
        ...

    def adjust(self, current: Power) -> CommandResult:
        ...


class DryRunDevice:
    """
    Passes reads through to ``device`` but only logs the commands, so the
    controller can be watched against live data without touching the car.
    """

    def __init__(self, device: ChargingDevice, history: int = 100):
        self.device = device
        self.commands = deque(maxlen=history)

    def heartbeat(self):
        self.device.heartbeat()

    def charge_required(self) -> bool:
        return self.device.charge_required()

    def current_charge_power(self) -> Power:
        return self.device.current_charge_power()

    def _record(self, command, current=None) -> CommandResult:
        self.commands.append((command, current))
        if current is None:
            _LOGGER.info("[dry run] would %s charging", command)
        else:
            _LOGGER.info("[dry run] would %s charging at %dA", command, current.in_rounded_amps())
        return CommandResult.success()

    def start(self, current: Power) -> CommandResult:
        return self._record("start", current)

    def stop(self) -> CommandResult:
        return self._record("stop")

    def adjust(self, current: Power) -> CommandResult:
        return self._record("adjust", current)


class RecordingDevice:
    """An in-memory device that always needs charge. Used by ``simulate``."""

    def __init__(self, current: Power = Power.NONE, charge_required: bool = True):
        self.current = current
        self.required = charge_required
        self.commands = []

    def heartbeat(self):
        pass

    def charge_required(self) -> bool:
        return self.required

    def current_charge_power(self) -> Power:
        return self.current

    def start(self, current: Power) -> CommandResult:
        self.commands.append(("start", current))
        self.current = current
        return CommandResult.success()

    def stop(self) -> CommandResult:
        self.commands.append(("stop", None))
        self.current = Power.NONE
        return CommandResult.success()

    def adjust(self, current: Power) -> CommandResult:
        self.commands.append(("adjust", current))
        self.current = current
        return CommandResult.success()
