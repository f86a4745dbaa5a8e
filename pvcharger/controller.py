import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from .adjustment import Adjustment
from .balance import PowerBalance
from .device import ChargingDevice, CommandResult
from .power import Power
from .settings import ChargeSettings
from .window import SlidingWindow

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChargeController:
    """
    The charge state we believe the device is in. Every reading produces a
    new controller; the current one is never modified.

    ``trigger_time`` marks the first reading that asked us to stop charging.
    Charging continues at the minimum current until the settings' exceed
    charge window has passed since then.
    """
    current: Power
    window: SlidingWindow
    settings: ChargeSettings
    trigger_time: datetime | None = None

    @classmethod
    def init(cls, settings: ChargeSettings) -> "ChargeController":
        return cls.for_current(Power.NONE, settings)

    @classmethod
    def for_current(cls, current, settings: ChargeSettings) -> "ChargeController":
        if settings is None:
            raise ValueError("ChargeSettings must not be None!")
        if not isinstance(current, Power):
            current = Power.of_amps(current)
        return cls(current, SlidingWindow.empty(settings.adjustment_window), settings)

    def is_charging(self) -> bool:
        return self.settings.is_charging(self.current)

    def transition_for(self, balance: PowerBalance, device: ChargingDevice,
                       now: datetime | None = None) -> "ChargeController":
        """
        Move to the controller for the given reading, issuing at most one
        command to ``device``. If that command fails, ``self`` is returned.
        """
        if balance is None:
            raise ValueError("PowerBalance must not be None!")
        if device is None:
            raise ValueError("ChargingDevice must not be None!")

        now = now or datetime.now(timezone.utc)

        if not device.charge_required():
            _LOGGER.info("Fully charged!")
            stopped = replace(self, current=Power.NONE, trigger_time=None)
            if self.is_charging():
                return self._apply(device.stop(), stopped)
            return stopped

        settings = self.settings
        adjustment = settings.compute_adjustment(self.current, balance)
        new_window = self.window.add(balance)

        if adjustment.is_unaltered:
            return replace(self, window=new_window, trigger_time=None)

        _LOGGER.info("Candidate adjustment: %s.", adjustment)

        if adjustment.is_increase:
            alter_charge = settings.should_increase_charge(new_window, adjustment)
        else:
            alter_charge = settings.should_decrease_charge(self.window, adjustment, self.trigger_time, now)

        intend_to_switch_off = adjustment.is_to_zero

        if not alter_charge and intend_to_switch_off:
            if not adjustment.has_current(settings.min_current):
                _LOGGER.info("Skipping the adjustment but limiting to minimum charge.")
            adjustment = settings.within_range(adjustment)
            alter_charge = True

        if intend_to_switch_off:
            trigger_time = self.trigger_time or now
        elif not adjustment.is_increase and self.trigger_time is not None:
            trigger_time = self.trigger_time
        else:
            trigger_time = None

        adjustment = adjustment if alter_charge else Adjustment.none(self.current)
        new_current = settings.zero_or_within_range(adjustment.target)

        if new_current.is_zero():
            trigger_time = None

        state = ChargeController(new_current, new_window, settings, trigger_time)

        if self.is_charging() and not state.is_charging():
            result = device.stop()
        elif not self.is_charging() and state.is_charging():
            result = device.start(state.current)
        elif not adjustment.is_unaltered:
            result = device.adjust(state.current)
        else:
            result = CommandResult.success()

        return self._apply(result, state)

    def _apply(self, result: CommandResult, state: "ChargeController") -> "ChargeController":
        if result.ok:
            return state
        _LOGGER.warning("Device command failed, keeping %s: %s", self, result.error)
        return self

    def __str__(self):
        return f"ChargeController(current={self.current.in_amps()}A)"
