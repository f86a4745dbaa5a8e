import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone

from .adjustment import Adjustment
from .balance import PowerBalance
from .power import Power
from .window import SlidingWindow

_LOGGER = logging.getLogger(__name__)

DEFAULT_MIN_AMPS = 5
DEFAULT_MAX_AMPS = 13
DEFAULT_ADJUSTMENT_WINDOW = 5
DEFAULT_ACCEPTED_WATTS = 0
DEFAULT_EXCEED_CHARGE_WINDOW = timedelta(minutes=10)

ONE_AMP = Power.of_amps(1)


@dataclass(frozen=True)
class ChargeSettings:
    """
    The charge policy.

    min_current: the lowest current the device charges with.
    max_current: upper bound for everything sent to the device.
    adjustment_window: number of readings considered before altering the
        charge. Larger values smooth out an oscillating supply but react later.
    accepted_external_consumption: grid draw we tolerate to keep charging
        when the spare solar power is just short of the minimum current. With
        800W spare and 1200W needed, 400W keeps the car charging.
    exceed_charge_window: how long to keep charging at the minimum after we
        first wanted to stop.
    """
    min_current: Power = Power.of_amps(DEFAULT_MIN_AMPS)
    max_current: Power = Power.of_amps(DEFAULT_MAX_AMPS)
    adjustment_window: int = DEFAULT_ADJUSTMENT_WINDOW
    accepted_external_consumption: Power = Power.of_watt(DEFAULT_ACCEPTED_WATTS)
    exceed_charge_window: timedelta = DEFAULT_EXCEED_CHARGE_WINDOW

    def __post_init__(self):
        if self.adjustment_window is None or self.adjustment_window <= 0:
            raise ValueError(f"Adjustment window must be greater than zero, got {self.adjustment_window}")
        if not self.min_current.is_greater_than_zero():
            raise ValueError(f"Minimum current must be greater than zero, got {self.min_current.in_amps()}A")
        if self.min_current.is_greater_than(self.max_current):
            raise ValueError(f"Minimum current {self.min_current.in_amps()}A exceeds "
                             f"maximum current {self.max_current.in_amps()}A")
        if self.accepted_external_consumption.current < 0:
            raise ValueError("Accepted external consumption must not be negative")
        if self.exceed_charge_window < timedelta(0):
            raise ValueError("Exceed charge window must not be negative")

    @classmethod
    def of(cls, min_amps=0, max_amps=0, adjustment_window=0, accepted_watts=0, exceed_charge_window=None):
        """Zero or ``None`` selects the default for a value."""
        return cls(
            min_current=Power.of_amps(min_amps or DEFAULT_MIN_AMPS),
            max_current=Power.of_amps(max_amps or DEFAULT_MAX_AMPS),
            adjustment_window=adjustment_window or DEFAULT_ADJUSTMENT_WINDOW,
            accepted_external_consumption=Power.of_watt(accepted_watts or 0),
            exceed_charge_window=(DEFAULT_EXCEED_CHARGE_WINDOW
                                  if exceed_charge_window is None else exceed_charge_window),
        )

    @classmethod
    def from_config(cls, cfg: dict) -> "ChargeSettings":
        return cls.of(
            min_amps=cfg.get('min_amps'),
            max_amps=cfg.get('max_amps'),
            adjustment_window=cfg.get('adjustment_window'),
            accepted_watts=cfg.get('accepted_external_watts'),
            exceed_charge_window=timedelta(minutes=float(cfg.get('exceed_charge_minutes', 10))),
        )

    def with_changes(self, **changes) -> "ChargeSettings":
        return replace(self, **changes)

    def is_charging(self, current: Power) -> bool:
        return current.is_greater_or_equal(self.min_current)

    def is_below_min_current(self, current: Power) -> bool:
        return self.min_current.is_greater_than(current)

    def implies_charge_state_change(self, adjustment: Adjustment) -> bool:
        return adjustment.passes_threshold(self.min_current)

    def compute_adjustment(self, current: Power, balance: PowerBalance) -> Adjustment:
        """
        Work out how far to move from ``current`` given the spare power of
        ``balance``, accepting some grid draw if that keeps us at or above the
        minimum current.
        """
        if balance is None:
            raise ValueError("PowerBalance must not be None!")

        candidate = Adjustment.with_current(current).with_adjustment(balance.spare_power().to_amps_rounded())

        # enough spare power for at least the minimum current
        if not self.is_below_min_current(candidate.target):
            return candidate.with_max(self.max_current)

        accepted = Power.NONE
        while (self.accepted_external_consumption.is_greater_than(accepted)
               and self.is_below_min_current(candidate.target)):
            accepted = accepted.plus(ONE_AMP)
            candidate = candidate.and_adjustment(ONE_AMP)

        if self.is_below_min_current(candidate.target):
            return candidate.to_zero()
        return candidate.with_max(self.max_current)

    def zero_or_within_range(self, current: Power) -> Power:
        return Power.NONE if self.is_below_min_current(current) else current.min(self.max_current)

    def within_range(self, adjustment: Adjustment) -> Adjustment:
        return adjustment.within_range(self.min_current, self.max_current)

    def should_increase_charge(self, window: SlidingWindow, adjustment: Adjustment) -> bool:
        """
        Resuming from zero is allowed as long as the window does not show a
        sustained grid draw above what we accept. Raising an ongoing charge
        additionally waits until no reading in the window exceeds it.
        """
        accepted = self.accepted_external_consumption

        if adjustment.is_from_zero:
            average = window.average_external_power()
            if not average.is_greater_than(accepted):
                return True

            _LOGGER.info("Not adjusting as average of %s over %d values exceeds acceptable external power of %s.",
                         average, window.size(), accepted)
            return False

        peak = window.peak_external_power()
        if not peak.is_greater_than(accepted):
            return True

        _LOGGER.info("Not increasing charge yet as one of the last %d values drew %s from the grid.",
                     window.size(), peak)
        return False

    def should_decrease_charge(self, window: SlidingWindow, adjustment: Adjustment,
                               trigger_time: datetime | None, now: datetime | None = None) -> bool:
        if not adjustment.is_to_zero:
            return True

        now = now or datetime.now(timezone.utc)
        elapsed = timedelta(0) if trigger_time is None else now - trigger_time

        # keep charging for at least the exceed charge window
        if elapsed < self.exceed_charge_window:
            _LOGGER.info("Not decreasing charge as we have not exceeded the minimum charge time (%s of %s).",
                         elapsed, self.exceed_charge_window)
            return False

        average = window.average_external_power()
        if average.is_greater_than(self.accepted_external_consumption):
            _LOGGER.info("Adjusting due to %s.", window)
            return True

        if self.is_below_min_current(adjustment.target):
            return True

        _LOGGER.info("Not adjusting as average of %s over %d values does not exceed acceptable external power of %s.",
                     average, window.size(), self.accepted_external_consumption)
        return False


ChargeSettings.DEFAULTS = ChargeSettings()
