"""Snapshots of how the solar production relates to the grid exchange."""
from dataclasses import dataclass
from enum import Enum, auto

from .power import Power


class BalanceKind(Enum):
    NEUTRAL = auto()
    DRAWING = auto()
    FEEDING = auto()


@dataclass(frozen=True)
class PowerBalance:
    """
    The power state of the PV facility at one point in time.

    ``grid`` is the magnitude of the grid exchange: what is drawn for
    ``DRAWING``, what is fed in for ``FEEDING`` and zero for ``NEUTRAL``.
    """
    solar_power: Power
    kind: BalanceKind = BalanceKind.NEUTRAL
    grid: Power = Power.NONE

    def __post_init__(self):
        if self.solar_power is None or self.grid is None:
            raise ValueError("PowerBalance needs solar and grid power")
        if self.solar_power.current < 0:
            raise ValueError(f"Solar power must not be negative, got {self.solar_power}")
        if self.grid.current < 0:
            raise ValueError(f"Grid exchange must not be negative, got {self.grid}")
        if self.kind is BalanceKind.NEUTRAL and not self.grid.is_zero():
            raise ValueError("A neutral balance has no grid exchange")

    @classmethod
    def neutral(cls, solar: Power) -> "PowerBalance":
        return cls(solar)

    @classmethod
    def drawing(cls, solar: Power, external: Power) -> "PowerBalance":
        return cls(solar, BalanceKind.DRAWING, external)

    @classmethod
    def feeding_in(cls, solar: Power, feed_in: Power) -> "PowerBalance":
        return cls(solar, BalanceKind.FEEDING, feed_in)

    @classmethod
    def for_solar(cls, solar: Power) -> "BalanceBuilder":
        return BalanceBuilder(solar)

    def spare_power(self) -> Power:
        """Positive when there is surplus to charge with, negative when short."""
        if self.kind is BalanceKind.FEEDING:
            return self.grid
        if self.kind is BalanceKind.DRAWING:
            return self.grid.negate()
        return Power.NONE

    def external_power(self) -> Power:
        return self.grid if self.kind is BalanceKind.DRAWING else Power.NONE

    def uses_external_power(self) -> bool:
        return self.external_power().is_greater_than_zero()

    def predict(self, delta: Power) -> "PowerBalance":
        """
        Return the balance we would see if consumption changed by ``delta``.
        A positive delta means more consumption.
        """
        solar = self.solar_power

        if self.kind is BalanceKind.DRAWING:
            result = self.grid.plus(delta)
            return (PowerBalance.drawing(solar, result) if result.is_greater_than_zero()
                    else PowerBalance.feeding_in(solar, result.negate()))

        if self.kind is BalanceKind.FEEDING:
            result = self.grid.minus(delta)
            return (PowerBalance.feeding_in(solar, result) if result.is_greater_than_zero()
                    else PowerBalance.drawing(solar, result.negate()))

        if delta.is_zero():
            return self
        return (PowerBalance.drawing(solar, delta) if delta.is_greater_than_zero()
                else PowerBalance.feeding_in(solar, delta.negate()))

    def __str__(self):
        solar = self.solar_power.in_watt()
        if self.kind is BalanceKind.DRAWING:
            return f"Consuming(solar = {solar:.1f}W, external = {self.grid.in_watt():.1f}W)"
        if self.kind is BalanceKind.FEEDING:
            return f"FeedingIn(solar = {solar:.1f}W, feeding = {self.grid.in_watt():.1f}W)"
        return f"Neutral(solar = {solar:.1f}W)"


class BalanceBuilder:

    def __init__(self, solar: Power):
        self.solar = solar

    def consuming(self, external: Power) -> PowerBalance:
        return PowerBalance.drawing(self.solar, external)

    def feeding_in(self, feed_in: Power) -> PowerBalance:
        return PowerBalance.feeding_in(self.solar, feed_in)


PowerBalance.NONE = PowerBalance.neutral(Power.NONE)
