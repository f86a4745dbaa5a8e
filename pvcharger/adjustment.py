from dataclasses import dataclass

from .power import Power


@dataclass(frozen=True)
class Adjustment:
    """A proposed change from the ``current`` charge current by ``delta``."""
    current: Power
    delta: Power = Power.NONE

    @classmethod
    def none(cls, current: Power) -> "Adjustment":
        return cls(current, Power.NONE)

    @classmethod
    def with_current(cls, current: Power) -> "AdjustmentBuilder":
        return AdjustmentBuilder(current, Power.NONE)

    @property
    def target(self) -> Power:
        return self.current.plus(self.delta)

    def with_max(self, maximum: Power) -> "Adjustment":
        if self.target.is_greater_than(maximum):
            return Adjustment(self.current, maximum.minus(self.current))
        return Adjustment(self.current, self.delta)

    def within_range(self, minimum: Power, maximum: Power) -> "Adjustment":
        target = self.target

        if minimum.is_greater_than(target):
            return self._to_target(minimum)
        if target.is_greater_than(maximum):
            return self._to_target(maximum)

        return Adjustment(self.current, self.delta)

    def _to_target(self, power: Power) -> "Adjustment":
        return Adjustment(self.current, power.minus(self.current))

    def has_current(self, power: Power) -> bool:
        return self.current == power

    @property
    def is_unaltered(self) -> bool:
        return self.delta.is_zero()

    @property
    def is_increase(self) -> bool:
        return self.delta.is_greater_than_zero()

    @property
    def is_to_zero(self) -> bool:
        return self.current == self.delta.negate()

    @property
    def is_from_zero(self) -> bool:
        return self.current.is_zero()

    def passes_threshold(self, threshold: Power) -> bool:
        return self.current.is_greater_than(threshold) != self.target.is_greater_than(threshold)

    def __str__(self):
        sign = "+" if self.delta.is_greater_than_zero() else ""
        return f"{self.current.in_amps()}A --({sign}{self.delta.in_amps()}A)--> {self.target.in_amps()}A"


@dataclass(frozen=True)
class AdjustmentBuilder(Adjustment):
    """Accumulates deltas before settling on a final :class:`Adjustment`."""

    def and_adjustment(self, power: Power) -> "AdjustmentBuilder":
        return AdjustmentBuilder(self.current, self.delta.plus(power))

    def with_adjustment(self, power: Power) -> "AdjustmentBuilder":
        return AdjustmentBuilder(self.current, power)

    def to_rounded_amps(self) -> Adjustment:
        return Adjustment(self.current, self.delta.to_amps_rounded())

    def to_zero(self) -> Adjustment:
        return Adjustment(self.current, self.current.negate())

    def build(self) -> Adjustment:
        return Adjustment(self.current, self.delta)
