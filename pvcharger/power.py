import math
from dataclasses import dataclass

VOLTAGE = 220


@dataclass(frozen=True, order=True)
class Power:
    """
    A charge current, kept in amps. Watt figures are derived at a fixed
    nominal voltage.
    """
    current: float = 0.0

    @classmethod
    def of_amps(cls, amps: float | None) -> "Power":
        return NONE if amps is None else cls(float(amps))

    @classmethod
    def of_watt(cls, watt: float | None) -> "Power":
        return NONE if watt is None else cls(float(watt) / VOLTAGE)

    def in_watt(self) -> float:
        return self.current * VOLTAGE

    def in_amps(self) -> float:
        return self.current

    def in_rounded_amps(self) -> int:
        # floor, so -8.2A becomes -9A and we never plan on more than we have
        return math.floor(self.current)

    def to_amps_rounded(self) -> "Power":
        return Power.of_amps(self.in_rounded_amps())

    def negate(self) -> "Power":
        return Power(-self.current)

    def plus(self, other: "Power") -> "Power":
        return Power(self.current + other.current)

    def minus(self, other: "Power") -> "Power":
        return Power(self.current - other.current)

    def divide_by(self, divisor: int) -> "Power":
        return Power(self.current / divisor)

    def min(self, other: "Power") -> "Power":
        return other if self.is_greater_than(other) else self

    def is_greater_than(self, other: "Power") -> bool:
        return self.current > other.current

    def is_greater_or_equal(self, other: "Power") -> bool:
        return self.current >= other.current

    def is_greater_than_zero(self) -> bool:
        return self.current > 0

    def is_zero(self) -> bool:
        return self.current == 0.0

    __add__ = plus
    __sub__ = minus
    __neg__ = negate

    def __str__(self):
        return f"{self.in_watt():.1f}W"


NONE = Power(0.0)
Power.NONE = NONE
