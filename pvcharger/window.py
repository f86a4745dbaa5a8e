from dataclasses import dataclass

from .balance import PowerBalance
from .power import Power


@dataclass(frozen=True)
class SlidingWindow:
    """
    The most recent power balances, capped at ``capacity``. The oldest entry
    is dropped once the window is full. ``add`` returns a new window.
    """
    capacity: int
    entries: tuple = ()

    def __post_init__(self):
        if self.capacity is None or self.capacity <= 0:
            raise ValueError("Capacity must be greater than zero!")
        if len(self.entries) > self.capacity:
            raise ValueError(f"{len(self.entries)} entries exceed capacity {self.capacity}")

    @classmethod
    def empty(cls, capacity: int) -> "SlidingWindow":
        return cls(capacity)

    @classmethod
    def init(cls, balance: PowerBalance, capacity: int) -> "SlidingWindow":
        """
        Pads the window with neutral balances so that a single reading only
        carries its share of the average until the window has filled up.
        """
        if balance is None:
            raise ValueError("PowerBalance must not be None!")
        if capacity is None or capacity <= 0:
            raise ValueError("Capacity must be greater than zero!")

        padding = (PowerBalance.NONE,) * (capacity - 1)
        return cls(capacity, padding + (balance,))

    def add(self, balance: PowerBalance) -> "SlidingWindow":
        if balance is None:
            raise ValueError("PowerBalance must not be None!")
        if not self.entries:
            return SlidingWindow.init(balance, self.capacity)

        kept = self.entries[1:] if len(self.entries) == self.capacity else self.entries
        return SlidingWindow(self.capacity, kept + (balance,))

    def most_recent(self) -> PowerBalance | None:
        return self.entries[-1] if self.entries else None

    def _external(self):
        return [balance.spare_power().negate() for balance in self.entries]

    def average_external_power(self) -> Power:
        if not self.entries:
            return Power.NONE

        total = Power.NONE
        for external in self._external():
            total = total.plus(external)
        return total.divide_by(len(self.entries))

    def peak_external_power(self) -> Power:
        """Highest grid draw in the window, negative if every entry feeds in."""
        if not self.entries:
            return Power.NONE
        return max(self._external())

    def size(self) -> int:
        return len(self.entries)

    def __len__(self):
        return len(self.entries)

    def __str__(self):
        values = ", ".join(str(balance) for balance in self.entries)
        return f"SlidingWindow avg: {self.average_external_power()}, [{values}]"
