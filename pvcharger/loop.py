import logging
import random
import time
from collections import deque

from .controller import ChargeController
from .settings import ChargeSettings

_LOGGER = logging.getLogger(__name__)

MAX_BACKOFF_S = 60


class ChargeLoop:
    """
    Owns the controller and feeds it one reading at a time, in arrival order.

    Readings are buffered in a bounded queue; when the device is slower than
    the inverter the oldest readings are dropped.
    """

    def __init__(self, controller: ChargeController, device, queue_size: int = 10):
        if queue_size < 1:
            raise ValueError("Queue size must be at least 1")
        self.controller = controller
        self.device = device
        self.pending = deque(maxlen=queue_size)

    @classmethod
    def start(cls, device, settings: ChargeSettings, queue_size: int = 10) -> "ChargeLoop":
        """Check the device is reachable and seed the controller with its current charge."""
        device.heartbeat()
        controller = ChargeController.for_current(device.current_charge_power(), settings)
        _LOGGER.info("Initial charge state: %s", controller)
        return cls(controller, device, queue_size)

    def submit(self, balance):
        if balance is None:
            raise ValueError("PowerBalance must not be None!")
        if len(self.pending) == self.pending.maxlen:
            _LOGGER.warning("Reading queue full, dropping %s", self.pending[0])
        self.pending.append(balance)

    def drain(self) -> ChargeController:
        while self.pending:
            balance = self.pending.popleft()
            self.controller = self.controller.transition_for(balance, self.device)
            _LOGGER.info("Charge state: %s", self.controller)
        return self.controller

    def run(self, inverter, poll_s: float = 30, jitter_s: float = 0.5, ticks: int | None = None):
        """Poll ``inverter`` every ``poll_s`` seconds until interrupted, or for ``ticks`` rounds."""
        consec_errors = 0
        next_tick = time.monotonic()

        while ticks is None or ticks > 0:
            try:
                self.submit(inverter.read_balance())
                self.drain()
                consec_errors = 0

            except KeyboardInterrupt:
                _LOGGER.info("Exiting on Ctrl+C")
                break

            except Exception as e:
                consec_errors += 1
                backoff = min(2 * consec_errors, MAX_BACKOFF_S)
                _LOGGER.warning("Tick error (%s): %s. Backing off %ss, then continuing.",
                                type(e).__name__, e, backoff)
                time.sleep(backoff)

            if ticks is not None:
                ticks -= 1
                if ticks == 0:
                    break

            next_tick += poll_s
            time.sleep(max(0, next_tick - time.monotonic()) + random.uniform(0, jitter_s))

        return self.controller
