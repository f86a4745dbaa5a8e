from .adjustment import Adjustment, AdjustmentBuilder
from .balance import BalanceKind, PowerBalance
from .controller import ChargeController
from .device import ChargingDevice, CommandResult, DeviceError
from .power import Power
from .settings import ChargeSettings
from .window import SlidingWindow

__all__ = [
    "Adjustment",
    "AdjustmentBuilder",
    "BalanceKind",
    "ChargeController",
    "ChargeSettings",
    "ChargingDevice",
    "CommandResult",
    "DeviceError",
    "Power",
    "PowerBalance",
    "SlidingWindow",
]
