import logging

import requests

from .balance import PowerBalance
from .power import Power

_LOGGER = logging.getLogger(__name__)

DASH_VALUES_URL = "https://{host}/dyn/getDashValues.json"

SOLAR_POWER_KEY = "6100_40263F00"
EXTERNAL_POWER_KEY = "6100_40463700"
FEED_IN_POWER_KEY = "6100_40463600"


class InverterError(RuntimeError):
    pass


class SmaInverter:
    """Reads the dashboard values of an SMA inverter's local web interface."""

    def __init__(self, host: str, verify_ssl: bool = False, timeout: float = 10.0, session=None):
        if not host:
            raise ValueError("Inverter host must not be empty!")

        self.url = DASH_VALUES_URL.format(host=host)
        self.timeout = timeout
        self.session = session or requests.Session()
        # the inverter ships a self-signed certificate
        self.session.verify = verify_ssl
        if not verify_ssl:
            requests.packages.urllib3.disable_warnings()

    def _value(self, device: dict, key: str) -> float:
        try:
            value = device[key]["1"][0]["val"]
        except (KeyError, IndexError, TypeError) as e:
            raise InverterError(f"Missing {key} in inverter response") from e
        # the inverter reports null instead of 0 at night
        return float(value or 0)

    def parse(self, payload: dict) -> PowerBalance:
        try:
            device = next(iter(payload["result"].values()))
        except (KeyError, AttributeError, StopIteration, TypeError) as e:
            raise InverterError(f"Unexpected inverter response: {payload!r}") from e

        solar = Power.of_watt(self._value(device, SOLAR_POWER_KEY))
        external = Power.of_watt(self._value(device, EXTERNAL_POWER_KEY))
        feed_in = Power.of_watt(self._value(device, FEED_IN_POWER_KEY))

        base = PowerBalance.for_solar(solar)
        return base.feeding_in(feed_in) if external.is_zero() else base.consuming(external)

    def read_balance(self) -> PowerBalance:
        r = self.session.get(self.url, timeout=self.timeout)
        r.raise_for_status()
        payload = r.json()
        _LOGGER.debug("PV data lookup returned: %s", payload)

        balance = self.parse(payload)
        _LOGGER.info("Current power: %s", balance)
        return balance
