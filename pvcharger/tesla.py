import logging
import time

import certifi
import requests
import teslapy

from .device import CommandResult, DeviceError
from .power import Power

_LOGGER = logging.getLogger(__name__)

CHARGE_STATE_TTL_S = 60


class TeslaVehicle:
    """A Tesla as the charging device, driven through the owner API."""

    def __init__(
        self,
        email: str,
        refresh_token: str | None = None,
        vin: str | None = None,
        cache_file: str = "cache.json",
        timeout: int = 10,
        tesla=None
    ):
        if not email:
            raise ValueError("Tesla account email must not be empty!")

        self.vin = vin
        self.refresh_token = refresh_token
        # force use of certifi's CA bundle
        self.tesla = tesla or teslapy.Tesla(email, verify=certifi.where(), timeout=timeout, cache_file=cache_file)

        self._vehicle = None
        self._charge_state = None
        self._charge_state_until = 0.0

    def _authorize(self):
        if self.tesla.authorized:
            return
        if not self.refresh_token:
            raise DeviceError("No cached Tesla token and no refresh token configured.")
        self.tesla.refresh_token(refresh_token=self.refresh_token)

    def _call_with_retry(self, func, *args, **kwargs):
        try:
            return func(*args, **kwargs)
        except requests.exceptions.HTTPError as e:
            code = getattr(e.response, "status_code", None)
            if code == 401:
                _LOGGER.info("Tesla session expired. Re-authenticating...")
                self.tesla.refresh_token()
                return func(*args, **kwargs)
            if code == 429:
                _LOGGER.info("Tesla rate limit hit (429). Sleeping and retrying once...")
                time.sleep(10)
                return func(*args, **kwargs)
            raise

    def _find_vehicle(self):
        vehicles = self._call_with_retry(self.tesla.vehicle_list)
        if not vehicles:
            raise DeviceError("No vehicles found for this Tesla account.")
        if self.vin is None:
            return vehicles[0]
        for vehicle in vehicles:
            if vehicle.get("vin") == self.vin:
                return vehicle
        available = [v.get("vin") for v in vehicles]
        raise DeviceError(f"VIN '{self.vin}' not found; available VINs: {available}")

    @property
    def vehicle(self):
        if self._vehicle is None:
            self._authorize()
            self._vehicle = self._find_vehicle()
        return self._vehicle

    def _woken_up(self):
        """Return the vehicle, waking it up first if it is asleep."""
        vehicle = self.vehicle
        self._call_with_retry(vehicle.get_vehicle_summary)
        state = vehicle.get("state")

        if state == "asleep":
            _LOGGER.info("Trigger wake up...")
            vehicle.sync_wake_up()
            _LOGGER.info("Successfully woken up vehicle!")
        elif state not in ("online", None):
            raise DeviceError(f"Invalid vehicle state {state}!")
        return vehicle

    def _read_charge_state(self) -> dict:
        now = time.monotonic()
        if self._charge_state is None or now >= self._charge_state_until:
            vehicle = self._woken_up()
            data = self._call_with_retry(vehicle.get_vehicle_data)
            self._charge_state = data["charge_state"]
            self._charge_state_until = now + CHARGE_STATE_TTL_S
            _LOGGER.debug("Charge state: %s", self._charge_state)
        return self._charge_state

    def heartbeat(self):
        try:
            vehicle = self.vehicle
        except (requests.exceptions.RequestException, teslapy.VehicleError) as e:
            raise DeviceError(f"Could not connect to the Tesla API: {e}") from e
        _LOGGER.info("Successfully connected to vehicle %s.", vehicle.get("display_name", vehicle.get("vin")))

    def charge_required(self) -> bool:
        state = self._read_charge_state()
        battery_level = state["battery_level"]
        charge_limit = state["charge_limit_soc"]
        _LOGGER.debug("Charge limit set to %s%%. Current charge at %s%%.", charge_limit, battery_level)
        return battery_level < charge_limit

    def current_charge_power(self) -> Power:
        try:
            state = self._read_charge_state()
        except requests.exceptions.HTTPError as e:
            _LOGGER.warning("Could not read charge state: %s", e)
            return Power.NONE

        if state.get("charging_state") == "Stopped":
            return Power.NONE
        return Power.of_amps(state.get("charger_actual_current") or 0)

    def _command(self, name: str, **kwargs) -> CommandResult:
        try:
            vehicle = self._woken_up()
            self._call_with_retry(vehicle.command, name, **kwargs)
        except (requests.exceptions.RequestException, teslapy.VehicleError, DeviceError) as e:
            _LOGGER.warning("Tesla command %s failed: %s", name, e)
            return CommandResult.failure(e)
        finally:
            self._charge_state = None
        return CommandResult.success()

    def start(self, current: Power) -> CommandResult:
        _LOGGER.info("Start charging...")
        result = self._command("START_CHARGE")
        if not result.ok:
            return result
        _LOGGER.info("Charging started.")
        return self.adjust(current)

    def stop(self) -> CommandResult:
        _LOGGER.info("Stop charging...")
        result = self._command("STOP_CHARGE")
        if result.ok:
            _LOGGER.info("Stopped charging.")
        return result

    def adjust(self, current: Power) -> CommandResult:
        amps = current.in_rounded_amps()
        _LOGGER.info("Adjusting charge to %dA...", amps)
        result = self._command("CHARGING_AMPS", charging_amps=amps)
        if result.ok:
            _LOGGER.info("Charge adjusted.")
        return result
