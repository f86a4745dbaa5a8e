import logging
from datetime import datetime, timedelta, timezone

import click
import yaml

from .balance import PowerBalance
from .config import ConfigError, load_config, require
from .controller import ChargeController
from .device import DryRunDevice, RecordingDevice
from .inverter import SmaInverter
from .loop import ChargeLoop
from .power import Power
from .settings import ChargeSettings
from .tesla import TeslaVehicle


def _require(cfg, *keys):
    try:
        require(cfg, *keys)
    except ConfigError as e:
        raise click.ClickException(str(e))


def _vehicle(cfg) -> TeslaVehicle:
    _require(cfg, 'tesla_email')
    return TeslaVehicle(
        email=cfg['tesla_email'],
        refresh_token=cfg['tesla_refresh_token'],
        vin=cfg['tesla_vin'],
        cache_file=cfg['tesla_cache_file']
    )


def _inverter(cfg) -> SmaInverter:
    _require(cfg, 'inverter_host')
    return SmaInverter(cfg['inverter_host'], verify_ssl=cfg['inverter_verify_ssl'])


def _run(cfg, device, inverter):
    settings = ChargeSettings.from_config(cfg)
    loop = ChargeLoop.start(device, settings, queue_size=cfg['queue_size'])
    loop.run(inverter, poll_s=cfg['poll_interval'], jitter_s=cfg['poll_jitter_s'])


def _reading(entry: dict) -> PowerBalance:
    base = PowerBalance.for_solar(Power.of_watt(entry.get('solar', 0)))
    if entry.get('drawing'):
        return base.consuming(Power.of_watt(entry['drawing']))
    if 'feeding' in entry:
        return base.feeding_in(Power.of_watt(entry['feeding']))
    return PowerBalance.neutral(base.solar)


@click.group()
@click.option('--config', '-c', default='config.yaml', help='Path to config file')
@click.pass_context
def cli(ctx, config):
    try:
        cfg = load_config(config)
    except ConfigError as e:
        raise click.ClickException(str(e))
    logging.basicConfig(level=cfg['log_level'])
    ctx.obj = cfg


@cli.command()
@click.pass_context
def start(ctx):
    """Control the charge current from live inverter readings."""
    cfg = ctx.obj
    _require(cfg, 'tesla_email', 'inverter_host')
    device, inverter = _vehicle(cfg), _inverter(cfg)
    click.echo('Starting controller loop...')
    _run(cfg, device, inverter)


@cli.command()
@click.pass_context
def watch(ctx):
    """Like start, but only log the commands that would be sent."""
    cfg = ctx.obj
    _require(cfg, 'tesla_email', 'inverter_host')
    device, inverter = DryRunDevice(_vehicle(cfg)), _inverter(cfg)
    click.echo('Starting dry-run loop...')
    _run(cfg, device, inverter)


@cli.command()
@click.pass_context
def status(ctx):
    """Print the vehicle's charge state and one inverter reading."""
    cfg = ctx.obj
    vehicle = _vehicle(cfg)
    vehicle.heartbeat()
    click.echo(f"Charge required: {vehicle.charge_required()}")
    click.echo(f"Charge current: {vehicle.current_charge_power().in_amps()}A")
    if cfg['inverter_host']:
        click.echo(f"Power: {_inverter(cfg).read_balance()}")


@cli.command()
@click.argument('readings', type=click.Path(exists=True, dir_okay=False))
@click.option('--current', default=0, show_default=True, help='Charge current (A) to start from')
@click.option('--interval', type=float, default=None, help='Seconds between readings [default: poll_interval]')
@click.pass_context
def simulate(ctx, readings, current, interval):
    """Replay READINGS (a YAML list of solar/drawing/feeding watts) offline."""
    with open(readings) as f:
        entries = yaml.safe_load(f) or []
    if not isinstance(entries, list):
        raise click.ClickException("Readings must be a YAML list")

    cfg = ctx.obj
    settings = ChargeSettings.from_config(cfg)
    step = timedelta(seconds=cfg['poll_interval'] if interval is None else interval)
    device = RecordingDevice(Power.of_amps(current))
    controller = ChargeController.for_current(device.current, settings)
    now = datetime.now(timezone.utc)

    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise click.ClickException(f"Reading {i + 1} is not a mapping: {entry!r}")
        balance = _reading(entry)
        seen = len(device.commands)
        controller = controller.transition_for(balance, device, now=now + i * step)
        commands = ", ".join(
            name if amps is None else f"{name}({amps.in_rounded_amps()}A)"
            for name, amps in device.commands[seen:]
        ) or "-"
        click.echo(f"{i + 1:>3}  {balance}  ->  {controller.current.in_amps():.0f}A  [{commands}]")


if __name__ == '__main__':
    cli()
