import logging

import yaml

DEFAULTS = {
    'min_amps': 5,
    'max_amps': 13,
    'adjustment_window': 5,
    'accepted_external_watts': 0,
    'exceed_charge_minutes': 10,
    'poll_interval': 30,
    'poll_jitter_s': 0.5,
    'queue_size': 10,
    'log_level': 'INFO',
    'inverter_host': None,
    'inverter_verify_ssl': False,
    'tesla_email': None,
    'tesla_refresh_token': None,
    'tesla_vin': None,
    'tesla_cache_file': 'cache.json',
}

_NUMBERS = ('min_amps', 'max_amps', 'adjustment_window', 'accepted_external_watts',
            'exceed_charge_minutes', 'poll_interval', 'poll_jitter_s', 'queue_size')


class ConfigError(ValueError):
    pass


def load_config(path) -> dict:
    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file '{path}' not found") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file '{path}' is not valid YAML: {e}") from e

    return parse_config(raw or {})


def parse_config(raw) -> dict:
    if not isinstance(raw, dict):
        raise ConfigError(f"Config must be a mapping, got {type(raw).__name__}")

    unknown = sorted(set(raw) - set(DEFAULTS))
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

    cfg = dict(DEFAULTS)
    cfg.update(raw)

    for key in _NUMBERS:
        value = cfg[key]
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            raise ConfigError(f"'{key}' must be a non-negative number, got {value!r}")

    if cfg['adjustment_window'] < 1 or int(cfg['adjustment_window']) != cfg['adjustment_window']:
        raise ConfigError(f"'adjustment_window' must be a positive integer, got {cfg['adjustment_window']!r}")
    for key in ('min_amps', 'max_amps'):
        if cfg[key] < 1:
            raise ConfigError(f"'{key}' must be at least 1A, got {cfg[key]!r}")
    if cfg['min_amps'] > cfg['max_amps']:
        raise ConfigError(f"'min_amps' ({cfg['min_amps']}) exceeds 'max_amps' ({cfg['max_amps']})")
    if cfg['queue_size'] < 1:
        raise ConfigError("'queue_size' must be at least 1")

    level = str(cfg['log_level']).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"Unknown log level '{cfg['log_level']}'")
    cfg['log_level'] = level
    cfg['adjustment_window'] = int(cfg['adjustment_window'])
    cfg['queue_size'] = int(cfg['queue_size'])

    return cfg


def require(cfg: dict, *keys):
    missing = [key for key in keys if not cfg.get(key)]
    if missing:
        raise ConfigError(f"Missing required config: {', '.join(missing)}")
