import copy
import logging
import os
from datetime import timezone

import pandas as pd
import yaml

from config.settings import (
    API_BASE_URL_ENV, DEFAULT_CONFIG, DEFAULT_CONFIG_PATH,
    LABEL_TIMEZONE, MISSING_LABEL, SQL_DATETIME_FORMAT
)

logger = logging.getLogger(__name__)


def _merge(defaults, overrides):
    merged = copy.deepcopy(defaults)
    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path=None):
    """
    Load dashboard configuration from YAML.

    Relative paths are also looked up one and two directories up, so the
    dashboard works whether it is started from the project root or from app/.
    Missing keys fall back to DEFAULT_CONFIG and the TRAFFIC_API_BASE_URL
    environment variable overrides api.base_url.

    Args:
        config_path: Path to YAML file (default config/dashboard_config.yaml)

    Returns:
        dict with 'api' and 'dashboard' sections
    """
    config_path = str(config_path or DEFAULT_CONFIG_PATH)
    if not os.path.exists(config_path):
        if os.path.exists(os.path.join("..", config_path)):
            config_path = os.path.join("..", config_path)
        elif os.path.exists(os.path.join("..", "..", config_path)):
            config_path = os.path.join("..", "..", config_path)

    loaded = {}
    try:
        with open(config_path, 'r') as file:
            loaded = yaml.safe_load(file) or {}
        logger.info(f"Loaded config from {config_path}")
    except FileNotFoundError:
        logger.error(f"Config file not found at {config_path}, using defaults")

    config = _merge(DEFAULT_CONFIG, loaded)

    env_url = os.environ.get(API_BASE_URL_ENV)
    if env_url:
        config['api']['base_url'] = env_url

    return config


def get_api_base_url(config):
    """Return the configured API base URL, or None (logged) when it is unset."""
    base_url = (config or {}).get('api', {}).get('base_url')
    if not base_url:
        logger.error(f"API base URL is not set (api.base_url or {API_BASE_URL_ENV})")
        return None
    return str(base_url).rstrip('/')


def to_iso_utc(dt):
    """
    Render a datetime as UTC ISO-8601 with milliseconds and a 'Z' suffix.

    Naive datetimes are taken as local time.
    """
    utc = dt.astimezone(timezone.utc)
    return f"{utc:%Y-%m-%dT%H:%M:%S}.{utc.microsecond // 1000:03d}Z"


def to_sql_datetime(dt):
    """Render a datetime as 'YYYY-MM-DD HH:MM:SS' in its own wall-clock time."""
    return dt.strftime(SQL_DATETIME_FORMAT)


def parse_timestamp(value):
    """
    Parse an API timestamp into an aware UTC datetime.

    Accepts ISO-8601, 'YYYY-MM-DD HH:MM:SS' and RFC-1123 strings as well as
    datetime objects. Naive values are read as UTC.

    Returns:
        datetime, or None when the value is missing or unparseable
    """
    if value is None or value == '':
        return None
    parsed = pd.to_datetime(value, utc=True, errors='coerce')
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


def format_display_datetime(value):
    """
    Format a timestamp as a chart label, e.g. 'Mar 24, 08:00' (UTC, 24h).

    Missing values become 'N/A'; unparseable strings are returned unchanged.
    """
    if value is None or value == '':
        return MISSING_LABEL
    parsed = parse_timestamp(value)
    if parsed is None:
        return str(value)
    local = parsed.astimezone(LABEL_TIMEZONE)
    return f"{local:%b} {local.day}, {local:%H:%M}"
