from datetime import datetime, time, timezone
from pathlib import Path

# ===========================
# Project Paths
# ===========================
PROJECT_ROOT = Path(__file__).parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "dashboard_config.yaml"

# Overrides api.base_url from the YAML file
API_BASE_URL_ENV = "TRAFFIC_API_BASE_URL"

# ===========================
# Default Configuration
# ===========================
# Used when the YAML file is missing or leaves a key out
DEFAULT_CONFIG = {
    'api': {
        'base_url': None,
        'timeout': 10,
    },
    'dashboard': {
        'default_preset': 'day',
        'traffic_cam_id': 1,
        'speed_threshold': None,
        'chart_height': 350,
    },
}

# ===========================
# Time Range Parameters
# ===========================
START_OF_DAY = time(0, 0, 0, 0)
END_OF_DAY = time(23, 59, 59, 999000)
DEFAULT_CUSTOM_RANGE_DAYS = 7

# Sort key for records whose start time is missing or unparseable
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# ===========================
# Date Formats
# ===========================
SQL_DATETIME_FORMAT = '%Y-%m-%d %H:%M:%S'
LABEL_TIMEZONE = timezone.utc
MISSING_LABEL = 'N/A'

# ===========================
# Preset Labels
# ===========================
PRESET_LABELS = {
    'hour': 'Last Hour',
    'day': 'Per Day',
    'week': 'This Week',
    'month': 'This Month',
    'custom': 'Custom Range',
}
