# Time range resolution
from traffic.time_range import (
    Preset,
    TimeRange,
    CustomRange,
    resolve,
)

# Payload shaping
from traffic.shaping import (
    ChartPoint,
    shape,
    points_to_frame,
    records_to_frame,
    jams_to_frame,
)

# Utilities
from traffic.utils import load_config, get_api_base_url

__all__ = [
    # Time range
    'Preset',
    'TimeRange',
    'CustomRange',
    'resolve',
    # Shaping
    'ChartPoint',
    'shape',
    'points_to_frame',
    'records_to_frame',
    'jams_to_frame',
    # Utilities
    'load_config',
    'get_api_base_url',
]
