"""
Dashboard Configuration Constants
"""

# Page
PAGE_TITLE = "Traffic Flow Dashboard"
PAGE_ICON = "🚦"

# Fetch cycle
QUERY_WORKERS = 4  # stats, peak hours, congestion, records

# Messages
NO_RECORDS_MESSAGE = "No traffic records found."
NO_JAMS_MESSAGE = "No traffic jams detected in this period."

# Chart
DEFAULT_CHART_HEIGHT = 350
VOLUME_COLOR = '#8884d8'
SPEED_COLOR = '#82ca9d'

# Export
EXPORT_FILENAME = "traffic_records_{start:%Y%m%d}_{end:%Y%m%d}.csv"
