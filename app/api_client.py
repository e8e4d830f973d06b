"""
API Client Module
HTTP transport for the traffic analytics API
"""
import logging

import requests

from traffic.exceptions import (
    ApiResponseError, ConfigurationError, TransportError, UnexpectedPayloadError
)
from traffic.schema import (
    Congestion, PeakHours, TrafficStats, is_api_error,
    parse_jams_payload, parse_records_payload, validate_payload
)
from traffic.utils import to_iso_utc, to_sql_datetime

logger = logging.getLogger(__name__)


class TrafficAPIClient:
    """Client for the traffic analytics API endpoints"""

    def __init__(self, base_url, timeout=10, session=None):
        """
        Initialize API client

        Args:
            base_url: Base URL of API (e.g., http://127.0.0.1:5000); None when unconfigured
            timeout: Per-request timeout in seconds
            session: Optional requests.Session. It is used from the four
                fetch threads at once, so only pass one that is safe to share.
                By default each request goes through requests.get on its own.
        """
        self.base_url = base_url.rstrip('/') if base_url else None
        self.timeout = timeout
        self.session = session

    def _request(self, endpoint, params=None):
        """
        GET an endpoint and return its JSON body.

        None-valued params are dropped. Any body carrying an 'error' string
        is a failure regardless of status code.

        Raises:
            ConfigurationError, TransportError, ApiResponseError, UnexpectedPayloadError
        """
        if not self.base_url:
            raise ConfigurationError("API Base URL is not configured.")

        query = {k: v for k, v in (params or {}).items() if v is not None}
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"GET {url} {query}")

        try:
            http = self.session or requests
            resp = http.get(
                url, params=query, timeout=self.timeout,
                headers={'Content-Type': 'application/json'}
            )
        except requests.RequestException as e:
            logger.error(f"API Request Failed: {endpoint} ({e})")
            raise TransportError(f"Connection Error: Is the API running? {e}") from e

        try:
            data = resp.json()
        except ValueError:
            data = None

        if not resp.ok:
            logger.error(f"API Request Failed: {endpoint} status={resp.status_code}")
            if is_api_error(data):
                raise ApiResponseError(f"API Error ({resp.status_code}): {data['error']}", resp.status_code)
            raise ApiResponseError(f"HTTP Error: {resp.status_code} {resp.reason}", resp.status_code)

        if data is None:
            logger.error(f"API Request Failed: {endpoint} returned a non-JSON body")
            raise UnexpectedPayloadError(endpoint, "response is not JSON")

        if is_api_error(data):
            logger.error(f"API Request Failed: {endpoint} error={data['error']}")
            raise ApiResponseError(f"API Error: {data['error']}", resp.status_code)

        return data

    def get_traffic_stats(self, time_range):
        """
        Call /stats endpoint

        Returns:
            TrafficStats (average speed, total vehicle count)
        """
        data = self._request('/stats', {
            'start_datetime': to_iso_utc(time_range.start),
            'end_datetime': to_iso_utc(time_range.end),
        })
        return validate_payload(TrafficStats, data, '/stats')

    def get_peak_hours(self, time_range):
        """Call /peak_hours endpoint (note: 'start'/'end' parameter names)"""
        data = self._request('/peak_hours', {
            'start': to_iso_utc(time_range.start),
            'end': to_iso_utc(time_range.end),
        })
        return validate_payload(PeakHours, data, '/peak_hours')

    def get_congestion(self, traffic_cam_id, time_range=None, speed_threshold=None):
        """
        Call /congestion endpoint for one traffic camera

        Args:
            traffic_cam_id: Camera to evaluate
            time_range: Optional TimeRange; the API picks its own window when omitted
            speed_threshold: Optional km/h threshold below which traffic counts as congested

        Returns:
            Congestion (percentage and status)
        """
        data = self._request('/congestion', {
            'traffic_cam_id': str(traffic_cam_id) if traffic_cam_id is not None else None,
            'start_datetime': to_iso_utc(time_range.start) if time_range else None,
            'end_datetime': to_iso_utc(time_range.end) if time_range else None,
            'speed_threshold': speed_threshold,
        })
        return validate_payload(Congestion, data, '/congestion')

    def get_traffic_records(self, time_range):
        """
        Call /traffic_records endpoint

        This endpoint expects 'YYYY-MM-DD HH:MM:SS' rather than ISO-8601.

        Returns:
            RecordsPayload or MessagePayload (no records in range)
        """
        data = self._request('/traffic_records', {
            'start_datetime': to_sql_datetime(time_range.start),
            'end_datetime': to_sql_datetime(time_range.end),
        })
        return parse_records_payload(data)

    def get_traffic_jams(self, time_range, speed_threshold=None):
        """
        Call /traffic_jams endpoint

        Returns:
            JamsPayload or MessagePayload (no jams in range)
        """
        data = self._request('/traffic_jams', {
            'start_datetime': to_iso_utc(time_range.start),
            'end_datetime': to_iso_utc(time_range.end),
            'speed_threshold': speed_threshold,
        })
        return parse_jams_payload(data)
