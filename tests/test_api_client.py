"""
Tests for app/api_client.py

The HTTP session is mocked; no network access.
"""
import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.api_client import TrafficAPIClient
from traffic.exceptions import (
    ApiResponseError, ConfigurationError, TransportError, UnexpectedPayloadError
)
from traffic.schema import MessagePayload, RecordsPayload
from traffic.time_range import TimeRange

RANGE = TimeRange(
    datetime(2024, 3, 24, 0, 0, tzinfo=timezone.utc),
    datetime(2024, 3, 24, 23, 59, 59, 999000, tzinfo=timezone.utc),
)


def make_response(status=200, body=None, reason="OK"):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.reason = reason
    if isinstance(body, Exception):
        resp.json.side_effect = body
    else:
        resp.json.return_value = body
    return resp


def make_client(*responses, base_url="http://api.test/"):
    session = MagicMock()
    session.get.side_effect = list(responses)
    return TrafficAPIClient(base_url, timeout=5, session=session), session


def sent_params(session):
    return session.get.call_args.kwargs['params']


# ── request parameters ────────────────────────────────────────────────────────

class TestParameters:
    def test_stats_iso_params(self):
        client, session = make_client(make_response(body={"average_speed": 42.5, "total_vehicle_count": 100}))
        stats = client.get_traffic_stats(RANGE)
        assert stats.average_speed == 42.5
        assert stats.total_vehicle_count == 100
        assert session.get.call_args.args[0] == "http://api.test/stats"
        assert sent_params(session) == {
            'start_datetime': "2024-03-24T00:00:00.000Z",
            'end_datetime': "2024-03-24T23:59:59.999Z",
        }
        assert session.get.call_args.kwargs['timeout'] == 5

    def test_stats_nulls(self):
        client, _ = make_client(make_response(body={"average_speed": None, "total_vehicle_count": None}))
        stats = client.get_traffic_stats(RANGE)
        assert stats.average_speed is None

    def test_peak_hours_param_names(self):
        body = {"peak_hours": [{"hour": "08:00 - 09:00", "vehicle_count": 120}]}
        client, session = make_client(make_response(body=body))
        peak = client.get_peak_hours(RANGE)
        assert peak.peak_hours[0].hour == "08:00 - 09:00"
        assert set(sent_params(session)) == {'start', 'end'}

    def test_congestion_omits_missing_threshold(self):
        client, session = make_client(make_response(body={"congestion_percentage": 68.2, "status": "fluido"}))
        congestion = client.get_congestion(7, RANGE)
        assert congestion.status == "fluido"
        params = sent_params(session)
        assert params['traffic_cam_id'] == "7"
        assert 'speed_threshold' not in params

    def test_congestion_with_threshold(self):
        client, session = make_client(make_response(body={"congestion_percentage": 10, "status": "fluido"}))
        client.get_congestion(7, RANGE, speed_threshold=20)
        assert sent_params(session)['speed_threshold'] == 20

    def test_records_sql_format(self):
        client, session = make_client(make_response(body={"traffic_records": []}))
        payload = client.get_traffic_records(RANGE)
        assert isinstance(payload, RecordsPayload)
        assert sent_params(session) == {
            'start_datetime': "2024-03-24 00:00:00",
            'end_datetime': "2024-03-24 23:59:59",
        }

    def test_records_message(self):
        client, _ = make_client(make_response(body={"message": "No records found"}))
        assert isinstance(client.get_traffic_records(RANGE), MessagePayload)

    def test_jams(self):
        client, session = make_client(make_response(body={"message": "No jams"}))
        assert isinstance(client.get_traffic_jams(RANGE, speed_threshold=15), MessagePayload)
        assert sent_params(session)['speed_threshold'] == 15


# ── error normalization ───────────────────────────────────────────────────────

class TestErrors:
    def test_missing_base_url(self):
        client = TrafficAPIClient(None, session=MagicMock())
        with pytest.raises(ConfigurationError, match="API Base URL is not configured."):
            client.get_traffic_stats(RANGE)
        client.session.get.assert_not_called()

    def test_transport_failure(self):
        client, _ = make_client(requests.ConnectionError("refused"))
        with pytest.raises(TransportError):
            client.get_peak_hours(RANGE)

    def test_error_payload_with_error_status(self):
        client, _ = make_client(make_response(400, {"error": "bad date"}, "BAD REQUEST"))
        with pytest.raises(ApiResponseError) as exc:
            client.get_traffic_stats(RANGE)
        assert exc.value.message == "API Error (400): bad date"
        assert exc.value.status_code == 400

    def test_error_payload_with_ok_status(self):
        client, _ = make_client(make_response(200, {"error": "db down"}))
        with pytest.raises(ApiResponseError, match="API Error: db down"):
            client.get_traffic_records(RANGE)

    def test_http_error_without_error_shape(self):
        client, _ = make_client(make_response(502, ValueError("no json"), "Bad Gateway"))
        with pytest.raises(ApiResponseError, match="HTTP Error: 502 Bad Gateway"):
            client.get_traffic_stats(RANGE)

    def test_non_json_success(self):
        client, _ = make_client(make_response(200, ValueError("no json")))
        with pytest.raises(UnexpectedPayloadError):
            client.get_traffic_stats(RANGE)

    def test_unexpected_shape(self):
        client, _ = make_client(make_response(200, {"congestion": "high"}))
        with pytest.raises(UnexpectedPayloadError):
            client.get_congestion(1, RANGE)


# ── transport ─────────────────────────────────────────────────────────────────

class TestTransport:
    def test_default_client_does_not_share_a_session(self):
        client = TrafficAPIClient("http://api.test", timeout=5)
        assert client.session is None
        with patch("app.api_client.requests.get") as get:
            get.return_value = make_response(body={"average_speed": 10, "total_vehicle_count": 2})
            client.get_traffic_stats(RANGE)
        get.assert_called_once()
        assert get.call_args.args[0] == "http://api.test/stats"
        assert get.call_args.kwargs['timeout'] == 5
