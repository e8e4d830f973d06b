from pydantic import BaseModel, ConfigDict, ValidationError
from typing import Any, Optional, Union

from traffic.exceptions import UnexpectedPayloadError

Number = Union[int, float]


class TrafficRecord(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    id: Optional[int] = None
    traffic_cam_id: Optional[int] = None
    start_time: Any = None # ISO / 'YYYY-MM-DD HH:MM:SS' / RFC-1123, may be missing
    end_time: Any = None
    vehicle_count: Optional[Number] = None
    average_speed: Optional[Number] = None # km/h


class TrafficStats(BaseModel):
    average_speed: Optional[Number] = None # null when the range has no data
    total_vehicle_count: Optional[Number] = None


class PeakHour(BaseModel):
    hour: str # e.g. "08:00 - 09:00"
    vehicle_count: Number


class PeakHours(BaseModel):
    peak_hours: list[PeakHour] = []


class Congestion(BaseModel):
    congestion_percentage: Number
    status: str # e.g. "congestionado", "fluido", "sin datos"


class TrafficJam(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    traffic_cam_id: Optional[int] = None
    event_time: Any = None


# --- Tagged unions: data vs. "nothing found" message ---

class RecordsPayload(BaseModel):
    traffic_records: list[TrafficRecord]


class JamsPayload(BaseModel):
    traffic_jams: list[TrafficJam]


class MessagePayload(BaseModel):
    message: str


class ApiErrorPayload(BaseModel):
    error: str


RecordsResult = Union[RecordsPayload, MessagePayload]
JamsResult = Union[JamsPayload, MessagePayload]


def is_api_error(data) -> bool:
    return isinstance(data, dict) and isinstance(data.get("error"), str)


def validate_payload(model, data, endpoint):
    """Validate `data` into `model`, raising UnexpectedPayloadError on mismatch."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise UnexpectedPayloadError(endpoint, f"{e.error_count()} validation error(s)") from e


def _parse_tagged(data, key, model, endpoint):
    if isinstance(data, dict):
        if key in data:
            return validate_payload(model, data, endpoint)
        if isinstance(data.get("message"), str):
            return MessagePayload(message=data["message"])
    raise UnexpectedPayloadError(endpoint, f"expected '{key}' or 'message'")


def parse_records_payload(data, endpoint="/traffic_records") -> RecordsResult:
    """Parse a /traffic_records body into RecordsPayload or MessagePayload."""
    if isinstance(data, (RecordsPayload, MessagePayload)):
        return data
    return _parse_tagged(data, "traffic_records", RecordsPayload, endpoint)


def parse_jams_payload(data, endpoint="/traffic_jams") -> JamsResult:
    """Parse a /traffic_jams body into JamsPayload or MessagePayload."""
    if isinstance(data, (JamsPayload, MessagePayload)):
        return data
    return _parse_tagged(data, "traffic_jams", JamsPayload, endpoint)
