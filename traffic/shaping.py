"""
Data Shaping
Turns /traffic_records payloads into a sorted, chart-ready series and
DataFrames for the chart and the record table.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

import pandas as pd

from config.settings import EPOCH
from traffic.schema import JamsPayload, RecordsPayload, parse_jams_payload, parse_records_payload
from traffic.utils import format_display_datetime, parse_timestamp

Number = Union[int, float]

CHART_COLUMNS = ['name', 'volume', 'speed', 'sort_key']
RECORD_COLUMNS = ['id', 'traffic_cam_id', 'start_time', 'end_time', 'vehicle_count', 'average_speed']
JAM_COLUMNS = ['traffic_cam_id', 'event_time']


@dataclass(frozen=True)
class ChartPoint:
    label: str
    volume: Optional[Number]
    speed: Optional[Number]
    sort_key: datetime


def shape(payload) -> list:
    """
    Shape a /traffic_records payload into chart points.

    A message payload ("no records found") is not an error and yields [].
    Volume and speed pass through verbatim; records with a missing or
    unparseable start time sort first (epoch).

    Args:
        payload: RecordsPayload, MessagePayload or the raw response dict

    Returns:
        list of ChartPoint sorted ascending by sort_key (stable)
    """
    payload = parse_records_payload(payload)
    if not isinstance(payload, RecordsPayload):
        return []

    points = []
    for record in payload.traffic_records:
        parsed = parse_timestamp(record.start_time)
        points.append(ChartPoint(
            label=format_display_datetime(record.start_time),
            volume=record.vehicle_count,
            speed=record.average_speed,
            sort_key=parsed if parsed is not None else EPOCH,
        ))

    # sorted() is stable, so equal timestamps keep input order
    return sorted(points, key=lambda p: p.sort_key)


def points_to_frame(points):
    """Chart points as a DataFrame with columns name/volume/speed/sort_key."""
    if not points:
        return pd.DataFrame(columns=CHART_COLUMNS)
    return pd.DataFrame({
        'name': [p.label for p in points],
        'volume': [p.volume for p in points],
        'speed': [p.speed for p in points],
        'sort_key': [p.sort_key for p in points],
    })


def records_to_frame(payload):
    """
    Raw records as a table ordered by start time, for display and CSV export.

    Returns an empty frame with the record columns for a message payload.
    """
    payload = parse_records_payload(payload)
    if not isinstance(payload, RecordsPayload) or not payload.traffic_records:
        return pd.DataFrame(columns=RECORD_COLUMNS)

    rows = [record.model_dump() for record in payload.traffic_records]
    df = pd.DataFrame(rows)
    for col in RECORD_COLUMNS:
        if col not in df.columns:
            df[col] = None

    keys = [parse_timestamp(r['start_time']) or EPOCH for r in rows]
    df['_sort_key'] = keys
    df = df.sort_values('_sort_key', kind='stable').drop(columns='_sort_key')
    return df[RECORD_COLUMNS].reset_index(drop=True)


def jams_to_frame(payload):
    """Traffic-jam alerts as a table ordered by event time."""
    payload = parse_jams_payload(payload)
    if not isinstance(payload, JamsPayload) or not payload.traffic_jams:
        return pd.DataFrame(columns=JAM_COLUMNS)

    rows = [jam.model_dump() for jam in payload.traffic_jams]
    df = pd.DataFrame(rows)
    for col in JAM_COLUMNS:
        if col not in df.columns:
            df[col] = None

    df['_sort_key'] = [parse_timestamp(r['event_time']) or EPOCH for r in rows]
    df = df.sort_values('_sort_key', kind='stable').drop(columns='_sort_key')
    return df[JAM_COLUMNS].reset_index(drop=True)
