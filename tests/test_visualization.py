"""
Tests for app/visualization.py
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.controller import DashboardState
from app.visualization import build_metric_cards, create_traffic_chart
from traffic.schema import Congestion, PeakHours, TrafficStats
from traffic.shaping import shape


class TestTrafficChart:
    def test_two_traces_on_separate_axes(self):
        points = shape({"traffic_records": [
            {"start_time": "2024-03-24T10:00:00Z", "vehicle_count": 5, "average_speed": 30},
            {"start_time": "2024-03-24T09:00:00Z", "vehicle_count": 7, "average_speed": 35},
        ]})
        fig = create_traffic_chart(points, height=400)
        volume, speed = fig.data
        assert list(volume.x) == ["Mar 24, 09:00", "Mar 24, 10:00"]
        assert list(volume.y) == [7, 5]
        assert list(speed.y) == [35, 30]
        assert speed.yaxis == 'y2'
        assert fig.layout.height == 400

    def test_empty_points(self):
        fig = create_traffic_chart([])
        assert len(fig.data) == 2


class TestMetricCards:
    def test_empty_state(self):
        cards = build_metric_cards(DashboardState())
        assert [value for _, value, _ in cards] == ["N/A"] * 4

    def test_populated_state(self):
        state = DashboardState(
            stats=TrafficStats(average_speed=42.4, total_vehicle_count=24685),
            peak_hours=PeakHours(peak_hours=[
                {"hour": "07:00 - 08:00", "vehicle_count": 1850},
                {"hour": "16:00 - 17:00", "vehicle_count": 1700},
                {"hour": "12:00 - 13:00", "vehicle_count": 900},
            ]),
            congestion=Congestion(congestion_percentage=68.2, status="congestionado"),
        )
        titles = [title for title, _, _ in build_metric_cards(state)]
        cards = {title: (value, caption) for title, value, caption in build_metric_cards(state)}
        assert titles == ["Total Traffic Volume", "Average Speed", "Peak Hours", "Congestion Index"]
        assert cards["Total Traffic Volume"][0] == "24,685"
        assert cards["Average Speed"][0] == "42 km/h"
        assert cards["Peak Hours"] == ("07:00 - 08:00, 16:00 - 17:00", "1,850 vehicles at peak")
        assert cards["Congestion Index"] == ("68%", "Status: congestionado")

    def test_null_stats(self):
        state = DashboardState(stats=TrafficStats(average_speed=None, total_vehicle_count=None))
        cards = build_metric_cards(state)
        assert cards[0][1] == "N/A"
        assert cards[1][1] == "N/A"
