"""
View Controller
Resolves the selected time range, runs the four dashboard queries
concurrently and publishes the results as one immutable snapshot.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from app.constants import NO_RECORDS_MESSAGE, QUERY_WORKERS
from traffic.exceptions import DashboardError
from traffic.schema import Congestion, MessagePayload, PeakHours, RecordsResult, TrafficStats
from traffic.shaping import shape
from traffic.time_range import CustomRange, Preset, TimeRange, as_date, resolve

logger = logging.getLogger(__name__)


def local_now():
    # Naive local wall-clock; converted to UTC per instant, so DST is honoured
    return datetime.now()


@dataclass(frozen=True)
class DashboardState:
    """Everything the page renders for one fetch cycle. Replaced, never mutated."""
    time_range: Optional[TimeRange] = None
    preset: Optional[Preset] = None
    stats: Optional[TrafficStats] = None
    peak_hours: Optional[PeakHours] = None
    congestion: Optional[Congestion] = None
    records: Optional[RecordsResult] = None
    chart_points: tuple = ()
    error: Optional[str] = None
    cycle: int = 0

    @property
    def notice(self):
        if isinstance(self.records, MessagePayload):
            return NO_RECORDS_MESSAGE
        return None

    @property
    def is_loaded(self):
        return self.cycle > 0 and self.error is None


class ViewController:
    def __init__(self, client, traffic_cam_id=1, speed_threshold=None,
                 preset=Preset.DAY, clock=local_now):
        """
        Args:
            client: TrafficAPIClient (or anything with the same get_* methods)
            traffic_cam_id: Camera used for the congestion query
            speed_threshold: Optional km/h threshold for congestion and jams
            preset: Initial preset
            clock: Zero-argument callable returning "now"
        """
        self.client = client
        self.traffic_cam_id = traffic_cam_id
        self.speed_threshold = speed_threshold
        self.preset = Preset(preset)
        self.custom_range: Optional[CustomRange] = None
        self.day_anchor = None
        self._clock = clock
        self._lock = threading.Lock()
        self._cycle = 0
        self._state = DashboardState()

    @property
    def state(self) -> DashboardState:
        return self._state

    def resolve_range(self, now=None) -> Optional[TimeRange]:
        """Resolve the current selection; None while a custom range is half picked."""
        now = now or self._clock()
        if self.preset is Preset.DAY and self.day_anchor is not None:
            now = datetime.combine(self.day_anchor, now.timetz())
        return resolve(self.preset, now, self.custom_range)

    def select_preset(self, preset, now=None) -> DashboardState:
        """Switch preset. A confirmed custom range survives switching away and back."""
        self.preset = Preset(preset)
        if self.preset is Preset.DAY:
            self.day_anchor = None
        return self._run_if_resolved(now)

    def select_day(self, day, now=None) -> DashboardState:
        """Show the whole calendar day `day` (the 'Per Day' date picker)."""
        self.preset = Preset.DAY
        self.day_anchor = day
        return self._run_if_resolved(now)

    def select_custom_range(self, start, end=None, now=None) -> DashboardState:
        """Store the picker selection; fetch only once both endpoints are set."""
        self.preset = Preset.CUSTOM
        if start is not None and end is not None and as_date(start) > as_date(end):
            start, end = end, start
        self.custom_range = CustomRange(start, end)
        return self._run_if_resolved(now)

    def refresh(self) -> DashboardState:
        """Re-run the fetch cycle for the range already on screen."""
        if self._state.time_range is not None:
            return self.run_cycle(self._state.time_range, self._state.preset)
        time_range = self.resolve_range()
        if time_range is None:
            logger.info("Refresh skipped: custom range incomplete")
            return self._state
        return self.run_cycle(time_range, self.preset)

    def _run_if_resolved(self, now):
        time_range = self.resolve_range(now)
        if time_range is None:
            logger.info("Custom range incomplete, waiting for both dates before fetching")
            return self._state
        return self.run_cycle(time_range, self.preset)

    def run_cycle(self, time_range: TimeRange, preset=None) -> DashboardState:
        """
        Fetch stats, peak hours, congestion and records for `time_range`.

        The four queries run concurrently and all of them are awaited. If any
        fails, the new state carries only the error (no partial results).
        Results of a cycle overtaken by a newer one are discarded.

        Returns:
            The state now current (the previous one if this cycle went stale)
        """
        with self._lock:
            self._cycle += 1
            cycle = self._cycle

        logger.info(f"🔄 Cycle {cycle}: fetching {time_range.start} -> {time_range.end}")
        results, error = self._fetch_all(time_range)

        if error is not None:
            new_state = DashboardState(time_range=time_range, preset=preset, error=error, cycle=cycle)
        else:
            new_state = DashboardState(
                time_range=time_range,
                preset=preset,
                stats=results['stats'],
                peak_hours=results['peak_hours'],
                congestion=results['congestion'],
                records=results['records'],
                chart_points=tuple(shape(results['records'])),
                cycle=cycle,
            )

        with self._lock:
            if cycle != self._cycle:
                logger.info(f"   ⏭️  Cycle {cycle} is stale (latest {self._cycle}), discarding")
                return self._state
            self._state = new_state

        if error is not None:
            logger.warning(f"   ❌ Cycle {cycle} failed: {error}")
        else:
            logger.info(f"   ✅ Cycle {cycle} done: {len(new_state.chart_points)} chart points")
        return new_state

    def _fetch_all(self, time_range):
        queries = {
            'stats': lambda: self.client.get_traffic_stats(time_range),
            'peak_hours': lambda: self.client.get_peak_hours(time_range),
            'congestion': lambda: self.client.get_congestion(
                self.traffic_cam_id, time_range, self.speed_threshold),
            'records': lambda: self.client.get_traffic_records(time_range),
        }

        results = {}
        error = None
        with ThreadPoolExecutor(max_workers=QUERY_WORKERS) as pool:
            futures = {pool.submit(fn): name for name, fn in queries.items()}
            # Wait for every query; the first failure to settle is the one reported
            for future in as_completed(futures):
                name = futures[future]
                try:
                    results[name] = future.result()
                except DashboardError as e:
                    error = error or e.message
                except Exception as e:
                    logger.exception(f"Unexpected failure in {name} query")
                    error = error or f"Unexpected error: {e}"
        return results, error

    def fetch_traffic_jams(self):
        """
        Fetch traffic-jam alerts for the range on screen.

        Raises:
            DashboardError subclasses, for the caller to display
        """
        time_range = self._state.time_range or self.resolve_range()
        if time_range is None:
            return None
        return self.client.get_traffic_jams(time_range, self.speed_threshold)
