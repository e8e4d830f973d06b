"""
Visualization Module
Chart creation for the traffic flow metrics
"""
import plotly.graph_objects as go

from app.constants import DEFAULT_CHART_HEIGHT, SPEED_COLOR, VOLUME_COLOR
from traffic.shaping import points_to_frame


def create_traffic_chart(points, height=DEFAULT_CHART_HEIGHT):
    """
    Create the volume / speed chart with two y-axes

    Args:
        points: Sorted sequence of ChartPoint
        height: Figure height in pixels

    Returns:
        Plotly Figure object
    """
    df = points_to_frame(points)

    fig = go.Figure()

    # 1. Vehicle volume (left axis)
    fig.add_trace(go.Scatter(
        x=df['name'], y=df['volume'],
        mode='lines+markers', name='volume',
        line=dict(color=VOLUME_COLOR, width=2, shape='spline'),
        marker=dict(size=6),
        connectgaps=False,
    ))

    # 2. Average speed (right axis)
    fig.add_trace(go.Scatter(
        x=df['name'], y=df['speed'],
        mode='lines', name='speed',
        line=dict(color=SPEED_COLOR, width=2, shape='spline'),
        yaxis='y2',
        connectgaps=False,
    ))

    fig.update_layout(
        xaxis=dict(title="Time", type='category', showgrid=True, griddash='dash'),
        yaxis=dict(title="Vehicles", showgrid=True, griddash='dash'),
        yaxis2=dict(title="Speed (km/h)", overlaying='y', side='right', showgrid=False),
        height=height,
        margin=dict(l=20, r=30, t=20, b=5),
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
        hovermode='x unified',
    )

    return fig


def _fmt_count(value):
    return "N/A" if value is None else f"{round(value):,}"


def _fmt_speed(value):
    return "N/A" if value is None else f"{round(value)} km/h"


def build_metric_cards(state):
    """
    Values for the four summary cards

    Args:
        state: DashboardState

    Returns:
        list of (title, value, caption) tuples in display order
    """
    stats = state.stats
    peak = state.peak_hours.peak_hours if state.peak_hours else []
    congestion = state.congestion

    peak_value = ", ".join(p.hour for p in peak[:2]) if peak else "N/A"
    peak_caption = f"{_fmt_count(peak[0].vehicle_count)} vehicles at peak" if peak else None

    if congestion is not None:
        congestion_value = f"{round(congestion.congestion_percentage)}%"
        congestion_caption = f"Status: {congestion.status}"
    else:
        congestion_value, congestion_caption = "N/A", None

    return [
        ("Total Traffic Volume", _fmt_count(stats.total_vehicle_count if stats else None), None),
        ("Average Speed", _fmt_speed(stats.average_speed if stats else None), None),
        ("Peak Hours", peak_value, peak_caption),
        ("Congestion Index", congestion_value, congestion_caption),
    ]
