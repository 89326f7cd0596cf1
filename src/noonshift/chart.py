"""
Discrepancy chart.

``ChartAdapter`` turns a ``DiscrepancySeries`` into labels and values for a
``ChartBackend``. ``PlotlyChart`` is the backend used by the application: a
line chart of minutes against day index with animation turned off, since it
follows a live control.
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import plotly.graph_objects as go

from .config import config
from .discrepancy import DiscrepancySample

logger = logging.getLogger(__name__)


def tick_labels(num_days: int) -> List[str]:
    """
    Axis labels for a series of ``num_days`` samples.

    Index 0 is 'Start'; the indices at 1/4, 1/2 and 3/4 of the sequence
    (floored) are 'Quarter', 'Half' and '3/4'; the last index is 'End'; every
    30th index shows its number; everything else is blank. Earlier rules win.
    """
    quarter = math.floor(num_days * 0.25)
    half = math.floor(num_days * 0.5)
    three_quarter = math.floor(num_days * 0.75)
    labels = []
    for index in range(num_days):
        if index == 0:
            labels.append('Start')
        elif index == quarter:
            labels.append('Quarter')
        elif index == half:
            labels.append('Half')
        elif index == three_quarter:
            labels.append('3/4')
        elif index == num_days - 1:
            labels.append('End')
        elif index % 30 == 0:
            labels.append(str(index))
        else:
            labels.append('')
    return labels


class ChartBackend(ABC):
    """Charting capability consumed by ``ChartAdapter``."""

    @abstractmethod
    def set_data(self, labels: Sequence[int], values: Sequence[float]) -> None:
        """Replace the backing data."""

    @abstractmethod
    def redraw(self, animate: bool = False) -> None:
        """Redraw with the current data."""

    @abstractmethod
    def set_highlight(self, index: Optional[int]) -> None:
        """Mark one label position, or clear the mark with None."""


class PlotlyChart(ChartBackend):
    """Line chart of discrepancy minutes per day, built with plotly."""

    def __init__(self, title: str = 'Time Discrepancy'):
        self._title = title
        self._labels: List[int] = []
        self._values: List[float] = []
        self._highlight: Optional[int] = None
        self._animate = False
        self._fig = go.Figure()
        self.redraw_count = 0

    @property
    def labels(self) -> List[int]:
        return list(self._labels)

    @property
    def values(self) -> List[float]:
        return list(self._values)

    @property
    def highlight(self) -> Optional[int]:
        return self._highlight

    def set_data(self, labels: Sequence[int], values: Sequence[float]) -> None:
        if len(labels) != len(values):
            raise ValueError(f"Got {len(labels)} labels for {len(values)} values")
        self._labels = [int(label) for label in labels]
        self._values = [float(value) for value in values]

    def redraw(self, animate: bool = False) -> None:
        self._animate = animate
        self._fig = self._build()
        self.redraw_count += 1

    def set_highlight(self, index: Optional[int]) -> None:
        self._highlight = index
        self._fig.layout.shapes = self._highlight_shapes()

    def figure(self) -> go.Figure:
        """Return the current plotly Figure."""
        return self._fig

    def _build(self) -> go.Figure:
        fig = go.Figure()
        fig.add_trace(go.Scatter(
            x=self._labels,
            y=self._values,
            mode='lines',
            line=dict(color=config.CHART_COLOR, width=2, shape='spline',
                      smoothing=0.4),
            fill='tozeroy',
            fillcolor='rgba(75, 192, 192, 0.1)',
            name=self._title,
            hovertemplate='Day %{x}: %{y:.2f} minutes<extra></extra>'
        ))
        fig.update_layout(
            title=self._title,
            xaxis=dict(
                title=dict(text='Day of Year'),
                tickmode='array',
                tickvals=self._labels,
                ticktext=tick_labels(len(self._labels)),
                tickangle=0,
            ),
            yaxis=dict(title=dict(text='Discrepancy (minutes)'), rangemode='tozero'),
            showlegend=False,
            transition=dict(duration=500 if self._animate else 0),
            shapes=self._highlight_shapes(),
        )
        return fig

    def _highlight_shapes(self) -> list:
        if self._highlight is None:
            return []
        return [dict(
            type='line', xref='x', yref='paper',
            x0=self._highlight, x1=self._highlight, y0=0, y1=1,
            line=dict(color=config.ARC_COLOR, width=1, dash='dot'),
        )]


class ChartAdapter:
    """
    Feeds discrepancy series to a chart backend.

    ``publish_series`` replaces the chart data wholesale and is meant to be
    called once per obliquity or day-count change; the current day only moves
    the highlight.
    """

    def __init__(self, backend: ChartBackend):
        self._backend = backend
        self.publish_count = 0

    @property
    def backend(self) -> ChartBackend:
        return self._backend

    def publish_series(self, samples: Sequence[DiscrepancySample]) -> None:
        labels = [sample.day for sample in samples]
        values = [sample.minutes for sample in samples]
        self._backend.set_data(labels, values)
        self._backend.redraw(animate=False)
        self.publish_count += 1
        logger.debug("Published %d chart samples", len(labels))

    def highlight_day(self, day: Optional[int]) -> None:
        self._backend.set_highlight(day)
