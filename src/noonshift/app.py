"""
Application composition and command line entry point.

``ObliquityApp`` builds one renderer, chart, controller and animation driver
and wires them together; it exposes exactly the entry points a user interface
needs. There is no module-level instance: every app is constructed and owned
by its caller.
"""

import argparse
import logging
from pathlib import Path
from typing import Callable, List, Optional, Union

import plotly.graph_objects as go
import plotly.io as pio

from .animation import AnimationDriver, FrameScheduler, ManualFrameScheduler
from .chart import ChartAdapter, PlotlyChart
from .config import config
from .controller import DiscrepancyReadout, ObliquityController
from .logging_config import setup_logging
from .scene import PlotlyRenderer

logger = logging.getLogger(__name__)


class ObliquityApp:
    """
    Scene, chart, numeric readout and animation for one model.

    Parameters
    ----------
    obliquity_deg : float, optional
        Initial obliquity [deg] (default: config.DEFAULT_OBLIQUITY_DEG)
    num_days : int, optional
        Initial number of days (default: config.DEFAULT_NUM_DAYS)
    current_day : int, optional
        Initial day (default: 0)
    scheduler : FrameScheduler, optional
        Frame source for the animation (default: a ManualFrameScheduler)
    time_source : callable, optional
        Millisecond clock for the animation (default: monotonic clock)
    """

    def __init__(self, obliquity_deg: Optional[float] = None,
                 num_days: Optional[int] = None, current_day: int = 0,
                 scheduler: Optional[FrameScheduler] = None,
                 time_source: Optional[Callable[[], float]] = None):
        self.renderer = PlotlyRenderer()
        self.chart_backend = PlotlyChart()
        self.chart = ChartAdapter(self.chart_backend)
        self.controller = ObliquityController(
            self.renderer, self.chart,
            obliquity_deg=obliquity_deg, num_days=num_days,
            current_day=current_day)
        self.scheduler = scheduler or ManualFrameScheduler()
        self.driver = AnimationDriver(self.controller, self.scheduler,
                                      time_source=time_source)

    # ========== UI ENTRY POINTS ==========
    def set_obliquity(self, obliquity_deg: float) -> None:
        self.controller.set_obliquity(obliquity_deg)

    def set_day_count(self, num_days: int) -> None:
        self.controller.set_day_count(num_days)

    def set_current_day(self, day: int) -> None:
        self.controller.set_current_day(day)

    def start(self) -> None:
        self.driver.start()

    def stop(self) -> None:
        self.driver.stop()

    def reset_camera(self) -> None:
        self.controller.reset_camera()

    # ========== OUTPUT ==========
    @property
    def readout(self) -> DiscrepancyReadout:
        return self.controller.readout

    def scene_figure(self) -> go.Figure:
        return self.renderer.figure()

    def chart_figure(self) -> go.Figure:
        return self.chart_backend.figure()

    def __repr__(self):
        return f"ObliquityApp({self.controller!r}, {self.driver!r})"


def export_html(app: ObliquityApp, path: Union[str, Path]) -> Path:
    """
    Write the scene and the chart into one standalone HTML file.

    Parameters:
        app: Application to export
        path: Output file

    Returns:
        Path of the written file
    """
    path = Path(path)
    readout = app.readout
    scene_html = pio.to_html(app.scene_figure(), include_plotlyjs='cdn',
                             full_html=False)
    chart_html = pio.to_html(app.chart_figure(), include_plotlyjs=False,
                             full_html=False)
    controller = app.controller
    html = (
        "<!DOCTYPE html>\n<html>\n<head><meta charset=\"utf-8\">"
        "<title>Solar Noon vs Clock Noon</title></head>\n<body>\n"
        f"<p>Obliquity {controller.obliquity}&deg;, "
        f"{controller.num_days} days, day {controller.current_day}: "
        f"{readout.angle_text} / {readout.minutes_text}</p>\n"
        f"{scene_html}\n{chart_html}\n</body>\n</html>\n"
    )
    path.write_text(html, encoding='utf-8')
    logger.info("Wrote %s", path)
    return path


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="noonshift",
        description="Solar noon vs clock noon discrepancy for a tilted planet.")
    p.add_argument("--obliquity", type=float, default=config.DEFAULT_OBLIQUITY_DEG,
                   help="Obliquity in degrees (default: %(default)s)")
    p.add_argument("--days", type=int, default=config.DEFAULT_NUM_DAYS,
                   help="Number of days in the model year, >= 2 (default: %(default)s)")
    p.add_argument("--day", type=int, default=0,
                   help="Selected day, clamped into range (default: %(default)s)")
    p.add_argument("--series", action="store_true",
                   help="Print the discrepancy for every day")
    p.add_argument("--output", "-o", default=None,
                   help="Write scene and chart to this HTML file")
    p.add_argument("--log-level", default="WARNING",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    setup_logging(getattr(logging, args.log_level))

    if args.days < 2:
        print(f"error: --days must be at least 2, got {args.days}")
        return 2

    app = ObliquityApp(obliquity_deg=args.obliquity, num_days=args.days,
                       current_day=args.day)
    readout = app.readout
    print(f"Obliquity: {app.controller.obliquity} deg, "
          f"days: {app.controller.num_days}, day: {readout.day}")
    print(f"Discrepancy: {readout.angle_text} = {readout.minutes_text}")

    if args.series:
        print(app.controller.series.to_dataframe().to_string(index=False))

    if args.output:
        export_html(app, args.output)
    return 0
