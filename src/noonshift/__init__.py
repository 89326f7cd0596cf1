"""
Noonshift: Solar Noon vs Clock Noon

A Python package modelling the discrepancy between solar noon and clock noon
on a planet with a tilted rotation axis, with a synchronized 3D scene, a
discrepancy chart and an animation driver.
"""

# Configuration
from .config import config, temp_config, NoonshiftConfig

# Discrepancy model
from .discrepancy import (
    Discrepancy,
    DiscrepancySample,
    DiscrepancySeries,
    compute_discrepancy,
    compute_discrepancy_series,
    project_to_reference_plane,
    sun_position,
)

# Scene, chart, controller, animation
from .scene import Renderer, PlotlyRenderer
from .chart import ChartBackend, ChartAdapter, PlotlyChart, tick_labels
from .controller import ObliquityController, DiscrepancyReadout
from .animation import (
    AnimationDriver,
    DriverState,
    FrameScheduler,
    ManualFrameScheduler,
)
from .app import ObliquityApp, export_html
from .logging_config import setup_logging

# Package metadata
__version__ = "0.1.0"

# Define what gets imported with "from noonshift import *"
__all__ = [
    # Configuration
    "config",
    "temp_config",
    "NoonshiftConfig",
    # Model
    "Discrepancy",
    "DiscrepancySample",
    "DiscrepancySeries",
    "compute_discrepancy",
    "compute_discrepancy_series",
    "project_to_reference_plane",
    "sun_position",
    # Collaborators
    "Renderer",
    "PlotlyRenderer",
    "ChartBackend",
    "ChartAdapter",
    "PlotlyChart",
    "tick_labels",
    "ObliquityController",
    "DiscrepancyReadout",
    "AnimationDriver",
    "DriverState",
    "FrameScheduler",
    "ManualFrameScheduler",
    "ObliquityApp",
    "export_html",
    "setup_logging",
]
