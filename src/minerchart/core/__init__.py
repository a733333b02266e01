"""Dashboard core: bounded telemetry history, viewport and labels.

Nothing in this package touches Qt; the GUI layer forwards gestures and
asks the core what to draw. :class:`~.session.DashboardSession` is imported
from :mod:`.session` directly since it depends on :mod:`minerchart.dataio`.
"""

from .channels import CHANNEL_NAMES, DISPLAY_CHANNELS, ChannelSpec, channel_spec
from .derived import DerivedMetricsComputer
from .labels import Label, LabelPlacer, Rect, select_indices
from .models import DeviceInfo, HistoricalStatistics, Sample
from .polling import InfoPoller
from .sample_buffer import CAPACITY, SampleBuffer
from .viewport import AxisBounds, ViewportController, ViewWindow, compute_axis_bounds
from .visibility import ChannelVisibility, VisibilityStore

__all__ = [
    "CAPACITY",
    "CHANNEL_NAMES",
    "DISPLAY_CHANNELS",
    "ChannelSpec",
    "channel_spec",
    "Sample",
    "DeviceInfo",
    "HistoricalStatistics",
    "SampleBuffer",
    "DerivedMetricsComputer",
    "ViewportController",
    "ViewWindow",
    "AxisBounds",
    "compute_axis_bounds",
    "LabelPlacer",
    "Label",
    "Rect",
    "select_indices",
    "VisibilityStore",
    "ChannelVisibility",
    "InfoPoller",
]
