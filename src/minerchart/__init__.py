"""minerchart: live telemetry history and charting core for small mining devices.

:mod:`minerchart.core` holds the buffer, derived metrics, viewport and label
logic, :mod:`minerchart.config` the YAML-backed settings, and
:mod:`minerchart.gui` a thin PySide6/pyqtgraph front end.
"""

__version__ = "0.1.0"
