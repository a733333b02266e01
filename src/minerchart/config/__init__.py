"""Configuration objects and helpers for minerchart.

:mod:`runtime` holds the typed :class:`DashboardConfig` loaded from YAML
(buffer capacity, poll interval, gesture and label constants), while
:mod:`app_config` resolves where settings and exports live on disk.
"""

from .runtime import DashboardConfig, config_from_mapping, load_config

__all__ = ["DashboardConfig", "config_from_mapping", "load_config"]
