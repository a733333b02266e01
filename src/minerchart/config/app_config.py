"""Default application paths and the top-level configuration snapshot."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from .runtime import DashboardConfig, load_config

DEFAULT_DATA_ROOT = Path("~/.minerchart")


@dataclass
class AppPaths:
    """
    Where the dashboard keeps its files.

    ``MINERCHART_DATA_ROOT`` overrides the default ``~/.minerchart`` folder so
    tests and portable installs can keep config and exports elsewhere.
    """

    data_root: Path = field(init=False)
    exports: Path = field(init=False)
    config_file: Path = field(init=False)

    def __post_init__(self) -> None:
        env_data_root = os.environ.get("MINERCHART_DATA_ROOT")
        if env_data_root:
            self.data_root = Path(env_data_root).expanduser()
        else:
            self.data_root = DEFAULT_DATA_ROOT.expanduser()

        self.exports = self.data_root / "exports"
        self.config_file = self.data_root / "dashboard.yaml"

    def ensure(self) -> None:
        """Create directories if they do not yet exist."""
        for path in (self.data_root, self.exports):
            path.mkdir(parents=True, exist_ok=True)


@dataclass
class AppConfig:
    """In-memory configuration snapshot used by the GUI runtime."""

    dashboard: DashboardConfig = field(default_factory=DashboardConfig)
    paths: AppPaths = field(default_factory=AppPaths)
    demo: bool = False

    @classmethod
    def load(cls, config_path: str | Path | None = None, *, demo: bool = False) -> "AppConfig":
        """Read ``config_path`` (or the default ``dashboard.yaml``) if present."""
        paths = AppPaths()
        path = Path(config_path).expanduser() if config_path else paths.config_file
        return cls(dashboard=load_config(path).sanitized(), paths=paths, demo=demo)


__all__ = ["AppPaths", "AppConfig", "DEFAULT_DATA_ROOT"]
