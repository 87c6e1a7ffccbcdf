"""Model package - Core data structures for goaccess-monitor."""

from goaccess_monitor.model.install import (
    PRESET_FORMATS,
    InstallConfig,
    LogFormatChoice,
    RemoteServer,
)

__all__ = [
    "InstallConfig",
    "LogFormatChoice",
    "PRESET_FORMATS",
    "RemoteServer",
]
