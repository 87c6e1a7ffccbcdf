"""goaccess-monitor: centralized GoAccess dashboard installer for CloudPanel hosts."""

__version__ = "1.4.6"
