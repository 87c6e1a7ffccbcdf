"""Exception hierarchy for goaccess-monitor."""


class GoAccessMonitorError(Exception):
    """Base class for all installer errors."""


class PreflightError(GoAccessMonitorError):
    """Host does not meet installation requirements (root, CloudPanel)."""


class ValidationError(GoAccessMonitorError):
    """User-supplied value was rejected."""


class InstallError(GoAccessMonitorError):
    """An installation step failed and the run cannot continue."""


class InstallAborted(GoAccessMonitorError):
    """The operator declined to continue. Not a failure."""
