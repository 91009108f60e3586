"""
errors.py
Exception types shared across the light sync application.
Lower layers raise these; only main.py turns them into a process exit.
"""


class HassLightSyncError(Exception):
    """Base class for every error the application reports to the operator."""


class ConfigError(HassLightSyncError):
    """Settings are missing, malformed, or describe an impossible setup."""


class CaptureError(HassLightSyncError):
    """A single frame grab failed. The next attempt may succeed."""


class HubError(HassLightSyncError):
    pass


class HubConnectionError(HubError):
    pass


class HubAuthError(HubError):
    pass


class HubCommandError(HubError):
    """A light command could not be delivered. Fatal at runtime."""
