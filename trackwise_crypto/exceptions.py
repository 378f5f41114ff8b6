"""
Exception hierarchy for the tracker.
"""

from typing import Optional


class TrackerError(Exception):
    """Base class for all tracker errors."""
    pass


class ConfigurationError(TrackerError):
    """Missing or invalid configuration (environment variables, settings)."""
    pass


class InvalidAddressError(TrackerError):
    """Wallet address is malformed for its platform."""

    def __init__(self, address: str, platform: Optional[str] = None):
        self.address = address
        self.platform = platform
        if platform:
            message = f"Invalid {platform} wallet address: {address!r}"
        else:
            message = f"Unrecognized wallet address: {address!r}"
        super().__init__(message)


class FetchError(TrackerError):
    """Data source failed to return account state (network, HTTP or parse error)."""
    pass
