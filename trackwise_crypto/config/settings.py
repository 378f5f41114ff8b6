"""
Application settings and configuration management.
"""

import os
from typing import List, Optional
from dataclasses import dataclass, field
from dotenv import load_dotenv

from ..exceptions import ConfigurationError, InvalidAddressError
from ..models.wallet import Platform, TrackedWallet
from .logging_config import resolve_level


def parse_wallets(value: str) -> List[TrackedWallet]:
    """Parse a comma separated list of 'address[:label[:subaccount]]' entries."""
    wallets = []
    for item in value.split(','):
        item = item.strip()
        if not item:
            continue
        try:
            wallets.append(TrackedWallet.parse(item))
        except (InvalidAddressError, ValueError) as e:
            raise ConfigurationError(f"Invalid TRACKED_WALLETS entry {item!r}: {e}") from e
    return wallets


@dataclass
class Settings:
    """Application configuration settings."""

    # Tracked wallets
    wallets: List[TrackedWallet] = field(default_factory=list)

    # Data sources
    hyperliquid_api_url: str = "https://api.hyperliquid.xyz/info"
    drift_snapshot_path: Optional[str] = None

    # Application Configuration
    refresh_interval: int = 300

    # API Configuration
    api_timeout: int = 30
    wallet_fetch_timeout: float = 60

    # Cache Configuration
    cache_duration: int = 30

    # Logging Configuration
    log_level: str = "INFO"
    log_directory: str = "logs"

    @classmethod
    def from_env(cls) -> 'Settings':
        """Create settings from environment variables."""
        load_dotenv()

        try:
            return cls(
                wallets=parse_wallets(os.getenv('TRACKED_WALLETS', '')),
                hyperliquid_api_url=os.getenv('HYPERLIQUID_API_URL', cls.hyperliquid_api_url),
                drift_snapshot_path=os.getenv('DRIFT_SNAPSHOT_PATH') or None,
                refresh_interval=int(os.getenv('REFRESH_INTERVAL_SECONDS', 300)),
                api_timeout=int(os.getenv('API_TIMEOUT', 30)),
                wallet_fetch_timeout=float(os.getenv('WALLET_FETCH_TIMEOUT', 60)),
                cache_duration=int(os.getenv('CACHE_DURATION', 30)),
                log_level=os.getenv('LOG_LEVEL', 'INFO'),
                log_directory=os.getenv('LOG_DIRECTORY', 'logs')
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e

    def validate(self) -> None:
        """Validate configuration settings."""
        if self.refresh_interval < 1:
            raise ConfigurationError("Refresh interval must be at least 1 second")
        if self.api_timeout < 1:
            raise ConfigurationError("API timeout must be at least 1 second")
        if self.wallet_fetch_timeout <= 0:
            raise ConfigurationError("Wallet fetch timeout must be positive")
        if self.cache_duration < 0:
            raise ConfigurationError("Cache duration cannot be negative")
        if not self.hyperliquid_api_url:
            raise ConfigurationError("Hyperliquid API URL cannot be empty")
        resolve_level(self.log_level)

    @property
    def has_drift_wallets(self) -> bool:
        """Check if any tracked wallet is on Drift."""
        return any(w.platform is Platform.DRIFT for w in self.wallets)
