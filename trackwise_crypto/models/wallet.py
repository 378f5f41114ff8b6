"""
Tracked wallet model and address validation.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..exceptions import InvalidAddressError


SOLANA_ADDRESS_PATTERN = re.compile(r'^[1-9A-HJ-NP-Za-km-z]{32,44}$')
EVM_ADDRESS_PATTERN = re.compile(r'^0x[a-fA-F0-9]{40}$')


class Platform(Enum):
    """Supported protocol enumeration."""
    DRIFT = "DRIFT"
    HYPERLIQUID = "HYPERLIQUID"


def is_valid_solana_address(address: str) -> bool:
    """Check if address is a Base58 Solana public key."""
    return bool(address) and SOLANA_ADDRESS_PATTERN.match(address) is not None


def is_valid_evm_address(address: str) -> bool:
    """Check if address is a 0x-prefixed EVM address."""
    return bool(address) and EVM_ADDRESS_PATTERN.match(address) is not None


def detect_platform(address: str) -> Optional[Platform]:
    """Detect the protocol from the address format."""
    if is_valid_evm_address(address):
        return Platform.HYPERLIQUID
    if is_valid_solana_address(address):
        return Platform.DRIFT
    return None


def validate_address(address: str, platform: Optional[Platform] = None) -> Platform:
    """Validate an address for a platform (or detect it) and return the platform.

    Raises:
        InvalidAddressError: if the address does not match the platform format
    """
    if platform is None:
        detected = detect_platform(address)
        if detected is None:
            raise InvalidAddressError(address)
        return detected

    if platform is Platform.DRIFT and not is_valid_solana_address(address):
        raise InvalidAddressError(address, "Solana")
    if platform is Platform.HYPERLIQUID and not is_valid_evm_address(address):
        raise InvalidAddressError(address, "EVM")
    return platform


@dataclass(frozen=True)
class TrackedWallet:
    """A wallet address tracked on one platform."""

    address: str
    platform: Platform
    label: Optional[str] = None
    sub_account_id: int = 0

    @classmethod
    def create(
        cls,
        address: str,
        platform: Optional[Platform] = None,
        label: Optional[str] = None,
        sub_account_id: int = 0
    ) -> 'TrackedWallet':
        """Validate the address and build a TrackedWallet."""
        address = address.strip()
        resolved = validate_address(address, platform)
        return cls(address=address, platform=resolved, label=label, sub_account_id=sub_account_id)

    @classmethod
    def parse(cls, value: str) -> 'TrackedWallet':
        """Parse 'address', 'address:label' or 'address:label:subaccount'."""
        parts = [p.strip() for p in value.split(':')]
        address = parts[0]
        label = parts[1] if len(parts) > 1 and parts[1] else None
        sub_account_id = int(parts[2]) if len(parts) > 2 and parts[2] else 0
        return cls.create(address, label=label, sub_account_id=sub_account_id)

    @property
    def short_address(self) -> str:
        """Get abbreviated address for display."""
        if len(self.address) <= 12:
            return self.address
        return f"{self.address[:6]}...{self.address[-4:]}"

    @property
    def display_name(self) -> str:
        """Get label or abbreviated address."""
        return self.label or self.short_address

    def to_dict(self) -> dict:
        """Convert wallet to dictionary."""
        return {
            'address': self.address,
            'platform': self.platform.value,
            'label': self.label,
            'sub_account_id': self.sub_account_id
        }
