import pytest

from trackwise_crypto.exceptions import InvalidAddressError
from trackwise_crypto.models.wallet import (
    Platform,
    TrackedWallet,
    detect_platform,
    is_valid_evm_address,
    is_valid_solana_address,
    validate_address,
)

from conftest import EVM_WALLET, SOLANA_WALLET


def test_address_formats():
    assert is_valid_solana_address(SOLANA_WALLET)
    assert not is_valid_solana_address("0OIl" * 10)
    assert not is_valid_solana_address("")
    assert is_valid_evm_address(EVM_WALLET)
    assert not is_valid_evm_address("0x1234")
    assert not is_valid_evm_address(EVM_WALLET[2:])


def test_detect_platform():
    assert detect_platform(SOLANA_WALLET) is Platform.DRIFT
    assert detect_platform(EVM_WALLET) is Platform.HYPERLIQUID
    assert detect_platform("not-a-wallet") is None


def test_validate_address_rejects_wrong_platform():
    with pytest.raises(InvalidAddressError) as exc_info:
        validate_address(EVM_WALLET, Platform.DRIFT)
    assert exc_info.value.platform == "Solana"

    with pytest.raises(InvalidAddressError):
        validate_address(SOLANA_WALLET, Platform.HYPERLIQUID)

    with pytest.raises(InvalidAddressError):
        validate_address("nope")


def test_parse_wallet_entry():
    wallet = TrackedWallet.parse(f"{SOLANA_WALLET}:main:2")
    assert wallet.platform is Platform.DRIFT
    assert wallet.label == "main"
    assert wallet.sub_account_id == 2

    wallet = TrackedWallet.parse(EVM_WALLET)
    assert wallet.platform is Platform.HYPERLIQUID
    assert wallet.label is None
    assert wallet.sub_account_id == 0


def test_display_name():
    wallet = TrackedWallet.create(EVM_WALLET)
    assert wallet.short_address == f"{EVM_WALLET[:6]}...{EVM_WALLET[-4:]}"
    assert wallet.display_name == wallet.short_address
    assert TrackedWallet.create(EVM_WALLET, label="hl").display_name == "hl"
