import pytest

from trackwise_crypto.models.raw import (
    BalanceType,
    OraclePrice,
    PerpMarketFunding,
    RawPerpPosition,
    RawSpotPosition,
    SpotMarketInterest,
    parse_fixed_int,
)


def test_parse_fixed_int():
    assert parse_fixed_int(None) == 0
    assert parse_fixed_int("") == 0
    assert parse_fixed_int("-200000000") == -200_000_000
    assert parse_fixed_int(12.9) == 12
    # beyond float precision
    assert parse_fixed_int("123456789012345678901234567890") == 123456789012345678901234567890
    with pytest.raises(ValueError):
        parse_fixed_int(True)
    with pytest.raises(ValueError):
        parse_fixed_int("abc")


def test_balance_type_variants():
    assert BalanceType.parse({"borrow": {}}) is BalanceType.BORROW
    assert BalanceType.parse({"deposit": {}}) is BalanceType.DEPOSIT
    assert BalanceType.parse("Borrow") is BalanceType.BORROW
    assert BalanceType.parse(None) is BalanceType.DEPOSIT


def test_positions_from_api_data():
    spot = RawSpotPosition.from_api_data(
        {"marketIndex": 1, "scaledBalance": "2000000000", "balanceType": {"borrow": {}}}
    )
    assert spot == RawSpotPosition(1, 2_000_000_000, BalanceType.BORROW)

    perp = RawPerpPosition.from_api_data({"marketIndex": 0, "baseAssetAmount": "-5", "quoteEntryAmount": 10})
    assert perp.base_asset_amount == -5
    assert perp.is_open


def test_market_data_absent_values():
    assert OraclePrice.from_api_data(0, None) is None
    assert OraclePrice.from_api_data(0, {}) is None
    assert OraclePrice.from_api_data(0, "110000000").price == 110_000_000

    assert PerpMarketFunding.from_api_data(0, None) is None
    assert PerpMarketFunding.from_api_data(0, {"amm": {"lastFundingRate": "42"}}).last_funding_rate == 42
    assert PerpMarketFunding.from_api_data(0, {"lastFundingRate": -7}).last_funding_rate == -7


def test_spot_market_interest_rate_selection():
    interest = SpotMarketInterest.from_api_data(
        1, {"cumulativeDepositInterest": "10500000000", "cumulativeBorrowInterest": "11000000000"}
    )
    assert interest.rate_for(BalanceType.DEPOSIT) == 10_500_000_000
    assert interest.rate_for(BalanceType.BORROW) == 11_000_000_000
