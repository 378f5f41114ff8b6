import pytest

from trackwise_crypto.models.wallet import Platform, TrackedWallet
from trackwise_crypto.services.data_source import SnapshotDriftSource

SOLANA_WALLET = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
EVM_WALLET = "0x" + "ab" * 20


@pytest.fixture
def drift_wallet():
    return TrackedWallet(address=SOLANA_WALLET, platform=Platform.DRIFT, label="drift")


@pytest.fixture
def hyperliquid_wallet():
    return TrackedWallet(address=EVM_WALLET, platform=Platform.HYPERLIQUID, label="hl")


@pytest.fixture
def drift_state():
    # One long SOL-PERP, one short BTC-PERP, USDC and SOL deposits, one dust entry
    return {
        "oracles": {
            "perp": {"0": "110000000", "1": {"price": "40000000"}},
            "spot": {"1": "150000000"},
        },
        "spotMarkets": {
            "0": {"cumulativeDepositInterest": "10000000000", "cumulativeBorrowInterest": "10000000000"},
            "1": {"cumulativeDepositInterest": "10500000000", "cumulativeBorrowInterest": "11000000000"},
        },
        "perpMarkets": {
            "0": {"amm": {"lastFundingRate": "1000000"}},
        },
        "users": {
            SOLANA_WALLET: {
                "0": {
                    "spotPositions": [
                        {"marketIndex": 0, "scaledBalance": "1000000000000", "balanceType": {"deposit": {}}},
                        {"marketIndex": 1, "scaledBalance": "2000000000", "balanceType": {"deposit": {}}},
                        {"marketIndex": 1, "scaledBalance": "100", "balanceType": {"deposit": {}}},
                        {"marketIndex": 5, "scaledBalance": "0", "balanceType": {"deposit": {}}},
                    ],
                    "perpPositions": [
                        {"marketIndex": 0, "baseAssetAmount": "2000000000", "quoteEntryAmount": "-200000000"},
                        {"marketIndex": 1, "baseAssetAmount": "-1000000", "quoteEntryAmount": "50000000"},
                        {"marketIndex": 2, "baseAssetAmount": "0", "quoteEntryAmount": "0"},
                    ],
                    "orders": [
                        {"orderId": 0},
                        {
                            "orderId": 7, "marketIndex": 0, "marketType": {"perp": {}},
                            "orderType": {"limit": {}}, "direction": {"long": {}},
                            "status": {"open": {}}, "price": "95000000",
                            "baseAssetAmount": "1000000000", "baseAssetAmountFilled": "0", "slot": 1000,
                        },
                        {
                            "orderId": 9, "marketIndex": 1, "marketType": {"spot": {}},
                            "orderType": {"market": {}}, "direction": {"short": {}},
                            "status": {"filled": {}}, "price": "150000000",
                            "baseAssetAmount": "500000000", "baseAssetAmountFilled": "500000000", "slot": 2000,
                        },
                    ],
                },
                "3": {"spotPositions": [], "perpPositions": []},
            }
        },
    }


@pytest.fixture
async def drift_source(drift_state):
    source = SnapshotDriftSource(drift_state)
    await source.connect()
    yield source
    source.close()
