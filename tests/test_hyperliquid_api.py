import pytest
import requests

from trackwise_crypto.config.settings import Settings
from trackwise_crypto.exceptions import FetchError, InvalidAddressError
from trackwise_crypto.models.position import PositionDirection
from trackwise_crypto.services.hyperliquid_api import HyperliquidAPIService

from conftest import EVM_WALLET

META = {"universe": [{"name": "BTC"}, {"name": "ETH"}]}
ASSET_CTXS = [
    {"markPx": "65000.0", "funding": "0.0000125"},
    {"markPx": "3100.0", "funding": "-0.00001"},
]
CLEARINGHOUSE = {
    "assetPositions": [
        {"position": {
            "coin": "BTC", "szi": "0.5", "entryPx": "60000.0", "positionValue": "32500.0",
            "unrealizedPnl": "2500.0", "marginUsed": "3250.0", "liquidationPx": "45000.0",
            "leverage": {"type": "cross", "value": 10},
        }},
        {"position": {
            "coin": "ETH", "szi": "-2.0", "entryPx": "3200.0", "positionValue": "-6200.0",
            "unrealizedPnl": "200.0", "marginUsed": "620.0", "liquidationPx": None,
        }},
        {"position": {"coin": "SOL", "szi": "0.0"}},
    ],
    "crossMarginSummary": {"accountValue": "10000.0", "totalMarginUsed": "3870.0", "totalNtlPos": "38700.0"},
    "crossMaintenanceMarginUsed": "1000.0",
    "withdrawable": "6130.0",
}


class FakeResponse:
    def __init__(self, payload, status_ok=True):
        self.payload = payload
        self.status_ok = status_ok

    def raise_for_status(self):
        if not self.status_ok:
            raise requests.exceptions.HTTPError("500 Server Error")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    def __init__(self, responses):
        self.responses = responses
        self.requests = []

    def post(self, url, json=None, timeout=None):
        self.requests.append(json)
        response = self.responses[json["type"]]
        if isinstance(response, Exception):
            raise response
        return response

    def close(self):
        pass


def _service(responses):
    service = HyperliquidAPIService(Settings())
    service.session = FakeSession(responses)
    return service


def test_normalize_positions():
    positions = HyperliquidAPIService.normalize_positions(CLEARINGHOUSE, META, ASSET_CTXS)

    assert len(positions) == 2
    btc, eth = positions

    assert btc.market == "BTC-PERP"
    assert btc.market_index == 0
    assert btc.direction is PositionDirection.LONG
    assert btc.mark_price == pytest.approx(65000.0)
    assert btc.leverage == 10
    assert btc.pnl_percent == pytest.approx(2500 / 3250 * 100)
    assert btc.funding_rate == pytest.approx(0.00125)

    assert eth.direction is PositionDirection.SHORT
    assert eth.size == pytest.approx(2.0)
    assert eth.notional_usd == pytest.approx(6200.0)
    assert eth.leverage == pytest.approx(10.0)
    assert eth.liquidation_price == 0


def test_normalize_positions_unknown_coin_uses_entry_price():
    state = {"assetPositions": [{"position": {"coin": "NEW", "szi": "1", "entryPx": "2.5"}}]}
    positions = HyperliquidAPIService.normalize_positions(state, META, ASSET_CTXS)

    assert positions[0].market_index == -1
    assert positions[0].mark_price == pytest.approx(2.5)
    assert positions[0].pnl_percent == 0


def test_normalize_equity():
    equity = HyperliquidAPIService.normalize_equity(CLEARINGHOUSE)

    assert equity.total_equity == pytest.approx(10000.0)
    assert equity.free_collateral == pytest.approx(6130.0)
    assert equity.margin_used == pytest.approx(3870.0)
    assert equity.unrealized_pnl == pytest.approx(2700.0)
    assert equity.account_health == pytest.approx(90.0)
    assert equity.leverage == pytest.approx(3.87)


def test_normalize_equity_underwater_account():
    state = {"crossMarginSummary": {"accountValue": "0"}, "crossMaintenanceMarginUsed": "50"}
    assert HyperliquidAPIService.normalize_equity(state).account_health == 0
    assert HyperliquidAPIService.normalize_equity({}).account_health == 100


def test_normalize_balances():
    equity = HyperliquidAPIService.normalize_equity(CLEARINGHOUSE)
    balances = HyperliquidAPIService.normalize_balances(equity)

    assert len(balances) == 1
    assert balances[0].asset == "USDC"
    assert balances[0].value_usd == pytest.approx(10000.0)
    assert HyperliquidAPIService.normalize_balances(HyperliquidAPIService.normalize_equity({})) == []


def test_get_snapshot(hyperliquid_wallet):
    service = _service({
        "clearinghouseState": FakeResponse(CLEARINGHOUSE),
        "metaAndAssetCtxs": FakeResponse([META, ASSET_CTXS]),
    })

    snapshot = service.get_snapshot(hyperliquid_wallet)

    assert snapshot.ok
    assert len(snapshot.positions) == 2
    assert snapshot.equity.total_equity == pytest.approx(10000.0)
    assert service.session.requests[0] == {"type": "clearinghouseState", "user": EVM_WALLET}


def test_get_snapshot_malformed_state_raises_fetch_error(hyperliquid_wallet):
    service = _service({
        "clearinghouseState": FakeResponse({"assetPositions": ["BTC"]}),
        "metaAndAssetCtxs": FakeResponse([META, ASSET_CTXS]),
    })

    with pytest.raises(FetchError):
        service.get_snapshot(hyperliquid_wallet)


def test_market_context_is_cached():
    service = _service({"metaAndAssetCtxs": FakeResponse([META, ASSET_CTXS])})

    service.get_meta_and_asset_ctxs()
    service.get_meta_and_asset_ctxs()

    assert len(service.session.requests) == 1


def test_request_errors_raise_fetch_error():
    service = _service({
        "clearinghouseState": requests.exceptions.ConnectionError("refused"),
        "openOrders": FakeResponse(ValueError("bad json")),
        "metaAndAssetCtxs": FakeResponse({}, status_ok=False),
    })

    with pytest.raises(FetchError):
        service.get_clearinghouse_state(EVM_WALLET)
    with pytest.raises(FetchError):
        service.get_open_orders(EVM_WALLET)
    with pytest.raises(FetchError):
        service.get_meta_and_asset_ctxs()


def test_invalid_address_is_rejected():
    service = _service({})
    with pytest.raises(InvalidAddressError):
        service.get_clearinghouse_state("0x1234")
    assert service.session.requests == []


def test_get_open_orders_with_limit():
    orders = [
        {"coin": "BTC", "side": "B", "limitPx": "60000", "sz": "0.1", "oid": 1},
        {"coin": "ETH", "side": "A", "limitPx": "3000", "sz": "1", "oid": 2},
    ]
    service = _service({"openOrders": FakeResponse(orders)})

    result = service.get_open_orders(EVM_WALLET, limit=1)

    assert [o.order_id for o in result] == [1]


def test_get_subaccounts_failure_yields_empty_list():
    service = _service({"subAccounts": requests.exceptions.Timeout("slow")})
    assert service.get_subaccounts(EVM_WALLET) == []

    service = _service({"subAccounts": FakeResponse([{
        "name": "alt", "subAccountUser": "0x" + "cd" * 20, "master": EVM_WALLET,
        "clearinghouseState": {"crossMarginSummary": {"accountValue": "42.5"}},
    }])})
    subaccounts = service.get_subaccounts(EVM_WALLET)
    assert subaccounts[0].equity == pytest.approx(42.5)


def test_connectivity():
    assert _service({"allMids": FakeResponse({"BTC": "65000"})}).test_connectivity()
    assert not _service({"allMids": FakeResponse({})}).test_connectivity()
    assert not _service({"allMids": requests.exceptions.ConnectionError("down")}).test_connectivity()
