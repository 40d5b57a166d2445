"""
Binance REST client.

One coroutine per exchange endpoint, each routed through BinanceAgent with
a fixed path and verb. Parameters are passed through untouched and
responses are returned verbatim.
"""

from typing import Callable, Optional

from .agent import BinanceAgent
from .composer import RequestConfig, merge_configs
from .exchange_config import ClientConfig
from .models import (
    ApiAuth,
    CancelOrderParams,
    GetAggTradesParams,
    GetAllOrdersParams,
    GetCandlesParams,
    GetOrderBookParams,
    GetOrderParams,
    GetTradesParams,
    NewOrderParams,
    TransferHistoryParams,
    WithdrawRequestParams
)
from .transport import Response, Transport
from ..utils.logger import get_logger


logger = get_logger(__name__)


class BinanceClient:
    """
    Binance Spot REST client.

    Example:
        async with BinanceClient(ApiAuth("key", "secret")) as client:
            await client.ping()
            await client.get_open_orders("BTCUSDT")
    """

    def __init__(
        self,
        auth: Optional[ApiAuth] = None,
        config: Optional[ClientConfig] = None,
        config_override: Optional[RequestConfig] = None,
        transport: Optional[Transport] = None,
        clock: Optional[Callable[[], int]] = None
    ):
        """
        Initialize client.

        Args:
            auth: API keys; falls back to config.auth
            config: Process configuration (default: ClientConfig())
            config_override: Override applied to every request
            transport: Transport for the underlying agent
            clock: Millisecond clock used for request timestamps
        """
        self.config = config or ClientConfig()
        self.config_override = config_override
        self.raw_agent = BinanceAgent(
            auth=auth or self.config.auth,
            transport=transport,
            defaults=self.config.request,
            clock=clock
        )

        logger.info(
            "Binance client initialized",
            testnet=self.config.testnet,
            root_url=self.config.request.root_url,
            authenticated=self.is_upgraded()
        )

    async def __aenter__(self) -> "BinanceClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Release the transport's resources, if it holds any."""
        close = getattr(self.raw_agent.transport, "close", None)
        if close is not None:
            await close()

    @property
    def version(self) -> str:
        """Private API version from the effective configuration."""
        return merge_configs(self.config.request, self.config_override).version

    def is_upgraded(self) -> bool:
        return self.raw_agent.is_upgraded()

    def upgrade(self, new_auth: ApiAuth) -> None:
        self.raw_agent.upgrade(new_auth)

    async def _public(self, endpoint: str, params=None) -> Response:
        return await self.raw_agent.public_request(endpoint, params, self.config_override)

    async def _private(self, endpoint: str, method: str, params=None) -> Response:
        return await self.raw_agent.private_request(endpoint, method, params, self.config_override)

    # ========================================================================
    # Market Data
    # ========================================================================

    async def ping(self) -> Response:
        return await self._public("api/v1/ping")

    async def get_server_time(self) -> Response:
        return await self._public("api/v1/time")

    async def get_order_book(self, params: GetOrderBookParams) -> Response:
        return await self._public("api/v1/depth", params)

    async def get_aggregate_trades_list(self, params: GetAggTradesParams) -> Response:
        return await self._public("api/v1/aggTrades", params)

    async def get_candles(self, params: GetCandlesParams) -> Response:
        return await self._public("api/v1/klines", params)

    async def get_24hour_stats(self, symbol: str) -> Response:
        return await self._public("api/v1/ticker/24hr", {"symbol": symbol})

    async def get_prices(self) -> Response:
        return await self._public("api/v1/ticker/allPrices")

    async def get_ticker_tape(self) -> Response:
        """All symbols' best bid/ask."""
        return await self._public("api/v1/ticker/allBookTickers")

    # ========================================================================
    # Accounts and Trading
    # ========================================================================

    async def place_new_order(self, params: NewOrderParams) -> Response:
        return await self._private(f"api/{self.version}/order", "POST", params)

    async def place_new_test_order(self, params: NewOrderParams) -> Response:
        """Validate an order without sending it to the matching engine."""
        return await self._private(f"api/{self.version}/order/test", "POST", params)

    async def get_order(self, params: GetOrderParams) -> Response:
        return await self._private(f"api/{self.version}/order", "GET", params)

    async def cancel_order(self, params: CancelOrderParams) -> Response:
        return await self._private(f"api/{self.version}/order", "DELETE", params)

    async def get_open_orders(self, symbol: str) -> Response:
        return await self._private(f"api/{self.version}/openOrders", "GET", {"symbol": symbol})

    async def get_all_orders(self, params: GetAllOrdersParams) -> Response:
        return await self._private(f"api/{self.version}/allOrders", "GET", params)

    async def get_account_information(self) -> Response:
        return await self._private(f"api/{self.version}/account", "GET")

    async def get_account_trade_list(self, params: GetTradesParams) -> Response:
        return await self._private(f"api/{self.version}/myTrades", "GET", params)

    # ========================================================================
    # Withdrawals and Deposits
    # ========================================================================

    async def request_crypto_withdrawal(self, params: WithdrawRequestParams) -> Response:
        return await self._private("wapi/v3/withdraw.html", "POST", params)

    async def get_deposit_history(self, params: TransferHistoryParams) -> Response:
        return await self._private("wapi/v3/depositHistory.html", "GET", params)

    async def get_withdrawal_history(self, params: TransferHistoryParams) -> Response:
        return await self._private("wapi/v3/withdrawHistory.html", "GET", params)

    async def get_deposit_address(self, asset: str) -> Response:
        return await self._private("wapi/v3/depositAddress.html", "GET", {"asset": asset})
