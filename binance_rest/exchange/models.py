"""
Credential container and request parameter shapes.

Parameter shapes are TypedDicts so callers can pass plain dicts; the client
forwards them to the exchange untouched.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TypedDict, Union


@dataclass(frozen=True)
class ApiAuth:
    """Convenient container for API keys."""
    public_key: str
    private_key: str

    def __repr__(self) -> str:
        # Never leak the secret into logs or tracebacks
        return f"ApiAuth(public_key={self.public_key!r}, private_key='***')"


class OrderSide(Enum):
    """Order side enumeration."""
    BUY = "BUY"
    SELL = "SELL"


class OrderType(Enum):
    """Order type enumeration."""
    LIMIT = "LIMIT"
    MARKET = "MARKET"
    STOP_LOSS = "STOP_LOSS"
    STOP_LOSS_LIMIT = "STOP_LOSS_LIMIT"
    TAKE_PROFIT = "TAKE_PROFIT"
    TAKE_PROFIT_LIMIT = "TAKE_PROFIT_LIMIT"
    LIMIT_MAKER = "LIMIT_MAKER"


class TimeInForce(Enum):
    """Time in force enumeration."""
    GTC = "GTC"  # Good Till Cancel
    IOC = "IOC"  # Immediate or Cancel
    FOK = "FOK"  # Fill or Kill


# Floats are sent in plain decimal notation; Decimal keeps exact precision
Amount = Union[float, Decimal]


# ============================================================================
# MARKET DATA PARAMETERS
# ============================================================================

class _SymbolParams(TypedDict):
    symbol: str


class GetOrderBookParams(_SymbolParams, total=False):
    limit: int


class GetAggTradesParams(_SymbolParams, total=False):
    fromId: int
    startTime: int
    endTime: int
    limit: int


class _CandleParams(_SymbolParams):
    interval: str


class GetCandlesParams(_CandleParams, total=False):
    limit: int
    startTime: int
    endTime: int


# ============================================================================
# ACCOUNT / TRADING PARAMETERS
# ============================================================================

class _NewOrderParams(_SymbolParams):
    side: OrderSide
    type: OrderType
    timeInForce: TimeInForce
    quantity: Amount
    price: Amount


class NewOrderParams(_NewOrderParams, total=False):
    newClientOrderId: str
    stopPrice: Amount
    icebergQty: Amount


class GetOrderParams(_SymbolParams, total=False):
    orderId: int
    origClientOrderId: str


class CancelOrderParams(_SymbolParams, total=False):
    orderId: int
    origClientOrderId: str
    newClientOrderId: str


class GetAllOrdersParams(_SymbolParams, total=False):
    orderId: int
    limit: int


class GetTradesParams(_SymbolParams, total=False):
    limit: int
    fromId: int


class _WithdrawParams(TypedDict):
    asset: str
    address: str
    amount: Amount


class WithdrawRequestParams(_WithdrawParams, total=False):
    addressTag: str
    name: str


class _AssetParams(TypedDict):
    asset: str


class TransferHistoryParams(_AssetParams, total=False):
    status: int
    startTime: int
    endTime: int
