"""
Exchange REST client module.
"""

from .agent import BinanceAgent, rejection_reason
from .client import BinanceClient
from .composer import (
    API_KEY_HEADER,
    PRIVATE_BASE,
    PUBLIC_BASE,
    RequestConfig,
    RequestDescriptor,
    compose_private,
    compose_public,
    merge_configs
)
from .exceptions import (
    BinanceError,
    AuthenticationRequiredError,
    TransportError,
    ExchangeAPIError,
    ConfigError
)
from .exchange_config import (
    ClientConfig,
    DEFAULT_CONFIG,
    TESTNET_CONFIG,
    get_request_config,
    load_config
)
from .models import (
    ApiAuth,
    OrderSide,
    OrderType,
    TimeInForce
)
from .signer import Signature, encode_params, sign_message
from .transport import AiohttpTransport, Response, Transport

__all__ = [
    # Client and agent
    "BinanceClient",
    "BinanceAgent",
    "rejection_reason",

    # Signing
    "Signature",
    "sign_message",
    "encode_params",

    # Request composition
    "API_KEY_HEADER",
    "PUBLIC_BASE",
    "PRIVATE_BASE",
    "RequestConfig",
    "RequestDescriptor",
    "compose_public",
    "compose_private",
    "merge_configs",

    # Transport
    "AiohttpTransport",
    "Response",
    "Transport",

    # Exceptions
    "BinanceError",
    "AuthenticationRequiredError",
    "TransportError",
    "ExchangeAPIError",
    "ConfigError",

    # Configuration
    "ClientConfig",
    "DEFAULT_CONFIG",
    "TESTNET_CONFIG",
    "get_request_config",
    "load_config",

    # Data models
    "ApiAuth",
    "OrderSide",
    "OrderType",
    "TimeInForce"
]
