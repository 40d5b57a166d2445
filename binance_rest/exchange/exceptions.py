"""
Exchange-related exception classes.
"""

from typing import Any, Optional


class BinanceError(Exception):
    """Base exception for all client errors."""
    pass


class AuthenticationRequiredError(BinanceError):
    """Raised when a private endpoint is called without API keys."""

    def __init__(self, message: str = "api keys are required to access private endpoints"):
        self.message = message
        super().__init__(self.message)


class TransportError(BinanceError):
    """
    Exception raised by a transport when a request cannot be completed.

    `response` is set when the exchange answered (e.g. a 4xx/5xx status)
    and is None when the network call itself failed (DNS, connection,
    timeout).
    """

    def __init__(self, message: str, response: Any = None):
        self.message = message
        self.response = response
        super().__init__(self.message)


class ExchangeAPIError(BinanceError):
    """
    Exception raised when the exchange rejects a private request.

    `reason` holds the most specific payload available: the exchange's
    `error` field, else the response payload, else the response itself.
    """

    def __init__(
        self,
        reason: Any,
        status_code: Optional[int] = None,
        error_code: Optional[int] = None,
        response: Any = None
    ):
        self.reason = reason
        self.status_code = status_code
        self.error_code = error_code
        self.response = response
        super().__init__(str(reason))


class ConfigError(BinanceError):
    """Exception raised when client configuration cannot be loaded."""
    pass
