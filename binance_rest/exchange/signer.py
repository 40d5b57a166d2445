"""
Request signing for Binance SIGNED endpoints.

Binance verifies an HMAC-SHA256 over the exact query string it receives, so
the serialization here keeps insertion order and must be reused verbatim
when the signed parameters are placed into the request.
"""

import hashlib
import hmac
import time
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional
from urllib.parse import quote, urlencode


# Keys owned by the signer; caller-supplied values are discarded
RESERVED_KEYS = ("timestamp", "recvWindow", "signature")

DEFAULT_RECV_WINDOW = 5000


@dataclass(frozen=True)
class Signature:
    """Result of signing a request body."""
    digest: str
    body: Dict[str, Any]


def current_time_ms() -> int:
    """Wall-clock time in milliseconds."""
    return int(time.time() * 1000)


def _encode_value(value: Any) -> str:
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        # Binance rejects exponent notation such as 1e-05
        value = Decimal(repr(value))
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def encode_params(params: Optional[Mapping[str, Any]]) -> str:
    """
    Serialize parameters to a query string.

    Keys keep their insertion order, None values are dropped, floats and
    Decimals are written in plain decimal notation and percent-encoding
    follows RFC 3986 (a space becomes %20).

    Args:
        params: Mapping of scalar parameters (may be None)

    Returns:
        Query string without a leading '?'

    Examples:
        >>> encode_params({"symbol": "BTCUSDT", "limit": 5})
        'symbol=BTCUSDT&limit=5'
    """
    if not params:
        return ""

    pairs = [
        (key, _encode_value(value))
        for key, value in params.items()
        if value is not None
    ]
    return urlencode(pairs, quote_via=quote)


def sign_message(
    body: Optional[Mapping[str, Any]],
    secret: str,
    recv_window: Optional[int] = None,
    clock: Optional[Callable[[], int]] = None
) -> Signature:
    """
    Sign a request body the way Binance expects.

    Exposed on its own so users can inspect how requests are signed.

    Args:
        body: Request parameters
        secret: API secret used as the HMAC key
        recv_window: Receive window in ms; omitted from the body when None
        clock: Millisecond clock, defaults to wall-clock time

    Returns:
        Signature with the hex digest and the body to send
    """
    timestamp = (clock or current_time_ms)()

    signed_body = {
        key: value
        for key, value in (body or {}).items()
        if key not in RESERVED_KEYS
    }
    signed_body["timestamp"] = timestamp
    if recv_window is not None:
        signed_body["recvWindow"] = recv_window

    digest = hmac.new(
        secret.encode("utf-8"),
        encode_params(signed_body).encode("utf-8"),
        hashlib.sha256
    ).hexdigest()

    return Signature(digest=digest, body={**signed_body, "signature": digest})
