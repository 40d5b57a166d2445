"""
Request descriptor composition.

A request is built from ordered configuration layers: the method-kind base
(public or private), the process default configuration and an optional
per-call override. Later layers win field by field; headers are merged one
level deeper. Private requests then receive their late-stage fields (API
key header, method, url, data) which no earlier layer can clobber.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Optional

from .signer import encode_params


API_KEY_HEADER = "X-MBX-APIKEY"

BASE_HEADERS = {
    "Cache-Control": "no-cache",
    "User-Agent": "Binance API Client (binance-rest python package)",
}


@dataclass(frozen=True)
class RequestConfig:
    """
    One configuration layer.

    A field left as None is "not set" in this layer and falls through to
    the layer below it.
    """
    root_url: Optional[str] = None
    timeout: Optional[int] = None            # Milliseconds
    version: Optional[str] = None            # Private API version, e.g. "v3"
    recv_window: Optional[int] = None        # Milliseconds
    method: Optional[str] = None
    accept_all_status: Optional[bool] = None  # Treat 4xx/5xx as responses
    headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RequestDescriptor:
    """Fully composed options for a single transport call."""
    base_url: str
    url: str
    method: str
    headers: Dict[str, str]
    timeout: Optional[int]
    data: Optional[str] = None
    accept_all_status: bool = False


PUBLIC_BASE = RequestConfig(
    method="GET",
    headers={**BASE_HEADERS, "Content-Type": "text/plain"},
)

PRIVATE_BASE = RequestConfig(
    method="POST",
    headers={**BASE_HEADERS, "Content-Type": "application/x-www-form-urlencoded"},
)


def merge_configs(*layers: Optional[RequestConfig]) -> RequestConfig:
    """
    Merge configuration layers, lowest precedence first.

    Args:
        *layers: RequestConfig layers; None entries are skipped

    Returns:
        A single RequestConfig
    """
    merged: Dict[str, Any] = {}
    headers: Dict[str, str] = {}

    for layer in layers:
        if layer is None:
            continue
        for f in fields(layer):
            if f.name == "headers":
                headers.update(layer.headers)
                continue
            value = getattr(layer, f.name)
            if value is not None:
                merged[f.name] = value

    return RequestConfig(headers=headers, **merged)


def compose_public(
    path: str,
    query_params: Optional[Mapping[str, Any]],
    defaults: RequestConfig,
    override: Optional[RequestConfig] = None
) -> RequestDescriptor:
    """
    Build the descriptor for a public (unsigned) request.

    The query string is always appended, so a call without parameters
    produces a trailing '?'.

    Args:
        path: Endpoint path relative to the root URL
        query_params: Query parameters
        defaults: Process default configuration
        override: Per-call override

    Returns:
        RequestDescriptor
    """
    config = merge_configs(PUBLIC_BASE, defaults, override)

    return RequestDescriptor(
        base_url=config.root_url,
        url=f"/{path}?{encode_params(query_params)}",
        method=config.method,
        headers=dict(config.headers),
        timeout=config.timeout,
        data=None,
        accept_all_status=bool(config.accept_all_status),
    )


def compose_private(
    config: RequestConfig,
    path: str,
    method: str,
    signed_body: Mapping[str, Any],
    api_key: str
) -> RequestDescriptor:
    """
    Build the descriptor for a private (signed) request.

    GET requests carry the signed parameters in the query string and no
    body; every other verb sends them as a form-encoded body.

    Args:
        config: Already merged PRIVATE_BASE/defaults/override layers
        path: Endpoint path relative to the root URL
        method: HTTP verb for this endpoint
        signed_body: Body returned by sign_message
        api_key: Public API key for the X-MBX-APIKEY header

    Returns:
        RequestDescriptor
    """
    payload = encode_params(signed_body)
    method = method.upper()

    if method == "GET":
        url, data = f"/{path}?{payload}", None
    else:
        url, data = f"/{path}", payload

    return RequestDescriptor(
        base_url=config.root_url,
        url=url,
        method=method,
        headers={**config.headers, API_KEY_HEADER: api_key},
        timeout=config.timeout,
        data=data,
        accept_all_status=bool(config.accept_all_status),
    )
