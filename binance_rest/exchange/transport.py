"""
HTTP transport for composed request descriptors.

The agent only depends on the Transport protocol; AiohttpTransport is the
production implementation.
"""

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

import aiohttp
from yarl import URL

from .composer import RequestDescriptor
from .exceptions import TransportError
from ..utils.logger import get_logger


logger = get_logger(__name__)


@dataclass
class Response:
    """Transport response returned verbatim to callers."""
    status: int
    data: Any
    headers: Dict[str, str] = field(default_factory=dict)


class Transport(Protocol):
    """Anything able to execute a RequestDescriptor."""

    async def execute(self, descriptor: RequestDescriptor) -> Response:
        ...


class AiohttpTransport:
    """
    aiohttp-backed transport.

    The URL is sent exactly as composed (no re-quoting) because private
    requests are signed over that byte sequence.
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize transport.

        Args:
            session: Existing session to use; when None a session is created
                on first request and owned by this transport
        """
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "AiohttpTransport":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this transport created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None
            logger.debug("HTTP session closed")

    async def execute(self, descriptor: RequestDescriptor) -> Response:
        """
        Send the request described by `descriptor`.

        Args:
            descriptor: Composed request

        Returns:
            Response with decoded JSON data (raw text if not JSON)

        Raises:
            TransportError: On network failure, or on a 4xx/5xx status
                unless descriptor.accept_all_status is set
        """
        url = URL(f"{descriptor.base_url}{descriptor.url}", encoded=True)
        timeout = None
        if descriptor.timeout is not None:
            timeout = aiohttp.ClientTimeout(total=descriptor.timeout / 1000)

        logger.debug("http_request", method=descriptor.method, path=url.path)

        try:
            async with self._get_session().request(
                descriptor.method,
                url,
                headers=descriptor.headers,
                data=descriptor.data,
                timeout=timeout,
            ) as resp:
                text = await resp.text()
                response = Response(
                    status=resp.status,
                    data=_decode(text),
                    headers=dict(resp.headers),
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.debug("http_request_failed", method=descriptor.method, path=url.path, error=repr(e))
            raise TransportError(f"Request failed: {e!r}") from e

        logger.debug("http_response", method=descriptor.method, path=url.path, status=response.status)

        if response.status >= 400 and not descriptor.accept_all_status:
            raise TransportError(
                f"Request failed with status code {response.status}",
                response=response
            )

        return response


def _decode(text: str) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text
