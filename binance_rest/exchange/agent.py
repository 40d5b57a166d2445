"""
Raw request agent for the Binance REST API.

The agent owns the optional API credentials, composes request descriptors,
signs private requests and turns transport failures into a single
rejection shape.
"""

from typing import Any, Callable, Mapping, Optional

from .composer import (
    PRIVATE_BASE,
    RequestConfig,
    compose_private,
    compose_public,
    merge_configs
)
from .exceptions import AuthenticationRequiredError, ExchangeAPIError
from .exchange_config import DEFAULT_CONFIG
from .models import ApiAuth
from .signer import Signature, sign_message
from .transport import AiohttpTransport, Response, Transport
from ..utils.logger import get_logger


logger = get_logger(__name__)


class BinanceAgent:
    """
    Issues public and private requests.

    Starts unauthenticated unless constructed with an ApiAuth; `upgrade`
    installs (or replaces) the credentials. There is no way back to the
    unauthenticated state.
    """

    def __init__(
        self,
        auth: Optional[ApiAuth] = None,
        transport: Optional[Transport] = None,
        defaults: RequestConfig = DEFAULT_CONFIG,
        clock: Optional[Callable[[], int]] = None
    ):
        """
        Initialize agent.

        Args:
            auth: API keys (optional)
            transport: Transport used to execute requests
                (default: AiohttpTransport)
            defaults: Process default configuration layer
            clock: Millisecond clock used for request timestamps
        """
        self._auth = auth
        self.transport = transport if transport is not None else AiohttpTransport()
        self.defaults = defaults
        self._clock = clock

    @property
    def auth(self) -> Optional[ApiAuth]:
        return self._auth

    def is_upgraded(self) -> bool:
        """Check if API keys have been supplied."""
        return self._auth is not None

    def upgrade(self, new_auth: ApiAuth) -> None:
        """
        Upgrade the agent with new credentials.

        Requests that already started keep the keys they read.

        Args:
            new_auth: Replacement API keys
        """
        self._auth = new_auth
        logger.info("Agent credentials upgraded", public_key=new_auth.public_key[:8] + "...")

    def sign_message(self, post_data: Optional[Mapping[str, Any]], secret: str) -> Signature:
        """Sign `post_data` with `secret` using the agent's receive window and clock."""
        return sign_message(post_data, secret, recv_window=self.defaults.recv_window, clock=self._clock)

    async def public_request(
        self,
        endpoint: str,
        query_params: Optional[Mapping[str, Any]] = None,
        config_override: Optional[RequestConfig] = None
    ) -> Response:
        """
        Fetch data from a public (unauthenticated) endpoint.

        Transport errors propagate unchanged.

        Args:
            endpoint: Path relative to the root URL, e.g. "api/v1/depth"
            query_params: Query parameters
            config_override: Per-call configuration override

        Returns:
            Transport response
        """
        descriptor = compose_public(endpoint, query_params, self.defaults, config_override)

        logger.debug("public_request", endpoint=endpoint, method=descriptor.method)

        return await self.transport.execute(descriptor)

    async def private_request(
        self,
        endpoint: str,
        method: str,
        params: Optional[Mapping[str, Any]] = None,
        config_override: Optional[RequestConfig] = None
    ) -> Response:
        """
        Call a private (signed) endpoint.

        Args:
            endpoint: Path relative to the root URL, e.g. "api/v3/order"
            method: HTTP verb
            params: Request parameters
            config_override: Per-call configuration override

        Returns:
            Transport response

        Raises:
            AuthenticationRequiredError: If no API keys are installed
            ExchangeAPIError: If the exchange rejected the request
            Exception: The transport's own error when no response exists
        """
        # Read the keys once; a concurrent upgrade does not affect this call
        auth = self._auth
        if auth is None:
            raise AuthenticationRequiredError()

        config = merge_configs(PRIVATE_BASE, self.defaults, config_override)

        signature = sign_message(params, auth.private_key, recv_window=config.recv_window, clock=self._clock)

        descriptor = compose_private(config, endpoint, method, signature.body, auth.public_key)

        logger.debug("private_request", endpoint=endpoint, method=descriptor.method)

        try:
            return await self.transport.execute(descriptor)
        except Exception as err:
            response = getattr(err, "response", None)
            if response is None:
                raise

            reason = rejection_reason(err)
            data = getattr(response, "data", None)
            error_code = data.get("code") if isinstance(data, dict) else None

            logger.debug(
                "private_request_rejected",
                endpoint=endpoint,
                status_code=getattr(response, "status", None),
                error_code=error_code
            )

            raise ExchangeAPIError(
                reason,
                status_code=getattr(response, "status", None),
                error_code=error_code,
                response=response
            ) from err


def rejection_reason(err: BaseException) -> Any:
    """
    Pick the most specific failure payload available.

    Order: the exchange's `error` field, the response payload, the
    response object, the exception itself.
    """
    response = getattr(err, "response", None)
    if response is None:
        return err

    data = getattr(response, "data", None)
    if data is None:
        return response

    if isinstance(data, Mapping) and data.get("error"):
        return data["error"]

    return data
