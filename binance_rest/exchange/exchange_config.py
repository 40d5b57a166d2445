"""
Client configuration.

This module contains the process-level defaults applied to every request:
- REST root URLs (production and testnet)
- Request timeout and receive window
- Private API version
- HTTP status acceptance policy

and the loader that builds a ClientConfig from a JSON file and the
environment.
"""

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

from .composer import RequestConfig
from .exceptions import ConfigError
from .models import ApiAuth
from .signer import DEFAULT_RECV_WINDOW
from ..utils.logger import get_logger


logger = get_logger(__name__)


# ============================================================================
# BINANCE ENDPOINTS
# ============================================================================

REST_BASE_URL = "https://api.binance.com"
REST_TESTNET_URL = "https://testnet.binance.vision"

API_KEY_ENV = "BINANCE_API_KEY"
API_SECRET_ENV = "BINANCE_API_SECRET"

REQUEST_KEYS = ("root_url", "timeout", "version", "recv_window", "accept_all_status", "headers")


DEFAULT_CONFIG = RequestConfig(
    root_url=REST_BASE_URL,
    timeout=3000,
    version="v3",
    recv_window=DEFAULT_RECV_WINDOW,
    accept_all_status=False,
)

TESTNET_CONFIG = replace(DEFAULT_CONFIG, root_url=REST_TESTNET_URL)


@dataclass(frozen=True)
class ClientConfig:
    """
    Process configuration for a client.

    `request` is the default layer merged under every call override;
    `auth` is None when no credentials were configured.
    """
    request: RequestConfig = DEFAULT_CONFIG
    auth: Optional[ApiAuth] = None
    testnet: bool = False


def get_request_config(testnet: bool = False) -> RequestConfig:
    """
    Get the default request configuration.

    Args:
        testnet: Use the Spot testnet root URL if True

    Returns:
        RequestConfig instance
    """
    return TESTNET_CONFIG if testnet else DEFAULT_CONFIG


def _auth_from(section: Dict[str, Any]) -> Optional[ApiAuth]:
    api_key = os.environ.get(API_KEY_ENV) or section.get("api_key")
    api_secret = os.environ.get(API_SECRET_ENV) or section.get("api_secret")

    if api_key and api_secret:
        return ApiAuth(public_key=api_key, private_key=api_secret)
    if api_key or api_secret:
        logger.warning("incomplete_credentials_ignored", has_key=bool(api_key), has_secret=bool(api_secret))
    return None


def load_config(path: Optional[str] = None, testnet: Optional[bool] = None) -> ClientConfig:
    """
    Load client configuration.

    The JSON file is optional; its `binance` section may contain
    `testnet`, `root_url`, `timeout`, `version`, `recv_window`,
    `accept_all_status`, `headers`, `api_key` and `api_secret`.
    Credentials in BINANCE_API_KEY / BINANCE_API_SECRET take precedence
    over the file.

    Args:
        path: Path to the JSON configuration file
        testnet: Overrides the file's testnet flag when not None

    Returns:
        ClientConfig instance

    Raises:
        ConfigError: If the file is missing or malformed
    """
    section: Dict[str, Any] = {}

    if path is not None:
        config_file = Path(path)
        if not config_file.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        try:
            with open(config_file, 'r') as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e

        section = raw.get("binance", {}) if isinstance(raw, dict) else None
        if not isinstance(section, dict):
            raise ConfigError(f"'binance' section in {path} must be an object")

    if testnet is None:
        testnet = bool(section.get("testnet", False))

    request = replace(
        get_request_config(testnet),
        **{key: section[key] for key in REQUEST_KEYS if key in section}
    )

    config = ClientConfig(request=request, auth=_auth_from(section), testnet=testnet)

    logger.info(
        "Client configuration loaded",
        path=path,
        testnet=testnet,
        root_url=request.root_url,
        authenticated=config.auth is not None
    )

    return config
