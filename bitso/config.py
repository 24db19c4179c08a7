"""
============================================================================
Bitso Exchange Client
Client Configuration - Credentials and Endpoints
============================================================================

This module holds the immutable configuration shared (read-only) by every
outbound call:
- Credentials: API key/secret pair consumed by the request signer
- ClientConfig: REST base URL, WebSocket URL, timeout, optional credentials

ENVIRONMENT VARIABLES:
    - BITSO_API_KEY: API key for private endpoints
    - BITSO_API_SECRET: API secret for private endpoints
    - BITSO_API_URL: REST base URL (default: https://api.bitso.com)
    - BITSO_WS_URL: WebSocket URL (default: wss://ws.bitso.com)
    - BITSO_TIMEOUT_SECONDS: HTTP timeout in seconds (default: 30)

A `.env` file in the working directory is loaded by the environment
helpers via python-dotenv.

ERROR CODES:
    - BITSO-CFG-001: Invalid client configuration

============================================================================
"""

from dataclasses import dataclass, field
from typing import Optional
import logging
import os

from dotenv import find_dotenv, load_dotenv

from bitso.errors import BitsoErrorCode, ConfigurationError

# Configure module logger
logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

DEFAULT_BASE_URL = "https://api.bitso.com"
DEFAULT_WEBSOCKET_URL = "wss://ws.bitso.com"
DEFAULT_TIMEOUT_SECONDS = 30.0

ENV_API_KEY = "BITSO_API_KEY"
ENV_API_SECRET = "BITSO_API_SECRET"
ENV_API_URL = "BITSO_API_URL"
ENV_WS_URL = "BITSO_WS_URL"
ENV_TIMEOUT = "BITSO_TIMEOUT_SECONDS"


def redact(value: str) -> str:
    """
    Redact a credential for logging purposes.

    Returns first 4 and last 4 characters only.
    """
    if len(value) > 8:
        return f"{value[:4]}...{value[-4:]}"
    return "[REDACTED]"


# =============================================================================
# Credentials
# =============================================================================

@dataclass(frozen=True)
class Credentials:
    """
    Bitso API key/secret pair.

    Immutable once built. The secret never appears in repr() or logs.
    """
    api_key: str
    api_secret: str = field(repr=False)

    @property
    def is_complete(self) -> bool:
        """True when both key and secret are non-empty."""
        return bool(self.api_key and self.api_secret)

    @property
    def redacted_key(self) -> str:
        return redact(self.api_key)

    @classmethod
    def from_environment(cls) -> Optional["Credentials"]:
        """
        Load credentials from BITSO_API_KEY / BITSO_API_SECRET.

        Returns:
            Credentials, or None when either variable is missing
        """
        load_dotenv(find_dotenv(usecwd=True))

        api_key = os.environ.get(ENV_API_KEY, "").strip()
        api_secret = os.environ.get(ENV_API_SECRET, "").strip()

        missing = [
            name for name, value in ((ENV_API_KEY, api_key), (ENV_API_SECRET, api_secret))
            if not value
        ]
        if missing:
            logger.warning(
                f"[BITSO-CONFIG] No credentials - private endpoints unavailable | "
                f"missing={missing}"
            )
            return None

        logger.debug(
            f"[BITSO-CONFIG] Credentials loaded | api_key={redact(api_key)}"
        )
        return cls(api_key=api_key, api_secret=api_secret)


# =============================================================================
# ClientConfig
# =============================================================================

@dataclass(frozen=True)
class ClientConfig:
    """
    Read-only client configuration, validated once on construction.

    Attributes:
        base_url: REST API root; relative request paths are appended to it
        credentials: Optional key/secret (None for a public-only client)
        timeout: HTTP timeout in seconds for the shared httpx client
        websocket_url: Market-data WebSocket endpoint

    Raises:
        ConfigurationError: If base_url is not http(s) or timeout <= 0
    """
    base_url: str = DEFAULT_BASE_URL
    credentials: Optional[Credentials] = None
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    websocket_url: str = DEFAULT_WEBSOCKET_URL

    def __post_init__(self) -> None:
        errors = []

        if not self.base_url or not self.base_url.startswith(("http://", "https://")):
            errors.append(f"base_url must be an http(s) URL, got: {self.base_url!r}")

        if not self.websocket_url or not self.websocket_url.startswith(("ws://", "wss://")):
            errors.append(
                f"websocket_url must be a ws(s) URL, got: {self.websocket_url!r}"
            )

        if self.timeout <= 0:
            errors.append(f"timeout must be positive, got: {self.timeout}")

        if errors:
            error_msg = "Client configuration invalid: " + "; ".join(errors)
            logger.error(f"[{BitsoErrorCode.INVALID_CONFIG}] {error_msg}")
            raise ConfigurationError(error_msg)

        # Normalise once so URL joining never doubles the slash
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @property
    def is_authenticated(self) -> bool:
        return self.credentials is not None and self.credentials.is_complete

    @classmethod
    def from_environment(cls) -> "ClientConfig":
        """
        Build a ClientConfig from environment variables (and `.env`).

        Invalid BITSO_TIMEOUT_SECONDS values fall back to the default.
        """
        load_dotenv(find_dotenv(usecwd=True))

        timeout_str = os.environ.get(ENV_TIMEOUT, str(DEFAULT_TIMEOUT_SECONDS))
        try:
            timeout = float(timeout_str.strip())
        except ValueError:
            logger.warning(
                f"[BITSO-CONFIG] Invalid {ENV_TIMEOUT} value: {timeout_str}, "
                f"using default: {DEFAULT_TIMEOUT_SECONDS}"
            )
            timeout = DEFAULT_TIMEOUT_SECONDS

        config = cls(
            base_url=os.environ.get(ENV_API_URL, DEFAULT_BASE_URL).strip(),
            credentials=Credentials.from_environment(),
            timeout=timeout,
            websocket_url=os.environ.get(ENV_WS_URL, DEFAULT_WEBSOCKET_URL).strip(),
        )

        logger.info(
            f"[BITSO-CONFIG] Configuration loaded | "
            f"base_url={config.base_url} | "
            f"authenticated={config.is_authenticated} | "
            f"timeout={config.timeout}"
        )
        return config


__all__ = [
    "Credentials",
    "ClientConfig",
    "redact",
    "DEFAULT_BASE_URL",
    "DEFAULT_WEBSOCKET_URL",
    "DEFAULT_TIMEOUT_SECONDS",
    "ENV_API_KEY",
    "ENV_API_SECRET",
    "ENV_API_URL",
    "ENV_WS_URL",
    "ENV_TIMEOUT",
]
