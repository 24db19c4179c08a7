# ============================================================================
# Bitso Exchange Client
# ============================================================================
#
# Async client for the Bitso cryptocurrency exchange:
#   - REST: HMAC-signed private endpoints and public market data
#   - WebSocket: trades / diff-orders / orders channels
#
# Configuration is read from BITSO_* environment variables (or .env).
#
# ============================================================================

__version__ = "0.1.0"

from bitso.errors import (
    BitsoErrorCode,
    BitsoError,
    ConfigurationError,
    MissingCredentialsError,
    TransportError,
    DecodeError,
    BitsoAPIError,
    StructuredAPIError,
    OpaqueStatusError,
    WebSocketProtocolError,
)
from bitso.config import ClientConfig, Credentials
from bitso.schemas import Book, Subscription, ResponseEnvelope, Response
from bitso.exchange import (
    ApiType,
    BitsoClient,
    BitsoSigner,
    BitsoWebSocket,
    MarketDataStream,
    OptionalParams,
    OrderParams,
    RestDispatcher,
    classify_error,
    convert_to_model,
)

__all__ = [
    '__version__',
    # Errors
    'BitsoErrorCode',
    'BitsoError',
    'ConfigurationError',
    'MissingCredentialsError',
    'TransportError',
    'DecodeError',
    'BitsoAPIError',
    'StructuredAPIError',
    'OpaqueStatusError',
    'WebSocketProtocolError',
    # Configuration
    'ClientConfig',
    'Credentials',
    # Schemas
    'Book',
    'Subscription',
    'ResponseEnvelope',
    'Response',
    # Clients
    'ApiType',
    'BitsoClient',
    'BitsoSigner',
    'BitsoWebSocket',
    'MarketDataStream',
    'OptionalParams',
    'OrderParams',
    'RestDispatcher',
    'classify_error',
    'convert_to_model',
]
