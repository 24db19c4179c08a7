# ============================================================================
# Bitso Exchange Client
# Exchange Module - REST and WebSocket Connectivity
# ============================================================================
#
# Components:
#   - BitsoSigner: HMAC-SHA256 request signing with monotonic nonces
#   - RestDispatcher: Signed/public HTTP calls over one httpx client
#   - classify_error: Non-2xx responses mapped to typed errors
#   - BitsoClient: Typed wrappers for the v3 REST endpoints
#   - BitsoWebSocket: Market-data channel session
#   - MarketDataStream: Fan-out of one session to many consumers
#
# MANDATE:
#   - No retries, no reconnects: every failure reaches the caller
#   - Monetary values are decimal.Decimal end to end
#
# ============================================================================

from bitso.exchange.hmac_signer import (
    AUTH_SCHEME,
    BitsoSigner,
    MonotonicNonce,
    compute_signature,
)
from bitso.exchange.error_classifier import classify_error, classify_status
from bitso.exchange.rest_dispatcher import (
    ApiType,
    RestDispatcher,
    convert_to_model,
    encode_query,
    request_path_of,
)
from bitso.exchange.bitso_client import (
    BitsoClient,
    OptionalParams,
    OrderParams,
)
from bitso.exchange.websocket_client import (
    BitsoWebSocket,
    ConnectionState,
    subscribe_request,
)
from bitso.exchange.market_stream import (
    MarketDataStream,
    StreamSubscriber,
)

__all__ = [
    # Signing
    'AUTH_SCHEME',
    'BitsoSigner',
    'MonotonicNonce',
    'compute_signature',
    # REST
    'ApiType',
    'RestDispatcher',
    'convert_to_model',
    'encode_query',
    'request_path_of',
    'classify_error',
    'classify_status',
    'BitsoClient',
    'OptionalParams',
    'OrderParams',
    # WebSocket
    'BitsoWebSocket',
    'ConnectionState',
    'subscribe_request',
    'MarketDataStream',
    'StreamSubscriber',
]
