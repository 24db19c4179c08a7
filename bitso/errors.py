# ============================================================================
# Bitso Exchange Client
# Error Taxonomy - Client-Side Failure Classes
# ============================================================================
#
# Purpose: One exception hierarchy for every failure the client surfaces
#
# Every failure is raised to the immediate caller. Nothing here retries.
#
# Error Codes:
#   - BITSO-SEC-001: API credentials missing or empty
#   - BITSO-CFG-001: Invalid client configuration
#   - BITSO-CLI-001: Non-success HTTP status from the REST API
#   - BITSO-CLI-002: Response body could not be decoded
#   - BITSO-CLI-003: HTTP transport failure
#   - BITSO-WS-001: WebSocket connection/transport failure
#   - BITSO-WS-002: Unknown channel discriminator
#   - BITSO-WS-003: Malformed WebSocket frame
#   - BITSO-WS-004: WebSocket session closed
#   - BITSO-WS-005: Concurrent use of a single WebSocket session
#
# ============================================================================

from typing import Optional


class BitsoErrorCode:
    """Bitso client error codes for audit logging."""
    MISSING_CREDENTIALS = "BITSO-SEC-001"
    INVALID_CONFIG = "BITSO-CFG-001"
    API_ERROR = "BITSO-CLI-001"
    DECODE_FAIL = "BITSO-CLI-002"
    TRANSPORT_FAIL = "BITSO-CLI-003"
    WS_CONNECT_FAIL = "BITSO-WS-001"
    WS_UNKNOWN_CHANNEL = "BITSO-WS-002"
    WS_MALFORMED_FRAME = "BITSO-WS-003"
    WS_CLOSED = "BITSO-WS-004"
    WS_CONCURRENT_USE = "BITSO-WS-005"


# Number of body characters carried in decode errors
BODY_SNIPPET_LENGTH = 200


def body_snippet(body: str, length: int = BODY_SNIPPET_LENGTH) -> str:
    """Truncate a response body for error messages and logs."""
    if len(body) <= length:
        return body
    return f"{body[:length]}..."


class BitsoError(Exception):
    """
    Base exception for all Bitso client errors.

    Attributes:
        message: Human-readable error message
        error_code: Bitso client error code (see BitsoErrorCode)
    """

    default_code = BitsoErrorCode.API_ERROR

    def __init__(self, message: str, error_code: Optional[str] = None):
        self.message = message
        self.error_code = error_code or self.default_code
        super().__init__(message)


class ConfigurationError(BitsoError):
    """Raised when ClientConfig values are invalid (BITSO-CFG-001)."""

    default_code = BitsoErrorCode.INVALID_CONFIG


class MissingCredentialsError(ConfigurationError):
    """Raised when a private call is attempted without credentials (BITSO-SEC-001)."""

    default_code = BitsoErrorCode.MISSING_CREDENTIALS


class TransportError(BitsoError):
    """
    Raised when the network layer fails (connection, TLS, timeout).

    The original httpx/websockets exception is chained as __cause__.
    """

    default_code = BitsoErrorCode.TRANSPORT_FAIL


class DecodeError(BitsoError):
    """
    Raised when a response body cannot be decoded into the expected model.

    Attributes:
        body_snippet: First characters of the offending body
    """

    default_code = BitsoErrorCode.DECODE_FAIL

    def __init__(self, message: str, body: str = "", error_code: Optional[str] = None):
        self.body_snippet = body_snippet(body)
        super().__init__(message, error_code)


class BitsoAPIError(BitsoError):
    """
    Base class for non-2xx REST responses (BITSO-CLI-001).

    Attributes:
        status_code: HTTP status returned by the API
    """

    default_code = BitsoErrorCode.API_ERROR

    def __init__(self, message: str, status_code: int):
        self.status_code = status_code
        super().__init__(message)


class StructuredAPIError(BitsoAPIError):
    """
    HTTP 400 carrying Bitso's error envelope.

    Example:
        {"success": false, "error": {"code": "0301", "message": "Unknown OrderBook"}}
    """

    def __init__(self, code: str, message: str, status_code: int = 400):
        self.code = code
        self.api_message = message
        super().__init__(
            f"Bitso API error code {code}: {message}",
            status_code=status_code,
        )


class OpaqueStatusError(BitsoAPIError):
    """Any other non-2xx response, identified only by its status code."""

    def __init__(self, status_code: int):
        super().__init__(
            f"Bitso API returned HTTP status {status_code}",
            status_code=status_code,
        )


class WebSocketProtocolError(BitsoError):
    """
    Raised by the WebSocket session on unknown channels, malformed frames,
    a closed connection, or concurrent use.
    """

    default_code = BitsoErrorCode.WS_MALFORMED_FRAME

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        frame: Optional[str] = None
    ):
        self.frame_snippet = body_snippet(frame) if frame is not None else None
        super().__init__(message, error_code)


__all__ = [
    "BitsoErrorCode",
    "BODY_SNIPPET_LENGTH",
    "body_snippet",
    "BitsoError",
    "ConfigurationError",
    "MissingCredentialsError",
    "TransportError",
    "DecodeError",
    "BitsoAPIError",
    "StructuredAPIError",
    "OpaqueStatusError",
    "WebSocketProtocolError",
]
