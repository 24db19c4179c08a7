# ============================================================================
# Bitso Exchange Client
# HMAC Signer - Private Endpoint Authentication
# ============================================================================
#
# Purpose: Signs Bitso private API requests using HMAC-SHA256
#
# MANDATE:
#   - Credentials NEVER appear in logs or source code
#   - BITSO-SEC-001 raised if credentials missing, before any network call
#   - Nonces strictly increase per signer, even within one millisecond
#
# Bitso API Signature Format:
#   message = nonce + method + request_path + body
#   signature = hex(HMAC-SHA256(api_secret, message))
#   Authorization: Bitso <api_key>:<nonce>:<signature>
#
# ============================================================================

import hmac
import hashlib
import threading
import time
import logging
from typing import Optional

from bitso.config import Credentials, ENV_API_KEY, ENV_API_SECRET
from bitso.errors import BitsoErrorCode, MissingCredentialsError

logger = logging.getLogger(__name__)


AUTH_SCHEME = "Bitso"


class MonotonicNonce:
    """
    Strictly increasing millisecond nonce source.

    Returns the wall clock in milliseconds unless that would repeat or go
    backwards, in which case the previous nonce + 1 is issued. Thread-safe
    with a mutex lock so one signer can be shared by concurrent tasks.

    Example Usage:
        nonce = MonotonicNonce()
        first = nonce.next()
        second = nonce.next()  # always > first
    """

    def __init__(self, clock=None):
        """
        Args:
            clock: Callable returning seconds since the epoch (default: time.time)
        """
        self._clock = clock or time.time
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            now_ms = int(self._clock() * 1000)
            nonce = now_ms if now_ms > self._last else self._last + 1
            self._last = nonce
            return nonce


def compute_signature(
    api_secret: str,
    nonce: int,
    method: str,
    request_path: str,
    body: str = ''
) -> str:
    """
    Compute the hex HMAC-SHA256 signature for one request.

    Pure function: identical inputs always yield identical output.

    Args:
        api_secret: Bitso API secret
        nonce: Request nonce (milliseconds)
        method: HTTP method (upper-cased before signing)
        request_path: Path plus query string (e.g. "/v3/balance/")
        body: Exact JSON body sent on the wire (empty for GET/DELETE)

    Returns:
        64-character lower-case hex digest
    """
    message = f"{nonce}{method.upper()}{request_path}{body}"

    return hmac.new(
        api_secret.encode('utf-8'),
        message.encode('utf-8'),
        hashlib.sha256
    ).hexdigest()


class BitsoSigner:
    """
    HMAC-SHA256 Request Signer for Bitso private endpoints.

    Input Constraints: Credentials with non-empty key and secret
    Side Effects: Raises BITSO-SEC-001 if credentials missing;
                  reads the clock once per sign() call

    Example Usage:
        signer = BitsoSigner(Credentials("key", "secret"))
        header = signer.sign("GET", "/v3/balance/")
        response = await client.get(url, headers={"Authorization": header})
    """

    def __init__(
        self,
        credentials: Optional[Credentials],
        nonce_source: Optional[MonotonicNonce] = None
    ):
        """
        Initialize BitsoSigner.

        Args:
            credentials: API key/secret pair
            nonce_source: Shared nonce generator (default: new MonotonicNonce)

        Raises:
            MissingCredentialsError: If credentials are None or incomplete
        """
        if credentials is None or not credentials.is_complete:
            error_msg = (
                f"{BitsoErrorCode.MISSING_CREDENTIALS}: Bitso API credentials are "
                f"required for private endpoints. Set {ENV_API_KEY} and "
                f"{ENV_API_SECRET} (environment or .env) or pass Credentials "
                f"to ClientConfig."
            )
            logger.error(
                f"[{BitsoErrorCode.MISSING_CREDENTIALS}] Missing credentials | "
                f"has_credentials={credentials is not None}"
            )
            raise MissingCredentialsError(error_msg)

        self._credentials = credentials
        self._nonce = nonce_source or MonotonicNonce()

        logger.debug(
            f"[BITSO] Signer initialized | api_key={credentials.redacted_key}"
        )

    def sign(
        self,
        method: str,
        request_path: str,
        body: Optional[str] = None,
        nonce: Optional[int] = None
    ) -> str:
        """
        Build the Authorization header value for one request.

        Args:
            method: HTTP method (GET, POST, DELETE)
            request_path: Path plus query string, exactly as requested
            body: JSON body string (required for POST)
            nonce: Explicit nonce (auto-generated if None)

        Returns:
            "Bitso <api_key>:<nonce>:<signature>"

        Raises:
            ValueError: If a POST is signed without a body
        """
        method = method.upper()

        if method == "POST" and body is None:
            raise ValueError(
                f"POST {request_path} must be signed with a JSON body"
            )

        if nonce is None:
            nonce = self._nonce.next()

        signature = compute_signature(
            self._credentials.api_secret,
            nonce,
            method,
            request_path,
            body or ''
        )

        logger.debug(
            f"[BITSO] Request signed | "
            f"method={method} | path={request_path} | "
            f"nonce={nonce} | signature=[REDACTED]"
        )

        return f"{AUTH_SCHEME} {self._credentials.api_key}:{nonce}:{signature}"

    def get_redacted_key(self) -> str:
        """Redacted API key for logging purposes."""
        return self._credentials.redacted_key


# ============================================================================
# Reliability Audit
# ============================================================================
#
# Credential Security: [Verified - secret never logged, repr excluded]
# HMAC Algorithm: [SHA256, hex digest]
# Nonce: [Strictly increasing per signer, mutex-protected]
# Error Handling: [BITSO-SEC-001 on missing credentials]
#
# ============================================================================
