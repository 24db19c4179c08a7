# ============================================================================
# Bitso Exchange Client
# REST Dispatcher - Signed and Public HTTP Calls
# ============================================================================
#
# Purpose: Builds and sends every REST request (GET/POST/DELETE)
#
# MANDATE:
#   - One shared httpx.AsyncClient per dispatcher (connection pooling)
#   - Private calls signed via BitsoSigner, public calls carry no headers
#   - Non-2xx responses classified and raised, never retried
#   - Decode failures carry a snippet of the offending body
#
# Error Codes:
#   - BITSO-SEC-001: Private call without credentials
#   - BITSO-CLI-001: API returned a non-2xx status
#   - BITSO-CLI-002: Response body could not be decoded
#   - BITSO-CLI-003: Transport failure (connection, TLS, timeout)
#
# ============================================================================

import json
import logging
from enum import Enum
from typing import Any, Mapping, Optional, Type, TypeVar
from urllib.parse import urlencode, urlsplit

import httpx
from pydantic import ValidationError

from bitso.config import ClientConfig
from bitso.errors import (
    BitsoErrorCode,
    DecodeError,
    MissingCredentialsError,
    TransportError,
    body_snippet,
)
from bitso.exchange.error_classifier import classify_error
from bitso.exchange.hmac_signer import BitsoSigner
from bitso.observability.metrics import record_rest_request
from bitso.schemas.envelope import ResponseEnvelope

logger = logging.getLogger(__name__)


T = TypeVar("T")

QUERY_METHODS = ("GET", "DELETE")
BODY_METHODS = ("POST",)
SUPPORTED_METHODS = QUERY_METHODS + BODY_METHODS


class ApiType(str, Enum):
    """Tags a call site; selects whether the request is signed."""
    PUBLIC = "public"
    PRIVATE = "private"


# ============================================================================
# URL Helpers
# ============================================================================

def encode_query(params: Optional[Mapping[str, Any]]) -> str:
    """
    Serialize a parameter map as key=value pairs joined by '&'.

    None values are dropped. Iteration order of the mapping is kept, but
    callers must not rely on it: Bitso parses parameters by key.
    """
    if not params:
        return ''
    return urlencode(
        [(key, str(value)) for key, value in params.items() if value is not None]
    )


def request_path_of(url: str) -> str:
    """Path plus '?query' of an absolute URL, as signed by Bitso."""
    parts = urlsplit(url)
    if parts.query:
        return f"{parts.path}?{parts.query}"
    return parts.path


def convert_to_model(body: str, payload_type: Type[T]) -> ResponseEnvelope[T]:
    """
    Decode a success body into ResponseEnvelope[payload_type].

    Args:
        body: Response text
        payload_type: Endpoint payload type (model, List[model], Dict, ...)

    Returns:
        Validated envelope

    Raises:
        DecodeError: If the body is not valid JSON or does not match (BITSO-CLI-002)
    """
    try:
        return ResponseEnvelope[payload_type].model_validate_json(body)
    except ValidationError as e:
        snippet = body_snippet(body)
        logger.error(
            f"[{BitsoErrorCode.DECODE_FAIL}] Response decode failed | "
            f"payload_type={getattr(payload_type, '__name__', payload_type)} | "
            f"body={snippet!r}"
        )
        raise DecodeError(
            f"{BitsoErrorCode.DECODE_FAIL}: Cannot decode response into "
            f"{getattr(payload_type, '__name__', payload_type)}: {e} | body: {snippet}",
            body=body,
        ) from e


# ============================================================================
# Dispatcher
# ============================================================================

class RestDispatcher:
    """
    Bitso REST dispatcher.

    Every endpoint wrapper goes through call(). The httpx client is either
    injected (and owned by the caller) or created here (and closed by
    aclose()).

    Example Usage:
        async with RestDispatcher(ClientConfig(credentials=creds)) as rest:
            body = await rest.call("GET", "/v3/balance/", api_type=ApiType.PRIVATE)
            envelope = convert_to_model(body, Balances)
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize the dispatcher.

        Args:
            config: Client configuration (default: ClientConfig())
            http_client: Shared httpx client; created from config when None
        """
        self.config = config or ClientConfig()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=self.config.timeout)
        self._signer: Optional[BitsoSigner] = None

        logger.info(
            f"[BITSO-REST] Dispatcher initialized | "
            f"base_url={self.config.base_url} | "
            f"authenticated={self.config.is_authenticated}"
        )

    @property
    def http_client(self) -> httpx.AsyncClient:
        return self._client

    def build_url(self, url: str) -> str:
        """Prefix non-absolute paths with the configured base URL."""
        if url.startswith(("http://", "https://")):
            return url
        if not url.startswith("/"):
            url = f"/{url}"
        return f"{self.config.base_url}{url}"

    def _get_signer(self) -> BitsoSigner:
        """
        Lazily build the signer on the first private call.

        Raises:
            MissingCredentialsError: If config carries no credentials
        """
        if self._signer is None:
            self._signer = BitsoSigner(self.config.credentials)
        return self._signer

    async def call(
        self,
        method: str,
        url: str,
        payload: Optional[Mapping[str, Any]] = None,
        api_type: ApiType = ApiType.PUBLIC
    ) -> str:
        """
        Send one request and return the success body as text.

        GET/DELETE payloads become the query string; POST payloads are sent
        as a JSON body (the same string that is signed).

        Args:
            method: GET, POST or DELETE
            url: Absolute URL or path relative to base_url
            payload: Query parameters or JSON body
            api_type: PUBLIC (unsigned) or PRIVATE (signed)

        Returns:
            Response body text for 2xx statuses

        Raises:
            MissingCredentialsError: Private call without credentials (no request sent)
            BitsoAPIError: Non-2xx status (StructuredAPIError / OpaqueStatusError)
            TransportError: Network failure
            ValueError: Unsupported method, or POST without a payload on a private call
        """
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        full_url = self.build_url(url)
        body: Optional[str] = None

        if method in QUERY_METHODS:
            query = encode_query(payload)
            if query:
                separator = '&' if '?' in full_url else '?'
                full_url = f"{full_url}{separator}{query}"
        elif payload is not None:
            body = json.dumps(dict(payload))

        headers = {}
        if api_type == ApiType.PRIVATE:
            try:
                signer = self._get_signer()
            except MissingCredentialsError:
                record_rest_request(method, api_type.value, "missing_credentials")
                raise
            headers["Authorization"] = signer.sign(method, request_path_of(full_url), body)
            headers["Content-Type"] = "application/json"

        try:
            response = await self._client.request(
                method,
                full_url,
                headers=headers or None,
                content=body,
            )
        except httpx.RequestError as e:
            record_rest_request(method, api_type.value, "transport_error")
            logger.error(
                f"[{BitsoErrorCode.TRANSPORT_FAIL}] Request failed | "
                f"method={method} | path={request_path_of(full_url)} | "
                f"error={type(e).__name__}: {e}"
            )
            raise TransportError(
                f"{BitsoErrorCode.TRANSPORT_FAIL}: {method} {request_path_of(full_url)} "
                f"failed: {e}"
            ) from e

        record_rest_request(method, api_type.value, str(response.status_code))

        if not response.is_success:
            error = classify_error(response)
            logger.error(
                f"[{BitsoErrorCode.API_ERROR}] API error | "
                f"method={method} | path={request_path_of(full_url)} | "
                f"status={response.status_code} | error={error}"
            )
            raise error

        logger.debug(
            f"[BITSO-REST] {method} {request_path_of(full_url)} | "
            f"api_type={api_type.value} | status={response.status_code} | "
            f"bytes={len(response.content)}"
        )

        return response.text

    async def call_model(
        self,
        method: str,
        url: str,
        payload_type: Type[T],
        payload: Optional[Mapping[str, Any]] = None,
        api_type: ApiType = ApiType.PUBLIC
    ) -> ResponseEnvelope[T]:
        """call() followed by convert_to_model()."""
        body = await self.call(method, url, payload=payload, api_type=api_type)
        return convert_to_model(body, payload_type)

    async def aclose(self) -> None:
        """Close the HTTP client if this dispatcher created it."""
        if self._owns_client:
            await self._client.aclose()
            logger.debug("[BITSO-REST] Dispatcher closed")

    async def __aenter__(self) -> "RestDispatcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.aclose()
        return False


__all__ = [
    "ApiType",
    "RestDispatcher",
    "convert_to_model",
    "encode_query",
    "request_path_of",
]
