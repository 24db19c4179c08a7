"""
============================================================================
Bitso Exchange Client
Error Classifier - Non-2xx REST Responses
============================================================================

Maps a failed HTTP response onto the client error hierarchy:

    400 + error envelope  ->  StructuredAPIError(code, message)
    400 without envelope  ->  OpaqueStatusError(400)
    any other non-2xx     ->  OpaqueStatusError(status)   (body not read)

Only HTTP 400 bodies are documented to carry Bitso's error envelope, so
other statuses are identified by their numeric code alone.
============================================================================
"""

import logging

import httpx
from pydantic import ValidationError

from bitso.errors import (
    BitsoAPIError,
    BitsoErrorCode,
    OpaqueStatusError,
    StructuredAPIError,
    body_snippet,
)
from bitso.schemas.envelope import ErrorEnvelope

# Configure module logger
logger = logging.getLogger(__name__)


STRUCTURED_ERROR_STATUS = 400


def classify_status(status_code: int, body: str = "") -> BitsoAPIError:
    """
    Classify a non-2xx status and (for 400 only) its body.

    Args:
        status_code: HTTP status code
        body: Response text; ignored unless status_code is 400

    Returns:
        StructuredAPIError or OpaqueStatusError
    """
    if status_code != STRUCTURED_ERROR_STATUS:
        return OpaqueStatusError(status_code)

    try:
        envelope = ErrorEnvelope.model_validate_json(body)
    except ValidationError as e:
        logger.warning(
            f"[{BitsoErrorCode.API_ERROR}] HTTP 400 without error envelope | "
            f"body={body_snippet(body)!r} | error_count={e.error_count()}"
        )
        return OpaqueStatusError(status_code)

    return StructuredAPIError(
        code=envelope.error.code,
        message=envelope.error.message,
        status_code=status_code,
    )


def classify_error(response: httpx.Response) -> BitsoAPIError:
    """
    Classify a non-2xx httpx response.

    The body is only read for HTTP 400.
    """
    if response.status_code == STRUCTURED_ERROR_STATUS:
        return classify_status(response.status_code, response.text)
    return classify_status(response.status_code)


__all__ = ["classify_error", "classify_status", "STRUCTURED_ERROR_STATUS"]
