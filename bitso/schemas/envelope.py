"""
============================================================================
Bitso Exchange Client
Response Envelopes - Pydantic Models for REST Bodies
============================================================================

Every successful Bitso REST response is wrapped as:

    {"success": true, "payload": <T>}

and every HTTP 400 carries:

    {"success": false, "error": {"code": "0301", "message": "..."}}

============================================================================
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict


PayloadT = TypeVar("PayloadT")


class ResponseEnvelope(BaseModel, Generic[PayloadT]):
    """
    Uniform decode target for every successful REST call.

    Parametrize with the endpoint payload type, e.g.
    ResponseEnvelope[List[AvailableBook]].
    """
    model_config = ConfigDict(extra="ignore")

    success: bool
    payload: PayloadT


class ErrorDetail(BaseModel):
    """Bitso error code and message."""
    model_config = ConfigDict(extra="ignore")

    code: str
    message: str


class ErrorEnvelope(BaseModel):
    """Body shape of HTTP 400 responses."""
    model_config = ConfigDict(extra="ignore")

    success: bool
    error: ErrorDetail


__all__ = ["PayloadT", "ResponseEnvelope", "ErrorDetail", "ErrorEnvelope"]
