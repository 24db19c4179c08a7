"""
============================================================================
Bitso Exchange Client
Prometheus Metrics - Client Observability
============================================================================

METRICS EXPOSED
---------------
- bitso_rest_requests_total: REST calls by method, api_type and outcome
- bitso_ws_frames_total: WebSocket frames by kind (channel, keepalive, ack)

Recording a metric never raises into the caller; failures are logged.
============================================================================
"""

import logging

from prometheus_client import Counter

# Configure module logger
logger = logging.getLogger(__name__)


# ============================================================================
# PROMETHEUS METRICS DEFINITIONS
# ============================================================================

REST_REQUESTS = Counter(
    "bitso_rest_requests_total",
    "Total Bitso REST calls by outcome",
    ["method", "api_type", "outcome"]
)

WS_FRAMES = Counter(
    "bitso_ws_frames_total",
    "Total Bitso WebSocket frames received by kind",
    ["kind"]
)

# Frame kinds that are not channel data
FRAME_KEEPALIVE = "keepalive"
FRAME_ACK = "ack"


# ============================================================================
# METRIC UPDATE FUNCTIONS
# ============================================================================

def record_rest_request(method: str, api_type: str, outcome: str) -> None:
    """
    Record one REST call.

    Args:
        method: HTTP method
        api_type: "public" or "private"
        outcome: HTTP status code as string, or "transport_error"
    """
    try:
        REST_REQUESTS.labels(method=method, api_type=api_type, outcome=outcome).inc()
        logger.debug(
            "Metric: rest_request | method=%s | api_type=%s | outcome=%s",
            method, api_type, outcome
        )
    except Exception as e:
        logger.error(
            "[OBS-001] Failed to record rest_request metric | error=%s",
            str(e)
        )


def record_ws_frame(kind: str) -> None:
    """
    Record one received WebSocket frame.

    Args:
        kind: Channel name, "keepalive" or "ack"
    """
    try:
        WS_FRAMES.labels(kind=kind).inc()
    except Exception as e:
        logger.error(
            "[OBS-002] Failed to record ws_frame metric | error=%s",
            str(e)
        )


__all__ = [
    "REST_REQUESTS",
    "WS_FRAMES",
    "FRAME_KEEPALIVE",
    "FRAME_ACK",
    "record_rest_request",
    "record_ws_frame",
]
