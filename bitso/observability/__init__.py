"""
============================================================================
Bitso Exchange Client
Observability Module - Prometheus Metrics
============================================================================
"""

from bitso.observability.metrics import (
    REST_REQUESTS,
    WS_FRAMES,
    FRAME_KEEPALIVE,
    FRAME_ACK,
    record_rest_request,
    record_ws_frame,
)

__all__ = [
    'REST_REQUESTS',
    'WS_FRAMES',
    'FRAME_KEEPALIVE',
    'FRAME_ACK',
    'record_rest_request',
    'record_ws_frame',
]
