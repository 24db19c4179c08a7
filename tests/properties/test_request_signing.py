# ============================================================================
# Bitso Exchange Client
# Property-Based Tests - Request Signing and Envelopes
# ============================================================================
#
# Test Framework: Hypothesis (Property-Based Testing)
# Minimum Iterations: 100 per property
#
# Properties Covered:
#   1. Signature Determinism
#   2. Signature Sensitivity (secret, nonce, method, path, body)
#   3. Header Shape
#   4. Envelope Payload Round-Trip
#   5. Query Encoding Round-Trip
#   6. Nonce Monotonicity
#
# ============================================================================

import json
import re
import string
from typing import Any, Dict
from urllib.parse import parse_qsl

from hypothesis import assume, given, settings, strategies as st

from bitso.config import Credentials
from bitso.exchange.hmac_signer import BitsoSigner, MonotonicNonce, compute_signature
from bitso.exchange.rest_dispatcher import convert_to_model, encode_query


# No NUL: HMAC zero-pads short keys, so "k" and "k\x00" sign identically
secrets = st.text(alphabet=st.characters(min_codepoint=32), min_size=1, max_size=64)
nonces = st.integers(min_value=1, max_value=10**15)
methods = st.sampled_from(["GET", "POST", "DELETE"])
paths = st.text(
    alphabet=st.characters(min_codepoint=33, max_codepoint=126),
    min_size=1,
    max_size=80,
).map(lambda tail: "/v3/" + tail)
bodies = st.text(max_size=200)


# ============================================================================
# Property 1: Signature Determinism
# ============================================================================

@settings(max_examples=100)
@given(secrets, nonces, methods, paths, bodies)
def test_signature_is_deterministic(secret, nonce, method, path, body):
    first = compute_signature(secret, nonce, method, path, body)
    second = compute_signature(secret, nonce, method, path, body)

    assert first == second
    assert re.fullmatch(r"[0-9a-f]{64}", first)


# ============================================================================
# Property 2: Signature Sensitivity
# ============================================================================

@settings(max_examples=100)
@given(secrets, secrets, nonces, methods, paths, bodies)
def test_signature_changes_with_secret(secret, other_secret, nonce, method, path, body):
    assume(secret != other_secret)

    assert compute_signature(secret, nonce, method, path, body) != compute_signature(
        other_secret, nonce, method, path, body
    )


@settings(max_examples=100)
@given(secrets, secrets, nonces, paths)
def test_header_changes_with_secret(secret, other_secret, nonce, path):
    assume(secret != other_secret)

    first = BitsoSigner(Credentials(api_key="key", api_secret=secret))
    second = BitsoSigner(Credentials(api_key="key", api_secret=other_secret))

    assert first.sign("GET", path, nonce=nonce) != second.sign("GET", path, nonce=nonce)


@settings(max_examples=100)
@given(secrets, nonces, methods, paths, bodies)
def test_signature_changes_with_nonce(secret, nonce, method, path, body):
    assert compute_signature(secret, nonce, method, path, body) != compute_signature(
        secret, nonce + 1, method, path, body
    )


@settings(max_examples=100)
@given(secrets, nonces, paths, bodies)
def test_signature_changes_with_method(secret, nonce, path, body):
    assert compute_signature(secret, nonce, "GET", path, body) != compute_signature(
        secret, nonce, "DELETE", path, body
    )


@settings(max_examples=100)
@given(secrets, nonces, methods, paths, bodies)
def test_signature_changes_with_path(secret, nonce, method, path, body):
    assert compute_signature(secret, nonce, method, path, body) != compute_signature(
        secret, nonce, method, path + "x", body
    )


@settings(max_examples=100)
@given(secrets, nonces, paths, bodies)
def test_signature_changes_with_body(secret, nonce, path, body):
    assert compute_signature(secret, nonce, "POST", path, body) != compute_signature(
        secret, nonce, "POST", path, body + "}"
    )


# ============================================================================
# Property 3: Header Shape
# ============================================================================

@settings(max_examples=100)
@given(
    st.text(alphabet=string.ascii_letters + string.digits + "_-", min_size=1, max_size=32),
    secrets,
    paths,
)
def test_header_shape(api_key, api_secret, path):
    signer = BitsoSigner(Credentials(api_key=api_key, api_secret=api_secret))
    header = signer.sign("GET", path)

    match = re.fullmatch(r"Bitso ([^:]+):(\d+):([0-9a-f]{64})", header)
    assert match is not None
    assert match.group(1) == api_key
    assert match.group(3) == compute_signature(api_secret, int(match.group(2)), "GET", path)


# ============================================================================
# Property 4: Envelope Payload Round-Trip
# ============================================================================

json_scalars = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=-2**53, max_value=2**53),
    st.text(max_size=20),
)
json_values = st.recursive(
    json_scalars,
    lambda children: st.one_of(
        st.lists(children, max_size=4),
        st.dictionaries(st.text(max_size=10), children, max_size=4),
    ),
    max_leaves=20,
)


@settings(max_examples=100)
@given(st.dictionaries(st.text(max_size=10), json_values, max_size=6))
def test_envelope_round_trip(payload):
    body = json.dumps({"success": True, "payload": payload})
    envelope = convert_to_model(body, Dict[str, Any])

    assert envelope.success is True
    assert envelope.payload == payload


# ============================================================================
# Property 5: Query Encoding Round-Trip
# ============================================================================

@settings(max_examples=100)
@given(st.dictionaries(
    st.text(min_size=1, max_size=10),
    st.one_of(st.none(), st.text(max_size=20), st.integers()),
    max_size=6,
))
def test_query_encoding_round_trip(params):
    decoded = parse_qsl(encode_query(params), keep_blank_values=True)

    assert decoded == [(key, str(value)) for key, value in params.items() if value is not None]


# ============================================================================
# Property 6: Nonce Monotonicity
# ============================================================================

@settings(max_examples=100)
@given(st.lists(st.floats(min_value=1.0e9, max_value=2.0e9), min_size=1, max_size=50))
def test_nonce_strictly_increasing_for_any_clock(readings):
    clock = iter(readings)
    nonce = MonotonicNonce(clock=lambda: next(clock))

    values = [nonce.next() for _ in readings]

    assert all(later > earlier for earlier, later in zip(values, values[1:]))
