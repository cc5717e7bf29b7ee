"""Tests for EnvelopeCodec extraction and packing."""

from __future__ import annotations

import json
import uuid

import pytest

from order_relay.messaging.envelope import (
    CorrelationPrecedence,
    EnvelopeCodec,
    InboundMessage,
    MissingCorrelationPolicy,
    WireFormat,
    frame_to_text,
    header_text,
)
from order_relay.primitives.exceptions import DecodeFailure, UnsupportedEnvelope

KEY = "orderCorrelationId"


def _msg(body: object, headers: dict[str, str] | None = None) -> InboundMessage:
    return InboundMessage(channel="new-orders", body=body, headers=headers or {})


def test_flat_text_frame_uses_header_id() -> None:
    decoded = EnvelopeCodec().extract(_msg('{"id": 1}', {KEY: "c-1"}))
    assert decoded.payload == '{"id": 1}'
    assert decoded.correlation_id == "c-1"


def test_flat_byte_frame_is_utf8_decoded() -> None:
    decoded = EnvelopeCodec().extract(_msg('{"name": "café"}'.encode(), {KEY: "c"}))
    assert decoded.payload == '{"name": "café"}'


def test_invalid_utf8_is_decode_failure() -> None:
    with pytest.raises(DecodeFailure):
        EnvelopeCodec().extract(_msg(b"\xff\xfe", {KEY: "c"}))


def test_unknown_frame_type_is_unsupported() -> None:
    with pytest.raises(UnsupportedEnvelope) as exc_info:
        EnvelopeCodec().extract(_msg(12345))
    assert exc_info.value.frame_type == "int"
    assert exc_info.value.channel == "new-orders"


def test_wrapped_payload_is_reencoded_json() -> None:
    codec = EnvelopeCodec(WireFormat.WRAPPED)
    body = json.dumps({KEY: "w-1", "payload": {"id": 7, "orderItems": []}})
    decoded = codec.extract(_msg(body))
    assert json.loads(decoded.payload) == {"id": 7, "orderItems": []}
    assert decoded.correlation_id == "w-1"


def test_header_first_prefers_header() -> None:
    codec = EnvelopeCodec(WireFormat.WRAPPED)
    body = json.dumps({KEY: "from-wrapper", "payload": {"id": 1}})
    assert codec.extract(_msg(body, {KEY: "from-header"})).correlation_id == (
        "from-header"
    )


def test_wrapper_first_prefers_wrapper() -> None:
    codec = EnvelopeCodec(
        WireFormat.WRAPPED, precedence=CorrelationPrecedence.WRAPPER_FIRST
    )
    body = json.dumps({KEY: "from-wrapper", "payload": {"id": 1}})
    assert codec.extract(_msg(body, {KEY: "from-header"})).correlation_id == (
        "from-wrapper"
    )


def test_falls_back_to_wrapper_when_header_blank() -> None:
    codec = EnvelopeCodec(WireFormat.WRAPPED)
    body = json.dumps({KEY: "w", "payload": {"id": 1}})
    assert codec.extract(_msg(body, {KEY: ""})).correlation_id == "w"


def test_malformed_wrapper_is_decode_failure() -> None:
    codec = EnvelopeCodec(WireFormat.WRAPPED)
    with pytest.raises(DecodeFailure):
        codec.extract(_msg("not json"))


def test_wrapper_without_payload_is_decode_failure() -> None:
    codec = EnvelopeCodec(WireFormat.WRAPPED)
    with pytest.raises(DecodeFailure):
        codec.extract(_msg(json.dumps({KEY: "c"})))


def test_missing_id_generates_uuid_by_default() -> None:
    cid = EnvelopeCodec().extract(_msg("{}")).correlation_id
    assert cid is not None
    assert uuid.UUID(cid).version == 4


def test_missing_id_blank_policy() -> None:
    codec = EnvelopeCodec(missing_correlation=MissingCorrelationPolicy.BLANK)
    assert codec.extract(_msg("{}")).correlation_id == ""


def test_missing_id_reject_policy() -> None:
    codec = EnvelopeCodec(missing_correlation=MissingCorrelationPolicy.REJECT)
    with pytest.raises(DecodeFailure):
        codec.extract(_msg("{}"))


def test_reject_policy_skipped_when_id_not_required() -> None:
    codec = EnvelopeCodec(missing_correlation=MissingCorrelationPolicy.REJECT)
    decoded = codec.extract(_msg("{}"), require_correlation=False)
    assert decoded.correlation_id is None


def test_pack_flat() -> None:
    packed = EnvelopeCodec().pack('{"id": 1}', "c-9")
    assert packed.body == b'{"id": 1}'
    assert packed.headers == {KEY: "c-9"}


def test_pack_wrapped_embeds_payload_object() -> None:
    packed = EnvelopeCodec(WireFormat.WRAPPED).pack('{"id": 1}', "c-9")
    assert json.loads(packed.body) == {KEY: "c-9", "payload": {"id": 1}}
    assert packed.headers == {KEY: "c-9"}


def test_packed_wrapped_frame_extracts_back() -> None:
    codec = EnvelopeCodec(WireFormat.WRAPPED)
    packed = codec.pack('{"id": 3}', "abc")
    decoded = codec.extract(_msg(packed.body))
    assert json.loads(decoded.payload) == {"id": 3}
    assert decoded.correlation_id == "abc"


def test_frame_helpers() -> None:
    assert frame_to_text(bytearray(b"x")) == "x"
    assert header_text(b"v") == "v"
    assert header_text(None) is None
    assert header_text(5) == "5"
