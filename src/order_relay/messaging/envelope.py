"""InboundMessage and EnvelopeCodec — canonical view of any transport frame."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..correlation import CORRELATION_ID_KEY, generate_correlation_id
from ..domain.models import MessageWrapper
from ..primitives.exceptions import DecodeFailure, UnsupportedEnvelope


class WireFormat(str, Enum):
    """How the correlation id travels with the payload."""

    FLAT = "flat"  # body is the entity, id in transport metadata
    WRAPPED = "wrapped"  # body is {"orderCorrelationId": ..., "payload": ...}


class CorrelationPrecedence(str, Enum):
    """Which source wins when both metadata and wrapper carry an id."""

    HEADER_FIRST = "header_first"
    WRAPPER_FIRST = "wrapper_first"


class MissingCorrelationPolicy(str, Enum):
    """What to do when no correlation id is found after fallback."""

    GENERATE = "generate"
    BLANK = "blank"
    REJECT = "reject"


class InboundMessage(BaseModel):
    """Transport-neutral inbound frame.

    Built by each consumer from its native message: ``body`` is the raw
    frame, ``headers`` the transport metadata flattened to strings.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    channel: str
    body: object = None
    headers: dict[str, str] = Field(default_factory=dict)


@dataclass(frozen=True)
class DecodedMessage:
    payload: str
    correlation_id: str | None = None


@dataclass(frozen=True)
class PackedMessage:
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)


def frame_to_text(body: object, channel: str | None = None) -> str:
    """Return the frame as text; byte frames are decoded as UTF-8."""
    if isinstance(body, str):
        return body
    if isinstance(body, (bytes, bytearray, memoryview)):
        try:
            return bytes(body).decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeFailure(f"Frame is not valid UTF-8: {e}", channel) from e
    raise UnsupportedEnvelope(type(body).__name__, channel)


def header_text(value: object) -> str | None:
    """Flatten a native header value (str, bytes, None) to ``str | None``."""
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


class EnvelopeCodec:
    """Extract ``(payload, correlation_id)`` from frames and pack outbound ones.

    The relay has two historical wire shapes and two fallback orders for the
    correlation id; both are explicit settings here rather than guesses.
    """

    def __init__(
        self,
        wire_format: WireFormat = WireFormat.FLAT,
        *,
        precedence: CorrelationPrecedence = CorrelationPrecedence.HEADER_FIRST,
        missing_correlation: MissingCorrelationPolicy = (
            MissingCorrelationPolicy.GENERATE
        ),
        correlation_key: str = CORRELATION_ID_KEY,
    ) -> None:
        self.wire_format = wire_format
        self.precedence = precedence
        self.missing_correlation = missing_correlation
        self.correlation_key = correlation_key

    def extract(
        self,
        message: InboundMessage,
        *,
        require_correlation: bool = True,
    ) -> DecodedMessage:
        """Unwrap *message* into its payload text and correlation id.

        Raises:
            UnsupportedEnvelope: the frame is neither text nor bytes.
            DecodeFailure: the wrapper is malformed, or the id is missing
                and the policy is ``reject``.
        """
        text = frame_to_text(message.body, message.channel)
        header_id = message.headers.get(self.correlation_key) or None

        if self.wire_format is WireFormat.FLAT:
            payload, wrapper_id = text, None
        else:
            payload, wrapper_id = self._unwrap(text, message.channel)

        if self.precedence is CorrelationPrecedence.HEADER_FIRST:
            correlation_id = header_id or wrapper_id
        else:
            correlation_id = wrapper_id or header_id

        if correlation_id is None and require_correlation:
            correlation_id = self._on_missing(message.channel)
        return DecodedMessage(payload=payload, correlation_id=correlation_id)

    def pack(self, payload: str, correlation_id: str | None) -> PackedMessage:
        """Build the outbound frame for *payload*."""
        headers = {self.correlation_key: correlation_id or ""}
        if self.wire_format is WireFormat.FLAT:
            return PackedMessage(body=payload.encode("utf-8"), headers=headers)
        try:
            inner = json.loads(payload)
        except (TypeError, ValueError):
            inner = payload
        wrapper = {self.correlation_key: correlation_id, "payload": inner}
        return PackedMessage(
            body=json.dumps(wrapper).encode("utf-8"),
            headers=headers,
        )

    def _unwrap(self, text: str, channel: str) -> tuple[str, str | None]:
        try:
            wrapper = MessageWrapper.model_validate_json(text)
        except ValidationError as e:
            raise DecodeFailure(f"Malformed message wrapper: {e}", channel) from e
        inner = wrapper.payload
        if inner is None:
            raise DecodeFailure("Message wrapper has no payload", channel)
        payload = inner if isinstance(inner, str) else json.dumps(inner)
        return payload, wrapper.order_correlation_id or None

    def _on_missing(self, channel: str) -> str:
        if self.missing_correlation is MissingCorrelationPolicy.GENERATE:
            return generate_correlation_id()
        if self.missing_correlation is MissingCorrelationPolicy.BLANK:
            return ""
        raise DecodeFailure(f"Missing {self.correlation_key}", channel)
