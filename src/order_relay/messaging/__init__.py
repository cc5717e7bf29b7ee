"""Transport-neutral envelope handling plus one sub-package per broker.

Broker sub-packages (``rabbitmq``, ``kafka``, ``sqs``, ``redis``) import
their client library at import time and are therefore only imported when
selected; ``memory`` has no third-party dependency.
"""

from __future__ import annotations

from .envelope import (
    CorrelationPrecedence,
    DecodedMessage,
    EnvelopeCodec,
    InboundMessage,
    MissingCorrelationPolicy,
    PackedMessage,
    WireFormat,
)
from .serialization import PayloadSerializer

__all__ = [
    "CorrelationPrecedence",
    "DecodedMessage",
    "EnvelopeCodec",
    "InboundMessage",
    "MissingCorrelationPolicy",
    "PackedMessage",
    "PayloadSerializer",
    "WireFormat",
]
