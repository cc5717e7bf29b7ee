"""Exception hierarchy for order-relay."""

from __future__ import annotations


class RelayError(Exception):
    """Root exception for the entire order-relay package."""


class DecodeFailure(RelayError):
    """Raised when an inbound message cannot be turned into the expected event.

    Covers unparsable payloads and a required correlation id that is still
    missing after the header/wrapper fallback.
    """

    def __init__(self, message: str, channel: str | None = None) -> None:
        self.channel = channel
        super().__init__(message)


class UnsupportedEnvelope(DecodeFailure):
    """Raised when a transport frame is neither a text nor a byte frame."""

    def __init__(self, frame_type: str, channel: str | None = None) -> None:
        self.frame_type = frame_type
        super().__init__(f"Unsupported envelope frame: {frame_type}", channel)


class SerializationFailure(RelayError):
    """Raised when encoding an outbound event fails."""


class TransportFailure(RelayError, RuntimeError):
    """Raised when the underlying transport cannot publish or subscribe.

    Usage: bindings wrap library exceptions with ``raise ... from e`` so the
    caller decides whether the failure is fatal or swallowed.
    """

    def __init__(self, message: str, channel: str | None = None) -> None:
        self.channel = channel
        super().__init__(message)


class TransportConnectionError(TransportFailure):
    """Raised when connectivity to the message broker fails."""


class ConfigurationError(RelayError):
    """Raised at startup when settings are invalid or a protocol is unknown."""
