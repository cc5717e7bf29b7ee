"""Lowest-level building blocks shared by every layer."""

from .exceptions import (
    ConfigurationError,
    DecodeFailure,
    RelayError,
    SerializationFailure,
    TransportConnectionError,
    TransportFailure,
    UnsupportedEnvelope,
)

__all__ = [
    "ConfigurationError",
    "DecodeFailure",
    "RelayError",
    "SerializationFailure",
    "TransportConnectionError",
    "TransportFailure",
    "UnsupportedEnvelope",
]
