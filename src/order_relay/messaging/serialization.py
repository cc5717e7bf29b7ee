"""PayloadSerializer — JSON roundtrip between wire text and order models."""

from __future__ import annotations

from typing import TypeVar

from pydantic import ValidationError

from ..domain.models import WireModel
from ..primitives.exceptions import DecodeFailure, SerializationFailure

M = TypeVar("M", bound=WireModel)


class PayloadSerializer:
    """Serialize/deserialize order entities to/from camelCase JSON text."""

    def serialize(self, model: WireModel) -> str:
        """Encode *model* to JSON text."""
        try:
            return model.to_json()
        except (TypeError, ValueError) as e:
            raise SerializationFailure(str(e)) from e

    def deserialize(
        self,
        raw: str | bytes,
        model_type: type[M],
        *,
        channel: str | None = None,
    ) -> M:
        """Decode JSON text into *model_type*."""
        try:
            return model_type.model_validate_json(raw)
        except ValidationError as e:
            raise DecodeFailure(
                f"Cannot decode {model_type.__name__}: {e}", channel
            ) from e
