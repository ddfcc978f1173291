"""
Data transformers applied to procedure inputs and response bodies.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DataTransformer(Protocol):
    """Pure, synchronous serialize/deserialize pair.

    Implementations must satisfy ``deserialize(serialize(x)) == x`` for every
    value the application sends.
    """

    def serialize(self, value: Any) -> Any:
        """Turn an input value into something JSON can encode."""
        ...

    def deserialize(self, value: Any) -> Any:
        """Turn a decoded response body back into application values."""
        ...


class IdentityTransformer:
    """Transformer that passes values through unchanged."""

    def serialize(self, value: Any) -> Any:
        return value

    def deserialize(self, value: Any) -> Any:
        return value
