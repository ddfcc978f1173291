"""
Response envelopes and request results.

The router wraps every response in an envelope discriminated by ``ok``.
The executor turns that envelope (or the lack of one) into a
``RequestResult``: ``Success``, ``TransportFailure`` or ``EnvelopeFailure``.
"""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .errors import ClientError


class ErrorShape(BaseModel):
    """Error payload of a failure envelope.

    Routers may add their own fields; they are kept as extras.
    """

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    message: str
    status_code: int | None = Field(default=None, alias="statusCode")


class SuccessEnvelope(BaseModel):
    """``{"ok": true, "data": ...}``"""

    model_config = ConfigDict(extra="allow", frozen=True)

    ok: Literal[True]
    data: Any = None


class FailureEnvelope(BaseModel):
    """``{"ok": false, "error": {...}}``, optionally with a ``statusCode``."""

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    ok: Literal[False]
    error: ErrorShape
    status_code: int | None = Field(default=None, alias="statusCode")


ResponseEnvelope = Union[SuccessEnvelope, FailureEnvelope]

_envelope_adapter: TypeAdapter[ResponseEnvelope] = TypeAdapter(ResponseEnvelope)


def parse_envelope(value: Any) -> ResponseEnvelope:
    """Validate a decoded response body as a response envelope.

    Args:
        value: The JSON-decoded, transformer-deserialized body.

    Returns:
        A SuccessEnvelope or FailureEnvelope.

    Raises:
        pydantic.ValidationError: If the value matches neither shape.
    """
    return _envelope_adapter.validate_python(value)


class Success(BaseModel):
    """The call succeeded and produced ``data``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"
    data: Any = None

    @property
    def ok(self) -> bool:
        return True


class TransportFailure(BaseModel):
    """The call failed before a response envelope was available."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: Literal["transport"] = "transport"
    error: ClientError

    @property
    def ok(self) -> bool:
        return False


class EnvelopeFailure(BaseModel):
    """The router answered with a failure envelope."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: Literal["envelope"] = "envelope"
    error: ClientError

    @property
    def ok(self) -> bool:
        return False


RequestResult = Union[Success, TransportFailure, EnvelopeFailure]
