"""
Error model for procedure calls.

Every failed call surfaces as a single ``ClientError``. The error records
where the failure came from so callers can tell a broken connection from an
error the router reported on purpose.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .envelope import ErrorShape, FailureEnvelope

RECONNECT_STATUS_CODE = 408


class ErrorOrigin(str, Enum):
    """Where a ClientError was produced."""

    # No envelope: the HTTP call raised, was aborted, or the body was unreadable
    TRANSPORT = "transport"
    # The router answered with a well-formed failure envelope
    ENVELOPE = "envelope"


class ClientError(Exception):
    """The error raised for every unsuccessful procedure call.

    A ClientError is built exactly once, at the point where a request settles
    unsuccessfully, and is not modified afterwards.

    Attributes:
        message: Human-readable message (the router's message for
            envelope-origin errors, the underlying exception's otherwise).
        envelope: The raw failure envelope, envelope-origin errors only.
        shape: The router's error payload, derived from the envelope.
        cause: The underlying exception, transport-origin errors only.
        response: The transport response, when one was received.
    """

    def __init__(
        self,
        message: str,
        *,
        envelope: FailureEnvelope | None = None,
        cause: BaseException | None = None,
        response: Any = None,
    ):
        """Initialize a ClientError.

        Args:
            message: Human-readable error message.
            envelope: Failure envelope the router returned, if any.
            cause: Exception raised before an envelope was available, if any.
            response: Transport response object, if one was received.
        """
        super().__init__(message)
        self.message = message
        self.envelope = envelope
        self.cause = cause
        self.response = response
        self.shape: ErrorShape | None = envelope.error if envelope is not None else None

    @property
    def origin(self) -> ErrorOrigin:
        """Classify the error by whether the router sent an envelope."""
        if self.envelope is not None:
            return ErrorOrigin.ENVELOPE
        return ErrorOrigin.TRANSPORT

    @property
    def status_code(self) -> int | None:
        """Status code carried by the failure envelope.

        Routers put it either on the envelope itself or inside the error
        payload; the envelope-level value wins.
        """
        if self.envelope is None:
            return None
        if self.envelope.status_code is not None:
            return self.envelope.status_code
        return self.envelope.error.status_code

    @property
    def is_reconnect(self) -> bool:
        """True when the router asked a subscription to poll again."""
        return self.status_code == RECONNECT_STATUS_CODE

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"ClientError(message={self.message!r}, "
            f"origin={self.origin.value!r}, "
            f"status_code={self.status_code!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary suitable for structured logging.

        Returns:
            Dictionary with the message, origin, status code and, when
            present, the router's error payload or the cause's type.
        """
        result: dict[str, Any] = {
            "message": self.message,
            "origin": self.origin.value,
            "status_code": self.status_code,
        }
        if self.shape is not None:
            result["shape"] = self.shape.model_dump(by_alias=True, exclude_none=True)
        if self.cause is not None:
            result["cause"] = type(self.cause).__name__
        return result


class RequestAbortedError(Exception):
    """Raised by a transport when the request's abort signal fires."""

    def __init__(self, message: str = "The operation was aborted"):
        super().__init__(message)


class UnhandledProcedureTypeError(ValueError):
    """A procedure kind other than query, mutation or subscription was used.

    This is a programming error: it is raised immediately and is never
    wrapped in a ClientError or retried.
    """

    def __init__(self, kind: Any):
        super().__init__(f'Unhandled type "{kind}"')
        self.kind = kind
