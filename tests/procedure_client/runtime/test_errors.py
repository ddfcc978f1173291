"""Unit tests for ClientError and related errors."""

import pytest

from procedure_client.runtime.envelope import FailureEnvelope
from procedure_client.runtime.errors import (
    ClientError,
    ErrorOrigin,
    RequestAbortedError,
    UnhandledProcedureTypeError,
)


def make_envelope(**body):
    return FailureEnvelope.model_validate({"ok": False, **body})


class TestTransportOriginError:
    """Tests for errors raised before an envelope was available."""

    def test_carries_cause_only(self):
        """Should keep the cause and leave envelope and shape empty."""
        cause = ConnectionError("refused")
        error = ClientError("refused", cause=cause)

        assert error.message == "refused"
        assert error.cause is cause
        assert error.envelope is None
        assert error.shape is None
        assert error.origin is ErrorOrigin.TRANSPORT
        assert error.status_code is None
        assert error.is_reconnect is False

    def test_is_exception(self):
        """Should be raiseable as an exception."""
        with pytest.raises(ClientError) as exc_info:
            raise ClientError("boom")

        assert str(exc_info.value) == "boom"


class TestEnvelopeOriginError:
    """Tests for errors built from a failure envelope."""

    def test_shape_is_derived_from_envelope(self):
        """Should expose the envelope's error payload as shape."""
        envelope = make_envelope(error={"message": "conflict", "statusCode": 409, "code": "CONFLICT"})
        error = ClientError("conflict", envelope=envelope)

        assert error.origin is ErrorOrigin.ENVELOPE
        assert error.envelope is envelope
        assert error.shape is envelope.error
        assert error.shape.status_code == 409
        assert error.shape.model_extra == {"code": "CONFLICT"}
        assert error.cause is None

    def test_status_code_from_error_payload(self):
        """Should read the status code from the error payload."""
        error = ClientError("x", envelope=make_envelope(error={"message": "x", "statusCode": 500}))
        assert error.status_code == 500

    def test_envelope_level_status_code_wins(self):
        """Should prefer a statusCode set on the envelope itself."""
        envelope = make_envelope(statusCode=408, error={"message": "x", "statusCode": 500})
        error = ClientError("x", envelope=envelope)

        assert error.status_code == 408
        assert error.is_reconnect is True

    def test_reconnect_from_error_payload(self):
        """Should treat an error payload with 408 as a reconnect."""
        error = ClientError("again", envelope=make_envelope(error={"message": "again", "statusCode": 408}))
        assert error.is_reconnect is True


class TestToDict:
    """Tests for structured representation."""

    def test_envelope_error(self):
        """Should include origin, status and the shape with wire names."""
        error = ClientError("conflict", envelope=make_envelope(error={"message": "conflict", "statusCode": 409}))

        assert error.to_dict() == {
            "message": "conflict",
            "origin": "envelope",
            "status_code": 409,
            "shape": {"message": "conflict", "statusCode": 409},
        }

    def test_transport_error(self):
        """Should name the cause's type."""
        error = ClientError("aborted", cause=RequestAbortedError())

        result = error.to_dict()

        assert result["origin"] == "transport"
        assert result["cause"] == "RequestAbortedError"
        assert "shape" not in result

    def test_repr(self):
        """Should show message, origin and status code."""
        error = ClientError("nope", cause=ValueError())
        assert repr(error) == "ClientError(message='nope', origin='transport', status_code=None)"


class TestOtherErrors:
    """Tests for the abort and programming errors."""

    def test_request_aborted_default_message(self):
        assert str(RequestAbortedError()) == "The operation was aborted"

    def test_unhandled_procedure_type_is_value_error(self):
        """Should be a ValueError naming the kind, not a ClientError."""
        error = UnhandledProcedureTypeError("stream")

        assert isinstance(error, ValueError)
        assert not isinstance(error, ClientError)
        assert str(error) == 'Unhandled type "stream"'
        assert error.kind == "stream"
