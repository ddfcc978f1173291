"""
Performs one HTTP exchange and classifies its outcome.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Mapping

from .abort import AbortSignal
from .builder import HttpIntent
from .envelope import (
    EnvelopeFailure,
    RequestResult,
    Success,
    SuccessEnvelope,
    TransportFailure,
    parse_envelope,
)
from .errors import ClientError
from .transformer import DataTransformer, IdentityTransformer
from .transport import Fetch

JSON_HEADERS = {"content-type": "application/json"}

SuccessHook = Callable[[SuccessEnvelope], None]
ErrorHook = Callable[[ClientError], None]
HeaderSupplier = Callable[[], Mapping[str, str | None]]


class RequestExecutor:
    """Sends a built request and turns the response into a RequestResult.

    ``execute`` never raises ClientError: every failure of the call itself,
    of decoding, or of the router comes back as a TransportFailure or an
    EnvelopeFailure.

    Exceptions raised by ``get_headers``, ``on_success`` or ``on_error`` are
    not caught and propagate to the caller of ``execute``. Hooks are
    observers only.
    """

    def __init__(
        self,
        fetch: Fetch,
        *,
        transformer: DataTransformer | None = None,
        get_headers: HeaderSupplier | None = None,
        on_success: SuccessHook | None = None,
        on_error: ErrorHook | None = None,
    ):
        self._fetch = fetch
        self.transformer = transformer or IdentityTransformer()
        self._get_headers = get_headers
        self._on_success = on_success
        self._on_error = on_error

    def headers(self) -> dict[str, str]:
        """JSON content type merged with caller headers; None values dropped."""
        headers = dict(JSON_HEADERS)
        if self._get_headers is not None:
            for name, value in self._get_headers().items():
                if value is not None:
                    headers[name] = value
        return headers

    async def execute(self, intent: HttpIntent, signal: AbortSignal | None = None) -> RequestResult:
        """Perform exactly one request.

        Args:
            intent: Method, URL and body to send.
            signal: Abort signal handed to the transport.

        Returns:
            Success with the envelope's data, TransportFailure when no
            envelope could be obtained, or EnvelopeFailure when the router
            returned a failure envelope.
        """
        headers = self.headers()
        response: Any = None
        try:
            response = await self._fetch(
                intent.url,
                method=intent.method,
                headers=headers,
                body=intent.body,
                signal=signal,
            )
            body = response.json()
            if inspect.isawaitable(body):
                body = await body
            envelope = parse_envelope(self.transformer.deserialize(body))
        except Exception as e:
            error = ClientError(str(e) or type(e).__name__, cause=e, response=response)
            return self._fail(TransportFailure(error=error))

        if envelope.ok:
            if self._on_success is not None:
                self._on_success(envelope)
            return Success(data=envelope.data)

        error = ClientError(envelope.error.message, envelope=envelope, response=response)
        return self._fail(EnvelopeFailure(error=error))

    def _fail(self, result: TransportFailure | EnvelopeFailure) -> RequestResult:
        if self._on_error is not None:
            self._on_error(result.error)
        return result
