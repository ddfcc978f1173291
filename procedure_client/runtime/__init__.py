"""
Request runtime for procedure-client.

This package provides the pieces a procedure call goes through:
- build_request: Procedure call -> HTTP method, URL and body
- RequestExecutor: One HTTP exchange, classified into a RequestResult
- CancellableRequest: Awaitable call with an idempotent cancel()
- Subscription: Polling loop with reconnect and exponential backoff
- ClientError: The single error type surfaced to callers
"""

from .abort import AbortController, AbortSignal
from .builder import HttpIntent, Procedure, ProcedureType, build_request
from .cancellable import CancellableRequest, RequestState
from .envelope import (
    EnvelopeFailure,
    ErrorShape,
    FailureEnvelope,
    RequestResult,
    Success,
    SuccessEnvelope,
    TransportFailure,
    parse_envelope,
)
from .errors import ClientError, ErrorOrigin, RequestAbortedError, UnhandledProcedureTypeError
from .executor import RequestExecutor
from .retry import BackoffPolicy, retry_delay
from .subscription import Subscription, SubscriptionState, reconnecting_runner
from .transformer import DataTransformer, IdentityTransformer
from .transport import Fetch, HttpxFetch

__all__ = [
    "AbortController",
    "AbortSignal",
    "BackoffPolicy",
    "CancellableRequest",
    "ClientError",
    "DataTransformer",
    "EnvelopeFailure",
    "ErrorOrigin",
    "ErrorShape",
    "FailureEnvelope",
    "Fetch",
    "HttpIntent",
    "HttpxFetch",
    "IdentityTransformer",
    "Procedure",
    "ProcedureType",
    "RequestAbortedError",
    "RequestExecutor",
    "RequestResult",
    "RequestState",
    "Subscription",
    "SubscriptionState",
    "Success",
    "SuccessEnvelope",
    "TransportFailure",
    "UnhandledProcedureTypeError",
    "build_request",
    "parse_envelope",
    "reconnecting_runner",
    "retry_delay",
]
