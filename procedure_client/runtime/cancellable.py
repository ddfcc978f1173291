"""
Awaitable procedure calls with a safe ``cancel()``.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable, Generator, Generic, TypeVar

from loguru import logger

from .abort import AbortController, AbortSignal
from .envelope import RequestResult
from .errors import ClientError, RequestAbortedError

T = TypeVar("T")

Runner = Callable[[AbortSignal | None], Awaitable[RequestResult]]


class RequestState(str, Enum):
    """Lifecycle of a CancellableRequest."""

    PENDING = "pending"
    # cancel() was called; the transport has been told to abort
    CANCELLING = "cancelling"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"
    # Settled after a cancel(), always as a rejection
    CANCELLED = "cancelled"


_TRANSITIONS: dict[tuple[RequestState, str], RequestState] = {
    (RequestState.PENDING, "cancel"): RequestState.CANCELLING,
    (RequestState.PENDING, "resolve"): RequestState.FULFILLED,
    (RequestState.PENDING, "reject"): RequestState.REJECTED,
    (RequestState.CANCELLING, "resolve"): RequestState.CANCELLED,
    (RequestState.CANCELLING, "reject"): RequestState.CANCELLED,
}

_SETTLED_STATES = frozenset(
    {RequestState.FULFILLED, RequestState.REJECTED, RequestState.CANCELLED}
)


class CancellableRequest(Generic[T]):
    """One in-flight call that can be awaited and cancelled.

    The runner starts as soon as the request is created, so this must be
    constructed inside a running event loop. Awaiting returns the call's
    data or raises its ClientError.

    ``cancel()`` before settlement fires the abort signal once; after
    settlement it does nothing. Without an abort controller there is nothing
    to signal: the call runs to completion, and only ``stop_requested`` is
    set so that runners looping over several exchanges can stop early.

    Awaiting is shielded: cancelling the task that awaits a request does
    not cancel the request itself. Use ``cancel()`` for that.

    Example:
        request = client.query("getUser", {"id": 1})
        loop.call_later(5.0, request.cancel)
        user = await request
    """

    def __init__(self, runner: Runner, controller: AbortController | None = None):
        loop = asyncio.get_running_loop()
        self._controller = controller
        self._state = RequestState.PENDING
        self._stop_requested = False
        self._future: asyncio.Future[T] = loop.create_future()
        self._task = loop.create_task(self._run(runner))

    @property
    def state(self) -> RequestState:
        return self._state

    @property
    def settled(self) -> bool:
        return self._state in _SETTLED_STATES

    @property
    def aborted(self) -> bool:
        """True once cancel() took effect, whether or not settled yet."""
        return self._state in (RequestState.CANCELLING, RequestState.CANCELLED)

    @property
    def stop_requested(self) -> bool:
        """True once cancel() was called before settlement, controller or not."""
        return self._stop_requested

    def done(self) -> bool:
        return self._future.done()

    def exception(self) -> BaseException | None:
        """The rejection reason of a settled request, or None if it resolved."""
        return self._future.exception()

    def result(self) -> T:
        """The data of a settled request; raises its error if it was rejected."""
        return self._future.result()

    def add_done_callback(self, callback: Callable[["CancellableRequest[T]"], Any]) -> None:
        """Call ``callback(request)`` once the request settles."""
        self._future.add_done_callback(lambda _: callback(self))

    def cancel(self) -> None:
        """Abort the in-flight call. Idempotent; no-op once settled."""
        if self._state is not RequestState.PENDING:
            return
        self._stop_requested = True
        if self._controller is None:
            logger.debug("cancel() ignored: no abort controller configured")
            return
        self._state = _TRANSITIONS[(self._state, "cancel")]
        self._controller.abort()

    def __await__(self) -> Generator[Any, None, T]:
        return asyncio.shield(self._future).__await__()

    async def _run(self, runner: Runner) -> None:
        signal = self._controller.signal if self._controller is not None else None
        try:
            result = await runner(signal)
        except Exception as e:
            # A caller-supplied hook raised; hand the raw exception to the awaiter
            self._transition("reject")
            self._future.set_exception(e)
            return

        was_cancelling = self._state is RequestState.CANCELLING
        if not result.ok:
            self._transition("reject")
            self._future.set_exception(result.error)
        elif was_cancelling:
            # The transport ignored the signal; cancelled calls never yield data
            self._transition("resolve")
            self._future.set_exception(
                ClientError("The operation was aborted", cause=RequestAbortedError())
            )
        else:
            self._transition("resolve")
            self._future.set_result(result.data)

    def _transition(self, event: str) -> None:
        try:
            self._state = _TRANSITIONS[(self._state, event)]
        except KeyError:
            raise RuntimeError(f"Illegal request transition: {event} from {self._state.value}") from None

    def __repr__(self) -> str:
        return f"<CancellableRequest state={self._state.value}>"
