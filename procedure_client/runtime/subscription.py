"""
Subscription polling.

A subscription is a sequence of discrete polls. Two retry tiers apply:

- A failure envelope with status 408 means "poll again": the same input is
  re-sent at once, with no limit and without reporting an error.
- Any other failure is reported through ``on_error`` and retried with
  exponential backoff until the caller unsubscribes.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, TypeVar

from loguru import logger

from .abort import AbortSignal
from .cancellable import CancellableRequest, Runner
from .envelope import RequestResult
from .errors import ClientError
from .retry import DEFAULT_BACKOFF_POLICY, BackoffPolicy

TInput = TypeVar("TInput")
TOutput = TypeVar("TOutput")


def reconnecting_runner(
    execute: Callable[[AbortSignal | None], Awaitable[RequestResult]],
    label: str = "",
    should_stop: Callable[[], bool] | None = None,
) -> Runner:
    """Wrap one request so that 408 reconnect directives re-send it.

    The reconnects share the request's abort signal, so cancelling the
    request also stops further reconnects. ``should_stop`` is checked before
    every re-send as well, for requests created without an abort controller.

    Args:
        execute: Performs one HTTP exchange with the given signal.
        label: Text identifying the call in log lines.
        should_stop: Returns True once no further reconnect may be sent.

    Returns:
        A runner suitable for CancellableRequest.
    """

    async def run(signal: AbortSignal | None) -> RequestResult:
        attempt = 0
        while True:
            result = await execute(signal)
            if result.ok or not result.error.is_reconnect:
                return result
            if signal is not None and signal.aborted:
                return result
            if should_stop is not None and should_stop():
                return result
            attempt += 1
            logger.debug(f"Router asked {label} to reconnect, attempt {attempt}")

    return run


class SubscriptionState(str, Enum):
    """Lifecycle of a Subscription."""

    IDLE = "idle"
    RUNNING = "running"
    RETRYING = "retrying"
    STOPPED = "stopped"


class Subscription(Generic[TInput, TOutput]):
    """Drives repeated polls of one subscription procedure.

    Polls run strictly one after another in a single task. After a
    successful poll the attempt counter resets, ``on_data`` receives the
    result and ``next_input`` computes the cursor for the next poll, which
    is sent straight away. After a failed poll ``on_error`` receives the
    error and the same input is retried once the backoff delay has passed.

    Exceptions raised by ``on_data``, ``on_error`` or ``next_input`` stop the
    subscription and are logged.
    """

    def __init__(
        self,
        issue: Callable[[TInput], CancellableRequest[TOutput]],
        *,
        initial_input: TInput,
        next_input: Callable[[TOutput], TInput],
        on_data: Callable[[TOutput], Any] | None = None,
        on_error: Callable[[ClientError], Any] | None = None,
        backoff: BackoffPolicy | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        name: str = "",
    ):
        """Initialize a Subscription.

        Args:
            issue: Sends one poll (reconnects included) for an input.
            initial_input: Input of the first poll.
            next_input: Computes the next poll's input from a result.
            on_data: Called with every successful result.
            on_error: Called with every error that leads to a backoff retry.
            backoff: Retry delay policy. Uses the default policy if None.
            sleep: Coroutine used to wait between retries.
            name: Procedure path, used in log lines.
        """
        self._issue = issue
        self._initial_input = initial_input
        self._next_input = next_input
        self._on_data = on_data
        self._on_error = on_error
        self.backoff = backoff or DEFAULT_BACKOFF_POLICY
        self._sleep = sleep
        self.name = name

        self.state = SubscriptionState.IDLE
        self.attempt_index = 0
        self.current_request: CancellableRequest[TOutput] | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def stopped(self) -> bool:
        return self.state is SubscriptionState.STOPPED

    def start(self) -> "Subscription[TInput, TOutput]":
        """Start polling in a background task. Must run inside an event loop."""
        if self.state is SubscriptionState.IDLE:
            self.state = SubscriptionState.RUNNING
            self._task = asyncio.get_running_loop().create_task(self._run())
        return self

    def unsubscribe(self) -> None:
        """Stop polling; cancels the in-flight poll and any pending retry."""
        if self.stopped:
            return
        waiting = self.state is SubscriptionState.RETRYING
        self.state = SubscriptionState.STOPPED
        if self.current_request is not None:
            self.current_request.cancel()
            self.current_request = None
        if waiting and self._task is not None:
            self._task.cancel()
        logger.debug(f"Unsubscribed from {self.name}")

    async def _run(self) -> None:
        try:
            await self._poll_forever()
        except Exception:
            logger.exception(f"Subscription {self.name} stopped by an unexpected error")
            self.state = SubscriptionState.STOPPED
            self.current_request = None

    async def _poll_forever(self) -> None:
        input = self._initial_input
        while not self.stopped:
            self.state = SubscriptionState.RUNNING
            request = self.current_request = self._issue(input)
            try:
                data = await request
            except ClientError as error:
                if self.stopped:
                    return
                self.current_request = None
                await self._back_off(error)
                continue

            if self.stopped:
                return
            self.current_request = None
            self.attempt_index = 0
            if self._on_data is not None:
                self._on_data(data)
            input = self._next_input(data)

    async def _back_off(self, error: ClientError) -> None:
        if self._on_error is not None:
            self._on_error(error)
        if self.stopped:
            return
        self.attempt_index += 1
        delay = self.backoff.calculate_delay(self.attempt_index)
        logger.info(
            f"Subscription {self.name} failed ({error.message}), "
            f"retry {self.attempt_index} in {delay:.2f}s"
        )
        self.state = SubscriptionState.RETRYING
        await self._sleep(delay)
