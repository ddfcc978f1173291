"""
Cooperative cancellation primitive.

An ``AbortController`` owns one ``AbortSignal``. Transports watch the signal
and reject their in-flight call once it fires; nothing is interrupted
preemptively.
"""

from __future__ import annotations

import asyncio
from typing import Callable

from .errors import RequestAbortedError


class AbortSignal:
    """One-shot flag that transports can poll or wait on."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def aborted(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        """Block until the signal fires."""
        await self._event.wait()

    def raise_if_aborted(self) -> None:
        """Raise RequestAbortedError if the signal already fired."""
        if self.aborted:
            raise RequestAbortedError()

    def _fire(self) -> None:
        self._event.set()


class AbortController:
    """Creates a signal and fires it on ``abort()``.

    Aborting more than once has no further effect.
    """

    def __init__(self) -> None:
        self.signal = AbortSignal()

    def abort(self) -> None:
        self.signal._fire()


AbortControllerFactory = Callable[[], AbortController]
