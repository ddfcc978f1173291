"""
Client facade for calling procedures on a remote router.

Example:
    async with create_client("http://localhost:2021/rpc") as client:
        user = await client.query("getUser", {"id": 1})

        unsubscribe = client.subscription(
            "messages.poll",
            initial_input=0,
            next_input=lambda messages: len(messages),
            on_data=print,
        )
        ...
        unsubscribe()
"""

from __future__ import annotations

import itertools
from functools import partial
from typing import Any, Awaitable, Callable, Iterator

from loguru import logger
from pydantic import BaseModel, ConfigDict

from .config import Settings, settings as default_settings
from .runtime.abort import AbortController, AbortControllerFactory
from .runtime.builder import ProcedureType, build_request, coerce_procedure_type
from .runtime.cancellable import CancellableRequest, Runner
from .runtime.errors import ClientError
from .runtime.executor import ErrorHook, HeaderSupplier, RequestExecutor, SuccessHook
from .runtime.retry import BackoffPolicy
from .runtime.subscription import Subscription, reconnecting_runner
from .runtime.transformer import DataTransformer, IdentityTransformer
from .runtime.transport import HttpxFetch


class FetchOptions(BaseModel):
    """Transport overrides.

    Attributes:
        fetch: Coroutine following the Fetch protocol. Defaults to a pooled
            HttpxFetch owned by the client.
        abort_controller: Factory for one AbortController per request. Set to
            None to disable cancellation; ``cancel()`` then does nothing.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    fetch: Callable[..., Awaitable[Any]] | None = None
    abort_controller: AbortControllerFactory | None = AbortController


class ProcedureClient:
    """Calls queries, mutations and subscriptions on one router.

    ``query`` and ``mutation`` return a CancellableRequest to await.
    ``subscription`` starts a polling loop and returns its unsubscribe
    function. All three must be called from inside a running event loop.
    """

    def __init__(
        self,
        url: str,
        *,
        fetch_opts: FetchOptions | None = None,
        get_headers: HeaderSupplier | None = None,
        on_success: SuccessHook | None = None,
        on_error: ErrorHook | None = None,
        transformer: DataTransformer | None = None,
        log: bool | None = None,
        id_generator: Iterator[int] | None = None,
        backoff: BackoffPolicy | None = None,
    ):
        """Initialize the client.

        Args:
            url: Router endpoint; procedure paths are appended to it.
            fetch_opts: Transport and abort controller overrides.
            get_headers: Called before every request for extra headers.
            on_success: Called with every success envelope.
            on_error: Called with every ClientError, reconnects included.
            transformer: Serializes inputs and deserializes responses.
                Defaults to the identity transformer.
            log: Trace every call. Defaults to settings.log_requests.
            id_generator: Source of correlation IDs for log lines.
                Defaults to a counter starting at 1.
            backoff: Subscription retry policy.
        """
        fetch_opts = fetch_opts or FetchOptions()
        self.url = url.rstrip("/")
        self._owns_fetch = fetch_opts.fetch is None
        self._fetch = fetch_opts.fetch or HttpxFetch()
        self._abort_controller = fetch_opts.abort_controller
        self.transformer = transformer or IdentityTransformer()
        self.log_requests = default_settings.log_requests if log is None else log
        self._ids = id_generator if id_generator is not None else itertools.count(1)
        self.backoff = backoff or BackoffPolicy()
        self._executor = RequestExecutor(
            self._fetch,
            transformer=self.transformer,
            get_headers=get_headers,
            on_success=on_success,
            on_error=on_error,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **overrides: Any) -> "ProcedureClient":
        """Create a client configured from Settings.

        Args:
            settings: Settings to read. Defaults to the global instance.
            **overrides: Constructor arguments taking precedence.

        Returns:
            A new ProcedureClient.
        """
        settings = settings or default_settings
        options: dict[str, Any] = {
            "log": settings.log_requests,
            "backoff": BackoffPolicy(
                base_delay=settings.SUBSCRIPTION_BASE_DELAY,
                max_delay=settings.SUBSCRIPTION_MAX_DELAY,
            ),
            "fetch_opts": FetchOptions(
                fetch=HttpxFetch(
                    timeout=settings.RPC_TIMEOUT,
                    max_connections=settings.RPC_MAX_CONNECTIONS,
                    max_keepalive=settings.RPC_MAX_KEEPALIVE,
                )
            ),
        }
        options.update(overrides)
        url = options.pop("url", settings.RPC_URL)
        client = cls(url, **options)
        if "fetch_opts" not in overrides:
            client._owns_fetch = True
        return client

    async def aclose(self) -> None:
        """Close the default transport if this client created it."""
        if self._owns_fetch and isinstance(self._fetch, HttpxFetch):
            await self._fetch.close()

    async def __aenter__(self) -> "ProcedureClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    def query(self, path: str, input: Any = None) -> CancellableRequest[Any]:
        """Call a query procedure (HTTP GET)."""
        return self.request(ProcedureType.QUERY, path, input)

    def mutation(self, path: str, input: Any = None) -> CancellableRequest[Any]:
        """Call a mutation procedure (HTTP POST)."""
        return self.request(ProcedureType.MUTATION, path, input)

    def request(self, kind: ProcedureType | str, path: str, input: Any = None) -> CancellableRequest[Any]:
        """Send one procedure call of any kind.

        Raises:
            UnhandledProcedureTypeError: Immediately, for an unknown kind.
        """
        kind = coerce_procedure_type(kind)
        intent = build_request(kind, path, input, base_url=self.url, transformer=self.transformer)
        return self._issue(kind, path, input, partial(self._executor.execute, intent))

    def subscription_once(self, path: str, input: Any = None) -> CancellableRequest[Any]:
        """Poll a subscription once, reconnecting while the router answers 408."""
        intent = build_request(
            ProcedureType.SUBSCRIPTION, path, input, base_url=self.url, transformer=self.transformer
        )
        request: CancellableRequest[Any] | None = None

        def cancelled() -> bool:
            return request is not None and request.stop_requested

        runner = reconnecting_runner(
            partial(self._executor.execute, intent), label=path, should_stop=cancelled
        )
        request = self._issue(ProcedureType.SUBSCRIPTION, path, input, runner)
        return request

    def subscription(
        self,
        path: str,
        *,
        initial_input: Any,
        next_input: Callable[[Any], Any],
        on_data: Callable[[Any], Any] | None = None,
        on_error: Callable[[ClientError], Any] | None = None,
    ) -> Callable[[], None]:
        """Poll a subscription until unsubscribed.

        Args:
            path: Subscription procedure path.
            initial_input: Input of the first poll.
            next_input: Computes the next poll's input (the cursor) from a
                result.
            on_data: Called with each result.
            on_error: Called with each failure before its backoff retry.

        Returns:
            A function that stops the subscription.
        """
        subscription = Subscription(
            partial(self.subscription_once, path),
            initial_input=initial_input,
            next_input=next_input,
            on_data=on_data,
            on_error=on_error,
            backoff=self.backoff,
            name=path,
        )
        return subscription.start().unsubscribe

    def _issue(self, kind: ProcedureType, path: str, input: Any, runner: Runner) -> CancellableRequest[Any]:
        request_id = next(self._ids)
        controller = self._abort_controller() if self._abort_controller is not None else None
        if self.log_requests:
            logger.info(f"-> {kind.value} {path} ID: {request_id} input: {input!r}")
        request: CancellableRequest[Any] = CancellableRequest(runner, controller)
        if self.log_requests:
            request.add_done_callback(partial(_log_settled, kind, path, request_id, input))
        return request


def _log_settled(
    kind: ProcedureType,
    path: str,
    request_id: int,
    input: Any,
    request: CancellableRequest[Any],
) -> None:
    error = request.exception()
    if error is None:
        logger.info(f"<- ✅ {kind.value} {path} ID: {request_id} input: {input!r} output: {request.result()!r}")
        return
    suffix = " (aborted)" if request.aborted else ""
    logger.info(f"<- ❌{suffix} {kind.value} {path} ID: {request_id} input: {input!r} error: {error!r}")


def create_client(url: str, **options: Any) -> ProcedureClient:
    """Create a ProcedureClient; see ProcedureClient for the options."""
    return ProcedureClient(url, **options)
