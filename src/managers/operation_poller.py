"""Drive Resource Manager long-running operations to a terminal state."""

from __future__ import annotations

import time
from typing import Any, Callable

from managers.models import Operation, OperationState
from utils.endpoints import EndpointResolver
from utils.errors import OperationError, OperationTimeoutError
from utils.events import OPERATION_COMPLETED, OPERATION_POLLING, EventSink, NullEventSink
from utils.http_gateway import JsonHttpGateway

DEFAULT_POLL_INTERVAL_S = 2.0
DEFAULT_OPERATION_TIMEOUT_S = 60.0


class OperationPoller:
    """Turn the response of a mutating call into a final result.

    SUBMITTED -> SUCCEEDED when the response is not an operation handle (the
    server answered synchronously, e.g. an empty delete or an inline binding).
    Otherwise SUBMITTED -> POLLING, fetching the operation right away and then
    every `poll_interval_s` until it is `done` (SUCCEEDED / FAILED) or
    more than `timeout_s` has elapsed (TIMED_OUT). A snapshot fetched exactly at
    the budget still gets one more interval.

    One call blocks until terminal. There is no cancellation.
    """

    def __init__(
        self,
        gateway: JsonHttpGateway,
        resolver: EndpointResolver | None = None,
        *,
        poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
        timeout_s: float = DEFAULT_OPERATION_TIMEOUT_S,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        events: EventSink | None = None,
    ):
        if poll_interval_s <= 0:
            raise ValueError("poll_interval_s must be positive")
        if timeout_s <= 0:
            raise ValueError("timeout_s must be positive")
        self._gateway = gateway
        self._resolver = resolver or EndpointResolver()
        self.poll_interval_s = poll_interval_s
        self.timeout_s = timeout_s
        self._sleep = sleep
        self._clock = clock
        self._events = events or NullEventSink()
        self.last_state: OperationState | None = None

    def wait(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Return the operation result for the response of a mutating call.

        Raises:
            OperationError: The operation finished with an `error`.
            OperationTimeoutError: The operation was not done within `timeout_s`.
            RequestFailure: Fetching the operation failed.
        """
        self.last_state = OperationState.SUBMITTED
        if not Operation.is_operation_payload(payload):
            self._finish(OperationState.SUCCEEDED, None)
            return payload

        operation = Operation.from_payload(payload)
        name = operation.name or ""
        if operation.done:
            return self._resolve(operation)

        self.last_state = OperationState.POLLING
        url = self._resolver.operation_url(name)
        started = self._clock()
        attempt = 0

        while True:
            attempt += 1
            self._events.emit(
                OPERATION_POLLING,
                operation=name,
                attempt=attempt,
                elapsed_s=round(self._clock() - started, 3),
            )
            operation = Operation.from_payload(self._gateway.request("GET", url))
            if operation.done:
                return self._resolve(operation, fallback_name=name)
            if self._clock() - started > self.timeout_s:
                self._finish(OperationState.TIMED_OUT, name)
                raise OperationTimeoutError(name, self.timeout_s)
            self._sleep(self.poll_interval_s)

    def _resolve(self, operation: Operation, *, fallback_name: str | None = None) -> dict[str, Any]:
        name = operation.name or fallback_name or ""
        if operation.failed:
            self._finish(OperationState.FAILED, name)
            raise OperationError(name, operation.error)
        self._finish(OperationState.SUCCEEDED, name)
        return operation.result()

    def _finish(self, state: OperationState, name: str | None) -> None:
        self.last_state = state
        self._events.emit(OPERATION_COMPLETED, operation=name, state=state.value)
