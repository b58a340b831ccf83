"""Error types raised by the tag-binding tooling."""

from __future__ import annotations

import json
from typing import Any


class TaggingError(Exception):
    """Base class for every error the CLI reports and exits on."""


class ArgumentError(TaggingError):
    """A required command-line argument is missing or invalid."""


class CredentialError(TaggingError):
    """The credentials file could not be read or parsed."""


class RequestFailure(TaggingError):
    """An HTTP call failed at the transport level or returned a non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        payload: Any = None,
        method: str | None = None,
        url: str | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.payload = payload
        self.method = method
        self.url = url

    def __str__(self) -> str:
        base = super().__str__()
        if self.payload in (None, "", {}):
            return base
        return f"{base}, error: {_render(self.payload)}"


class MalformedResponseError(RequestFailure):
    """A 2xx response did not have the expected JSON shape."""


class OperationError(TaggingError):
    """A long-running operation finished with an `error` field."""

    def __init__(self, operation_name: str, error: Any):
        super().__init__(f"Operation {operation_name} failed: {_render(error)}")
        self.operation_name = operation_name
        self.error = error


class OperationTimeoutError(TaggingError, TimeoutError):
    """A long-running operation did not reach `done` within the polling budget."""

    def __init__(self, operation_name: str, timeout_s: float):
        super().__init__(
            f"Operation {operation_name} did not complete within {timeout_s:g} seconds",
        )
        self.operation_name = operation_name
        self.timeout_s = timeout_s


def _render(payload: Any) -> str:
    if isinstance(payload, (dict, list)):
        return json.dumps(payload, sort_keys=True)
    return str(payload)
