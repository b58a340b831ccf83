"""Typed views over Resource Manager JSON payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from utils.errors import MalformedResponseError
from utils.resource_names import encode_tag_binding_name


class OperationState(Enum):
    SUBMITTED = "SUBMITTED"
    POLLING = "POLLING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"


def _expect_dict(payload: Any, what: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise MalformedResponseError(
            f"Expected a JSON object for {what}, got {type(payload).__name__}",
            payload=payload,
        )
    return payload


def _optional_str(payload: dict[str, Any], key: str, what: str) -> str | None:
    value = payload.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise MalformedResponseError(f"{what} field '{key}' must be a string", payload=payload)
    return value


def _optional_bool(payload: dict[str, Any], key: str, what: str) -> bool:
    value = payload.get(key, False)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise MalformedResponseError(f"{what} field '{key}' must be a boolean", payload=payload)
    return value


@dataclass(frozen=True)
class TagBinding:
    """Association between a resource (`parent`) and a `tagValues/<id>`."""

    parent: str
    tag_value: str
    name: str | None = None
    # Payload the binding was read from; the whole operation when no binding came back.
    source: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, payload: Any) -> "TagBinding":
        data = _expect_dict(payload, "tag binding")
        return cls(
            parent=_optional_str(data, "parent", "Tag binding") or "",
            tag_value=_optional_str(data, "tagValue", "Tag binding") or "",
            name=_optional_str(data, "name", "Tag binding"),
            source=data,
        )

    @property
    def display_name(self) -> str:
        return encode_tag_binding_name(self.parent, self.tag_value)

    def to_payload(self) -> dict[str, Any]:
        out: dict[str, Any] = {"parent": self.parent, "tagValue": self.tag_value}
        if self.name:
            out["name"] = self.name
        return out


@dataclass(frozen=True)
class Operation:
    """Snapshot of a long-running operation; each poll yields a fresh one."""

    name: str | None
    done: bool = False
    error: Any = None
    response: dict[str, Any] | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Any) -> "Operation":
        data = _expect_dict(payload, "operation")
        response = data.get("response")
        if response is not None and not isinstance(response, dict):
            raise MalformedResponseError("Operation field 'response' must be an object", payload=data)
        return cls(
            name=_optional_str(data, "name", "Operation"),
            done=_optional_bool(data, "done", "Operation"),
            error=data.get("error"),
            response=response,
            raw=data,
        )

    @staticmethod
    def is_operation_payload(payload: Any) -> bool:
        """True for `operations/...` handles; False for resources returned inline."""
        if not isinstance(payload, dict):
            return False
        name = payload.get("name")
        if not isinstance(name, str) or not name:
            return False
        return "done" in payload or name.startswith("operations/") or "/operations/" in name

    @property
    def failed(self) -> bool:
        return self.error is not None

    def result(self) -> dict[str, Any]:
        """`response` when the server sent one, else the operation itself."""
        return self.response if self.response is not None else self.raw


@dataclass(frozen=True)
class Page:
    """One fetch of a paginated list."""

    items: list[dict[str, Any]]
    next_page_token: str | None = None

    @classmethod
    def from_payload(cls, payload: Any, *, items_field: str) -> "Page":
        data = _expect_dict(payload, "list page")
        items = data.get(items_field) or []
        if not isinstance(items, list):
            raise MalformedResponseError(f"List field '{items_field}' must be an array", payload=data)
        return cls(
            items=[x for x in items if isinstance(x, dict)],
            next_page_token=_optional_str(data, "nextPageToken", "List page"),
        )
