"""Small helpers around Google API errors and list pagination."""

from __future__ import annotations

import json
from typing import Any, Callable

from googleapiclient.errors import HttpError


def status_code_from_http_error(error: HttpError) -> int | None:
    resp = getattr(error, "resp", None)
    status = getattr(resp, "status", None)
    return int(status) if isinstance(status, int) else None


def error_payload_from_http_error(error: HttpError) -> Any:
    """Return the decoded JSON error body of an `HttpError`, or its raw text."""
    content = getattr(error, "content", None)
    if not content:
        return None
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    try:
        return json.loads(content)
    except ValueError:
        return content


def list_all_pages(
    fetch_page: Callable[[str | None], dict[str, Any]],
    *,
    items_field: str,
) -> list[dict[str, Any]]:
    """Collect all items across a paginated list endpoint.

    Pages are requested one after another; the loop stops as soon as a page
    comes back without a `nextPageToken`, so no trailing empty request is made.

    Args:
        fetch_page: Function that accepts an optional page token and returns a parsed
            response payload (dict).
        items_field: Response field containing list items (e.g., "tagBindings").

    Returns:
        All items from all pages, in received order.
    """
    items: list[dict[str, Any]] = []
    page_token: str | None = None

    while True:
        page = fetch_page(page_token)
        raw_items = page.get(items_field) or []
        if isinstance(raw_items, list):
            items.extend([x for x in raw_items if isinstance(x, dict)])
        page_token = page.get("nextPageToken")
        if not page_token:
            break

    return items
