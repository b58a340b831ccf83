"""Tag binding operations (create/delete/list) against Cloud Resource Manager."""

from __future__ import annotations

import time
from typing import Any, Callable

from managers.models import Page, TagBinding
from managers.operation_poller import OperationPoller
from utils.endpoints import EndpointResolver
from utils.events import EventSink, NullEventSink
from utils.google_api import list_all_pages
from utils.http_gateway import JsonHttpGateway
from utils.resource_names import (
    TAG_BINDINGS_PREFIX,
    ensure_tag_binding_prefix,
    normalize_resource_name,
    tag_binding_path,
)
from utils.settings import TaggingSettings

_TAG_BINDINGS_COLLECTION = "tagBindings"


class TagBindingManager:
    """Tag binding operations.

    Every call takes its own optional `location`; there is no session-wide
    region. Mutations go through the `OperationPoller`; lists are fully
    materialized before returning.
    """

    def __init__(
        self,
        gateway: JsonHttpGateway,
        *,
        resolver: EndpointResolver | None = None,
        poller: OperationPoller | None = None,
        events: EventSink | None = None,
    ):
        self.gateway = gateway
        self.resolver = resolver or EndpointResolver()
        self.events = events or NullEventSink()
        self.poller = poller or OperationPoller(gateway, self.resolver, events=self.events)

    @classmethod
    def from_settings(
        cls,
        settings: TaggingSettings,
        gateway: JsonHttpGateway,
        *,
        events: EventSink | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> "TagBindingManager":
        resolver = EndpointResolver(
            global_host=settings.global_host,
            api_version=settings.api_version,
            derive_region_from_zone=settings.derive_region_from_zone,
        )
        poller = OperationPoller(
            gateway,
            resolver,
            poll_interval_s=settings.poll_interval_s,
            timeout_s=settings.operation_timeout_s,
            sleep=sleep,
            clock=clock,
            events=events,
        )
        return cls(gateway, resolver=resolver, poller=poller, events=events)

    def _collection_url(self, location: str | None) -> str:
        return f"{self.resolver.resolve(location).base_url}/{_TAG_BINDINGS_COLLECTION}"

    def create_tag_binding(
        self,
        resource_name: str,
        tag_value: str,
        location: str | None = None,
    ) -> TagBinding:
        """Bind `tag_value` to `resource_name` and wait for the operation.

        The returned binding carries the server-assigned `name` when the
        operation response includes one.
        """
        parent = normalize_resource_name(resource_name)
        body = {"parent": parent, "tagValue": tag_value}
        submitted = self.gateway.request("POST", self._collection_url(location), body=body)
        result = self.poller.wait(submitted)

        name = result.get("name")
        if isinstance(name, str) and name.startswith(TAG_BINDINGS_PREFIX):
            created = TagBinding.from_payload(result)
            return TagBinding(
                parent=created.parent or parent,
                tag_value=created.tag_value or tag_value,
                name=created.name,
                source=result,
            )
        return TagBinding(parent=parent, tag_value=tag_value, name=None, source=result)

    def delete_tag_binding(self, tag_binding_name: str, location: str | None = None) -> dict[str, Any]:
        """Delete a binding by its name (`tagBindings/` is added when missing)."""
        name = ensure_tag_binding_prefix(tag_binding_name)
        url = f"{self.resolver.resolve(location).base_url}/{name}"
        return self.poller.wait(self.gateway.request("DELETE", url))

    def delete_tag_binding_for(
        self,
        resource_name: str,
        tag_value: str,
        location: str | None = None,
    ) -> dict[str, Any]:
        """Delete the binding addressed by (resource, tag value)."""
        path = tag_binding_path(normalize_resource_name(resource_name), tag_value)
        url = f"{self.resolver.resolve(location).base_url}/{path}"
        return self.poller.wait(self.gateway.request("DELETE", url))

    def list_tag_bindings_for_resource(
        self,
        resource_name: str,
        location: str | None = None,
    ) -> list[TagBinding]:
        return self._list(location, parent=normalize_resource_name(resource_name))

    def list_tag_bindings_for_tag_value(
        self,
        tag_value: str,
        location: str | None = None,
    ) -> list[TagBinding]:
        return self._list(location, tagValue=tag_value)

    def _list(self, location: str | None, **filters: str) -> list[TagBinding]:
        url = self._collection_url(location)

        def fetch_page(page_token: str | None) -> dict[str, Any]:
            payload = self.gateway.request("GET", url, params={**filters, "pageToken": page_token})
            page = Page.from_payload(payload, items_field=_TAG_BINDINGS_COLLECTION)
            return {_TAG_BINDINGS_COLLECTION: page.items, "nextPageToken": page.next_page_token}

        items = list_all_pages(fetch_page, items_field=_TAG_BINDINGS_COLLECTION)
        return [TagBinding.from_payload(item) for item in items]
