"""Authenticated JSON-over-HTTP transports for the Resource Manager API.

Both gateways share one contract, `request(method, url, *, params, body) -> dict`:

- a 2xx response returns the decoded JSON object (`{}` for an empty body);
  any other 2xx body raises `MalformedResponseError`;
- anything else raises `RequestFailure` carrying the status and error body.

`AuthorizedSessionGateway` goes through google-auth's requests session and is
the default. `ApiClientGateway` goes through the googleapiclient HTTP stack
(httplib2 + `HttpRequest`), the same plumbing the discovery-based clients use.
Nothing is retried here.
"""

from __future__ import annotations

import json
from typing import Any, Protocol
from urllib.parse import urlencode

import google_auth_httplib2
import httplib2
import requests
from google.auth import exceptions as google_auth_exceptions
from google.auth.transport.requests import AuthorizedSession
from googleapiclient.errors import HttpError
from googleapiclient.http import HttpRequest, build_http

from utils.errors import CredentialError, MalformedResponseError, RequestFailure
from utils.events import REQUEST_SENT, RESPONSE_RECEIVED, EventSink, NullEventSink
from utils.google_api import error_payload_from_http_error, status_code_from_http_error

TRANSPORT_REST = "rest"
TRANSPORT_API_CLIENT = "api-client"
TRANSPORTS = (TRANSPORT_REST, TRANSPORT_API_CLIENT)

DEFAULT_REQUEST_TIMEOUT_S = 30.0


class JsonHttpGateway(Protocol):
    def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]: ...


def _clean_params(params: dict[str, Any] | None) -> dict[str, Any]:
    return {k: v for k, v in (params or {}).items() if v is not None}


def _decode_json_object(text: str | bytes | None) -> tuple[dict[str, Any], bool]:
    """Return (object, was_object). Empty bodies are `({}, True)`; invalid or non-object JSON is `({}, False)`."""
    if not text:
        return {}, True
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    if not text.strip():
        return {}, True
    try:
        parsed = json.loads(text)
    except ValueError:
        return {}, False
    if isinstance(parsed, dict):
        return parsed, True
    return {}, False


def _success_payload(
    content: str | bytes | None,
    *,
    method: str,
    url: str,
    status: int | None,
) -> dict[str, Any]:
    """Decode a 2xx body. Anything but empty or a JSON object is an error."""
    payload, is_object = _decode_json_object(content)
    if not is_object:
        if isinstance(content, bytes):
            content = content.decode("utf-8", errors="replace")
        raise MalformedResponseError(
            f"Expected a JSON object from {method} {url} (status {status})",
            status=status,
            payload=content,
            method=method,
            url=url,
        )
    return payload


class AuthorizedSessionGateway:
    """JSON gateway over `google.auth.transport.requests.AuthorizedSession`."""

    def __init__(
        self,
        credentials: Any = None,
        *,
        session: requests.Session | None = None,
        events: EventSink | None = None,
        timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S,
    ):
        if session is None:
            if credentials is None:
                raise ValueError("Either credentials or a session is required.")
            session = AuthorizedSession(credentials)
        self._session = session
        self._events = events or NullEventSink()
        self._timeout_s = timeout_s

    def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        method = method.upper()
        self._events.emit(REQUEST_SENT, method=method, url=url, params=params, body=body)
        try:
            response = self._session.request(
                method,
                url,
                params=_clean_params(params) or None,
                json=body,
                timeout=self._timeout_s,
            )
        except google_auth_exceptions.RefreshError as exc:
            raise CredentialError(f"Could not obtain an access token: {exc}") from exc
        except (requests.RequestException, google_auth_exceptions.TransportError) as exc:
            raise RequestFailure(
                f"{method} {url} failed: {exc}",
                method=method,
                url=url,
            ) from exc

        status = response.status_code
        self._events.emit(RESPONSE_RECEIVED, method=method, url=url, status=status)

        if status >= 400:
            payload, is_object = _decode_json_object(response.content)
            raise RequestFailure(
                f"Request failed with response code: {status}",
                status=status,
                payload=payload if is_object and payload else response.text,
                method=method,
                url=url,
            )

        return _success_payload(response.content, method=method, url=url, status=status)


class ApiClientGateway:
    """JSON gateway over the googleapiclient HTTP stack."""

    def __init__(
        self,
        credentials: Any = None,
        *,
        http: Any = None,
        events: EventSink | None = None,
        timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S,
    ):
        if http is None:
            if credentials is None:
                raise ValueError("Either credentials or an http object is required.")
            base_http = build_http()
            base_http.timeout = timeout_s
            http = google_auth_httplib2.AuthorizedHttp(credentials, http=base_http)
        self._http = http
        self._events = events or NullEventSink()

    def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        method = method.upper()
        query = _clean_params(params)
        uri = f"{url}{'&' if '?' in url else '?'}{urlencode(query)}" if query else url
        headers = {"accept": "application/json"}
        serialized = None
        if body is not None:
            headers["content-type"] = "application/json"
            serialized = json.dumps(body)

        seen: dict[str, int] = {}

        # HttpRequest.execute raises HttpError for >= 300 before calling this.
        def postproc(resp: Any, content: bytes) -> bytes:
            seen["status"] = resp.status
            return content

        self._events.emit(REQUEST_SENT, method=method, url=uri, params=params, body=body)
        request = HttpRequest(
            self._http,
            postproc,
            uri,
            method=method,
            body=serialized,
            headers=headers,
        )
        try:
            content = request.execute()
        except HttpError as exc:
            status = status_code_from_http_error(exc)
            self._events.emit(RESPONSE_RECEIVED, method=method, url=uri, status=status)
            raise RequestFailure(
                f"Request failed with response code: {status}",
                status=status,
                payload=error_payload_from_http_error(exc),
                method=method,
                url=uri,
            ) from exc
        except google_auth_exceptions.RefreshError as exc:
            raise CredentialError(f"Could not obtain an access token: {exc}") from exc
        except (httplib2.HttpLib2Error, OSError, google_auth_exceptions.TransportError) as exc:
            raise RequestFailure(f"{method} {uri} failed: {exc}", method=method, url=uri) from exc

        status = seen.get("status")
        self._events.emit(RESPONSE_RECEIVED, method=method, url=uri, status=status)
        return _success_payload(content, method=method, url=uri, status=status)


def build_gateway(
    transport: str,
    credentials: Any,
    *,
    events: EventSink | None = None,
    timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S,
) -> JsonHttpGateway:
    """Return the gateway for a transport name ("rest" or "api-client")."""
    if transport == TRANSPORT_REST:
        return AuthorizedSessionGateway(credentials, events=events, timeout_s=timeout_s)
    if transport == TRANSPORT_API_CLIENT:
        return ApiClientGateway(credentials, events=events, timeout_s=timeout_s)
    raise ValueError(f"transport must be one of: {', '.join(TRANSPORTS)}")
