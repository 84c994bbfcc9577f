"""Values handed over by the request-interception hook."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import parse_qs, urlsplit


@dataclass(frozen=True, slots=True)
class InterceptedExchange:
    """One completed call observed by the transport collaborator.

    Bodies are passed through untouched: raw ``bytes``/``str`` as sent on the
    wire or an already-decoded JSON value.
    """

    url: str
    request_body: object = None
    response_body: object = None
    request_headers: Mapping[str, str] | None = None


def matches_endpoint(url: str, endpoint_marker: str) -> bool:
    return endpoint_marker in url


def decode_json_body(body: object) -> object:
    """Return ``body`` as decoded JSON.

    Raises ``ValueError`` (including ``json.JSONDecodeError`` and
    ``UnicodeDecodeError``) when a textual body is not valid JSON.
    """

    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8")
    if isinstance(body, str):
        return json.loads(body)
    return body


def operation_name(exchange: InterceptedExchange) -> str | None:
    """Read the GraphQL operation name from the URL query or the request body."""

    names = parse_qs(urlsplit(exchange.url).query).get("operationName")
    if names and names[0]:
        return names[0]
    try:
        body = decode_json_body(exchange.request_body)
    except ValueError:
        return None
    if isinstance(body, Mapping):
        name = body.get("operationName")
        if isinstance(name, str) and name:
            return name
    return None
