"""HTTP client for the Getgems GraphQL API."""

from __future__ import annotations

from collections.abc import Mapping
from logging import getLogger
from typing import TYPE_CHECKING, Final

from venuemark.adapters.http_resilience import ResilientClient

from .schema import GraphQLResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from venuemark.config.getgems import GetgemsConfig
    from venuemark.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

# Headers owned by the HTTP layer; replaying them from a captured browser request breaks it.
_HOP_BY_HOP_HEADERS: Final[frozenset[str]] = frozenset(
    {"content-length", "host", "connection", "accept-encoding", "transfer-encoding"}
)


class GetgemsAPIError(RuntimeError):
    """Raised when the GraphQL endpoint answers with errors and no data."""

    def __init__(self, message: str, *, operation_name: str | None = None) -> None:
        super().__init__(message)
        self.operation_name = operation_name


class GetgemsGraphQLClient:
    """Issue GraphQL operations against Getgems on behalf of the engine.

    Headers seen on the page's own GraphQL traffic can be captured once and are
    then replayed on every engine query, so requests look like the page's.
    """

    def __init__(
        self,
        *,
        config: GetgemsConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._captured_headers: dict[str, str] | None = None

    @property
    def captured_headers(self) -> Mapping[str, str] | None:
        return self._captured_headers

    def capture_headers(self, headers: Mapping[str, str] | None) -> bool:
        """Remember ``headers`` unless a set was captured already; return True if stored."""

        if not headers or self._captured_headers is not None:
            return False
        self._captured_headers = {
            key: value
            for key, value in headers.items()
            if key.lower() not in _HOP_BY_HOP_HEADERS
        }
        log.debug("Captured %s GraphQL request headers", len(self._captured_headers))
        return True

    async def execute(
        self,
        operation_name: str,
        query: str,
        variables: Mapping[str, object],
    ) -> object:
        body = {"operationName": operation_name, "query": query, "variables": dict(variables)}
        headers = dict(self._captured_headers or {})
        headers["Content-Type"] = "application/json"

        async with self._client_factory(self._resilience) as client:
            response = await client.post(self._config.graphql_url, json=body, headers=headers)
        response.raise_for_status()

        payload = response.json()
        if not isinstance(payload, Mapping):
            raise GetgemsAPIError(
                "Unexpected GraphQL response payload", operation_name=operation_name
            )

        envelope = GraphQLResponse.model_validate(payload)
        if envelope.errors:
            messages = "; ".join(error.message for error in envelope.errors)
            if envelope.data is None:
                raise GetgemsAPIError(messages, operation_name=operation_name)
            log.warning("GraphQL %s returned partial errors: %s", operation_name, messages)
        return payload


if TYPE_CHECKING:
    from venuemark.config.getgems import get_getgems_config
    from venuemark.domain.ports import GraphQLTransport

    _transport_check: GraphQLTransport = GetgemsGraphQLClient(config=get_getgems_config())
