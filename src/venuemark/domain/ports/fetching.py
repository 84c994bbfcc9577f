"""Ports for issuing the engine's own queries against the marketplace API."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping


@runtime_checkable
class GraphQLTransport(Protocol):
    """Pass-through call capability provided by the transport collaborator."""

    async def execute(
        self,
        operation_name: str,
        query: str,
        variables: Mapping[str, object],
    ) -> object:
        """Send one GraphQL operation and return the parsed response body."""
        ...


__all__ = ["GraphQLTransport"]
