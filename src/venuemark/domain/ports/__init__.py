"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import GraphQLTransport
from .lookup import LookupTable

__all__ = ["GraphQLTransport", "LookupTable"]
