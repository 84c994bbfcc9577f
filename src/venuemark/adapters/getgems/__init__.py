"""Public interface for the Getgems adapter."""

from __future__ import annotations

from .cache_table import GqlCacheTable, dehydrated_queries, page_props, query_data
from .client import GetgemsAPIError, GetgemsGraphQLClient
from .interception import InterceptedExchange, decode_json_body, matches_endpoint, operation_name
from .page_state import extract_next_data, load_page_document
from .routes import PageKind, PageLocation
from .schema import NftItemPayload, SalePayload
from .translator import parse_item, parse_listing

__all__ = [
    "GetgemsAPIError",
    "GetgemsGraphQLClient",
    "GqlCacheTable",
    "InterceptedExchange",
    "NftItemPayload",
    "PageKind",
    "PageLocation",
    "SalePayload",
    "decode_json_body",
    "dehydrated_queries",
    "extract_next_data",
    "load_page_document",
    "matches_endpoint",
    "operation_name",
    "page_props",
    "parse_item",
    "parse_listing",
    "query_data",
]
