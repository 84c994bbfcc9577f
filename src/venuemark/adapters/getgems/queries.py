"""GraphQL documents issued by the engine itself."""

from __future__ import annotations

import json
from typing import Final

from venuemark.config.getgems import COLLECTION_SEARCH_PAGE_SIZE

_SALE_FIELDS: Final[str] = """
      sale {
        __typename
        ... on NftSaleFixPrice {
          address
          fullPrice
          networkFee
          currency
        }
        ... on NftSaleAuction {
          address
          networkFee
          marketplace
        }
        ... on TelemintAuction {
          marketplace
        }
      }"""

ITEM_BY_ADDRESS_OPERATION: Final[str] = "alphaNftItemByAddress"
ITEM_BY_ADDRESS_QUERY: Final[str] = f"""
query alphaNftItemByAddress($address: String!) {{
  alphaNftItemByAddress(address: $address) {{
    __typename
    address
    name
    kind{_SALE_FIELDS}
  }}
}}
"""

COLLECTION_SEARCH_OPERATION: Final[str] = "nftSearch"
COLLECTION_SEARCH_QUERY: Final[str] = f"""
query nftSearch($query: String!, $count: Int!, $cursor: String) {{
  alphaNftItemSearch(query: $query, first: $count, after: $cursor) {{
    edges {{
      node {{
        __typename
        address
        name
        kind{_SALE_FIELDS}
      }}
    }}
  }}
}}
"""


def item_by_address_variables(address: str) -> dict[str, object]:
    return {"address": address}


def collection_search_variables(
    collection_address: str,
    *,
    count: int = COLLECTION_SEARCH_PAGE_SIZE,
) -> dict[str, object]:
    """Variables for the fixed-price items of one collection (first page only)."""

    search = {"$and": [{"collectionAddress": collection_address}, {"saleType": "fix_price"}]}
    return {"query": json.dumps(search), "count": count, "cursor": None}
