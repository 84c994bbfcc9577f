"""Bounded-depth search for item-shaped fragments inside unknown JSON graphs.

The GraphQL API and the embedded page state both nest the data we need at
depths and under field names we do not control. Everything here is a single
traversal (``walk``) composed with small recognizer predicates, so the search
never assumes a field exists and never raises on odd input. The data is assumed
to be acyclic JSON; the depth bound is what stops runaway recursion.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

type Fragment = Mapping[str, object]

TYPENAME_FIELD: Final[str] = "__typename"
ADDRESS_FIELD: Final[str] = "address"
ITEM_TYPENAME: Final[str] = "NftItem"
EDGES_FIELD: Final[str] = "edges"
NODE_FIELD: Final[str] = "node"

# Wrapper fields that hold a single item regardless of its own shape.
ITEM_WRAPPER_FIELDS: Final[tuple[str, ...]] = (
    "nftItemByAddress",
    "alphaNftItemByAddress",
    "nftItem",
)
# Wrapper fields that only count when the wrapped value carries an address.
ADDRESSED_WRAPPER_FIELDS: Final[tuple[str, ...]] = ("item",)


def _children(node: object) -> Iterator[object]:
    if isinstance(node, Mapping):
        yield from node.values()
    elif isinstance(node, Sequence) and not isinstance(node, (str, bytes, bytearray)):
        yield from node


def walk(
    root: object,
    *,
    max_depth: int,
    descend: Callable[[Fragment], bool] | None = None,
) -> Iterator[Fragment]:
    """Yield every mapping under ``root`` in depth-first pre-order.

    ``root`` sits at depth 0; nothing deeper than ``max_depth`` is visited.
    Sequences are traversed but not yielded and consume one level of depth,
    matching how JSON arrays nest. ``descend`` may veto recursion into a
    yielded fragment.
    """

    stack: list[tuple[object, int]] = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        if depth > max_depth:
            continue
        if isinstance(node, Mapping):
            yield node
            if descend is not None and not descend(node):
                continue
        children = list(_children(node))
        stack.extend((child, depth + 1) for child in reversed(children))


def non_empty_str(value: object) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def is_item_fragment(fragment: Fragment) -> bool:
    return (
        fragment.get(TYPENAME_FIELD) == ITEM_TYPENAME
        and non_empty_str(fragment.get(ADDRESS_FIELD)) is not None
    )


def unwrap_item(fragment: Fragment) -> Fragment | None:
    """Return the item held by ``fragment`` itself or by one of its wrapper fields."""

    if is_item_fragment(fragment):
        return fragment
    for field_name in ITEM_WRAPPER_FIELDS:
        wrapped = fragment.get(field_name)
        if isinstance(wrapped, Mapping) and wrapped:
            return wrapped
    for field_name in ADDRESSED_WRAPPER_FIELDS:
        wrapped = fragment.get(field_name)
        if isinstance(wrapped, Mapping) and non_empty_str(wrapped.get(ADDRESS_FIELD)):
            return wrapped
    return None


def edge_nodes(fragment: Fragment) -> Iterator[Fragment]:
    """Yield the ``node`` of each ``{node}`` wrapper in an ``edges`` list."""

    edges = fragment.get(EDGES_FIELD)
    if not isinstance(edges, Sequence) or isinstance(edges, (str, bytes, bytearray)):
        return
    for edge in edges:
        if isinstance(edge, Mapping):
            node = edge.get(NODE_FIELD)
            if isinstance(node, Mapping):
                yield node


def find_edge_list_items(root: object, max_depth: int = 15) -> list[Fragment]:
    """Collect every addressed node reachable through any ``edges`` list.

    Each address is returned once per call even when the same node shows up in
    several connections of one response.
    """

    seen: set[str] = set()
    nodes: list[Fragment] = []
    for fragment in walk(root, max_depth=max_depth):
        for node in edge_nodes(fragment):
            address = non_empty_str(node.get(ADDRESS_FIELD))
            if address is None or address in seen:
                continue
            seen.add(address)
            nodes.append(node)
    return nodes


def find_item_candidates(root: object, max_depth: int = 10) -> list[Fragment]:
    """Return item-like fragments in depth-first order.

    A matching fragment is not searched further, so an item's own nested
    fields never produce a second candidate.
    """

    candidates: list[Fragment] = []
    matched: set[int] = set()

    def descend(fragment: Fragment) -> bool:
        return id(fragment) not in matched

    for fragment in walk(root, max_depth=max_depth, descend=descend):
        item = unwrap_item(fragment)
        if item is not None:
            matched.add(id(fragment))
            candidates.append(item)
    return candidates


def find_item_candidate(root: object, max_depth: int = 10) -> Fragment | None:
    for fragment in walk(root, max_depth=max_depth):
        item = unwrap_item(fragment)
        if item is not None:
            return item
    return None


def mapping_at(root: object, *path: str) -> Fragment | None:
    """Follow ``path`` through nested mappings; ``None`` as soon as a step is missing."""

    node = root
    for key in path:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return node if isinstance(node, Mapping) else None
