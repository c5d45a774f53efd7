"""Prefix search over net, node and ``NODE.PIN`` names.

Queries are case-insensitive: they are upper-cased before being compared
with the normalized names held by the store. A query is split at its first
``.`` into a node portion and a pin portion:

- nets and nodes prefix-match the node portion
- pins prefix-match the node portion on the node name and, when present,
  the pin portion on the pin name
"""

from __future__ import annotations

import logging

from netscope_core.exceptions import InvalidArgumentError
from netscope_core.graph.traversal import TraversalLimits, connected_nodes
from netscope_core.graph.view import GraphView
from netscope_core.naming import parse_pin_ref, split_query
from netscope_core.schemas import SearchResponse, SearchResult
from netscope_core.settings import Settings, get_settings

logger = logging.getLogger(__name__)

_TYPE_ORDER = {"net": 0, "node": 1, "pin": 2}


def _check_limit(limit: int) -> int:
    if limit < 1:
        raise InvalidArgumentError("limit must be at least 1")
    return limit


class SearchIndex:
    """Search adapter over a graph view, scoped per design."""

    def __init__(self, view: GraphView, settings: Settings | None = None) -> None:
        self._view = view
        self._settings = settings or get_settings()

    def search(self, design: str, query: str | None, limit: int | None = None) -> SearchResponse:
        """Prefix search across nets, nodes and pins.

        Args:
            design: Design name
            query: Search text, ``NODE`` or ``NODE.PIN`` prefix
            limit: Maximum hits per namespace (settings.search_limit if None)

        Returns:
            SearchResponse ordered by name, then type (net, node, pin)

        Raises:
            NotFoundError: If the design does not exist
        """
        limit = _check_limit(self._settings.search_limit if limit is None else limit)
        scope = self._view.find_design(design)
        node_query, pin_query = split_query(query)
        store = self._view.store

        results: list[SearchResult] = []
        for net in store.scan_nets(scope.name, node_query, limit):
            results.append(SearchResult(name=net.name, type="net"))
        for node in store.scan_nodes(scope.name, node_query, limit):
            results.append(SearchResult(name=node.name, type="node"))
        for pin in store.scan_pins(scope.name, node_query, pin_query, limit):
            results.append(
                SearchResult(
                    name=pin.qualified_name,
                    type="pin",
                    node_name=pin.node,
                    pin_name=pin.name,
                )
            )

        results.sort(key=lambda result: (result.name, _TYPE_ORDER[result.type]))
        logger.debug("Search %r in %s returned %d result(s)", query, scope.name, len(results))
        return SearchResponse(results=results)

    def connected_search(
        self,
        design: str,
        source: str | None,
        query: str | None = None,
        limit: int | None = None,
        enumerate_all: bool = False,
    ) -> SearchResponse:
        """Search only among nodes electrically reachable from ``source``.

        Args:
            design: Design name
            source: Source ``NODE`` or ``NODE.PIN``
            query: Optional ``NODE`` or ``NODE.PIN`` prefix filter
            limit: Maximum nodes returned; defaults to
                settings.connected_search_limit, or
                settings.connected_enumeration_limit when enumerating
            enumerate_all: Use the larger enumeration cap

        Returns:
            SearchResponse of node hits, each listing its reached pins that
            match the pin portion of the query

        Raises:
            InvalidArgumentError: If no source is given
            NotFoundError: If the design or source does not exist
        """
        ref = parse_pin_ref(source)
        if ref is None:
            raise InvalidArgumentError("Source node is required")
        if limit is None:
            limit = (
                self._settings.connected_enumeration_limit
                if enumerate_all
                else self._settings.connected_search_limit
            )
        limit = _check_limit(limit)

        scope = self._view.find_design(design)
        node_query, pin_query = split_query(query)
        neighborhood = connected_nodes(
            self._view,
            scope.name,
            ref,
            prefix=node_query,
            limit=limit,
            limits=TraversalLimits.from_settings(self._settings),
            pin_prefix=pin_query,
        )

        results = [
            SearchResult(name=node.name, type="node", pins=[pin.name for pin in node.pins])
            for node in neighborhood.nodes
        ]

        return SearchResponse(results=results, truncated=neighborhood.truncated)
