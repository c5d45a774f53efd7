"""Query entry points for schematic exploration.

SchematicExplorer composes the graph view, the traversal engine, the result
reducer and the search index behind one object. Its typed methods raise
:class:`~netscope_core.exceptions.SchematicError` subclasses; ``execute`` is
the single place where those errors become ``{"error", "category"}``
payloads.

Usage:
    explorer = SchematicExplorer(AgeGraphStore.from_settings())
    graph = explorer.find_paths("BOARD1", "U1", "U3")
    payload = explorer.execute("getNet", design="BOARD1", net="GND")
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from netscope_core.exceptions import InvalidArgumentError, SchematicError
from netscope_core.graph.reducer import reduce_paths
from netscope_core.graph.store import SchematicGraphStore
from netscope_core.graph.traversal import TraversalLimits, find_paths
from netscope_core.graph.view import GraphView
from netscope_core.naming import parse_pin_ref
from netscope_core.schemas import (
    DesignInfo,
    DesignList,
    DisplayGraph,
    ErrorPayload,
    NamedRef,
    NetDetail,
    NetPin,
    NodeDetail,
    NodePin,
    NodeRef,
    SearchResponse,
)
from netscope_core.search import SearchIndex
from netscope_core.settings import Settings, get_settings
from netscope_core.telemetry.spans import trace_graph_query

logger = logging.getLogger(__name__)


class SchematicExplorer:
    """Read-only queries over the schematic designs held by a store."""

    def __init__(self, store: SchematicGraphStore, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._view = GraphView(store)
        self._search = SearchIndex(self._view, self._settings)

    # =========================================================================
    # DESIGNS
    # =========================================================================

    def list_designs(self) -> DesignList:
        with trace_graph_query("list_designs") as span:
            designs = sorted(self._view.list_designs(), key=lambda design: design.name)
            span.set_attribute("schematic.results", len(designs))
            return DesignList(designs=[DesignInfo(name=design.name) for design in designs])

    def get_design(self, design: str) -> DesignInfo:
        with trace_graph_query("get_design", design):
            return DesignInfo(name=self._view.find_design(design).name)

    # =========================================================================
    # DETAIL
    # =========================================================================

    def get_node(self, design: str, node: str) -> NodeDetail:
        """Return a node, its part and every pin with the net it connects to.

        A pin on several nets is listed once per net; an unconnected pin is
        listed once without a net.

        Raises:
            NotFoundError: If the design or node does not exist
        """
        with trace_graph_query("get_node", design):
            scope = self._view.find_design(design)
            entity = self._view.find_node(scope.name, node)

            pins: list[NodePin] = []
            for pin in sorted(self._view.pins_of(entity), key=lambda p: p.name):
                nets = self._view.nets_of(pin)
                if not nets:
                    pins.append(
                        NodePin(pin_name=pin.name, pin_friendly_name=pin.friendly_name)
                    )
                for net in nets:
                    pins.append(
                        NodePin(
                            pin_name=pin.name,
                            pin_friendly_name=pin.friendly_name,
                            net=NamedRef(name=net.name),
                        )
                    )

            return NodeDetail(name=entity.name, part=NamedRef(name=entity.part), pins=pins)

    def get_net(self, design: str, net: str) -> NetDetail:
        """Return a net and every pin on it with the pin's node and part.

        Raises:
            NotFoundError: If the design or net does not exist
        """
        with trace_graph_query("get_net", design):
            scope = self._view.find_design(design)
            entity = self._view.find_net(scope.name, net)

            pins: list[NetPin] = []
            for pin in self._view.pins_on(entity):
                owner = self._view.owner_of(pin)
                pins.append(
                    NetPin(
                        pin_name=pin.name,
                        pin_friendly_name=pin.friendly_name,
                        node=NodeRef(name=owner.name, part=NamedRef(name=owner.part)),
                    )
                )

            return NetDetail(name=entity.name, pins=pins)

    # =========================================================================
    # SEARCH
    # =========================================================================

    def search(self, design: str, query: str | None, limit: int | None = None) -> SearchResponse:
        with trace_graph_query("search", design) as span:
            response = self._search.search(design, query, limit)
            span.set_attribute("schematic.results", len(response.results))
            return response

    def connected_search(
        self,
        design: str,
        source: str | None,
        query: str | None = None,
        limit: int | None = None,
        enumerate_all: bool = False,
    ) -> SearchResponse:
        with trace_graph_query("connected_search", design) as span:
            response = self._search.connected_search(
                design, source, query, limit=limit, enumerate_all=enumerate_all
            )
            span.set_attribute("schematic.results", len(response.results))
            span.set_attribute("schematic.truncated", response.truncated)
            return response

    # =========================================================================
    # PATHS
    # =========================================================================

    def find_paths(
        self,
        design: str,
        from_ref: str | None,
        to_ref: str | None,
        max_paths: int | None = None,
    ) -> DisplayGraph:
        """Find the connections between two nodes or pins as a display graph.

        Args:
            design: Design name
            from_ref: Source ``NODE`` or ``NODE.PIN``
            to_ref: Target ``NODE`` or ``NODE.PIN``
            max_paths: Maximum paths to collect (settings.path_max_paths if None)

        Returns:
            DisplayGraph; empty when the endpoints are not connected

        Raises:
            InvalidArgumentError: If an endpoint is missing
            NotFoundError: If the design or an endpoint does not exist
        """
        source = parse_pin_ref(from_ref)
        target = parse_pin_ref(to_ref)
        if source is None or target is None:
            raise InvalidArgumentError("Both from and to are required")
        if max_paths is None:
            max_paths = self._settings.path_max_paths

        with trace_graph_query("find_paths", design) as span:
            scope = self._view.find_design(design)
            result = find_paths(
                self._view,
                scope.name,
                source,
                target,
                max_paths=max_paths,
                limits=TraversalLimits.from_settings(self._settings),
            )
            graph = reduce_paths(
                self._view,
                result.paths,
                source=source.node,
                target=target.node,
                truncated=result.truncated,
            )
            span.set_attribute("schematic.paths", len(result.paths))
            span.set_attribute("schematic.nodes", len(graph.nodes))
            span.set_attribute("schematic.truncated", result.truncated)
            logger.debug(
                "Paths %s -> %s in %s: %d path(s), %d node(s), %d connection(s)",
                source,
                target,
                scope.name,
                len(result.paths),
                len(graph.nodes),
                len(graph.connections),
            )
            return graph

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def _handlers(self) -> dict[str, Callable[[dict[str, Any]], Any]]:
        return {
            "listDesigns": lambda p: self.list_designs(),
            "getDesign": lambda p: self.get_design(_required(p, "design")),
            "getNode": lambda p: self.get_node(_required(p, "design"), _required(p, "node")),
            "getNet": lambda p: self.get_net(_required(p, "design"), _required(p, "net")),
            "search": lambda p: self.search(
                _required(p, "design"), p.get("query"), p.get("limit")
            ),
            "connectedSearch": lambda p: self.connected_search(
                _required(p, "design"),
                p.get("source"),
                p.get("query"),
                limit=p.get("limit"),
                enumerate_all=bool(p.get("enumerate", False)),
            ),
            "findPaths": lambda p: self.find_paths(
                _required(p, "design"),
                p.get("from"),
                p.get("to"),
                max_paths=p.get("maxPaths"),
            ),
        }

    def execute(self, operation: str, **params: Any) -> dict[str, Any]:
        """Run a named operation and return a JSON-ready payload.

        Operation names and parameters use the wire spelling
        (``findPaths`` with ``from``/``to``/``maxPaths``, ``connectedSearch``
        with ``source``/``query``/``enumerate``). Any
        :class:`SchematicError` becomes an error payload; nothing else is
        returned alongside it.
        """
        try:
            handler = self._handlers().get(operation)
            if handler is None:
                raise InvalidArgumentError(f"Unknown operation: {operation}")
            return handler(params).to_payload()
        except SchematicError as e:
            if e.category == "internal":
                logger.error("%s failed: %s", operation, e, exc_info=True)
            else:
                logger.debug("%s rejected (%s): %s", operation, e.category, e)
            return ErrorPayload(error=str(e), category=e.category).to_payload()


def _required(params: dict[str, Any], name: str) -> str:
    value = params.get(name)
    if value is None or not str(value).strip():
        raise InvalidArgumentError(f"{name} is required")
    return str(value)
