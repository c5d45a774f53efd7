"""Typed read-only view over a schematic graph store.

The view normalizes every name before it reaches the store and turns
missing entities into :class:`~netscope_core.exceptions.NotFoundError`.
"""

from __future__ import annotations

from collections.abc import Iterable

from netscope_core.exceptions import NotFoundError
from netscope_core.graph.model import (
    CONNECTIVITY_EDGES,
    Design,
    EdgeKind,
    Entity,
    Net,
    Part,
    Pin,
    SchematicNode,
)
from netscope_core.graph.store import SchematicGraphStore
from netscope_core.naming import PinRef, normalize_name


class GraphView:
    """Name-based access to designs, nodes, pins and nets."""

    def __init__(self, store: SchematicGraphStore) -> None:
        self._store = store

    @property
    def store(self) -> SchematicGraphStore:
        return self._store

    def list_designs(self) -> list[Design]:
        return self._store.list_designs()

    def find_design(self, design: str) -> Design:
        """Look up a design.

        Raises:
            NotFoundError: If the design does not exist
        """
        entity = self._store.get_design(normalize_name(design))
        if entity is None:
            raise NotFoundError(f"Design not found: {design}")
        return entity

    def find_part(self, design: str, name: str) -> Part:
        entity = self._store.get_part(normalize_name(design), normalize_name(name))
        if entity is None:
            raise NotFoundError(f"Part not found: {name}")
        return entity

    def find_node(self, design: str, name: str) -> SchematicNode:
        entity = self._store.get_node(normalize_name(design), normalize_name(name))
        if entity is None:
            raise NotFoundError(f"Node not found: {name}")
        return entity

    def find_net(self, design: str, name: str) -> Net:
        entity = self._store.get_net(normalize_name(design), normalize_name(name))
        if entity is None:
            raise NotFoundError(f"Net not found: {name}")
        return entity

    def find_pin(self, design: str, node: str, pin: str | None = None) -> list[Pin]:
        """Resolve a pin, or every pin of a node when ``pin`` is omitted.

        Args:
            design: Design name
            node: Node name
            pin: Pin name, or None for all pins of the node

        Returns:
            List with the single matching pin, or all pins of the node

        Raises:
            NotFoundError: If the node or the named pin does not exist
        """
        owner = self.find_node(design, node)
        if pin is None:
            return self._store.get_pins(owner.design, owner.name)
        entity = self._store.get_pin(owner.design, owner.name, normalize_name(pin))
        if entity is None:
            raise NotFoundError(f"Pin not found: {owner.name}.{normalize_name(pin)}")
        return [entity]

    def resolve_pins(self, design: str, ref: PinRef) -> list[Pin]:
        """Resolve a ``NODE`` / ``NODE.PIN`` reference to its pins."""
        return self.find_pin(design, ref.node, ref.pin)

    def owner_of(self, pin: Pin) -> SchematicNode:
        """Return the node that contains a pin."""
        return self.find_node(pin.design, pin.node)

    def pins_of(self, node: SchematicNode) -> list[Pin]:
        return self._store.get_pins(node.design, node.name)

    def neighbors(
        self,
        entity: Entity,
        edge_kinds: Iterable[EdgeKind] | None = None,
    ) -> list[tuple[Entity, EdgeKind]]:
        """Return the neighbors of an entity over the given edge kinds."""
        return self._store.get_neighbors(entity, edge_kinds)

    def nets_of(self, pin: Pin) -> list[Net]:
        """Return the nets a pin connects to, ordered by name."""
        return [
            neighbor
            for neighbor, _kind in self._store.get_neighbors(pin, [EdgeKind.CONNECTS])
            if isinstance(neighbor, Net)
        ]

    def pins_on(self, net: Net) -> list[Pin]:
        """Return the pins connected to a net, ordered by ``NODE.PIN``."""
        return [
            neighbor
            for neighbor, _kind in self._store.get_neighbors(net, [EdgeKind.CONNECTS])
            if isinstance(neighbor, Pin)
        ]

    def electrical_neighbors(self, entity: Entity) -> list[tuple[Entity, EdgeKind]]:
        """Neighbors over CONNECTS and MAPS_TO edges only."""
        return self._store.get_neighbors(entity, CONNECTIVITY_EDGES)
