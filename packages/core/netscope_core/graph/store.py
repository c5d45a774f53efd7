"""Graph store contract and in-memory implementation.

This module provides:
- SchematicGraphStore: The query contract every backing store implements
- SchematicGraph: In-memory store with indices for efficient lookup

Stores receive names that are already normalized (upper-cased); the
:class:`~netscope_core.graph.view.GraphView` takes care of that.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from netscope_core.graph.model import (
    Design,
    EdgeKind,
    Entity,
    Net,
    Part,
    Pin,
    SchematicNode,
    entity_sort_key,
)
from netscope_core.naming import normalize_name, parse_pin_ref


class SchematicGraphStore(ABC):
    """Contract for schematic graph stores.

    Implementations answer four query shapes: exact-name lookups scoped to a
    design, pin listing per node, neighbor listing filtered by edge kind, and
    prefix scans over names. Path enumeration and spanning expansion are
    built on top of these by the traversal engine.

    Implementation Notes:
        - Lookups return None when the entity does not exist
        - Listings and scans are ordered by qualified name
        - Store failures must be raised as StoreUnavailableError
    """

    @abstractmethod
    def list_designs(self) -> list[Design]:
        """Return every design, ordered by name."""

    @abstractmethod
    def get_design(self, name: str) -> Design | None:
        """Look up a design by name."""

    @abstractmethod
    def get_part(self, design: str, name: str) -> Part | None:
        """Look up a part by name within a design."""

    @abstractmethod
    def get_node(self, design: str, name: str) -> SchematicNode | None:
        """Look up a schematic node by name within a design."""

    @abstractmethod
    def get_net(self, design: str, name: str) -> Net | None:
        """Look up a net by name within a design."""

    @abstractmethod
    def get_pin(self, design: str, node: str, name: str) -> Pin | None:
        """Look up a pin by node and pin name within a design."""

    @abstractmethod
    def get_pins(self, design: str, node: str) -> list[Pin]:
        """Return all pins of a node, ordered by pin name."""

    @abstractmethod
    def get_neighbors(
        self,
        entity: Entity,
        edge_kinds: Iterable[EdgeKind] | None = None,
    ) -> list[tuple[Entity, EdgeKind]]:
        """Return neighbors of an entity in both directions.

        Args:
            entity: The entity whose edges are followed
            edge_kinds: Edge kinds to follow (None for all)

        Returns:
            List of (neighbor, edge_kind) tuples ordered by neighbor key
        """

    @abstractmethod
    def scan_nets(self, design: str, prefix: str, limit: int) -> list[Net]:
        """Return nets whose name starts with prefix."""

    @abstractmethod
    def scan_nodes(self, design: str, prefix: str, limit: int) -> list[SchematicNode]:
        """Return nodes whose name starts with prefix."""

    @abstractmethod
    def scan_pins(
        self,
        design: str,
        node_prefix: str,
        pin_prefix: str,
        limit: int,
    ) -> list[Pin]:
        """Return pins whose node name and pin name start with the prefixes."""


class SchematicGraph(SchematicGraphStore):
    """In-memory schematic graph.

    Provides efficient lookup by:
    - Entity name within a design (direct)
    - Node (all pins of a node)
    - Entity key (adjacency in both directions)

    Builder methods normalize names, and adding an entity that already
    exists returns the existing one.
    """

    def __init__(self) -> None:
        """Initialize an empty graph."""
        self._designs: dict[str, Design] = {}
        self._parts: dict[tuple[str, str], Part] = {}
        self._nodes: dict[tuple[str, str], SchematicNode] = {}
        self._nets: dict[tuple[str, str], Net] = {}
        self._pins: dict[tuple[str, str, str], Pin] = {}

        # Indices for efficient lookup
        self._pins_by_node: dict[tuple[str, str], list[Pin]] = {}
        self._adjacency: dict[str, list[tuple[Entity, EdgeKind]]] = {}

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def add_design(self, name: str) -> Design:
        """Add a design to the graph."""
        name = normalize_name(name)
        if not name:
            raise ValueError("Design name must not be empty")
        design = self._designs.get(name)
        if design is None:
            design = Design(name=name)
            self._designs[name] = design
        return design

    def add_part(self, design: str, name: str) -> Part:
        """Add a part to an existing design."""
        parent = self._require_design(design)
        name = normalize_name(name)
        part = self._parts.get((parent.name, name))
        if part is None:
            part = Part(design=parent.name, name=name)
            self._parts[(parent.name, name)] = part
            self._link(parent, part, EdgeKind.HAS_PART)
        return part

    def add_node(self, design: str, part: str, name: str) -> SchematicNode:
        """Add a schematic node owned by an existing part.

        Raises:
            ValueError: If the part is unknown or the node already belongs to
                another part
        """
        design = normalize_name(design)
        owner = self._parts.get((design, normalize_name(part)))
        if owner is None:
            raise ValueError(f"Unknown part {part!r} in design {design!r}")
        name = normalize_name(name)
        node = self._nodes.get((design, name))
        if node is not None:
            if node.part != owner.name:
                raise ValueError(f"Node {name!r} already belongs to part {node.part!r}")
            return node
        node = SchematicNode(design=design, name=name, part=owner.name)
        self._nodes[(design, name)] = node
        self._pins_by_node[(design, name)] = []
        self._link(owner, node, EdgeKind.HAS_NODE)
        return node

    def add_pin(
        self,
        design: str,
        node: str,
        name: str,
        friendly_name: str | None = None,
    ) -> Pin:
        """Add a pin to an existing node."""
        design = normalize_name(design)
        owner = self._nodes.get((design, normalize_name(node)))
        if owner is None:
            raise ValueError(f"Unknown node {node!r} in design {design!r}")
        name = normalize_name(name)
        pin = self._pins.get((design, owner.name, name))
        if pin is None:
            pin = Pin(design=design, node=owner.name, name=name, friendly_name=friendly_name or None)
            self._pins[(design, owner.name, name)] = pin
            pins = self._pins_by_node[(design, owner.name)]
            pins.append(pin)
            pins.sort(key=lambda p: p.name)
            self._link(owner, pin, EdgeKind.HAS_PIN)
        return pin

    def add_net(self, design: str, name: str) -> Net:
        """Add a net to an existing design."""
        parent = self._require_design(design)
        name = normalize_name(name)
        net = self._nets.get((parent.name, name))
        if net is None:
            net = Net(design=parent.name, name=name)
            self._nets[(parent.name, name)] = net
            self._link(parent, net, EdgeKind.HAS_NET)
        return net

    def connect(self, design: str, net: str, node: str, pin: str) -> None:
        """Connect an existing pin to an existing net."""
        design = normalize_name(design)
        net_entity = self._nets.get((design, normalize_name(net)))
        if net_entity is None:
            raise ValueError(f"Unknown net {net!r} in design {design!r}")
        pin_entity = self._require_pin(design, node, pin)
        self._link(net_entity, pin_entity, EdgeKind.CONNECTS)

    def map_pins(self, design: str, node: str, pin_a: str, pin_b: str) -> None:
        """Declare two pins of the same node as aliases of each other."""
        first = self._require_pin(design, node, pin_a)
        second = self._require_pin(design, node, pin_b)
        if first == second:
            raise ValueError("A pin cannot map to itself")
        self._link(first, second, EdgeKind.MAPS_TO)

    def _require_design(self, name: str) -> Design:
        design = self._designs.get(normalize_name(name))
        if design is None:
            raise ValueError(f"Unknown design {name!r}")
        return design

    def _require_pin(self, design: str, node: str, pin: str) -> Pin:
        key = (normalize_name(design), normalize_name(node), normalize_name(pin))
        entity = self._pins.get(key)
        if entity is None:
            raise ValueError(f"Unknown pin {node}.{pin} in design {design!r}")
        return entity

    def _link(self, source: Entity, target: Entity, edge_kind: EdgeKind) -> None:
        forward = self._adjacency.setdefault(source.key, [])
        if (target, edge_kind) in forward:
            return
        forward.append((target, edge_kind))
        self._adjacency.setdefault(target.key, []).append((source, edge_kind))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_designs(self) -> list[Design]:
        return [self._designs[name] for name in sorted(self._designs)]

    def get_design(self, name: str) -> Design | None:
        return self._designs.get(name)

    def get_part(self, design: str, name: str) -> Part | None:
        return self._parts.get((design, name))

    def get_node(self, design: str, name: str) -> SchematicNode | None:
        return self._nodes.get((design, name))

    def get_net(self, design: str, name: str) -> Net | None:
        return self._nets.get((design, name))

    def get_pin(self, design: str, node: str, name: str) -> Pin | None:
        return self._pins.get((design, node, name))

    def get_pins(self, design: str, node: str) -> list[Pin]:
        return list(self._pins_by_node.get((design, node), []))

    def get_neighbors(
        self,
        entity: Entity,
        edge_kinds: Iterable[EdgeKind] | None = None,
    ) -> list[tuple[Entity, EdgeKind]]:
        allowed = set(edge_kinds) if edge_kinds is not None else None
        results = [
            (neighbor, kind)
            for neighbor, kind in self._adjacency.get(entity.key, [])
            if allowed is None or kind in allowed
        ]
        results.sort(key=lambda item: (entity_sort_key(item[0]), item[1].value))
        return results

    def scan_nets(self, design: str, prefix: str, limit: int) -> list[Net]:
        matches = sorted(
            (net for (d, name), net in self._nets.items() if d == design and name.startswith(prefix)),
            key=lambda net: net.name,
        )
        return matches[:limit]

    def scan_nodes(self, design: str, prefix: str, limit: int) -> list[SchematicNode]:
        matches = sorted(
            (
                node
                for (d, name), node in self._nodes.items()
                if d == design and name.startswith(prefix)
            ),
            key=lambda node: node.name,
        )
        return matches[:limit]

    def scan_pins(
        self,
        design: str,
        node_prefix: str,
        pin_prefix: str,
        limit: int,
    ) -> list[Pin]:
        matches = sorted(
            (
                pin
                for (d, node, name), pin in self._pins.items()
                if d == design and node.startswith(node_prefix) and name.startswith(pin_prefix)
            ),
            key=lambda pin: pin.qualified_name,
        )
        return matches[:limit]

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize graph to dictionary.

        Returns:
            Dictionary with one entry per design, holding its parts (with
            nodes and pins), nets (with ``NODE.PIN`` members) and pin maps
        """
        designs: list[dict[str, Any]] = []
        for design in self.list_designs():
            parts = []
            for part in sorted(
                (p for (d, _), p in self._parts.items() if d == design.name),
                key=lambda p: p.name,
            ):
                nodes = []
                for node in sorted(
                    (n for n in self._nodes.values() if n.design == design.name and n.part == part.name),
                    key=lambda n: n.name,
                ):
                    nodes.append(
                        {
                            "name": node.name,
                            "pins": [
                                {"name": pin.name, "friendly_name": pin.friendly_name}
                                for pin in self.get_pins(design.name, node.name)
                            ],
                        }
                    )
                parts.append({"name": part.name, "nodes": nodes})

            nets = []
            for net in self.scan_nets(design.name, "", len(self._nets)):
                members = [
                    neighbor.qualified_name
                    for neighbor, kind in self.get_neighbors(net, [EdgeKind.CONNECTS])
                ]
                nets.append({"name": net.name, "pins": members})

            pin_maps = []
            for (d, _, _), pin in sorted(self._pins.items()):
                if d != design.name:
                    continue
                for neighbor, _kind in self.get_neighbors(pin, [EdgeKind.MAPS_TO]):
                    if pin.key < neighbor.key:
                        pin_maps.append([pin.qualified_name, neighbor.qualified_name])

            designs.append(
                {"name": design.name, "parts": parts, "nets": nets, "pin_maps": pin_maps}
            )
        return {"designs": designs}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SchematicGraph:
        """Deserialize graph from dictionary.

        Args:
            data: Dictionary representation (see :meth:`to_dict`)

        Returns:
            SchematicGraph instance
        """
        graph = cls()
        for design_data in data.get("designs", []):
            design = graph.add_design(design_data["name"])
            for part_data in design_data.get("parts", []):
                part = graph.add_part(design.name, part_data["name"])
                for node_data in part_data.get("nodes", []):
                    node = graph.add_node(design.name, part.name, node_data["name"])
                    for pin_data in node_data.get("pins", []):
                        if isinstance(pin_data, str):
                            graph.add_pin(design.name, node.name, pin_data)
                        else:
                            graph.add_pin(
                                design.name,
                                node.name,
                                pin_data["name"],
                                pin_data.get("friendly_name"),
                            )
            for net_data in design_data.get("nets", []):
                net = graph.add_net(design.name, net_data["name"])
                for member in net_data.get("pins", []):
                    ref = parse_pin_ref(member)
                    if ref is None or ref.pin is None:
                        raise ValueError(f"Net member must be NODE.PIN, got {member!r}")
                    graph.connect(design.name, net.name, ref.node, ref.pin)
            for first, second in design_data.get("pin_maps", []):
                ref_a = parse_pin_ref(first)
                ref_b = parse_pin_ref(second)
                if ref_a is None or ref_b is None or ref_a.node != ref_b.node:
                    raise ValueError(f"Pin map must join pins of one node: {first!r}, {second!r}")
                graph.map_pins(design.name, ref_a.node, ref_a.pin or "", ref_b.pin or "")
        return graph
