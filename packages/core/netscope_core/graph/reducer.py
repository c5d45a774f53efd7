"""Fold raw traversal paths into a display graph.

Pins are shown through their owning node: a hop ``U1.1 -> NET_A`` becomes a
connection ``U1 -> NET_A`` labelled with pin ``1``. Every node/net appears
once and every ``(from, to)`` pair yields one connection, however many
paths traverse it.

The reduction is deterministic: paths are processed in signature order and
the output is sorted, so the same set of paths gives the same graph no
matter how it was supplied.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from netscope_core.graph.model import Entity, Net, Path, Pin, SchematicNode, path_signature
from netscope_core.graph.view import GraphView
from netscope_core.naming import normalize_name
from netscope_core.schemas import DisplayConnection, DisplayGraph, DisplayNode

logger = logging.getLogger(__name__)

_TYPE_ORDER = {"net": 0, "node": 1, "pin": 2}


class _Reduction:
    """Accumulates display nodes and connections for one reduce call."""

    def __init__(self, view: GraphView, source: str | None, target: str | None) -> None:
        self._view = view
        self._source = normalize_name(source) or None
        self._target = normalize_name(target) or None
        self._owners: dict[str, SchematicNode] = {}
        self._pins: dict[str, Pin] = {}
        self.nodes: dict[str, DisplayNode] = {}
        self.connections: dict[tuple[str, str], DisplayConnection] = {}

    def _owner(self, pin: Pin) -> SchematicNode:
        owner = self._owners.get(pin.key)
        if owner is None:
            owner = self._view.owner_of(pin)
            self._owners[pin.key] = owner
        return owner

    def _stored_pin(self, pin: Pin) -> Pin:
        """Return the pin as held by the store, with its friendly name."""
        stored = self._pins.get(pin.key)
        if stored is None:
            stored = self._view.find_pin(pin.design, pin.node, pin.name)[0]
            self._pins[pin.key] = stored
        return stored

    def _role(self, name: str) -> str | None:
        if name == self._source:
            return "source"
        if name == self._target:
            return "target"
        return None

    def display_name(self, entity: Entity) -> str | None:
        """Resolve an entity to its display identity, inserting it once."""
        if isinstance(entity, Pin):
            owner = self._owner(entity)
            if owner.name not in self.nodes:
                self.nodes[owner.name] = DisplayNode(
                    name=owner.name,
                    type="node",
                    part_name=owner.part or None,
                    role=self._role(owner.name),
                )
            return owner.name
        if isinstance(entity, Net):
            if entity.name not in self.nodes:
                self.nodes[entity.name] = DisplayNode(name=entity.name, type="net")
            return entity.name
        logger.debug("Ignoring %s %s in path", entity.kind.value, entity.qualified_name)
        return None

    def add_path(self, path: Path) -> None:
        names = [self.display_name(step.entity) for step in path]
        for index in range(1, len(path)):
            from_name, to_name = names[index - 1], names[index]
            if from_name is None or to_name is None or from_name == to_name:
                continue
            if (from_name, to_name) in self.connections or (to_name, from_name) in self.connections:
                continue

            previous, current = path[index - 1].entity, path[index].entity
            pin = previous if isinstance(previous, Pin) else current
            if not isinstance(pin, Pin):
                continue
            pin = self._stored_pin(pin)
            self.connections[(from_name, to_name)] = DisplayConnection(
                from_=from_name,
                to=to_name,
                pin_name=pin.name,
                pin_friendly_name=pin.friendly_name,
            )


def reduce_paths(
    view: GraphView,
    paths: Iterable[Path],
    source: str | None = None,
    target: str | None = None,
    truncated: bool = False,
) -> DisplayGraph:
    """Reduce raw paths into a de-duplicated display graph.

    Args:
        view: Graph view used to resolve pins to their owning nodes
        paths: Raw paths from the traversal engine
        source: Name of the query's source node, tagged ``role="source"``
        target: Name of the query's target node, tagged ``role="target"``
        truncated: Whether the traversal stopped at a bound

    Returns:
        DisplayGraph with nodes sorted by (name, type) and connections sorted
        by (from, to)
    """
    unique: dict[tuple[str, ...], Path] = {}
    for path in paths:
        if path:
            unique.setdefault(path_signature(path), path)

    reduction = _Reduction(view, source, target)
    for signature in sorted(unique):
        reduction.add_path(unique[signature])

    nodes = sorted(
        reduction.nodes.values(),
        key=lambda node: (node.name, _TYPE_ORDER[node.type]),
    )
    connections = [reduction.connections[key] for key in sorted(reduction.connections)]
    return DisplayGraph(nodes=nodes, connections=connections, truncated=truncated)
