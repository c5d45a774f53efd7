"""Bounded traversal over the pin/net connectivity layer.

This module provides the two traversal algorithms:
- find_paths: Depth-first enumeration of simple paths between two endpoints
- connected_nodes: Spanning expansion collecting every reachable node

Traversal only follows CONNECTS and MAPS_TO edges, never containment, so it
cannot wander into unrelated parts. Each call is guarded by a depth limit,
an expansion budget and a wall-clock timeout; a guard that trips ends the
traversal with the best results found so far and ``truncated`` set.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from dataclasses import dataclass, field

from netscope_core.exceptions import InvalidArgumentError, ResourceExceededError
from netscope_core.graph.model import (
    EdgeKind,
    Entity,
    Net,
    Path,
    PathStep,
    Pin,
    entity_sort_key,
    path_signature,
)
from netscope_core.graph.view import GraphView
from netscope_core.naming import PinRef, normalize_name
from netscope_core.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TraversalLimits:
    """Resource guards applied to a single traversal."""

    max_depth: int = 32
    """Maximum hops in one path."""

    max_expansions: int = 20000
    """Maximum neighbor visits before the traversal gives up."""

    timeout_seconds: float | None = 5.0
    """Wall-clock budget, None or 0 to disable."""

    skip_nets: frozenset[str] = frozenset()
    """Nets that are never entered (e.g. ground and supply rails)."""

    @classmethod
    def from_settings(cls, settings: Settings) -> TraversalLimits:
        return cls(
            max_depth=settings.path_max_depth,
            max_expansions=settings.traversal_max_expansions,
            timeout_seconds=settings.traversal_timeout_seconds or None,
            skip_nets=settings.skip_nets,
        )


@dataclass
class PathSearchResult:
    """Paths found between two endpoints."""

    paths: list[Path] = field(default_factory=list)
    truncated: bool = False
    stop_reason: str | None = None


@dataclass(frozen=True)
class ConnectedNode:
    """A node reached from the source, with the pins the expansion touched."""

    name: str
    pins: tuple[Pin, ...]


@dataclass
class NeighborhoodResult:
    """Nodes reachable from a source endpoint."""

    nodes: list[ConnectedNode] = field(default_factory=list)
    truncated: bool = False
    stop_reason: str | None = None


class _Budget:
    """Counts neighbor visits and watches the deadline."""

    def __init__(self, limits: TraversalLimits) -> None:
        self._remaining = limits.max_expansions
        self._deadline = (
            time.monotonic() + limits.timeout_seconds if limits.timeout_seconds else None
        )

    def spend(self) -> None:
        self._remaining -= 1
        if self._remaining < 0:
            raise ResourceExceededError("max_expansions")
        if self._deadline is not None and time.monotonic() > self._deadline:
            raise ResourceExceededError("timeout")


def _next_hops(
    view: GraphView,
    entity: Entity,
    limits: TraversalLimits,
    allow_maps_to: bool = True,
) -> list[tuple[Entity, EdgeKind]]:
    """Electrical neighbors of an entity, ordered by key.

    Pins continue to their nets and, when allowed, to their MAPS_TO aliases.
    Nets continue to their pins. Nets listed in ``skip_nets`` are never
    entered.
    """
    if not isinstance(entity, (Pin, Net)):
        return []

    hops = [
        (neighbor, kind)
        for neighbor, kind in view.electrical_neighbors(entity)
        if (allow_maps_to or kind is not EdgeKind.MAPS_TO)
        and not (isinstance(neighbor, Net) and neighbor.name in limits.skip_nets)
    ]
    hops.sort(key=lambda item: (entity_sort_key(item[0]), item[1].value))
    return hops


def _walk(
    view: GraphView,
    start: Pin,
    target_keys: set[str],
    limits: TraversalLimits,
    budget: _Budget,
) -> Iterator[Path]:
    """Yield simple paths from ``start`` to any target pin, depth first.

    An entity appears at most once per path. Reaching a target ends the
    branch; two MAPS_TO hops never follow each other.
    """
    first = PathStep(entity=start, edge_kind=None)
    if start.key in target_keys:
        yield (first,)
        return

    path: list[PathStep] = [first]
    on_path: set[str] = {start.key}
    stack: list[Iterator[tuple[Entity, EdgeKind]]] = [iter(_next_hops(view, start, limits))]

    while stack:
        step = next(stack[-1], None)
        if step is None:
            stack.pop()
            on_path.discard(path.pop().entity.key)
            continue

        neighbor, kind = step
        if neighbor.key in on_path:
            continue
        budget.spend()

        # len(path) is the hop count once the neighbor is appended
        if len(path) > limits.max_depth:
            continue

        hop = PathStep(entity=neighbor, edge_kind=kind)
        if neighbor.key in target_keys:
            yield (*path, hop)
            continue

        path.append(hop)
        on_path.add(neighbor.key)
        allow_maps_to = kind is not EdgeKind.MAPS_TO
        stack.append(iter(_next_hops(view, neighbor, limits, allow_maps_to)))


def find_paths(
    view: GraphView,
    design: str,
    source: PinRef,
    target: PinRef,
    max_paths: int = 10,
    limits: TraversalLimits | None = None,
) -> PathSearchResult:
    """Find up to ``max_paths`` distinct simple paths between two endpoints.

    Node-only endpoints expand to every pin of the node. The result is the
    first paths found in depth-first order, not necessarily the shortest.

    Args:
        view: Graph view to traverse
        design: Design name
        source: Source node or pin
        target: Target node or pin
        max_paths: Maximum number of paths to return
        limits: Resource guards (defaults if None)

    Returns:
        PathSearchResult; an empty path list means no connection was found

    Raises:
        InvalidArgumentError: If max_paths is not positive
        NotFoundError: If an endpoint does not resolve in the design
    """
    if max_paths < 1:
        raise InvalidArgumentError("max_paths must be at least 1")
    limits = limits or TraversalLimits()

    sources = view.resolve_pins(design, source)
    targets = view.resolve_pins(design, target)
    target_keys = {pin.key for pin in targets}

    result = PathSearchResult()
    seen: set[tuple[str, ...]] = set()
    budget = _Budget(limits)

    try:
        for start in sources:
            for path in _walk(view, start, target_keys, limits, budget):
                signature = path_signature(path)
                if signature in seen:
                    continue
                seen.add(signature)
                result.paths.append(path)
                if len(result.paths) >= max_paths:
                    result.truncated = True
                    result.stop_reason = "max_paths"
                    return result
    except ResourceExceededError as e:
        result.truncated = True
        result.stop_reason = e.reason
        logger.warning(
            "Path search %s -> %s in %s stopped early (%s) with %d path(s)",
            source,
            target,
            design,
            e.reason,
            len(result.paths),
        )

    logger.debug("Found %d path(s) from %s to %s", len(result.paths), source, target)
    return result


def connected_nodes(
    view: GraphView,
    design: str,
    source: PinRef,
    prefix: str | None = None,
    limit: int = 10,
    limits: TraversalLimits | None = None,
    pin_prefix: str | None = None,
) -> NeighborhoodResult:
    """Collect the nodes electrically reachable from a source endpoint.

    Performs a spanning expansion (every entity visited once) across
    CONNECTS and MAPS_TO edges. The source node itself is excluded.

    Args:
        view: Graph view to traverse
        design: Design name
        source: Source node or pin
        prefix: Optional node-name prefix filter
        limit: Maximum nodes to return
        limits: Resource guards (defaults if None)
        pin_prefix: Optional pin-name prefix; nodes without a matching
            reached pin are dropped before the limit is applied

    Returns:
        NeighborhoodResult with nodes ordered by name
    """
    if limit < 1:
        raise InvalidArgumentError("limit must be at least 1")
    limits = limits or TraversalLimits()

    sources = view.resolve_pins(design, source)
    source_node = normalize_name(source.node)
    name_prefix = normalize_name(prefix)
    pin_name_prefix = normalize_name(pin_prefix)

    result = NeighborhoodResult()
    reached: dict[str, dict[str, Pin]] = {}
    visited: set[str] = {pin.key for pin in sources}
    stack: list[Entity] = list(reversed(sources))
    budget = _Budget(limits)

    try:
        while stack:
            entity = stack.pop()
            if (
                isinstance(entity, Pin)
                and entity.node != source_node
                and entity.node.startswith(name_prefix)
                and entity.name.startswith(pin_name_prefix)
            ):
                reached.setdefault(entity.node, {})[entity.key] = entity

            for neighbor, _kind in reversed(_next_hops(view, entity, limits)):
                if neighbor.key in visited:
                    continue
                budget.spend()
                visited.add(neighbor.key)
                stack.append(neighbor)
    except ResourceExceededError as e:
        result.truncated = True
        result.stop_reason = e.reason
        logger.warning(
            "Connected node expansion from %s in %s stopped early (%s) after %d node(s)",
            source,
            design,
            e.reason,
            len(reached),
        )

    names = sorted(reached)
    if len(names) > limit:
        result.truncated = True
        result.stop_reason = result.stop_reason or "limit"

    result.nodes = [
        ConnectedNode(
            name=name,
            pins=tuple(sorted(reached[name].values(), key=lambda pin: pin.name)),
        )
        for name in names[:limit]
    ]
    return result
