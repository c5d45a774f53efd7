"""Schematic connectivity graph.

This module provides a typed graph of schematic designs and the
algorithms that explore it.

Main components:
- SchematicGraphStore: Query contract for backing stores
- SchematicGraph: In-memory store with lookup indices
- AgeGraphStore: Apache AGE (PostgreSQL) store
- GraphView: Name-normalizing view raising NotFoundError
- Traversal functions: find_paths, connected_nodes
- reduce_paths: Fold raw paths into a display graph
"""

from netscope_core.graph.age import AgeGraphStore, ensure_read_only_cypher
from netscope_core.graph.model import (
    CONNECTIVITY_EDGES,
    Design,
    EdgeKind,
    Entity,
    EntityKind,
    Net,
    Part,
    Path,
    PathStep,
    Pin,
    SchematicNode,
    path_signature,
)
from netscope_core.graph.reducer import reduce_paths
from netscope_core.graph.store import SchematicGraph, SchematicGraphStore
from netscope_core.graph.traversal import (
    ConnectedNode,
    NeighborhoodResult,
    PathSearchResult,
    TraversalLimits,
    connected_nodes,
    find_paths,
)
from netscope_core.graph.view import GraphView

__all__ = [
    "CONNECTIVITY_EDGES",
    "AgeGraphStore",
    "ConnectedNode",
    "Design",
    "EdgeKind",
    "Entity",
    "EntityKind",
    "GraphView",
    "NeighborhoodResult",
    "Net",
    "Part",
    "Path",
    "PathSearchResult",
    "PathStep",
    "Pin",
    "SchematicGraph",
    "SchematicGraphStore",
    "SchematicNode",
    "TraversalLimits",
    "connected_nodes",
    "ensure_read_only_cypher",
    "find_paths",
    "path_signature",
    "reduce_paths",
]
