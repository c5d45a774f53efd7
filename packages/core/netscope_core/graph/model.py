"""Typed entities and edges of the schematic connectivity graph.

This module provides the core data structures for representing a schematic:
- EntityKind / EdgeKind: The node labels and relationship types
- Design, Part, SchematicNode, Pin, Net: Immutable named entities
- PathStep: One hop of a traversed path

Entities compare and hash by (kind, design, qualified name) only, so two
lookups of the same pin are interchangeable even when auxiliary attributes
such as the friendly name differ.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Union


class EntityKind(Enum):
    """Types of entities in the schematic graph."""

    DESIGN = "design"
    PART = "part"
    NODE = "node"
    PIN = "pin"
    NET = "net"


class EdgeKind(Enum):
    """Types of edges in the schematic graph."""

    HAS_PART = "HAS_PART"  # Design contains part
    HAS_NODE = "HAS_NODE"  # Part contains node
    HAS_PIN = "HAS_PIN"  # Node contains pin
    HAS_NET = "HAS_NET"  # Design scopes net
    CONNECTS = "CONNECTS"  # Net <-> pin electrical connection
    MAPS_TO = "MAPS_TO"  # Pin <-> pin alias within one node


CONNECTIVITY_EDGES: frozenset[EdgeKind] = frozenset({EdgeKind.CONNECTS, EdgeKind.MAPS_TO})


@dataclass(frozen=True)
class Design:
    """A named schematic scope."""

    kind: ClassVar[EntityKind] = EntityKind.DESIGN

    name: str

    @property
    def design(self) -> str:
        return self.name

    @property
    def qualified_name(self) -> str:
        return self.name

    @property
    def key(self) -> str:
        return f"design:{self.name}"


@dataclass(frozen=True)
class Part:
    """A physical component instance inside a design."""

    kind: ClassVar[EntityKind] = EntityKind.PART

    design: str
    name: str

    @property
    def qualified_name(self) -> str:
        return self.name

    @property
    def key(self) -> str:
        return f"part:{self.design}:{self.name}"


@dataclass(frozen=True)
class SchematicNode:
    """A logical terminal grouping of pins, owned by one part."""

    kind: ClassVar[EntityKind] = EntityKind.NODE

    design: str
    name: str
    part: str = field(default="", compare=False)
    """Name of the owning part."""

    @property
    def qualified_name(self) -> str:
        return self.name

    @property
    def key(self) -> str:
        return f"node:{self.design}:{self.name}"


@dataclass(frozen=True)
class Pin:
    """A connection point on a node, addressable as ``NODE.PIN``."""

    kind: ClassVar[EntityKind] = EntityKind.PIN

    design: str
    node: str
    name: str
    friendly_name: str | None = field(default=None, compare=False)
    """Optional alias shown next to the pin number (e.g. "PA9_TX")."""

    @property
    def qualified_name(self) -> str:
        return f"{self.node}.{self.name}"

    @property
    def key(self) -> str:
        return f"pin:{self.design}:{self.node}.{self.name}"


@dataclass(frozen=True)
class Net:
    """A named electrical connection group."""

    kind: ClassVar[EntityKind] = EntityKind.NET

    design: str
    name: str

    @property
    def qualified_name(self) -> str:
        return self.name

    @property
    def key(self) -> str:
        return f"net:{self.design}:{self.name}"


Entity = Union[Design, Part, SchematicNode, Pin, Net]


def entity_sort_key(entity: Entity) -> str:
    """Deterministic ordering key for entities."""
    return entity.key


@dataclass(frozen=True)
class PathStep:
    """A step in a traversed path."""

    entity: Entity
    edge_kind: EdgeKind | None  # None for the starting entity


Path = tuple[PathStep, ...]


def path_signature(path: Path) -> tuple[str, ...]:
    """Identity of a path: the ordered keys of its entities."""
    return tuple(step.entity.key for step in path)
