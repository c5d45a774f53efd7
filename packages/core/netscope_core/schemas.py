"""Response schemas for schematic queries.

These Pydantic models define the payloads handed to the presentation layer.
Field names are snake_case in Python and camelCase on the wire
(``model_dump(by_alias=True)``).
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DisplayType = Literal["node", "net", "pin"]
DisplayRole = Literal["source", "target"]
ErrorCategory = Literal["not_found", "bad_request", "internal"]


class Payload(BaseModel):
    """Base class for every response model."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_payload(self) -> dict[str, Any]:
        """Convert to a JSON-ready dict with camelCase keys."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# =============================================================================
# DESIGNS
# =============================================================================


class DesignInfo(Payload):
    """A schematic design."""

    name: str


class DesignList(Payload):
    designs: list[DesignInfo] = Field(default_factory=list)


# =============================================================================
# NODE / NET DETAIL
# =============================================================================


class NamedRef(Payload):
    """Reference to an entity by name."""

    name: str


class NodeRef(Payload):
    """Reference to a node together with its part."""

    name: str
    part: NamedRef


class NodePin(Payload):
    """One pin of a node and the net it connects to."""

    pin_name: str
    pin_friendly_name: str | None = None
    net: NamedRef | None = None


class NodeDetail(Payload):
    """A node, its part, and its pins."""

    name: str
    part: NamedRef
    pins: list[NodePin] = Field(default_factory=list)


class NetPin(Payload):
    """One pin connected to a net and its owning node."""

    pin_name: str
    pin_friendly_name: str | None = None
    node: NodeRef


class NetDetail(Payload):
    """A net and the pins it connects."""

    name: str
    pins: list[NetPin] = Field(default_factory=list)


# =============================================================================
# SEARCH
# =============================================================================


class SearchResult(Payload):
    """A single search hit."""

    name: str
    type: DisplayType
    node_name: str | None = None
    pin_name: str | None = None
    pins: list[str] | None = None
    """Matching pins of a node (connected search only)."""


class SearchResponse(Payload):
    """Search hits ordered by display name."""

    results: list[SearchResult] = Field(default_factory=list)
    truncated: bool = False


# =============================================================================
# DISPLAY GRAPH
# =============================================================================


class DisplayNode(Payload):
    """A node, net or pin in the display graph."""

    name: str
    type: DisplayType
    part_name: str | None = None
    role: DisplayRole | None = None


class DisplayConnection(Payload):
    """An edge of the display graph, labelled with the traversed pin."""

    from_: str = Field(alias="from")
    to: str
    pin_name: str
    pin_friendly_name: str | None = None


class DisplayGraph(Payload):
    """De-duplicated nodes and connections for rendering."""

    nodes: list[DisplayNode] = Field(default_factory=list)
    connections: list[DisplayConnection] = Field(default_factory=list)
    truncated: bool = False


# =============================================================================
# ERRORS
# =============================================================================


class ErrorPayload(Payload):
    """Caller-facing error."""

    error: str
    category: ErrorCategory
