"""Apache AGE adapter for schematic graph queries.

Apache AGE requires graph names and Cypher queries as literal SQL strings,
not bind parameters. The helper ``_age_cypher_sql`` safely inlines both
using a validated graph name (alphanumeric + underscore) and $$-delimited
Cypher text; entity names are inlined as escaped string literals.

Expected graph layout (as written by the ingestion process):

    (:SchematicDesign)-[:HAS_PART]->(:SchematicPart)-[:HAS_NODE]->
        (:SchematicNode)-[:HAS_PIN]->(:SchematicNodePin)
    (:SchematicDesign)-[:HAS_NET]->(:SchematicNet)-[:CONNECTS]->(:SchematicNodePin)
    (:SchematicNodePin)-[:MAPS_TO]->(:SchematicNodePin)

Every query returns a single agtype map column so rows decode as JSON.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable
from typing import Any

from netscope_core.exceptions import InvalidArgumentError, StoreUnavailableError
from netscope_core.graph.model import (
    Design,
    EdgeKind,
    Entity,
    EntityKind,
    Net,
    Part,
    Pin,
    SchematicNode,
)
from netscope_core.graph.store import SchematicGraphStore
from netscope_core.settings import Settings
from netscope_core.telemetry.spans import trace_db_operation
from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

_MUTATING_PATTERNS = re.compile(
    r"\b(create|merge|set|delete|remove|drop|alter|grant|revoke|copy|call)\b",
    flags=re.IGNORECASE,
)

# Graph names are strictly alphanumeric + underscore
_SAFE_NAME = re.compile(r"^[a-z0-9_]+$")

# agtype text may carry a type annotation suffix, e.g. ``{...}::vertex``
_AGTYPE_SUFFIX = re.compile(r"::[a-z]+$")

# Single-quoted Cypher string literal with backslash escapes
_STRING_LITERAL = re.compile(r"'(?:\\.|[^'\\])*'")


def _validate_graph_name(name: str) -> None:
    """Ensure graph name is safe for SQL interpolation."""
    if not _SAFE_NAME.match(name):
        raise ValueError(f"Invalid graph name: {name!r}")


def _age_cypher_sql(graph_name: str, cypher: str, result_cols: str = "row agtype") -> str:
    """Build a literal SQL string for AGE cypher() calls.

    AGE does not support bind parameters for graph names or queries.
    Graph names are validated, Cypher is $$-delimited.
    """
    _validate_graph_name(graph_name)
    if "$$" in cypher:
        raise ValueError("Cypher text must not contain '$$'")
    return f"SELECT * FROM cypher('{graph_name}', $$ {cypher} $$) AS ({result_cols})"


def ensure_read_only_cypher(query: str) -> None:
    """Raise if a Cypher query appears mutating."""
    if _MUTATING_PATTERNS.search(query):
        raise ValueError("Only read-only Cypher queries are allowed")


def _esc(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


def _lit(value: str) -> str:
    """Inline a string as an escaped Cypher literal.

    Raises:
        InvalidArgumentError: If the value would close the $$ quoting
    """
    if "$$" in value:
        raise InvalidArgumentError(f"Name or query must not contain '$$': {value!r}")
    return f"'{_esc(value)}'"


def parse_agtype(text: str | None) -> Any:
    """Decode an agtype text value into Python data."""
    if text is None:
        return None
    return json.loads(_AGTYPE_SUFFIX.sub("", text.strip()))


# -----------------------------------------------------------------------------
# Match patterns
# -----------------------------------------------------------------------------


def _design_pattern(design: str) -> str:
    return f"(design:SchematicDesign {{name: {_lit(design)}}})"


def _part_pattern(design: str, part: str) -> str:
    return f"{_design_pattern(design)}-[:HAS_PART]->(part:SchematicPart {{name: {_lit(part)}}})"


def _node_pattern(design: str, node: str) -> str:
    return (
        f"{_design_pattern(design)}-[:HAS_PART]->(part:SchematicPart)"
        f"-[:HAS_NODE]->(node:SchematicNode {{name: {_lit(node)}}})"
    )


def _pin_pattern(design: str, node: str, pin: str) -> str:
    return (
        f"{_node_pattern(design, node)}"
        f"-[:HAS_PIN]->(pin:SchematicNodePin {{name: {_lit(pin)}}})"
    )


def _net_pattern(design: str, net: str) -> str:
    return f"{_design_pattern(design)}-[:HAS_NET]->(net:SchematicNet {{name: {_lit(net)}}})"


def _entity_pattern(entity: Entity) -> str:
    if isinstance(entity, Pin):
        return _pin_pattern(entity.design, entity.node, entity.name)
    if isinstance(entity, SchematicNode):
        return _node_pattern(entity.design, entity.name)
    if isinstance(entity, Net):
        return _net_pattern(entity.design, entity.name)
    if isinstance(entity, Part):
        return _part_pattern(entity.design, entity.name)
    return _design_pattern(entity.name)


_PIN_MAP = "{kind: 'pin', node: %s.name, name: %s.name, friendly_name: %s.friendly_name}"

# (entity kind, edge kind) -> MATCH continuation and RETURN map
_NEIGHBOR_QUERIES: dict[tuple[EntityKind, EdgeKind], tuple[str, str]] = {
    (EntityKind.PIN, EdgeKind.CONNECTS): (
        "<-[:CONNECTS]-(other:SchematicNet)",
        "{kind: 'net', name: other.name}",
    ),
    (EntityKind.PIN, EdgeKind.MAPS_TO): (
        "-[:MAPS_TO]-(other:SchematicNodePin)<-[:HAS_PIN]-(other_node:SchematicNode)",
        _PIN_MAP % ("other_node", "other", "other"),
    ),
    (EntityKind.PIN, EdgeKind.HAS_PIN): (
        "",
        "{kind: 'node', name: node.name, part: part.name}",
    ),
    (EntityKind.NET, EdgeKind.CONNECTS): (
        "-[:CONNECTS]->(other:SchematicNodePin)<-[:HAS_PIN]-(other_node:SchematicNode)",
        _PIN_MAP % ("other_node", "other", "other"),
    ),
    (EntityKind.NET, EdgeKind.HAS_NET): (
        "",
        "{kind: 'design', name: design.name}",
    ),
    (EntityKind.NODE, EdgeKind.HAS_PIN): (
        "-[:HAS_PIN]->(other:SchematicNodePin)",
        _PIN_MAP % ("node", "other", "other"),
    ),
    (EntityKind.NODE, EdgeKind.HAS_NODE): (
        "",
        "{kind: 'part', name: part.name}",
    ),
    (EntityKind.PART, EdgeKind.HAS_NODE): (
        "-[:HAS_NODE]->(other:SchematicNode)",
        "{kind: 'node', name: other.name, part: part.name}",
    ),
    (EntityKind.PART, EdgeKind.HAS_PART): (
        "",
        "{kind: 'design', name: design.name}",
    ),
    (EntityKind.DESIGN, EdgeKind.HAS_PART): (
        "-[:HAS_PART]->(other:SchematicPart)",
        "{kind: 'part', name: other.name}",
    ),
    (EntityKind.DESIGN, EdgeKind.HAS_NET): (
        "-[:HAS_NET]->(other:SchematicNet)",
        "{kind: 'net', name: other.name}",
    ),
}


def _entity_from_row(design: str, row: dict[str, Any]) -> Entity:
    """Build a typed entity from a returned agtype map."""
    kind = row.get("kind")
    if kind == "pin":
        return Pin(
            design=design,
            node=row["node"],
            name=row["name"],
            friendly_name=row.get("friendly_name") or None,
        )
    if kind == "net":
        return Net(design=design, name=row["name"])
    if kind == "node":
        return SchematicNode(design=design, name=row["name"], part=row.get("part") or "")
    if kind == "part":
        return Part(design=design, name=row["name"])
    if kind == "design":
        return Design(name=row["name"])
    raise StoreUnavailableError(f"Unexpected row kind from graph store: {kind!r}")


class AgeGraphStore(SchematicGraphStore):
    """Schematic graph store backed by Apache AGE on PostgreSQL.

    Every call is one read-only round trip. Driver and SQL errors are
    raised as StoreUnavailableError; nothing is retried.
    """

    def __init__(
        self,
        engine: Engine,
        graph_name: str = "schematic",
        query_timeout_seconds: float | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            engine: SQLAlchemy engine connected to a database with AGE installed
            graph_name: Name of the AGE graph holding the designs
            query_timeout_seconds: statement_timeout per query (None disables)
        """
        _validate_graph_name(graph_name)
        self._engine = engine
        self._graph_name = graph_name
        self._timeout_ms = int(query_timeout_seconds * 1000) if query_timeout_seconds else None

    @classmethod
    def from_settings(cls, settings: Settings) -> AgeGraphStore:
        """Create a store on the shared process engine."""
        from netscope_core.database import get_engine

        return cls(
            get_engine(settings),
            graph_name=settings.age_graph_name,
            query_timeout_seconds=settings.store_query_timeout_seconds,
        )

    @property
    def graph_name(self) -> str:
        return self._graph_name

    def _run(self, operation: str, cypher: str) -> list[Any]:
        """Execute a Cypher query and decode its single agtype column.

        The query text outside string literals must pass the read-only guard.
        """
        ensure_read_only_cypher(_STRING_LITERAL.sub("''", cypher))
        sql = _age_cypher_sql(self._graph_name, cypher)
        logger.debug("AGE %s: %s", operation, cypher)
        with trace_db_operation(operation, self._graph_name) as span:
            try:
                with self._engine.connect() as conn:
                    conn.exec_driver_sql("LOAD 'age'")
                    conn.exec_driver_sql('SET search_path = ag_catalog, "$user", public')
                    if self._timeout_ms:
                        conn.exec_driver_sql(f"SET LOCAL statement_timeout = {self._timeout_ms}")
                    rows = conn.exec_driver_sql(sql).all()
            except SQLAlchemyError as e:
                raise StoreUnavailableError(f"Graph store query failed: {operation}") from e
            span.set_attribute("db.rows_returned", len(rows))
        return [parse_agtype(row[0]) for row in rows]

    def _first(self, operation: str, design: str, cypher: str) -> Any:
        rows = self._run(operation, cypher)
        if not rows:
            return None
        return _entity_from_row(design, rows[0])

    def list_designs(self) -> list[Design]:
        rows = self._run(
            "list_designs",
            "MATCH (design:SchematicDesign) RETURN {kind: 'design', name: design.name}",
        )
        designs = [Design(name=row["name"]) for row in rows]
        return sorted(designs, key=lambda design: design.name)

    def get_design(self, name: str) -> Design | None:
        return self._first(
            "get_design",
            name,
            f"MATCH {_design_pattern(name)} RETURN {{kind: 'design', name: design.name}} LIMIT 1",
        )

    def get_part(self, design: str, name: str) -> Part | None:
        return self._first(
            "get_part",
            design,
            f"MATCH {_part_pattern(design, name)} RETURN {{kind: 'part', name: part.name}} LIMIT 1",
        )

    def get_node(self, design: str, name: str) -> SchematicNode | None:
        return self._first(
            "get_node",
            design,
            f"MATCH {_node_pattern(design, name)} "
            "RETURN {kind: 'node', name: node.name, part: part.name} LIMIT 1",
        )

    def get_net(self, design: str, name: str) -> Net | None:
        return self._first(
            "get_net",
            design,
            f"MATCH {_net_pattern(design, name)} RETURN {{kind: 'net', name: net.name}} LIMIT 1",
        )

    def get_pin(self, design: str, node: str, name: str) -> Pin | None:
        return self._first(
            "get_pin",
            design,
            f"MATCH {_pin_pattern(design, node, name)} "
            f"RETURN {_PIN_MAP % ('node', 'pin', 'pin')} LIMIT 1",
        )

    def get_pins(self, design: str, node: str) -> list[Pin]:
        rows = self._run(
            "get_pins",
            f"MATCH {_node_pattern(design, node)}-[:HAS_PIN]->(pin:SchematicNodePin) "
            f"RETURN {_PIN_MAP % ('node', 'pin', 'pin')}",
        )
        pins = [_entity_from_row(design, row) for row in rows]
        return sorted(pins, key=lambda pin: pin.name)

    def get_neighbors(
        self,
        entity: Entity,
        edge_kinds: Iterable[EdgeKind] | None = None,
    ) -> list[tuple[Entity, EdgeKind]]:
        kinds = list(edge_kinds) if edge_kinds is not None else list(EdgeKind)
        design = entity.design
        pattern = _entity_pattern(entity)

        results: dict[tuple[str, EdgeKind], Entity] = {}
        for edge_kind in kinds:
            query = _NEIGHBOR_QUERIES.get((entity.kind, edge_kind))
            if query is None:
                continue
            continuation, projection = query
            rows = self._run(
                f"neighbors_{entity.kind.value}_{edge_kind.value.lower()}",
                f"MATCH {pattern}{continuation} RETURN {projection}",
            )
            for row in rows:
                neighbor = _entity_from_row(design, row)
                results.setdefault((neighbor.key, edge_kind), neighbor)

        ordered = sorted(results.items(), key=lambda item: (item[0][0], item[0][1].value))
        return [(neighbor, edge_kind) for (_key, edge_kind), neighbor in ordered]

    def scan_nets(self, design: str, prefix: str, limit: int) -> list[Net]:
        rows = self._run(
            "scan_nets",
            f"MATCH {_design_pattern(design)}-[:HAS_NET]->(net:SchematicNet) "
            f"WHERE net.name STARTS WITH {_lit(prefix)} "
            f"WITH net ORDER BY net.name LIMIT {int(limit)} "
            "RETURN {kind: 'net', name: net.name}",
        )
        return [_entity_from_row(design, row) for row in rows]

    def scan_nodes(self, design: str, prefix: str, limit: int) -> list[SchematicNode]:
        rows = self._run(
            "scan_nodes",
            f"MATCH {_design_pattern(design)}-[:HAS_PART]->(part:SchematicPart)"
            "-[:HAS_NODE]->(node:SchematicNode) "
            f"WHERE node.name STARTS WITH {_lit(prefix)} "
            f"WITH node, part ORDER BY node.name LIMIT {int(limit)} "
            "RETURN {kind: 'node', name: node.name, part: part.name}",
        )
        return [_entity_from_row(design, row) for row in rows]

    def scan_pins(
        self,
        design: str,
        node_prefix: str,
        pin_prefix: str,
        limit: int,
    ) -> list[Pin]:
        rows = self._run(
            "scan_pins",
            f"MATCH {_design_pattern(design)}-[:HAS_PART]->(:SchematicPart)"
            "-[:HAS_NODE]->(node:SchematicNode)-[:HAS_PIN]->(pin:SchematicNodePin) "
            f"WHERE node.name STARTS WITH {_lit(node_prefix)} "
            f"AND pin.name STARTS WITH {_lit(pin_prefix)} "
            f"WITH node, pin ORDER BY node.name, pin.name LIMIT {int(limit)} "
            f"RETURN {_PIN_MAP % ('node', 'pin', 'pin')}",
        )
        pins = [_entity_from_row(design, row) for row in rows]
        return sorted(pins, key=lambda pin: pin.qualified_name)
