"""Tests for path enumeration and connected node expansion."""

from __future__ import annotations

import pytest
from netscope_core.exceptions import InvalidArgumentError, NotFoundError
from netscope_core.graph import (
    EdgeKind,
    GraphView,
    SchematicGraph,
    TraversalLimits,
    connected_nodes,
    find_paths,
    path_signature,
)
from netscope_core.naming import PinRef
from netscope_core.settings import Settings

# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def parallel_view() -> GraphView:
    """Nodes A and B joined by three parallel nets N1..N3."""
    graph = SchematicGraph()
    graph.add_design("D")
    for part, node in [("PA", "A"), ("PB", "B")]:
        graph.add_part("D", part)
        graph.add_node("D", part, node)
        for pin in ["1", "2", "3"]:
            graph.add_pin("D", node, pin)
    for index in ["1", "2", "3"]:
        graph.add_net("D", f"N{index}")
        graph.connect("D", f"N{index}", "A", index)
        graph.connect("D", f"N{index}", "B", index)
    return GraphView(graph)


@pytest.fixture
def alias_chain_view() -> GraphView:
    """A.1 - N1 - M.1 ~ M.2 ~ M.3 - N2 - B.1 where ~ is MAPS_TO."""
    graph = SchematicGraph()
    graph.add_design("D")
    for part, node, pins in [("PA", "A", ["1"]), ("PM", "M", ["1", "2", "3"]), ("PB", "B", ["1"])]:
        graph.add_part("D", part)
        graph.add_node("D", part, node)
        for pin in pins:
            graph.add_pin("D", node, pin)
    graph.add_net("D", "N1")
    graph.connect("D", "N1", "A", "1")
    graph.connect("D", "N1", "M", "1")
    graph.add_net("D", "N2")
    graph.connect("D", "N2", "M", "3")
    graph.connect("D", "N2", "B", "1")
    graph.map_pins("D", "M", "1", "2")
    graph.map_pins("D", "M", "2", "3")
    return GraphView(graph)


def _names(path) -> list[str]:
    return [step.entity.qualified_name for step in path]


# =============================================================================
# FIND PATHS
# =============================================================================


class TestFindPaths:
    """Tests for find_paths."""

    def test_single_net_path(self, view: GraphView) -> None:
        result = find_paths(view, "BOARD1", PinRef("U1"), PinRef("U3"))

        assert [_names(p) for p in result.paths] == [["U1.1", "NET_A", "U3.2"]]
        assert not result.truncated
        assert result.stop_reason is None

    def test_path_steps_carry_edge_kinds(self, view: GraphView) -> None:
        result = find_paths(view, "BOARD1", PinRef("U1"), PinRef("R1"))

        (path,) = result.paths
        assert _names(path) == ["U1.3", "TX", "J1.1", "J1.2", "RX_EXT", "R1.1"]
        assert [step.edge_kind for step in path] == [
            None,
            EdgeKind.CONNECTS,
            EdgeKind.CONNECTS,
            EdgeKind.MAPS_TO,
            EdgeKind.CONNECTS,
            EdgeKind.CONNECTS,
        ]

    def test_pin_endpoints(self, view: GraphView) -> None:
        result = find_paths(view, "BOARD1", PinRef("U3", "2"), PinRef("U2", "3"))

        assert [_names(p) for p in result.paths] == [["U3.2", "NET_A", "U1.1", "GND", "U2.3"]]

    def test_same_endpoint_yields_single_step(self, view: GraphView) -> None:
        result = find_paths(view, "BOARD1", PinRef("U1", "3"), PinRef("U1", "3"))

        assert [_names(p) for p in result.paths] == [["U1.3"]]

    def test_no_path_is_empty_not_error(self, view: GraphView) -> None:
        result = find_paths(view, "BOARD1", PinRef("U1"), PinRef("TP1"))

        assert result.paths == []
        assert not result.truncated

    def test_pins_are_not_crossed_without_maps_to(self, view: GraphView) -> None:
        # R1.1 and R1.2 are not mapped, so VCC is unreachable from U3
        result = find_paths(view, "BOARD1", PinRef("U3"), PinRef("U2", "1"))

        assert result.paths == []

    def test_maps_to_never_chains(self, alias_chain_view: GraphView) -> None:
        result = find_paths(alias_chain_view, "D", PinRef("A"), PinRef("B"))

        assert result.paths == []

    def test_paths_are_simple_and_distinct(self, parallel_view: GraphView) -> None:
        result = find_paths(parallel_view, "D", PinRef("A"), PinRef("B"))

        signatures = [path_signature(p) for p in result.paths]
        assert len(signatures) == len(set(signatures)) == 3
        for path in result.paths:
            keys = [step.entity.key for step in path]
            assert len(keys) == len(set(keys))

    def test_max_paths_truncates(self, parallel_view: GraphView) -> None:
        result = find_paths(parallel_view, "D", PinRef("A"), PinRef("B"), max_paths=2)

        assert len(result.paths) == 2
        assert result.truncated
        assert result.stop_reason == "max_paths"

    def test_deterministic_order(self, parallel_view: GraphView) -> None:
        first = find_paths(parallel_view, "D", PinRef("A"), PinRef("B"))
        second = find_paths(parallel_view, "D", PinRef("A"), PinRef("B"))

        assert [_names(p) for p in first.paths] == [_names(p) for p in second.paths]
        assert _names(first.paths[0]) == ["A.1", "N1", "B.1"]

    def test_depth_limit(self, view: GraphView) -> None:
        shallow = find_paths(
            view, "BOARD1", PinRef("U1"), PinRef("U3"), limits=TraversalLimits(max_depth=1)
        )
        deep_enough = find_paths(
            view, "BOARD1", PinRef("U1"), PinRef("U3"), limits=TraversalLimits(max_depth=2)
        )

        assert shallow.paths == []
        assert len(deep_enough.paths) == 1

    def test_expansion_budget_returns_best_effort(
        self, view: GraphView, caplog: pytest.LogCaptureFixture
    ) -> None:
        result = find_paths(
            view,
            "BOARD1",
            PinRef("U1"),
            PinRef("R1"),
            limits=TraversalLimits(max_expansions=2),
        )

        assert result.paths == []
        assert result.truncated
        assert result.stop_reason == "max_expansions"
        assert "stopped early" in caplog.text

    def test_skip_nets(self, view: GraphView) -> None:
        limits = TraversalLimits(skip_nets=frozenset({"GND"}))

        result = find_paths(view, "BOARD1", PinRef("U1"), PinRef("U2"), limits=limits)

        assert result.paths == []

    def test_limits_from_settings(self) -> None:
        settings = Settings(
            _env_file=None,
            path_max_depth=4,
            traversal_max_expansions=50,
            traversal_timeout_seconds=0,
            traversal_skip_nets="gnd, vcc",
        )

        limits = TraversalLimits.from_settings(settings)

        assert limits == TraversalLimits(
            max_depth=4,
            max_expansions=50,
            timeout_seconds=None,
            skip_nets=frozenset({"GND", "VCC"}),
        )

    def test_unknown_endpoint_raises(self, view: GraphView) -> None:
        with pytest.raises(NotFoundError):
            find_paths(view, "BOARD1", PinRef("U1"), PinRef("U9"))
        with pytest.raises(NotFoundError):
            find_paths(view, "BOARD1", PinRef("U1", "9"), PinRef("U3"))

    def test_invalid_max_paths(self, view: GraphView) -> None:
        with pytest.raises(InvalidArgumentError):
            find_paths(view, "BOARD1", PinRef("U1"), PinRef("U3"), max_paths=0)

    def test_design_scoping(self, view: GraphView) -> None:
        with pytest.raises(NotFoundError):
            find_paths(view, "BOARD2", PinRef("U1"), PinRef("U3"))


# =============================================================================
# CONNECTED NODES
# =============================================================================


class TestConnectedNodes:
    """Tests for connected_nodes."""

    def test_collects_reachable_nodes_with_pins(self, view: GraphView) -> None:
        result = connected_nodes(view, "BOARD1", PinRef("U1"))

        assert [(n.name, [p.name for p in n.pins]) for n in result.nodes] == [
            ("J1", ["1", "2"]),
            ("R1", ["1"]),
            ("U2", ["3"]),
            ("U3", ["2"]),
        ]
        assert not result.truncated

    def test_excludes_source_node(self, view: GraphView) -> None:
        result = connected_nodes(view, "BOARD1", PinRef("U3"))

        assert "U3" not in [n.name for n in result.nodes]
        assert [n.name for n in result.nodes] == ["U1", "U2"]

    def test_pin_source(self, view: GraphView) -> None:
        result = connected_nodes(view, "BOARD1", PinRef("U1", "3"))

        assert [n.name for n in result.nodes] == ["J1", "R1"]

    def test_pin_prefix_filter(self, view: GraphView) -> None:
        result = connected_nodes(view, "BOARD1", PinRef("U1"), pin_prefix="2", limit=1)

        assert [(n.name, [p.name for p in n.pins]) for n in result.nodes] == [("J1", ["2"])]
        assert result.truncated

        result = connected_nodes(view, "BOARD1", PinRef("U1"), pin_prefix="3")

        assert [n.name for n in result.nodes] == ["U2"]

    def test_prefix_filter(self, view: GraphView) -> None:
        result = connected_nodes(view, "BOARD1", PinRef("U1"), prefix="u")

        assert [n.name for n in result.nodes] == ["U2", "U3"]

    def test_limit_truncates(self, view: GraphView) -> None:
        result = connected_nodes(view, "BOARD1", PinRef("U1"), limit=2)

        assert [n.name for n in result.nodes] == ["J1", "R1"]
        assert result.truncated
        assert result.stop_reason == "limit"

    def test_unconnected_source_is_empty(self, view: GraphView) -> None:
        result = connected_nodes(view, "BOARD1", PinRef("TP1"))

        assert result.nodes == []

    def test_skip_nets(self, view: GraphView) -> None:
        limits = TraversalLimits(skip_nets=frozenset({"GND"}))

        result = connected_nodes(view, "BOARD1", PinRef("U1"), limits=limits)

        assert "U2" not in [n.name for n in result.nodes]

    def test_expansion_budget(self, view: GraphView) -> None:
        result = connected_nodes(
            view, "BOARD1", PinRef("U1"), limits=TraversalLimits(max_expansions=1)
        )

        assert result.truncated
        assert result.stop_reason == "max_expansions"

    def test_invalid_limit(self, view: GraphView) -> None:
        with pytest.raises(InvalidArgumentError):
            connected_nodes(view, "BOARD1", PinRef("U1"), limit=0)
