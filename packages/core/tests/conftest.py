"""Pytest configuration and fixtures."""

import pytest
from netscope_core.graph import GraphView, SchematicGraph
from netscope_core.settings import Settings


@pytest.fixture
def board() -> SchematicGraph:
    """BOARD1 plus a small second design reusing the same node names.

    BOARD1 connectivity:
        GND:    U1.1, U2.3
        NET_A:  U1.1, U3.2
        TX:     U1.3, J1.1
        RX_EXT: J1.2, R1.1
        VCC:    U2.1, R1.2
    J1.1 and J1.2 are mapped to each other. U1.2, U2.2, U3.1 and TP1.1 are
    unconnected.
    """
    graph = SchematicGraph()
    graph.add_design("BOARD1")
    for part, node, pins in [
        ("IC1", "U1", ["1", "2", "3"]),
        ("IC2", "U2", ["1", "2", "3"]),
        ("IC3", "U3", ["1", "2"]),
        ("CONN", "J1", ["1", "2"]),
        ("RES", "R1", ["1", "2"]),
        ("TESTPOINT", "TP1", ["1"]),
    ]:
        graph.add_part("BOARD1", part)
        graph.add_node("BOARD1", part, node)
        for pin in pins:
            graph.add_pin("BOARD1", node, pin, "PA9_TX" if (node, pin) == ("U1", "3") else None)

    for net, members in [
        ("GND", [("U1", "1"), ("U2", "3")]),
        ("NET_A", [("U1", "1"), ("U3", "2")]),
        ("TX", [("U1", "3"), ("J1", "1")]),
        ("RX_EXT", [("J1", "2"), ("R1", "1")]),
        ("VCC", [("U2", "1"), ("R1", "2")]),
    ]:
        graph.add_net("BOARD1", net)
        for node, pin in members:
            graph.connect("BOARD1", net, node, pin)
    graph.map_pins("BOARD1", "J1", "1", "2")

    graph.add_design("BOARD2")
    graph.add_part("BOARD2", "IC9")
    graph.add_node("BOARD2", "IC9", "U1")
    graph.add_pin("BOARD2", "U1", "1")
    graph.add_net("BOARD2", "GND")
    graph.connect("BOARD2", "GND", "U1", "1")
    return graph


@pytest.fixture
def view(board: SchematicGraph) -> GraphView:
    """Graph view over the board fixture."""
    return GraphView(board)


@pytest.fixture
def settings() -> Settings:
    """Settings with defaults, isolated from the environment's .env file."""
    return Settings(_env_file=None)
