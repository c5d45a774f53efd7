"""Tests for the SchematicExplorer query entry points."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from netscope_core.exceptions import (
    InvalidArgumentError,
    NotFoundError,
    StoreUnavailableError,
)
from netscope_core.explorer import SchematicExplorer
from netscope_core.graph import SchematicGraph, SchematicGraphStore
from netscope_core.graph.age import AgeGraphStore
from netscope_core.settings import Settings


@pytest.fixture
def explorer(board: SchematicGraph, settings: Settings) -> SchematicExplorer:
    """Explorer over the board fixture."""
    return SchematicExplorer(board, settings)


class TestDesigns:
    """Tests for design listing."""

    def test_list_designs(self, explorer: SchematicExplorer) -> None:
        assert explorer.list_designs().to_payload() == {
            "designs": [{"name": "BOARD1"}, {"name": "BOARD2"}]
        }

    def test_get_design(self, explorer: SchematicExplorer) -> None:
        assert explorer.get_design("board2").name == "BOARD2"
        with pytest.raises(NotFoundError):
            explorer.get_design("BOARD9")


class TestDetail:
    """Tests for get_node and get_net."""

    def test_get_net(self, explorer: SchematicExplorer) -> None:
        assert explorer.get_net("BOARD1", "GND").to_payload() == {
            "name": "GND",
            "pins": [
                {"pinName": "1", "node": {"name": "U1", "part": {"name": "IC1"}}},
                {"pinName": "3", "node": {"name": "U2", "part": {"name": "IC2"}}},
            ],
        }

    def test_get_net_is_design_scoped(self, explorer: SchematicExplorer) -> None:
        payload = explorer.get_net("board2", "gnd").to_payload()

        assert payload["pins"] == [
            {"pinName": "1", "node": {"name": "U1", "part": {"name": "IC9"}}}
        ]

    def test_get_node(self, explorer: SchematicExplorer) -> None:
        assert explorer.get_node("BOARD1", "u1").to_payload() == {
            "name": "U1",
            "part": {"name": "IC1"},
            "pins": [
                {"pinName": "1", "net": {"name": "GND"}},
                {"pinName": "1", "net": {"name": "NET_A"}},
                {"pinName": "2"},
                {"pinName": "3", "pinFriendlyName": "PA9_TX", "net": {"name": "TX"}},
            ],
        }

    def test_missing_entities(self, explorer: SchematicExplorer) -> None:
        with pytest.raises(NotFoundError, match="Node not found"):
            explorer.get_node("BOARD1", "U9")
        with pytest.raises(NotFoundError, match="Net not found"):
            explorer.get_net("BOARD1", "NOPE")
        with pytest.raises(NotFoundError, match="Design not found"):
            explorer.get_net("BOARD9", "GND")


class TestFindPaths:
    """Tests for find_paths."""

    def test_single_net_connection(self, explorer: SchematicExplorer) -> None:
        graph = explorer.find_paths("BOARD1", "U1", "U3")

        assert graph.to_payload() == {
            "nodes": [
                {"name": "NET_A", "type": "net"},
                {"name": "U1", "type": "node", "partName": "IC1", "role": "source"},
                {"name": "U3", "type": "node", "partName": "IC3", "role": "target"},
            ],
            "connections": [
                {"from": "NET_A", "to": "U3", "pinName": "2"},
                {"from": "U1", "to": "NET_A", "pinName": "1"},
            ],
            "truncated": False,
        }

    def test_roles_follow_caller_order(self, explorer: SchematicExplorer) -> None:
        graph = explorer.find_paths("BOARD1", "U3", "U1")

        roles = {n.name: n.role for n in graph.nodes}
        assert roles == {"NET_A": None, "U1": "target", "U3": "source"}

    def test_same_endpoint_is_single_node(self, explorer: SchematicExplorer) -> None:
        graph = explorer.find_paths("BOARD1", "U1.3", "u1.3")

        assert graph.to_payload() == {
            "nodes": [{"name": "U1", "type": "node", "partName": "IC1", "role": "source"}],
            "connections": [],
            "truncated": False,
        }

    def test_unconnected_is_empty(self, explorer: SchematicExplorer) -> None:
        graph = explorer.find_paths("BOARD1", "U1", "TP1")

        assert graph.to_payload() == {"nodes": [], "connections": [], "truncated": False}

    def test_skip_nets_from_settings(self, board: SchematicGraph) -> None:
        explorer = SchematicExplorer(board, Settings(_env_file=None, traversal_skip_nets="GND"))

        assert explorer.find_paths("BOARD1", "U1", "U2").nodes == []

    def test_max_paths_default_from_settings(self, board: SchematicGraph) -> None:
        explorer = SchematicExplorer(board, Settings(_env_file=None, path_max_paths=1))

        graph = explorer.find_paths("BOARD1", "U1", "U1")

        assert graph.truncated

    @pytest.mark.parametrize(("from_ref", "to_ref"), [(None, "U3"), ("U1", ""), ("", None)])
    def test_missing_endpoint(
        self, explorer: SchematicExplorer, from_ref: str | None, to_ref: str | None
    ) -> None:
        with pytest.raises(InvalidArgumentError):
            explorer.find_paths("BOARD1", from_ref, to_ref)

    def test_unknown_endpoint(self, explorer: SchematicExplorer) -> None:
        with pytest.raises(NotFoundError):
            explorer.find_paths("BOARD1", "U1", "U9.1")


class TestSearch:
    """Tests for the search entry points."""

    def test_search(self, explorer: SchematicExplorer) -> None:
        assert [r.name for r in explorer.search("BOARD1", "r").results] == [
            "R1",
            "R1.1",
            "R1.2",
            "RX_EXT",
        ]

    def test_connected_search(self, explorer: SchematicExplorer) -> None:
        response = explorer.connected_search("BOARD1", "U3")

        assert [r.name for r in response.results] == ["U1", "U2"]


class TestExecute:
    """Tests for execute and error payloads."""

    def test_success_returns_payload(self, explorer: SchematicExplorer) -> None:
        payload = explorer.execute("findPaths", design="BOARD1", **{"from": "U1", "to": "U3"})

        assert [n["name"] for n in payload["nodes"]] == ["NET_A", "U1", "U3"]

    def test_connected_search_params(self, explorer: SchematicExplorer) -> None:
        payload = explorer.execute(
            "connectedSearch", design="BOARD1", source="U1", query="U", enumerate=True
        )

        assert payload == {
            "results": [
                {"name": "U2", "type": "node", "pins": ["3"]},
                {"name": "U3", "type": "node", "pins": ["2"]},
            ],
            "truncated": False,
        }

    def test_not_found_payload(self, explorer: SchematicExplorer) -> None:
        assert explorer.execute("getNet", design="BOARD1", net="nope") == {
            "error": "Net not found: nope",
            "category": "not_found",
        }

    @pytest.mark.parametrize(
        ("operation", "params"),
        [
            ("findPaths", {"design": "BOARD1", "from": "U1"}),
            ("connectedSearch", {"design": "BOARD1"}),
            ("getNode", {"design": "BOARD1"}),
            ("search", {"query": "U"}),
            ("search", {"design": "BOARD1", "query": "U", "limit": 0}),
            ("dropDesign", {"design": "BOARD1"}),
        ],
    )
    def test_bad_request_payload(
        self, explorer: SchematicExplorer, operation: str, params: dict
    ) -> None:
        payload = explorer.execute(operation, **params)

        assert payload["category"] == "bad_request"
        assert set(payload) == {"error", "category"}

    def test_dollar_quote_query_on_age_store_is_bad_request(self, settings: Settings) -> None:
        engine = MagicMock()
        conn = engine.connect.return_value.__enter__.return_value
        conn.exec_driver_sql.return_value.all.return_value = [('{"kind": "design", "name": "D"}',)]
        explorer = SchematicExplorer(AgeGraphStore(engine), settings)

        payload = explorer.execute("search", design="D", query="A$$B")

        assert payload["category"] == "bad_request"
        assert set(payload) == {"error", "category"}

    def test_store_failure_payload(self, settings: Settings) -> None:
        store = MagicMock(spec=SchematicGraphStore)
        store.get_design.side_effect = StoreUnavailableError("Graph store query failed: get_design")
        explorer = SchematicExplorer(store, settings)

        assert explorer.execute("getDesign", design="BOARD1") == {
            "error": "Graph store query failed: get_design",
            "category": "internal",
        }

    def test_store_failure_propagates_from_methods(self, settings: Settings) -> None:
        store = MagicMock(spec=SchematicGraphStore)
        store.list_designs.side_effect = StoreUnavailableError("down")
        explorer = SchematicExplorer(store, settings)

        with pytest.raises(StoreUnavailableError):
            explorer.list_designs()
