"""
Graph Store Tests
=================

Handles, neighbor walks, geometry caching and snapshots.
"""

import pytest

from stepgraph.core import Direction, GraphStore, NodeState


class TestHandles:

    def test_handles_are_never_reused(self, graph):
        a = graph.add_node()
        graph.remove_node(a)
        b = graph.add_node()

        assert b != a
        assert graph.node(a) is None
        assert graph.node(b) is not None

    def test_stale_edge_handle_returns_none(self, pair):
        graph, a, b, e = pair
        assert graph.remove_edge(e)
        assert graph.edge(e) is None
        assert not graph.remove_edge(e)

    def test_remove_node_removes_attached_edges(self, pair):
        graph, a, b, e = pair
        assert graph.remove_node(b)

        assert graph.edge(e) is None
        assert graph.edge_count == 0
        assert list(graph.neighbors(a)) == []

    def test_add_edge_to_missing_node_raises(self, graph):
        a = graph.add_node()
        with pytest.raises(ValueError, match="Target node not found"):
            graph.add_edge(a, 99)
        with pytest.raises(ValueError, match="Source node not found"):
            graph.add_edge(99, a)


class TestNeighbors:

    def test_outgoing_in_insertion_order(self, graph):
        a, b, c = graph.add_node(), graph.add_node(), graph.add_node()
        e1 = graph.add_edge(a, c)
        e2 = graph.add_edge(a, b)

        assert list(graph.neighbors(a)) == [(e1, c), (e2, b)]

    def test_incoming_and_both(self, pair):
        graph, a, b, e = pair
        assert list(graph.neighbors(b, Direction.INCOMING)) == [(e, a)]
        assert list(graph.neighbors(b, Direction.OUTGOING)) == []
        assert list(graph.neighbors(b, Direction.BOTH)) == [(e, a)]

    def test_stale_handle_has_no_neighbors(self, graph):
        assert list(graph.neighbors(42)) == []


class TestGeometry:

    def test_edge_geometry_follows_moves(self, pair):
        graph, a, b, e = pair
        graph.move_node(b, 10, 20)

        edge = graph.edge(e)
        assert (edge.from_x, edge.from_y) == (0, 0)
        assert (edge.to_x, edge.to_y) == (10, 20)

    def test_reversed_edge_swaps_drawn_endpoints(self, pair):
        graph, a, b, e = pair
        edge = graph.edge(e)
        edge.reversed = True
        graph.refresh_edges()

        assert (edge.from_x, edge.to_x) == (300, 0)
        assert (edge.source, edge.target) == (a, b)

    def test_node_at_prefers_latest_node(self, graph):
        graph.add_node(0, 0)
        top = graph.add_node(5, 0)

        assert graph.node_at(2, 0) == top
        assert graph.node_at(500, 500) is None


class TestCliqueAndReset:

    def test_connect_all_skips_existing_edges(self, pair):
        graph, a, b, e = pair
        c = graph.add_node()

        created = graph.connect_all()

        assert len(created) == 5
        assert graph.edge_count == 6
        assert graph.connect_all() == []

    def test_reset_state_clears_replay_traces(self, pair):
        graph, a, b, e = pair
        graph.node(a).set_state(NodeState.VISITED)
        graph.set_pinned(a, True)
        graph.set_all_edges_enabled(False)

        graph.reset_state()

        node = graph.node(a)
        assert node.state == NodeState.NOT_VISITED
        assert node.color == "#ffffff"
        assert not node.pinned
        assert graph.edge(e).enabled

    def test_reset_state_restores_edge_orientation(self, pair):
        graph, a, b, e = pair
        edge = graph.edge(e)
        edge.reversed = True
        graph.refresh_edges()

        graph.reset_state()

        assert not edge.reversed
        assert (edge.from_x, edge.to_x) == (0, 300)


class TestSnapshot:

    def test_snapshot_is_independent(self, pair):
        graph, a, b, e = pair
        copy = graph.snapshot()

        copy.move_node(a, 99, 99)
        copy.remove_edge(e)

        assert graph.node(a).x == 0
        assert graph.edge(e) is not None
        assert copy.node_handles() == graph.node_handles()

    def test_snapshot_keeps_handle_counter(self, pair):
        graph, a, b, e = pair
        copy = graph.snapshot()
        assert copy.add_node() == graph.add_node()

    def test_json_dict(self, pair):
        graph, a, b, e = pair
        data = graph.to_json_dict()

        assert [n["id"] for n in data["nodes"]] == [a, b]
        assert data["edges"][0]["from"] == [0.0, 0.0]
        assert data["edges"][0]["to"] == [300.0, 0.0]
        assert isinstance(GraphStore().to_json_dict()["nodes"], list)
