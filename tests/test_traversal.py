"""
Traversal Tests
===============

Exact step sequences recorded by DFS and BFS, and Kosaraju's SCC.
"""

import pytest

from stepgraph.core import (
    EdgeStateChange,
    EnableAllEdges,
    NodeState,
    NodeStateChange,
    PaintComponent,
    ResetAll,
    ReverseAllEdges,
    SCC_PALETTE,
    StepLog,
    run_bfs,
    run_dfs,
    run_scc,
    strongly_connected_components,
)

QUEUED = NodeState.QUEUED
VISITED = NodeState.VISITED


class TestDepthFirstSearch:

    def test_single_edge_sequence(self, pair):
        graph, a, b, e = pair
        assert run_dfs(graph, a) == StepLog([
            NodeStateChange(a, QUEUED),
            EdgeStateChange(e, True),
            NodeStateChange(b, QUEUED),
            NodeStateChange(b, VISITED),
            NodeStateChange(a, VISITED),
        ])

    def test_neighbors_in_insertion_order(self, graph):
        a, b, c = graph.add_node(), graph.add_node(), graph.add_node()
        ac = graph.add_edge(a, c)
        ab = graph.add_edge(a, b)

        assert list(run_dfs(graph, a)) == [
            NodeStateChange(a, QUEUED),
            EdgeStateChange(ac, True),
            NodeStateChange(c, QUEUED),
            NodeStateChange(c, VISITED),
            EdgeStateChange(ab, True),
            NodeStateChange(b, QUEUED),
            NodeStateChange(b, VISITED),
            NodeStateChange(a, VISITED),
        ]

    def test_cycle_is_entered_once(self, two_triangles):
        graph, (a, b, c, d, e, f) = two_triangles
        log = run_dfs(graph, a)

        queued = [s.node for s in log if isinstance(s, NodeStateChange) and s.state == QUEUED]
        visited = [s.node for s in log if isinstance(s, NodeStateChange) and s.state == VISITED]
        assert queued == [a, b, c, d, e, f]
        assert visited == [f, e, d, c, b, a]

    def test_directed_walk_ignores_incoming_edges(self, pair):
        graph, a, b, e = pair
        assert list(run_dfs(graph, b)) == [NodeStateChange(b, QUEUED), NodeStateChange(b, VISITED)]

    def test_undirected_walk_follows_incoming_edges(self, pair):
        graph, a, b, e = pair
        log = run_dfs(graph, b, directed=False)
        assert EdgeStateChange(e, True) in list(log)
        assert NodeStateChange(a, VISITED) in list(log)

    def test_cover_all_reaches_unreachable_nodes(self, pair):
        graph, a, b, e = pair
        lonely = graph.add_node()
        log = run_dfs(graph, b, cover_all=True)
        assert NodeStateChange(lonely, VISITED) in list(log)
        assert NodeStateChange(a, VISITED) in list(log)

    def test_deep_chain_does_not_overflow(self, graph):
        handles = [graph.add_node() for _ in range(5000)]
        for source, target in zip(handles, handles[1:]):
            graph.add_edge(source, target)

        log = run_dfs(graph, handles[0])
        assert len(log) == 3 * len(handles) - 1

    def test_missing_start_raises(self, graph):
        with pytest.raises(ValueError, match="Start node not found"):
            run_dfs(graph, 7)

    def test_graph_is_not_modified(self, pair):
        graph, a, b, e = pair
        run_dfs(graph, a)
        assert graph.node(a).state == NodeState.NOT_VISITED
        assert graph.node(b).color == "#ffffff"


class TestBreadthFirstSearch:

    def test_single_edge_sequence(self, pair):
        graph, a, b, e = pair
        assert run_bfs(graph, a) == StepLog([
            NodeStateChange(a, QUEUED),
            EdgeStateChange(e, True),
            NodeStateChange(b, QUEUED),
            NodeStateChange(a, VISITED),
            NodeStateChange(b, VISITED),
        ])

    def test_level_order(self, graph):
        root, left, right, leaf = (graph.add_node() for _ in range(4))
        graph.add_edge(root, left)
        graph.add_edge(root, right)
        graph.add_edge(left, leaf)
        graph.add_edge(right, leaf)

        visited = [s.node for s in run_bfs(graph, root) if isinstance(s, NodeStateChange) and s.state == VISITED]
        assert visited == [root, left, right, leaf]

    def test_node_is_queued_once(self, two_triangles):
        graph, handles = two_triangles
        queued = [s.node for s in run_bfs(graph, handles[0]) if isinstance(s, NodeStateChange) and s.state == QUEUED]
        assert sorted(queued) == sorted(handles)

    def test_missing_start_raises(self, graph):
        with pytest.raises(ValueError):
            run_bfs(graph, 0)


class TestStronglyConnectedComponents:

    def test_two_triangles(self, two_triangles):
        graph, (a, b, c, d, e, f) = two_triangles
        result = strongly_connected_components(graph)

        assert result.count == 2
        assert {frozenset(comp) for comp in result.components} == {frozenset({a, b, c}), frozenset({d, e, f})}

        paints = [s for s in result.steps if isinstance(s, PaintComponent)]
        assert {frozenset(p.nodes) for p in paints} == {frozenset({a, b, c}), frozenset({d, e, f})}
        assert len({p.color for p in paints}) == 2

    def test_components_follow_reverse_finish_order(self, two_triangles):
        """The node finished last in the forward pass roots the first component."""
        graph, (a, b, c, d, e, f) = two_triangles
        result = strongly_connected_components(graph)

        assert result.components == [[b, c, a], [e, f, d]]

        paints = [s for s in result.steps if isinstance(s, PaintComponent)]
        assert paints == [
            PaintComponent(SCC_PALETTE[0], [b, c, a]),
            PaintComponent(SCC_PALETTE[1], [e, f, d]),
        ]

    def test_backward_pass_walks_incoming_edges(self, two_triangles):
        graph, (a, b, c, d, e, f) = two_triangles
        ca = graph.edges_between(c, a)[0]
        bc = graph.edges_between(b, c)[0]

        steps = list(run_scc(graph))
        reset_at = steps.index(ResetAll())
        first_paint = next(i for i, s in enumerate(steps) if isinstance(s, PaintComponent))

        assert steps[reset_at:first_paint + 1] == [
            ResetAll(),
            ReverseAllEdges(),
            NodeStateChange(a, QUEUED),
            EdgeStateChange(ca, True),
            NodeStateChange(c, QUEUED),
            EdgeStateChange(bc, True),
            NodeStateChange(b, QUEUED),
            NodeStateChange(b, VISITED),
            NodeStateChange(c, VISITED),
            NodeStateChange(a, VISITED),
            PaintComponent(SCC_PALETTE[0], [b, c, a]),
        ]

    def test_phase_markers(self, two_triangles):
        graph, handles = two_triangles
        steps = list(run_scc(graph))

        assert steps[-2:] == [ReverseAllEdges(), EnableAllEdges()]
        reset_at = steps.index(ResetAll())
        assert steps[reset_at + 1] == ReverseAllEdges()
        assert all(isinstance(s, (NodeStateChange, EdgeStateChange)) for s in steps[:reset_at])

    def test_singletons(self, graph):
        handles = [graph.add_node() for _ in range(12)]
        result = strongly_connected_components(graph)

        assert sorted(h for comp in result.components for h in comp) == handles
        colors = [s.color for s in result.steps if isinstance(s, PaintComponent)]
        assert colors[:10] == list(SCC_PALETTE)
        assert colors[10:] == list(SCC_PALETTE[:2])

    def test_empty_graph(self, graph):
        steps = list(run_scc(graph))
        assert steps == [ResetAll(), ReverseAllEdges(), ReverseAllEdges(), EnableAllEdges()]

    def test_replay_restores_orientation(self, two_triangles):
        graph, handles = two_triangles
        for step in run_scc(graph):
            step.apply(graph)

        assert all(not edge.reversed and edge.enabled for edge in graph.edges())
        assert len({graph.node(h).color for h in handles}) == 2
