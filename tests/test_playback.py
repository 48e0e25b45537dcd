"""
Timer and Step Player Tests
===========================

Frame-driven ticking, and replay of a StepLog onto a live graph.
"""

from stepgraph.core import NodeState, NodeStateChange, StepLog, StepPlayer, Timer, run_dfs


class TestTimer:

    def test_created_stopped(self):
        timer = Timer(1.0, loops=True)
        assert not timer.running
        assert not timer.update(5.0)

    def test_one_tick_after_one_period(self):
        timer = Timer(1.0, loops=True)
        timer.start()

        fired = [timer.update(0.5), timer.update(0.5)]

        assert fired == [False, True]
        assert timer.running

    def test_two_ticks_after_two_and_a_half_periods(self):
        timer = Timer(1.0, loops=True)
        timer.start()

        ticks = sum(timer.update(0.5) for _ in range(5))

        assert ticks == 2
        assert timer.remaining == 0.5

    def test_fires_on_time_with_inexact_frame_lengths(self):
        """Ten 0.1 s frames do not sum to exactly 1.0, the tick still fires on the tenth."""
        timer = Timer(1.0, loops=True)
        timer.start()

        fired = [timer.update(0.1) for _ in range(10)]

        assert fired == [False] * 9 + [True]

    def test_one_shot_stops_after_firing(self):
        timer = Timer(1.0)
        timer.start()

        assert timer.update(1.0)
        assert not timer.running
        assert not timer.update(1.0)


class TestStepPlayer:

    def test_show_disables_edges_and_pins_start(self, pair):
        graph, a, b, e = pair
        player = StepPlayer()

        player.show(run_dfs(graph, a), a, graph)

        assert player.running
        assert graph.node(a).pinned
        assert not graph.edge(e).enabled

    def test_one_step_per_tick(self, pair):
        graph, a, b, e = pair
        player = StepPlayer(interval=0.5)
        player.show(StepLog([NodeStateChange(a, NodeState.QUEUED), NodeStateChange(b, NodeState.QUEUED)]), a, graph)

        player.update(0.25, graph)
        assert graph.node(a).state == NodeState.NOT_VISITED

        player.update(0.25, graph)
        assert graph.node(a).state == NodeState.QUEUED
        assert graph.node(b).state == NodeState.NOT_VISITED
        assert player.remaining_steps == 1

    def test_end_is_detected_one_tick_late(self, pair):
        graph, a, b, e = pair
        player = StepPlayer(interval=1.0)
        player.show(run_dfs(graph, a), a, graph)

        for _ in range(5):
            player.update(1.0, graph)

        # All steps applied, the player has not noticed yet
        assert player.running
        assert graph.node(a).pinned
        assert graph.node(a).state == NodeState.VISITED
        assert graph.edge(e).enabled

        player.update(1.0, graph)
        assert not player.running
        assert not graph.node(a).pinned
        assert player.status()["applied"] == 5

    def test_stale_start_is_tolerated(self, pair):
        graph, a, b, e = pair
        player = StepPlayer(interval=1.0)
        player.show(StepLog(), a, graph)
        graph.remove_node(a)

        player.update(1.0, graph)
        assert not player.running
