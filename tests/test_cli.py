"""CLI tests: argument parsing and the requests each command sends."""

import json

import pytest

from stepgraph import cli


@pytest.fixture
def requests(monkeypatch):
    sent = []

    def fake_request(method, endpoint, data=None, params=None):
        sent.append((method, endpoint, data, params))
        return {"success": True}

    monkeypatch.setattr(cli, "_api_request", fake_request)
    return sent


def _run(argv, capsys):
    with pytest.raises(SystemExit) as exit_info:
        cli.main(argv)
    assert exit_info.value.code == 0
    return json.loads(capsys.readouterr().out)


def test_add_node(requests, capsys):
    assert _run(["add-node", "--x", "1", "--y", "2", "--label", "a"], capsys) == {"success": True}
    assert requests == [("POST", "/nodes", {"x": 1.0, "y": 2.0, "label": "a"}, None)]


def test_run_undirected_bfs(requests, capsys):
    _run(["run", "bfs", "--start", "3", "--undirected"], capsys)
    assert requests == [("POST", "/algorithms/run", {"algorithm": "bfs", "directed": False, "start": 3}, None)]


def test_run_scc_without_start(requests, capsys):
    _run(["run", "scc", "--interval", "0.5"], capsys)
    assert requests[0][2] == {"algorithm": "scc", "directed": True, "interval": 0.5}


def test_forces_without_changes_reads_config(requests, capsys):
    _run(["forces"], capsys)
    assert requests == [("GET", "/config/forces", None, None)]


def test_forces_sends_only_given_fields(requests, capsys):
    _run(["forces", "--pull-min-distance", "80"], capsys)
    assert requests == [("PATCH", "/config/forces", {"pull_min_distance": 80.0}, None)]


def test_frame_repeats(requests, capsys):
    _run(["frame", "--dt", "0.5", "--count", "3"], capsys)
    assert [r[1] for r in requests] == ["/frame"] * 3
    assert requests[0][2] == {"dt": 0.5}


def test_node_at_uses_query_params(requests, capsys):
    _run(["node-at", "--x", "4", "--y", "5"], capsys)
    assert requests == [("GET", "/nodes/at", None, {"x": 4.0, "y": 5.0})]


def test_unknown_algorithm_is_rejected(requests):
    with pytest.raises(SystemExit) as exit_info:
        cli.main(["run", "dijkstra"])
    assert exit_info.value.code == 2
    assert requests == []


def test_run_dfs_cover_all(requests, capsys):
    _run(["run", "dfs", "--start", "0", "--cover-all"], capsys)
    assert requests[0][2] == {"algorithm": "dfs", "directed": True, "start": 0, "cover_all": True}
