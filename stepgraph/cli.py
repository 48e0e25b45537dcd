#!/usr/bin/env python3
"""stepgraph CLI - drive the graph backend from the shell."""

import argparse
import json
import sys
import urllib.request
import urllib.error
import urllib.parse

from .config import API_BASE


def _json_out(data):
    print(json.dumps(data))
    sys.exit(0)


def _api_request(method, endpoint, data=None, params=None):
    """Make a request to the stepgraph backend."""
    url = f"{API_BASE}{endpoint}"

    if params:
        filtered = {k: v for k, v in params.items() if v is not None}
        if filtered:
            url = f"{url}?{urllib.parse.urlencode(filtered)}"

    headers = {"Content-Type": "application/json"}
    body = json.dumps(data).encode() if data is not None else None

    req = urllib.request.Request(url, data=body, headers=headers, method=method)

    try:
        with urllib.request.urlopen(req, timeout=30) as response:
            return json.loads(response.read().decode())
    except urllib.error.HTTPError as e:
        error_body = e.read().decode()
        try:
            error_data = json.loads(error_body)
            _json_out({"status": "error", "error": f"API error: {error_data.get('detail', 'Unknown error')}"})
        except json.JSONDecodeError:
            _json_out({"status": "error", "error": f"API error ({e.code}): {error_body}"})
    except urllib.error.URLError as e:
        _json_out({"status": "error", "error": f"Connection failed: {e.reason}. Is `stepgraph serve` running?"})


# ── Service ──────────────────────────────────────────────────────────────────

def cmd_serve(args):
    from .backend.main import run
    run(host=args.host, port=args.port)


def cmd_health(args):
    _json_out(_api_request("GET", "/health"))


# ── Graph ────────────────────────────────────────────────────────────────────

def cmd_get_state(args):
    _json_out(_api_request("GET", "/graph"))


def cmd_new(args):
    _json_out(_api_request("POST", "/graph/new"))


def cmd_reset(args):
    _json_out(_api_request("POST", "/graph/reset"))


def cmd_validate(args):
    _json_out(_api_request("GET", "/graph/validate"))


# ── Nodes ────────────────────────────────────────────────────────────────────

def cmd_add_node(args):
    _json_out(_api_request("POST", "/nodes", data={
        "x": args.x,
        "y": args.y,
        "label": args.label or ""
    }))


def cmd_update_node(args):
    updates = {}
    if args.label is not None:
        updates["label"] = args.label
    if args.highlight is not None:
        updates["highlight"] = args.highlight

    _json_out(_api_request("PATCH", f"/nodes/{args.node_id}", data=updates))


def cmd_move_node(args):
    _json_out(_api_request("POST", f"/nodes/{args.node_id}/move", data={"x": args.x, "y": args.y}))


def cmd_delete_node(args):
    _json_out(_api_request("DELETE", f"/nodes/{args.node_id}"))


def cmd_node_at(args):
    _json_out(_api_request("GET", "/nodes/at", params={"x": args.x, "y": args.y}))


# ── Edges ────────────────────────────────────────────────────────────────────

def cmd_add_edge(args):
    _json_out(_api_request("POST", "/edges", data={"source": args.source, "target": args.target}))


def cmd_delete_edge(args):
    _json_out(_api_request("DELETE", f"/edges/{args.edge_id}"))


def cmd_clique(args):
    _json_out(_api_request("POST", "/edges/clique"))


# ── Layout ───────────────────────────────────────────────────────────────────

def cmd_forces(args):
    updates = {
        "push_force": args.push_force,
        "push_distance": args.push_distance,
        "pull_min_distance": args.pull_min_distance,
        "pull_force_at_twice_distance": args.pull_force_at_twice_distance,
    }
    updates = {k: v for k, v in updates.items() if v is not None}
    if not updates:
        _json_out(_api_request("GET", "/config/forces"))
    _json_out(_api_request("PATCH", "/config/forces", data=updates))


def cmd_frame(args):
    result = None
    for _ in range(args.count):
        result = _api_request("POST", "/frame", data={"dt": args.dt})
    _json_out(result)


# ── Algorithms ───────────────────────────────────────────────────────────────

def cmd_run(args):
    data = {"algorithm": args.algorithm, "directed": not args.undirected}
    if args.start is not None:
        data["start"] = args.start
    if args.interval is not None:
        data["interval"] = args.interval
    if args.cover_all:
        data["cover_all"] = True
    _json_out(_api_request("POST", "/algorithms/run", data=data))


def cmd_stop(args):
    _json_out(_api_request("POST", "/algorithms/stop"))


def cmd_status(args):
    _json_out(_api_request("GET", "/algorithms/status"))


# ── Main ─────────────────────────────────────────────────────────────────────

def main(argv=None):
    parser = argparse.ArgumentParser(description="stepgraph CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    # Service
    p = sub.add_parser("serve")
    p.add_argument("--host", default=None)
    p.add_argument("--port", type=int, default=None)

    sub.add_parser("health")

    # Graph
    sub.add_parser("get-state")
    sub.add_parser("new")
    sub.add_parser("reset")
    sub.add_parser("validate")

    # Nodes
    p = sub.add_parser("add-node")
    p.add_argument("--x", type=float, default=0.0)
    p.add_argument("--y", type=float, default=0.0)
    p.add_argument("--label", default=None)

    p = sub.add_parser("update-node")
    p.add_argument("--node-id", type=int, required=True)
    p.add_argument("--label", default=None)
    p.add_argument("--highlight", choices=["normal", "highlighted"], default=None)

    p = sub.add_parser("move-node")
    p.add_argument("--node-id", type=int, required=True)
    p.add_argument("--x", type=float, required=True)
    p.add_argument("--y", type=float, required=True)

    p = sub.add_parser("delete-node")
    p.add_argument("--node-id", type=int, required=True)

    p = sub.add_parser("node-at")
    p.add_argument("--x", type=float, required=True)
    p.add_argument("--y", type=float, required=True)

    # Edges
    p = sub.add_parser("add-edge")
    p.add_argument("--source", type=int, required=True)
    p.add_argument("--target", type=int, required=True)

    p = sub.add_parser("delete-edge")
    p.add_argument("--edge-id", type=int, required=True)

    sub.add_parser("clique")

    # Layout
    p = sub.add_parser("forces")
    p.add_argument("--push-force", type=float, default=None)
    p.add_argument("--push-distance", type=float, default=None)
    p.add_argument("--pull-min-distance", type=float, default=None)
    p.add_argument("--pull-force-at-twice-distance", type=float, default=None)

    p = sub.add_parser("frame")
    p.add_argument("--dt", type=float, default=1 / 60)
    p.add_argument("--count", type=int, default=1)

    # Algorithms
    p = sub.add_parser("run")
    p.add_argument("algorithm", choices=["dfs", "bfs", "scc"])
    p.add_argument("--start", type=int, default=None)
    p.add_argument("--undirected", action="store_true")
    p.add_argument("--cover-all", action="store_true")
    p.add_argument("--interval", type=float, default=None)

    sub.add_parser("stop")
    sub.add_parser("status")

    args = parser.parse_args(argv)

    if args.command == "serve":
        from . import config
        args.host = args.host or config.API_HOST
        args.port = args.port or config.API_PORT

    cmd_map = {
        "serve": cmd_serve,
        "health": cmd_health,
        "get-state": cmd_get_state,
        "new": cmd_new,
        "reset": cmd_reset,
        "validate": cmd_validate,
        "add-node": cmd_add_node,
        "update-node": cmd_update_node,
        "move-node": cmd_move_node,
        "delete-node": cmd_delete_node,
        "node-at": cmd_node_at,
        "add-edge": cmd_add_edge,
        "delete-edge": cmd_delete_edge,
        "clique": cmd_clique,
        "forces": cmd_forces,
        "frame": cmd_frame,
        "run": cmd_run,
        "stop": cmd_stop,
        "status": cmd_status,
    }
    cmd_map[args.command](args)


if __name__ == "__main__":
    main()
