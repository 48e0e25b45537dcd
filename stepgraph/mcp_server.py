#!/usr/bin/env python3
"""
stepgraph MCP Server

Provides MCP tools for AI agents to build graphs and run the traversal
algorithms. All changes are immediately reflected in connected frontends via
WebSocket updates.
"""

import httpx
from mcp.server.fastmcp import FastMCP
from typing import Optional
import json

from .config import API_BASE

# Create MCP server
mcp = FastMCP("stepgraph")


# --- HTTP Client Helper ---

def api_request(method: str, endpoint: str, **kwargs) -> dict:
    """Make a request to the stepgraph backend."""
    url = f"{API_BASE}{endpoint}"
    with httpx.Client(timeout=30.0) as client:
        if method == "GET":
            response = client.get(url, params=kwargs.get("params"))
        elif method == "POST":
            response = client.post(url, json=kwargs.get("json"), params=kwargs.get("params"))
        elif method == "PATCH":
            response = client.patch(url, json=kwargs.get("json"))
        elif method == "DELETE":
            response = client.delete(url)
        else:
            raise ValueError(f"Unknown method: {method}")

        if response.status_code >= 400:
            error = response.json().get("detail", "Unknown error")
            raise Exception(f"API error: {error}")

        return response.json()


# ============================================================================
# INSPECTION TOOLS
# ============================================================================

@mcp.tool()
def graph_get_current() -> str:
    """
    Get the full current graph state.

    Returns every node (position, state, color) and edge (endpoints, enabled,
    reversed), the force settings and the status of the running algorithm.
    """
    result = api_request("GET", "/graph")
    return json.dumps(result, indent=2)


@mcp.tool()
def graph_validate() -> str:
    """
    Check the graph for structural issues.

    Reports orphan nodes, self loops, duplicate edges and replay steps that
    point at deleted nodes or edges.
    """
    result = api_request("GET", "/graph/validate")
    return json.dumps(result, indent=2)


# ============================================================================
# EDITING TOOLS
# ============================================================================

@mcp.tool()
def graph_new() -> str:
    """Replace the current graph with an empty one."""
    result = api_request("POST", "/graph/new")
    return json.dumps(result, indent=2)


@mcp.tool()
def graph_add_node(x: float = 0, y: float = 0, label: str = "") -> str:
    """
    Create a new node.

    Args:
        x: X coordinate on canvas
        y: Y coordinate on canvas
        label: Optional display text

    Returns the created node with its integer handle.
    """
    result = api_request("POST", "/nodes", json={"x": x, "y": y, "label": label})
    return json.dumps(result, indent=2)


@mcp.tool()
def graph_delete_node(node_id: int) -> str:
    """
    Delete a node and every edge attached to it.

    Args:
        node_id: Handle of the node to delete
    """
    result = api_request("DELETE", f"/nodes/{node_id}")
    return json.dumps(result, indent=2)


@mcp.tool()
def graph_add_edge(source: int, target: int) -> str:
    """
    Create a directed edge.

    Args:
        source: Handle of the source node
        target: Handle of the target node

    Returns the created edge with its integer handle.
    """
    result = api_request("POST", "/edges", json={"source": source, "target": target})
    return json.dumps(result, indent=2)


@mcp.tool()
def graph_delete_edge(edge_id: int) -> str:
    """
    Delete an edge.

    Args:
        edge_id: Handle of the edge to delete
    """
    result = api_request("DELETE", f"/edges/{edge_id}")
    return json.dumps(result, indent=2)


@mcp.tool()
def graph_connect_all() -> str:
    """Connect every ordered pair of distinct nodes that is not connected yet."""
    result = api_request("POST", "/edges/clique")
    return json.dumps(result, indent=2)


# ============================================================================
# LAYOUT TOOLS
# ============================================================================

@mcp.tool()
def graph_set_forces(
    push_force: Optional[float] = None,
    push_distance: Optional[float] = None,
    pull_min_distance: Optional[float] = None,
    pull_force_at_twice_distance: Optional[float] = None
) -> str:
    """
    Tune the force-directed layout.

    Args:
        push_force: Repulsion magnitude between coincident nodes
        push_distance: Distance beyond which nodes stop repelling
        pull_min_distance: Edge length below which edges stop attracting
        pull_force_at_twice_distance: Attraction when an edge is twice the minimum length

    Only provided fields are updated; others remain unchanged.
    """
    updates = {}
    if push_force is not None:
        updates["push_force"] = push_force
    if push_distance is not None:
        updates["push_distance"] = push_distance
    if pull_min_distance is not None:
        updates["pull_min_distance"] = pull_min_distance
    if pull_force_at_twice_distance is not None:
        updates["pull_force_at_twice_distance"] = pull_force_at_twice_distance

    result = api_request("PATCH", "/config/forces", json=updates)
    return json.dumps(result, indent=2)


# ============================================================================
# ALGORITHM TOOLS
# ============================================================================

@mcp.tool()
def graph_run_algorithm(
    algorithm: str,
    start: Optional[int] = None,
    directed: bool = True,
    interval: Optional[float] = None,
    cover_all: bool = False
) -> str:
    """
    Run a traversal and replay it step by step on the canvas.

    Args:
        algorithm: One of "dfs", "bfs" or "scc"
        start: Start node handle (required for dfs and bfs)
        directed: Follow edge direction (dfs and bfs only)
        interval: Seconds between two replayed steps
        cover_all: dfs only, continue from every node the start cannot reach

    Returns the recorded steps and the replay status.
    """
    data = {"algorithm": algorithm, "directed": directed}
    if start is not None:
        data["start"] = start
    if interval is not None:
        data["interval"] = interval
    if cover_all:
        data["cover_all"] = True
    result = api_request("POST", "/algorithms/run", json=data)
    return json.dumps(result, indent=2)


@mcp.tool()
def graph_stop_algorithm() -> str:
    """Stop the running replay. Steps already shown stay on the graph."""
    result = api_request("POST", "/algorithms/stop")
    return json.dumps(result, indent=2)


@mcp.tool()
def graph_algorithm_status() -> str:
    """Get how far the current replay has progressed."""
    result = api_request("GET", "/algorithms/status")
    return json.dumps(result, indent=2)


@mcp.tool()
def graph_reset_state() -> str:
    """Stop any replay and clear node colors, pins and disabled edges."""
    result = api_request("POST", "/graph/reset")
    return json.dumps(result, indent=2)


# ============================================================================
# MAIN
# ============================================================================

def main():
    mcp.run()


if __name__ == "__main__":
    main()
