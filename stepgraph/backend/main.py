"""
stepgraph Backend - FastAPI Application

This is the main entry point for the graph editor backend.
It provides:
- REST API for graph editing (nodes, edges), force settings and algorithm runs
- A background frame loop driving the force layout and the algorithm replay
- WebSocket endpoint for real-time updates
- CORS configuration for a local drawing frontend
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import config
from ..core import (
    AlgorithmKind,
    CreateEdgeRequest,
    CreateNodeRequest,
    ForceConfigRequest,
    FrameRequest,
    MoveNodeRequest,
    RunAlgorithmRequest,
    UpdateNodeRequest,
    validation_summary,
)
from .graph_manager import GraphLockedError, GraphManager, create_graph_manager
from .websocket_manager import WebSocketManager

logger = logging.getLogger(__name__)


# --- Background tasks ---

async def frame_loop(manager: GraphManager, frame_rate: float):
    """Tick the layout and the replay at a fixed frame rate, with measured dt."""
    loop = asyncio.get_running_loop()
    period = 1.0 / frame_rate
    last = loop.time()
    while True:
        await asyncio.sleep(period)
        now = loop.time()
        manager.tick(now - last)
        last = now


async def change_broadcaster(manager: GraphManager, ws_manager: WebSocketManager, event: asyncio.Event):
    """Broadcast changes to WebSocket clients, coalescing bursts into one message."""
    while True:
        await event.wait()
        event.clear()
        await ws_manager.notify_graph_updated(manager.get_state())


def create_app(
    manager: Optional[GraphManager] = None,
    ws_manager: Optional[WebSocketManager] = None,
    run_frame_loop: bool = config.FRAME_LOOP_ENABLED
) -> FastAPI:
    """
    Build the FastAPI application around one graph manager.

    Args:
        manager: Graph manager to serve (built from the environment if None)
        ws_manager: WebSocket manager (a fresh one if None)
        run_frame_loop: Start the background frame loop on startup

    Returns:
        The configured application
    """
    manager = manager or create_graph_manager()
    ws_manager = ws_manager or WebSocketManager()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan handler for startup/shutdown tasks."""
        # Bridge between sync GraphManager callbacks and async broadcasts
        change_event = asyncio.Event()
        manager.on_change(change_event.set)

        tasks = [asyncio.create_task(change_broadcaster(manager, ws_manager, change_event))]
        if run_frame_loop:
            tasks.append(asyncio.create_task(frame_loop(manager, config.FRAME_RATE)))
            logger.info("Frame loop running at %.0f fps", config.FRAME_RATE)

        yield

        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        await ws_manager.close_all()

    app = FastAPI(
        title="stepgraph API",
        description="Backend API for the force-directed graph editor and algorithm replay",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.manager = manager
    app.state.ws_manager = ws_manager

    # CORS for local development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(GraphLockedError)
    async def graph_locked_handler(request: Request, exc: GraphLockedError):
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    # --- Health Check ---

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok", "connections": ws_manager.connection_count}

    # --- Graph State ---

    @app.get("/api/graph")
    async def get_graph():
        """Get the current graph state."""
        return manager.get_state()

    @app.post("/api/graph/new")
    async def new_graph():
        """Start a new empty graph."""
        manager.new_graph()
        return {"success": True, "state": manager.get_state()}

    @app.post("/api/graph/reset")
    async def reset_graph():
        """Stop any replay and clear its colors and flags."""
        manager.reset_state()
        return {"success": True}

    @app.get("/api/graph/validate")
    async def validate_graph():
        """
        Validate the graph and the steps still queued for replay.

        Returns a list of issues (errors, warnings, info) and a summary.
        """
        issues = manager.validate()
        return {
            "success": True,
            "issues": [issue.to_dict() for issue in issues],
            "summary": validation_summary(issues)
        }

    # --- Node Operations ---

    @app.post("/api/nodes")
    async def create_node(request: CreateNodeRequest):
        """Create a new node."""
        node = manager.add_node(x=request.x, y=request.y, label=request.label)
        return {"success": True, "node": node.model_dump(mode="json")}

    # Hit test endpoint MUST be before the parameterized route
    @app.get("/api/nodes/at")
    async def node_at(x: float = Query(), y: float = Query()):
        """Get the topmost node under a point."""
        node = manager.node_at(x, y)
        return {"success": True, "node": node.model_dump(mode="json") if node else None}

    @app.get("/api/nodes/{node_id}")
    async def get_node(node_id: int):
        """Get a specific node."""
        node = manager.get_node(node_id)
        if node:
            return {"success": True, "node": node.model_dump(mode="json")}
        raise HTTPException(status_code=404, detail="Node not found")

    @app.patch("/api/nodes/{node_id}")
    async def update_node(node_id: int, request: UpdateNodeRequest):
        """Update a node's label or highlight."""
        node = manager.update_node(node_id, label=request.label, highlight=request.highlight)
        if node:
            return {"success": True, "node": node.model_dump(mode="json")}
        raise HTTPException(status_code=404, detail="Node not found")

    @app.post("/api/nodes/{node_id}/move")
    async def move_node(node_id: int, request: MoveNodeRequest):
        """Move a node."""
        node = manager.move_node(node_id, request.x, request.y)
        if node:
            return {"success": True, "node": node.model_dump(mode="json")}
        raise HTTPException(status_code=404, detail="Node not found")

    @app.delete("/api/nodes/{node_id}")
    async def delete_node(node_id: int):
        """Delete a node and its connected edges."""
        if manager.delete_node(node_id):
            return {"success": True}
        raise HTTPException(status_code=404, detail="Node not found")

    # --- Edge Operations ---

    @app.post("/api/edges")
    async def create_edge(request: CreateEdgeRequest):
        """Create a new edge."""
        try:
            edge = manager.add_edge(request.source, request.target)
            return {"success": True, "edge": edge.to_json_dict()}
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    @app.post("/api/edges/clique")
    async def connect_all():
        """Connect every pair of nodes."""
        edges = manager.connect_all()
        return {"success": True, "created": len(edges)}

    @app.get("/api/edges/{edge_id}")
    async def get_edge(edge_id: int):
        """Get a specific edge."""
        edge = manager.get_edge(edge_id)
        if edge:
            return {"success": True, "edge": edge.to_json_dict()}
        raise HTTPException(status_code=404, detail="Edge not found")

    @app.delete("/api/edges/{edge_id}")
    async def delete_edge(edge_id: int):
        """Delete an edge."""
        if manager.delete_edge(edge_id):
            return {"success": True}
        raise HTTPException(status_code=404, detail="Edge not found")

    # --- Force Configuration ---

    @app.get("/api/config/forces")
    async def get_forces():
        """Get the layout force configuration."""
        return {
            "push": manager.push_conf.model_dump(),
            "pull": manager.pull_conf.model_dump(),
        }

    @app.patch("/api/config/forces")
    async def update_forces(request: ForceConfigRequest):
        """Change the layout force configuration."""
        push_conf, pull_conf = manager.update_forces(
            push_force=request.push_force,
            push_distance=request.push_distance,
            pull_min_distance=request.pull_min_distance,
            pull_force_at_twice_distance=request.pull_force_at_twice_distance
        )
        return {"success": True, "push": push_conf.model_dump(), "pull": pull_conf.model_dump()}

    # --- Algorithms ---

    @app.post("/api/algorithms/run")
    async def run_algorithm(request: RunAlgorithmRequest):
        """Run an algorithm and start replaying its steps."""
        try:
            log = manager.run_algorithm(
                request.algorithm,
                start=request.start,
                directed=request.directed,
                interval=request.interval,
                cover_all=request.cover_all
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {
            "success": True,
            "algorithm": request.algorithm.value,
            "steps": log.to_list(),
            "status": manager.algorithm_status()
        }

    @app.post("/api/algorithms/stop")
    async def stop_algorithm():
        """Stop the running replay."""
        return {"success": manager.stop_algorithm()}

    @app.get("/api/algorithms/status")
    async def algorithm_status():
        """Get the status of the current replay."""
        return manager.algorithm_status()

    @app.get("/api/enums/algorithms")
    async def get_algorithms():
        """Get available algorithms."""
        return {"algorithms": [a.value for a in AlgorithmKind]}

    # --- Frames ---

    @app.post("/api/frame")
    async def advance_frame(request: FrameRequest):
        """Advance the layout and the replay by one frame."""
        manager.tick(request.dt)
        return {"success": True, "state": manager.get_state()}

    # --- WebSocket ---

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """
        WebSocket endpoint for real-time updates.

        Clients connect here to receive graph_updated events.
        """
        await ws_manager.connect(websocket)

        try:
            while True:
                data = await websocket.receive_text()
                if data == "ping":
                    await websocket.send_text('{"type": "pong"}')
        except WebSocketDisconnect:
            await ws_manager.disconnect(websocket)

    return app


app = create_app()


# --- Run with uvicorn ---

def run(host: str = config.API_HOST, port: int = config.API_PORT):
    """Serve the API with uvicorn."""
    import uvicorn
    from ..log import setup_logging

    setup_logging(config.LOG_LEVEL)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run()
