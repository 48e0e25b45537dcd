"""stepgraph backend - graph manager, WebSocket broadcasts and the FastAPI app."""
