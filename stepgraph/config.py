"""
Runtime settings, read from the environment.

Every value has a default so the backend and the CLI work without any setup.
"""

import os

API_HOST = os.environ.get("STEPGRAPH_HOST", "127.0.0.1")
API_PORT = int(os.environ.get("STEPGRAPH_PORT", "8765"))
API_BASE = os.environ.get("STEPGRAPH_API_BASE", f"http://{API_HOST}:{API_PORT}/api")

# Frames per second of the background simulation loop
FRAME_RATE = float(os.environ.get("STEPGRAPH_FRAME_RATE", "60"))

# Set to 0/false/no to drive frames only through POST /api/frame
FRAME_LOOP_ENABLED = os.environ.get("STEPGRAPH_FRAME_LOOP", "1").lower() not in ("0", "false", "no")

# Seconds between two replayed algorithm steps
STEP_INTERVAL = float(os.environ.get("STEPGRAPH_STEP_INTERVAL", "0.2"))

# "reject" refuses structural edits during playback, "allow" lets stale steps no-op
EDIT_POLICY = os.environ.get("STEPGRAPH_EDIT_POLICY", "reject")

LOG_LEVEL = os.environ.get("STEPGRAPH_LOG_LEVEL", "INFO")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get(
        "STEPGRAPH_CORS_ORIGINS",
        "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173"
    ).split(",")
    if origin.strip()
]
