"""
stepgraph - Force-directed graph editor core with recorded algorithm playback.
"""

__version__ = "1.0.0"
