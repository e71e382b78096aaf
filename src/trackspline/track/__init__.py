"""
Track module - Node model and chain traversal.

This module contains:
- Node: Track station with frame, metrics and smoothed forces
- NodeChain: Ordered node collection and export traversal
- curve: Bezier arc export between two nodes
"""

from trackspline.track.node import Node
from trackspline.track.chain import NodeChain

__all__ = [
    "Node",
    "NodeChain",
]
