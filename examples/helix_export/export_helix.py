#!/usr/bin/env python3
"""
Helix Export Example

This example demonstrates how to:
1. Build a node chain for a banked, climbing helix
2. Populate node metrics and smoothed forces
3. Export the chain with different segment angles
4. Read the binary export back

Run with: python export_helix.py
"""

import io
import math

from trackspline import Node, NodeChain, TrackExporter, ExporterConfig, read_export_file
from trackspline import logs


def build_helix(radius: float = 25.0, climb: float = 2.0, nodes: int = 73) -> NodeChain:
    """One left-hand helix turn, banked 30 degrees, climbing ``climb`` m per radian."""
    chain = NodeChain()
    for i in range(nodes):
        phi = 2.0 * math.pi * i / (nodes - 1)
        position = [radius * (1.0 - math.cos(phi)), climb * phi, radius * math.sin(phi)]
        direction = [radius * math.sin(phi), climb, radius * math.cos(phi)]
        chain.append(Node(position, direction, roll=30.0, velocity=18.0, heart=1.1))
    chain.update_metrics()
    return chain


def export_with_angles(chain: NodeChain):
    """Compare segment counts for different subdivision thresholds."""
    print("=" * 60)
    print("1. Segment counts")
    print("=" * 60)

    for degrees in (10.0, 5.0, 2.0):
        exporter = TrackExporter(ExporterConfig(max_segment_angle=math.radians(degrees)))
        data = exporter.export_bytes(chain)
        print(f"max angle {degrees:4.1f} deg: {len(data) // 50} segments, {len(data)} bytes")


def inspect_forces(chain: NodeChain):
    """Print smoothed forces around the helix."""
    print("\n" + "=" * 60)
    print("2. Smoothed forces")
    print("=" * 60)

    chain.calc_smooth_forces()
    for node in list(chain)[::12]:
        print(
            f"s = {node.total_length:6.1f} m  "
            f"normal {node.smooth_normal:7.2f} g  "
            f"lateral {node.smooth_lateral:6.2f} g"
        )


def read_back(chain: NodeChain):
    """Decode the exported bytes."""
    print("\n" + "=" * 60)
    print("3. Read back")
    print("=" * 60)

    data = TrackExporter().export_bytes(chain)
    segments = read_export_file(io.BytesIO(data))
    half = segments[len(segments) // 2]
    print(f"Segments: {len(segments)}")
    print(f"Half-turn endpoint: {half.p1.round(2)}")


def main():
    logs.initialize(level="info")
    chain = build_helix()

    export_with_angles(chain)
    inspect_forces(chain)
    read_back(chain)

    print("\n" + "=" * 60)
    print("Helix export example complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
