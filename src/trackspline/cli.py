"""
trackspline command line exporter.

Usage:
    trackspline coaster.json                      # Writes ./export/coaster.bez
    trackspline coaster.json -o out/track.bez     # Explicit output file
    trackspline coaster.json --max-angle 5        # Finer subdivision
    trackspline coaster.json --log-level debug    # Verbose logging
"""

from pathlib import Path
from typing import List, Optional
import argparse
import logging
import math

from trackspline import logs
from trackspline.errors import TrackSplineError
from trackspline.export.exporter import ExporterConfig, TrackExporter
from trackspline.track.chain import NodeChain

logger = logging.getLogger("trackspline.cli")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="trackspline",
        description="Export a coaster node chain as Bezier track segments",
    )
    parser.add_argument(
        "input",
        type=Path,
        help="Node chain JSON file",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Output file (default: ./export/<input name>.bez)",
    )
    parser.add_argument(
        "--max-angle",
        type=float,
        default=10.0,
        metavar="DEG",
        help="Largest turn per exported segment in degrees (default: 10)",
    )
    parser.add_argument(
        "--no-metrics",
        action="store_true",
        help="Use the metrics stored in the input instead of recomputing them",
    )
    parser.add_argument(
        "--no-smooth-forces",
        action="store_true",
        help="Skip the smoothed force pass",
    )

    log_group = parser.add_argument_group("Logging")
    log_group.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "critical", "off"],
        help="Set log verbosity",
    )
    log_group.add_argument(
        "--log-rules",
        help="Logging rules, e.g. 'trackspline.export.debug=true' (overrides --log-level)",
    )
    log_group.add_argument(
        "--log-file",
        type=Path,
        help="Also log to this file (rotated at 512 KiB)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Run the exporter."""
    args = parse_args(argv)
    logs.initialize(level=args.log_level, rules=args.log_rules, log_file=args.log_file)

    output = args.output or Path("export") / f"{args.input.stem}.bez"
    config = ExporterConfig(
        output_dir=str(output.parent),
        max_segment_angle=math.radians(args.max_angle),
        smooth_forces=not args.no_smooth_forces,
    )

    try:
        chain = NodeChain.from_json(args.input)
        logger.info("Loaded %d nodes from %s", len(chain), args.input)
        if args.no_metrics:
            for node in chain:
                node.update_norm()
        else:
            chain.update_metrics()
        TrackExporter(config).export_file(chain, output.name)
    except (TrackSplineError, OSError, ValueError, KeyError) as e:
        logger.error("Export failed: %s", e)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
