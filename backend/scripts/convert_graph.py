#!/usr/bin/env python3
"""
Graph converter command line
============================

Converts graph files between GML and GraphML, choosing the direction from
the input file extension.

Usage:
    python scripts/convert_graph.py network.gml network.graphml
    python scripts/convert_graph.py network.graphml network.gml
    python scripts/convert_graph.py igraph_export.gml clean.gml --normalize

Requirements:
    Run from the backend/ directory (or set PYTHONPATH).
"""

import argparse
import sys
from pathlib import Path

# ── Ensure we can import project modules ────────────────────────────
SCRIPT_DIR = Path(__file__).resolve().parent
BACKEND_DIR = SCRIPT_DIR.parent
sys.path.insert(0, str(BACKEND_DIR))

from config import settings  # noqa: E402
from exceptions import ConversionError  # noqa: E402
from services.converter import convert_file  # noqa: E402
from utils.logging_utils import get_logger, setup_logging  # noqa: E402

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Graph file converter between gml and graphml formats",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/convert_graph.py input.gml output.graphml      # GML to GraphML
  python scripts/convert_graph.py input.graphml output.gml      # GraphML to GML
  python scripts/convert_graph.py input.gml output.gml          # normalize GML
        """,
    )
    parser.add_argument("input", type=Path, help="Input file path (.gml or .graphml)")
    parser.add_argument("output", type=Path, help="Output file path")
    parser.add_argument(
        "--normalize", action="store_true",
        help="Drop empty/NaN values and unfold JSON-encoded dicts (GML input only)",
    )
    parser.add_argument(
        "--log-level", default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Log level (default: {settings.LOG_LEVEL})",
    )
    parser.add_argument(
        "--version", action="version",
        version=f"%(prog)s {settings.APP_VERSION}",
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level, stream=sys.stderr)

    try:
        stats = convert_file(args.input, args.output, normalize=args.normalize)
    except ConversionError as e:
        logger.error(f"Conversion failed: {e}")
        return 1
    except OSError as e:
        logger.error(f"I/O error: {e}")
        return 1

    print(
        f"Converted {args.input} -> {args.output} "
        f"({stats.nodes} nodes, {stats.edges} edges) "
        f"in {stats.duration_ms:.2f}ms"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
