"""Command-line entry point.

Usage::

    python -m polygon_insight ring.json [--indent 2] [--verbose]

``ring.json`` holds either a JSON list of ``[lat, lon]`` pairs or a
GeoJSON Feature/Polygon (``[lon, lat]`` order). Settings and provider
credentials come from the environment (see ``core.config``). The
report is printed to stdout as a ``ReportRecord`` JSON document.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from polygon_insight.analysis.geometry import normalize_ring, ring_from_geojson
from polygon_insight.core.config import AggregatorConfig, ConfigValidationError, Credentials
from polygon_insight.models.record import ReportRecord
from polygon_insight.orchestrators.aggregator import DataAggregator

logger = logging.getLogger("polygon_insight.cli")

EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_INPUT = 2


def load_ring(path: Path) -> list[Any]:
    """Read a ring from *path*.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the content is not JSON or holds no usable ring.
    """
    document = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(document, dict):
        ring = ring_from_geojson(document)
    elif isinstance(document, list):
        ring = normalize_ring(document)
    else:
        ring = []
    if not ring:
        msg = f"{path}: expected a list of [lat, lon] pairs or a GeoJSON Polygon"
        raise ValueError(msg)
    return ring


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="polygon-insight",
        description="Compute polygon metrics and aggregate area data with estimator fallback.",
    )
    parser.add_argument("ring", type=Path, help="JSON file with the polygon ring")
    parser.add_argument("--indent", type=int, default=2, help="JSON indent (default: 2)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        ring = load_ring(args.ring)
    except (OSError, ValueError) as exc:
        logger.error("Unreadable input | path=%s | error=%s", args.ring, exc)
        return EXIT_INPUT

    try:
        config = AggregatorConfig.from_env()
    except (ConfigValidationError, ValueError) as exc:
        logger.error("Invalid configuration | error=%s", exc)
        return EXIT_CONFIG

    report = asyncio.run(DataAggregator(config).aggregate(ring, Credentials.from_env()))
    indent = args.indent if args.indent > 0 else None
    print(ReportRecord.from_report(report).to_json(indent=indent))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
