#!/usr/bin/env python3
"""
Hazard Snapshot Script for the Hazard Globe

Runs one aggregation cycle (storms, earthquakes, low-pressure areas) against
the live sources and writes the result as JSON. Handy for checking which
storm source is answering and for seeding front-end fixtures.

Usage:
    python snapshot_hazards.py [--output PATH] [--min-magnitude M] [--limit N]
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from hazard_globe.api.hazards import HazardService
from hazard_globe.config import Settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_PATH = Path(__file__).parent.parent / "data" / "hazard_snapshot.json"


async def take_snapshot(settings: Settings, min_magnitude: float, limit: int) -> dict:
    """Run one cycle and return the JSON-ready snapshot"""
    service = HazardService(settings=settings)
    try:
        snapshot = await service.load_all(min_magnitude=min_magnitude, quake_limit=limit)
        return snapshot.to_dict()
    finally:
        await service.aclose()


def main():
    parser = argparse.ArgumentParser(
        description="Fetch one hazard snapshot and write it as JSON"
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT_PATH,
        help="Path for the snapshot JSON"
    )
    parser.add_argument(
        "--min-magnitude",
        type=float,
        default=4.5,
        help="Earthquake magnitude floor"
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=50,
        help="Maximum number of earthquakes"
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the snapshot instead of writing a file"
    )

    args = parser.parse_args()

    if args.limit < 1:
        logger.error("--limit must be at least 1")
        sys.exit(1)

    settings = Settings.from_env()
    if not settings.weather_configured:
        logger.info("No weather credential set; low-pressure areas keep static intensities")

    data = asyncio.run(take_snapshot(settings, args.min_magnitude, args.limit))

    if args.stdout:
        print(json.dumps(data, indent=2, ensure_ascii=False))
        return

    args.output.parent.mkdir(parents=True, exist_ok=True)
    with open(args.output, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)

    counts = data["counts"]
    logger.info(
        f"Wrote {args.output}: {counts['storms']} storms, {counts['quakes']} quakes, "
        f"{counts['low_pressure_areas']} low pressure areas"
    )


if __name__ == "__main__":
    main()
