"""
Command-line entry point.

    p5-repair sketch.html
    python -m p5_repair sketch.html

Exit status is 0 when at least one fix was applied, 1 otherwise
(including a missing file or an unexpected failure).
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from p5_repair.ai.monitoring import RepairLogger
from p5_repair.core.config import settings
from p5_repair.repair.orchestrator import RepairPipeline

logger = logging.getLogger("p5_repair.cli")


def configure_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose or settings.DEBUG else logging.INFO
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="p5-repair",
        description="Repair common defects in a p5.js / THREE.js HTML page in place.",
    )
    parser.add_argument("file", nargs="?", help="HTML file to repair (a .backup copy is written first)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    if not args.file or not Path(args.file).is_file():
        print("Usage: p5-repair <html-file>", file=sys.stderr)
        return 1

    pipeline = RepairPipeline(sink=RepairLogger(run_id=Path(args.file).name))
    try:
        report = asyncio.run(pipeline.process_file(args.file))
    except Exception as e:
        logger.error(f"Error: {e}", exc_info=True)
        return 1

    print(report.describe())
    return 0 if report.total_fixes > 0 else 1


if __name__ == "__main__":
    sys.exit(main())
