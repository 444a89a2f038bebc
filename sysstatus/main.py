#!/usr/bin/env python3
"""
Main entry point for the Linux System Status Reporter.
"""

import sys
import argparse
import logging
from typing import List, Optional

from . import __version__
from .aggregator import StatusAggregator, ReportAborted
from .config import Settings, OUTPUT_FORMATS
from .probes import get_all_probes
from .probes.base import StatusProbe
from .ui.report import SectionPrinter, render_json

logger = logging.getLogger("sysstatus")


def parse_arguments(argv: Optional[List[str]] = None) -> Settings:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Linux System Status Reporter")
    parser.add_argument("-f", "--format", choices=OUTPUT_FORMATS, default="text", help="Output format")
    parser.add_argument("--keep-going", action="store_true",
                        help="Report failing probes inline instead of aborting")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Timeout in seconds for each external command (default: none)")
    parser.add_argument("--no-color", action="store_true", help="Disable colored headings")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)

    if args.timeout is not None and args.timeout <= 0:
        parser.error("--timeout must be a positive number of seconds")

    return Settings(
        output_format=args.format,
        keep_going=args.keep_going,
        timeout=args.timeout,
        color=not args.no_color,
        verbose=args.verbose,
    )


def setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def run(settings: Settings, probes: Optional[List[StatusProbe]] = None) -> int:
    """Generate and print the report; returns the process exit status."""
    probes = get_all_probes() if probes is None else probes
    for probe in probes:
        probe.timeout = settings.timeout

    streaming = settings.output_format == "text"
    printer = SectionPrinter(color=settings.color)
    aggregator = StatusAggregator(
        probes,
        keep_going=settings.keep_going,
        on_section=printer if streaming else None
    )

    try:
        report = aggregator.generate()
    except ReportAborted as e:
        print(f"Error: {e.failure}", file=sys.stderr)
        return 1

    if not streaming:
        print(render_json(report))
    return 0


def main(argv: Optional[List[str]] = None):
    """Main function."""
    settings = parse_arguments(argv)
    setup_logging(settings.verbose)
    sys.exit(run(settings))


if __name__ == "__main__":
    main()
