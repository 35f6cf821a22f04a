#!/usr/bin/env python3
"""
chipview - print hardware sensor readings

Flow:
- Display options come from a YAML file (--config, default chipview.yml), then CLI flags
- Readings come from libsensors, or from a YAML snapshot with --snapshot
- For every matching chip: chip name, "Adapter: ..." line, one line per feature, blank line
- --dump writes the readings as a snapshot document instead of rendering them
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from .config import DisplayConfig
from .formatter import ChipFormatter
from .libsensors import LibsensorsSource
from .snapshot import SnapshotSource, dump_snapshot
from .source import SensorSource, SensorsError

logger = logging.getLogger(__name__)


def print_chips(source: SensorSource, config: DisplayConfig, out: TextIO) -> int:
    """Render all chips matching config.chips; returns the number of chips printed"""
    formatter = ChipFormatter(source, config, out)
    count = 0
    for chip in source.iter_chips(config.chips):
        out.write(f"{chip.name}\n")
        if config.show_adapter:
            out.write(f"Adapter: {chip.adapter}\n")
        if config.raw:
            formatter.print_chip_raw(chip)
        else:
            formatter.print_chip(chip)
        out.write("\n")
        count += 1
    return count


def open_source(config: DisplayConfig) -> SensorSource:
    if config.snapshot:
        return SnapshotSource.from_file(Path(config.snapshot))
    return LibsensorsSource()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="print hardware sensor readings")
    parser.add_argument("chips", nargs="*", metavar="CHIP",
                        help="only show chips whose name starts with CHIP")
    parser.add_argument("--config", "-c", type=Path, default=Path("chipview.yml"),
                        help="YAML configuration file (default: chipview.yml)")
    parser.add_argument("--fahrenheit", "-f", action="store_true", default=None,
                        help="show temperatures in degrees Fahrenheit")
    parser.add_argument("--raw", "-u", action="store_true", default=None,
                        help="raw output: every subfeature name and value, unformatted")
    parser.add_argument("--no-adapter", "-A", dest="no_adapter", action="store_true", default=None,
                        help="do not show the adapter of each chip")
    parser.add_argument("--snapshot",
                        help="read values from a YAML snapshot instead of libsensors")
    parser.add_argument("--dump", action="store_true",
                        help="write the readings as a YAML snapshot and exit")
    parser.add_argument("--log-level",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="logging level")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # Load config: YAML first, then CLI overrides
    config = DisplayConfig.from_file(args.config).override_with_args(args)

    logging.basicConfig(level=getattr(logging, config.log_level.upper(), logging.WARNING),
                        format="%(levelname)s: %(message)s")
    logger.debug(f"chipview starting with config: {config}")

    try:
        with open_source(config) as source:
            if args.dump:
                sys.stdout.write(dump_snapshot(source, config.chips))
                return 0
            count = print_chips(source, config, sys.stdout)
    except SensorsError as e:
        logger.error(str(e))
        return 1

    if not count:
        logger.error("No sensors found!")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
