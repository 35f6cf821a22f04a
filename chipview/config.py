import argparse
import codecs
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import yaml

logger = logging.getLogger(__name__)

DEGREE_SIGN = "°"


@dataclass
class DisplayConfig:
    """Display configuration with defaults"""
    fahrenheit: bool = False
    raw: bool = False
    show_adapter: bool = True
    log_level: str = "WARNING"
    degree_symbol: Optional[str] = None
    encoding: Optional[str] = None
    chips: List[str] = None
    snapshot: Optional[str] = None

    def __post_init__(self):
        if self.chips is None:
            self.chips = []
        elif isinstance(self.chips, str):
            self.chips = [self.chips]
        elif isinstance(self.chips, (list, tuple)):
            self.chips = [str(c) for c in self.chips]
        else:
            raise TypeError(f"chips must be a name or a list of names, got {self.chips!r}")

    def unit_suffix(self, encoding: Optional[str]) -> str:
        """Temperature unit suffix, e.g. '°C', or ' C' when the encoding can't represent '°'"""
        unit = "F" if self.fahrenheit else "C"
        if self.degree_symbol is not None:
            return f"{self.degree_symbol}{unit}"
        if can_encode_degree(encoding):
            return f"{DEGREE_SIGN}{unit}"
        return f" {unit}"

    @classmethod
    def from_file(cls, config_path: Path) -> "DisplayConfig":
        """Load configuration from YAML file"""
        if not config_path.exists():
            logger.debug(f"Config file not found: {config_path}, using defaults")
            return cls()

        try:
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
            logger.debug(f"Loaded config from {config_path}: {data}")
            return cls(**data)
        except Exception as e:
            logger.warning(f"Failed to load config from {config_path}: {e}, using defaults")
            return cls()

    def override_with_args(self, args: argparse.Namespace) -> "DisplayConfig":
        """Override config with command line arguments if provided"""
        self.fahrenheit = args.fahrenheit if args.fahrenheit is not None else self.fahrenheit
        self.raw = args.raw if args.raw is not None else self.raw
        self.show_adapter = not args.no_adapter if args.no_adapter is not None else self.show_adapter
        self.log_level = args.log_level if args.log_level is not None else self.log_level
        self.snapshot = args.snapshot if args.snapshot is not None else self.snapshot
        if args.chips:
            self.chips = list(args.chips)
        return self


def can_encode_degree(encoding: Optional[str]) -> bool:
    if not encoding:
        return False
    try:
        codecs.lookup(encoding)
        DEGREE_SIGN.encode(encoding)
    except (LookupError, UnicodeEncodeError):
        return False
    return True
