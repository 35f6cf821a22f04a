"""
chipview - renders hardware sensor readings as aligned text

Structure:
    chipview/
    - kinds.py       # FeatureKind / SubfeatureKind codes
    - source.py      # SensorSource interface, data model, errors
    - formatter.py   # per-feature renderers and the chip dispatcher
    - libsensors.py  # live readings through the PySensors binding
    - snapshot.py    # readings from a YAML snapshot
    - config.py      # DisplayConfig
    - cli.py         # command line entry point
"""

from .config import DisplayConfig
from .formatter import ChipFormatter, print_chip, print_chip_raw
from .kinds import MODE_R, MODE_W, FeatureKind, SubfeatureKind
from .libsensors import LibsensorsSource, is_libsensors_available
from .snapshot import SnapshotSource, dump_snapshot
from .source import (Chip, Feature, SensorReadError, SensorSource, SensorsError,
                     SourceUnavailableError, Subfeature)

__version__ = "0.1.0"

__all__ = [
    # Configuration
    'DisplayConfig',

    # Formatting
    'ChipFormatter',
    'print_chip',
    'print_chip_raw',

    # Data model
    'Chip',
    'Feature',
    'Subfeature',
    'FeatureKind',
    'SubfeatureKind',
    'MODE_R',
    'MODE_W',

    # Sources
    'SensorSource',
    'LibsensorsSource',
    'SnapshotSource',
    'dump_snapshot',
    'is_libsensors_available',

    # Errors
    'SensorsError',
    'SensorReadError',
    'SourceUnavailableError',
]
