"""Sensor source interface - the query surface the formatter consumes"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional

from .kinds import MODE_R, FeatureKind, SubfeatureKind


class SensorsError(Exception):
    """Base class for sensor source failures"""

    def __init__(self, message: str, errno: Optional[int] = None):
        super().__init__(message)
        self.errno = errno


class SensorReadError(SensorsError):
    """A subfeature value could not be read"""


class SourceUnavailableError(SensorsError):
    """The backend behind a source cannot be opened"""


@dataclass
class Chip:
    """One hardware monitoring chip instance"""
    name: str
    adapter: str = ""
    handle: Any = None


@dataclass
class Feature:
    """Logical measurement point on a chip"""
    name: str
    number: int
    kind: FeatureKind
    handle: Any = None


@dataclass
class Subfeature:
    """Single numeric channel under a feature"""
    name: str
    number: int
    kind: SubfeatureKind
    flags: int = MODE_R
    handle: Any = None

    @property
    def readable(self) -> bool:
        return bool(self.flags & MODE_R)


def chip_matches(chip: Chip, patterns: Optional[List[str]]) -> bool:
    """Chip name filter: no patterns matches everything, otherwise prefix match"""
    if not patterns:
        return True
    return any(chip.name.startswith(p) for p in patterns)


class SensorSource(ABC):
    """Base class for everything that can enumerate chips and read their values"""

    def __init__(self, name: str, logger: Optional[logging.Logger] = None):
        self.name = name
        self.logger = logger or logging.getLogger(__name__)

    def is_available(self) -> bool:
        """Check if this source can be used. Override in subclasses for specific checks."""
        return True

    def open(self) -> "SensorSource":
        return self

    def close(self) -> None:
        pass

    def __enter__(self) -> "SensorSource":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @abstractmethod
    def iter_chips(self, match: Optional[List[str]] = None) -> Iterator[Chip]:
        """Yield detected chips, optionally filtered by name prefixes"""

    @abstractmethod
    def iter_features(self, chip: Chip) -> Iterator[Feature]:
        """Yield the chip's features in enumeration order; every call restarts"""

    @abstractmethod
    def iter_subfeatures(self, chip: Chip, feature: Feature) -> Iterator[Subfeature]:
        """Yield all subfeatures of a feature"""

    @abstractmethod
    def get_label(self, chip: Chip, feature: Feature) -> Optional[str]:
        """Return the feature's display label, or None when it can't be determined"""

    @abstractmethod
    def get_value(self, chip: Chip, number: int) -> float:
        """Return a subfeature's current value; raises SensorReadError on failure"""

    def get_subfeature(self, chip: Chip, feature: Feature,
                       kind: SubfeatureKind) -> Optional[Subfeature]:
        """Look up the subfeature of the given kind, None if the feature lacks it"""
        for sub in self.iter_subfeatures(chip, feature):
            if sub.kind == kind:
                return sub
        return None
