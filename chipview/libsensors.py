"""libsensors source backed by the PySensors ctypes binding.

The binding loads libsensors.so when imported, so it is imported lazily: the rest
of chipview works (snapshots, tests) on machines without lm-sensors installed.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from .kinds import FeatureKind, SubfeatureKind
from .source import (Chip, Feature, SensorReadError, SensorSource, SourceUnavailableError,
                     Subfeature, chip_matches)


def _load_binding():
    import sensors
    return sensors


def is_libsensors_available() -> bool:
    """Check if the PySensors binding and the libsensors shared library can be loaded"""
    try:
        _load_binding()
        return True
    except (ImportError, OSError):
        return False


def _text(value: Any) -> str:
    """The binding exposes raw char* fields; decode bytes"""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


@dataclass
class _ChipHandle:
    raw: Any
    subfeatures: Dict[int, Any] = field(default_factory=dict)   # number -> binding subfeature


class LibsensorsSource(SensorSource):
    """Live readings from libsensors"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        super().__init__("libsensors", logger or logging.getLogger(__name__))
        self._sensors = None

    def is_available(self) -> bool:
        return is_libsensors_available()

    def open(self) -> "LibsensorsSource":
        if self._sensors is not None:
            return self
        try:
            binding = _load_binding()
        except (ImportError, OSError) as e:
            raise SourceUnavailableError(f"libsensors is not available: {e}")
        try:
            binding.init()
        except Exception as e:
            raise SourceUnavailableError(f"libsensors initialization failed: {e}")
        self._sensors = binding
        self.logger.debug(f"libsensors initialized (library {getattr(binding, 'LIB_FILENAME', '?')})")
        return self

    def close(self) -> None:
        if self._sensors is not None:
            self._sensors.cleanup()
            self._sensors = None
            self.logger.debug("libsensors cleaned up")

    def _binding(self):
        if self._sensors is None:
            raise SourceUnavailableError("libsensors source is not open")
        return self._sensors

    def iter_chips(self, match: Optional[List[str]] = None) -> Iterator[Chip]:
        for raw in self._binding().iter_detected_chips():
            chip = Chip(name=_text(raw), handle=_ChipHandle(raw))
            if not chip_matches(chip, match):
                continue
            try:
                chip.adapter = _text(raw.adapter_name)
            except Exception as e:
                self.logger.debug(f"{chip.name}: no adapter name ({e})")
            yield chip

    def iter_features(self, chip: Chip) -> Iterator[Feature]:
        for raw in chip.handle.raw:
            yield Feature(
                name=_text(raw.name),
                number=raw.number,
                kind=FeatureKind.from_code(raw.type),
                handle=raw,
            )

    def iter_subfeatures(self, chip: Chip, feature: Feature) -> Iterator[Subfeature]:
        for raw in feature.handle:
            chip.handle.subfeatures[raw.number] = raw
            yield Subfeature(
                name=_text(raw.name),
                number=raw.number,
                kind=SubfeatureKind.from_code(raw.type),
                flags=int(raw.flags),
                handle=raw,
            )

    def get_label(self, chip: Chip, feature: Feature) -> Optional[str]:
        try:
            label = feature.handle.label
        except Exception as e:
            self.logger.debug(f"{chip.name}/{feature.name}: label lookup failed: {e}")
            return None
        return None if label is None else _text(label)

    def get_value(self, chip: Chip, number: int) -> float:
        raw = chip.handle.subfeatures.get(number)
        if raw is None:
            # value requested before its feature was enumerated
            for feature in self.iter_features(chip):
                for _ in self.iter_subfeatures(chip, feature):
                    pass
            raw = chip.handle.subfeatures.get(number)
        if raw is None:
            raise SensorReadError(f"No such subfeature {number}")
        try:
            return float(raw.get_value())
        except Exception as e:
            raise SensorReadError(str(e) or type(e).__name__, getattr(e, "errno", None))
