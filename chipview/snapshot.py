"""
Snapshot source - serves chips described in a YAML document instead of live hardware.

Document shape:

    chips:
      - name: coretemp-isa-0000
        adapter: ISA adapter
        features:
          - name: temp1
            label: Package id 0        # null -> label can't be read
            kind: temp
            subfeatures:
              - {name: temp1_input, kind: temp_input, value: 45.3}
              - {name: temp1_crit_alarm, kind: temp_crit_alarm, error: "I/O error"}

Kinds are FeatureKind/SubfeatureKind member names (any case) or integer codes.
Subfeature numbers are assigned sequentially per chip, in document order.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import yaml

from .kinds import MODE_R, FeatureKind, SubfeatureKind, parse_kind
from .source import (Chip, Feature, SensorReadError, SensorSource, SensorsError,
                     Subfeature, chip_matches)


@dataclass
class _ChipData:
    chip: Chip
    features: List[Feature] = field(default_factory=list)
    labels: Dict[int, Optional[str]] = field(default_factory=dict)
    subfeatures: Dict[int, List[Subfeature]] = field(default_factory=dict)
    values: Dict[int, Any] = field(default_factory=dict)   # float, or error message str


class SnapshotSource(SensorSource):
    """In-memory sensor source built from a snapshot document"""

    def __init__(self, data: Dict[str, Any], logger: Optional[logging.Logger] = None):
        super().__init__("snapshot", logger or logging.getLogger(__name__))
        try:
            self._chips: List[_ChipData] = [self._load_chip(c) for c in (data or {}).get("chips") or []]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise SensorsError(f"invalid snapshot: {e!r}")
        self.logger.debug(f"snapshot loaded: {len(self._chips)} chips")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SnapshotSource":
        return cls(data)

    @classmethod
    def from_file(cls, path: Path) -> "SnapshotSource":
        """Load a snapshot from a YAML file"""
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise SensorsError(f"can't load snapshot {path}: {e}")
        if not isinstance(data, dict):
            raise SensorsError(f"snapshot {path}: expected a mapping at top level")
        return cls(data)

    def _load_chip(self, raw: Dict[str, Any]) -> _ChipData:
        chip = Chip(name=str(raw["name"]), adapter=str(raw.get("adapter") or ""))
        chip_data = _ChipData(chip=chip)
        chip.handle = chip_data
        number = 0

        for idx, fraw in enumerate(raw.get("features") or []):
            feature = Feature(
                name=str(fraw["name"]),
                number=idx,
                kind=parse_kind(FeatureKind, fraw.get("kind", FeatureKind.UNKNOWN)),
            )
            chip_data.features.append(feature)
            # a missing label key falls back to the feature name, like libsensors
            chip_data.labels[idx] = fraw["label"] if "label" in fraw else feature.name

            subs = []
            for sraw in fraw.get("subfeatures") or []:
                sub = Subfeature(
                    name=str(sraw["name"]),
                    number=number,
                    kind=parse_kind(SubfeatureKind, sraw.get("kind", SubfeatureKind.UNKNOWN)),
                    flags=int(sraw.get("flags", MODE_R)),
                )
                if "error" in sraw:
                    chip_data.values[number] = str(sraw["error"])
                else:
                    chip_data.values[number] = float(sraw.get("value", 0.0))
                subs.append(sub)
                number += 1
            chip_data.subfeatures[idx] = subs

        return chip_data

    def iter_chips(self, match: Optional[List[str]] = None) -> Iterator[Chip]:
        for chip_data in self._chips:
            if chip_matches(chip_data.chip, match):
                yield chip_data.chip

    def iter_features(self, chip: Chip) -> Iterator[Feature]:
        yield from chip.handle.features

    def iter_subfeatures(self, chip: Chip, feature: Feature) -> Iterator[Subfeature]:
        yield from chip.handle.subfeatures.get(feature.number, [])

    def get_label(self, chip: Chip, feature: Feature) -> Optional[str]:
        label = chip.handle.labels.get(feature.number)
        return None if label is None else str(label)

    def get_value(self, chip: Chip, number: int) -> float:
        value = chip.handle.values.get(number)
        if value is None:
            raise SensorReadError(f"no such subfeature {number}")
        if isinstance(value, str):
            raise SensorReadError(value)
        return value


def dump_snapshot(source: SensorSource, match: Optional[List[str]] = None) -> str:
    """Serialise the chips of any source into snapshot YAML"""
    chips = []
    for chip in source.iter_chips(match):
        features = []
        for feature in source.iter_features(chip):
            subfeatures = []
            for sub in source.iter_subfeatures(chip, feature):
                entry: Dict[str, Any] = {"name": sub.name, "kind": sub.kind.name.lower()}
                if sub.flags != MODE_R:
                    entry["flags"] = sub.flags
                if sub.readable:
                    try:
                        entry["value"] = source.get_value(chip, sub.number)
                    except SensorReadError as e:
                        entry["error"] = str(e)
                subfeatures.append(entry)
            features.append({
                "name": feature.name,
                "label": source.get_label(chip, feature),
                "kind": feature.kind.name.lower(),
                "subfeatures": subfeatures,
            })
        chips.append({"name": chip.name, "adapter": chip.adapter, "features": features})
    return yaml.safe_dump({"chips": chips}, sort_keys=False, allow_unicode=True)
