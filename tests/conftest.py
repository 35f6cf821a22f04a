"""Pytest configuration and shared fixtures"""
import io

import pytest

from chipview.config import DisplayConfig
from chipview.formatter import ChipFormatter
from chipview.snapshot import SnapshotSource

# Feature kinds whose subfeature kinds are not prefixed with the feature kind
UNPREFIXED_KINDS = {"vid", "beep_enable"}


def build_feature(kind, label, name=None, **values):
    """Snapshot feature entry; keyword values become subfeatures.

    A value may be a number, or a dict with 'error' and/or 'flags' entries.
    """
    name = name or label
    subfeatures = []
    for key, value in values.items():
        sub_kind = key if kind in UNPREFIXED_KINDS else f"{kind}_{key}"
        entry = {"name": f"{name}_{key}", "kind": sub_kind}
        if isinstance(value, dict):
            entry.update(value)
        else:
            entry["value"] = value
        subfeatures.append(entry)
    return {"name": name, "label": label, "kind": kind, "subfeatures": subfeatures}


def build_doc(*features, name="testchip-isa-0000", adapter="ISA adapter"):
    return {"chips": [{"name": name, "adapter": adapter, "features": list(features)}]}


@pytest.fixture
def feature():
    """Factory for snapshot feature entries"""
    return build_feature


@pytest.fixture
def make_source():
    """Build a SnapshotSource holding a single chip with the given features"""
    def _make(*features):
        return SnapshotSource.from_dict(build_doc(*features))
    return _make


@pytest.fixture
def render(make_source):
    """Render a single chip and return the text written"""
    def _render(*features, fahrenheit=False, raw=False):
        source = make_source(*features)
        chip = next(source.iter_chips())
        out = io.StringIO()
        formatter = ChipFormatter(source, DisplayConfig(fahrenheit=fahrenheit, encoding="utf-8"), out)
        if raw:
            formatter.print_chip_raw(chip)
        else:
            formatter.print_chip(chip)
        return out.getvalue()
    return _render


@pytest.fixture
def sample_doc():
    """A small coretemp + nct6775 machine"""
    return {
        "chips": [
            build_doc(
                build_feature("temp", "Package id 0", name="temp1",
                              input=45.0, max=80.0, crit=100.0, crit_alarm=0),
                build_feature("temp", "Core 0", name="temp2",
                              input=43.0, max=80.0, crit=100.0, crit_alarm=0),
                name="coretemp-isa-0000", adapter="ISA adapter",
            )["chips"][0],
            build_doc(
                build_feature("in", "in0", input=1.23, min=0.0, max=1.74, alarm=0),
                build_feature("fan", "fan1", input=1200, min=600, div=8, alarm=0),
                build_feature("beep_enable", "beep_enable", beep_enable=1),
                name="nct6775-isa-0290", adapter="ISA adapter",
            )["chips"][0],
        ]
    }
