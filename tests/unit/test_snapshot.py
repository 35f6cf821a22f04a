"""Unit tests for the YAML snapshot source"""
import pytest
import yaml

from chipview.kinds import MODE_R, MODE_W, FeatureKind, SubfeatureKind
from chipview.snapshot import SnapshotSource, dump_snapshot
from chipview.source import SensorReadError, SensorsError


@pytest.fixture
def source(sample_doc):
    return SnapshotSource.from_dict(sample_doc)


class TestSnapshotSource:

    def test_chips_in_document_order(self, source):
        assert [c.name for c in source.iter_chips()] == ["coretemp-isa-0000", "nct6775-isa-0290"]

    def test_chip_prefix_filter(self, source):
        assert [c.name for c in source.iter_chips(["nct"])] == ["nct6775-isa-0290"]
        assert list(source.iter_chips(["it87"])) == []

    def test_features_restart_on_each_call(self, source):
        chip = next(source.iter_chips())
        first = [f.name for f in source.iter_features(chip)]
        second = [f.name for f in source.iter_features(chip)]
        assert first == second == ["temp1", "temp2"]

    def test_kinds_parsed(self, source):
        chip = list(source.iter_chips())[1]
        kinds = [f.kind for f in source.iter_features(chip)]
        assert kinds == [FeatureKind.IN, FeatureKind.FAN, FeatureKind.BEEP_ENABLE]

    def test_subfeature_numbers_sequential_per_chip(self, source):
        chip = list(source.iter_chips())[1]
        numbers = [s.number for f in source.iter_features(chip) for s in source.iter_subfeatures(chip, f)]
        assert numbers == list(range(len(numbers)))

    def test_get_subfeature(self, source):
        chip = next(source.iter_chips())
        feature = next(source.iter_features(chip))
        sub = source.get_subfeature(chip, feature, SubfeatureKind.TEMP_CRIT)
        assert sub.name == "temp1_crit"
        assert source.get_value(chip, sub.number) == 100.0
        assert source.get_subfeature(chip, feature, SubfeatureKind.TEMP_MIN) is None

    def test_label_defaults_to_feature_name(self):
        source = SnapshotSource.from_dict({"chips": [{"name": "c", "features": [{"name": "temp1", "kind": "temp"}]}]})
        chip = next(source.iter_chips())
        assert source.get_label(chip, next(source.iter_features(chip))) == "temp1"

    def test_null_label(self):
        source = SnapshotSource.from_dict(
            {"chips": [{"name": "c", "features": [{"name": "temp1", "label": None, "kind": "temp"}]}]})
        chip = next(source.iter_chips())
        assert source.get_label(chip, next(source.iter_features(chip))) is None

    def test_error_entry_raises(self):
        source = SnapshotSource.from_dict({"chips": [{"name": "c", "features": [
            {"name": "in0", "kind": "in", "subfeatures": [{"name": "in0_input", "kind": "in_input", "error": "I/O error"}]},
        ]}]})
        chip = next(source.iter_chips())
        with pytest.raises(SensorReadError, match="I/O error"):
            source.get_value(chip, 0)

    def test_unknown_number_raises(self, source):
        chip = next(source.iter_chips())
        with pytest.raises(SensorReadError):
            source.get_value(chip, 99)

    def test_kind_by_code_and_unknown_name(self):
        source = SnapshotSource.from_dict({"chips": [{"name": "c", "features": [
            {"name": "temp1", "kind": 2, "subfeatures": [{"name": "x", "kind": "temp_weird"}]},
        ]}]})
        chip = next(source.iter_chips())
        feature = next(source.iter_features(chip))
        assert feature.kind is FeatureKind.TEMP
        assert next(source.iter_subfeatures(chip, feature)).kind is SubfeatureKind.UNKNOWN

    def test_flags(self):
        source = SnapshotSource.from_dict({"chips": [{"name": "c", "features": [
            {"name": "temp1", "kind": "temp", "subfeatures": [
                {"name": "temp1_input", "kind": "temp_input"},
                {"name": "temp1_beep", "kind": "temp_beep", "flags": MODE_W},
            ]},
        ]}]})
        chip = next(source.iter_chips())
        subs = list(source.iter_subfeatures(chip, next(source.iter_features(chip))))
        assert subs[0].flags == MODE_R and subs[0].readable
        assert not subs[1].readable

    def test_invalid_document(self):
        with pytest.raises(SensorsError, match="invalid snapshot"):
            SnapshotSource.from_dict({"chips": [{"adapter": "no name"}]})


class TestSnapshotFiles:

    def test_from_file(self, tmp_path, sample_doc):
        path = tmp_path / "snap.yml"
        path.write_text(yaml.safe_dump(sample_doc))
        source = SnapshotSource.from_file(path)
        assert len(list(source.iter_chips())) == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(SensorsError, match="can't load snapshot"):
            SnapshotSource.from_file(tmp_path / "missing.yml")

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "snap.yml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(SensorsError, match="expected a mapping"):
            SnapshotSource.from_file(path)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "snap.yml"
        path.write_text("chips: [unclosed\n")
        with pytest.raises(SensorsError):
            SnapshotSource.from_file(path)


class TestDump:

    def test_dump_structure(self, source):
        data = yaml.safe_load(dump_snapshot(source, ["coretemp"]))
        assert [c["name"] for c in data["chips"]] == ["coretemp-isa-0000"]
        feature = data["chips"][0]["features"][0]
        assert feature["label"] == "Package id 0"
        assert feature["kind"] == "temp"
        assert feature["subfeatures"][0] == {"name": "temp1_input", "kind": "temp_input", "value": 45.0}

    def test_dump_keeps_errors_and_flags(self):
        source = SnapshotSource.from_dict({"chips": [{"name": "c", "adapter": "a", "features": [
            {"name": "fan1", "kind": "fan", "subfeatures": [
                {"name": "fan1_input", "kind": "fan_input", "error": "I/O error"},
                {"name": "fan1_beep", "kind": "fan_beep", "flags": MODE_W},
            ]},
        ]}]})
        subs = yaml.safe_load(dump_snapshot(source))["chips"][0]["features"][0]["subfeatures"]
        assert subs[0] == {"name": "fan1_input", "kind": "fan_input", "error": "I/O error"}
        assert subs[1] == {"name": "fan1_beep", "kind": "fan_beep", "flags": MODE_W}
