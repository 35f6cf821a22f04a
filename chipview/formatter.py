"""
Reading formatter - renders one chip's features as aligned text lines.

Each feature kind has its own renderer; all renderers of a chip share the label
column width computed by get_label_size() so the ':' column lines up:

    Package id 0: +45.0°C  (high = +80.0°C, crit = +100.0°C)
    in0:          +1.23 V  (min =  +0.00 V, max =  +1.74 V)
    fan1:        1200 RPM  (min =  600 RPM, div = 8)

Acquisition failures never abort the pass: an unreadable value is logged and
shown as zero, a feature without a label is logged and skipped.
"""
import logging
import math
import sys
from typing import Optional, TextIO, Tuple

from .config import DisplayConfig
from .kinds import FeatureKind, SubfeatureKind as SK
from .source import Chip, Feature, SensorReadError, SensorSource, Subfeature

logger = logging.getLogger(__name__)

MIN_LABEL_WIDTH = 11

SENSOR_TYPES = {
    0: "disabled",
    1: "diode",
    2: "transistor",
    3: "thermal diode",
    4: "thermistor",
    5: "AMD AMDSI",
    6: "Intel PECI",
}

# blank limits column, same width as "(high = +80.0°C, hyst = +75.0°C)  "
TEMP_LIMITS_WIDTH = 34


def deg_ctof(cel: float) -> float:
    return cel * 9 / 5 + 32


def sensor_type_name(code: float) -> str:
    if not math.isfinite(code):
        return "unknown"
    code = int(code)
    # older kernels/drivers sometimes report a thermistor's beta value instead
    if code > 1000:
        code = 4
    return SENSOR_TYPES.get(code, "unknown")


class ChipFormatter:
    """Renders chips from a SensorSource according to a DisplayConfig"""

    # Feature kinds with a dedicated renderer (method names)
    RENDERERS = {
        FeatureKind.TEMP: "print_chip_temp",
        FeatureKind.IN: "print_chip_in",
        FeatureKind.FAN: "print_chip_fan",
        FeatureKind.VID: "print_chip_vid",
        FeatureKind.BEEP_ENABLE: "print_chip_beep_enable",
    }

    # Feature kinds deliberately not shown by print_chip
    UNRENDERED_KINDS = frozenset({
        FeatureKind.POWER,
        FeatureKind.ENERGY,
        FeatureKind.CURR,
        FeatureKind.HUMIDITY,
        FeatureKind.INTRUSION,
        FeatureKind.UNKNOWN,
    })

    def __init__(self, source: SensorSource, config: Optional[DisplayConfig] = None,
                 out: Optional[TextIO] = None):
        self.source = source
        self.config = config or DisplayConfig()
        self.out = out if out is not None else sys.stdout
        # in-memory text streams report no encoding and accept any character
        encoding = self.config.encoding or getattr(self.out, "encoding", None) or "utf-8"
        self.degstr = self.config.unit_suffix(encoding)

    # ---------- helpers ----------

    def get_label_size(self, chip: Chip) -> int:
        """Width of the label column: longest label (at least 11) plus one"""
        max_size = MIN_LABEL_WIDTH
        for feature in self.source.iter_features(chip):
            label = self.source.get_label(chip, feature)
            if label is not None and len(label) > max_size:
                max_size = len(label)
        return max_size + 1

    def get_value(self, chip: Chip, number: int) -> float:
        """Read a subfeature value, reporting failures and falling back to 0"""
        try:
            return self.source.get_value(chip, number)
        except SensorReadError as e:
            logger.error(f"Can't get value of subfeature {number}: {e}")
            return 0.0

    def print_label(self, label: str, space: int) -> None:
        self.out.write(f"{label}:" + " " * (space - len(label) - 1))

    def _sub(self, chip: Chip, feature: Feature, kind: SK) -> Optional[Subfeature]:
        return self.source.get_subfeature(chip, feature, kind)

    def _flag(self, chip: Chip, feature: Feature, kind: SK) -> bool:
        """True if the subfeature exists and reads non-zero"""
        sub = self._sub(chip, feature, kind)
        return bool(sub and self.get_value(chip, sub.number))

    # ---------- temperature ----------

    def print_temp_limits(self, limit1: float, limit2: float,
                          name1: Optional[str], name2: Optional[str], alarm: bool) -> None:
        degstr = self.degstr
        if self.config.fahrenheit:
            limit1 = deg_ctof(limit1)
            limit2 = deg_ctof(limit2)

        if name2:
            self.out.write(f"({name1:<4} = {limit1:+5.1f}{degstr}, "
                           f"{name2:<4} = {limit2:+5.1f}{degstr})  ")
        elif name1:
            self.out.write(f"({name1:<4} = {limit1:+5.1f}{degstr})" + " " * 18)
        else:
            self.out.write(" " * TEMP_LIMITS_WIDTH)

        if alarm:
            self.out.write("ALARM  ")

    def _crit_limits(self, chip: Chip, feature: Feature,
                     sfcrit: Subfeature) -> Tuple[float, float, str, Optional[str], bool]:
        limit1 = self.get_value(chip, sfcrit.number)
        sfhyst = self._sub(chip, feature, SK.TEMP_CRIT_HYST)
        if sfhyst:
            limit2, name2 = self.get_value(chip, sfhyst.number), "hyst"
        else:
            limit2, name2 = 0.0, None
        alarm = self._flag(chip, feature, SK.TEMP_CRIT_ALARM)
        return limit1, limit2, "crit", name2, alarm

    def print_chip_temp(self, chip: Chip, feature: Feature, label_size: int) -> None:
        label = self.source.get_label(chip, feature)
        if label is None:
            logger.error("Can't get temperature label!")
            return
        self.print_label(label, label_size)

        sf = self._sub(chip, feature, SK.TEMP_INPUT)
        val = self.get_value(chip, sf.number) if sf else 0.0

        alarm = self._flag(chip, feature, SK.TEMP_ALARM)

        sfmin = self._sub(chip, feature, SK.TEMP_MIN)
        sfmax = self._sub(chip, feature, SK.TEMP_MAX)
        sfcrit = self._sub(chip, feature, SK.TEMP_CRIT)
        crit_displayed = False

        if sfmax:
            if self._flag(chip, feature, SK.TEMP_MAX_ALARM):
                alarm = True

            if sfmin:
                limit1, s1 = self.get_value(chip, sfmin.number), "low"
                limit2, s2 = self.get_value(chip, sfmax.number), "high"
                if self._flag(chip, feature, SK.TEMP_MIN_ALARM):
                    alarm = True
            else:
                limit1, s1 = self.get_value(chip, sfmax.number), "high"
                sfhyst = self._sub(chip, feature, SK.TEMP_MAX_HYST)
                if sfhyst:
                    limit2, s2 = self.get_value(chip, sfhyst.number), "hyst"
                elif sfcrit:
                    limit2, s2 = self.get_value(chip, sfcrit.number), "crit"
                    if self._flag(chip, feature, SK.TEMP_CRIT_ALARM):
                        alarm = True
                    crit_displayed = True
                else:
                    limit2, s2 = 0.0, None
        elif sfcrit:
            limit1, limit2, s1, s2, crit_alarm = self._crit_limits(chip, feature, sfcrit)
            alarm = alarm or crit_alarm
            crit_displayed = True
        else:
            limit1 = limit2 = 0.0
            s1 = s2 = None

        if self._flag(chip, feature, SK.TEMP_FAULT):
            self.out.write("   FAULT  ")
        else:
            if self.config.fahrenheit:
                val = deg_ctof(val)
            self.out.write(f"{val:+6.1f}{self.degstr}  ")
        self.print_temp_limits(limit1, limit2, s1, s2, alarm)

        if not crit_displayed and sfcrit:
            limit1, limit2, s1, s2, alarm = self._crit_limits(chip, feature, sfcrit)
            self.out.write("\n" + " " * (label_size + 10))
            self.print_temp_limits(limit1, limit2, s1, s2, alarm)

        sf = self._sub(chip, feature, SK.TEMP_TYPE)
        if sf:
            sens = self.get_value(chip, sf.number)
            self.out.write(f"sensor = {sensor_type_name(sens)}")
        self.out.write("\n")

    # ---------- voltage ----------

    def print_chip_in(self, chip: Chip, feature: Feature, label_size: int) -> None:
        label = self.source.get_label(chip, feature)
        if label is None:
            logger.error("Can't get in label!")
            return
        self.print_label(label, label_size)

        sf = self._sub(chip, feature, SK.IN_INPUT)
        val = self.get_value(chip, sf.number) if sf else 0.0
        self.out.write(f"{val:+6.2f} V")

        sfmin = self._sub(chip, feature, SK.IN_MIN)
        sfmax = self._sub(chip, feature, SK.IN_MAX)
        if sfmin and sfmax:
            vmin = self.get_value(chip, sfmin.number)
            vmax = self.get_value(chip, sfmax.number)
            self.out.write(f"  (min = {vmin:+6.2f} V, max = {vmax:+6.2f} V)")
        elif sfmin:
            self.out.write(f"  (min = {self.get_value(chip, sfmin.number):+6.2f} V)")
        elif sfmax:
            self.out.write(f"  (max = {self.get_value(chip, sfmax.number):+6.2f} V)")

        sf = self._sub(chip, feature, SK.IN_ALARM)
        sfmin = self._sub(chip, feature, SK.IN_MIN_ALARM)
        sfmax = self._sub(chip, feature, SK.IN_MAX_ALARM)
        if sfmin or sfmax:
            alarm_max = self.get_value(chip, sfmax.number) if sfmax else 0.0
            alarm_min = self.get_value(chip, sfmin.number) if sfmin else 0.0
            which = [name for name, on in (("MIN", alarm_min), ("MAX", alarm_max)) if on]
            if which:
                self.out.write(f" ALARM ({', '.join(which)})")
        elif sf:
            self.out.write("   " + ("ALARM" if self.get_value(chip, sf.number) else ""))

        self.out.write("\n")

    # ---------- fan ----------

    def print_chip_fan(self, chip: Chip, feature: Feature, label_size: int) -> None:
        label = self.source.get_label(chip, feature)
        if label is None:
            logger.error("Can't get fan label!")
            return
        self.print_label(label, label_size)

        sf = self._sub(chip, feature, SK.FAN_INPUT)
        val = self.get_value(chip, sf.number) if sf else 0.0
        if self._flag(chip, feature, SK.FAN_FAULT):
            self.out.write("   FAULT")
        else:
            self.out.write(f"{val:4.0f} RPM")

        sfmin = self._sub(chip, feature, SK.FAN_MIN)
        sfdiv = self._sub(chip, feature, SK.FAN_DIV)
        if sfmin and sfdiv:
            fmin = self.get_value(chip, sfmin.number)
            fdiv = self.get_value(chip, sfdiv.number)
            self.out.write(f"  (min = {fmin:4.0f} RPM, div = {fdiv:1.0f})")
        elif sfmin:
            self.out.write(f"  (min = {self.get_value(chip, sfmin.number):4.0f} RPM)")
        elif sfdiv:
            self.out.write(f"  (div = {self.get_value(chip, sfdiv.number):1.0f})")

        if self._flag(chip, feature, SK.FAN_ALARM):
            self.out.write("  ALARM")

        self.out.write("\n")

    # ---------- single value features ----------

    def _read_single(self, chip: Chip, feature: Feature, kind: SK) -> Optional[Tuple[str, float]]:
        """Label and value of a one-channel feature, None if either is unavailable"""
        sub = self._sub(chip, feature, kind)
        if not sub:
            return None
        label = self.source.get_label(chip, feature)
        if label is None:
            return None
        try:
            return label, self.source.get_value(chip, sub.number)
        except SensorReadError as e:
            logger.debug(f"{feature.name}: skipped, {e}")
            return None

    def print_chip_vid(self, chip: Chip, feature: Feature, label_size: int) -> None:
        reading = self._read_single(chip, feature, SK.VID)
        if reading:
            label, vid = reading
            self.print_label(label, label_size)
            self.out.write(f"{vid:+6.3f} V\n")

    def print_chip_beep_enable(self, chip: Chip, feature: Feature, label_size: int) -> None:
        reading = self._read_single(chip, feature, SK.BEEP_ENABLE)
        if reading:
            label, beep_enable = reading
            self.print_label(label, label_size)
            self.out.write("enabled\n" if beep_enable else "disabled\n")

    # ---------- chip level ----------

    def print_chip(self, chip: Chip) -> None:
        """Render every supported feature of the chip, aligned on one label column"""
        label_size = self.get_label_size(chip)

        for feature in self.source.iter_features(chip):
            renderer = self.RENDERERS.get(feature.kind)
            if renderer is None:
                logger.debug(f"{chip.name}: no renderer for {feature.name} ({feature.kind.name})")
                continue
            getattr(self, renderer)(chip, feature, label_size)

    def print_chip_raw(self, chip: Chip) -> None:
        """Dump every feature label and subfeature value without formatting"""
        for feature in self.source.iter_features(chip):
            label = self.source.get_label(chip, feature)
            if label is None:
                logger.error("Can't get feature label!")
                continue
            self.out.write(f"{label}:\n")

            for sub in self.source.iter_subfeatures(chip, feature):
                if not sub.readable:
                    self.out.write(f"({sub.name})\n")
                    continue
                try:
                    val = self.source.get_value(chip, sub.number)
                except SensorReadError:
                    logger.error(f"Can't get feature `{sub.name}' data!")
                    continue
                self.out.write(f"  {sub.name}: {val:.2f}\n")


def print_chip(source: SensorSource, chip: Chip, config: Optional[DisplayConfig] = None,
               out: Optional[TextIO] = None) -> None:
    ChipFormatter(source, config, out).print_chip(chip)


def print_chip_raw(source: SensorSource, chip: Chip, out: Optional[TextIO] = None) -> None:
    ChipFormatter(source, out=out).print_chip_raw(chip)
