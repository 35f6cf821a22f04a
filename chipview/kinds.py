"""Feature and subfeature kinds, using the libsensors numeric codes."""
from enum import IntEnum

MODE_R = 0x01
MODE_W = 0x02


class FeatureKind(IntEnum):
    """Logical measurement types a chip can expose"""
    IN = 0x00
    FAN = 0x01
    TEMP = 0x02
    POWER = 0x03
    ENERGY = 0x04
    CURR = 0x05
    HUMIDITY = 0x06
    VID = 0x10
    INTRUSION = 0x11
    BEEP_ENABLE = 0x18
    UNKNOWN = 0x7fffffff

    @classmethod
    def from_code(cls, code: int) -> "FeatureKind":
        try:
            return cls(code)
        except ValueError:
            return cls.UNKNOWN


class SubfeatureKind(IntEnum):
    """Sub-reading types (feature kind in the high byte, 0x80 marks alarm/flag channels)"""
    IN_INPUT = 0x000
    IN_MIN = 0x001
    IN_MAX = 0x002
    IN_ALARM = 0x080
    IN_MIN_ALARM = 0x081
    IN_MAX_ALARM = 0x082
    IN_BEEP = 0x083

    FAN_INPUT = 0x100
    FAN_MIN = 0x101
    FAN_ALARM = 0x180
    FAN_FAULT = 0x181
    FAN_DIV = 0x182
    FAN_BEEP = 0x183

    TEMP_INPUT = 0x200
    TEMP_MAX = 0x201
    TEMP_MAX_HYST = 0x202
    TEMP_MIN = 0x203
    TEMP_CRIT = 0x204
    TEMP_CRIT_HYST = 0x205
    TEMP_ALARM = 0x280
    TEMP_MAX_ALARM = 0x281
    TEMP_MIN_ALARM = 0x282
    TEMP_CRIT_ALARM = 0x283
    TEMP_FAULT = 0x284
    TEMP_TYPE = 0x285
    TEMP_OFFSET = 0x286
    TEMP_BEEP = 0x287

    POWER_INPUT = 0x300
    ENERGY_INPUT = 0x400
    CURR_INPUT = 0x500
    HUMIDITY_INPUT = 0x600

    VID = 0x1000
    INTRUSION_ALARM = 0x1100
    BEEP_ENABLE = 0x1800

    UNKNOWN = 0x7fffffff

    @classmethod
    def from_code(cls, code: int) -> "SubfeatureKind":
        try:
            return cls(code)
        except ValueError:
            return cls.UNKNOWN


def parse_kind(enum_cls, value):
    """Resolve a kind given as enum member, integer code or member name (any case).

    Anything unrecognised resolves to enum_cls.UNKNOWN.
    """
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, int):
        return enum_cls.from_code(value)
    return enum_cls.__members__.get(str(value).strip().upper(), enum_cls.UNKNOWN)
