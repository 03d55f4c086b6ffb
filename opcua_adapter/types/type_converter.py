"""
OPC UA to event schema type conversion.

This module maps OPC UA variant types and sampled python values to the
primitive runtime type URIs used in event schemas, and engineering unit ids
(UNECE common codes) to measurement unit URIs.
"""

from enum import Enum
from typing import Any, Optional, Union

from asyncua import ua


XSD = "http://www.w3.org/2001/XMLSchema#"
QUDT_UNIT = "http://qudt.org/vocab/unit#"
UNECE_UNIT = "http://www.opcfoundation.org/UA/units/un/cefact#"


class RuntimeType(Enum):
    """Primitive runtime types of event properties."""
    BOOLEAN = XSD + "boolean"
    INTEGER = XSD + "integer"
    LONG = XSD + "long"
    FLOAT = XSD + "float"
    DOUBLE = XSD + "double"
    STRING = XSD + "string"


class TypeConverter:
    """
    Converts OPC UA type information to event schema types.

    Provides:
    - VariantType -> runtime type URI
    - python value -> runtime type URI (for sampled values)
    - engineering unit id -> unit URI
    """

    OPCUA_TO_RUNTIME: dict[ua.VariantType, RuntimeType] = {
        # Boolean
        ua.VariantType.Boolean: RuntimeType.BOOLEAN,

        # Integers that fit a 32-bit signed value
        ua.VariantType.SByte: RuntimeType.INTEGER,
        ua.VariantType.Byte: RuntimeType.INTEGER,
        ua.VariantType.Int16: RuntimeType.INTEGER,
        ua.VariantType.UInt16: RuntimeType.INTEGER,
        ua.VariantType.Int32: RuntimeType.INTEGER,

        # Wider integers
        ua.VariantType.UInt32: RuntimeType.LONG,
        ua.VariantType.Int64: RuntimeType.LONG,
        ua.VariantType.UInt64: RuntimeType.LONG,

        # Floating point
        ua.VariantType.Float: RuntimeType.FLOAT,
        ua.VariantType.Double: RuntimeType.DOUBLE,

        # Text
        ua.VariantType.String: RuntimeType.STRING,
        ua.VariantType.LocalizedText: RuntimeType.STRING,
        ua.VariantType.QualifiedName: RuntimeType.STRING,
        ua.VariantType.Guid: RuntimeType.STRING,
        ua.VariantType.DateTime: RuntimeType.STRING,
    }

    # UNECE common code -> QUDT unit name
    UNIT_CODES: dict[str, str] = {
        "CEL": "DegreeCelsius",
        "FAH": "DegreeFahrenheit",
        "KEL": "Kelvin",
        "MMT": "Millimeter",
        "CMT": "Centimeter",
        "MTR": "Meter",
        "KMT": "Kilometer",
        "C26": "MilliSecond",
        "SEC": "SecondTime",
        "MIN": "MinuteTime",
        "HUR": "Hour",
        "GRM": "Gram",
        "KGM": "Kilogram",
        "PAL": "Pascal",
        "KPA": "KiloPascal",
        "MBR": "Millibar",
        "BAR": "Bar",
        "VLT": "Volt",
        "AMP": "Ampere",
        "WTT": "Watt",
        "KWT": "Kilowatt",
        "KWH": "KilowattHour",
        "JOU": "Joule",
        "HTZ": "Hertz",
        "P1": "Percent",
        "LTR": "Liter",
        "MTQ": "CubicMeter",
        "MQH": "CubicMeterPerHour",
        "MTS": "MeterPerSecond",
        "KMH": "KilometerPerHour",
        "RPM": "RevolutionPerMinute",
        "NEU": "Newton",
        "NU": "NewtonMeter",
    }

    @classmethod
    def to_runtime_type(cls, variant_type: Optional[Union[ua.VariantType, Any]]) -> str:
        """
        Get the runtime type URI for an OPC UA variant type.

        Unknown or missing types map to string.
        """
        runtime = cls.OPCUA_TO_RUNTIME.get(variant_type, RuntimeType.STRING)
        return runtime.value

    @classmethod
    def runtime_type_of_value(cls, value: Any) -> str:
        """Get the runtime type URI for a plain python value."""
        # bool is a subclass of int, check it first
        if isinstance(value, bool):
            return RuntimeType.BOOLEAN.value
        if isinstance(value, int):
            if -(1 << 31) <= value < (1 << 31):
                return RuntimeType.INTEGER.value
            return RuntimeType.LONG.value
        if isinstance(value, float):
            return RuntimeType.DOUBLE.value
        return RuntimeType.STRING.value

    @classmethod
    def is_known(cls, variant_type: Any) -> bool:
        return variant_type in cls.OPCUA_TO_RUNTIME

    @staticmethod
    def decode_unit_code(unit_id: int) -> str:
        """
        Decode an EUInformation UnitId into its UNECE common code.

        Each character of the code is one byte of the id, most significant
        first (``CEL`` -> 0x43454C).
        """
        chars = []
        remaining = unit_id
        while remaining > 0:
            chars.append(chr(remaining & 0xFF))
            remaining >>= 8
        return "".join(reversed(chars))

    @staticmethod
    def encode_unit_code(code: str) -> int:
        """Encode a UNECE common code as an EUInformation UnitId."""
        unit_id = 0
        for char in code:
            unit_id = (unit_id << 8) | ord(char)
        return unit_id

    @classmethod
    def unit_label(cls, unit_id: int) -> Optional[str]:
        """
        Map an engineering unit id to a measurement unit URI.

        Args:
            unit_id: EUInformation UnitId, 0 means no unit

        Returns:
            QUDT URI for known codes, UNECE URI for other codes, None for 0
        """
        if not unit_id:
            return None

        code = cls.decode_unit_code(unit_id)
        qudt_name = cls.UNIT_CODES.get(code)
        if qudt_name:
            return QUDT_UNIT + qudt_name
        return UNECE_UNIT + code
