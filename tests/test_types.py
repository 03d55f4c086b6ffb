"""Tests for opcua_adapter.types: labels, runtime types and unit mapping."""

from asyncua import ua

from opcua_adapter.types import EventProperty, GuessSchema, Option, Point, TypeConverter, derive_label
from opcua_adapter.types.type_converter import QUDT_UNIT, UNECE_UNIT, XSD


class TestDeriveLabel:
    def test_last_dotted_segment(self):
        assert derive_label("Temperature.Zone1.Sensor3") == "Sensor3"

    def test_full_node_id_string(self):
        assert derive_label("ns=2;i=Temperature.Zone1.Sensor3") == "Sensor3"

    def test_no_dot_keeps_identifier(self):
        assert derive_label("Pressure") == "Pressure"

    def test_numeric_identifier(self):
        assert derive_label(1001) == "1001"

    def test_trailing_dot_gives_empty_label(self):
        assert derive_label("Line1.") == ""


class TestPoint:
    def test_from_node_id(self):
        point = Point.from_node_id(ua.NodeId("Plant.Line1.Speed", 3), XSD + "integer", 4408652)
        assert point.label == "Speed"
        assert point.identifier == "Plant.Line1.Speed"
        assert point.namespace_index == 3
        assert point.has_unit

    def test_missing_unit_is_zero(self):
        point = Point.from_node_id(ua.NodeId("Speed", 2), XSD + "integer", None)
        assert point.unit_id == 0
        assert not point.has_unit

    def test_identity_is_node_id(self):
        a = Point.from_node_id(ua.NodeId("A.X", 2), XSD + "double")
        b = Point.from_node_id(ua.NodeId("A.X", 2), XSD + "double")
        assert a == b
        assert len({a, b}) == 1


class TestRuntimeTypes:
    def test_variant_types(self):
        assert TypeConverter.to_runtime_type(ua.VariantType.Boolean) == XSD + "boolean"
        assert TypeConverter.to_runtime_type(ua.VariantType.Int16) == XSD + "integer"
        assert TypeConverter.to_runtime_type(ua.VariantType.Int32) == XSD + "integer"
        assert TypeConverter.to_runtime_type(ua.VariantType.UInt32) == XSD + "long"
        assert TypeConverter.to_runtime_type(ua.VariantType.Int64) == XSD + "long"
        assert TypeConverter.to_runtime_type(ua.VariantType.Float) == XSD + "float"
        assert TypeConverter.to_runtime_type(ua.VariantType.Double) == XSD + "double"
        assert TypeConverter.to_runtime_type(ua.VariantType.String) == XSD + "string"

    def test_unknown_type_is_string(self):
        assert TypeConverter.to_runtime_type(None) == XSD + "string"
        assert TypeConverter.to_runtime_type(ua.VariantType.ByteString) == XSD + "string"
        assert not TypeConverter.is_known(ua.VariantType.ByteString)

    def test_python_values(self):
        assert TypeConverter.runtime_type_of_value(True) == XSD + "boolean"
        assert TypeConverter.runtime_type_of_value(42) == XSD + "integer"
        assert TypeConverter.runtime_type_of_value(1 << 40) == XSD + "long"
        assert TypeConverter.runtime_type_of_value(2.5) == XSD + "double"
        assert TypeConverter.runtime_type_of_value("on") == XSD + "string"
        assert TypeConverter.runtime_type_of_value(None) == XSD + "string"


class TestUnits:
    def test_celsius_code(self):
        assert TypeConverter.encode_unit_code("CEL") == 4408652
        assert TypeConverter.decode_unit_code(4408652) == "CEL"

    def test_known_unit_maps_to_qudt(self):
        assert TypeConverter.unit_label(4408652) == QUDT_UNIT + "DegreeCelsius"

    def test_two_character_code(self):
        unit_id = TypeConverter.encode_unit_code("P1")
        assert unit_id == 0x5031
        assert TypeConverter.unit_label(unit_id) == QUDT_UNIT + "Percent"

    def test_unknown_code_maps_to_unece(self):
        unit_id = TypeConverter.encode_unit_code("XYZ")
        assert TypeConverter.unit_label(unit_id) == UNECE_UNIT + "XYZ"

    def test_zero_means_no_unit(self):
        assert TypeConverter.unit_label(0) is None


class TestSchemaModels:
    def test_property_without_unit_omits_key(self):
        prop = EventProperty("Speed", XSD + "integer", "Speed")
        assert "measurement_unit" not in prop.to_dict()

    def test_schema_dict(self):
        schema = GuessSchema([
            EventProperty("Temperature", XSD + "double", "Temperature", QUDT_UNIT + "DegreeCelsius"),
            EventProperty("Speed", XSD + "integer", "Speed"),
        ])
        data = schema.to_dict()
        props = data["event_schema"]["event_properties"]
        assert schema.runtime_names == ["Temperature", "Speed"]
        assert props[0]["measurement_unit"] == QUDT_UNIT + "DegreeCelsius"
        assert props[1] == {"runtime_name": "Speed", "runtime_type": XSD + "integer", "label": "Speed"}

    def test_option_dict(self):
        assert Option("Speed", "Plant.Speed").to_dict() == {"name": "Speed", "internal_name": "Plant.Speed"}
