"""Tests for opcua_adapter.schema and opcua_adapter.options."""

import pytest
from asyncua import ua

from opcua_adapter.config import AdapterConfig, AnonymousAuth, UrlAddress
from opcua_adapter.connector import SourceConnector
from opcua_adapter.errors import SourceConnectionError
from opcua_adapter.options import ResolutionStatus, resolve_options
from opcua_adapter.schema import infer_schema, runtime_type_of_sample
from opcua_adapter.types.type_converter import QUDT_UNIT, XSD

from conftest import FakeConnector, make_point

CEL = 4408652


class TestInferSchema:
    def test_types_and_units(self):
        points = [
            make_point("Plant.Temperature", unit_id=CEL),
            make_point("Plant.Speed", runtime_type=XSD + "integer"),
        ]
        connector = FakeConnector(points, samples={
            "Temperature": ua.Variant(21.5, ua.VariantType.Double),
            "Speed": ua.Variant(1200, ua.VariantType.Int32),
        })

        schema = infer_schema(connector, points)
        temperature, speed = schema.event_properties

        assert schema.runtime_names == ["Temperature", "Speed"]
        assert temperature.runtime_type == XSD + "double"
        assert temperature.measurement_unit == QUDT_UNIT + "DegreeCelsius"
        assert speed.runtime_type == XSD + "integer"
        assert speed.measurement_unit is None
        assert "measurement_unit" not in speed.to_dict()

    def test_empty_set(self):
        assert infer_schema(FakeConnector(), []).event_properties == []

    def test_sample_failure_propagates(self):
        class FailingConnector(FakeConnector):
            def sample(self, point):
                raise SourceConnectionError("read failed")

        with pytest.raises(SourceConnectionError):
            infer_schema(FailingConnector(), [make_point("Plant.Speed")])


class TestRuntimeTypeOfSample:
    def test_variant_type_wins(self):
        point = make_point("Plant.Flag", runtime_type=XSD + "string")
        assert runtime_type_of_sample(point, ua.Variant(True, ua.VariantType.Boolean)) == XSD + "boolean"

    def test_falls_back_to_discovered_type(self):
        point = make_point("Plant.Blob", runtime_type=XSD + "long")
        assert runtime_type_of_sample(point, ua.Variant(b"\x00", ua.VariantType.ByteString)) == XSD + "long"

    def test_falls_back_to_value_type(self):
        point = make_point("Plant.Raw", runtime_type="")
        assert runtime_type_of_sample(point, 3.5) == XSD + "double"


class TestResolveOptions:
    def setup_method(self):
        self.points = [make_point("Plant.Temperature"), make_point("Plant.Speed")]

    def test_ready(self, full_config):
        connector = FakeConnector(options_points=self.points)
        result = resolve_options(full_config, lambda config: connector)

        assert result.status is ResolutionStatus.READY
        assert result.is_ready
        assert [(o.name, o.internal_name) for o in result.options] == [
            ("Temperature", "Plant.Temperature"),
            ("Speed", "Plant.Speed"),
        ]
        assert connector.browse_calls == [False]
        assert connector.disconnect_calls == 1

    def test_unresolved_alternatives_not_ready(self):
        config = AdapterConfig(addressing=UrlAddress("opc.tcp://plc:4840"))
        result = resolve_options(config, SourceConnector.from_config)
        assert result.status is ResolutionStatus.NOT_READY
        assert result.options == []
        assert "authentication" in result.error

    def test_missing_root_not_ready(self):
        config = AdapterConfig(UrlAddress("opc.tcp://plc:4840"), AnonymousAuth())
        connector = FakeConnector(options_points=self.points)
        result = resolve_options(config, lambda c: connector)
        assert result.status is ResolutionStatus.NOT_READY
        assert connector.connect_calls == 0

    def test_unreachable_server_unavailable(self, full_config):
        connector = FakeConnector(fail_connect=True)
        result = resolve_options(full_config, lambda c: connector)
        assert result.status is ResolutionStatus.UNAVAILABLE
        assert result.options == []
        assert "connection refused" in result.error

    def test_browse_failure_unavailable(self, full_config):
        connector = FakeConnector(fail_browse=True)
        result = resolve_options(full_config, lambda c: connector)
        assert result.status is ResolutionStatus.UNAVAILABLE
        assert connector.disconnect_calls == 1
