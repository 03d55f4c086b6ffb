"""
Schema inference for the OPC UA adapter.

Each discovered point is sampled once to learn its runtime type. Sampling
never goes through a subscription.
"""

from typing import Any, Protocol

from asyncua import ua

from .logging import log_info
from .types import EventProperty, GuessSchema, Point, TypeConverter


class Sampler(Protocol):
    """The connector operations schema inference needs."""

    def sample(self, point: Point) -> ua.Variant:
        ...

    def unit_label(self, unit_id: int) -> Any:
        ...


def runtime_type_of_sample(point: Point, sample: Any) -> str:
    """
    Runtime type of a sampled value.

    Prefers the variant's OPC UA type, then the type discovered from the
    node's data type attribute, then the python type of the value.
    """
    variant_type = getattr(sample, "VariantType", None)
    if TypeConverter.is_known(variant_type):
        return TypeConverter.to_runtime_type(variant_type)

    if point.runtime_type:
        return point.runtime_type

    value = getattr(sample, "Value", sample)
    return TypeConverter.runtime_type_of_value(value)


def infer_schema(connector: Sampler, points: list[Point]) -> GuessSchema:
    """
    Build the event schema of a subscription set.

    Args:
        connector: Connected source used to sample each point once
        points: Points in event field order

    Returns:
        GuessSchema with one property per point; errors propagate and no
        partial schema is returned
    """
    properties: list[EventProperty] = []

    for point in points:
        sample = connector.sample(point)
        prop = EventProperty(
            runtime_name=point.label,
            runtime_type=runtime_type_of_sample(point, sample),
            label=point.label
        )
        if point.unit_id != 0:
            prop.measurement_unit = connector.unit_label(point.unit_id)
        properties.append(prop)

    log_info(f"Inferred schema with {len(properties)} properties")
    return GuessSchema(event_properties=properties)
