"""
Data models for the OPC UA adapter.

This module defines the structures exchanged between discovery, schema
inference, option resolution and event assembly.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from asyncua import ua


def derive_label(identifier: Any) -> str:
    """
    Derive the event field label of a node from its native identifier.

    The label is the last ``.``-delimited segment, or the whole identifier
    if it contains no ``.``.
    """
    text = str(identifier)
    return text.split(".")[-1]


@dataclass(frozen=True)
class Point:
    """
    One addressable leaf node discovered in the server namespace.

    Identity is the node id (namespace index + native identifier). Points
    are recreated on every discovery pass, never mutated.
    """
    node_id: ua.NodeId
    label: str
    runtime_type: str
    unit_id: int = 0

    @property
    def identifier(self) -> str:
        """Native identifier as a string."""
        return str(self.node_id.Identifier)

    @property
    def namespace_index(self) -> int:
        return self.node_id.NamespaceIndex

    @property
    def has_unit(self) -> bool:
        return self.unit_id != 0

    @classmethod
    def from_node_id(cls, node_id: ua.NodeId, runtime_type: str, unit_id: int = 0) -> 'Point':
        """Create a point, deriving its label from the native identifier."""
        return cls(
            node_id=node_id,
            label=derive_label(node_id.Identifier),
            runtime_type=runtime_type,
            unit_id=unit_id or 0,
        )


@dataclass
class EventProperty:
    """One primitive field of a guessed event schema."""
    runtime_name: str
    runtime_type: str
    label: str
    measurement_unit: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "runtime_name": self.runtime_name,
            "runtime_type": self.runtime_type,
            "label": self.label,
        }
        if self.measurement_unit is not None:
            data["measurement_unit"] = self.measurement_unit
        return data


@dataclass
class GuessSchema:
    """Ordered field list produced by one schema inference call."""
    event_properties: list[EventProperty] = field(default_factory=list)

    @property
    def runtime_names(self) -> list[str]:
        return [prop.runtime_name for prop in self.event_properties]

    def to_dict(self) -> dict:
        return {
            "event_schema": {
                "event_properties": [prop.to_dict() for prop in self.event_properties]
            }
        }


@dataclass(frozen=True)
class Option:
    """Selectable node for interactive configuration."""
    name: str
    internal_name: str

    def to_dict(self) -> dict:
        return {"name": self.name, "internal_name": self.internal_name}
