"""
Adapter capability set shared by every adapter implementation.

The hosting container only relies on these operations; implementations
are independent classes, not subclasses of a common base.
"""

from enum import Enum
from typing import Any, Optional, Protocol, runtime_checkable

from ..types import GuessSchema


class AdapterCategory(Enum):
    GENERIC = "Generic"
    MANUFACTURING = "Manufacturing"


@runtime_checkable
class Adapter(Protocol):
    """
    Lifecycle contract expected by the container.

    - declare_model(): static description, no I/O
    - get_instance(config): pure construction
    - start_adapter(): may block, may raise AdapterError
    - stop_adapter(): must not raise on a stopped adapter
    - get_schema(config): guessed event schema
    """

    adapter_id: str

    def declare_model(self) -> dict[str, Any]:
        ...

    def get_instance(self, config: Any) -> 'Adapter':
        ...

    def start_adapter(self) -> None:
        ...

    def stop_adapter(self) -> None:
        ...

    def get_schema(self, config: Optional[Any] = None) -> GuessSchema:
        ...


def text_parameter(field_id: str, required: bool = True, secret: bool = False) -> dict[str, Any]:
    """Description of a free-text configuration field."""
    return {
        "id": field_id,
        "type": "secret" if secret else "text",
        "required": required,
    }


def alternative(alternative_id: str, *fields: dict[str, Any]) -> dict[str, Any]:
    """Description of one branch of an alternatives group."""
    return {"id": alternative_id, "fields": list(fields)}


def required_alternatives(group_id: str, *alternatives: dict[str, Any]) -> dict[str, Any]:
    """Description of a group where exactly one branch must be chosen."""
    return {
        "id": group_id,
        "type": "alternatives",
        "required": True,
        "alternatives": list(alternatives),
    }
