"""Registry of adapter prototypes keyed by adapter id."""

from typing import Any

from ..errors import AdapterError
from .base import Adapter


class AdapterRegistry:
    """
    Maps adapter ids to prototype instances.

    The container looks adapters up by id and calls ``get_instance`` on
    the prototype to build configured instances.
    """

    _adapters: dict[str, Adapter] = {}

    @classmethod
    def register(cls, adapter: Adapter) -> None:
        if not isinstance(adapter, Adapter):
            raise TypeError(f"{type(adapter).__name__} does not implement the adapter interface")
        cls._adapters[adapter.adapter_id] = adapter

    @classmethod
    def unregister(cls, adapter_id: str) -> None:
        cls._adapters.pop(adapter_id, None)

    @classmethod
    def has(cls, adapter_id: str) -> bool:
        return adapter_id in cls._adapters

    @classmethod
    def get(cls, adapter_id: str) -> Adapter:
        try:
            return cls._adapters[adapter_id]
        except KeyError:
            raise AdapterError(f"Unknown adapter: {adapter_id}")

    @classmethod
    def available(cls) -> list[str]:
        return sorted(cls._adapters)

    @classmethod
    def describe(cls) -> list[dict[str, Any]]:
        """Static descriptions of every registered adapter."""
        return [cls._adapters[adapter_id].declare_model() for adapter_id in cls.available()]

    @classmethod
    def create(cls, adapter_id: str, config: Any, **kwargs: Any) -> Adapter:
        """Build a configured instance of a registered adapter."""
        return cls.get(adapter_id).get_instance(config, **kwargs)
