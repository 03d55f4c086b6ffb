"""
Adapter implementations.

This package provides:
- Adapter: the lifecycle interface expected by the container
- OpcUaAdapter: subscription-driven OPC UA adapter
- GenericDataStreamAdapter: pull-parse driven stream adapter
- AdapterRegistry: lookup of adapter prototypes by id
"""

from .base import Adapter, AdapterCategory
from .generic import GenericDataStreamAdapter, StreamProtocol
from .opcua import OpcUaAdapter
from .registry import AdapterRegistry

AdapterRegistry.register(OpcUaAdapter())
AdapterRegistry.register(GenericDataStreamAdapter())

__all__ = [
    'Adapter',
    'AdapterCategory',
    'AdapterRegistry',
    'GenericDataStreamAdapter',
    'OpcUaAdapter',
    'StreamProtocol',
]
