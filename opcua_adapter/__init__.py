"""
OPC UA subscription adapter.

This package connects to an OPC UA server, discovers its namespace,
guesses an event schema and assembles value-change notifications into
events for a downstream pipeline, using the asyncua library.

Architecture:
    - plugin.py: Entry point with init/start_loop/stop_loop/cleanup
    - config.py: Configuration model, alternative resolution and loading
    - logging.py: Centralized logging
    - connector.py: Client session (connect, browse, sample, subscribe)
    - discovery.py: Namespace walk producing leaf points
    - schema.py: Schema inference from sampled values
    - assembler.py: Assembly of notifications into events
    - options.py: Node options for interactive configuration
    - types/: Data models and type/unit mapping
    - adapters/: Adapter implementations and registry
"""

from .adapters import AdapterRegistry, GenericDataStreamAdapter, OpcUaAdapter
from .assembler import AssemblyState, SubscriptionEventAssembler, SubscriptionHandler
from .config import AdapterConfig, ConnectionTarget, load_config, resolve_target
from .connector import SourceConnector
from .errors import (
    AdapterError,
    AssemblyDefect,
    ConfigurationError,
    DiscoveryError,
    SourceConnectionError,
)
from .plugin import init, start_loop, stop_loop, cleanup

__version__ = "1.0.0"
__all__ = [
    'AdapterConfig',
    'AdapterError',
    'AdapterRegistry',
    'AssemblyDefect',
    'AssemblyState',
    'ConfigurationError',
    'ConnectionTarget',
    'DiscoveryError',
    'GenericDataStreamAdapter',
    'OpcUaAdapter',
    'SourceConnectionError',
    'SourceConnector',
    'SubscriptionEventAssembler',
    'SubscriptionHandler',
    'init',
    'start_loop',
    'stop_loop',
    'cleanup',
    'load_config',
    'resolve_target',
]
