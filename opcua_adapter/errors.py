"""
Exception hierarchy for the OPC UA adapter.

Adapter lifecycle operations surface every connector or discovery failure
as an ``AdapterError``. The subclasses let callers (notably the option
resolver) tell an incomplete configuration apart from an unreachable
server.
"""

from typing import Optional


class AdapterError(Exception):
    """Root of the adapter exception hierarchy."""

    def __init__(self, message: str, server_url: Optional[str] = None):
        super().__init__(message)
        self.server_url = server_url


class ConfigurationError(AdapterError, ValueError):
    """A required configuration alternative or field is missing or invalid."""


class SourceConnectionError(AdapterError):
    """Session establishment or a session-level request failed."""


class DiscoveryError(AdapterError):
    """Browsing the server namespace failed; no partial result is returned."""


class AssemblyDefect(AdapterError, RuntimeError):
    """A notification referenced a node outside the subscription set."""
