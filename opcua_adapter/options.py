"""
Option resolution for interactive configuration.

Runs a single-level discovery against a possibly incomplete configuration
and lists the nodes the user can select. "Configuration not complete yet"
and "server unreachable" are reported as distinct statuses; neither raises.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from .config import AdapterConfig
from .connector import SourceConnector
from .errors import AdapterError, ConfigurationError
from .logging import log_debug, log_info, log_warn
from .types import Option


class ResolutionStatus(Enum):
    READY = "ready"
    NOT_READY = "not_ready"
    UNAVAILABLE = "unavailable"


@dataclass
class OptionResolution:
    """Result of one option resolution request."""
    status: ResolutionStatus
    options: list[Option] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_ready(self) -> bool:
        return self.status is ResolutionStatus.READY


ConnectorFactory = Callable[[AdapterConfig], SourceConnector]


def resolve_options(
    config: AdapterConfig,
    connector_factory: ConnectorFactory = SourceConnector.from_config
) -> OptionResolution:
    """
    List the selectable nodes below the configured root.

    Args:
        config: Current, possibly partial, configuration
        connector_factory: Builds a connector; raises ConfigurationError
            while addressing or authentication is unresolved

    Returns:
        OptionResolution with READY and the options, NOT_READY for an
        incomplete configuration, UNAVAILABLE when the server failed
    """
    try:
        connector = connector_factory(config)
        if config.root is None:
            raise ConfigurationError("No root node configured yet")
    except ConfigurationError as e:
        log_debug(f"Options not available yet: {e}")
        return OptionResolution(status=ResolutionStatus.NOT_READY, error=str(e))

    try:
        with connector:
            points = connector.browse(include_subnodes=False)
    except AdapterError as e:
        log_warn(f"Could not resolve options from {connector.server_url}: {e}")
        return OptionResolution(status=ResolutionStatus.UNAVAILABLE, error=str(e))

    options = [Option(name=point.label, internal_name=point.identifier) for point in points]
    log_info(f"Resolved {len(options)} options from {connector.server_url}")
    return OptionResolution(status=ResolutionStatus.READY, options=options)
