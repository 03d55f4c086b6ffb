"""
OPC UA adapter configuration model and loader.

The inbound configuration carries two alternative groups (addressing and
authentication), each with exactly one branch selected. Parsing accepts a
partial configuration; ``resolve_target`` turns a complete one into a
``ConnectionTarget`` and raises ``ConfigurationError`` otherwise.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from asyncua import ua

from .errors import ConfigurationError
from .logging import log_info, log_error


DEFAULT_PUBLISHING_INTERVAL_MS = 1000
DEFAULT_TIMEOUT_S = 4.0


class OpcUaLabels(Enum):
    """Identifiers of the adapter's configuration fields."""
    OPC_HOST_OR_URL = "addressing"
    OPC_URL = "url"
    OPC_SERVER_URL = "server_url"
    OPC_HOST = "host_port"
    OPC_SERVER_HOST = "host"
    OPC_SERVER_PORT = "port"
    ACCESS_MODE = "authentication"
    UNAUTHENTICATED = "anonymous"
    USERNAME_GROUP = "username_password"
    USERNAME = "username"
    PASSWORD = "password"
    NAMESPACE_INDEX = "namespace_index"
    NODE_ID = "node_id"
    AVAILABLE_NODES = "selected_nodes"


# Addressing alternatives

@dataclass(frozen=True)
class UrlAddress:
    """Server addressed by a full endpoint URL."""
    url: str


@dataclass(frozen=True)
class HostPortAddress:
    """Server addressed by host and TCP port."""
    host: str
    port: int


# Authentication alternatives

@dataclass(frozen=True)
class AnonymousAuth:
    """Anonymous session."""


@dataclass(frozen=True)
class UsernameAuth:
    """Username/password session."""
    username: str
    password: str = field(default="", repr=False)


Addressing = Union[UrlAddress, HostPortAddress]
Authentication = Union[AnonymousAuth, UsernameAuth]


@dataclass(frozen=True)
class ConnectionTarget:
    """Resolved endpoint and credentials for one session."""
    address: Addressing
    auth: Authentication

    @property
    def server_url(self) -> str:
        """Endpoint URL of the resolved address."""
        if isinstance(self.address, UrlAddress):
            return self.address.url
        return f"opc.tcp://{self.address.host}:{self.address.port}"

    @property
    def username(self) -> Optional[str]:
        if isinstance(self.auth, UsernameAuth):
            return self.auth.username
        return None

    @property
    def password(self) -> Optional[str]:
        if isinstance(self.auth, UsernameAuth):
            return self.auth.password
        return None


@dataclass(frozen=True)
class RootNode:
    """Namespace root the discovery starts from."""
    namespace_index: int
    identifier: Union[int, str]

    def to_node_id(self) -> ua.NodeId:
        """Build the OPC UA node id; integer identifiers become numeric ids."""
        return ua.NodeId(self.identifier, self.namespace_index)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'RootNode':
        """Creates a RootNode instance from a dictionary."""
        try:
            namespace_index = data["namespace_index"]
            identifier = data["node_id"]
        except KeyError as e:
            raise ConfigurationError(f"Missing required field in root node: {e}")

        try:
            namespace_index = int(namespace_index)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid namespace index: {namespace_index!r}")

        if isinstance(identifier, str):
            identifier = identifier.strip()
            if identifier.isdigit():
                identifier = int(identifier)
        if identifier in ("", None):
            raise ConfigurationError("Root node id must not be empty")

        return cls(namespace_index=namespace_index, identifier=identifier)


def _parse_addressing(data: Optional[dict[str, Any]]) -> Optional[Addressing]:
    """Parse the selected addressing branch; None if no branch is selected."""
    if not data or not data.get("mode"):
        return None

    mode = data["mode"]
    if mode == OpcUaLabels.OPC_URL.value:
        url = (data.get(OpcUaLabels.OPC_SERVER_URL.value) or "").strip()
        if not url:
            raise ConfigurationError("Addressing mode 'url' requires a server url")
        return UrlAddress(url=url)

    if mode == OpcUaLabels.OPC_HOST.value:
        host = (data.get(OpcUaLabels.OPC_SERVER_HOST.value) or "").strip()
        if not host:
            raise ConfigurationError("Addressing mode 'host_port' requires a host")
        try:
            port = int(str(data.get(OpcUaLabels.OPC_SERVER_PORT.value, "")).strip())
        except ValueError:
            raise ConfigurationError(f"Invalid server port: {data.get('port')!r}")
        if not 0 < port < 65536:
            raise ConfigurationError(f"Server port out of range: {port}")
        return HostPortAddress(host=host, port=port)

    raise ConfigurationError(f"Unknown addressing mode: {mode}")


def _parse_authentication(data: Optional[dict[str, Any]]) -> Optional[Authentication]:
    """Parse the selected authentication branch; None if no branch is selected."""
    if not data or not data.get("mode"):
        return None

    mode = data["mode"]
    if mode == OpcUaLabels.UNAUTHENTICATED.value:
        return AnonymousAuth()

    if mode == OpcUaLabels.USERNAME_GROUP.value:
        username = (data.get(OpcUaLabels.USERNAME.value) or "").strip()
        if not username:
            raise ConfigurationError("Authentication mode 'username_password' requires a username")
        return UsernameAuth(username=username, password=data.get(OpcUaLabels.PASSWORD.value) or "")

    raise ConfigurationError(f"Unknown authentication mode: {mode}")


@dataclass
class AdapterConfig:
    """
    Complete or partial OPC UA adapter configuration.

    ``addressing`` and ``authentication`` are None while the user has not
    chosen a branch yet.
    """
    addressing: Optional[Addressing] = None
    authentication: Optional[Authentication] = None
    root: Optional[RootNode] = None
    selected_nodes: list[str] = field(default_factory=list)
    publishing_interval_ms: int = DEFAULT_PUBLISHING_INTERVAL_MS
    timeout: float = DEFAULT_TIMEOUT_S

    @property
    def server_url(self) -> Optional[str]:
        """Endpoint URL if the addressing branch is resolved."""
        if self.addressing is None:
            return None
        return ConnectionTarget(self.addressing, AnonymousAuth()).server_url

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'AdapterConfig':
        """Creates an AdapterConfig instance from a dictionary."""
        if not isinstance(data, dict):
            raise ConfigurationError("Adapter configuration must be a JSON object")

        addressing = _parse_addressing(data.get(OpcUaLabels.OPC_HOST_OR_URL.value))
        authentication = _parse_authentication(data.get(OpcUaLabels.ACCESS_MODE.value))

        root_data = data.get("root")
        root = RootNode.from_dict(root_data) if root_data else None

        selected = data.get(OpcUaLabels.AVAILABLE_NODES.value) or []
        if not isinstance(selected, list):
            raise ConfigurationError("selected_nodes must be a list of node identifiers")

        try:
            interval = int(data.get("publishing_interval_ms", DEFAULT_PUBLISHING_INTERVAL_MS))
            timeout = float(data.get("timeout", DEFAULT_TIMEOUT_S))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}")

        return cls(
            addressing=addressing,
            authentication=authentication,
            root=root,
            selected_nodes=[str(node_id) for node_id in selected],
            publishing_interval_ms=interval,
            timeout=timeout,
        )


def resolve_target(config: AdapterConfig) -> ConnectionTarget:
    """
    Resolve the active addressing and authentication branches.

    Raises:
        ConfigurationError: If either alternative is unresolved
    """
    address = config.addressing
    if isinstance(address, (UrlAddress, HostPortAddress)):
        pass
    elif address is None:
        raise ConfigurationError("No addressing alternative selected (url or host/port)")
    else:
        raise ConfigurationError(f"Unsupported addressing alternative: {address!r}")

    auth = config.authentication
    if isinstance(auth, (AnonymousAuth, UsernameAuth)):
        pass
    elif auth is None:
        raise ConfigurationError(
            "No authentication alternative selected (anonymous or username)",
            server_url=config.server_url,
        )
    else:
        raise ConfigurationError(f"Unsupported authentication alternative: {auth!r}")

    return ConnectionTarget(address=address, auth=auth)


def require_root(config: AdapterConfig) -> RootNode:
    """Return the configured root node or raise ConfigurationError."""
    if config.root is None:
        raise ConfigurationError("No root node configured (namespace index and node id)",
                                 server_url=config.server_url)
    return config.root


def load_config(config_path: str) -> Optional[AdapterConfig]:
    """
    Load adapter configuration from a JSON file.

    Args:
        config_path: Path to configuration file

    Returns:
        AdapterConfig or None if loading fails
    """
    path = Path(config_path)
    if not path.exists():
        log_error(f"Configuration file not found: {config_path}")
        return None

    try:
        with open(path, 'r') as f:
            raw_config = json.load(f)
    except json.JSONDecodeError as e:
        log_error(f"Invalid JSON in configuration file: {e}")
        return None

    try:
        config = AdapterConfig.from_dict(_normalize_config(raw_config))
    except ConfigurationError as e:
        log_error(f"Invalid adapter configuration: {e}")
        return None

    log_info(f"Configuration loaded from {config_path}")
    return config


def _normalize_config(raw_config: Any) -> Any:
    """
    Normalize configuration to a single adapter object.

    Handles a list of adapter configurations (first entry wins), a wrapper
    object with a "config" key, and a bare configuration object.
    """
    if isinstance(raw_config, list):
        if not raw_config:
            return {}
        raw_config = raw_config[0]

    if isinstance(raw_config, dict) and "config" in raw_config:
        return raw_config["config"]

    return raw_config


def get_default_config() -> dict:
    """
    Get default configuration for development/testing.

    Returns:
        Default configuration dictionary
    """
    return {
        "addressing": {"mode": "url", "server_url": "opc.tcp://localhost:4840"},
        "authentication": {"mode": "anonymous"},
        "root": {"namespace_index": 2, "node_id": "Objects"},
        "selected_nodes": [],
        "publishing_interval_ms": DEFAULT_PUBLISHING_INTERVAL_MS,
        "timeout": DEFAULT_TIMEOUT_S,
    }
