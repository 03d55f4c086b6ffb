"""
OPC UA source connector.

This module owns the live session to the server: connect, disconnect,
namespace browse, value sampling and subscription creation. Calls block the
caller while the asyncua coroutines run on the connector's private loop
thread. No call retries; failures surface immediately.
"""

import threading
from typing import Any, Callable, Optional

from asyncua import Client, ua
from asyncua.common.subscription import Subscription

from .config import (
    AdapterConfig,
    ConnectionTarget,
    RootNode,
    DEFAULT_PUBLISHING_INTERVAL_MS,
    DEFAULT_TIMEOUT_S,
    resolve_target,
)
from .discovery import NamespaceDiscovery
from .errors import ConfigurationError, DiscoveryError, SourceConnectionError
from .event_loop import LoopThread
from .logging import log_info, log_warn
from .types import Point, TypeConverter


class SourceConnector:
    """
    Manages one OPC UA client session.

    Usage:
        with SourceConnector.from_config(config) as connector:
            points = connector.browse(include_subnodes=True)
            value = connector.sample(points[0])
    """

    def __init__(
        self,
        target: ConnectionTarget,
        root: Optional[RootNode] = None,
        timeout: float = DEFAULT_TIMEOUT_S,
        publishing_interval_ms: int = DEFAULT_PUBLISHING_INTERVAL_MS,
        client_factory: Callable[..., Client] = Client
    ):
        """
        Initialize connector.

        Args:
            target: Resolved endpoint and credentials
            root: Namespace root used by browse()
            timeout: Request timeout in seconds passed to the client
            publishing_interval_ms: Subscription publishing interval
            client_factory: Builds the asyncua client (replaceable for tests)
        """
        self.target = target
        self.root = root
        self.timeout = timeout
        self.publishing_interval_ms = publishing_interval_ms
        self._client_factory = client_factory

        self._loop = LoopThread(name="opcua-client")
        self._client: Optional[Client] = None
        self._subscription: Optional[Subscription] = None
        # connect/disconnect/browse/sample never run concurrently on one session
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config: AdapterConfig) -> 'SourceConnector':
        """
        Build a connector from adapter configuration.

        Raises:
            ConfigurationError: If addressing or authentication is unresolved
        """
        return cls(
            target=resolve_target(config),
            root=config.root,
            timeout=config.timeout,
            publishing_interval_ms=config.publishing_interval_ms
        )

    @property
    def server_url(self) -> str:
        return self.target.server_url

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    @property
    def in_callback_thread(self) -> bool:
        """True on the thread that delivers subscription notifications."""
        return self._loop.in_loop_thread

    def connect(self) -> 'SourceConnector':
        """
        Establish the session.

        Returns:
            self, for chaining

        Raises:
            SourceConnectionError: If the single connection attempt fails
        """
        with self._lock:
            if self._client is not None:
                return self

            log_info(f"Connecting to OPC-UA server {self.server_url}")
            self._loop.start()

            try:
                client = self._client_factory(url=self.server_url, timeout=self.timeout)
                if self.target.username is not None:
                    client.set_user(self.target.username)
                    client.set_password(self.target.password or "")
                self._loop.run(client.connect())
            except Exception as e:
                self._loop.stop()
                raise SourceConnectionError(
                    f"Could not connect to OPC-UA server {self.server_url}: {e}",
                    server_url=self.server_url
                ) from e

            self._client = client
            log_info(f"Connected to OPC-UA server {self.server_url}")
            return self

    def disconnect(self) -> None:
        """Release the session. Idempotent; teardown errors are only logged."""
        with self._lock:
            client, self._client = self._client, None
            subscription, self._subscription = self._subscription, None

            if client is None:
                self._loop.stop()
                return

            if subscription is not None:
                try:
                    self._loop.run(subscription.delete())
                except Exception as e:
                    log_warn(f"Failed to delete subscription on {self.server_url}: {e}")

            try:
                self._loop.run(client.disconnect())
            except Exception as e:
                log_warn(f"Disconnect from {self.server_url} reported: {e}")
            finally:
                self._loop.stop()

            log_info(f"Disconnected from OPC-UA server {self.server_url}")

    def browse(self, include_subnodes: bool) -> list[Point]:
        """
        Discover leaf points below the configured root.

        Args:
            include_subnodes: Recurse into object nodes (False lists one level)

        Raises:
            ConfigurationError: If no root node is configured
            DiscoveryError: If browsing fails; no partial result is returned
        """
        with self._lock:
            client = self._require_client()
            root = self.root
            if root is None:
                raise ConfigurationError("No root node configured for browsing",
                                         server_url=self.server_url)

            try:
                discovery = NamespaceDiscovery(client.get_node(root.to_node_id()))
                return self._loop.run(discovery.discover(include_subnodes))
            except Exception as e:
                raise DiscoveryError(
                    f"Browsing {root.to_node_id().to_string()} on {self.server_url} failed: {e}",
                    server_url=self.server_url
                ) from e

    def sample(self, point: Point) -> ua.Variant:
        """
        Read the current value of one point.

        Returns:
            Variant holding the value and its OPC UA type
        """
        with self._lock:
            client = self._require_client()
            try:
                node = client.get_node(point.node_id)
                data_value = self._loop.run(node.read_data_value())
            except Exception as e:
                raise SourceConnectionError(
                    f"Reading {point.node_id.to_string()} on {self.server_url} failed: {e}",
                    server_url=self.server_url
                ) from e
            return data_value.Value

    def subscribe(self, points: list[Point], handler: Any) -> Subscription:
        """
        Create one subscription covering all points.

        Args:
            points: Points to monitor
            handler: Object with ``datachange_notification(node, val, data)``,
                called on the connector loop thread

        Returns:
            The asyncua subscription; deleted by disconnect()
        """
        with self._lock:
            client = self._require_client()
            if self._subscription is not None:
                raise SourceConnectionError(
                    "A subscription is already active on this session",
                    server_url=self.server_url
                )

            try:
                nodes = [client.get_node(point.node_id) for point in points]
                subscription = self._loop.run(
                    client.create_subscription(self.publishing_interval_ms, handler)
                )
                self._subscription = subscription
                results = self._loop.run(subscription.subscribe_data_change(nodes))
                for result in results:
                    if isinstance(result, ua.StatusCode):
                        result.check()
            except Exception as e:
                raise SourceConnectionError(
                    f"Subscribing to {len(points)} nodes on {self.server_url} failed: {e}",
                    server_url=self.server_url
                ) from e

            log_info(f"Subscribed to {len(points)} nodes on {self.server_url} "
                     f"({self.publishing_interval_ms}ms publishing interval)")
            return subscription

    @staticmethod
    def unit_label(unit_id: int) -> Optional[str]:
        """Measurement unit URI for an engineering unit id; None for 0."""
        return TypeConverter.unit_label(unit_id)

    def _require_client(self) -> Client:
        if self._client is None:
            raise SourceConnectionError(
                f"Not connected to OPC-UA server {self.server_url}",
                server_url=self.server_url
            )
        return self._client

    def __enter__(self) -> 'SourceConnector':
        return self.connect()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()
