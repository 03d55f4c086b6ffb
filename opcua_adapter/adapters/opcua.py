"""
Subscription-driven OPC UA adapter.

Connects to an OPC UA server, subscribes to the selected variables below a
configured root node and forwards assembled events to the pipeline.
"""

import threading
from typing import Any, Callable, Optional, Union

from ..assembler import SubscriptionEventAssembler, SubscriptionHandler
from ..config import AdapterConfig, OpcUaLabels
from ..connector import SourceConnector
from ..discovery import ensure_unique_labels, select_points
from ..errors import AdapterError, ConfigurationError
from ..logging import log_error, log_info
from ..options import OptionResolution, ResolutionStatus, resolve_options
from ..pipeline import AdapterPipeline
from ..schema import infer_schema
from ..types import GuessSchema, Option, Point
from .base import AdapterCategory, alternative, required_alternatives, text_parameter

ConnectorFactory = Callable[[AdapterConfig], SourceConnector]


class OpcUaAdapter:
    """
    OPC UA adapter.

    Lifecycle:
        adapter = OpcUaAdapter().get_instance(config, pipeline)
        adapter.start_adapter()
        ...
        adapter.stop_adapter()
    """

    ID = "opcua_adapter.opcua"
    adapter_id = ID

    def __init__(
        self,
        config: Optional[AdapterConfig] = None,
        pipeline: Optional[AdapterPipeline] = None,
        connector_factory: ConnectorFactory = SourceConnector.from_config
    ):
        """
        Initialize adapter.

        Args:
            config: Adapter configuration (None for the prototype instance)
            pipeline: Receiver of assembled events
            connector_factory: Builds the source connector from configuration
        """
        self.config = config
        self.pipeline = pipeline
        self._connector_factory = connector_factory

        # Running state
        self._connector: Optional[SourceConnector] = None
        self._assembler: Optional[SubscriptionEventAssembler] = None
        self._points: list[Point] = []
        self._lifecycle_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._connector is not None

    @property
    def subscription_set(self) -> list[Point]:
        return list(self._points)

    @property
    def assembler(self) -> Optional[SubscriptionEventAssembler]:
        return self._assembler

    def declare_model(self) -> dict[str, Any]:
        """Static description of the adapter and its configuration fields."""
        return {
            "app_id": self.ID,
            "name": "OPC UA",
            "description": "Subscribes to OPC UA variables and emits one event per value change",
            "category": [AdapterCategory.GENERIC.value, AdapterCategory.MANUFACTURING.value],
            "config": [
                required_alternatives(
                    OpcUaLabels.ACCESS_MODE.value,
                    alternative(OpcUaLabels.UNAUTHENTICATED.value),
                    alternative(
                        OpcUaLabels.USERNAME_GROUP.value,
                        text_parameter(OpcUaLabels.USERNAME.value),
                        text_parameter(OpcUaLabels.PASSWORD.value, secret=True),
                    ),
                ),
                required_alternatives(
                    OpcUaLabels.OPC_HOST_OR_URL.value,
                    alternative(
                        OpcUaLabels.OPC_URL.value,
                        text_parameter(OpcUaLabels.OPC_SERVER_URL.value),
                    ),
                    alternative(
                        OpcUaLabels.OPC_HOST.value,
                        text_parameter(OpcUaLabels.OPC_SERVER_HOST.value),
                        text_parameter(OpcUaLabels.OPC_SERVER_PORT.value),
                    ),
                ),
                text_parameter(OpcUaLabels.NAMESPACE_INDEX.value),
                text_parameter(OpcUaLabels.NODE_ID.value),
                {
                    "id": OpcUaLabels.AVAILABLE_NODES.value,
                    "type": "multi_selection_from_container",
                    "required": True,
                    "depends_on": [
                        OpcUaLabels.NAMESPACE_INDEX.value,
                        OpcUaLabels.NODE_ID.value,
                    ],
                },
            ],
        }

    def get_instance(
        self,
        config: Union[AdapterConfig, dict],
        pipeline: Optional[AdapterPipeline] = None
    ) -> 'OpcUaAdapter':
        """Create a configured adapter; performs no I/O."""
        if isinstance(config, dict):
            config = AdapterConfig.from_dict(config)
        if pipeline is None:
            pipeline = self.pipeline
        return OpcUaAdapter(config, pipeline, self._connector_factory)

    def start_adapter(self) -> None:
        """
        Connect, discover, and subscribe to the selected nodes.

        Raises:
            AdapterError: If configuration, connection, discovery or
                subscription fails; nothing stays connected in that case
        """
        with self._lifecycle_lock:
            if self._connector is not None:
                raise AdapterError("Adapter is already running", server_url=self._connector.server_url)

            config = self._require_config()
            if self.pipeline is None:
                raise AdapterError("No pipeline attached to the adapter", server_url=config.server_url)

            connector = self._connector_factory(config)

            try:
                connector.connect()
                points = select_points(connector.browse(include_subnodes=True), config.selected_nodes)
                if not points:
                    raise ConfigurationError("No nodes to subscribe to", server_url=connector.server_url)
                ensure_unique_labels(points)

                assembler = SubscriptionEventAssembler(points, self.pipeline)
                connector.subscribe(points, SubscriptionHandler(assembler))
            except Exception as e:
                connector.disconnect()
                raise AdapterError(
                    f"Could not connect to OPC-UA server! Server: {connector.server_url} ({e})",
                    server_url=connector.server_url
                ) from e

            self._connector = connector
            self._assembler = assembler
            self._points = points
            log_info(f"OPC UA adapter started with {len(points)} subscribed nodes")

    def stop_adapter(self) -> None:
        """
        Close the subscription and session; no-op on a stopped adapter.

        No event is emitted after this returns. When called from a pipeline
        while it processes an event (on the connector's callback thread),
        the session cannot be closed from that thread; the disconnect is
        handed to a separate thread instead.
        """
        with self._lifecycle_lock:
            connector, self._connector = self._connector, None
            assembler, self._assembler = self._assembler, None
            self._points = []

        if assembler is not None:
            assembler.close()
        if connector is None:
            return

        if connector.in_callback_thread:
            log_info("Stop requested from a notification callback, deferring disconnect")
            threading.Thread(
                target=self._disconnect,
                args=(connector,),
                daemon=True,
                name="opcua-adapter-stop"
            ).start()
            return

        self._disconnect(connector)

    @staticmethod
    def _disconnect(connector: SourceConnector) -> None:
        connector.disconnect()
        log_info("OPC UA adapter stopped")

    def get_schema(self, config: Optional[Union[AdapterConfig, dict]] = None) -> GuessSchema:
        """
        Guess the event schema by sampling every selected node once.

        Raises:
            AdapterError: On any failure; no partial schema is returned
        """
        if isinstance(config, dict):
            config = AdapterConfig.from_dict(config)
        if config is None:
            config = self._require_config()

        try:
            with self._connector_factory(config) as connector:
                points = select_points(connector.browse(include_subnodes=True), config.selected_nodes)
                ensure_unique_labels(points)
                return infer_schema(connector, points)
        except Exception as e:
            raise AdapterError(
                f"Could not guess schema for opc node! {e}",
                server_url=config.server_url
            ) from e

    def resolve_option_status(self, partial_config: Union[AdapterConfig, dict]) -> OptionResolution:
        """Option resolution keeping the not-ready and unavailable cases apart."""
        if isinstance(partial_config, dict):
            try:
                partial_config = AdapterConfig.from_dict(partial_config)
            except ConfigurationError as e:
                return OptionResolution(status=ResolutionStatus.NOT_READY, error=str(e))
        return resolve_options(partial_config, self._connector_factory)

    def resolve_options(self, partial_config: Union[AdapterConfig, dict]) -> list[Option]:
        """Selectable nodes for interactive configuration; never raises."""
        try:
            return self.resolve_option_status(partial_config).options
        except Exception as e:
            log_error(f"Option resolution failed: {e}")
            return []

    def _require_config(self) -> AdapterConfig:
        if self.config is None:
            raise ConfigurationError("Adapter instance has no configuration")
        return self.config
