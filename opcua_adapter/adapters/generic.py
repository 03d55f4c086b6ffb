"""
Pull-parse driven stream adapter.

Wraps a byte-stream protocol (file, HTTP, broker, ...) whose parser and
format turn raw records into events. The protocol implementations live
outside this package; only their interface is defined here.
"""

from typing import Any, Optional, Protocol

from ..errors import AdapterError
from ..logging import log_info
from ..pipeline import AdapterPipeline
from ..types import GuessSchema
from .base import AdapterCategory


class StreamProtocol(Protocol):
    """Interface of a parsing stream protocol."""

    def run(self, pipeline: AdapterPipeline) -> None:
        ...

    def stop(self) -> None:
        ...

    def get_guess_schema(self) -> GuessSchema:
        ...

    def get_n_elements(self, n: int) -> list[dict[str, Any]]:
        ...


class GenericDataStreamAdapter:
    """Adapter delegating acquisition to a StreamProtocol."""

    ID = "opcua_adapter.generic_stream"
    adapter_id = ID

    def __init__(
        self,
        protocol: Optional[StreamProtocol] = None,
        pipeline: Optional[AdapterPipeline] = None
    ):
        self.protocol = protocol
        self.pipeline = pipeline
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def declare_model(self) -> dict[str, Any]:
        return {
            "app_id": self.ID,
            "name": "Generic data stream",
            "description": "Reads records from a stream protocol and parses them into events",
            "category": [AdapterCategory.GENERIC.value],
            "config": [],
        }

    def get_instance(
        self,
        config: StreamProtocol,
        pipeline: Optional[AdapterPipeline] = None
    ) -> 'GenericDataStreamAdapter':
        """Create an adapter bound to a protocol; performs no I/O."""
        if pipeline is None:
            pipeline = self.pipeline
        return GenericDataStreamAdapter(config, pipeline)

    def start_adapter(self) -> None:
        """Run the protocol, feeding parsed events into the pipeline."""
        protocol = self._require_protocol()
        if self.pipeline is None:
            raise AdapterError("No pipeline attached to the adapter")

        self._running = True
        log_info(f"Starting generic stream adapter with {type(protocol).__name__}")
        try:
            protocol.run(self.pipeline)
        except Exception as e:
            self._running = False
            raise AdapterError(f"Stream protocol failed: {e}") from e

    def stop_adapter(self) -> None:
        """Stop the protocol; no-op if never started."""
        if self.protocol is not None and self._running:
            self.protocol.stop()
            log_info("Generic stream adapter stopped")
        self._running = False

    def get_schema(self, config: Optional[StreamProtocol] = None) -> GuessSchema:
        protocol = config if config is not None else self._require_protocol()
        try:
            return protocol.get_guess_schema()
        except Exception as e:
            raise AdapterError(f"Could not guess schema: {e}") from e

    def _require_protocol(self) -> StreamProtocol:
        if self.protocol is None:
            raise AdapterError("Adapter instance has no protocol")
        return self.protocol
