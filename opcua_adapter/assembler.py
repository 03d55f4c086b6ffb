"""
Subscription event assembly.

Per-node change notifications arrive asynchronously and independently. The
assembler keeps the latest value per label and, once every subscribed node
has reported at least once, emits a snapshot of all latest values on every
further notification (last-known-value coalescing, no time window).
"""

import threading
from enum import Enum
from typing import Any, Optional

from asyncua import ua

from .errors import AssemblyDefect
from .logging import log_debug, log_error, log_info, log_warn
from .pipeline import AdapterPipeline
from .types import Point


class AssemblyState(Enum):
    """Completion state of the assembly buffer."""
    EMPTY = "empty"
    COMPLETE = "complete"


class SubscriptionEventAssembler:
    """
    Assembles per-node notifications into complete events.

    One lock guards buffer mutation, the completeness check, the snapshot
    and the downstream call, so notifications delivered on several threads
    cannot interleave and every emitted snapshot is consistent.
    """

    def __init__(self, points: list[Point], pipeline: AdapterPipeline):
        """
        Initialize assembler.

        Args:
            points: Subscription set; labels are the event field keys
            pipeline: Downstream receiver of emitted snapshots
        """
        self.pipeline = pipeline
        self.number_properties = len(points)
        self._labels: dict[ua.NodeId, str] = {point.node_id: point.label for point in points}
        self._buffer: dict[str, Any] = {}
        self._state = AssemblyState.EMPTY
        self._closed = False
        self._emitted = 0
        # Reentrant: a pipeline may stop the adapter while processing an event
        self._lock = threading.RLock()

    @property
    def state(self) -> AssemblyState:
        return self._state

    @property
    def emitted_count(self) -> int:
        return self._emitted

    @property
    def is_closed(self) -> bool:
        return self._closed

    def snapshot(self) -> dict[str, Any]:
        """Copy of the current buffer."""
        with self._lock:
            return dict(self._buffer)

    def on_value(self, node_id: ua.NodeId, value: Any) -> Optional[dict[str, Any]]:
        """
        Handle one change notification.

        Args:
            node_id: Node that changed
            value: New value

        Returns:
            The emitted snapshot, or None if nothing was emitted

        Raises:
            AssemblyDefect: If the node is not part of the subscription set
        """
        with self._lock:
            if self._closed:
                log_debug(f"Dropping notification for {node_id.to_string()} after close")
                return None

            label = self._labels.get(node_id)
            if label is None:
                message = f"Notification for node {node_id.to_string()} outside the subscription set"
                log_error(message)
                raise AssemblyDefect(message)

            self._buffer[label] = value

            if len(self._buffer) < self.number_properties:
                return None

            if self._state is AssemblyState.EMPTY:
                self._state = AssemblyState.COMPLETE
                log_info(f"All {self.number_properties} subscribed nodes reported, emitting events")

            event = dict(self._buffer)
            self._emitted += 1
            self.pipeline.process(event)
            return event

    def close(self) -> None:
        """Stop emitting; notifications after this call are dropped."""
        with self._lock:
            self._closed = True
        log_debug(f"Assembler closed after {self._emitted} events")


class SubscriptionHandler:
    """
    asyncua subscription handler forwarding data changes to the assembler.

    asyncua calls these methods on the client's event loop thread.
    """

    def __init__(self, assembler: SubscriptionEventAssembler):
        self.assembler = assembler

    def datachange_notification(self, node, val, data) -> None:
        self.assembler.on_value(node.nodeid, val)

    def status_change_notification(self, status) -> None:
        log_warn(f"Subscription status changed: {status}")
