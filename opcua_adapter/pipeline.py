"""
Downstream pipeline interface and basic sinks.

Adapters hand every finished event to ``pipeline.process(event)``. The
transform/sink stages themselves live outside this package; this module
provides the interface plus small sinks for the plugin entry point and
tests.
"""

import json
import sys
import threading
from typing import Any, Callable, Optional, Protocol, TextIO

Event = dict[str, Any]
PipelineElement = Callable[[Event], Optional[Event]]


class AdapterPipeline(Protocol):
    """Receiver of finished events."""

    def process(self, event: Event) -> None:
        ...


class ElementPipeline:
    """
    Applies elements in order, then hands the result to a sink.

    An element returning None drops the event.
    """

    def __init__(self, elements: list[PipelineElement], sink: AdapterPipeline):
        self.elements = list(elements)
        self.sink = sink

    def process(self, event: Event) -> None:
        for element in self.elements:
            event = element(event)
            if event is None:
                return
        self.sink.process(event)


class JsonLinesSink:
    """Writes one JSON object per event to a text stream."""

    def __init__(self, stream: TextIO = sys.stdout):
        self.stream = stream
        self._lock = threading.Lock()

    def process(self, event: Event) -> None:
        line = json.dumps(event, default=str)
        with self._lock:
            self.stream.write(line + "\n")
            self.stream.flush()


class CollectingSink:
    """Keeps every received event in memory."""

    def __init__(self):
        self.events: list[Event] = []
        self._lock = threading.Lock()

    def process(self, event: Event) -> None:
        with self._lock:
            self.events.append(event)

    def __len__(self) -> int:
        return len(self.events)
