
"""
recorder.py
Implements event recording for fair randomness exchanges. Stores a stream of ExchangeEvent objects for
verification, tests, or export.
Related modules:
- events.py: Defines the ExchangeEvent type.
- csv_io.py: Writes completed exchanges as transcript rows.
"""

from typing import List

from .events import ExchangeEvent


class InMemoryRecorder:
    """
    Records ExchangeEvent objects in memory for later retrieval.
    Methods:
        record(event): Add a new event.
        events(): Get all recorded events.
        event_types(): Get the event types in recording order.
    """
    def __init__(self):
        self._events: List[ExchangeEvent] = []

    def record(self, event: ExchangeEvent) -> None:
        """Add a new event to the recorder."""
        self._events.append(event)

    def events(self):
        """Return all recorded events as a list."""
        return list(self._events)

    def event_types(self) -> List[str]:
        """Return the event types in the order they were recorded."""
        return [e.event_type for e in self._events]
