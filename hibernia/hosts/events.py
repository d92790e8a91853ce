"""
Event base classes for hosts that dispatch plain Python events.

Listeners subscribe to an event class; an event is delivered to listeners of
its own class and of every base class.
"""

from __future__ import annotations


class Event:
    """Base class for events published on a host's event bus."""

    @property
    def name(self) -> str:
        return type(self).__name__

    def __repr__(self) -> str:
        return f"<{self.name}>"


class CancellableEvent(Event):
    """An event that listeners may cancel.

    Listeners registered with ignore_cancelled=True are not called once an
    earlier listener cancelled the event.
    """

    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True
