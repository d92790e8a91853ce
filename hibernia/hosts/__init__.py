"""
Host implementations.

InMemoryHost keeps the command table, event bus and config store in process
memory; adapters for real server processes implement the same IHost
contract.
"""

from .events import CancellableEvent, Event
from .memory import InMemoryHost, Invoker, SimpleInvoker

__all__ = [
    "CancellableEvent",
    "Event",
    "InMemoryHost",
    "Invoker",
    "SimpleInvoker",
]
