"""
Host registry contract.

The host server owns the command table, the event bus and the config store.
The registrar performs exactly one of these register calls per capability
and reverses it with the matching unregister call.
"""

from abc import ABC, abstractmethod
from typing import Any

from ..models.capability import CapabilityInstance


class IHost(ABC):
    """
    Registries exposed by the host process.

    Register operations return an opaque token or raise when the host refuses
    the capability. Unregister operations take that token back and must be
    idempotent: unregistering an already-removed token is a no-op.
    """

    @abstractmethod
    def register_command(self, instance: CapabilityInstance) -> Any:
        """Insert a command into the command table."""
        pass

    @abstractmethod
    def register_listener(self, instance: CapabilityInstance) -> Any:
        """Subscribe a listener to the event bus."""
        pass

    @abstractmethod
    def register_config_schema(self, instance: CapabilityInstance) -> Any:
        """Store a config schema binding."""
        pass

    @abstractmethod
    def unregister_command(self, token: Any) -> None:
        """Remove a command registered under `token`."""
        pass

    @abstractmethod
    def unregister_listener(self, token: Any) -> None:
        """Unsubscribe a listener registered under `token`."""
        pass

    @abstractmethod
    def unregister_config_schema(self, token: Any) -> None:
        """Drop a config schema binding registered under `token`."""
        pass
