"""
Registrar: binds capability instances to the host's registries.

Each successful register() performs exactly one host mutation and records
the resulting handle in the ledger it was given. unregister() reverses one
handle. The registrar keeps no state of its own between calls.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .exceptions import HiberniaException, RegistrationError, UnregistrationWarning
from .interfaces.host import IHost
from .interfaces.logger import ILogger
from .models.capability import CapabilityInstance, CapabilityKind, RegistrationHandle
from .models.lifecycle import RegistrationLedger


class Registrar:
    """
    Registers and unregisters capabilities against one host.

    Registration order is a contract, not a detail: config schemas first
    (other capabilities may read config when invoked), then listeners, then
    commands; within a kind, scan-discovery order.
    """

    def __init__(self, host: IHost, logger: ILogger | None = None) -> None:
        self.host = host
        if logger is None:
            from ..services.logging import NullLogger

            logger = NullLogger()
        self.logger = logger

    @staticmethod
    def order(instances: Iterable[CapabilityInstance]) -> list[CapabilityInstance]:
        """Instances sorted into registration order."""
        return sorted(instances, key=lambda i: i.descriptor.sort_key)

    def register(
        self, instance: CapabilityInstance, ledger: RegistrationLedger
    ) -> RegistrationHandle:
        """
        Bind one instance to the host and record its handle.

        Args:
            instance: A resolved capability
            ledger: The current pass's ledger; receives the new handle

        Returns:
            The handle that reverses this binding

        Raises:
            RegistrationError: If the host refused the capability
        """
        kind = instance.kind
        register = {
            CapabilityKind.CONFIG_SCHEMA: self.host.register_config_schema,
            CapabilityKind.LISTENER: self.host.register_listener,
            CapabilityKind.COMMAND: self.host.register_command,
        }[kind]

        try:
            token = register(instance)
        except Exception as e:
            reason = e.message if isinstance(e, HiberniaException) else str(e)
            raise RegistrationError(
                f"Host rejected {kind.value} '{instance.identity}': {reason}",
                identity=instance.identity,
                kind=kind.value,
                cause=e,
            ) from e

        handle = RegistrationHandle(kind=kind, identity=instance.identity, token=token)
        ledger.record(handle)
        self.logger.info("Registered %s '%s'", kind.value, instance.identity)
        return handle

    def unregister(self, handle: RegistrationHandle) -> None:
        """
        Reverse one binding.

        Raises:
            UnregistrationWarning: If the host failed to remove it
        """
        unregister = self._unregister_for(handle.kind)
        try:
            unregister(handle.token)
        except Exception as e:
            raise UnregistrationWarning(
                f"Failed to unregister {handle.kind.value} '{handle.identity}': {e}",
                identity=handle.identity,
                kind=handle.kind.value,
                cause=e,
            ) from e
        self.logger.info("Unregistered %s '%s'", handle.kind.value, handle.identity)

    def _unregister_for(self, kind: CapabilityKind) -> Any:
        return {
            CapabilityKind.CONFIG_SCHEMA: self.host.unregister_config_schema,
            CapabilityKind.LISTENER: self.host.unregister_listener,
            CapabilityKind.COMMAND: self.host.unregister_command,
        }[kind]
