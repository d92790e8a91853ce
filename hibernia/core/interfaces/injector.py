"""
Injection container contract.

The lifecycle engine consumes a container through this single operation and
never depends on how bindings are declared.
"""

from abc import ABC, abstractmethod
from typing import Any


class IInjector(ABC):
    """Capability-resolution service used by the dependency resolver."""

    @abstractmethod
    def resolve(self, key: Any) -> Any:
        """
        Return a fully constructed instance for a binding key.

        Args:
            key: Binding key (a type or a string)

        Returns:
            The instance bound to the key

        Raises:
            UnboundDependencyError: If nothing is bound to the key
            CyclicDependencyError: If the key's bindings form a cycle
            BindingConstructionError: If building the instance raised
        """
        pass

    def try_resolve(self, key: Any) -> Any | None:
        """Resolve a key, returning None when it is not bound."""
        from ..exceptions import UnboundDependencyError

        try:
            return self.resolve(key)
        except UnboundDependencyError:
            return None
