"""
Config source contract.

Config schemas are populated from a deserializer the plugin provides; this
interface is all the resolver needs from it.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any


class IConfigSource(ABC):
    """Serves already-deserialized configuration sections."""

    @abstractmethod
    def section(self, name: str) -> Mapping[str, Any]:
        """
        Get the values of one configuration section.

        Args:
            name: Section name; dots address nested tables ("economy.rates")

        Returns:
            Mapping of field name to raw value; empty if the section is absent
        """
        pass
