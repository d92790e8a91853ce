"""
Interfaces for hibernia's external collaborators.

Abstract base classes for the injection container, the host registries,
config sources and logging.
"""

from .config import IConfigSource
from .host import IHost
from .injector import IInjector
from .logger import ILogger

__all__ = [
    "IConfigSource",
    "IHost",
    "IInjector",
    "ILogger",
]
