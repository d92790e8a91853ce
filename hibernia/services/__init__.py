"""
Services for hibernia plugins.

Default implementations of the collaborator interfaces: the stdlib-backed
logger and the config sources served to config schemas.
"""

from .config_source import MappingConfigSource, TomlConfigSource
from .logging import HiberniaLogger, NullLogger

__all__ = [
    "HiberniaLogger",
    "MappingConfigSource",
    "NullLogger",
    "TomlConfigSource",
]
