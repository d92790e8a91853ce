"""
Core of hibernia's discovery-and-registration lifecycle.

This module provides:
- Capability markers and the scanner that reads them
- ServiceContainer: injection container using dependency-injector
- Dependency resolver, registrar and lifecycle controller
- Plugin bootstrap from settings
- Custom exception hierarchy
"""

from .bootstrap import bootstrap, create_config_source, create_context, unit_sources
from .container import ServiceContainer
from .discovery import (
    CodeUnit,
    CodeUnitSource,
    CompositeUnitSource,
    EntryPointUnitSource,
    ModuleUnitSource,
    ObjectUnitSource,
    PackageUnitSource,
)
from .exceptions import (
    BindingConstructionError,
    BindingError,
    CommandPermissionError,
    ConfigFileError,
    ConfigValidationError,
    CyclicDependencyError,
    HiberniaConfigError,
    HiberniaException,
    HiberniaLifecycleError,
    HostError,
    HostRejectedError,
    LifecycleStateError,
    RegistrationError,
    ResolutionError,
    ScanError,
    UnboundDependencyError,
    UnknownCommandError,
    UnregistrationWarning,
)
from .lifecycle import LifecycleController, PluginContext
from .markers import command, config_schema, listener
from .registrar import Registrar
from .resolver import DependencyResolver, ResolutionResult
from .scanner import Scanner, ScanResult
from .settings import HiberniaSettings, find_config_file, load_settings

__all__ = [
    "BindingConstructionError",
    "BindingError",
    "CodeUnit",
    "CodeUnitSource",
    "CommandPermissionError",
    "CompositeUnitSource",
    "ConfigFileError",
    "ConfigValidationError",
    "CyclicDependencyError",
    "DependencyResolver",
    "EntryPointUnitSource",
    "HiberniaConfigError",
    "HiberniaException",
    "HiberniaLifecycleError",
    "HiberniaSettings",
    "HostError",
    "HostRejectedError",
    "LifecycleController",
    "LifecycleStateError",
    "ModuleUnitSource",
    "ObjectUnitSource",
    "PackageUnitSource",
    "PluginContext",
    "Registrar",
    "RegistrationError",
    "ResolutionError",
    "ResolutionResult",
    "ScanError",
    "ScanResult",
    "Scanner",
    "ServiceContainer",
    "UnboundDependencyError",
    "UnknownCommandError",
    "UnregistrationWarning",
    "bootstrap",
    "command",
    "config_schema",
    "create_config_source",
    "create_context",
    "find_config_file",
    "listener",
    "load_settings",
    "unit_sources",
]
