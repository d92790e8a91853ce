"""
Pydantic models for hibernia.

Capability descriptors, instances and handles, lifecycle reports, and the
settings sections.
"""

from .base import HiberniaBaseModel, ImmutableModel
from .capability import (
    CapabilityDescriptor,
    CapabilityInstance,
    CapabilityKind,
    CapabilityMetadata,
    CommandMetadata,
    ConfigSchemaMetadata,
    Dependency,
    EventPriority,
    ListenerMetadata,
    RegistrationHandle,
)
from .config import LoggingConfig, PluginConfigConfig, ScannerConfig
from .lifecycle import (
    CapabilityOutcome,
    LifecycleState,
    OutcomeStatus,
    RegistrationLedger,
    ShutdownReport,
    StartupReport,
)

__all__ = [
    "CapabilityDescriptor",
    "CapabilityInstance",
    "CapabilityKind",
    "CapabilityMetadata",
    "CapabilityOutcome",
    "CommandMetadata",
    "ConfigSchemaMetadata",
    "Dependency",
    "EventPriority",
    "HiberniaBaseModel",
    "ImmutableModel",
    "LifecycleState",
    "ListenerMetadata",
    "LoggingConfig",
    "OutcomeStatus",
    "PluginConfigConfig",
    "RegistrationHandle",
    "RegistrationLedger",
    "ScannerConfig",
    "ShutdownReport",
    "StartupReport",
]
