"""
Base Pydantic models for hibernia.

Provides common configuration and base classes for all hibernia models.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class HiberniaBaseModel(BaseModel):
    """Base model for all hibernia Pydantic models.

    Configuration:
        - strict: Strict type coercion (no implicit conversions)
        - validate_assignment: Validate on attribute assignment
        - extra: Reject unknown fields
        - arbitrary_types_allowed: Descriptors reference plugin classes and objects
        - revalidate_instances: Trust model instances (performance)
    """

    model_config = ConfigDict(
        strict=True,
        validate_assignment=True,
        extra="forbid",
        populate_by_name=True,
        arbitrary_types_allowed=True,
        revalidate_instances="never",
    )


class ImmutableModel(HiberniaBaseModel):
    """Immutable base model for records that should not change after creation."""

    model_config = ConfigDict(
        frozen=True,
        strict=True,
        extra="forbid",
        populate_by_name=True,
        arbitrary_types_allowed=True,
        revalidate_instances="never",
    )
