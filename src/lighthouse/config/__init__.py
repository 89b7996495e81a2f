"""Configuration models, persistence and the live store."""

from .dedupe import dedupe_filters
from .filter_ids import FilterIdAllocator
from .models import (
    CURRENT_SCHEMA_VERSION,
    USER_FILTER_ID,
    Configuration,
    FilterEntry,
    ResolverConfig,
    default_configuration,
)

__all__ = [
    "CURRENT_SCHEMA_VERSION",
    "USER_FILTER_ID",
    "Configuration",
    "FilterEntry",
    "FilterIdAllocator",
    "ResolverConfig",
    "dedupe_filters",
    "default_configuration",
]
