"""lighthouse: configuration core of a DNS-filtering service.

Holds the live configuration, persists it as YAML, and renders the Corefile
consumed by the external CoreDNS resolver.
"""

from .config.store import ConfigStore
from .corefile import render_corefile
from .errors import (
    ConfigError,
    FilterExistsError,
    LoadError,
    PersistError,
    RenderError,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "ConfigStore",
    "FilterExistsError",
    "LoadError",
    "PersistError",
    "RenderError",
    "render_corefile",
]
