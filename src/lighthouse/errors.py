"""Exception types raised by the lighthouse configuration core.

Brief:
  Every failure surfaced by the store or the Corefile renderer derives from
  ConfigError so callers can catch the whole family at one seam (the CLI
  entrypoint does exactly that). The underlying cause is always chained via
  ``raise ... from exc``.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base class for configuration core failures."""


class LoadError(ConfigError):
    """The persisted YAML file exists but could not be read, parsed or upgraded."""


class PersistError(ConfigError):
    """Writing the YAML file, the user-rules file or the Corefile failed.

    The first write of a save is not rolled back when a later one fails, so
    callers should retry the whole save.
    """


class RenderError(ConfigError):
    """Corefile rendering failed; indicates a programming defect."""


class FilterExistsError(ConfigError, ValueError):
    """A filter with the same URL is already configured."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"filter already exists: {url}")
