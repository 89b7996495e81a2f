"""Forward migration of persisted configuration documents.

Brief:
  Documents carry a ``schema_version``. Older documents are upgraded in
  place one step at a time until they reach CURRENT_SCHEMA_VERSION; newer
  documents come from a newer release and are rejected rather than being
  silently treated as current.

  Upgrading happens in two phases. migrate_document() only rewrites the raw
  mapping, so a document that later fails validation leaves the data
  directory as it was. upgrade_files() performs the on-disk steps and is
  run once the upgraded document has been accepted.

Inputs:
  - Raw mapping returned by lighthouse.config.document.parse_document().

Outputs:
  - The same mapping, upgraded, plus the version it was read at.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, Tuple

from .models import CURRENT_SCHEMA_VERSION

logger = logging.getLogger(__name__)

# Combined filter file written by schema 0 installs, superseded by per-filter
# files under data/filters/.
LEGACY_FILTER_FILE = "dnsfilter.txt"


def _remove_legacy_filter_file(base_dir: str) -> None:
    """Brief: Schema 0 -> 1: remove the legacy combined filter file."""

    legacy_path = os.path.join(base_dir, LEGACY_FILTER_FILE)
    if os.path.exists(legacy_path):
        logger.info("Removing legacy filter file: %s", legacy_path)
        os.remove(legacy_path)


# Document rewrites keyed by the version they upgrade from. Schema 1 did not
# change the document layout.
_DOCUMENT_UPGRADES: Dict[int, Callable[[Dict[str, Any]], None]] = {}

# Filesystem steps keyed by the version they upgrade from.
_FILE_UPGRADES: Dict[int, Callable[[str], None]] = {
    0: _remove_legacy_filter_file,
}


def migrate_document(data: Dict[str, Any]) -> Tuple[Dict[str, Any], int]:
    """Brief: Upgrade data to CURRENT_SCHEMA_VERSION without touching disk.

    Inputs:
      - data: Raw configuration mapping (mutated in-place).

    Outputs:
      - (data, from_version): from_version is the version the document was
        written at; it is lower than CURRENT_SCHEMA_VERSION when upgraded.

    Raises:
      - ValueError: When the version is not an integer, is negative, or is
        newer than this release understands.
    """

    raw_version = data.get("schema_version", 0)
    if isinstance(raw_version, bool) or not isinstance(raw_version, int):
        raise ValueError(f"schema_version must be an integer, got {raw_version!r}")
    from_version = raw_version
    if from_version < 0:
        raise ValueError(f"schema_version must not be negative, got {from_version}")
    if from_version > CURRENT_SCHEMA_VERSION:
        raise ValueError(
            "schema_version %d is newer than supported version %d"
            % (from_version, CURRENT_SCHEMA_VERSION)
        )

    version = from_version
    while version < CURRENT_SCHEMA_VERSION:
        logger.info("Upgrading configuration schema %d -> %d", version, version + 1)
        step = _DOCUMENT_UPGRADES.get(version)
        if step is not None:
            step(data)
        version += 1

    data["schema_version"] = version
    return data, from_version


def upgrade_files(from_version: int, base_dir: str) -> None:
    """Brief: Run the on-disk upgrade steps from from_version to current.

    Inputs:
      - from_version: Version returned by migrate_document().
      - base_dir: Directory holding the configuration and data files.

    Outputs:
      - None.

    Raises:
      - OSError: When a step fails to touch the filesystem.
    """

    for version in range(from_version, CURRENT_SCHEMA_VERSION):
        step = _FILE_UPGRADES.get(version)
        if step is not None:
            step(base_dir)
