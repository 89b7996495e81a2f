"""Owner of the live Configuration.

Brief:
  ConfigStore holds the single mutable Configuration for a process, guards
  it with a reader/writer lock, and drives loading from and saving to disk:
    - load(): YAML -> migrate -> merge over current values -> dedupe ->
      seed the id allocator -> re-id entries whose id is 0 or repeated ->
      on-disk upgrade steps
    - save(): YAML document plus the user-rules filter file
    - write_corefile(): rendered Corefile for the external resolver

  Multi-field mutations (add_filter and friends) hold the exclusive lock for
  their whole duration. Snapshots are deep copies taken under the lock so
  file I/O runs after it has been released.

Inputs:
  - base_dir: Directory holding the YAML file, the Corefile and data/.

Outputs:
  - ConfigStore instance shared by every caller that needs configuration.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, List, Optional, Sequence

import yaml
from pydantic import ValidationError

from ..corefile import build_user_filter, render_corefile
from ..errors import FilterExistsError, LoadError, PersistError
from ..fileutil import safe_write_file
from ..rwlock import ReadWriteLock
from .dedupe import dedupe_filters
from .document import apply_document, dump_document, parse_document
from .filter_ids import FilterIdAllocator
from .migration import migrate_document, upgrade_files
from .models import (
    CURRENT_SCHEMA_VERSION,
    DATA_DIR,
    FILTER_DIR,
    RUNTIME_RESOLVER_FIELDS,
    USER_FILTER_ID,
    Configuration,
    FilterEntry,
    ResolverConfig,
    default_configuration,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "AdGuardHome.yaml"


def count_rules(contents: bytes) -> int:
    """Brief: Count rule lines, skipping blanks and ``!``/``#`` comments."""

    count = 0
    for raw in contents.splitlines():
        line = raw.strip()
        if not line or line.startswith((b"!", b"#")):
            continue
        count += 1
    return count


class ConfigStore:
    """Brief: Lock-guarded holder of the live Configuration.

    Inputs:
      - base_dir: Directory for the YAML file, Corefile and filter data.
      - config_filename: YAML file name relative to base_dir (or absolute).
      - config: Initial configuration; defaults when None.
      - allocator: Filter id allocator; one seeded from wall-clock time and
        the initial filters is created when None.

    Example:
      >>> store = ConfigStore("/tmp/lighthouse-doc")
      >>> store.get_filters()[0].id
      1
    """

    def __init__(
        self,
        base_dir: str,
        config_filename: str = DEFAULT_CONFIG_FILENAME,
        config: Optional[Configuration] = None,
        allocator: Optional[FilterIdAllocator] = None,
    ) -> None:
        self._base_dir = os.path.abspath(base_dir)
        self._config_filename = config_filename
        self._config = config if config is not None else default_configuration()
        self._lock = ReadWriteLock()
        self._ids = allocator if allocator is not None else FilterIdAllocator()
        self._ids.seed(self._config.filters)

    # ------------------------------------------------------------------ paths

    @property
    def base_dir(self) -> str:
        return self._base_dir

    @property
    def config_path(self) -> str:
        return os.path.join(self._base_dir, self._config_filename)

    @property
    def corefile_path(self) -> str:
        with self._lock.read_locked():
            core_file = self._config.coredns.core_file
        return os.path.join(self._base_dir, core_file)

    @property
    def allocator(self) -> FilterIdAllocator:
        return self._ids

    def filter_path(self, filter_id: int) -> str:
        """Brief: Location of the contents file for filter_id."""

        return os.path.join(self._base_dir, DATA_DIR, FILTER_DIR, f"{filter_id}.txt")

    # ---------------------------------------------------------------- locking

    @contextmanager
    def read_locked(self) -> Iterator[Configuration]:
        """Brief: Yield the live Configuration under the shared lock.

        Notes:
          - Callers must not mutate the yielded object.
        """

        with self._lock.read_locked():
            yield self._config

    @contextmanager
    def write_locked(self) -> Iterator[Configuration]:
        """Brief: Yield the live Configuration under the exclusive lock."""

        with self._lock.write_locked():
            yield self._config

    def snapshot(self) -> Configuration:
        """Brief: Deep, consistent copy of the configuration."""

        with self._lock.read_locked():
            return self._config.model_copy(deep=True)

    # ------------------------------------------------------------ load / save

    def load(self) -> bool:
        """Brief: Replace the live configuration with the persisted one.

        Outputs:
          - bool: False when no file exists (defaults kept), True otherwise.

        Raises:
          - LoadError: The file exists but cannot be read, parsed, upgraded
            or validated. In-memory state is left untouched.
        """

        path = self.config_path
        logger.info("Reading YAML file: %s", path)
        if not os.path.exists(path):
            logger.info("YAML file doesn't exist, skipping: %s", path)
            return False

        try:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as exc:
            logger.error("Couldn't read config file: %s", exc)
            raise LoadError(f"failed to read {path}: {exc}") from exc

        try:
            data = parse_document(text)
            data, from_version = migrate_document(data)
        except (yaml.YAMLError, ValueError) as exc:
            logger.error("Couldn't parse config file: %s", exc)
            raise LoadError(f"failed to parse {path}: {exc}") from exc

        with self._lock.write_locked():
            try:
                loaded = apply_document(self._config, data)
            except ValidationError as exc:
                logger.error("Invalid config file %s: %s", path, exc)
                raise LoadError(f"invalid configuration in {path}: {exc}") from exc

            loaded.filters = dedupe_filters(loaded.filters, self._log_duplicate)
            self._ids.seed(loaded.filters)
            seen_ids = {USER_FILTER_ID}
            for entry in loaded.filters:
                if entry.id in seen_ids:
                    entry.id = self._ids.next()
                    logger.info("Assigned id %d to filter %s", entry.id, entry.url)
                seen_ids.add(entry.id)

            try:
                upgrade_files(from_version, self._base_dir)
            except OSError as exc:
                logger.error("Couldn't upgrade data files: %s", exc)
                raise LoadError(f"failed to upgrade data files: {exc}") from exc
            self._config = loaded

        if from_version < CURRENT_SCHEMA_VERSION:
            logger.info("Configuration upgraded to schema %d", loaded.schema_version)
        return True

    @staticmethod
    def _log_duplicate(entry: FilterEntry) -> None:
        logger.warning("Dropping duplicate filter %s (%s)", entry.url, entry.name)

    def save(self) -> None:
        """Brief: Persist the YAML document and the user-rules filter file.

        Raises:
          - PersistError: When either write fails. The YAML write is not
            rolled back if the user-rules write fails; retry save() in full.
        """

        with self._lock.write_locked():
            snapshot = self._config.model_copy(deep=True)

        path = self.config_path
        logger.info("Writing YAML file: %s", path)
        try:
            text = dump_document(snapshot)
        except yaml.YAMLError as exc:
            logger.error("Couldn't generate YAML file: %s", exc)
            raise PersistError(f"failed to serialize configuration: {exc}") from exc
        try:
            safe_write_file(path, text)
        except OSError as exc:
            logger.error("Couldn't save YAML config: %s", exc)
            raise PersistError(f"failed to write {path}: {exc}") from exc

        user_filter = build_user_filter(snapshot.user_rules)
        user_path = self.filter_path(user_filter.id)
        try:
            safe_write_file(user_path, user_filter.contents or b"")
        except OSError as exc:
            logger.error("Couldn't save the user filter: %s", exc)
            raise PersistError(f"failed to write {user_path}: {exc}") from exc

    def render_corefile(self) -> str:
        """Brief: Render the Corefile from a consistent snapshot."""

        with self._lock.read_locked():
            resolver = self._config.coredns.model_copy(deep=True)
            filters = [f.model_copy(deep=True) for f in self._config.filters]
            user_rules = list(self._config.user_rules)
        return render_corefile(resolver, filters, user_rules, self.filter_path)

    def write_corefile(self) -> None:
        """Brief: Render and durably write the Corefile.

        Raises:
          - RenderError: On a rendering defect.
          - PersistError: When the write fails.
        """

        path = self.corefile_path
        logger.info("Writing DNS config: %s", path)
        text = self.render_corefile()
        try:
            safe_write_file(path, text)
        except OSError as exc:
            logger.error("Couldn't save DNS config: %s", exc)
            raise PersistError(f"failed to write {path}: {exc}") from exc

    def write_all(self) -> None:
        """Brief: save() followed by write_corefile()."""

        self.save()
        self.write_corefile()

    # --------------------------------------------------------------- filters

    def get_filters(self) -> List[FilterEntry]:
        """Brief: Deep copies of the configured filters in order."""

        with self._lock.read_locked():
            return [f.model_copy(deep=True) for f in self._config.filters]

    def _find(self, url: str) -> Optional[FilterEntry]:
        for entry in self._config.filters:
            if entry.url == url:
                return entry
        return None

    def add_filter(self, url: str, name: str = "", enabled: bool = True) -> FilterEntry:
        """Brief: Append a new filter with a fresh id.

        Inputs:
          - url: Filter source; must not already be configured.
          - name: Human readable label.
          - enabled: Initial enabled state.

        Outputs:
          - FilterEntry: Copy of the stored entry.

        Raises:
          - FilterExistsError: When url is already configured.
        """

        with self._lock.write_locked():
            if self._find(url) is not None:
                raise FilterExistsError(url)
            entry = FilterEntry(url=url, name=name, enabled=enabled, id=self._ids.next())
            self._config.filters.append(entry)
            logger.info("Added filter %d: %s", entry.id, url)
            return entry.model_copy(deep=True)

    def remove_filter(self, url: str) -> bool:
        """Brief: Remove the filter with url; False when it is not configured."""

        with self._lock.write_locked():
            entry = self._find(url)
            if entry is None:
                return False
            self._config.filters = [f for f in self._config.filters if f is not entry]
            logger.info("Removed filter %d: %s", entry.id, url)
            return True

    def set_filter_enabled(self, url: str, enabled: bool) -> bool:
        with self._lock.write_locked():
            entry = self._find(url)
            if entry is None:
                return False
            entry.enabled = enabled
            return True

    def set_filter_contents(
        self,
        url: str,
        contents: Optional[bytes],
        last_updated: Optional[datetime] = None,
    ) -> bool:
        """Brief: Attach downloaded contents to the filter with url.

        Inputs:
          - url: Filter to update.
          - contents: Raw filter bytes; None clears them.
          - last_updated: Refresh time; defaults to now (UTC) when contents
            are given.

        Outputs:
          - bool: False when no filter has url.
        """

        with self._lock.write_locked():
            entry = self._find(url)
            if entry is None:
                return False
            entry.contents = contents
            entry.rules_count = count_rules(contents) if contents else 0
            if contents is not None:
                entry.last_updated = last_updated or datetime.now(timezone.utc).replace(
                    microsecond=0
                )
            return True

    def load_filter_contents(self) -> int:
        """Brief: Read cached contents files for every configured filter.

        Outputs:
          - int: Number of filters whose contents were loaded. Missing files
            are skipped; unreadable ones are logged and skipped.
        """

        with self._lock.read_locked():
            targets = [(f.url, f.id) for f in self._config.filters]

        loaded = 0
        for url, filter_id in targets:
            path = self.filter_path(filter_id)
            if not os.path.exists(path):
                continue
            try:
                with open(path, "rb") as f:
                    contents = f.read()
            except OSError as exc:
                logger.warning("Couldn't read filter %d contents %s: %s", filter_id, path, exc)
                continue
            with self._lock.write_locked():
                entry = self._find(url)
                if entry is None or entry.id != filter_id:
                    continue
                entry.contents = contents
                entry.rules_count = count_rules(contents)
            loaded += 1
        return loaded

    # ------------------------------------------------------ rules / resolver

    def get_user_rules(self) -> List[str]:
        with self._lock.read_locked():
            return list(self._config.user_rules)

    def set_user_rules(self, rules: Sequence[str]) -> None:
        with self._lock.write_locked():
            self._config.user_rules = [str(r) for r in rules]

    def user_filter(self) -> FilterEntry:
        """Brief: Synthesized id 0 filter built from the current user rules."""

        with self._lock.read_locked():
            return build_user_filter(self._config.user_rules)

    def get_resolver(self) -> ResolverConfig:
        with self._lock.read_locked():
            return self._config.coredns.model_copy(deep=True)

    def update_resolver(self, **changes: Any) -> ResolverConfig:
        """Brief: Validate and apply resolver setting changes atomically.

        Inputs:
          - **changes: ResolverConfig field names mapped to new values.

        Outputs:
          - ResolverConfig: Copy of the updated settings.

        Raises:
          - ValueError: Unknown field names or invalid values; nothing is
            applied in either case.
        """

        unknown = sorted(set(changes) - set(ResolverConfig.model_fields))
        if unknown:
            raise ValueError("unknown resolver settings: %s" % ", ".join(unknown))

        with self._lock.write_locked():
            current = self._config.coredns
            data = current.model_dump(mode="python")
            data.update({k: getattr(current, k) for k in RUNTIME_RESOLVER_FIELDS})
            data.update(changes)
            # pydantic.ValidationError subclasses ValueError.
            updated = ResolverConfig.model_validate(data)
            self._config.coredns = updated
            return updated.model_copy(deep=True)
