"""Load-time removal of duplicate filter sources."""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Set

from .models import FilterEntry


def dedupe_filters(
    entries: Iterable[FilterEntry],
    on_duplicate: Optional[Callable[[FilterEntry], None]] = None,
) -> List[FilterEntry]:
    """Brief: Drop later entries whose URL was already seen.

    Inputs:
      - entries: Filter entries in configured order.
      - on_duplicate: Optional callback invoked with every dropped entry.

    Outputs:
      - list[FilterEntry]: One entry per distinct URL, in order of first
        occurrence. Duplicates are not an error.

    Example:
      >>> urls = [f.url for f in dedupe_filters(
      ...     [FilterEntry(url=u) for u in "ABACB"])]
      >>> urls
      ['A', 'B', 'C']
    """

    seen: Set[str] = set()
    kept: List[FilterEntry] = []
    for entry in entries:
        if entry.url in seen:
            if on_duplicate is not None:
                on_duplicate(entry)
            continue
        seen.add(entry.url)
        kept.append(entry)
    return kept
