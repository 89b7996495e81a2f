"""Corefile generation for the external resolver.

Brief:
  render_corefile() turns resolver settings plus the filter list into the
  Corefile text read by CoreDNS. Every directive is emitted by an explicit
  guarded step in a fixed order; a final pass collapses runs of blank lines
  left behind by empty fragments.

Inputs:
  - ResolverConfig, ordered FilterEntry list, user rule strings, and a
    callable mapping a filter id to its contents path.

Outputs:
  - str: Corefile text, byte-identical for identical inputs.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Iterable, List, Sequence

from .config.models import USER_FILTER_ID, FilterEntry, ResolverConfig
from .errors import RenderError

logger = logging.getLogger(__name__)

_BLANK_RUNS = re.compile(r"([\t ]*\n)+")


def user_rules_contents(user_rules: Iterable[str]) -> bytes:
    """Brief: Join user rules into filter contents, one rule per line."""

    return b"".join(rule.encode("utf-8") + b"\n" for rule in user_rules)


def build_user_filter(user_rules: Iterable[str]) -> FilterEntry:
    """Brief: Synthesize the always-enabled id 0 filter holding user rules.

    Inputs:
      - user_rules: Rule strings in configured order.

    Outputs:
      - FilterEntry: Derived entry; empty contents when there are no rules.
    """

    return FilterEntry(
        id=USER_FILTER_ID,
        enabled=True,
        contents=user_rules_contents(user_rules),
    )


def _filter_lines(
    resolver: ResolverConfig,
    filters: Sequence[FilterEntry],
    filter_path: Callable[[int], str],
) -> List[str]:
    lines = ["\tdnsfilter {"]
    if resolver.safebrowsing_enabled:
        lines.append("\t\tsafebrowsing")
    if resolver.parental_enabled:
        lines.append(f"\t\tparental {resolver.parental_sensitivity}")
    if resolver.safesearch_enabled:
        lines.append("\t\tsafesearch")
    if resolver.querylog_enabled:
        lines.append("\t\tquerylog")
    lines.append(f"\t\tblocked_ttl {resolver.blocked_response_ttl}")
    if resolver.filtering_enabled:
        for entry in filters:
            # Only filters with something to load may be referenced.
            if entry.enabled and entry.contents:
                lines.append(f'\t\tfilter {entry.id} "{filter_path(entry.id)}"')
    lines.append("\t}")
    return lines


def _expand(
    resolver: ResolverConfig,
    filters: Sequence[FilterEntry],
    filter_path: Callable[[int], str],
) -> str:
    lines = [f".:{resolver.port} {{"]
    if resolver.protection_enabled:
        lines.extend(_filter_lines(resolver, filters, filter_path))
    lines.append(f"\t{resolver.pprof}")
    if resolver.refuse_any:
        lines.append("\trefuseany")
    if resolver.ratelimit > 0:
        lines.append(f"\tratelimit {resolver.ratelimit}")
    lines.extend(["\thosts {", "\t\tfallthrough", "\t}"])
    if resolver.upstream_dns:
        upstreams = " ".join(resolver.upstream_dns)
        lines.append(
            f"\tupstream {upstreams} {{ bootstrap {resolver.bootstrap_dns} }}"
        )
    lines.append(f"\t{resolver.cache}")
    lines.append(f"\t{resolver.prometheus}")
    lines.append("}")
    return "\n".join(lines) + "\n"


def render_corefile(
    resolver: ResolverConfig,
    filters: Sequence[FilterEntry],
    user_rules: Sequence[str],
    filter_path: Callable[[int], str],
) -> str:
    """Brief: Render the Corefile for a consistent configuration snapshot.

    Inputs:
      - resolver: Resolver settings snapshot.
      - filters: Persisted filters in stored order.
      - user_rules: User rule strings; projected into filter id 0.
      - filter_path: Maps a filter id to the path of its contents file.

    Outputs:
      - str: Corefile text without blank lines.

    Raises:
      - RenderError: When expansion fails (indicates a defect, not bad input).

    Example:
      >>> text = render_corefile(ResolverConfig(protection_enabled=False),
      ...                        [], [], lambda i: f"/f/{i}.txt")
      >>> "dnsfilter" in text
      False
    """

    rendering = [build_user_filter(user_rules)]
    rendering.extend(filters)
    try:
        text = _expand(resolver, rendering, filter_path)
    except Exception as exc:
        logger.error("Couldn't generate DNS config: %s", exc)
        raise RenderError(f"failed to render Corefile: {exc}") from exc
    return _BLANK_RUNS.sub("\n", text)
