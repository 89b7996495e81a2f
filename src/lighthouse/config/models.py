"""Typed configuration models for lighthouse.

Brief:
  Pydantic models describing the whole service configuration: management
  listener, the embedded resolver (CoreDNS) settings and the ordered filter
  list. Field declaration order is significant because the persisted YAML
  document mirrors it (see lighthouse.config.document).

Inputs:
  - Keyword arguments or mappings produced by yaml.safe_load().

Outputs:
  - Validated Configuration / ResolverConfig / FilterEntry instances.

Notes:
  - Fields marked ``exclude=True`` are runtime-only and never written to the
    YAML document.
  - The models carry no lock; synchronization lives in ConfigStore.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

CURRENT_SCHEMA_VERSION = 1
DATA_DIR = "data"
FILTER_DIR = "filters"
USER_FILTER_ID = 0

DEFAULT_UPSTREAM_DNS = ["tls://1.1.1.1", "tls://1.0.0.1"]


class FilterEntry(BaseModel):
    """Brief: One filter list source.

    Inputs:
      - enabled: Whether the filter takes part in Corefile rendering.
      - url: Source identifier; unique within a configuration.
      - name: Human readable label.
      - rules_count: Number of rules in the last loaded contents (runtime).
      - last_updated: When contents were last refreshed; omitted when unset.
      - id: Process-unique identifier; 0 is reserved for the user filter.
      - contents: Raw filter bytes (runtime, absent until fetched).

    Outputs:
      - FilterEntry instance.
    """

    enabled: bool = False
    url: str = ""
    name: str = ""
    rules_count: int = Field(default=0, ge=0, exclude=True)
    last_updated: Optional[datetime] = None
    id: int = Field(default=0, ge=0)
    contents: Optional[bytes] = Field(default=None, exclude=True)

    class Config:
        validate_assignment = True


class ResolverConfig(BaseModel):
    """Brief: Settings for the downstream resolver and its dnsfilter plugin.

    Inputs:
      - port: Resolver listening port.
      - protection_enabled .. refuse_any: Independent feature toggles.
      - parental_sensitivity: Parental control sensitivity level.
      - blocked_response_ttl: TTL in seconds for blocked answers.
      - ratelimit: Queries per second per client; 0 disables the directive.
      - bootstrap_dns: Plain DNS server used to resolve upstream hostnames.
      - upstream_dns: Ordered upstream resolver addresses.
      - pprof, cache, prometheus: Opaque Corefile fragments spliced verbatim
        (runtime only).
      - binary_file, core_file: Resolver binary and Corefile names relative
        to the base directory (runtime only).

    Outputs:
      - ResolverConfig instance.
    """

    port: int = Field(default=53, ge=0, le=65535)
    protection_enabled: bool = True
    filtering_enabled: bool = True
    safebrowsing_enabled: bool = False
    safesearch_enabled: bool = False
    parental_enabled: bool = False
    parental_sensitivity: int = Field(default=0, ge=0)
    blocked_response_ttl: int = Field(default=10, ge=0)
    querylog_enabled: bool = True
    ratelimit: int = Field(default=20, ge=0)
    refuse_any: bool = True
    pprof: str = Field(default="", exclude=True)
    cache: str = Field(default="cache", exclude=True)
    prometheus: str = Field(default="prometheus :9153", exclude=True)
    binary_file: str = Field(default="coredns", exclude=True)
    core_file: str = Field(default="Corefile", exclude=True)
    bootstrap_dns: str = "8.8.8.8:53"
    upstream_dns: List[str] = Field(
        default_factory=lambda: list(DEFAULT_UPSTREAM_DNS)
    )

    class Config:
        validate_assignment = True


RUNTIME_RESOLVER_FIELDS = ("pprof", "cache", "prometheus", "binary_file", "core_file")


def default_filters() -> List[FilterEntry]:
    """Brief: Built-in filter list used on a fresh install.

    Outputs:
      - list[FilterEntry]: New instances on every call.
    """

    return [
        FilterEntry(
            id=1,
            enabled=True,
            url="https://adguardteam.github.io/AdGuardSDNSFilter/Filters/filter.txt",
            name="AdGuard Simplified Domain Names filter",
        ),
        FilterEntry(
            id=2,
            enabled=False,
            url="https://adaway.org/hosts.txt",
            name="AdAway",
        ),
        FilterEntry(
            id=3,
            enabled=False,
            url="https://hosts-file.net/ad_servers.txt",
            name="hpHosts - Ad and Tracking servers only",
        ),
        FilterEntry(
            id=4,
            enabled=False,
            url="http://www.malwaredomainlist.com/hostslist/hosts.txt",
            name="MalwareDomainList.com Hosts List",
        ),
    ]


class Configuration(BaseModel):
    """Brief: Root aggregate holding every lighthouse setting.

    Inputs:
      - bind_host, bind_port: Management interface listener.
      - auth_name, auth_pass: Optional basic-auth credentials.
      - language: Two-letter ISO 639-1 code, or empty for autodetect.
      - coredns: Embedded ResolverConfig.
      - filters: Ordered filter list; order is the rendering order.
      - user_rules: Custom rules, one per entry.
      - schema_version: Document schema version; kept last in the YAML so it
        is less tempting to edit by hand.

    Outputs:
      - Configuration instance populated with working defaults.
    """

    bind_host: str = "127.0.0.1"
    bind_port: int = Field(default=3000, ge=0, le=65535)
    auth_name: str = ""
    auth_pass: str = ""
    language: str = Field(default="", pattern=r"^([a-z]{2})?$")
    coredns: ResolverConfig = Field(default_factory=ResolverConfig)
    filters: List[FilterEntry] = Field(default_factory=default_filters)
    user_rules: List[str] = Field(default_factory=list)
    schema_version: int = Field(default=CURRENT_SCHEMA_VERSION, ge=0)

    class Config:
        validate_assignment = True


def default_configuration() -> Configuration:
    """Brief: Fresh configuration that works with zero external input."""

    return Configuration()
