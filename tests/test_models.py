"""Brief: Unit tests for lighthouse.config.models defaults and validation.

Inputs:
  - None

Outputs:
  - None
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from lighthouse.config.models import (
    CURRENT_SCHEMA_VERSION,
    Configuration,
    FilterEntry,
    ResolverConfig,
    default_configuration,
)


def test_default_configuration_is_functional() -> None:
    """Brief: Defaults cover every field needed to run without any input.

    Inputs:
      - None.

    Outputs:
      - None; asserts representative default values.
    """

    cfg = default_configuration()
    assert cfg.bind_host == "127.0.0.1"
    assert cfg.bind_port == 3000
    assert cfg.schema_version == CURRENT_SCHEMA_VERSION
    assert cfg.user_rules == []

    dns = cfg.coredns
    assert dns.port == 53
    assert dns.protection_enabled is True
    assert dns.filtering_enabled is True
    assert dns.safebrowsing_enabled is False
    assert dns.querylog_enabled is True
    assert dns.blocked_response_ttl == 10
    assert dns.ratelimit == 20
    assert dns.refuse_any is True
    assert dns.bootstrap_dns == "8.8.8.8:53"
    assert dns.upstream_dns == ["tls://1.1.1.1", "tls://1.0.0.1"]
    assert dns.cache == "cache"
    assert dns.prometheus == "prometheus :9153"
    assert dns.core_file == "Corefile"


def test_default_filters() -> None:
    """Brief: Four built-in filters with ids 1-4, only the first enabled."""

    cfg = default_configuration()
    assert [f.id for f in cfg.filters] == [1, 2, 3, 4]
    assert [f.enabled for f in cfg.filters] == [True, False, False, False]
    assert len({f.url for f in cfg.filters}) == 4
    assert all(f.contents is None for f in cfg.filters)


def test_defaults_are_independent() -> None:
    """Brief: Mutating one default configuration does not leak into another."""

    a = default_configuration()
    b = default_configuration()
    a.filters[0].enabled = False
    a.coredns.upstream_dns.append("tls://9.9.9.9")
    a.user_rules.append("||example.org^")

    assert b.filters[0].enabled is True
    assert b.coredns.upstream_dns == ["tls://1.1.1.1", "tls://1.0.0.1"]
    assert b.user_rules == []


def test_runtime_fields_not_dumped() -> None:
    """Brief: Runtime-only fields are excluded from model_dump().

    Inputs:
      - None.

    Outputs:
      - None; asserts excluded keys are absent.
    """

    data = default_configuration().model_dump()
    for key in ("pprof", "cache", "prometheus", "binary_file", "core_file"):
        assert key not in data["coredns"]
    assert "contents" not in data["filters"][0]
    assert "rules_count" not in data["filters"][0]


def test_validate_assignment_rejects_bad_values() -> None:
    """Brief: Assigning invalid values raises ValidationError."""

    resolver = ResolverConfig()
    with pytest.raises(ValidationError):
        resolver.ratelimit = -1
    with pytest.raises(ValidationError):
        resolver.port = 70000
    entry = FilterEntry()
    with pytest.raises(ValidationError):
        entry.id = -3


def test_language_code_shape() -> None:
    """Brief: language accepts empty or a two-letter lowercase code only."""

    assert Configuration(language="en").language == "en"
    assert Configuration(language="").language == ""
    with pytest.raises(ValidationError):
        Configuration(language="english")
