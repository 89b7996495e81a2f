"""YAML document codec for the persisted configuration.

Brief:
  Converts between Configuration and the human-editable YAML file. Key order
  in the emitted document follows model field order, runtime-only fields are
  never written, and empty/unset optional values are omitted so that
  dump_document(apply_document(c, parse_document(dump_document(c)))) is
  byte-identical to dump_document(c).

Inputs:
  - Configuration instances or YAML text.

Outputs:
  - YAML text, raw mappings, or merged Configuration instances.
"""

from __future__ import annotations

from typing import Any, Dict

import yaml

from .models import RUNTIME_RESOLVER_FIELDS, Configuration

_RUNTIME_FILTER_FIELDS = ("rules_count", "contents")
_LIST_KEYS = ("filters", "user_rules")
_RESOLVER_LIST_KEYS = ("upstream_dns",)


def dump_document(cfg: Configuration) -> str:
    """Brief: Serialize the persisted subset of cfg to YAML text.

    Inputs:
      - cfg: Configuration to serialize (caller holds whatever lock applies).

    Outputs:
      - str: YAML document with keys in declaration order.
    """

    data = cfg.model_dump(mode="python", exclude_none=True)
    if not data.get("user_rules"):
        data.pop("user_rules", None)
    return yaml.safe_dump(
        data,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )


def parse_document(text: str) -> Dict[str, Any]:
    """Brief: Parse YAML text into a raw mapping.

    Inputs:
      - text: Document contents.

    Outputs:
      - dict: Parsed mapping; an empty document yields {}.

    Raises:
      - yaml.YAMLError: On malformed YAML.
      - ValueError: When the document root is not a mapping.
    """

    data = yaml.safe_load(text)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("Configuration root must be a mapping")
    return data


def _strip_runtime_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    """Brief: Drop keys for runtime-only fields so a hand edit cannot set them."""

    data = dict(data)
    coredns = data.get("coredns")
    if isinstance(coredns, dict):
        data["coredns"] = {
            k: v for k, v in coredns.items() if k not in RUNTIME_RESOLVER_FIELDS
        }
    filters = data.get("filters")
    if isinstance(filters, list):
        data["filters"] = [
            (
                {k: v for k, v in f.items() if k not in _RUNTIME_FILTER_FIELDS}
                if isinstance(f, dict)
                else f
            )
            for f in filters
        ]
    return data


def _empty_null_lists(data: Dict[str, Any]) -> Dict[str, Any]:
    """Brief: Read a list key written without a value (``user_rules:``) as []."""

    data = dict(data)
    for key in _LIST_KEYS:
        if key in data and data[key] is None:
            data[key] = []
    coredns = data.get("coredns")
    if isinstance(coredns, dict):
        coredns = dict(coredns)
        for key in _RESOLVER_LIST_KEYS:
            if key in coredns and coredns[key] is None:
                coredns[key] = []
        data["coredns"] = coredns
    return data


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Brief: Recursively overlay override onto base (mappings merge, lists replace)."""

    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _merge(current, value)
        else:
            merged[key] = value
    return merged


def apply_document(current: Configuration, data: Dict[str, Any]) -> Configuration:
    """Brief: Build a new Configuration from current values overlaid with data.

    Inputs:
      - current: Configuration providing values for keys absent from data and
        all runtime-only fields.
      - data: Raw mapping from parse_document() (already migrated).

    Outputs:
      - Configuration: New validated instance; current is not modified.

    Raises:
      - pydantic.ValidationError: When the merged values are invalid.
    """

    base = current.model_dump(mode="python")
    merged = _merge(base, _empty_null_lists(_strip_runtime_keys(data)))
    loaded = Configuration.model_validate(merged)
    loaded.coredns = loaded.coredns.model_copy(
        update={k: getattr(current.coredns, k) for k in RUNTIME_RESOLVER_FIELDS}
    )
    return loaded
