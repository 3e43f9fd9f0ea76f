"""
Settings Loader (``seafood_config.loader``).

Responsibility
--------------
Loads a YAML settings file and parses it into the frozen
``seafood_config.schema`` dataclasses.  Runtime callers go through
``seafood_config.get_active_settings()`` instead of calling this module.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  No dependency on kernel,
engines, or modules.

Invariants enforced
-------------------
* Unknown keys raise ``ValueError``; a typo never silently falls back to
  a default.
* Decimal values are parsed through ``str`` so YAML floats keep their
  written precision.
* ``compute_checksum`` is deterministic for identical input.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid values  -> ``ValueError`` from parsing or schema validation.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from seafood_config.schema import (
    ContractSettings,
    ListingSettings,
    PricingSettings,
    ValidationSettings,
)

_DECIMAL_FIELDS = frozenset({
    "price_quantum",
    "max_size",
    "max_price",
    "price_jump_warning_ratio",
})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any, name: str) -> Decimal:
    """Parse a Decimal from a YAML scalar (str, int or float)."""
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc


def _section_kwargs(
    section: str, data: dict[str, Any] | None, allowed: tuple[str, ...],
) -> dict[str, Any]:
    data = data or {}
    if not isinstance(data, dict):
        raise ValueError(f"'{section}' must be a mapping, got {type(data).__name__}")
    unknown = sorted(set(data) - set(allowed))
    if unknown:
        raise ValueError(f"Unknown keys in '{section}': {', '.join(unknown)}")
    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        if key in _DECIMAL_FIELDS and value is not None:
            value = parse_decimal(value, f"{section}.{key}")
        kwargs[key] = value
    return kwargs


def parse_pricing(data: dict[str, Any] | None) -> PricingSettings:
    """Parse the ``pricing`` section."""
    return PricingSettings(**_section_kwargs(
        "pricing", data, ("price_quantum", "out_of_range_policy"),
    ))


def parse_validation(data: dict[str, Any] | None) -> ValidationSettings:
    """Parse the ``validation`` section."""
    return ValidationSettings(**_section_kwargs(
        "validation",
        data,
        (
            "max_size",
            "max_price",
            "price_jump_warning_ratio",
            "max_supplier_name_length",
            "max_range_label_length",
            "max_delivery_date_length",
        ),
    ))


def parse_listing(data: dict[str, Any] | None) -> ListingSettings:
    """Parse the ``listing`` section."""
    return ListingSettings(**_section_kwargs(
        "listing",
        data,
        ("default_page", "default_limit", "max_limit", "default_order_by", "default_order"),
    ))


def parse_settings(data: dict[str, Any], checksum: str | None = None) -> ContractSettings:
    """
    Parse a complete ``ContractSettings`` from a dict.

    Postconditions:
        - ``checksum`` on the result is the given value, or the checksum of
          ``data`` when none is given.
    """
    unknown = sorted(set(data) - {"name", "version", "pricing", "validation", "listing"})
    if unknown:
        raise ValueError(f"Unknown top-level settings keys: {', '.join(unknown)}")
    return ContractSettings(
        name=str(data.get("name", "default")),
        version=str(data.get("version", "1")),
        pricing=parse_pricing(data.get("pricing")),
        validation=parse_validation(data.get("validation")),
        listing=parse_listing(data.get("listing")),
        checksum=checksum if checksum is not None else compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
