"""
seafood_config -- single public entrypoint for contract engine settings.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_active_settings()``.  No other component reads configuration
    files or environment variables directly.

Architecture position:
    Configuration -- sits above ``seafood_kernel`` and below
    ``seafood_modules``.  The kernel and the engines MUST NEVER import
    from ``seafood_config``; modules translate settings into engine
    arguments.

Failure modes:
    - ``FileNotFoundError`` -- the settings file does not exist.
    - ``ValueError`` -- unknown keys or invalid values.

Audit relevance:
    Every successful ``get_active_settings()`` call emits a
    ``SEAFOOD_CONFIG_TRACE`` log entry with the settings name, version
    and checksum, tying each quote back to the limits that governed it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from seafood_config.loader import compute_checksum, load_yaml_file, parse_settings
from seafood_config.schema import (
    ContractSettings,
    ListingSettings,
    PricingSettings,
    ValidationSettings,
)

_logger = logging.getLogger("seafood_kernel.config")

# Default settings file
DEFAULT_SETTINGS_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_settings(config_path: Path | None = None) -> ContractSettings:
    """The ONLY public settings entrypoint.

    Args:
        config_path: Override path to a YAML settings file.
            Defaults to seafood_config/sets/default.yaml.

    Returns:
        Frozen ``ContractSettings``.

    Raises:
        FileNotFoundError: If the settings file does not exist.
        ValueError: If the settings fail validation.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_SETTINGS_PATH
    data = load_yaml_file(path)
    settings = parse_settings(data, checksum=compute_checksum(data))

    _logger.info(
        "SEAFOOD_CONFIG_TRACE",
        extra={
            "trace_type": "SEAFOOD_CONFIG_TRACE",
            "config_name": settings.name,
            "config_version": settings.version,
            "checksum": settings.checksum,
            "source": str(path),
            "out_of_range_policy": settings.pricing.out_of_range_policy,
        },
    )
    return settings


__all__ = [
    "ContractSettings",
    "DEFAULT_SETTINGS_PATH",
    "ListingSettings",
    "PricingSettings",
    "ValidationSettings",
    "get_active_settings",
]
