"""
Contract settings schema (``seafood_config.schema``).

Frozen dataclasses for the tunable business limits of contract pricing.
The loader parses YAML into these types; ``get_active_settings()`` is the
only runtime entrypoint.  Every field has a default so a partial YAML
file, or none at all, yields a usable configuration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Self

_logger = logging.getLogger("seafood_kernel.config")

OUT_OF_RANGE_POLICIES = ("reject", "clamp")

ORDER_BY_FIELDS = ("created_at", "updated_at", "unique_id", "status")

SORT_ORDERS = ("ASC", "DESC")


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PricingSettings:
    """Read-side pricing behaviour."""

    # None keeps full Decimal precision on quotes
    price_quantum: Decimal | None = Decimal("0.01")
    out_of_range_policy: str = "reject"

    def __post_init__(self) -> None:
        if self.price_quantum is not None and self.price_quantum <= 0:
            raise ValueError(f"price_quantum must be positive, got {self.price_quantum}")
        if self.out_of_range_policy not in OUT_OF_RANGE_POLICIES:
            raise ValueError(
                f"out_of_range_policy must be one of {OUT_OF_RANGE_POLICIES}, "
                f"got '{self.out_of_range_policy}'"
            )


@dataclass(frozen=True)
class ValidationSettings:
    """Limits enforced by the contract validator."""

    max_size: Decimal = Decimal("1000")
    max_price: Decimal = Decimal("1000000")
    price_jump_warning_ratio: Decimal = Decimal("1.5")
    max_supplier_name_length: int = 255
    max_range_label_length: int = 50
    max_delivery_date_length: int = 50

    def __post_init__(self) -> None:
        if self.max_size <= 0:
            raise ValueError("max_size must be positive")
        if self.max_price <= 0:
            raise ValueError("max_price must be positive")
        if self.price_jump_warning_ratio <= 1:
            raise ValueError(
                f"price_jump_warning_ratio must be greater than 1, "
                f"got {self.price_jump_warning_ratio}"
            )
        for name in (
            "max_supplier_name_length",
            "max_range_label_length",
            "max_delivery_date_length",
        ):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1")


@dataclass(frozen=True)
class ListingSettings:
    """Defaults and bounds for contract list queries."""

    default_page: int = 1
    default_limit: int = 20
    max_limit: int = 100
    default_order_by: str = "created_at"
    default_order: str = "DESC"

    def __post_init__(self) -> None:
        if self.default_page < 1:
            raise ValueError("default_page must be at least 1")
        if not 1 <= self.default_limit <= self.max_limit:
            raise ValueError(
                f"default_limit must be between 1 and max_limit ({self.max_limit}), "
                f"got {self.default_limit}"
            )
        if self.default_order_by not in ORDER_BY_FIELDS:
            raise ValueError(
                f"default_order_by must be one of {ORDER_BY_FIELDS}, "
                f"got '{self.default_order_by}'"
            )
        if self.default_order not in SORT_ORDERS:
            raise ValueError(
                f"default_order must be one of {SORT_ORDERS}, got '{self.default_order}'"
            )


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ContractSettings:
    """
    Complete settings for the contract pricing engine.

    Override sections at instantiation:

        settings = ContractSettings(
            validation=ValidationSettings(price_jump_warning_ratio=Decimal("2")),
        )
    """

    name: str = "default"
    version: str = "1"
    pricing: PricingSettings = field(default_factory=PricingSettings)
    validation: ValidationSettings = field(default_factory=ValidationSettings)
    listing: ListingSettings = field(default_factory=ListingSettings)
    checksum: str = ""

    @classmethod
    def with_defaults(cls) -> Self:
        """Create settings with the built-in defaults."""
        _logger.info("contract_settings_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create settings from a plain dict (e.g. parsed YAML)."""
        from seafood_config.loader import parse_settings

        _logger.info(
            "contract_settings_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return parse_settings(data)
