"""
seafood_engines.pricing -- Read-side price quotes for a contract.

Responsibility:
    Combine a contract's price table and penalty rules into a quote for
    a requested size and quantity:
        unit_price  = apply_penalties(resolve_price(size), size)
        total_price = unit_price * quantity

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import seafood_kernel and sibling engines.

Invariants enforced:
    - quantity must be > 0.
    - Out-of-range sizes propagate OutOfRangeError unchanged.
    - When ``price_quantum`` is set, unit and total prices are quantized
      with ROUND_HALF_UP; otherwise full Decimal precision is kept.

Failure modes:
    - InvalidQuantityError for zero or negative quantity.
    - OutOfRangeError for sizes outside the contract's price points.
    - ConversionFactorRequiredError for Rp/kg rules without a factor.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from seafood_kernel.domain.values import Contract, to_decimal
from seafood_kernel.exceptions import InvalidQuantityError
from seafood_kernel.logging_config import get_logger
from seafood_engines.penalties import (
    PenaltyBreakdown,
    PenaltyRuleSet,
    SizeRangeClassifier,
    WeightFactor,
)
from seafood_engines.price_table import (
    OutOfRangePolicy,
    PriceResolution,
    PriceTable,
    ResolutionMethod,
)
from seafood_engines.tracer import traced_engine

logger = get_logger("engines.pricing")


@dataclass(frozen=True)
class Quote:
    """Effective price for a size and quantity under one contract."""

    contract_id: str
    size: Decimal
    quantity: Decimal
    base_price: Decimal
    penalty_total: Decimal
    unit_price: Decimal
    total_price: Decimal
    method: ResolutionMethod


@dataclass(frozen=True)
class ScheduleLine:
    """One row of a price schedule: resolution plus penalized unit price."""

    resolution: PriceResolution
    breakdown: PenaltyBreakdown
    unit_price: Decimal

    @property
    def size(self) -> Decimal:
        return self.resolution.size


class PricingResolver:
    """
    Answers price queries against contract values.

    Contract:
        Stateless apart from the injected classifier, weight factor and
        rounding quantum; safe to share across threads.
    """

    def __init__(
        self,
        classifier: SizeRangeClassifier,
        weight_factor: WeightFactor | None = None,
        price_quantum: Decimal | None = None,
    ):
        self._classifier = classifier
        self._weight_factor = weight_factor
        self._price_quantum = (
            to_decimal(price_quantum, "price_quantum") if price_quantum is not None else None
        )

    @staticmethod
    def price_table(contract: Contract) -> PriceTable:
        return PriceTable(points=contract.base_pricing)

    @staticmethod
    def penalty_rules(contract: Contract) -> PenaltyRuleSet:
        return PenaltyRuleSet(rules=contract.size_penalties)

    def _round(self, value: Decimal) -> Decimal:
        if self._price_quantum is None:
            return value
        return value.quantize(self._price_quantum, rounding=ROUND_HALF_UP)

    def _price(
        self, contract: Contract, resolution: PriceResolution,
    ) -> tuple[PenaltyBreakdown, Decimal]:
        breakdown = self.penalty_rules(contract).penalty_breakdown(
            resolution.price,
            resolution.size,
            classifier=self._classifier,
            weight_factor=self._weight_factor,
        )
        return breakdown, self._round(breakdown.adjusted_price)

    @traced_engine("pricing", "1.0", fingerprint_fields=(
        "contract.base_pricing", "contract.size_penalties", "size", "quantity",
    ))
    def quote(self, contract: Contract, size: Any, quantity: Any) -> Quote:
        """
        Quote ``quantity`` units of ``size`` under ``contract``.

        Raises:
            InvalidQuantityError: quantity <= 0.
            OutOfRangeError: size outside the contract's price points.
        """
        quantity = to_decimal(quantity, "quantity")
        if quantity <= Decimal("0"):
            raise InvalidQuantityError(quantity)

        resolution = self.price_table(contract).resolve(size)
        breakdown, unit_price = self._price(contract, resolution)
        total_price = self._round(unit_price * quantity)

        logger.info("price_resolved", extra={
            "contract_id": contract.id,
            "size": str(resolution.size),
            "method": resolution.method.value,
            "base_price": str(resolution.price),
            "unit_price": str(unit_price),
            "quantity": str(quantity),
            "total_price": str(total_price),
        })
        return Quote(
            contract_id=contract.id,
            size=resolution.size,
            quantity=quantity,
            base_price=resolution.price,
            penalty_total=breakdown.total_delta,
            unit_price=unit_price,
            total_price=total_price,
            method=resolution.method,
        )

    def price_schedule(
        self,
        contract: Contract,
        sizes: Iterable[Any],
        policy: OutOfRangePolicy = OutOfRangePolicy.REJECT,
    ) -> tuple[ScheduleLine, ...]:
        """Penalized unit prices for several sizes under one out-of-range policy."""
        table = self.price_table(contract)
        lines: list[ScheduleLine] = []
        for size in sizes:
            resolution = table.resolve_with_policy(size, policy)
            breakdown, unit_price = self._price(contract, resolution)
            lines.append(ScheduleLine(resolution=resolution, breakdown=breakdown, unit_price=unit_price))
        return tuple(lines)
