"""
seafood_engines.penalties -- Size penalty rules applied on top of a base price.

Responsibility:
    Hold a contract's size penalty rules and apply every matching rule to a
    base price.  Which sizes a rule covers is decided by a caller-supplied
    classifier; the range label itself is opaque to this engine.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import seafood_kernel (exceptions, domain values, logging).

Invariants enforced:
    - All matching rules apply cumulatively (sum of deltas).
    - Rp/s and Rp/sz rules add ``amount`` directly.
    - Rp/kg rules add ``amount * weight_factor(size)``.
    - The adjusted price is floored at zero.

Failure modes:
    - ConversionFactorRequiredError when an Rp/kg rule matches and no
      weight factor was supplied.

Usage:
    rules = PenaltyRuleSet.from_document(contract_doc["size_penalties"])
    price = rules.apply_penalties(
        Decimal("135000"), Decimal("25"), classifier=band_label_classifier,
    )
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Self

from seafood_kernel.domain.values import PenaltyRule, PenaltyUnit, to_decimal
from seafood_kernel.exceptions import ConversionFactorRequiredError
from seafood_kernel.logging_config import get_logger
from seafood_engines.tracer import traced_engine

logger = get_logger("engines.penalties")

SizeRangeClassifier = Callable[[Decimal, str], bool]
"""Decides whether ``size`` falls into the band named by ``label``."""

WeightFactor = Callable[[Decimal], Decimal]
"""Converts a size into the weight multiplier for Rp/kg penalties."""


@dataclass(frozen=True)
class AppliedPenalty:
    """One matching rule and the amount it contributed."""

    rule: PenaltyRule
    delta: Decimal


@dataclass(frozen=True)
class PenaltyBreakdown:
    """Itemised penalty application for one size."""

    size: Decimal
    base_price: Decimal
    applied: tuple[AppliedPenalty, ...]
    total_delta: Decimal
    adjusted_price: Decimal

    @property
    def floored(self) -> bool:
        """True when the raw sum went below zero and was clamped."""
        return self.base_price + self.total_delta < Decimal("0")


@dataclass(frozen=True)
class PenaltyRuleSet:
    """
    Ordered collection of size penalty rules.

    Contract:
        Pure and deterministic given the same classifier and weight factor.
    Non-goals:
        - Does not interpret range labels.
        - Does not convert currency.
    """

    rules: tuple[PenaltyRule, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "rules", tuple(self.rules))

    @classmethod
    def from_document(cls, document: Iterable[dict[str, Any]]) -> Self:
        return cls(rules=tuple(PenaltyRule.from_dict(d) for d in document))

    def to_document(self) -> list[dict[str, str]]:
        return [r.to_dict() for r in self.rules]

    def __len__(self) -> int:
        return len(self.rules)

    def matching_rules(
        self, size: Decimal, classifier: SizeRangeClassifier,
    ) -> tuple[PenaltyRule, ...]:
        return tuple(r for r in self.rules if classifier(size, r.range_label))

    def penalty_breakdown(
        self,
        base_price: Any,
        size: Any,
        *,
        classifier: SizeRangeClassifier,
        weight_factor: WeightFactor | None = None,
    ) -> PenaltyBreakdown:
        """Apply every matching rule and report each contribution."""
        base_price = to_decimal(base_price, "base_price")
        size = to_decimal(size, "size")

        applied: list[AppliedPenalty] = []
        for rule in self.matching_rules(size, classifier):
            applied.append(AppliedPenalty(rule=rule, delta=self._delta(rule, size, weight_factor)))

        total = sum((a.delta for a in applied), Decimal("0"))
        adjusted = max(base_price + total, Decimal("0"))

        logger.debug("penalties_applied", extra={
            "size": str(size),
            "base_price": str(base_price),
            "matched": len(applied),
            "total_delta": str(total),
            "adjusted_price": str(adjusted),
        })
        return PenaltyBreakdown(
            size=size,
            base_price=base_price,
            applied=tuple(applied),
            total_delta=total,
            adjusted_price=adjusted,
        )

    @traced_engine("penalties", "1.0", fingerprint_fields=("base_price", "size", "self"))
    def apply_penalties(
        self,
        base_price: Any,
        size: Any,
        *,
        classifier: SizeRangeClassifier,
        weight_factor: WeightFactor | None = None,
    ) -> Decimal:
        """Return ``max(0, base_price + sum(matching deltas))``."""
        return self.penalty_breakdown(
            base_price, size, classifier=classifier, weight_factor=weight_factor,
        ).adjusted_price

    @staticmethod
    def _delta(
        rule: PenaltyRule, size: Decimal, weight_factor: WeightFactor | None,
    ) -> Decimal:
        if rule.unit is PenaltyUnit.RP_PER_KG:
            if weight_factor is None:
                raise ConversionFactorRequiredError(size=size, range_label=rule.range_label)
            return rule.amount * to_decimal(weight_factor(size), "weight_factor")
        # Rp/s and Rp/sz are flat per-unit surcharges
        return rule.amount
